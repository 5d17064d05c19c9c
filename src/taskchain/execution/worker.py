"""Worker — decode → invoke → continue, once per inbound message.

The Worker is what a broker connection delivers envelopes to. For every
message it decodes a :class:`TaskSignature`, runs the named handler through
the :class:`DynamicInvoker`, derives continuations with the
:class:`ContinuationEngine`, and publishes them back.

Usage (programmatic)::

    from taskchain.execution.broker import InMemoryBroker
    from taskchain.execution.registry import get_default_registry
    from taskchain.execution.worker import Worker

    broker = InMemoryBroker()
    worker = Worker(registry=get_default_registry(), publisher=broker)
    worker.launch(broker)

Failure handling:
    - Malformed envelope / argument → logged ``task_dropped``, no continuation
    - Unknown handler                → logged ``task_dropped``, no continuation
    - Argument mismatch / handler error → error continuations fire
    - Publish failure                → ``PublishError`` raised to the caller

Thread-safety:
    A Worker keeps no per-message state. ``on_message`` may be called from
    several threads at once; the only shared object is the registry, which
    is only read.
"""

from __future__ import annotations

from typing import Any

from taskchain.core.errors import DecodeError, NotRegisteredError
from taskchain.core.logging import LogContext, get_logger
from taskchain.core.protocols import Connection, HandlerLookup, Publisher
from taskchain.core.settings import WorkerSettings, get_settings
from taskchain.execution.continuation import ContinuationEngine
from taskchain.execution.invoker import DynamicInvoker
from taskchain.execution.signature import TaskSignature, decode_signature

logger = get_logger(__name__)


class Worker:
    """Processes task envelopes delivered by a broker connection.

    Args:
        registry: Handler lookup (usually a :class:`HandlerRegistry`)
        publisher: Publish-back interface for derived continuations
        consumer_tag: Identifier bound into every log line. Defaults to the
            configured ``consumer_tag``.
    """

    def __init__(
        self,
        registry: HandlerLookup,
        publisher: Publisher,
        consumer_tag: str | None = None,
    ):
        self._invoker = DynamicInvoker(registry)
        self._engine = ContinuationEngine()
        self._publisher = publisher
        self.consumer_tag = consumer_tag or get_settings().consumer_tag

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def launch(self, connection: Connection, settings: WorkerSettings | None = None) -> None:
        """Open ``connection`` and consume until it stops delivering.

        The connection is closed even when consumption raises.
        """
        settings = settings or get_settings()
        logger.info(
            "worker_launching",
            consumer_tag=self.consumer_tag,
            broker_url=settings.masked_broker_url(),
            exchange=settings.exchange,
            exchange_type=settings.exchange_type,
            default_queue=settings.default_queue,
            binding_key=settings.binding_key,
        )

        session = connection.open()
        try:
            session.wait_for_messages(self)
        finally:
            session.close()
            logger.info("worker_stopped", consumer_tag=self.consumer_tag)

    # ------------------------------------------------------------------ #
    # Message processing
    # ------------------------------------------------------------------ #

    def on_message(self, raw: Any) -> None:
        """Handle one delivered envelope.

        Raises:
            PublishError: A continuation could not be published
        """
        try:
            signature = decode_signature(raw)
        except DecodeError as exc:
            logger.warning("task_dropped", reason="decode", consumer_tag=self.consumer_tag, error=exc.message)
            return

        with LogContext(task_name=signature.name, consumer_tag=self.consumer_tag):
            self.process(signature)

    def process(self, signature: TaskSignature) -> int:
        """Invoke ``signature`` and publish its continuations. Returns the publish count."""
        try:
            outcome = self._invoker.invoke(signature.name, signature.args)
        except NotRegisteredError as exc:
            logger.warning("task_dropped", reason="not_registered", task_name=signature.name, error=exc.message)
            return 0
        except DecodeError as exc:
            logger.warning("task_dropped", reason="decode", task_name=signature.name, error=exc.message)
            return 0

        try:
            continuations = self._engine.finalize(signature, outcome)
        except DecodeError as exc:
            logger.error("task_dropped", reason="unencodable_result", task_name=signature.name, error=exc.message)
            return 0

        return self._engine.publish(continuations, self._publisher)


__all__ = ["Worker"]
