"""In-memory broker for testing and development.

Holds encoded envelopes in a FIFO inside the current process. It plays both
roles a real broker client plays for a worker: it is the publish-back target
for continuations and the connection that delivers messages.

NOT for production (no durability, lost on exit, single process).

Delivery semantics: a message is removed from the queue before it is handed
to the worker, so a message whose processing raises is not redelivered
(at-most-once).
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Any

from taskchain.core.errors import PublishError
from taskchain.core.logging import get_logger
from taskchain.core.protocols import MessageHandler
from taskchain.execution.signature import TaskSignature, encode_signature

logger = get_logger(__name__)


class InMemoryBroker:
    """In-process broker: publisher, producer entry point and connection.

    Example:
        >>> broker = InMemoryBroker()
        >>> broker.send_task(task_signature("add", [2, 3]))
        >>> Worker(registry, publisher=broker).launch(broker)
        >>> broker.published  # continuations published while consuming
        []
    """

    def __init__(self, max_messages: int | None = None):
        """
        Args:
            max_messages: Stop each ``wait_for_messages`` call after this many deliveries.
                ``None`` drains the queue until it is empty.
        """
        self._queue: deque[bytes] = deque()
        self._lock = threading.Lock()
        self._closed = False
        self.max_messages = max_messages
        self.published: list[TaskSignature] = []
        self.delivered = 0

    # ── Producer / publish-back ─────────────────────────────────────────

    def send_task(self, signature: TaskSignature) -> None:
        """Enqueue a task signature as a producer would."""
        self._enqueue(encode_signature(signature))

    def send_raw(self, body: bytes | str) -> None:
        """Enqueue a raw envelope, valid or not."""
        self._enqueue(body.encode("utf-8") if isinstance(body, str) else body)

    def publish(self, signature: TaskSignature) -> None:
        """Publish a derived continuation back onto the queue.

        Raises:
            PublishError: The broker is closed, or the signature cannot be encoded
        """
        if self._closed:
            raise PublishError(f"Broker is closed, cannot publish {signature.name!r}")
        try:
            body = encode_signature(signature)
        except Exception as exc:
            raise PublishError(f"Cannot encode {signature.name!r}: {exc}", cause=exc) from exc
        self._enqueue(body)
        with self._lock:
            self.published.append(signature)

    def _enqueue(self, body: bytes) -> None:
        with self._lock:
            self._queue.append(body)

    # ── Connection ──────────────────────────────────────────────────────

    def open(self) -> InMemoryBroker:
        self._closed = False
        return self

    def wait_for_messages(self, handler: MessageHandler) -> None:
        """Deliver queued envelopes one at a time until empty or the limit is hit.

        ``max_messages`` applies to each call, so a broker can be launched again.
        """
        count = 0
        while self.max_messages is None or count < self.max_messages:
            body = self._pop()
            if body is None:
                return
            count += 1
            logger.debug("message_delivered", size=len(body), pending=len(self))
            handler.on_message(body)

    def close(self) -> None:
        self._closed = True

    def _pop(self) -> bytes | None:
        with self._lock:
            if not self._queue:
                return None
            self.delivered += 1
            return self._queue.popleft()

    # ── Introspection ───────────────────────────────────────────────────

    def pending(self) -> list[bytes]:
        """Snapshot of envelopes still queued."""
        with self._lock:
            return list(self._queue)

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def stats(self) -> dict[str, Any]:
        return {
            "pending": len(self),
            "delivered": self.delivered,
            "published": len(self.published),
        }


__all__ = ["InMemoryBroker"]
