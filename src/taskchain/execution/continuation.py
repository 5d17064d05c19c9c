"""Continuation Engine — derive the next generation of task signatures.

Given a processed signature and its :class:`Outcome`, the engine builds the
continuations to publish:

- **Failure:** every ``on_error`` continuation gets the error as its first
  argument (tag ``error``, message only). ``immutable`` has no effect here.
- **Success, mutable:** every ``on_success`` continuation gets the result as
  its first argument, under the result's own type tag.
- **Success, immutable:** ``on_success`` continuations are published exactly
  as declared.

Derived signatures are new instances; the declared templates are never
modified, so finalizing the same signature twice yields two independent,
equal lists.

Example::

    engine = ContinuationEngine()
    for continuation in engine.finalize(signature, outcome):
        publisher.publish(continuation)
"""

from __future__ import annotations

from collections.abc import Iterable

from taskchain.core.errors import PublishError
from taskchain.core.logging import get_logger
from taskchain.core.protocols import Publisher
from taskchain.execution.args import encode_value, error_arg
from taskchain.execution.outcome import Outcome
from taskchain.execution.signature import TaskSignature

logger = get_logger(__name__)


class ContinuationEngine:
    """Builds and publishes success/error continuations. Holds no state."""

    def finalize(self, signature: TaskSignature, outcome: Outcome) -> list[TaskSignature]:
        """Continuations to publish for ``signature`` given its ``outcome``, in order.

        Raises:
            DecodeError: The result cannot be carried as a task argument and
                at least one success continuation would receive it
        """
        if not outcome.ok:
            if not signature.on_error:
                return []
            arg = error_arg(outcome.error)
            return [continuation.prepend_arg(arg) for continuation in signature.on_error]

        if signature.immutable or not signature.on_success:
            return [continuation.copy() for continuation in signature.on_success]

        return [continuation.prepend_arg(encode_value(outcome.result)) for continuation in signature.on_success]

    def publish(self, signatures: Iterable[TaskSignature], publisher: Publisher) -> int:
        """Hand each signature to ``publisher`` once, in order. Returns the count.

        Raises:
            PublishError: The publisher rejected a signature. Signatures after
                the rejected one are not published.
        """
        published = 0
        for signature in signatures:
            try:
                publisher.publish(signature)
            except PublishError:
                raise
            except Exception as exc:
                raise PublishError(
                    f"Failed to publish continuation {signature.name!r}: {exc}", cause=exc
                ).with_context(task_name=signature.name) from exc
            logger.info("continuation_published", continuation=signature.name, args=len(signature.args))
            published += 1
        return published


__all__ = ["ContinuationEngine"]
