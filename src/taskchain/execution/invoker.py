"""Dynamic Invoker — resolve a handler by name and call it with decoded args.

ARCHITECTURE
────────────
::

    invoke(name, args)
      1. registry.lookup(name)        ─ absent → NotRegisteredError   (raised)
      2. decode_args(args)            ─ bad arg → DecodeError          (raised)
      3. handler.check(args)          ─ mismatch → Outcome.failure(ArgumentMismatchError)
      4. handler.call(values)         ─ raises  → Outcome.failure(HandlerError)
      5.                              ─ returns → Outcome.success(result)

Raised errors are terminal for the message (the worker logs and drops it).
Failures returned inside the Outcome are data: they flow into the error
continuations. The invoker never retries.

Related modules:
    registry.py     — RegisteredHandler adapters with parameter tag sets
    continuation.py — consumes the Outcome
"""

from __future__ import annotations

from collections.abc import Sequence

from taskchain.core.errors import ArgumentMismatchError, HandlerError, NotRegisteredError, error_kind
from taskchain.core.logging import get_logger
from taskchain.core.protocols import HandlerLookup
from taskchain.execution.args import TaskArg, decode_args
from taskchain.execution.outcome import Outcome

logger = get_logger(__name__)


class DynamicInvoker:
    """Type-checked invocation of registered handlers.

    Example:
        >>> invoker = DynamicInvoker(registry)
        >>> invoker.invoke("add", [TaskArg("int", 2), TaskArg("int", 3)])
        Outcome.success(5)
    """

    def __init__(self, registry: HandlerLookup):
        self._registry = registry

    def invoke(self, name: str, args: Sequence[TaskArg]) -> Outcome:
        """Run handler ``name`` with ``args``.

        Raises:
            NotRegisteredError: No handler registered under ``name``
            DecodeError: An argument cannot be decoded as its declared type
        """
        handler = self._registry.lookup(name)
        if handler is None:
            raise NotRegisteredError(name)

        values = decode_args(args)

        try:
            handler.check(args)
        except ArgumentMismatchError as exc:
            logger.warning("task_argument_mismatch", task_name=name, error=exc.message)
            return Outcome.failure(exc.with_context(task_name=name))

        logger.info("task_started", task_name=name)
        try:
            result = handler.call(values)
        except Exception as exc:
            logger.warning("task_failed", task_name=name, error=str(exc), error_kind=error_kind(exc))
            return Outcome.failure(HandlerError(str(exc), cause=exc).with_context(task_name=name))

        logger.info("task_succeeded", task_name=name, result=result)
        return Outcome.success(result)


__all__ = ["DynamicInvoker"]
