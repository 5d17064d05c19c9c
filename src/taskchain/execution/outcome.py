"""Outcome of one handler invocation — a result or an error, never both."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from taskchain.core.errors import TaskChainError


@dataclass(frozen=True)
class Outcome:
    """Result of :meth:`DynamicInvoker.invoke`.

    Build with :meth:`success` or :meth:`failure`; exactly one of ``result``
    and ``error`` is meaningful.

    Example:
        >>> Outcome.success(5).ok
        True
        >>> Outcome.failure(HandlerError("disk full")).ok
        False
    """

    result: Any = None
    error: TaskChainError | None = None

    @classmethod
    def success(cls, result: Any) -> Outcome:
        return cls(result=result)

    @classmethod
    def failure(cls, error: TaskChainError) -> Outcome:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        if self.ok:
            return f"Outcome.success({self.result!r})"
        return f"Outcome.failure({self.error!r})"


__all__ = ["Outcome"]
