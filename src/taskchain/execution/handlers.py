"""Built-in Example Handlers — reference task implementations.

WHY
───
New users and integration tests need concrete handlers to exercise the
dispatch and continuation path. These register into the global
:class:`~taskchain.execution.registry.HandlerRegistry` on import, so a
Worker can resolve them by name immediately.

ARCHITECTURE
────────────
::

    Handlers (auto-registered on import):
      add(a: int, b: int)           ─ a + b
      multiply(a: float, b: float)  ─ a * b
      concat(a: str, b: str)        ─ a + b
      echo(value)                   ─ return value unchanged
      fail(message: str)            ─ always raises (error-chain testing)
      log(value=None)               ─ log the value and return it (chain sink)

Usage::

    import taskchain.execution.handlers   # registers into global registry
    from taskchain.execution.worker import Worker

    # or, into an isolated registry
    register_builtin_handlers(HandlerRegistry())

Related modules:
    registry.py — HandlerRegistry these register into
    worker.py   — Worker that resolves handlers by name
"""

from __future__ import annotations

from typing import Any

from taskchain.core.logging import get_logger
from taskchain.execution.registry import HandlerRegistry, get_default_registry

logger = get_logger(__name__)


def add_handler(a: int, b: int) -> int:
    return a + b


def multiply_handler(a: float, b: float) -> float:
    return a * b


def concat_handler(a: str, b: str) -> str:
    return a + b


def echo_handler(value: Any) -> Any:
    return value


def fail_handler(message: str = "intentional test failure") -> None:
    """Fail — always raises, useful for testing error continuations."""
    raise RuntimeError(message)


def log_handler(value: Any = None) -> Any:
    """Log — a sink at the end of a chain."""
    logger.info("log_handler", value=value)
    return value


BUILTIN_HANDLERS: dict[str, tuple[Any, str]] = {
    "add": (add_handler, "Add two integers a + b."),
    "multiply": (multiply_handler, "Multiply two numbers a * b."),
    "concat": (concat_handler, "Concatenate two strings."),
    "echo": (echo_handler, "Return the value unchanged."),
    "fail": (fail_handler, "Always raises RuntimeError (testing)."),
    "log": (log_handler, "Log the received value and return it."),
}


def register_builtin_handlers(registry: HandlerRegistry | None = None) -> list[str]:
    """Register every built-in handler (global registry by default). Returns the names."""
    target = registry if registry is not None else get_default_registry()
    for name, (func, description) in BUILTIN_HANDLERS.items():
        target.register(name, func, description=description, tags={"builtin": "true"})
    return list(BUILTIN_HANDLERS)


register_builtin_handlers()
