"""
Boundary protocols between the worker core and the connection/registry layer.

The core never talks to a broker client or owns the process-wide handler
table directly. It consumes these structural contracts, so an AMQP
consumer, a Redis list, or the in-process :class:`InMemoryBroker` can all
drive the same :class:`Worker`.

Architecture:
    ::

        protocols.py
        ├── HandlerLookup   — read-only name → RegisteredHandler
        ├── Publisher       — publish-back of derived continuations
        ├── MessageHandler  — what a connection delivers envelopes to
        ├── OpenConnection  — an established consumer session
        └── Connection      — opens a consumer session

    Consumers:
        execution/invoker.py, execution/continuation.py,
        execution/worker.py, execution/broker.py

Guardrails:
    ❌ DON'T: Add broker topology (exchanges, routing keys) to these contracts
    ✅ DO: Keep topology inside the concrete connection implementation

Performance:
    - Protocol overhead: Zero at runtime (structural subtyping)
    - isinstance() checks: Enabled via @runtime_checkable

Tags:
    protocols, interfaces, broker, registry, taskchain
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from taskchain.execution.registry import RegisteredHandler
    from taskchain.execution.signature import TaskSignature


@runtime_checkable
class HandlerLookup(Protocol):
    """Read-only handler resolution. Populated and owned outside the core."""

    def lookup(self, name: str) -> RegisteredHandler | None: ...


@runtime_checkable
class Publisher(Protocol):
    """Publish-back interface for derived continuation signatures.

    Implementations raise :class:`~taskchain.core.errors.PublishError` when
    the broker rejects a message. The core never retries.
    """

    def publish(self, signature: TaskSignature) -> None: ...


@runtime_checkable
class MessageHandler(Protocol):
    """Receives one raw envelope per delivered message."""

    def on_message(self, raw: Any) -> None: ...


@runtime_checkable
class OpenConnection(Protocol):
    """An established consumer session."""

    def wait_for_messages(self, handler: MessageHandler) -> None:
        """Deliver inbound envelopes to ``handler.on_message`` until done."""
        ...

    def close(self) -> None: ...


@runtime_checkable
class Connection(Protocol):
    """Opens consumer sessions against a broker."""

    def open(self) -> OpenConnection: ...


__all__ = [
    "HandlerLookup",
    "Publisher",
    "MessageHandler",
    "OpenConnection",
    "Connection",
]
