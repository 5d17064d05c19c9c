"""taskchain.execution — dispatch and continuation of task signatures.

ARCHITECTURE
────────────
::

    inbound envelope
      │  decode_signature
      ▼
    TaskSignature ── name, args, on_success, on_error, immutable
      │
      ▼
    DynamicInvoker ── HandlerRegistry lookup → arg decode → check → call
      │
      ▼
    Outcome (result | error)
      │
      ▼
    ContinuationEngine ── derive on_success / on_error signatures
      │
      ▼
    Publisher (InMemoryBroker or a real broker client)

MODULE MAP (recommended reading order)
──────────────────────────────────────
  1. args.py          ─ TaskArg, type tags, decode/encode
  2. signature.py     ─ TaskSignature + wire envelope
  3. outcome.py       ─ Outcome
  4. registry.py      ─ HandlerRegistry, RegisteredHandler adapters
  5. invoker.py       ─ DynamicInvoker
  6. continuation.py  ─ ContinuationEngine
  7. worker.py        ─ Worker (on_message, launch)
  8. broker.py        ─ InMemoryBroker
  9. handlers.py      ─ built-in handlers (import to register)
"""

from taskchain.execution.args import TaskArg, decode_arg, decode_args, encode_value, error_arg
from taskchain.execution.broker import InMemoryBroker
from taskchain.execution.continuation import ContinuationEngine
from taskchain.execution.invoker import DynamicInvoker
from taskchain.execution.outcome import Outcome
from taskchain.execution.registry import (
    HandlerRegistry,
    RegisteredHandler,
    get_default_registry,
    register_task,
    reset_default_registry,
)
from taskchain.execution.signature import TaskSignature, decode_signature, encode_signature, task_signature
from taskchain.execution.worker import Worker

__all__ = [
    "TaskArg",
    "decode_arg",
    "decode_args",
    "encode_value",
    "error_arg",
    "InMemoryBroker",
    "ContinuationEngine",
    "DynamicInvoker",
    "Outcome",
    "HandlerRegistry",
    "RegisteredHandler",
    "get_default_registry",
    "register_task",
    "reset_default_registry",
    "TaskSignature",
    "decode_signature",
    "encode_signature",
    "task_signature",
    "Worker",
]
