"""
taskchain - execution core of a distributed task-queue worker.

- taskchain.core: errors, logging, settings, boundary protocols
- taskchain.execution: typed arguments, task signatures, handler registry,
  dynamic invoker, continuation engine, worker
"""

__version__ = "0.1.0"

from taskchain.execution import (
    ContinuationEngine,
    DynamicInvoker,
    HandlerRegistry,
    InMemoryBroker,
    Outcome,
    TaskArg,
    TaskSignature,
    Worker,
    get_default_registry,
    register_task,
    task_signature,
)

__all__ = [
    "__version__",
    "ContinuationEngine",
    "DynamicInvoker",
    "HandlerRegistry",
    "InMemoryBroker",
    "Outcome",
    "TaskArg",
    "TaskSignature",
    "Worker",
    "get_default_registry",
    "register_task",
    "task_signature",
]
