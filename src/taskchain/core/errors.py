"""
Structured error types for taskchain.

Every failure the worker can observe is represented by a typed error that
carries a category, a retry hint, and structured context. The worker uses
the type to decide what happens to a message:

- **Terminal for the message** (logged, dropped): ``DecodeError``,
  ``NotRegisteredError``
- **Data for the chain** (routed to error continuations):
  ``ArgumentMismatchError``, ``HandlerError``
- **Surfaced to the caller**: ``PublishError``

Manifesto:
    - **Typed Error Hierarchy:** One class per failure mode the worker
      distinguishes, rooted at ``TaskChainError``
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry the task name and consumer tag
    - **Error Chaining:** The original exception is kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     TaskChainError                           │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  DecodeError          NotRegisteredError    PublishError     │
        │  (PARSE)              (DISPATCH)            (BROKER, retry)  │
        │                                                              │
        │  ArgumentMismatchError   HandlerError                        │
        │  (VALIDATION)            (HANDLER)                           │
        │                                                              │
        │  ConfigError                                                 │
        │  (CONFIG)                                                    │
        │       │                                                      │
        │  HandlerRegistrationError                                    │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = PublishError("broker rejected message")
    >>> error.retryable
    True
    >>> error.with_context(task_name="log").context.task_name
    'log'

Tags:
    error-handling, exception-hierarchy, retry-logic, taskchain

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and log routing.

    Attributes:
        PARSE: Malformed envelope or argument
        DISPATCH: Handler resolution failures
        VALIDATION: Arguments do not match the handler's parameters
        HANDLER: The handler itself failed
        BROKER: Publishing back to the broker failed
        CONFIG: Invalid settings or handler registration
        INTERNAL: Bugs, unexpected state
    """

    PARSE = "PARSE"
    DISPATCH = "DISPATCH"
    VALIDATION = "VALIDATION"
    HANDLER = "HANDLER"
    BROKER = "BROKER"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error for logging.

    Examples:
        >>> ctx = ErrorContext(task_name="add", consumer_tag="worker-1")
        >>> ctx.to_dict()
        {'task_name': 'add', 'consumer_tag': 'worker-1'}

    Attributes:
        task_name: Name of the task signature being processed
        consumer_tag: Tag of the worker that observed the error
        metadata: Additional key-value pairs
    """

    task_name: str | None = None
    consumer_tag: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("task_name", "consumer_tag"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TaskChainError(Exception):
    """
    Base exception for all taskchain errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    callers rarely need to pass them explicitly.

    Args:
        message: Human-readable error message
        category: Overrides the class default category
        retryable: Overrides the class default retry flag
        context: Structured metadata
        cause: Underlying exception
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = self.default_retryable if retryable is None else retryable
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TaskChainError:
        """Add context fields, unknown keys go to ``metadata``. Returns self."""
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context = self.context.to_dict()
        if context:
            result["context"] = context
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


# =============================================================================
# MESSAGE-TERMINAL ERRORS (logged and dropped)
# =============================================================================


class DecodeError(TaskChainError):
    """Malformed envelope, or an argument whose value does not fit its type tag."""

    default_category = ErrorCategory.PARSE


class NotRegisteredError(TaskChainError):
    """No handler is registered under the requested name."""

    default_category = ErrorCategory.DISPATCH

    def __init__(self, name: str, **kwargs: Any):
        super().__init__(f"Task with a name '{name}' not registered", **kwargs)
        self.name = name


# =============================================================================
# INVOCATION ERRORS (routed to error continuations)
# =============================================================================


class ArgumentMismatchError(TaskChainError):
    """Decoded arguments do not match the handler's declared parameters."""

    default_category = ErrorCategory.VALIDATION


class HandlerError(TaskChainError):
    """The invoked handler raised. The handler's exception is the ``cause``."""

    default_category = ErrorCategory.HANDLER


# =============================================================================
# BROKER ERRORS (surfaced to the caller)
# =============================================================================


class PublishError(TaskChainError):
    """The publish-back interface rejected a continuation."""

    default_category = ErrorCategory.BROKER
    default_retryable = True


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TaskChainError):
    """Invalid worker configuration."""

    default_category = ErrorCategory.CONFIG


class HandlerRegistrationError(ConfigError):
    """A handler cannot be registered (unsupported signature or annotation)."""


# =============================================================================
# HELPERS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check whether an error is marked retryable. Plain exceptions are not."""
    if isinstance(error, TaskChainError):
        return error.retryable
    return False


def error_kind(error: BaseException) -> str:
    """Short error-kind label used in logs, e.g. ``"HandlerError"``."""
    return type(error).__name__


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TaskChainError",
    "DecodeError",
    "NotRegisteredError",
    "ArgumentMismatchError",
    "HandlerError",
    "PublishError",
    "ConfigError",
    "HandlerRegistrationError",
    "is_retryable",
    "error_kind",
]
