"""taskchain.core — errors, logging, settings and boundary protocols.

MODULE MAP
──────────
  errors.py     TaskChainError hierarchy (DecodeError, NotRegisteredError, ...)
  logging.py    structlog configuration, get_logger, LogContext
  settings.py   WorkerSettings (pydantic-settings, TASKCHAIN_ env prefix)
  protocols.py  HandlerLookup, Publisher, Connection, MessageHandler
"""

from taskchain.core.errors import (
    ArgumentMismatchError,
    ConfigError,
    DecodeError,
    ErrorCategory,
    ErrorContext,
    HandlerError,
    HandlerRegistrationError,
    NotRegisteredError,
    PublishError,
    TaskChainError,
    error_kind,
    is_retryable,
)
from taskchain.core.protocols import Connection, HandlerLookup, MessageHandler, OpenConnection, Publisher

__all__ = [
    "ArgumentMismatchError",
    "ConfigError",
    "DecodeError",
    "ErrorCategory",
    "ErrorContext",
    "HandlerError",
    "HandlerRegistrationError",
    "NotRegisteredError",
    "PublishError",
    "TaskChainError",
    "error_kind",
    "is_retryable",
    "Connection",
    "HandlerLookup",
    "MessageHandler",
    "OpenConnection",
    "Publisher",
]
