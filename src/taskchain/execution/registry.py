"""Handler Registry — injectable name → handler lookup.

Manifesto:
The worker needs to resolve ``"add"`` to a callable and call it with
arguments whose shapes are only known when a message arrives. The
registry decouples registration (at import time or startup) from
resolution (at dispatch time). Registration wraps every callable in a
:class:`RegisteredHandler` adapter that records the accepted type tags
of each parameter, so the invoker checks arguments against plain tag
sets instead of introspecting the function on every call.

ARCHITECTURE
────────────
::

    HandlerRegistry
      ├── .register(name, handler)  ─ inspect annotations, store adapter
      ├── .lookup(name)             ─ adapter or None
      ├── .get(name)                ─ adapter or NotRegisteredError
      ├── .list_handlers()          ─ all registered names
      └── .has(name)                ─ existence check

    RegisteredHandler
      ├── .params                   ─ ParamSpec per positional parameter
      ├── .check(args)              ─ arity + tag check (ArgumentMismatchError)
      └── .call(values)             ─ invoke the wrapped callable

    register_task(name)             ─ decorator, global registry by default
    get_default_registry()          ─ module-level singleton
    reset_default_registry()        ─ clear for testing

Annotation → accepted tags
──────────────────────────
::

    int          → int
    float        → float, int
    str          → str, error
    bool         → bool
    list[...]    → list
    dict[...]    → dict
    None         → null
    A | B        → tags(A) ∪ tags(B)
    Any, object,
    unannotated  → anything

Any other annotation, keyword-only parameters, ``*args`` and ``**kwargs``
are rejected with :class:`HandlerRegistrationError` at registration.

BEST PRACTICES
──────────────
- Use ``register_task`` in production code; pass an explicit
  ``HandlerRegistry`` in tests.
- Populate the registry before starting workers. Lookups take no lock.

Tags:
    taskchain, execution, registry, handler-registry, lookup

Doc-Types:
    api-reference
"""

from __future__ import annotations

import functools
import inspect
import threading
import types
import typing
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from taskchain.core.errors import ArgumentMismatchError, HandlerRegistrationError, NotRegisteredError
from taskchain.execution.args import BOOL, DICT, ERROR, FLOAT, INT, LIST, NULL, STR, TaskArg, canonical_tag

_SIMPLE_TAGS: dict[Any, frozenset[str]] = {
    int: frozenset({INT}),
    float: frozenset({FLOAT, INT}),
    str: frozenset({STR, ERROR}),
    bool: frozenset({BOOL}),
    list: frozenset({LIST}),
    dict: frozenset({DICT}),
    type(None): frozenset({NULL}),
    None: frozenset({NULL}),
}


def accepted_tags(annotation: Any) -> frozenset[str] | None:
    """Tags a parameter annotated with ``annotation`` accepts (None = any).

    Raises:
        HandlerRegistrationError: The annotation has no tag mapping
    """
    if annotation is inspect.Parameter.empty or annotation is Any or annotation is object:
        return None
    if annotation in _SIMPLE_TAGS:
        return _SIMPLE_TAGS[annotation]

    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        tags: set[str] = set()
        for member in typing.get_args(annotation):
            member_tags = accepted_tags(member)
            if member_tags is None:
                return None
            tags |= member_tags
        return frozenset(tags)
    if origin in _SIMPLE_TAGS:
        return _SIMPLE_TAGS[origin]

    raise HandlerRegistrationError(f"Unsupported parameter annotation {annotation!r}")


def _resolve_hints(func: Callable[..., Any]) -> dict[str, Any]:
    """Evaluated annotations of a handler, looking through partials and callable instances."""
    target = func
    while isinstance(target, functools.partial):
        target = target.func
    if not inspect.isroutine(target) and not isinstance(target, type):
        target = type(target).__call__
    try:
        return typing.get_type_hints(target)
    except TypeError:
        return {}


@dataclass(frozen=True)
class ParamSpec:
    """Resolved type information for a single positional parameter."""

    name: str
    position: int
    accepts: frozenset[str] | None
    required: bool = True

    def accepts_tag(self, tag: str) -> bool:
        return self.accepts is None or canonical_tag(tag) in self.accepts

    @property
    def label(self) -> str:
        if self.accepts is None:
            return "any"
        return "|".join(sorted(self.accepts))


@dataclass(frozen=True)
class RegisteredHandler:
    """Adapter giving every registered callable the same calling convention."""

    name: str
    func: Callable[..., Any]
    params: tuple[ParamSpec, ...]
    description: str | None = None
    tags: dict[str, str] = field(default_factory=dict)

    @classmethod
    def wrap(
        cls,
        name: str,
        func: Callable[..., Any],
        description: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> RegisteredHandler:
        """Inspect ``func`` and build its adapter.

        Raises:
            HandlerRegistrationError: The callable cannot be introspected or has
                an unsupported parameter kind or annotation
        """
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError) as exc:
            raise HandlerRegistrationError(f"Cannot inspect handler {name!r}: {exc}", cause=exc) from exc
        try:
            hints = _resolve_hints(func)
        except NameError as exc:
            raise HandlerRegistrationError(f"Cannot resolve annotations of {name!r}: {exc}", cause=exc) from exc

        params: list[ParamSpec] = []
        for position, param in enumerate(signature.parameters.values()):
            if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
                raise HandlerRegistrationError(
                    f"Handler {name!r} parameter {param.name!r} must be positional"
                )
            try:
                accepts = accepted_tags(hints.get(param.name, param.annotation))
            except HandlerRegistrationError as exc:
                raise HandlerRegistrationError(
                    f"Handler {name!r} parameter {param.name!r}: {exc.message}"
                ) from exc
            params.append(
                ParamSpec(
                    name=param.name,
                    position=position,
                    accepts=accepts,
                    required=param.default is param.empty,
                )
            )

        return cls(name=name, func=func, params=tuple(params), description=description, tags=tags or {})

    @property
    def min_args(self) -> int:
        return sum(1 for p in self.params if p.required)

    @property
    def max_args(self) -> int:
        return len(self.params)

    def check(self, args: Sequence[TaskArg]) -> None:
        """Verify arity and argument tags before the call is attempted.

        Raises:
            ArgumentMismatchError: Wrong number of arguments, or a tag the
                parameter does not accept
        """
        count = len(args)
        if not self.min_args <= count <= self.max_args:
            expected = (
                str(self.max_args) if self.min_args == self.max_args else f"{self.min_args}-{self.max_args}"
            )
            raise ArgumentMismatchError(f"{self.name} expects {expected} argument(s), got {count}")
        for param, arg in zip(self.params, args):
            if not param.accepts_tag(arg.type):
                raise ArgumentMismatchError(
                    f"{self.name} argument {param.position} ({param.name}) expects {param.label}, got {arg.type}"
                )

    def call(self, values: Sequence[Any]) -> Any:
        return self.func(*values)


class HandlerRegistry:
    """Injectable handler registry.

    Can be passed to a Worker for:
    - Testing (isolated registries per test)
    - Plugins (handlers loaded from ``--import`` modules)

    Registration is serialized with a lock. Lookups are plain dict reads and
    are safe from any number of worker threads once startup has finished.

    Example:
        >>> registry = HandlerRegistry()
        >>>
        >>> @register_task("add", registry=registry)
        ... def add(a: int, b: int) -> int:
        ...     return a + b
        >>>
        >>> registry.get("add").call([2, 3])
        5
    """

    def __init__(self):
        self._handlers: dict[str, RegisteredHandler] = {}
        self._lock = threading.Lock()

    def register(
        self,
        name: str,
        handler: Callable[..., Any],
        description: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> RegisteredHandler:
        """Register a handler, replacing any previous one with the same name.

        Args:
            name: Handler name used by task signatures
            handler: Callable to execute
            description: Optional description for documentation
            tags: Optional tags for filtering/categorization

        Raises:
            HandlerRegistrationError: Empty name or unsupported handler signature
        """
        if not name:
            raise HandlerRegistrationError("handler name cannot be empty")
        entry = RegisteredHandler.wrap(name, handler, description=description, tags=tags)
        with self._lock:
            self._handlers[name] = entry
        return entry

    def lookup(self, name: str) -> RegisteredHandler | None:
        """Return the handler registered under ``name``, or None."""
        return self._handlers.get(name)

    def get(self, name: str) -> RegisteredHandler:
        """Get a handler.

        Raises:
            NotRegisteredError: If handler not found
        """
        entry = self._handlers.get(name)
        if entry is None:
            raise NotRegisteredError(name)
        return entry

    def has(self, name: str) -> bool:
        """Check if handler exists."""
        return name in self._handlers

    def list_handlers(self) -> list[str]:
        """Sorted names of all registered handlers."""
        with self._lock:
            return sorted(self._handlers)

    def list_with_metadata(self) -> list[dict[str, Any]]:
        """List handlers with their parameters and metadata.

        Useful for building documentation or the ``handlers`` CLI command.
        """
        with self._lock:
            entries = sorted(self._handlers.items())
        result = []
        for name, entry in entries:
            result.append(
                {
                    "name": name,
                    "params": [
                        {"name": p.name, "accepts": p.label, "required": p.required} for p in entry.params
                    ],
                    "description": entry.description,
                    "tags": dict(entry.tags),
                }
            )
        return result

    def unregister(self, name: str) -> bool:
        """Unregister a handler. Returns True if it was removed."""
        with self._lock:
            return self._handlers.pop(name, None) is not None

    def clear(self) -> None:
        """Clear all handlers (for testing)."""
        with self._lock:
            self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers


# === GLOBAL DEFAULT REGISTRY ===

_default_registry: HandlerRegistry | None = None
_default_lock = threading.Lock()


def get_default_registry() -> HandlerRegistry:
    """Get the global default registry.

    Creates it lazily on first access.
    """
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = HandlerRegistry()
        return _default_registry


def reset_default_registry() -> None:
    """Reset the global registry (for testing)."""
    global _default_registry
    with _default_lock:
        _default_registry = None


# === DECORATOR API ===


def register_task(
    name: str | None = None,
    registry: HandlerRegistry | None = None,
    description: str | None = None,
    tags: dict[str, str] | None = None,
):
    """Decorator to register a task handler.

    Args:
        name: Handler name (defaults to the function name)
        registry: Optional registry (uses global if None)
        description: Optional description (defaults to the docstring)
        tags: Optional tags

    Example:
        >>> @register_task("send_email")
        ... def send_email(to: str, subject: str) -> bool:
        ...     return True
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        target = registry if registry is not None else get_default_registry()
        target.register(
            name or func.__name__,
            func,
            description=description or inspect.getdoc(func),
            tags=tags,
        )
        return func

    return decorator


__all__ = [
    "ParamSpec",
    "RegisteredHandler",
    "HandlerRegistry",
    "accepted_tags",
    "get_default_registry",
    "reset_default_registry",
    "register_task",
]
