"""Typed arguments — the (type-tag, value) pairs that cross the wire.

A handler argument travels as ``{"Type": "int", "Value": 5}``. Before a
handler is called every argument is decoded back into a native Python value
that matches its tag; a value that does not fit its tag is a
:class:`~taskchain.core.errors.DecodeError`, never a coercion.

ARCHITECTURE
────────────
::

    TaskArg(type, value)
      ├── decode_arg(arg)      ─ tag → native value      (DecodeError)
      ├── decode_args(args)    ─ fail-fast over a signature's args
      ├── encode_value(value)  ─ native value → TaskArg  (result propagation)
      └── error_arg(error)     ─ error → TaskArg("error", message)

    Canonical tags: int, float, str, bool, list, dict, null, error
    Aliases (decode only): string, int32, int64, float32, float64

Only the error message crosses into an error continuation; the exception
type, cause and context stay in the origin worker's logs.

Related modules:
    signature.py — TaskSignature holds a tuple of TaskArg
    registry.py  — maps handler annotations to accepted tags
"""

from __future__ import annotations

import copy
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from taskchain.core.errors import DecodeError

INT = "int"
FLOAT = "float"
STR = "str"
BOOL = "bool"
LIST = "list"
DICT = "dict"
NULL = "null"
ERROR = "error"
"""Reserved tag for the error passed as first argument to error continuations."""

TYPE_ALIASES: dict[str, str] = {
    "string": STR,
    "int32": INT,
    "int64": INT,
    "float32": FLOAT,
    "float64": FLOAT,
}


@dataclass(frozen=True)
class TaskArg:
    """A single argument crossing the wire."""

    type: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"Type": self.type, "Value": self.value}

    def copy(self) -> TaskArg:
        """Same argument with its own copy of a list/dict value."""
        if isinstance(self.value, (list, dict)):
            return TaskArg(type=self.type, value=copy.deepcopy(self.value))
        return self


# ── Decoders ─────────────────────────────────────────────────────────────


def _decode_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError
    return value


def _decode_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError
    return float(value)


def _expect(kind: type) -> Callable[[Any], Any]:
    def decode(value: Any) -> Any:
        if not isinstance(value, kind):
            raise TypeError
        return value

    return decode


def _decode_null(value: Any) -> None:
    if value is not None:
        raise TypeError
    return None


_DECODERS: dict[str, Callable[[Any], Any]] = {
    INT: _decode_int,
    FLOAT: _decode_float,
    STR: _expect(str),
    BOOL: _expect(bool),
    LIST: _expect(list),
    DICT: _expect(dict),
    NULL: _decode_null,
    ERROR: _expect(str),
}

KNOWN_TAGS: frozenset[str] = frozenset(_DECODERS)


def canonical_tag(tag: str) -> str:
    """Resolve aliases (``"int64"`` → ``"int"``). Unknown tags pass through."""
    return TYPE_ALIASES.get(tag, tag)


def decode_arg(arg: TaskArg) -> Any:
    """Convert a wire argument into a native value matching its tag.

    Raises:
        DecodeError: Unknown tag, or a value that cannot be read as the tag
    """
    tag = canonical_tag(arg.type)
    decoder = _DECODERS.get(tag)
    if decoder is None:
        raise DecodeError(f"Unknown argument type {arg.type!r}")
    try:
        return decoder(arg.value)
    except TypeError:
        raise DecodeError(
            f"Value {arg.value!r} cannot be decoded as {arg.type!r}"
        ) from None


def decode_args(args: Iterable[TaskArg]) -> list[Any]:
    """Decode every argument in order; the first failure aborts the whole list."""
    return [decode_arg(arg) for arg in args]


# ── Encoders ─────────────────────────────────────────────────────────────


def _to_wire(value: Any, path: str = "value") -> Any:
    """Validated copy of ``value`` with tuples turned into lists.

    Raises:
        DecodeError: Anything inside the value has no wire representation
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise DecodeError(f"Non-finite float {value!r} at {path} cannot be passed as a task argument")
        return value
    if isinstance(value, (list, tuple)):
        return [_to_wire(item, f"{path}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise DecodeError(f"Key {key!r} at {path} must be a string to be passed as a task argument")
            result[key] = _to_wire(item, f"{path}[{key!r}]")
        return result
    raise DecodeError(f"Values of type {type(value).__name__!r} at {path} cannot be passed as task arguments")


def _shallow_tag(value: Any) -> str:
    if value is None:
        return NULL
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, int):
        return INT
    if isinstance(value, float):
        return FLOAT
    if isinstance(value, str):
        return STR
    if isinstance(value, (list, tuple)):
        return LIST
    return DICT


def tag_for(value: Any) -> str:
    """Type tag for a native value, after checking every nested element.

    Raises:
        DecodeError: The value (or something inside it) has no wire
            representation: an unsupported type, a non-string dict key, or a
            NaN/infinite float
    """
    return _shallow_tag(_to_wire(value))


def encode_value(value: Any) -> TaskArg:
    """Wrap a native value (usually a handler result) as a TaskArg.

    Containers are copied, so the TaskArg never shares them with the caller.
    """
    wire = _to_wire(value)
    return TaskArg(type=_shallow_tag(wire), value=wire)


def error_arg(error: BaseException) -> TaskArg:
    """Encode an error for an error continuation: reserved tag, message only."""
    return TaskArg(type=ERROR, value=str(error))


__all__ = [
    "TaskArg",
    "INT",
    "FLOAT",
    "STR",
    "BOOL",
    "LIST",
    "DICT",
    "NULL",
    "ERROR",
    "TYPE_ALIASES",
    "KNOWN_TAGS",
    "canonical_tag",
    "decode_arg",
    "decode_args",
    "tag_for",
    "encode_value",
    "error_arg",
]
