"""Task signature — the declarative description of one unit of work.

A TaskSignature names a handler, carries its ordered arguments, and declares
the continuations to publish when the handler succeeds (``on_success``) or
fails (``on_error``). Signatures are frozen: deriving a continuation always
produces a new instance via :meth:`TaskSignature.prepend_arg`.

Wire format (JSON)::

    {
      "Name": "add",
      "Args": [{"Type": "int", "Value": 2}, {"Type": "int", "Value": 3}],
      "Immutable": false,
      "OnSuccess": [{"Name": "log", "Args": []}],
      "OnError": []
    }

Unknown fields are ignored so producers may carry extra routing metadata.

Manifesto:
    One schema for inbound messages and derived continuations means a
    continuation published by this worker is consumed by the next worker
    exactly as if a producer had sent it.

Tags:
    taskchain, execution, signature, wire-format

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from taskchain.core.errors import DecodeError
from taskchain.execution.args import TaskArg, encode_value


@dataclass(frozen=True)
class TaskSignature:
    """Dispatchable unit of work with its success/error continuations.

    Example:
        >>> sig = task_signature("add", [2, 3], on_success=[task_signature("log")])
        >>> sig.args
        (TaskArg(type='int', value=2), TaskArg(type='int', value=3))
    """

    name: str
    """Handler name resolved against the registry"""

    args: tuple[TaskArg, ...] = ()
    """Positional arguments, order is significant"""

    on_success: tuple[TaskSignature, ...] = ()
    """Continuations published when the handler succeeds"""

    on_error: tuple[TaskSignature, ...] = ()
    """Continuations published when the handler fails"""

    immutable: bool = False
    """When true, success continuations do not receive the result"""

    def copy(self) -> TaskSignature:
        """Equal signature sharing no list/dict argument values, nested continuations included."""
        return replace(
            self,
            args=tuple(a.copy() for a in self.args),
            on_success=tuple(s.copy() for s in self.on_success),
            on_error=tuple(s.copy() for s in self.on_error),
        )

    def prepend_arg(self, arg: TaskArg) -> TaskSignature:
        """Return a detached copy of this signature with ``arg`` as its first argument."""
        detached = self.copy()
        return replace(detached, args=(arg, *detached.args))

    # ── Serialization ────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Wire representation (``Name``, ``Args``, ``OnSuccess``, ...)."""
        return SignatureEnvelope.from_signature(self).model_dump(by_alias=True)

    def to_json(self) -> str:
        return SignatureEnvelope.from_signature(self).model_dump_json(by_alias=True)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TaskSignature:
        return decode_signature(data)

    @classmethod
    def from_json(cls, raw: str | bytes) -> TaskSignature:
        return decode_signature(raw)


# ── Wire envelope ────────────────────────────────────────────────────────


class ArgEnvelope(BaseModel):
    """``{"Type": ..., "Value": ...}``"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = Field(alias="Type", min_length=1)
    value: Any = Field(default=None, alias="Value")


class SignatureEnvelope(BaseModel):
    """Validated wire form of a :class:`TaskSignature`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(alias="Name")
    args: list[ArgEnvelope] = Field(default_factory=list, alias="Args")
    immutable: bool = Field(default=False, alias="Immutable")
    on_success: list[SignatureEnvelope] = Field(default_factory=list, alias="OnSuccess")
    on_error: list[SignatureEnvelope] = Field(default_factory=list, alias="OnError")

    def to_signature(self) -> TaskSignature:
        return TaskSignature(
            name=self.name,
            args=tuple(TaskArg(type=a.type, value=a.value) for a in self.args),
            on_success=tuple(s.to_signature() for s in self.on_success),
            on_error=tuple(s.to_signature() for s in self.on_error),
            immutable=self.immutable,
        )

    @classmethod
    def from_signature(cls, signature: TaskSignature) -> SignatureEnvelope:
        return cls(
            name=signature.name,
            args=[ArgEnvelope(type=a.type, value=a.value) for a in signature.args],
            immutable=signature.immutable,
            on_success=[cls.from_signature(s) for s in signature.on_success],
            on_error=[cls.from_signature(s) for s in signature.on_error],
        )


def decode_signature(raw: str | bytes | bytearray | Mapping[str, Any]) -> TaskSignature:
    """Decode an inbound envelope (JSON text/bytes or an already-parsed mapping).

    Raises:
        DecodeError: Invalid JSON, or a payload that is not a task signature
    """
    try:
        if isinstance(raw, Mapping):
            envelope = SignatureEnvelope.model_validate(raw)
        elif isinstance(raw, (str, bytes, bytearray)):
            envelope = SignatureEnvelope.model_validate_json(raw)
        else:
            raise DecodeError(f"Unsupported envelope type {type(raw).__name__!r}")
    except ValidationError as exc:
        raise DecodeError(
            f"Malformed task envelope: {exc.error_count()} validation error(s)", cause=exc
        ) from exc
    return envelope.to_signature()


def encode_signature(signature: TaskSignature) -> bytes:
    """Encode a signature as UTF-8 JSON for publishing."""
    return signature.to_json().encode("utf-8")


# ── Convenience constructors ─────────────────────────────────────────────


def task_signature(
    name: str,
    args: list[Any] | tuple[Any, ...] = (),
    *,
    on_success: list[TaskSignature] | tuple[TaskSignature, ...] = (),
    on_error: list[TaskSignature] | tuple[TaskSignature, ...] = (),
    immutable: bool = False,
) -> TaskSignature:
    """Build a signature from native values (or ready-made TaskArgs).

    Example:
        >>> task_signature("alert", ["pager"]).args
        (TaskArg(type='str', value='pager'),)
    """
    return TaskSignature(
        name=name,
        args=tuple(a if isinstance(a, TaskArg) else encode_value(a) for a in args),
        on_success=tuple(on_success),
        on_error=tuple(on_error),
        immutable=immutable,
    )


__all__ = [
    "TaskSignature",
    "ArgEnvelope",
    "SignatureEnvelope",
    "decode_signature",
    "encode_signature",
    "task_signature",
]
