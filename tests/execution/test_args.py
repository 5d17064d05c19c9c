"""Tests for taskchain.execution.args — type tags, decoding and encoding."""

from __future__ import annotations

import pytest

from taskchain.core.errors import DecodeError, HandlerError
from taskchain.execution.args import (
    KNOWN_TAGS,
    TaskArg,
    canonical_tag,
    decode_arg,
    decode_args,
    encode_value,
    error_arg,
    tag_for,
)


class TestDecodeArg:
    @pytest.mark.parametrize(
        ("tag", "value", "expected"),
        [
            ("int", 5, 5),
            ("float", 2.5, 2.5),
            ("float", 3, 3.0),
            ("str", "hi", "hi"),
            ("bool", True, True),
            ("list", [1, "a"], [1, "a"]),
            ("dict", {"k": 1}, {"k": 1}),
            ("null", None, None),
            ("error", "disk full", "disk full"),
        ],
    )
    def test_canonical_tags(self, tag, value, expected):
        assert decode_arg(TaskArg(tag, value)) == expected

    @pytest.mark.parametrize(
        ("alias", "value"),
        [("string", "x"), ("int32", 1), ("int64", 2**40), ("float32", 1.5), ("float64", 2.0)],
    )
    def test_aliases(self, alias, value):
        assert decode_arg(TaskArg(alias, value)) == value

    def test_float_from_int_is_float(self):
        assert isinstance(decode_arg(TaskArg("float", 3)), float)

    @pytest.mark.parametrize(
        ("tag", "value"),
        [
            ("int", "abc"),
            ("int", 1.5),
            ("int", True),
            ("float", "1.0"),
            ("float", False),
            ("str", 5),
            ("bool", 1),
            ("list", {"a": 1}),
            ("dict", [1]),
            ("null", 0),
            ("error", None),
        ],
    )
    def test_value_does_not_fit_tag(self, tag, value):
        with pytest.raises(DecodeError, match="cannot be decoded"):
            decode_arg(TaskArg(tag, value))

    def test_unknown_tag(self):
        with pytest.raises(DecodeError, match="Unknown argument type 'complex'"):
            decode_arg(TaskArg("complex", 1))

    def test_decode_args_fails_fast(self):
        args = [TaskArg("int", 1), TaskArg("int", "x"), TaskArg("bogus", 0)]
        with pytest.raises(DecodeError, match="cannot be decoded"):
            decode_args(args)

    def test_decode_args_preserves_order(self):
        assert decode_args([TaskArg("str", "a"), TaskArg("int", 1)]) == ["a", 1]


class TestTags:
    def test_canonical_tag(self):
        assert canonical_tag("int64") == "int"
        assert canonical_tag("string") == "str"
        assert canonical_tag("mystery") == "mystery"

    def test_known_tags(self):
        assert KNOWN_TAGS == {"int", "float", "str", "bool", "list", "dict", "null", "error"}

    @pytest.mark.parametrize(
        ("value", "tag"),
        [
            (None, "null"),
            (True, "bool"),
            (7, "int"),
            (1.5, "float"),
            ("s", "str"),
            ([1], "list"),
            ((1, 2), "list"),
            ({"a": 1}, "dict"),
        ],
    )
    def test_tag_for(self, value, tag):
        assert tag_for(value) == tag

    def test_tag_for_unsupported(self):
        with pytest.raises(DecodeError, match="'set'"):
            tag_for({1, 2})

    @pytest.mark.parametrize(
        "value",
        [
            {"when": object()},
            [1, [2, {3, 4}]],
            {"outer": {"inner": (1, b"raw")}},
        ],
    )
    def test_tag_for_checks_nested_values(self, value):
        with pytest.raises(DecodeError, match="cannot be passed as task arguments"):
            tag_for(value)

    @pytest.mark.parametrize("value", [{1: [2, 3]}, {"ok": {None: 1}}])
    def test_tag_for_rejects_non_string_keys(self, value):
        with pytest.raises(DecodeError, match="must be a string"):
            tag_for(value)

    @pytest.mark.parametrize(
        "value",
        [float("nan"), float("inf"), float("-inf"), [1.0, float("nan")], {"ratio": float("inf")}],
    )
    def test_tag_for_rejects_non_finite_floats(self, value):
        with pytest.raises(DecodeError, match="Non-finite float"):
            tag_for(value)


class TestEncodeValue:
    def test_scalar(self):
        assert encode_value(5) == TaskArg("int", 5)

    def test_tuple_becomes_list(self):
        assert encode_value((1, 2)) == TaskArg("list", [1, 2])

    def test_containers_are_copied(self):
        result = {"items": [1, 2]}
        arg = encode_value(result)
        result["items"].append(3)
        assert arg.value == {"items": [1, 2]}

    def test_nested_tuples_become_lists(self):
        assert encode_value({"point": (1, 2), "path": [(3, 4)]}) == TaskArg(
            "dict", {"point": [1, 2], "path": [[3, 4]]}
        )

    def test_nested_unencodable_raises(self):
        with pytest.raises(DecodeError):
            encode_value({"when": object()})

    def test_copy_detaches_containers(self):
        arg = TaskArg("list", [{"k": 1}])
        copied = arg.copy()
        copied.value[0]["k"] = 2
        assert arg.value == [{"k": 1}]

    def test_copy_of_scalar_is_same_arg(self):
        arg = TaskArg("int", 5)
        assert arg.copy() is arg

    def test_to_dict(self):
        assert TaskArg("int", 5).to_dict() == {"Type": "int", "Value": 5}


class TestErrorArg:
    def test_message_only(self):
        arg = error_arg(HandlerError("disk full", cause=OSError(28, "No space")))
        assert arg == TaskArg("error", "disk full")

    def test_plain_exception(self):
        assert error_arg(ValueError("bad")).value == "bad"
