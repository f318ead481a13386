"""
Tests for the record codec (IndexedSerializer and the record decoders).

Covers positional and keyed layouts, absent optionals keeping their slot,
nested records, and the closed set of supported shapes.
"""

from dataclasses import dataclass
from io import StringIO
from typing import Any, Optional

import pytest

from gjcodec.errors import DecodeError, EncodeError, UnsupportedError, WriteError
from gjcodec.schema import (
    BOOL,
    BYTES,
    F64,
    I32,
    STR,
    U8,
    FieldType,
    Kind,
    flat_width,
    nested,
    optional,
    wire,
)
from gjcodec.serde.indexed import (
    IndexedSerializer,
    from_indexed_str,
    to_indexed_string,
    to_pairs,
    write_indexed,
)


@dataclass(frozen=True, kw_only=True)
class Point:
    x: int = wire("1", I32)
    y: Optional[int] = wire("2", optional(I32))
    label: str = wire("3", STR)


@dataclass(frozen=True, kw_only=True)
class Leading:
    a: Optional[int] = wire("1", optional(U8))
    b: Optional[int] = wire("2", optional(U8))


@dataclass(frozen=True, kw_only=True)
class Outer:
    inner: Point = wire("inner", nested(Point))
    flag: bool = wire("4", BOOL)


@dataclass(frozen=True, kw_only=True)
class Measured:
    size: float = wire("1", F64)
    blob: Optional[bytes] = wire("2", optional(BYTES))


@dataclass(frozen=True, kw_only=True)
class WithDefault:
    x: int = wire("1", I32)
    mode: int = wire("2", U8, default=7)


@dataclass(frozen=True, kw_only=True)
class Tagged:
    tags: Any = wire("1", FieldType(Kind.SEQ), default=())


class FailingWriter:
    def write(self, text):
        raise OSError("disk full")


class TestPositional:
    """Positional mode writes values only, in declaration order."""

    def test_simple(self):
        assert to_indexed_string(Point(x=1, y=2, label="a"), ":") == "1:2:a"

    def test_absent_optional_keeps_its_slot(self):
        assert to_indexed_string(Point(x=1, y=None, label="a"), ":") == "1::a"

    def test_leading_absent_optional(self):
        """An empty first field still needs the delimiter after it."""
        assert to_indexed_string(Leading(a=None, b=5), ":") == ":5"
        assert to_indexed_string(Leading(a=None, b=None), ":") == ":"
        assert to_indexed_string(Leading(a=3, b=None), ":") == "3:"

    def test_absent_optional_and_empty_string(self):
        """Both are empty fields; only the schema tells them apart."""
        assert to_indexed_string(Point(x=1, y=None, label=""), ":") == "1::"
        decoded = from_indexed_str(Point, "1::", ":")
        assert decoded.y is None
        assert decoded.label == ""

    def test_multi_character_delimiter(self):
        assert to_indexed_string(Point(x=1, y=None, label="a"), "~|~") == "1~|~~|~a"

    def test_float_quirk_inside_record(self):
        assert to_indexed_string(Measured(size=11.0), ":") == "11:"

    def test_roundtrip(self):
        point = Point(x=-4, y=None, label="hello")
        assert from_indexed_str(Point, to_indexed_string(point, ":"), ":") == point

    def test_wrong_field_count(self):
        with pytest.raises(DecodeError):
            from_indexed_str(Point, "1:2", ":")
        with pytest.raises(DecodeError):
            from_indexed_str(Point, "1:2:a:b", ":")

    def test_bad_value_names_field(self):
        with pytest.raises(DecodeError) as exc:
            from_indexed_str(Point, "x:2:a", ":")
        assert exc.value.field == "x"


class TestKeyed:
    """Keyed mode writes key, delimiter, value for every field."""

    def test_simple(self):
        assert to_indexed_string(Point(x=1, y=2, label="a"), ":", keyed=True) == "1:1:2:2:3:a"

    def test_absent_optional(self):
        assert to_indexed_string(Point(x=1, y=None, label="a"), ":", keyed=True) == "1:1:2::3:a"

    def test_roundtrip(self):
        point = Point(x=9, y=None, label="")
        text = to_indexed_string(point, "~", keyed=True)
        assert from_indexed_str(Point, text, "~", keyed=True) == point

    def test_key_order_does_not_matter(self):
        assert from_indexed_str(Point, "3:a:1:5", ":", keyed=True) == Point(x=5, y=None, label="a")

    def test_unknown_keys_are_ignored(self):
        decoded = from_indexed_str(Point, "1:1:99:zzz:3:a", ":", keyed=True)
        assert decoded == Point(x=1, y=None, label="a")

    def test_missing_key_uses_default(self):
        assert from_indexed_str(WithDefault, "1:3", ":", keyed=True) == WithDefault(x=3, mode=7)

    def test_missing_required_key(self):
        with pytest.raises(DecodeError) as exc:
            from_indexed_str(Point, "3:a", ":", keyed=True)
        assert exc.value.field == "x"

    def test_odd_token_count(self):
        with pytest.raises(DecodeError):
            from_indexed_str(Point, "1:1:3", ":", keyed=True)

    def test_empty_text_is_not_a_record(self):
        with pytest.raises(DecodeError):
            from_indexed_str(Point, "", ":", keyed=True)


class TestNested:
    """Nested records are flattened into the same stream."""

    def test_positional(self):
        outer = Outer(inner=Point(x=1, y=None, label="a"), flag=True)
        assert to_indexed_string(outer, "|") == "1||a|1"

    def test_keyed_writes_only_inner_pairs(self):
        outer = Outer(inner=Point(x=1, y=None, label="a"), flag=True)
        assert to_indexed_string(outer, "|", keyed=True) == "1|1|2||3|a|4|1"

    def test_flat_width(self):
        assert flat_width(Outer) == 4

    @pytest.mark.parametrize("keyed", [False, True])
    def test_roundtrip(self, keyed):
        outer = Outer(inner=Point(x=1, y=2, label="a"), flag=False)
        text = to_indexed_string(outer, "|", keyed=keyed)
        assert from_indexed_str(Outer, text, "|", keyed=keyed) == outer

    def test_error_path_includes_parent(self):
        with pytest.raises(DecodeError) as exc:
            from_indexed_str(Outer, "x||a|1", "|")
        assert exc.value.field == "inner.x"
        assert isinstance(exc.value.__cause__, DecodeError)

    def test_wrong_nested_type(self):
        with pytest.raises(EncodeError):
            to_indexed_string(Outer(inner=Leading(a=1, b=2), flag=True), "|")


class TestSerializerSession:
    """One serializer, one record; the start flag drives delimiters."""

    def test_serialize_value_sequence(self):
        buffer = StringIO()
        serializer = IndexedSerializer(":", buffer)
        serializer.serialize_value(None, optional(U8))
        serializer.serialize_value(3, U8)
        assert buffer.getvalue() == ":3"

    def test_write_indexed(self):
        buffer = StringIO()
        write_indexed(Point(x=1, y=2, label="z"), buffer, ",")
        assert buffer.getvalue() == "1,2,z"

    def test_sink_failure(self):
        with pytest.raises(WriteError) as exc:
            write_indexed(Point(x=1, y=2, label="z"), FailingWriter(), ",")
        assert isinstance(exc.value.__cause__, OSError)

    def test_closed_sink(self):
        buffer = StringIO()
        buffer.close()
        with pytest.raises(WriteError) as exc:
            write_indexed(Point(x=1, y=2, label="z"), buffer, ",")
        assert isinstance(exc.value.__cause__, ValueError)


class TestUnsupportedShapes:
    """The format only has flat and nested records of scalars."""

    @pytest.mark.parametrize("value,construct", [
        ([1, 2], "seq"),
        ((1, 2), "tuple"),
        ({"a": 1}, "map"),
        (None, "unit"),
    ])
    def test_top_level_non_record(self, value, construct):
        with pytest.raises(UnsupportedError) as exc:
            to_indexed_string(value, ":")
        assert exc.value.construct == construct

    def test_record_class_is_not_a_value(self):
        with pytest.raises(UnsupportedError):
            to_indexed_string(Point, ":")

    def test_sequence_field(self):
        with pytest.raises(UnsupportedError) as exc:
            to_indexed_string(Tagged(tags=(1, 2)), ":")
        assert exc.value.construct == "seq"

    def test_sequence_field_decode(self):
        with pytest.raises(DecodeError):
            from_indexed_str(Tagged, "1", ":")


class TestPairs:
    """to_pairs flattens a record into (key, text) pairs."""

    def test_nested_and_optional(self):
        outer = Outer(inner=Point(x=1, y=None, label="a"), flag=True)
        assert to_pairs(outer) == [("1", "1"), ("3", "a"), ("4", "1")]
