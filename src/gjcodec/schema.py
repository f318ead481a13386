"""
Field schema for records in the indexed format.

Every value the codec touches is described by a FieldType: a tag (Kind)
plus, for optionals and nested records, what it wraps. The codec switches
on the tag; there is no open-ended dispatch on Python types.

ARCHITECTURAL RULE:
    The value space is closed. Sequences, maps and payload-carrying
    variants have a Kind so a schema can name them, but the codec
    rejects them. Do not add generic support here.

Records are frozen dataclasses. Wire fields are declared with `wire()`:

    @dataclass(frozen=True)
    class Creator:
        user_id: int = wire("1", U64)
        name: str = wire("2", STR)

Fields declared with `relation()` are filled in after decoding, by
cross-referencing other records, and never touch the wire.
"""

from dataclasses import dataclass, field, fields, is_dataclass, MISSING
from enum import Enum
from typing import Any, List, Optional, Tuple


class Kind(Enum):
    """Tags of the value model."""

    BOOL = "bool"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"
    CHAR = "char"
    STR = "str"
    BYTES = "bytes"
    OPTIONAL = "optional"
    RECORD = "record"

    # Shapes the format has no representation for
    UNIT = "unit"
    UNIT_VARIANT = "unit_variant"
    NEWTYPE_VARIANT = "newtype_variant"
    SEQ = "seq"
    TUPLE = "tuple"
    MAP = "map"
    STRUCT_VARIANT = "struct_variant"
    COLLECT_STR = "collect_str"


# (min, max) per integer kind
INTEGER_RANGES = {
    Kind.I8: (-(2 ** 7), 2 ** 7 - 1),
    Kind.I16: (-(2 ** 15), 2 ** 15 - 1),
    Kind.I32: (-(2 ** 31), 2 ** 31 - 1),
    Kind.I64: (-(2 ** 63), 2 ** 63 - 1),
    Kind.U8: (0, 2 ** 8 - 1),
    Kind.U16: (0, 2 ** 16 - 1),
    Kind.U32: (0, 2 ** 32 - 1),
    Kind.U64: (0, 2 ** 64 - 1),
}

FLOAT_KINDS = frozenset({Kind.F32, Kind.F64})

UNSUPPORTED_KINDS = frozenset({
    Kind.UNIT,
    Kind.UNIT_VARIANT,
    Kind.NEWTYPE_VARIANT,
    Kind.SEQ,
    Kind.TUPLE,
    Kind.MAP,
    Kind.STRUCT_VARIANT,
    Kind.COLLECT_STR,
})


@dataclass(frozen=True)
class FieldType:
    """
    Declared type of a single field.

    Properties:
        kind: The tag
        inner: Wrapped type, only for Kind.OPTIONAL
        record: Record class, only for Kind.RECORD
    """

    kind: Kind
    inner: Optional["FieldType"] = None
    record: Optional[type] = None

    @property
    def is_optional(self) -> bool:
        return self.kind is Kind.OPTIONAL

    def describe(self) -> str:
        if self.kind is Kind.OPTIONAL:
            return f"optional<{self.inner.describe()}>"
        if self.kind is Kind.RECORD:
            return f"record<{self.record.__name__}>"
        return self.kind.value


BOOL = FieldType(Kind.BOOL)
I8 = FieldType(Kind.I8)
I16 = FieldType(Kind.I16)
I32 = FieldType(Kind.I32)
I64 = FieldType(Kind.I64)
U8 = FieldType(Kind.U8)
U16 = FieldType(Kind.U16)
U32 = FieldType(Kind.U32)
U64 = FieldType(Kind.U64)
F32 = FieldType(Kind.F32)
F64 = FieldType(Kind.F64)
CHAR = FieldType(Kind.CHAR)
STR = FieldType(Kind.STR)
BYTES = FieldType(Kind.BYTES)


def optional(inner: FieldType) -> FieldType:
    return FieldType(Kind.OPTIONAL, inner=inner)


def nested(record: type) -> FieldType:
    return FieldType(Kind.RECORD, record=record)


@dataclass(frozen=True)
class IndexedFormat:
    """
    How a record kind is laid out on the wire.

    Properties:
        delimiter: Separator between fields (and between key and value)
        keyed: True for key-prefixed fields, False for positional
    """

    delimiter: str
    keyed: bool = False


_WIRE_KEY = "gj_key"
_WIRE_TYPE = "gj_type"
_RELATION = "gj_relation"


def wire(key: str, field_type: FieldType, default: Any = MISSING, **kwargs):
    """
    Declare a wire field on a record dataclass.

    Args:
        key: Name written in keyed mode (ignored in positional mode)
        field_type: Declared FieldType
        default: Dataclass default; optionals default to None if omitted

    Returns:
        A dataclasses.field carrying the wire metadata
    """
    if default is MISSING and field_type.is_optional and "default_factory" not in kwargs:
        default = None
    metadata = dict(kwargs.pop("metadata", {}))
    metadata[_WIRE_KEY] = key
    metadata[_WIRE_TYPE] = field_type
    if default is MISSING:
        return field(metadata=metadata, **kwargs)
    return field(default=default, metadata=metadata, **kwargs)


@dataclass(frozen=True)
class WireField:
    """A record field as the codec sees it."""

    name: str
    key: str
    type: FieldType
    has_default: bool
    default: Any = None


def is_record(obj: Any) -> bool:
    """True for record classes and record instances."""
    return is_dataclass(obj) and any(_WIRE_TYPE in f.metadata for f in fields(obj))


def wire_fields(record: Any) -> List[WireField]:
    """
    List the wire fields of a record class or instance, in declaration order.

    Raises:
        TypeError: If `record` is not a dataclass
    """
    if not is_dataclass(record):
        raise TypeError(f"{record!r} is not a record dataclass")

    result = []
    for f in fields(record):
        if _WIRE_TYPE not in f.metadata:
            continue
        has_default = f.default is not MISSING or f.default_factory is not MISSING
        if f.default is not MISSING:
            default = f.default
        elif f.default_factory is not MISSING:
            default = f.default_factory()
        else:
            default = None
        result.append(WireField(
            name=f.name,
            key=f.metadata[_WIRE_KEY],
            type=f.metadata[_WIRE_TYPE],
            has_default=has_default,
            default=default,
        ))
    return result


def relation(record: type):
    """
    Declare a relation field: a record filled in by cross-reference,
    never encoded or decoded. Always defaults to None.
    """
    return field(default=None, metadata={_RELATION: record})


def relation_fields(record: Any) -> Tuple[Tuple[str, type], ...]:
    """(name, record class) of every relation field, in declaration order."""
    return tuple((f.name, f.metadata[_RELATION]) for f in fields(record) if _RELATION in f.metadata)


def flat_width(record: Any) -> int:
    """Number of positional tokens a record occupies, counting nested records."""
    width = 0
    for wf in wire_fields(record):
        if wf.type.kind is Kind.RECORD:
            width += flat_width(wf.type.record)
        else:
            width += 1
    return width


__all__ = [
    "Kind",
    "FieldType",
    "WireField",
    "IndexedFormat",
    "INTEGER_RANGES",
    "FLOAT_KINDS",
    "UNSUPPORTED_KINDS",
    "BOOL", "I8", "I16", "I32", "I64", "U8", "U16", "U32", "U64",
    "F32", "F64", "CHAR", "STR", "BYTES",
    "optional",
    "nested",
    "wire",
    "wire_fields",
    "relation",
    "relation_fields",
    "is_record",
    "flat_width",
]
