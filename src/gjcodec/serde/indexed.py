"""
Record codec for the indexed format.

A record is written by visiting its wire fields in declaration order.

    positional:  value1<d>value2<d>value3
    keyed:       key1<d>value1<d>key2<d>value2

Nested records are flattened into the same stream with the same
delimiter. In keyed mode a nested record contributes only its own
key/value pairs; the enclosing field name is not written.

One IndexedSerializer encodes exactly one record. Do not reuse it.
"""

import logging
from enum import Enum
from io import StringIO
from typing import Any, Dict, List, Optional, TextIO, Tuple, Type, TypeVar

from gjcodec.errors import DecodeError, EncodeError, UnsupportedError, WriteError
from gjcodec.schema import (
    FieldType,
    IndexedFormat,
    Kind,
    UNSUPPORTED_KINDS,
    flat_width,
    is_record,
    wire_fields,
)
from gjcodec.serde.scalar import decode_scalar, encode_scalar, write_scalar


logger = logging.getLogger(__name__)

R = TypeVar("R")


def _construct_name(value: Any) -> str:
    """Name of the shape of a value that is not a record."""
    if value is None:
        return Kind.UNIT.value
    if isinstance(value, Enum):
        return Kind.UNIT_VARIANT.value
    if isinstance(value, (list, set, frozenset)):
        return Kind.SEQ.value
    if isinstance(value, tuple):
        return Kind.TUPLE.value
    if isinstance(value, dict):
        return Kind.MAP.value
    return type(value).__name__


class IndexedSerializer:
    """
    Writes one record to a text sink.

    Args:
        delimiter: Field delimiter (also separates key from value in keyed mode)
        writer: Any object with a `write(str)` method
        keyed: Prefix every value with its field key

    The `_started` flag records whether a field has been emitted yet. It
    cannot be replaced by checking whether anything was written: a leading
    absent optional writes nothing, yet still occupies a slot.
    """

    def __init__(self, delimiter: str, writer: TextIO, keyed: bool = False):
        self.delimiter = delimiter
        self.writer = writer
        self.keyed = keyed
        self._started = False

    def _write(self, text: str) -> None:
        try:
            self.writer.write(text)
        except (OSError, ValueError) as e:
            # ValueError: write to a closed file or buffer
            raise WriteError(f"failed to write to sink: {e}") from e

    def _begin_field(self) -> None:
        if self._started:
            self._write(self.delimiter)
        else:
            self._started = True

    def serialize(self, record: Any) -> None:
        """
        Write `record` to the sink.

        Raises:
            UnsupportedError: If `record` is not a record, or holds an unsupported shape
            EncodeError: If a field value does not match its declared type
            WriteError: If the sink fails
        """
        if not is_record(record) or isinstance(record, type):
            raise UnsupportedError(_construct_name(record))
        self._serialize_fields(record)

    def serialize_value(self, value: Any, field_type: FieldType, name: Optional[str] = None) -> None:
        """Write a single value as if it were the next field of a record."""
        self._serialize_value(value, field_type, name)

    def _serialize_fields(self, record: Any) -> None:
        for wf in wire_fields(record):
            value = getattr(record, wf.name)
            if self.keyed and wf.type.kind is not Kind.RECORD:
                self._begin_field()
                self._write(wf.key)
            self._serialize_value(value, wf.type, wf.name)

    def _serialize_value(self, value: Any, field_type: FieldType, name: Optional[str]) -> None:
        kind = field_type.kind

        if kind is Kind.OPTIONAL:
            if field_type.inner.kind is Kind.RECORD:
                raise UnsupportedError("optional_record")
            if value is None:
                # Absent, but the slot is still there
                self._begin_field()
                return
            self._serialize_value(value, field_type.inner, name)
            return

        if kind is Kind.RECORD:
            if not isinstance(value, field_type.record):
                raise EncodeError(
                    f"field '{name}': expected {field_type.describe()}, got {type(value).__name__}"
                )
            self._serialize_fields(value)
            return

        if kind in UNSUPPORTED_KINDS:
            raise UnsupportedError(kind.value)

        self._begin_field()
        write_scalar(self._write, value, field_type, name)


def write_indexed(record: Any, writer: TextIO, delimiter: str, keyed: bool = False) -> None:
    """Encode `record` into `writer` using a fresh serializer."""
    IndexedSerializer(delimiter, writer, keyed).serialize(record)


def to_indexed_string(record: Any, delimiter: str, keyed: bool = False) -> str:
    """Encode `record` and return the wire text."""
    buffer = StringIO()
    write_indexed(record, buffer, delimiter, keyed)
    return buffer.getvalue()


def to_gj_string(record: Any) -> str:
    """Encode `record` using the IndexedFormat declared on its class."""
    fmt: IndexedFormat = type(record).FORMAT
    return to_indexed_string(record, fmt.delimiter, fmt.keyed)


def to_pairs(record: Any) -> List[Tuple[str, str]]:
    """
    Flatten `record` into (key, wire text) pairs in field order.

    Nested records are expanded in place. Absent optionals are skipped.
    Used to build request form bodies.
    """
    pairs = []
    for wf in wire_fields(record):
        value = getattr(record, wf.name)
        if wf.type.kind is Kind.RECORD:
            pairs.extend(to_pairs(value))
            continue
        if wf.type.kind is Kind.OPTIONAL:
            if value is None:
                continue
            pairs.append((wf.key, encode_scalar(value, wf.type.inner, wf.name)))
            continue
        pairs.append((wf.key, encode_scalar(value, wf.type, wf.name)))
    return pairs


def _decode_value(text: str, field_type: FieldType, name: str) -> Any:
    kind = field_type.kind

    if kind is Kind.OPTIONAL:
        if field_type.inner.kind is Kind.RECORD:
            raise DecodeError("optional records are not supported", field=name)
        # Empty means absent; the schema alone decides
        if text == "":
            return None
        return _decode_value(text, field_type.inner, name)

    if kind in UNSUPPORTED_KINDS:
        raise DecodeError(f"unsupported construct: {kind.value}", field=name, text=text)

    return decode_scalar(text, field_type, name)


def _build_positional(cls: Type[R], tokens: List[str], pos: int) -> Tuple[R, int]:
    values = {}
    for wf in wire_fields(cls):
        if wf.type.kind is Kind.RECORD:
            try:
                values[wf.name], pos = _build_positional(wf.type.record, tokens, pos)
            except DecodeError as e:
                raise e.nested(wf.name) from e
            continue
        values[wf.name] = _decode_value(tokens[pos], wf.type, wf.name)
        pos += 1
    return cls(**values), pos


def _build_keyed(cls: Type[R], mapping: Dict[str, str], seen: set) -> R:
    values = {}
    for wf in wire_fields(cls):
        if wf.type.kind is Kind.RECORD:
            try:
                values[wf.name] = _build_keyed(wf.type.record, mapping, seen)
            except DecodeError as e:
                raise e.nested(wf.name) from e
            continue

        if wf.key not in mapping:
            if not wf.has_default:
                raise DecodeError(f"missing key '{wf.key}'", field=wf.name)
            values[wf.name] = wf.default
            continue

        seen.add(wf.key)
        values[wf.name] = _decode_value(mapping[wf.key], wf.type, wf.name)
    return cls(**values)


def from_indexed_str(cls: Type[R], text: str, delimiter: str, keyed: bool = False) -> R:
    """
    Decode one record of type `cls` from `text`.

    Positional mode needs exactly as many tokens as the (flattened) record
    has fields. Keyed mode needs an even number of tokens; unknown keys are
    ignored and missing keys fall back to field defaults.

    Raises:
        DecodeError: If the text does not match the record layout
    """
    tokens = text.split(delimiter)

    if not keyed:
        width = flat_width(cls)
        if len(tokens) != width:
            raise DecodeError(
                f"{cls.__name__}: expected {width} fields, found {len(tokens)}", text=text
            )
        record, _ = _build_positional(cls, tokens, 0)
        return record

    if len(tokens) % 2:
        raise DecodeError(f"{cls.__name__}: odd number of tokens in keyed record", text=text)

    mapping = dict(zip(tokens[::2], tokens[1::2]))
    seen = set()
    record = _build_keyed(cls, mapping, seen)

    ignored = mapping.keys() - seen
    if ignored:
        logger.debug("%s: ignored unknown keys %s", cls.__name__, sorted(ignored))
    return record


def from_gj_str(cls: Type[R], text: str) -> R:
    """Decode a record using the IndexedFormat declared on `cls`."""
    fmt: IndexedFormat = cls.FORMAT
    return from_indexed_str(cls, text, fmt.delimiter, fmt.keyed)


__all__ = [
    "IndexedSerializer",
    "write_indexed",
    "to_indexed_string",
    "to_gj_string",
    "to_pairs",
    "from_indexed_str",
    "from_gj_str",
]
