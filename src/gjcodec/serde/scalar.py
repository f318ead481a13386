"""
Scalar codec: single primitive values to and from their exact wire text.

Wire forms:
    bool            "1" / "0"
    integers        decimal, no leading zeros, "-" for negatives
    f32 / f64       shortest decimal text, never exponent notation and
                    never a ".0" suffix (eleven is "11", not "11.0")
    char            the code point itself
    str             the text itself, unescaped
    bytes           URL-safe base64 with padding

The servers format floats without a fractional part as integers, and
round-trip tests depend on reproducing that. Do not switch to repr().

An f32 field holds a Python float. Encoding rounds it to single precision
first, and decoding returns the single-precision value as a float, so a
decoded f32 always re-encodes to the same text and compares equal to the
value it was encoded from whenever that value fits an f32 exactly.

Optionals and nested records are handled one level up, in the indexed
serializer. Everything here works on leaf kinds only.
"""

import base64
import binascii
import math
import re
import struct
from decimal import Decimal
from enum import Enum
from io import StringIO
from typing import Any, Callable, Optional

from gjcodec.errors import DecodeError, EncodeError, UnsupportedError
from gjcodec.schema import (
    FieldType,
    Kind,
    INTEGER_RANGES,
    FLOAT_KINDS,
    UNSUPPORTED_KINDS,
)


_INTEGER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)")
_FLOAT_RE = re.compile(r"-?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")
_BASE64_RE = re.compile(r"(?:[A-Za-z0-9_-]{4})*(?:[A-Za-z0-9_-]{2}==|[A-Za-z0-9_-]{3}=)?")

# Multiple of 3 so that chunks concatenate to the unchunked encoding
BASE64_CHUNK_SIZE = 3 * 1024


def _round_single(value: float) -> float:
    """Round a double to the nearest single-precision value."""
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _shortest_single(value: float) -> str:
    """Shortest %g text that reads back as the same single-precision value."""
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        if _round_single(float(text)) == value:
            return text
    return repr(value)


def format_float(value: float, single: bool = False) -> str:
    """
    Format a float the way the game servers do.

    Args:
        value: The number
        single: Format at single precision (f32) instead of double

    Returns:
        Positional decimal text without a trailing ".0"

    Raises:
        OverflowError: If `single` and the value does not fit an f32
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"

    if single:
        value = _round_single(value)
        shortest = _shortest_single(value)
    else:
        shortest = repr(value)

    text = format(Decimal(shortest), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _check_type(value: Any, field_type: FieldType, name: Optional[str], *types) -> None:
    # Tag-only enum members have no wire form
    if isinstance(value, Enum) and not isinstance(value, types):
        raise UnsupportedError(Kind.UNIT_VARIANT.value)
    # bool is an int subclass; only Kind.BOOL takes it
    if isinstance(value, bool) and bool not in types:
        raise EncodeError(f"field '{name}': expected {field_type.describe()}, got bool")
    if not isinstance(value, types):
        raise EncodeError(
            f"field '{name}': expected {field_type.describe()}, got {type(value).__name__}"
        )


def write_base64(write: Callable[[str], Any], data: bytes) -> None:
    """Write `data` as URL-safe base64 in fixed-size chunks."""
    view = memoryview(data)
    for start in range(0, len(view), BASE64_CHUNK_SIZE):
        write(base64.urlsafe_b64encode(view[start:start + BASE64_CHUNK_SIZE]).decode("ascii"))


def write_scalar(write: Callable[[str], Any], value: Any, field_type: FieldType,
                 name: Optional[str] = None) -> None:
    """
    Write the wire text of a leaf value.

    Args:
        write: Sink callable taking a str
        value: The Python value
        field_type: Declared type
        name: Field name, for error messages

    Raises:
        UnsupportedError: For shapes the format cannot represent
        EncodeError: For type mismatches and out-of-range numbers
    """
    kind = field_type.kind

    if kind in UNSUPPORTED_KINDS:
        raise UnsupportedError(kind.value)

    if kind is Kind.BOOL:
        _check_type(value, field_type, name, bool)
        write("1" if value else "0")
    elif kind in INTEGER_RANGES:
        _check_type(value, field_type, name, int)
        low, high = INTEGER_RANGES[kind]
        if not low <= value <= high:
            raise EncodeError(f"field '{name}': {value} out of range for {kind.value}")
        write(str(value))
    elif kind in FLOAT_KINDS:
        _check_type(value, field_type, name, int, float)
        try:
            write(format_float(float(value), single=kind is Kind.F32))
        except OverflowError:
            raise EncodeError(f"field '{name}': {value} out of range for {kind.value}")
    elif kind is Kind.CHAR:
        _check_type(value, field_type, name, str)
        if len(value) != 1:
            raise EncodeError(f"field '{name}': expected a single character, got {value!r}")
        write(value)
    elif kind is Kind.STR:
        _check_type(value, field_type, name, str)
        write(value)
    elif kind is Kind.BYTES:
        _check_type(value, field_type, name, bytes, bytearray, memoryview)
        write_base64(write, value)
    else:
        raise EncodeError(f"field '{name}': {field_type.describe()} is not a scalar type")


def encode_scalar(value: Any, field_type: FieldType, name: Optional[str] = None) -> str:
    """Encode a leaf value and return its wire text."""
    buffer = StringIO()
    write_scalar(buffer.write, value, field_type, name)
    return buffer.getvalue()


def decode_scalar(text: str, field_type: FieldType, name: Optional[str] = None) -> Any:
    """
    Parse the wire text of a leaf value.

    Args:
        text: Wire text
        field_type: Declared type
        name: Field name, for error messages

    Returns:
        The decoded Python value

    Raises:
        DecodeError: If the text is not a valid encoding of the declared type
    """
    kind = field_type.kind

    if kind is Kind.BOOL:
        if text == "1":
            return True
        if text == "0":
            return False
        raise DecodeError("expected '0' or '1'", field=name, text=text)

    if kind in INTEGER_RANGES:
        if not _INTEGER_RE.fullmatch(text) or text == "-0":
            raise DecodeError(f"invalid {kind.value}", field=name, text=text)
        value = int(text)
        low, high = INTEGER_RANGES[kind]
        if not low <= value <= high:
            raise DecodeError(f"out of range for {kind.value}", field=name, text=text)
        return value

    if kind in FLOAT_KINDS:
        if not (text in ("NaN", "inf", "-inf") or _FLOAT_RE.fullmatch(text)):
            raise DecodeError(f"invalid {kind.value}", field=name, text=text)
        value = float(text)
        if kind is Kind.F32:
            try:
                return _round_single(value)
            except OverflowError:
                raise DecodeError(f"out of range for {kind.value}", field=name, text=text)
        return value

    if kind is Kind.CHAR:
        if len(text) != 1:
            raise DecodeError("expected a single character", field=name, text=text)
        return text

    if kind is Kind.STR:
        return text

    if kind is Kind.BYTES:
        if not _BASE64_RE.fullmatch(text):
            raise DecodeError("invalid URL-safe base64", field=name, text=text)
        try:
            return base64.urlsafe_b64decode(text)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"invalid URL-safe base64: {e}", field=name, text=text) from e

    raise DecodeError(f"cannot decode {field_type.describe()} as a scalar", field=name, text=text)


__all__ = [
    "format_float",
    "write_base64",
    "write_scalar",
    "encode_scalar",
    "decode_scalar",
    "BASE64_CHUNK_SIZE",
]
