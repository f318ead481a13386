"""Codec for the indexed format (scalars and records)."""

from .indexed import (
    IndexedSerializer,
    from_gj_str,
    from_indexed_str,
    to_gj_string,
    to_indexed_string,
    to_pairs,
    write_indexed,
)
from .scalar import decode_scalar, encode_scalar, format_float

__all__ = [
    "IndexedSerializer",
    "from_gj_str",
    "from_indexed_str",
    "to_gj_string",
    "to_indexed_string",
    "to_pairs",
    "write_indexed",
    "decode_scalar",
    "encode_scalar",
    "format_float",
]
