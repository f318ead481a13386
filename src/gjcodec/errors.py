"""
Error taxonomy for gjcodec.

Every failure surfaced by the codec or the response decoder derives from
GJCodecError, so callers can catch the whole family at once.

Decode side:
    DecodeError          - a fragment could not be parsed into its declared type

Encode side:
    EncodeError          - a value could not be written
        UnsupportedError - the value shape has no representation in the format
        WriteError       - the underlying sink failed

Response side:
    ResponseError
        NotFoundError          - body was the "resource absent" literal
        AccessBlockedError     - body was the access-block literal
        UnexpectedFormatError  - wrong section count, malformed pair, ...
"""

from typing import Optional


class GJCodecError(Exception):
    """Base class for all gjcodec errors."""
    pass


class DecodeError(GJCodecError):
    """
    Raised when a scalar or record fragment cannot be decoded.

    Properties:
        field: Field name (or dotted path for nested records), if known
        text: The offending wire text
        reason: Short description of what went wrong
    """

    def __init__(self, reason: str, field: Optional[str] = None, text: Optional[str] = None):
        self.reason = reason
        self.field = field
        self.text = text
        super().__init__(self._format())

    def _format(self) -> str:
        message = self.reason
        if self.field is not None:
            message = f"field '{self.field}': {message}"
        if self.text is not None:
            message = f"{message} (got {self.text!r})"
        return message

    def nested(self, parent: str) -> "DecodeError":
        """Return a copy of this error with `parent` prefixed to the field path."""
        path = parent if self.field is None else f"{parent}.{self.field}"
        return DecodeError(self.reason, field=path, text=self.text)


class EncodeError(GJCodecError):
    """Raised when a value cannot be encoded."""
    pass


class UnsupportedError(EncodeError):
    """Raised when asked to encode a shape the indexed format cannot represent."""

    def __init__(self, construct: str):
        self.construct = construct
        super().__init__(f"unsupported construct: {construct}")


class WriteError(EncodeError):
    """Raised when the output sink fails during a write."""
    pass


class ResponseError(GJCodecError):
    """Base class for whole-response failures."""
    pass


class NotFoundError(ResponseError):
    """The response was "-1", the servers' version of HTTP 404."""

    def __init__(self):
        super().__init__("not found")


class AccessBlockedError(ResponseError):
    """The response was the access-block page returned by the servers' proxy."""

    def __init__(self):
        super().__init__("access blocked (IP banned by the upstream proxy)")


class UnexpectedFormatError(ResponseError):
    """The response did not have the layout the endpoint expects."""

    def __init__(self, reason: str = "unexpected format"):
        super().__init__(reason)


class ConfigError(GJCodecError):
    """Raised for invalid or late configuration."""
    pass


__all__ = [
    "GJCodecError",
    "DecodeError",
    "EncodeError",
    "UnsupportedError",
    "WriteError",
    "ResponseError",
    "NotFoundError",
    "AccessBlockedError",
    "UnexpectedFormatError",
    "ConfigError",
]
