"""
Exceptions raised while decoding name sections.

Every decode failure is a FormatError, which is also a ValueError so callers
that already handle malformed input generically keep working. Errors from the
underlying stream (OSError) are never wrapped.
"""


class FormatError(ValueError):
    """Base class for malformed or truncated input."""


class MalformedVarintError(FormatError):
    """A variable-length integer violates its encoding rules."""


class TruncatedInputError(FormatError):
    """The stream ended before a declared number of bytes was available."""

    def __init__(self, expected: int, available: int):
        super().__init__(
            f"Unexpected end of input: expected {expected} bytes, got {available}"
        )
        self.expected = expected
        self.available = available


class TrailingBytesError(FormatError):
    """A subsection payload was not fully consumed by its decoder."""


class InvalidIndexMapError(FormatError):
    """Index map entries are not in strictly ascending index order."""


class InvalidUtf8Error(FormatError):
    """A name is not valid UTF-8."""


class PayloadTooLargeError(FormatError):
    """A declared payload length exceeds the caller's limit."""
