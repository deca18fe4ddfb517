"""
Binary stream reader/writer for the WebAssembly binary encoding.

This module provides a BinaryStream class wrapping a byte stream with the
primitives the name section codec is built from: exact byte reads,
LEB128 unsigned integers of 7 and 32 bit range, and length-prefixed UTF-8
strings.
"""

from io import BytesIO
from typing import BinaryIO, Optional, Union

from ..errors import InvalidUtf8Error, MalformedVarintError, TruncatedInputError


# Largest value of each unsigned integer range
MAX_VAR_UINT7 = 0x7F
MAX_VAR_UINT32 = 0xFFFFFFFF

# A varuint32 never takes more than 5 bytes
MAX_VAR_UINT32_BYTES = 5

# Upper bound for a single read() call so a declared length never drives
# an allocation larger than the data actually present
READ_CHUNK_SIZE = 64 * 1024


class BinaryStream:
    """
    Binary stream with WebAssembly primitive encoders and decoders.
    """

    def __init__(self, data: Union[bytes, bytearray, BinaryIO, None] = None):
        """
        Initialize a BinaryStream.

        Args:
            data: Raw bytes to read, an existing binary stream, or None
                  for an empty in-memory buffer to write into
        """
        if data is None:
            self._stream: BinaryIO = BytesIO()
        elif isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(bytes(data))
        else:
            self._stream = data

    # ========== Position and Length ==========

    @property
    def position(self) -> int:
        """Get current stream position."""
        return self._stream.tell()

    @position.setter
    def position(self, value: int) -> None:
        """Set stream position."""
        self._stream.seek(value)

    @property
    def length(self) -> int:
        """Get stream length."""
        current = self._stream.tell()
        self._stream.seek(0, 2)  # Seek to end
        length = self._stream.tell()
        self._stream.seek(current)  # Restore position
        return length

    @property
    def remaining(self) -> int:
        """Number of bytes between the current position and the end."""
        return self.length - self.position

    @property
    def at_end(self) -> bool:
        """Whether every byte of the stream has been consumed."""
        return self.remaining <= 0

    # ========== Primitive Readers ==========

    def read_bytes(self, count: int) -> bytes:
        """
        Read exactly `count` raw bytes.

        Reads in bounded chunks, so a corrupt length only costs as much
        memory as the stream really holds.

        Raises:
            TruncatedInputError: If the stream ends first
        """
        if count < 0:
            raise ValueError(f"Negative read length: {count}")

        chunks = []
        received = 0
        while received < count:
            chunk = self._stream.read(min(count - received, READ_CHUNK_SIZE))
            if not chunk:
                raise TruncatedInputError(count, received)
            chunks.append(chunk)
            received += len(chunk)
        return b''.join(chunks)

    def read_byte(self) -> int:
        """Read an unsigned byte."""
        return self.read_bytes(1)[0]

    def try_read_byte(self) -> Optional[int]:
        """Read an unsigned byte, or return None at end of stream.

        Works on streams that cannot seek, such as pipes and sockets.
        """
        data = self._stream.read(1)
        return data[0] if data else None

    def read_var_uint7(self) -> int:
        """
        Read a varuint7: a single byte whose high bit must be clear.

        Raises:
            MalformedVarintError: If the byte is 0x80 or above
        """
        return check_var_uint7(self.read_byte())

    def read_var_uint32(self) -> int:
        """
        Read an unsigned LEB128 integer limited to 32 bits.

        Raises:
            MalformedVarintError: If the encoding is longer than 5 bytes or
                                  the value does not fit in 32 bits
        """
        result = 0
        shift = 0
        for count in range(1, MAX_VAR_UINT32_BYTES + 1):
            b = self.read_byte()
            if count == MAX_VAR_UINT32_BYTES and b & 0xF0:
                # Last byte carries only the top 4 bits and no continuation
                raise MalformedVarintError(
                    f"Invalid varuint32: final byte 0x{b:02X} overflows 32 bits"
                )
            result |= (b & 0x7F) << shift
            if (b & 0x80) == 0:
                return result
            shift += 7
        raise MalformedVarintError("Invalid varuint32: too many bytes")

    def read_string(self) -> str:
        """
        Read a length-prefixed UTF-8 string.

        Raises:
            InvalidUtf8Error: If the bytes are not valid UTF-8
        """
        length = self.read_var_uint32()
        data = self.read_bytes(length)
        try:
            return data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidUtf8Error(f"Name is not valid UTF-8: {e}") from e

    # ========== Write Methods ==========

    def write_bytes(self, data: bytes) -> None:
        """Write raw bytes."""
        self._stream.write(data)

    def write_byte(self, value: int) -> None:
        """Write an unsigned byte."""
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Byte out of range: {value}")
        self.write_bytes(bytes((value,)))

    def write_var_uint7(self, value: int) -> None:
        """Write a varuint7 (a single byte in the range 0-127)."""
        if not 0 <= value <= MAX_VAR_UINT7:
            raise ValueError(f"varuint7 out of range: {value}")
        self.write_bytes(bytes((value,)))

    def write_var_uint32(self, value: int) -> None:
        """Write an unsigned LEB128 integer limited to 32 bits."""
        if not 0 <= value <= MAX_VAR_UINT32:
            raise ValueError(f"varuint32 out of range: {value}")
        self.write_bytes(encode_var_uint32(value))

    def write_string(self, value: str) -> None:
        """Write a length-prefixed UTF-8 string."""
        if not isinstance(value, str):
            raise TypeError(f"Name must be a string, not {type(value).__name__}")
        data = value.encode('utf-8')
        self.write_var_uint32(len(data))
        self.write_bytes(data)

    # ========== Utility Methods ==========

    def get_data(self) -> bytes:
        """Get the underlying data."""
        current = self.position
        self.position = 0
        data = self._stream.read()
        self.position = current
        return data

    def dispose(self) -> None:
        """Close the stream."""
        self._stream.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.dispose()


def check_var_uint7(value: int) -> int:
    """Validate a byte read as a varuint7."""
    if value & 0x80:
        raise MalformedVarintError(f"Invalid varuint7 byte: 0x{value:02X}")
    return value


def encode_var_uint32(value: int) -> bytes:
    """
    Encode an unsigned integer as LEB128.

    Args:
        value: Integer in the range 0 to 2**32 - 1

    Returns:
        The encoded bytes (1 to 5 of them)
    """
    if not 0 <= value <= MAX_VAR_UINT32:
        raise ValueError(f"varuint32 out of range: {value}")

    result = bytearray()
    while True:
        b = value & 0x7F
        value >>= 7
        if value:
            result.append(b | 0x80)
        else:
            result.append(b)
            return bytes(result)
