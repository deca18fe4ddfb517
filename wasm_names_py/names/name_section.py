"""
Name section subsections: the tagged union and its framing.

Each subsection on the wire is:
    varuint7   name_type
    varuint32  name_payload_len
    bytes      name_payload

Known types are decoded into their structure; any other type is kept as
raw bytes and written back unchanged.
"""

from dataclasses import dataclass
from typing import BinaryIO, Iterable, List, Optional, Union

from ..errors import PayloadTooLargeError, TrailingBytesError
from ..io.binary_stream import BinaryStream, MAX_VAR_UINT7, check_var_uint7
from .structures import (
    NameType, NamePayload,
    ModuleNameSection, FunctionNameSection, LocalNameSection
)


_PAYLOAD_TYPES = {
    NameType.MODULE: ModuleNameSection,
    NameType.FUNCTION: FunctionNameSection,
    NameType.LOCAL: LocalNameSection,
}

StreamSource = Union[BinaryStream, bytes, bytearray, BinaryIO]


def _as_stream(source: StreamSource) -> BinaryStream:
    if isinstance(source, BinaryStream):
        return source
    return BinaryStream(source)


@dataclass
class NameSection:
    """
    One subsection of the "name" custom section.

    Exactly one form is active, selected by `name_type`:
        0 -> ModuleNameSection
        1 -> FunctionNameSection
        2 -> LocalNameSection
        anything else -> the verbatim payload bytes (unparsed)
    """
    name_type: int
    payload: NamePayload

    def __post_init__(self):
        if isinstance(self.name_type, bool) or not isinstance(self.name_type, int):
            raise TypeError(f"name_type must be an int, not {type(self.name_type).__name__}")
        if not 0 <= self.name_type <= MAX_VAR_UINT7:
            raise ValueError(f"name_type out of range: {self.name_type}")
        self.name_type = int(self.name_type)

        expected = _PAYLOAD_TYPES.get(self.name_type, bytes)
        if expected is bytes and isinstance(self.payload, bytearray):
            self.payload = bytes(self.payload)
        if not isinstance(self.payload, expected):
            raise ValueError(
                f"Name type {self.name_type} requires a {expected.__name__} payload, "
                f"got {type(self.payload).__name__}"
            )

    # ========== Constructors ==========

    @classmethod
    def module(cls, section: Union[ModuleNameSection, str, bytes]) -> 'NameSection':
        """Create a module name subsection from a section or a plain name."""
        if not isinstance(section, ModuleNameSection):
            section = ModuleNameSection(section)
        return cls(NameType.MODULE, section)

    @classmethod
    def function(cls, section: Optional[FunctionNameSection] = None) -> 'NameSection':
        return cls(NameType.FUNCTION, section if section is not None else FunctionNameSection())

    @classmethod
    def local(cls, section: Optional[LocalNameSection] = None) -> 'NameSection':
        return cls(NameType.LOCAL, section if section is not None else LocalNameSection())

    @classmethod
    def unparsed(cls, name_type: int, name_payload: bytes) -> 'NameSection':
        """Create a subsection of a type this codec does not interpret."""
        if name_type in _PAYLOAD_TYPES:
            raise ValueError(f"Name type {name_type} is not an unparsed type")
        return cls(name_type, name_payload)

    # ========== Accessors ==========

    @property
    def is_unparsed(self) -> bool:
        return self.name_type not in _PAYLOAD_TYPES

    @property
    def kind(self) -> str:
        """Short name of the active form."""
        if self.is_unparsed:
            return "unparsed"
        return NameType(self.name_type).name.lower()

    @property
    def module_name(self) -> Optional[ModuleNameSection]:
        return self.payload if self.name_type == NameType.MODULE else None

    @property
    def function_names(self) -> Optional[FunctionNameSection]:
        return self.payload if self.name_type == NameType.FUNCTION else None

    @property
    def local_names(self) -> Optional[LocalNameSection]:
        return self.payload if self.name_type == NameType.LOCAL else None

    @property
    def name_payload(self) -> Optional[bytes]:
        """Raw payload of an unparsed subsection."""
        return self.payload if self.is_unparsed else None

    # ========== Serialization ==========

    @classmethod
    def read(
        cls,
        source: StreamSource,
        strict: bool = True,
        max_payload_len: Optional[int] = None
    ) -> 'NameSection':
        """
        Read one subsection.

        Args:
            source: Stream (or bytes) positioned at the name_type byte
            strict: Decode known types from exactly the declared payload and
                    reject leftover bytes. When False, the subsection decoder
                    reads straight from the stream and the declared length is
                    only used for unparsed types.
            max_payload_len: Optional upper bound on the declared length

        Returns:
            The decoded subsection

        Raises:
            FormatError: On malformed, truncated or oversized input
        """
        stream = _as_stream(source)
        return cls._read_after_type(stream, stream.read_var_uint7(), strict, max_payload_len)

    @classmethod
    def _read_after_type(
        cls,
        stream: BinaryStream,
        name_type: int,
        strict: bool,
        max_payload_len: Optional[int]
    ) -> 'NameSection':
        """Read the length and payload of a subsection whose type is known."""
        name_payload_len = stream.read_var_uint32()
        if max_payload_len is not None and name_payload_len > max_payload_len:
            raise PayloadTooLargeError(
                f"Name subsection {name_type} declares {name_payload_len} bytes, "
                f"limit is {max_payload_len}"
            )

        payload_type = _PAYLOAD_TYPES.get(name_type)
        if payload_type is None:
            return cls(name_type, stream.read_bytes(name_payload_len))

        if not strict:
            return cls(name_type, payload_type.read(stream))

        with BinaryStream(stream.read_bytes(name_payload_len)) as payload_stream:
            payload = payload_type.read(payload_stream)
            if not payload_stream.at_end:
                raise TrailingBytesError(
                    f"Name subsection {name_type} has {payload_stream.remaining} "
                    f"unread bytes out of {name_payload_len}"
                )
        return cls(name_type, payload)

    def write(self, stream: BinaryStream) -> None:
        """Write this subsection: type, payload length, payload."""
        if self.is_unparsed:
            name_payload = self.payload
        else:
            with BinaryStream() as buffer:
                self.payload.write(buffer)
                name_payload = buffer.get_data()

        stream.write_var_uint7(self.name_type)
        stream.write_var_uint32(len(name_payload))
        stream.write_bytes(name_payload)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        strict: bool = True,
        max_payload_len: Optional[int] = None
    ) -> 'NameSection':
        """Decode a buffer holding exactly one subsection."""
        with BinaryStream(data) as stream:
            section = cls.read(stream, strict=strict, max_payload_len=max_payload_len)
            if not stream.at_end:
                raise TrailingBytesError(
                    f"{stream.remaining} bytes follow the name subsection"
                )
        return section

    def to_bytes(self) -> bytes:
        with BinaryStream() as stream:
            self.write(stream)
            return stream.get_data()


def read_name_section(
    source: StreamSource,
    strict: bool = True,
    max_payload_len: Optional[int] = None
) -> NameSection:
    """Read one name subsection from a stream."""
    return NameSection.read(source, strict=strict, max_payload_len=max_payload_len)


def write_name_section(stream: BinaryStream, section: NameSection) -> None:
    """Write one name subsection to a stream."""
    section.write(stream)


def read_name_sections(
    data: StreamSource,
    strict: bool = True,
    max_payload_len: Optional[int] = None
) -> List[NameSection]:
    """
    Read every subsection of a "name" custom section payload.

    Subsections are returned in the order found; duplicates are kept.

    Args:
        data: Payload of the custom section (after its name)
        strict: See NameSection.read
        max_payload_len: See NameSection.read

    Returns:
        The subsections in order
    """
    stream = _as_stream(data)
    sections = []
    while True:
        # End of input is detected by reading, so pipes and sockets work
        name_type = stream.try_read_byte()
        if name_type is None:
            return sections
        sections.append(NameSection._read_after_type(
            stream, check_var_uint7(name_type), strict, max_payload_len
        ))


def write_name_sections(sections: Iterable[NameSection]) -> bytes:
    """Encode subsections back into a "name" custom section payload."""
    with BinaryStream() as stream:
        for section in sections:
            section.write(stream)
        return stream.get_data()
