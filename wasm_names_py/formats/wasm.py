"""
WebAssembly module reader for locating custom sections.

Only the top-level section framing is parsed. This is enough to pull the
"name" custom section out of a module and to splice a re-encoded one back in.
"""

from typing import List, Optional

from ..errors import FormatError, TruncatedInputError
from ..io.binary_stream import BinaryStream, encode_var_uint32
from .wasm_structures import (
    WasmSection,
    WASM_MAGIC, WASM_VERSION, WASM_HEADER_SIZE, WasmSectionId
)


class WasmModule(BinaryStream):
    """
    Section index of a WebAssembly binary.
    """

    def __init__(self, data: bytes):
        super().__init__(data)
        self._data = bytes(data)
        self._sections: List[WasmSection] = []
        self._load()

    def _load(self) -> None:
        """Load WebAssembly section headers."""
        self.position = 0

        # Read magic
        magic = int.from_bytes(self.read_bytes(4), 'little')
        if magic != WASM_MAGIC:
            raise FormatError(f"Invalid WebAssembly magic: 0x{magic:08X}")

        # Read version
        version = int.from_bytes(self.read_bytes(4), 'little')
        if version != WASM_VERSION:
            raise FormatError(f"Unsupported WebAssembly version: {version}")

        # Parse sections
        while self.position < len(self._data):
            self._sections.append(self._read_section())

    def _read_section(self) -> WasmSection:
        """Read a WebAssembly section header and skip its content."""
        section = WasmSection()
        section.header_offset = self.position
        section.id = self.read_byte()
        section.size = self.read_var_uint32()
        section.offset = self.position

        if section.end > len(self._data):
            raise TruncatedInputError(section.size, len(self._data) - section.offset)

        # For custom sections, read the name
        if section.id == WasmSectionId.CUSTOM:
            section.name = self.read_string()
            section.payload_offset = self.position
            if section.payload_offset > section.end:
                raise FormatError("Custom section name overruns the section")

        # Skip section content
        self.position = section.end
        return section

    @property
    def sections(self) -> List[WasmSection]:
        return list(self._sections)

    @property
    def custom_sections(self) -> List[WasmSection]:
        return [s for s in self._sections if s.id == WasmSectionId.CUSTOM]

    def find_custom_section(self, name: str) -> Optional[bytes]:
        """
        Get the payload of the first custom section with the given name.

        Args:
            name: Custom section name, e.g. "name"

        Returns:
            The bytes following the section name, or None if absent
        """
        for section in self.custom_sections:
            if section.name == name:
                return self._data[section.payload_offset:section.end]
        return None

    def replace_custom_section(self, name: str, payload: bytes) -> bytes:
        """
        Rebuild the module with a custom section's payload replaced.

        The first custom section called `name` is rewritten in place; every
        other section is copied unchanged. If there is no such section, a
        new one is appended at the end of the module.

        Returns:
            The new module bytes
        """
        with BinaryStream() as out:
            out.write_bytes(self._data[:WASM_HEADER_SIZE])
            replaced = False
            for section in self._sections:
                if not replaced and section.id == WasmSectionId.CUSTOM and section.name == name:
                    _write_custom_section(out, name, payload)
                    replaced = True
                else:
                    out.write_bytes(self._data[section.header_offset:section.end])
            if not replaced:
                _write_custom_section(out, name, payload)
            return out.get_data()


def _write_custom_section(stream: BinaryStream, name: str, payload: bytes) -> None:
    encoded_name = name.encode('utf-8')
    content_size = len(encode_var_uint32(len(encoded_name))) + len(encoded_name) + len(payload)
    stream.write_byte(WasmSectionId.CUSTOM)
    stream.write_var_uint32(content_size)
    stream.write_string(name)
    stream.write_bytes(payload)
