"""
WebAssembly format structure definitions.
"""

from dataclasses import dataclass
from enum import IntEnum


# WebAssembly Magic and version
WASM_MAGIC = 0x6D736100  # "\0asm"
WASM_VERSION = 1
WASM_HEADER_SIZE = 8

# Name of the custom section holding debug names
NAME_SECTION_NAME = "name"


class WasmSectionId(IntEnum):
    """WebAssembly section IDs."""
    CUSTOM = 0
    TYPE = 1
    IMPORT = 2
    FUNCTION = 3
    TABLE = 4
    MEMORY = 5
    GLOBAL = 6
    EXPORT = 7
    START = 8
    ELEMENT = 9
    CODE = 10
    DATA = 11
    DATA_COUNT = 12


@dataclass
class WasmSection:
    """WebAssembly section."""
    id: int = 0
    size: int = 0
    header_offset: int = 0  # File offset of the section id byte
    offset: int = 0  # File offset where section content starts
    name: str = ""   # For custom sections
    payload_offset: int = 0  # For custom sections, file offset after the name

    @property
    def end(self) -> int:
        """File offset just past the section content."""
        return self.offset + self.size
