"""
wasm-names
A codec for the WebAssembly "name" custom section.

Reads module, function and local name subsections into dataclasses and writes
them back byte for byte, passing unknown subsection types through unchanged.
"""

__version__ = "0.1.0"

from .config import Config
from .errors import (
    FormatError, MalformedVarintError, TruncatedInputError, TrailingBytesError,
    InvalidIndexMapError, InvalidUtf8Error, PayloadTooLargeError
)
from .io.index_map import IndexMap
from .names import (
    NameType, NameMap, NameSection,
    ModuleNameSection, FunctionNameSection, LocalNameSection,
    read_name_section, write_name_section,
    read_name_sections, write_name_sections
)

__all__ = [
    'Config', 'IndexMap',
    'NameType', 'NameMap', 'NameSection',
    'ModuleNameSection', 'FunctionNameSection', 'LocalNameSection',
    'read_name_section', 'write_name_section',
    'read_name_sections', 'write_name_sections',
    'FormatError', 'MalformedVarintError', 'TruncatedInputError', 'TrailingBytesError',
    'InvalidIndexMapError', 'InvalidUtf8Error', 'PayloadTooLargeError',
    '__version__',
]
