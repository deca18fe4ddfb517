"""
Container formats the name section can be extracted from.

Supports:
- WebAssembly binary modules
"""

from .wasm import WasmModule
from .wasm_structures import *

__all__ = ['WasmModule', 'WasmSection', 'WasmSectionId', 'NAME_SECTION_NAME']
