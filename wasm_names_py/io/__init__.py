"""
IO module for binary stream handling.
"""

from .binary_stream import BinaryStream, encode_var_uint32
from .index_map import IndexMap, read_index_map, write_index_map

__all__ = ['BinaryStream', 'encode_var_uint32', 'IndexMap', 'read_index_map', 'write_index_map']
