"""
Name subsection structure definitions.

Each known subsection of the "name" custom section owns exactly the payload
for its tag and knows how to read and write it.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

from ..io.binary_stream import BinaryStream
from ..io.index_map import IndexMap, read_index_map, write_index_map


class NameType(IntEnum):
    """Name subsection IDs."""
    MODULE = 0
    FUNCTION = 1
    LOCAL = 2


# A map from indices to names
NameMap = IndexMap[str]


def check_name(name: str) -> str:
    """Ensure a name is a string that can be encoded as UTF-8."""
    if not isinstance(name, str):
        raise TypeError(f"Name must be a string, not {type(name).__name__}")
    try:
        name.encode('utf-8')
    except UnicodeEncodeError as e:
        raise ValueError(f"Name cannot be encoded as UTF-8: {name!r}") from e
    return name


def read_name_map(stream: BinaryStream) -> NameMap:
    """Read a map from indices to names."""
    return read_index_map(stream, BinaryStream.read_string)


def write_name_map(stream: BinaryStream, names: NameMap) -> None:
    """Write a map from indices to names."""
    write_index_map(stream, names, BinaryStream.write_string)


@dataclass
class ModuleNameSection:
    """The name of this module."""
    name: str = ""

    def __post_init__(self):
        if isinstance(self.name, (bytes, bytearray)):
            self.name = bytes(self.name).decode('utf-8')
        check_name(self.name)

    @classmethod
    def read(cls, stream: BinaryStream) -> 'ModuleNameSection':
        return cls(stream.read_string())

    def write(self, stream: BinaryStream) -> None:
        stream.write_string(self.name)


@dataclass
class FunctionNameSection:
    """The names of the functions in this module, by function index."""
    names: NameMap = field(default_factory=IndexMap)

    def __post_init__(self):
        if not isinstance(self.names, IndexMap):
            self.names = IndexMap(self.names)
        for name in self.names.values():
            check_name(name)

    @classmethod
    def read(cls, stream: BinaryStream) -> 'FunctionNameSection':
        return cls(read_name_map(stream))

    def write(self, stream: BinaryStream) -> None:
        write_name_map(stream, self.names)


@dataclass
class LocalNameSection:
    """
    The names of the local variables in this module's functions.

    Maps a function index to a map from local variable index to name.
    """
    local_names: IndexMap[NameMap] = field(default_factory=IndexMap)

    def __post_init__(self):
        if not isinstance(self.local_names, IndexMap):
            self.local_names = IndexMap(self.local_names)
        for index, names in self.local_names.items():
            if not isinstance(names, IndexMap):
                self.local_names[index] = IndexMap(names)
            for name in self.local_names[index].values():
                check_name(name)

    @classmethod
    def read(cls, stream: BinaryStream) -> 'LocalNameSection':
        return cls(read_index_map(stream, read_name_map))

    def write(self, stream: BinaryStream) -> None:
        write_index_map(stream, self.local_names, write_name_map)


# Payload of a subsection: one of the decoded forms, or raw bytes
NamePayload = Union[ModuleNameSection, FunctionNameSection, LocalNameSection, bytes]
