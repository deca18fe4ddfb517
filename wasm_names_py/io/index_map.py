"""
Ordered index map and its binary codec.

An IndexMap associates unique unsigned 32-bit indices with values and always
iterates in ascending index order. The same container backs function name
tables (IndexMap[str]) and local name tables (IndexMap[IndexMap[str]]).

Wire format:
    varuint32 count
    count x (varuint32 index, value)
with indices strictly ascending.
"""

from typing import (
    Callable, Dict, Iterable, Iterator, Mapping, MutableMapping, Optional, Tuple, TypeVar, Union
)

from ..errors import InvalidIndexMapError
from .binary_stream import BinaryStream, MAX_VAR_UINT32

T = TypeVar('T')


class IndexMap(MutableMapping[int, T]):
    """
    Mapping from unsigned 32-bit index to value, ordered by index.

    Inserting under an existing index replaces the previous value.
    """

    def __init__(self, entries: Union[Mapping[int, T], Iterable[Tuple[int, T]], None] = None):
        self._entries: Dict[int, T] = {}
        if entries is not None:
            if isinstance(entries, Mapping):
                entries = entries.items()
            for index, value in entries:
                self[index] = value

    def insert(self, index: int, value: T) -> Optional[T]:
        """
        Insert a value, returning the value previously stored at `index`.

        Args:
            index: Index in the range 0 to 2**32 - 1
            value: Value to store

        Returns:
            The replaced value, or None if the index was free
        """
        previous = self._entries.get(_check_index(index))
        self._entries[index] = value
        return previous

    def __getitem__(self, index: int) -> T:
        return self._entries[index]

    def __setitem__(self, index: int, value: T) -> None:
        self._entries[_check_index(index)] = value

    def __delitem__(self, index: int) -> None:
        del self._entries[index]

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, index: object) -> bool:
        return index in self._entries

    def __repr__(self) -> str:
        items = ', '.join(f"{index}: {value!r}" for index, value in self.items())
        return f"IndexMap({{{items}}})"


def _check_index(index: int) -> int:
    """Validate an index key."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"Index must be an int, not {type(index).__name__}")
    if not 0 <= index <= MAX_VAR_UINT32:
        raise ValueError(f"Index out of range: {index}")
    return index


def read_index_map(
    stream: BinaryStream,
    read_value: Callable[[BinaryStream], T]
) -> IndexMap[T]:
    """
    Read an index map.

    Entries are decoded one at a time, so a corrupt count fails on the first
    missing entry instead of allocating up front.

    Args:
        stream: Stream positioned at the count field
        read_value: Function reading one value from the stream

    Returns:
        The decoded map

    Raises:
        InvalidIndexMapError: If indices are duplicated or out of order
    """
    count = stream.read_var_uint32()
    result: IndexMap[T] = IndexMap()
    previous = -1

    for _ in range(count):
        index = stream.read_var_uint32()
        if index <= previous:
            raise InvalidIndexMapError(
                f"Index map entries out of order: {index} follows {previous}"
            )
        result[index] = read_value(stream)
        previous = index

    return result


def write_index_map(
    stream: BinaryStream,
    index_map: IndexMap[T],
    write_value: Callable[[BinaryStream, T], None]
) -> None:
    """
    Write an index map in ascending index order.

    Args:
        stream: Destination stream
        index_map: Map to write
        write_value: Function writing one value to the stream
    """
    stream.write_var_uint32(len(index_map))
    for index, value in index_map.items():
        stream.write_var_uint32(index)
        write_value(stream, value)
