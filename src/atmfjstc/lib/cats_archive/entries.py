"""
The entries of a CATS archive.

An entry is either a `CatsFileEntry` or a `CatsDirectoryEntry`; there are no other kinds. Both are inert, immutable
data containers created by the decoder, and both report a `header_size`: the number of bytes taken up by the entry's
own header in the archive index. For directories, this includes the headers of all descendants. File payload data is
never included.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from atmfjstc.lib.cats_archive.compression import CatsCompression


FILE_HEADER_SIZE = 4 + 4 + 1
"""Size of a file entry header: offset, size and compression key"""

DIRECTORY_COUNT_SIZE = 2
"""Size of the child count that starts every directory header"""


class CatsEntry:
    """
    Base class for the two kinds of archive entries. Do not subclass this outside of this module.
    """

    __slots__ = ()

    header_size: int

    @property
    def is_file(self) -> bool:
        return isinstance(self, CatsFileEntry)

    @property
    def is_directory(self) -> bool:
        return isinstance(self, CatsDirectoryEntry)


@dataclass(frozen=True)
class CatsFileEntry(CatsEntry):
    """
    Attributes:
        offset: The start of the payload, relative to the end of the archive index (not to the start of the archive!)
        size: The length of the stored payload in bytes. For compressed entries, this is the compressed size.
        compression: The compression method applied to the payload
    """

    offset: int
    size: int
    compression: CatsCompression

    @property
    def header_size(self) -> int:
        return FILE_HEADER_SIZE


@dataclass(frozen=True, eq=False)
class CatsDirectoryEntry(CatsEntry):
    """
    Attributes:
        header_size: The size of the directory header, including the child count and all descendant headers
        entries: A read-only mapping from the names of the directory's children to their entries. The names are bare
            (no slashes). Their order is not significant.
    """

    header_size: int
    entries: Mapping[str, CatsEntry]

    def __post_init__(self):
        if not isinstance(self.entries, MappingProxyType):
            object.__setattr__(self, 'entries', MappingProxyType(dict(self.entries)))


def child_header_size(name: str, child: CatsEntry) -> int:
    """
    The number of bytes a child takes up in its parent's header: type tag, name length, name, and its own header.
    """
    return 1 + 1 + len(name) + child.header_size
