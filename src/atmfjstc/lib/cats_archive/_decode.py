"""
Decoding of the CATS archive index into trees of `CatsEntry` objects.

Nested directories are decoded using an explicit work stack, so the nesting depth is only limited by the input size.
"""

import re

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from atmfjstc.lib.cats_archive.ByteCursor import ByteCursor
from atmfjstc.lib.cats_archive.compression import CompressionRegistry
from atmfjstc.lib.cats_archive.entries import CatsEntry, CatsFileEntry, CatsDirectoryEntry, DIRECTORY_COUNT_SIZE, \
    child_header_size
from atmfjstc.lib.cats_archive.errors import CatsUnknownEntryTypeError, CatsInvalidNameError, CatsNonASCIIStringError


TYPE_FILE = 0x00
TYPE_DIRECTORY = 0x01

# All printable ASCII except space, / and \
VALID_NAME_RE = re.compile(r'[\x21-\x2E\x30-\x5B\x5D-\x7E]+')


def decode_root_directory(cursor: ByteCursor, compressions: CompressionRegistry) -> CatsDirectoryEntry:
    """
    Decodes the root directory of an archive. Unlike all other entries, it is not preceded by a type byte.
    """
    return _decode_directory(cursor, '/', compressions)


def decode_entry(cursor: ByteCursor, type_tag: int, path: str, compressions: CompressionRegistry) -> CatsEntry:
    """
    Decodes an entry whose type tag and name have already been read.

    Args:
        cursor: A cursor positioned right after the entry's name.
        type_tag: The entry type that was read.
        path: The full path of the entry (with a trailing slash for directories). It is only used in the text of
            exceptions.
        compressions: The registry used to look up file compression methods.

    Returns:
        A `CatsFileEntry` or a fully populated `CatsDirectoryEntry`.

    Raises:
        CatsFormatError: Any of its subclasses, if the data is truncated or does not follow the CATS format.
    """

    if type_tag == TYPE_FILE:
        return _decode_file(cursor, path, compressions)
    if type_tag == TYPE_DIRECTORY:
        return _decode_directory(cursor, path, compressions)

    raise CatsUnknownEntryTypeError(path, type_tag)


def _decode_file(cursor: ByteCursor, path: str, compressions: CompressionRegistry) -> CatsFileEntry:
    offset = cursor.read_int32(f"offset of '{path}'")
    size = cursor.read_int32(f"size of '{path}'")
    compression_key = cursor.read_uint8(f"compression method of '{path}'")

    return CatsFileEntry(offset=offset, size=size, compression=compressions.resolve(compression_key, path))


@dataclass
class _PendingDirectory:
    path: str
    name: Optional[str]
    remaining: int
    header_size: int = DIRECTORY_COUNT_SIZE
    entries: Dict[str, CatsEntry] = field(default_factory=dict)

    def add_child(self, name: str, child: CatsEntry):
        self.entries[name] = child  # Later duplicates replace earlier ones
        self.header_size += child_header_size(name, child)


def _decode_directory(cursor: ByteCursor, path: str, compressions: CompressionRegistry) -> CatsDirectoryEntry:
    # Nested directories are walked with an explicit stack, not recursion; depth is bounded only by the data
    stack: List[_PendingDirectory] = [
        _PendingDirectory(path=path, name=None, remaining=cursor.read_uint16(f"entry count of '{path}'"))
    ]

    while True:
        current = stack[-1]

        if current.remaining == 0:
            stack.pop()
            directory = CatsDirectoryEntry(header_size=current.header_size, entries=current.entries)

            if len(stack) == 0:
                return directory

            stack[-1].add_child(current.name, directory)
            continue

        current.remaining -= 1

        type_tag = cursor.read_uint8(f"entry type in '{current.path}'")
        name = _read_name(cursor, current.path)

        if type_tag == TYPE_DIRECTORY:
            child_path = current.path + name + '/'
            stack.append(_PendingDirectory(
                path=child_path, name=name, remaining=cursor.read_uint16(f"entry count of '{child_path}'")
            ))
        else:
            current.add_child(name, decode_entry(cursor, type_tag, current.path + name, compressions))


def _read_name(cursor: ByteCursor, parent_path: str) -> str:
    try:
        name = cursor.read_length_prefixed_ascii_string(f"entry name in '{parent_path}'")
    except CatsNonASCIIStringError as e:
        raise CatsInvalidNameError(parent_path, e.raw_value.decode('ascii', errors='backslashreplace')) from e

    if VALID_NAME_RE.fullmatch(name) is None:
        raise CatsInvalidNameError(parent_path, name)

    return name
