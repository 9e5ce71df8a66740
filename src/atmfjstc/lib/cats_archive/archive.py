import logging
import os
import shutil

from io import IOBase, BytesIO
from pathlib import Path, PureWindowsPath
from typing import Union, Optional, BinaryIO, Dict, Iterator, Mapping, Tuple, AnyStr
from types import MappingProxyType

from atmfjstc.lib.file_utils.fileobj import FileObjSliceReader

from atmfjstc.lib.cats_archive.ByteCursor import ByteCursor
from atmfjstc.lib.cats_archive.compression import CompressionRegistry, DEFAULT_COMPRESSIONS
from atmfjstc.lib.cats_archive.entries import CatsEntry, CatsFileEntry, CatsDirectoryEntry
from atmfjstc.lib.cats_archive.errors import CatsUnsupportedVersionError, CatsCorruptEntryError, CatsUnsafePathError
from atmfjstc.lib.cats_archive._decode import decode_root_directory


LOG = logging.getLogger(__name__)


CATS_MAGIC = b'CATS'
CATS_VERSION = 1
SIGNATURE_SIZE = len(CATS_MAGIC) + 1

ROOT_PATH = '/'


class CatsArchive:
    """
    This class provides access to a CATS archive held in memory.

    The archive index is decoded and fully validated as soon as the object is constructed. Afterwards, all entries can
    be looked up by their absolute path:

    - Files are registered under paths like ``/docs/readme.txt``
    - Directories are registered with a trailing slash, like ``/docs/``
    - The root directory is registered as ``/``

    The content of a file entry can be read by passing it to the `open` method, or its path to `open_path`::

        archive = CatsArchive.from_file('assets.cats')

        with archive.open_path('/docs/readme.txt') as f:
            text = f.read()

    A `CatsArchive` is immutable. It never modifies its buffer and can be shared freely, including between threads.

    This class does not offer functionality for writing CATS archives.
    """

    _data: bytes
    _header_size: int
    _root: CatsDirectoryEntry
    _index: Dict[str, CatsEntry]

    def __init__(
        self, data: Union[bytes, bytearray, memoryview], compressions: CompressionRegistry = DEFAULT_COMPRESSIONS
    ):
        """
        Opens a CATS archive held in a memory buffer.

        Args:
            data: The complete archive. Mutable buffers are copied so that later changes cannot affect the archive.
            compressions: The registry used to interpret the compression methods of file entries. Only the methods
                defined by the CATS format are recognized by default.

        Raises:
            CatsFormatError: Any of its subclasses, if the archive is truncated, corrupt or not a CATS archive at all.
        """

        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError("Input to CatsArchive must be a bytes-like object. Use CatsArchive.from_file() for files.")

        self._data = data if isinstance(data, bytes) else bytes(data)

        cursor = ByteCursor(self._data)

        cursor.expect_magic(CATS_MAGIC, 'CATS magic')

        version = cursor.read_uint8('CATS version')
        if version != CATS_VERSION:
            raise CatsUnsupportedVersionError(version, CATS_VERSION)

        self._root = decode_root_directory(cursor, compressions)
        self._header_size = SIGNATURE_SIZE + self._root.header_size

        self._index = _build_index(self._root, len(self._data) - self._header_size)
        self._index[ROOT_PATH] = self._root

        LOG.debug(
            "Opened CATS archive: %d entries, %d bytes of headers, %d bytes total",
            len(self._index), self._header_size, len(self._data)
        )

    @classmethod
    def from_file(
        cls, path_or_fileobj: Union[os.PathLike, AnyStr, BinaryIO],
        compressions: CompressionRegistry = DEFAULT_COMPRESSIONS
    ) -> 'CatsArchive':
        """
        Reads a CATS archive from a file, or from an open file object.

        The archive is loaded into memory in its entirety. For a file object, reading starts from its current position.
        The file is not needed after this method returns.
        """

        if isinstance(path_or_fileobj, IOBase):
            return cls(path_or_fileobj.read(), compressions)

        with open(path_or_fileobj, 'rb') as f:
            return cls(f.read(), compressions)

    @property
    def root(self) -> CatsDirectoryEntry:
        return self._root

    @property
    def header_size(self) -> int:
        """
        The total size of the signature and index, i.e. the offset at which the payload region starts.
        """
        return self._header_size

    @property
    def data_size(self) -> int:
        """
        The size of the payload region, in bytes.
        """
        return len(self._data) - self._header_size

    @property
    def entries(self) -> Mapping[str, CatsEntry]:
        """
        A read-only view of all the entries in the archive, by absolute path.
        """
        return MappingProxyType(self._index)

    def lookup(self, path: str) -> Optional[CatsEntry]:
        """
        Gets the entry registered at exactly the given path (no normalization is performed), or None if there is none.
        """
        return self._index.get(path)

    def open(self, entry: CatsFileEntry) -> BinaryIO:
        """
        Opens the content of a file entry for reading.

        Args:
            entry: A file entry obtained from this archive. Entries from other archives will give meaningless results.

        Returns:
            A binary file object producing the decompressed content. If the payload turns out to be corrupt, the
            errors will only occur when reading from it, and will be those of the decompressor (usually an `OSError`
            or `EOFError`).
        """

        if not isinstance(entry, CatsFileEntry):
            raise TypeError(f"Only file entries can be opened, got {entry!r}")

        return entry.compression.decompress(
            FileObjSliceReader(BytesIO(self._data), self._header_size + entry.offset, entry.size)
        )

    def open_path(self, path: str) -> Optional[BinaryIO]:
        """
        Like `open`, but looks up the entry by path. Returns None if the path does not exist or is a directory.
        """

        entry = self.lookup(path)
        if not isinstance(entry, CatsFileEntry):
            return None

        return self.open(entry)

    def read(self, path: str) -> Optional[bytes]:
        """
        Reads the full decompressed content of the file at a given path. Returns None under the same conditions as
        `open_path`.
        """

        stream = self.open_path(path)
        if stream is None:
            return None

        with stream:
            return stream.read()

    def files(self) -> Iterator[Tuple[str, CatsFileEntry]]:
        for path, entry in self._index.items():
            if isinstance(entry, CatsFileEntry):
                yield path, entry

    def directories(self) -> Iterator[Tuple[str, CatsDirectoryEntry]]:
        for path, entry in self._index.items():
            if isinstance(entry, CatsDirectoryEntry):
                yield path, entry

    def extract_all(self, destination: Union[os.PathLike, str]):
        """
        Extracts all directories and files in the archive below a destination directory.

        The destination and any missing directories are created. Existing files are overwritten.

        Raises:
            CatsUnsafePathError: If any entry would be written outside of the destination, e.g. because its path
                contains ``.`` or ``..`` components, or names that carry a drive or root on Windows (``C:evil``).
                Such entries are valid as far as the format is concerned. The check is done for all entries before
                anything is written.
        """

        destination = Path(destination)
        resolved_destination = destination.resolve()

        for path in self._index:
            if any(_is_unsafe_segment(part) for part in path.split('/') if part != ''):
                raise CatsUnsafePathError(path)

            resolved_target = (resolved_destination / path.strip('/')).resolve()
            if resolved_target != resolved_destination and resolved_destination not in resolved_target.parents:
                raise CatsUnsafePathError(path)

        destination.mkdir(parents=True, exist_ok=True)

        for path, _ in self.directories():
            (destination / path.strip('/')).mkdir(parents=True, exist_ok=True)

        for path, entry in self.files():
            target = destination / path.lstrip('/')
            LOG.debug("Unpacking %s", target)

            target.parent.mkdir(parents=True, exist_ok=True)

            with self.open(entry) as f_in, open(target, 'wb') as f_out:
                shutil.copyfileobj(f_in, f_out)

    def __contains__(self, path: str) -> bool:
        return path in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)


def _build_index(root: CatsDirectoryEntry, data_size: int) -> Dict[str, CatsEntry]:
    index = dict()

    stack = [(ROOT_PATH, root)]

    while len(stack) > 0:
        prefix, directory = stack.pop()

        for name, entry in directory.entries.items():
            if isinstance(entry, CatsDirectoryEntry):
                path = prefix + name + '/'
                index[path] = entry
                stack.append((path, entry))
                continue

            path = prefix + name

            if entry.offset < 0:
                raise CatsCorruptEntryError(path, f"negative offset {entry.offset}")
            if entry.size <= 0:
                raise CatsCorruptEntryError(path, f"size must be positive, is {entry.size}")
            if entry.offset + entry.size > data_size:
                raise CatsCorruptEntryError(
                    path,
                    f"data at {entry.offset}..{entry.offset + entry.size} extends past end of payload region "
                    f"({data_size} bytes)"
                )

            index[path] = entry

    return index


def _is_unsafe_segment(name: str) -> bool:
    if name in ('.', '..'):
        return True

    windows_path = PureWindowsPath(name)

    return windows_path.drive != '' or windows_path.anchor != ''
