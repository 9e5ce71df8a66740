"""
Compression methods for CATS file entries.

Each file entry in a CATS archive records, in a single byte, the compression method that was applied to its payload.
This module maps those bytes to `CatsCompression` objects, which know how to wrap a stream so as to compress or
decompress data on the fly.

The format defines two methods:

- ``0xFF``: `NONE`, the payload is stored as-is
- ``0xFE``: `GZIP`, the payload is a complete GZip stream

Readers can be taught further methods by building their own `CompressionRegistry` and passing it to `CatsArchive`::

    registry = CompressionRegistry(DEFAULT_COMPRESSIONS)
    registry.register(CatsCompression(
        'bzip2', 0xFD, lambda sink: bz2.BZ2File(sink, 'wb'), lambda source: bz2.BZ2File(source, 'rb')
    ))
"""

from dataclasses import dataclass
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, Optional
from gzip import GzipFile

from atmfjstc.lib.cats_archive.errors import CatsUnknownCodecError


StreamTransform = Callable[[BinaryIO], BinaryIO]


KEY_NONE = 0xFF
KEY_GZIP = 0xFE


@dataclass(frozen=True)
class CatsCompression:
    """
    A compression method, identified in the archive by a one-byte key.

    Attributes:
        name: A human-readable name for the method (e.g. "gzip")
        key: The byte value that identifies this method in file entry headers
        compressor: A function that receives a writable binary stream (the "sink") and returns a writable stream
            through which uncompressed data should be written. Closing the returned stream must flush the compressed
            data to the sink.
        decompressor: A function that receives a readable binary stream containing compressed data and returns a
            readable stream yielding the uncompressed data.
    """

    name: str
    key: int
    compressor: StreamTransform
    decompressor: StreamTransform

    def __post_init__(self):
        if not (0 <= self.key <= 0xFF):
            raise ValueError(f"Compression key must fit in a byte, is {self.key}")

    def compress(self, sink: BinaryIO) -> BinaryIO:
        return self.compressor(sink)

    def decompress(self, source: BinaryIO) -> BinaryIO:
        return self.decompressor(source)

    def __repr__(self) -> str:
        return f"CatsCompression({self.name}, 0x{self.key:02x})"


def _identity(stream: BinaryIO) -> BinaryIO:
    return stream


NONE = CatsCompression('none', KEY_NONE, _identity, _identity)

GZIP = CatsCompression(
    'gzip', KEY_GZIP,
    lambda sink: GzipFile(fileobj=sink, mode='wb'),
    lambda source: GzipFile(fileobj=source, mode='rb'),
)


class CompressionRegistry:
    """
    A mapping from compression keys to `CatsCompression` objects.
    """

    _by_key: Dict[int, CatsCompression]

    def __init__(self, compressions: Optional[Iterable[CatsCompression]] = None):
        self._by_key = dict()

        for compression in (compressions or ()):
            self.register(compression)

    def register(self, compression: CatsCompression, replace: bool = False) -> 'CompressionRegistry':
        """
        Adds a compression method to the registry.

        Args:
            compression: The method to add.
            replace: Whether to allow replacing a method already registered under the same key.

        Returns:
            The registry itself, for chaining.
        """
        if (compression.key in self._by_key) and not replace:
            raise ValueError(
                f"Compression key 0x{compression.key:02x} is already taken by {self._by_key[compression.key]!r}"
            )

        self._by_key[compression.key] = compression

        return self

    def resolve(self, key: int, path: Optional[str] = None) -> CatsCompression:
        """
        Gets the compression method for a given key.

        Args:
            key: The key, as read from a file entry header.
            path: The path of the entry being decoded, if any. It is used in the text of the exception.

        Raises:
            CatsUnknownCodecError: If no method is registered for that key.
        """
        compression = self._by_key.get(key)
        if compression is None:
            raise CatsUnknownCodecError(key, path)

        return compression

    def __contains__(self, key: int) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[CatsCompression]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)


DEFAULT_COMPRESSIONS = CompressionRegistry([NONE, GZIP])
"""The compression methods defined by the CATS format. Do not register extra methods here; make a copy instead."""
