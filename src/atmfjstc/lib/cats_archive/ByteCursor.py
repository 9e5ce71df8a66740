"""
This module contains the `ByteCursor` class, a forward-only view of a `BinaryReader` restricted to the big-endian ints,
magic and length-prefixed strings used throughout the CATS format.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from atmfjstc.lib.binary_utils.BinaryReader import BinaryReader, BinaryReaderMissingDataError, \
    BinaryReaderReadPastEndError, BinaryReaderWrongMagicError

from atmfjstc.lib.cats_archive.errors import CatsOutOfDataError, CatsNonASCIIStringError, CatsBadMagicError


class ByteCursor:
    """
    This class reads CATS-encoded data sequentially from an in-memory buffer.

    It exposes only forward reads: the underlying reader's seek functionality is not available. Reading past the end
    of the buffer raises `CatsOutOfDataError`.
    """

    _reader: BinaryReader

    def __init__(self, data: bytes):
        if not isinstance(data, bytes):
            raise TypeError("Input to ByteCursor must be bytes")

        self._reader = BinaryReader(data, big_endian=True)

    def tell(self) -> int:
        return self._reader.tell()

    def bytes_remaining(self) -> int:
        return self._reader.bytes_remaining()

    def expect_magic(self, magic: bytes, meaning: Optional[str] = None):
        """
        Raises:
            CatsBadMagicError: If the data does not start with `magic`.
            CatsOutOfDataError: If the buffer is shorter than the magic.
        """
        try:
            with _translate_out_of_data():
                self._reader.expect_magic(magic, meaning)
        except BinaryReaderWrongMagicError as e:
            raise CatsBadMagicError(e.expected_magic, e.found_magic) from e

    def read_int(self, n_bytes: int, meaning: Optional[str] = None, signed: bool = False) -> int:
        with _translate_out_of_data():
            return self._reader.read_fixed_size_int(n_bytes, meaning, signed=signed)

    def read_int8(self, meaning: Optional[str] = None) -> int:
        return self.read_int(1, meaning, signed=True)

    def read_uint8(self, meaning: Optional[str] = None) -> int:
        return self.read_int(1, meaning)

    def read_uint16(self, meaning: Optional[str] = None) -> int:
        return self.read_int(2, meaning)

    def read_int32(self, meaning: Optional[str] = None) -> int:
        return self.read_int(4, meaning, signed=True)

    def read_length_prefixed_ascii_string(self, meaning: Optional[str] = None) -> str:
        """
        Reads a string preceded by a one-byte length and decodes it as strict ASCII.

        Raises:
            CatsOutOfDataError: If the buffer ends before the length or the full string could be read.
            CatsNonASCIIStringError: If any byte in the string is outside the 7-bit ASCII range.
        """

        start_position = self.tell()

        with _translate_out_of_data():
            raw_value = self._reader.read_length_prefixed_bytes(meaning, length_bytes=1)

        try:
            return raw_value.decode('ascii')
        except UnicodeDecodeError as e:
            raise CatsNonASCIIStringError(start_position, raw_value, meaning) from e


@contextmanager
def _translate_out_of_data() -> Iterator[None]:
    try:
        yield
    except BinaryReaderReadPastEndError as e:
        raise CatsOutOfDataError(e.position, e.expected_length, e.actual_length, e.meaning) from e
    except BinaryReaderMissingDataError as e:
        raise CatsOutOfDataError(e.position, e.expected_length, 0, e.meaning) from e
