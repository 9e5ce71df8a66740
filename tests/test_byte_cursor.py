import unittest

from atmfjstc.lib.cats_archive.ByteCursor import ByteCursor
from atmfjstc.lib.cats_archive.errors import CatsOutOfDataError, CatsNonASCIIStringError, CatsFormatError, \
    CatsBadMagicError


class ByteCursorIntTest(unittest.TestCase):
    def test_big_endian_ints(self):
        cursor = ByteCursor(b'\x7f\x01\x02\x00\x00\x01\x00')

        self.assertEqual(cursor.read_uint8(), 0x7f)
        self.assertEqual(cursor.read_uint16(), 0x0102)
        self.assertEqual(cursor.read_int32(), 0x100)
        self.assertEqual(cursor.tell(), 7)
        self.assertEqual(cursor.bytes_remaining(), 0)

    def test_signedness(self):
        cursor = ByteCursor(b'\xff\xff\xff\xff\xff\xff')

        self.assertEqual(cursor.read_uint8(), 255)
        self.assertEqual(cursor.read_int8(), -1)
        self.assertEqual(cursor.read_int32(), -1)

    def test_out_of_data(self):
        cursor = ByteCursor(b'\x00\x01\x02')
        cursor.read_uint8()

        with self.assertRaises(CatsOutOfDataError) as ctx:
            cursor.read_int32('offset')

        self.assertEqual(ctx.exception.position, 1)
        self.assertEqual(ctx.exception.expected_length, 4)
        self.assertEqual(ctx.exception.actual_length, 2)
        self.assertIn('offset', str(ctx.exception))
        self.assertIsInstance(ctx.exception, CatsFormatError)

    def test_empty(self):
        with self.assertRaises(CatsOutOfDataError):
            ByteCursor(b'').read_uint8()

    def test_rejects_non_bytes(self):
        with self.assertRaises(TypeError):
            ByteCursor('text')


class ByteCursorStringTest(unittest.TestCase):
    def test_length_prefixed(self):
        cursor = ByteCursor(b'\x05a.txt\x00rest')

        self.assertEqual(cursor.read_length_prefixed_ascii_string(), 'a.txt')
        self.assertEqual(cursor.read_length_prefixed_ascii_string(), '')
        self.assertEqual(cursor.bytes_remaining(), 4)

    def test_truncated(self):
        cursor = ByteCursor(b'\x05abc')

        with self.assertRaises(CatsOutOfDataError) as ctx:
            cursor.read_length_prefixed_ascii_string('name')

        self.assertEqual(ctx.exception.expected_length, 5)
        self.assertEqual(ctx.exception.actual_length, 3)

    def test_missing_length(self):
        with self.assertRaises(CatsOutOfDataError):
            ByteCursor(b'').read_length_prefixed_ascii_string()

    def test_non_ascii(self):
        cursor = ByteCursor(b'\x02\xc3\xa9')

        with self.assertRaises(CatsNonASCIIStringError) as ctx:
            cursor.read_length_prefixed_ascii_string()

        self.assertEqual(ctx.exception.raw_value, b'\xc3\xa9')
        self.assertEqual(ctx.exception.position, 0)


class ByteCursorMagicTest(unittest.TestCase):
    def test_good_magic(self):
        cursor = ByteCursor(b'CATS\x01')

        cursor.expect_magic(b'CATS')

        self.assertEqual(cursor.tell(), 4)
        self.assertEqual(cursor.read_uint8(), 1)

    def test_bad_magic(self):
        with self.assertRaises(CatsBadMagicError) as ctx:
            ByteCursor(b'PK\x03\x04').expect_magic(b'CATS')

        self.assertEqual(ctx.exception.expected_magic, b'CATS')
        self.assertEqual(ctx.exception.found_magic, b'PK\x03\x04')

    def test_short_magic(self):
        with self.assertRaises(CatsOutOfDataError) as ctx:
            ByteCursor(b'CA').expect_magic(b'CATS', 'CATS magic')

        self.assertEqual(ctx.exception.expected_length, 4)
        self.assertEqual(ctx.exception.actual_length, 2)
        self.assertIn('CATS magic', str(ctx.exception))

    def test_no_magic(self):
        with self.assertRaises(CatsOutOfDataError) as ctx:
            ByteCursor(b'').expect_magic(b'CATS')

        self.assertEqual(ctx.exception.position, 0)
        self.assertEqual(ctx.exception.actual_length, 0)
