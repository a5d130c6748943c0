import io
import unittest

from bmpread import readers
from bmpread.errors import BMPIOError

# Two little-endian words: 0x04030201, 0x80706050
TEST_DATA = bytes([0x01, 0x02, 0x03, 0x04, 0x50, 0x60, 0x70, 0x80])


class BrokenStream(io.RawIOBase):
    def readable(self):
        return True

    def read(self, size=-1):
        raise OSError("device went away")


class TestReaders(unittest.TestCase):

    def test_read_little_uint32(self):
        fp = io.BytesIO(TEST_DATA)
        self.assertEqual(0x04030201, readers.read_little_uint32(fp))
        self.assertEqual(0x80706050, readers.read_little_uint32(fp))
        with self.assertRaises(BMPIOError):
            readers.read_little_uint32(fp)

    def test_read_little_int32(self):
        fp = io.BytesIO(TEST_DATA)
        self.assertEqual(67305985, readers.read_little_int32(fp))
        self.assertEqual(-2140118960, readers.read_little_int32(fp))
        with self.assertRaises(BMPIOError):
            readers.read_little_int32(fp)

    def test_read_little_uint16(self):
        fp = io.BytesIO(TEST_DATA)
        self.assertEqual(0x0201, readers.read_little_uint16(fp))
        self.assertEqual(0x0403, readers.read_little_uint16(fp))
        self.assertEqual(0x6050, readers.read_little_uint16(fp))
        self.assertEqual(0x8070, readers.read_little_uint16(fp))
        with self.assertRaises(BMPIOError):
            readers.read_little_uint16(fp)

    def test_read_uint8(self):
        fp = io.BytesIO(TEST_DATA)
        self.assertEqual(list(TEST_DATA), [readers.read_uint8(fp) for _ in range(8)])
        with self.assertRaises(BMPIOError):
            readers.read_uint8(fp)

    def test_partial_read_fails(self):
        # Three bytes left isn't enough for a uint32
        fp = io.BytesIO(TEST_DATA[:7])
        readers.read_little_uint32(fp)
        with self.assertRaises(BMPIOError):
            readers.read_little_uint32(fp)

    def test_read_block(self):
        fp = io.BytesIO(TEST_DATA)
        self.assertEqual(TEST_DATA[:5], readers.read_block(fp, 5))
        with self.assertRaises(BMPIOError):
            readers.read_block(fp, 4)

    def test_stream_error_becomes_bmp_io_error(self):
        with self.assertRaises(BMPIOError):
            readers.read_little_uint32(BrokenStream())

    def test_load_little_uint32(self):
        self.assertEqual(0x04030201, readers.load_little_uint32(bytes([0x1, 0x2, 0x3, 0x4])))
        self.assertEqual(0x80706050, readers.load_little_uint32(TEST_DATA, 4))

    def test_load_little_uint16(self):
        self.assertEqual(0x0201, readers.load_little_uint16(bytes([0x1, 0x2])))
        self.assertEqual(0x0403, readers.load_little_uint16(TEST_DATA, 2))

    def test_load_little_uint24(self):
        self.assertEqual(0x030201, readers.load_little_uint24(TEST_DATA))
        self.assertEqual(0x706050, readers.load_little_uint24(TEST_DATA, 4))
