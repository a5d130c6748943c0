"""Little-endian integer readers.

The ``read_*`` functions pull bytes from a binary stream and raise
BMPIOError if the stream runs out first, which is how a truncated file is
noticed. The ``load_*`` functions decode bytes that have already been read
into a buffer and can't fail.
"""
from bmpread.errors import BMPIOError


def read_block(fp, size):
    try:
        block = fp.read(size)
    except OSError as e:
        raise BMPIOError(f"Read failed: {e}") from e
    if block is None or len(block) != size:
        got = 0 if block is None else len(block)
        raise BMPIOError(f"Unexpected end of file (wanted {size} bytes, got {got})")
    return block


def read_uint8(fp):
    return read_block(fp, 1)[0]


def read_little_uint16(fp):
    return int.from_bytes(read_block(fp, 2), 'little')


def read_little_uint32(fp):
    return int.from_bytes(read_block(fp, 4), 'little')


def read_little_int32(fp):
    return int.from_bytes(read_block(fp, 4), 'little', signed=True)


def load_little_uint16(buf, offset=0):
    return int.from_bytes(buf[offset:offset + 2], 'little')


def load_little_uint24(buf, offset=0):
    return int.from_bytes(buf[offset:offset + 3], 'little')


def load_little_uint32(buf, offset=0):
    return int.from_bytes(buf[offset:offset + 4], 'little')
