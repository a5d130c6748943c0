import enum
import io
import logging
import os

from bmpread import readers
from bmpread.bitfield import Bitfield, parse_bitfield, parse_masks
from bmpread.errors import (
    AllocationError,
    ArithmeticOverflowError,
    BadSignatureError,
    BMPIOError,
    InvalidDimensionsError,
    InvalidHeaderError,
    NonContiguousMaskError,
    UnsupportedBitDepthError,
    UnsupportedCompressionError,
    UnsupportedHeaderError,
)
from bmpread.pixels import BitfieldDecoder, IndexedDecoder
from bmpread.safe_math import (
    can_make_long,
    can_make_size_t,
    can_multiply,
    can_negate,
)
from bmpread.utils import get_line_length, is_power_of_2

logger = logging.getLogger(__name__)

MAGIC = b'BM'

# DIB header variants, by size
CORE_HEADER_SIZE = 12     # OS/2 1.x
INFO_HEADER_SIZE = 40
V2_HEADER_SIZE = 52       # + RGB masks
V3_HEADER_SIZE = 56       # + alpha mask
V4_HEADER_SIZE = 108
V5_HEADER_SIZE = 124
SUPPORTED_HEADER_SIZES = (
    CORE_HEADER_SIZE,
    INFO_HEADER_SIZE,
    V2_HEADER_SIZE,
    V3_HEADER_SIZE,
    V4_HEADER_SIZE,
    V5_HEADER_SIZE,
)

# Compression modes
BI_RGB = 0
BI_BITFIELDS = 3
BI_ALPHABITFIELDS = 6

SUPPORTED_BPP = (1, 4, 8, 16, 24, 32)

# Masks used when the file doesn't give its own (red, green, blue)
DEFAULT_MASKS = {
    16: (0x7C00, 0x03E0, 0x001F),
    24: (0xFF0000, 0x00FF00, 0x0000FF),
    32: (0xFF0000, 0x00FF00, 0x0000FF),
}


class Flags(enum.IntFlag):
    NONE = 0
    ALPHA = 1       # output an alpha channel if the file has one
    ANY_SIZE = 2    # don't insist on power-of-two dimensions


class FileHeader:
    def __init__(self):
        self.magic = b''
        self.file_size = 0      # not trusted for anything
        self.reserved = (0, 0)
        self.data_offset = 0


class InfoHeader:
    def __init__(self):
        self.size = 0
        self.width = 0
        self.height = 0
        self.planes = 0
        self.bits = 0
        self.compression = BI_RGB
        self.image_size = 0
        self.x_ppm = 0
        self.y_ppm = 0
        self.colors = 0
        self.important_colors = 0
        # Raw masks and how many of them the header itself carried
        self.masks = [0, 0, 0, 0]
        self.mask_count = 0


class DecodedImage:
    """Decoded pixels, top row first, 3 (RGB) or 4 (RGBA) bytes per pixel.

    ``flags`` contains Flags.ALPHA only if an alpha byte was actually
    written. The caller owns ``data`` and gives it back with release().
    """

    def __init__(self, width, height, flags, data, metadata=None):
        self.width = width
        self.height = height
        self.flags = flags
        self.data = data
        self.metadata = metadata if metadata is not None else {}

    @property
    def has_alpha(self):
        return bool(self.flags & Flags.ALPHA)

    @property
    def channels(self):
        return 4 if self.has_alpha else 3

    def __repr__(self):
        return f"DecodedImage({self.width}x{self.height}, channels={self.channels})"


class BMPParser:
    def __init__(self, fp, flags=Flags.NONE):
        self.fp = fp
        self.flags = Flags(flags)
        self.file_header = FileHeader()
        self.info = InfoHeader()
        self.metadata = {}      # Store header information for display
        self.color_table = []   # Store palette (for indexed BMPs)
        self.masks = None
        self.decoder = None
        self.width = 0
        self.height = 0
        self.top_down = False

    def load(self):
        self._parse_file_header()
        self._parse_info_header()
        self._validate_format()
        self._resolve_masks()
        self._parse_color_table()
        self._validate_dimensions()
        return self._parse_pixel_data()

    def _parse_file_header(self):
        fp = self.fp
        header = self.file_header
        # Signature (must start with 'BM')
        header.magic = bytes([readers.read_uint8(fp), readers.read_uint8(fp)])
        if header.magic != MAGIC:
            raise BadSignatureError(f"Not a BMP file (signature {header.magic!r})")
        header.file_size = readers.read_little_uint32(fp)
        header.reserved = (readers.read_little_uint16(fp), readers.read_little_uint16(fp))
        # Offset where pixel data starts
        header.data_offset = readers.read_little_uint32(fp)

        self.metadata['file_size'] = header.file_size
        self.metadata['data_offset'] = header.data_offset

    def _parse_info_header(self):
        fp = self.fp
        info = self.info
        # The size tells us which variant follows
        info.size = readers.read_little_uint32(fp)
        if info.size not in SUPPORTED_HEADER_SIZES:
            raise UnsupportedHeaderError(f"Unsupported DIB header size: {info.size}")

        if info.size == CORE_HEADER_SIZE:
            info.width = readers.read_little_uint16(fp)
            info.height = readers.read_little_uint16(fp)
            info.planes = readers.read_little_uint16(fp)
            info.bits = readers.read_little_uint16(fp)
        else:
            info.width = readers.read_little_int32(fp)
            info.height = readers.read_little_int32(fp)
            info.planes = readers.read_little_uint16(fp)
            info.bits = readers.read_little_uint16(fp)
            info.compression = readers.read_little_uint32(fp)
            info.image_size = readers.read_little_uint32(fp)
            info.x_ppm = readers.read_little_int32(fp)
            info.y_ppm = readers.read_little_int32(fp)
            info.colors = readers.read_little_uint32(fp)
            info.important_colors = readers.read_little_uint32(fp)

        if info.size > INFO_HEADER_SIZE:
            # V2 and later carry the masks; V4/V5 extras (color space etc.) are skipped
            extra = readers.read_block(fp, info.size - INFO_HEADER_SIZE)
            info.mask_count = 4 if info.size >= V3_HEADER_SIZE else 3
            for i in range(info.mask_count):
                info.masks[i] = readers.load_little_uint32(extra, i * 4)

        logger.debug(
            "DIB header size=%d width=%d height=%d planes=%d bpp=%d compression=%d colors=%d",
            info.size, info.width, info.height, info.planes, info.bits,
            info.compression, info.colors,
        )
        self.metadata.update({
            'header_size': info.size,
            'width': info.width,
            'height': info.height,
            'planes': info.planes,
            'bpp': info.bits,
            'compression': info.compression,
            'image_size': info.image_size,
            'x_ppm': info.x_ppm,
            'y_ppm': info.y_ppm,
            'colors': info.colors,
            'important_colors': info.important_colors,
        })

    def _validate_format(self):
        info = self.info
        if info.planes != 1:
            raise InvalidHeaderError(f"Invalid color plane count: {info.planes}")
        if info.bits not in SUPPORTED_BPP:
            raise UnsupportedBitDepthError(f"Unsupported bpp: {info.bits}")
        if info.compression not in (BI_RGB, BI_BITFIELDS, BI_ALPHABITFIELDS):
            raise UnsupportedCompressionError(f"Unsupported compression: {info.compression}")
        if info.compression != BI_RGB and info.bits not in (16, 32):
            raise UnsupportedCompressionError(
                f"Bitfield compression isn't valid at {info.bits}bpp"
            )

    def _resolve_masks(self):
        info = self.info
        if info.bits <= 8:
            return

        if info.compression == BI_RGB:
            red, green, blue = DEFAULT_MASKS[info.bits]
            # Only trust an alpha mask the header spells out
            alpha = info.masks[3] if info.mask_count == 4 and info.bits != 24 else 0
        else:
            wanted = 4 if info.compression == BI_ALPHABITFIELDS else 3
            if info.mask_count < wanted:
                # Masks too new for this header follow it directly
                missing = wanted - info.mask_count
                block = readers.read_block(self.fp, missing * 4)
                for i in range(missing):
                    info.masks[info.mask_count + i] = readers.load_little_uint32(block, i * 4)
                info.mask_count = wanted
            red, green, blue, alpha = info.masks

        if not self.flags & Flags.ALPHA:
            alpha = 0

        self.masks = parse_masks(red, green, blue, 0)._replace(alpha=self._alpha_field(alpha))
        logger.debug(
            "Masks r=0x%08x g=0x%08x b=0x%08x a=0x%08x -> %s",
            red, green, blue, alpha, self.masks,
        )
        self.metadata['masks'] = f"0x{red:08x} 0x{green:08x} 0x{blue:08x} 0x{alpha:08x}"

        self.decoder = BitfieldDecoder(
            self.masks, info.bits, alpha=self.masks.alpha.span > 0
        )

    def _alpha_field(self, mask):
        info = self.info
        try:
            field = parse_bitfield(mask)
        except NonContiguousMaskError:
            # Uncompressed files only hint at alpha, so a bad hint just means no alpha
            if info.compression != BI_RGB:
                raise
            logger.debug("Ignoring non-contiguous alpha mask 0x%08x", mask)
            return Bitfield(0, 0)
        # A mask past the end of the sample would always read as transparent
        if field.start + field.span > info.bits:
            logger.debug("Ignoring alpha mask 0x%08x outside %d-bit samples", mask, info.bits)
            return Bitfield(0, 0)
        return field

    def _parse_color_table(self):
        info = self.info
        # Only images with <= 8bpp use a color table
        if info.bits > 8:
            return

        num_colors = 1 << info.bits  # Number of palette entries
        count = info.colors if 0 < info.colors <= num_colors else num_colors
        entry_size = 3 if info.size == CORE_HEADER_SIZE else 4

        table = readers.read_block(self.fp, count * entry_size)
        self.color_table = []
        for i in range(count):
            b, g, r = table[i * entry_size:i * entry_size + 3]
            self.color_table.append((r, g, b))  # Store as (R, G, B)
        # Indices the file didn't cover come out black
        self.color_table.extend([(0, 0, 0)] * (num_colors - count))

        logger.debug("Read %d of %d palette entries", count, num_colors)
        self.decoder = IndexedDecoder(self.color_table, info.bits)

    def _validate_dimensions(self):
        width = self.info.width
        height = self.info.height

        if width <= 0 or height == 0:
            raise InvalidDimensionsError(f"Invalid dimensions {width}x{height}")

        # BMP rows are usually stored bottom-to-top; negative height means top-down
        self.top_down = height < 0
        if self.top_down:
            if not can_negate(height):
                raise ArithmeticOverflowError(f"Can't negate height {height}")
            height = -height

        if not can_make_size_t(width) or not can_make_size_t(height):
            raise ArithmeticOverflowError(f"Dimensions {width}x{height} too large")

        if not self.flags & Flags.ANY_SIZE:
            if not is_power_of_2(width) or not is_power_of_2(height):
                raise InvalidDimensionsError(
                    f"Dimensions {width}x{height} aren't powers of two"
                )

        self.width = width
        self.height = height

    def _parse_pixel_data(self):
        fp = self.fp
        width = self.width
        height = self.height
        decoder = self.decoder
        offset = self.file_header.data_offset

        stride = get_line_length(width, self.info.bits)
        if not can_multiply(width, decoder.channels):
            raise ArithmeticOverflowError(f"Width {width} too large")
        row_size = width * decoder.channels
        if not can_multiply(row_size, height) or not can_multiply(stride, height):
            raise ArithmeticOverflowError(f"Image {width}x{height} too large")

        # Move to pixel data
        if not can_make_long(offset):
            raise ArithmeticOverflowError(f"Pixel data offset {offset} out of range")
        try:
            fp.seek(offset)
        except (OSError, ValueError) as e:
            raise BMPIOError(f"Can't seek to pixel data at {offset}: {e}") from e
        self._check_available(stride * height)

        try:
            data = bytearray(row_size * height)
        except (MemoryError, OverflowError) as e:
            raise AllocationError(f"Can't allocate {row_size * height} bytes") from e

        for row in range(height):
            # Padding bytes come along with the row and are ignored
            raw = readers.read_block(fp, stride)
            dest = row if self.top_down else height - row - 1
            decoder.decode_row(raw, data, dest * row_size, width)

        flags = Flags.ALPHA if decoder.channels == 4 else Flags.NONE
        return DecodedImage(width, height, flags, data, dict(self.metadata))

    def _check_available(self, needed):
        # Catch a short file before allocating for it, if the stream lets us
        fp = self.fp
        if not fp.seekable():
            return
        position = fp.tell()
        end = fp.seek(0, os.SEEK_END)
        fp.seek(position)
        if end - position < needed:
            raise BMPIOError(
                f"Unexpected end of file ({needed} bytes of pixel data, {end - position} available)"
            )


def decode(source, flags=Flags.NONE):
    """Decode a BMP file from a path or a readable binary stream.

    Paths are opened and closed here. Streams are left open.
    """
    if isinstance(source, (str, bytes, os.PathLike)):
        try:
            fp = open(source, 'rb')
        except OSError as e:
            raise BMPIOError(f"Can't open {source!r}: {e}") from e
        with fp:
            return BMPParser(fp, flags).load()
    return BMPParser(source, flags).load()


def decode_bytes(data, flags=Flags.NONE):
    return decode(io.BytesIO(data), flags)


def release(image):
    """Drop the image's pixel buffer.

    Releasing an image twice or touching it afterwards is a caller error.
    """
    image.data = None
