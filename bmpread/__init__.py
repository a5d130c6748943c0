from bmpread.bmp_parser import (
    BMPParser,
    DecodedImage,
    Flags,
    decode,
    decode_bytes,
    release,
)
from bmpread.errors import (
    AllocationError,
    ArithmeticOverflowError,
    BadSignatureError,
    BMPError,
    BMPIOError,
    InvalidDimensionsError,
    InvalidHeaderError,
    InvalidInputError,
    NonContiguousMaskError,
    UnsupportedBitDepthError,
    UnsupportedCompressionError,
    UnsupportedHeaderError,
)

__version__ = '1.0.0'
