class BMPError(Exception):
    """Base class for everything bmpread raises."""


# Open/read failures and truncated files
class BMPIOError(BMPError):
    pass


# Anything wrong with the file contents themselves
class InvalidInputError(BMPError, ValueError):
    pass


class BadSignatureError(InvalidInputError):
    pass


class UnsupportedHeaderError(InvalidInputError):
    pass


class InvalidHeaderError(InvalidInputError):
    pass


class UnsupportedCompressionError(InvalidInputError):
    pass


class UnsupportedBitDepthError(InvalidInputError):
    pass


class NonContiguousMaskError(InvalidInputError):
    pass


class InvalidDimensionsError(InvalidInputError):
    pass


class ArithmeticOverflowError(InvalidInputError):
    pass


# The file was fine but we couldn't get the memory for it
class AllocationError(BMPError, MemoryError):
    pass
