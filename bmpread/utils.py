from bmpread.errors import ArithmeticOverflowError
from bmpread.safe_math import can_add, can_multiply


def is_power_of_2(n):
    return n > 0 and (n & (n - 1)) == 0


def get_line_length(width, bits_per_pixel):
    # Each row is padded to a multiple of 4 bytes
    if not can_multiply(width, bits_per_pixel):
        raise ArithmeticOverflowError(f"Row of {width} pixels at {bits_per_pixel}bpp is too long")
    bits = width * bits_per_pixel
    if not can_add(bits, 31):
        raise ArithmeticOverflowError(f"Row of {width} pixels at {bits_per_pixel}bpp is too long")
    return ((bits + 31) // 32) * 4
