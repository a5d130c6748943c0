import ctypes
import sys

# Limits of the platform we're running on, not of any fixed word size
SIZE_MAX = sys.maxsize * 2 + 1
LONG_MAX = (1 << (8 * ctypes.sizeof(ctypes.c_long) - 1)) - 1
INT32_MIN = -(1 << 31)


def can_add(a, b):
    return a <= SIZE_MAX - b


def can_multiply(a, b):
    # Anything times zero is zero
    if a == 0 or b == 0:
        return True
    return a <= SIZE_MAX // b


def can_make_size_t(x):
    return x <= SIZE_MAX


def can_make_long(x):
    return x <= LONG_MAX


def can_negate(x):
    return x != INT32_MIN
