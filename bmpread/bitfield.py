from collections import namedtuple

from bmpread.errors import NonContiguousMaskError

# Which bits of a packed pixel hold one color component
Bitfield = namedtuple('Bitfield', ['start', 'span'])

ColorMasks = namedtuple('ColorMasks', ['red', 'green', 'blue', 'alpha'])


def parse_bitfield(mask):
    """Turn a 32-bit component mask into a Bitfield.

    The set bits must form a single run, e.g. 0xf0 -> Bitfield(4, 4).
    A zero mask means the component is absent and gives Bitfield(0, 0).
    """
    mask &= 0xFFFFFFFF
    if mask == 0:
        return Bitfield(0, 0)

    # Lowest set bit
    start = (mask & -mask).bit_length() - 1
    run = mask >> start
    span = run.bit_length()

    # Every bit up to the highest one has to be set
    if run != (1 << span) - 1:
        raise NonContiguousMaskError(f"Bitfield mask 0x{mask:08x} is not contiguous")
    return Bitfield(start, span)


def parse_masks(red, green, blue, alpha):
    return ColorMasks(
        parse_bitfield(red),
        parse_bitfield(green),
        parse_bitfield(blue),
        parse_bitfield(alpha),
    )


def apply_bitfield(value, field):
    return (value >> field.start) & ((1 << field.span) - 1)


def make_8_bits(value, bits):
    """Scale a ``bits``-wide sample to 0..255.

    Narrow samples are stretched by repeating their bit pattern, so the
    maximum value always comes out as 0xff. Wide ones keep their top 8 bits.
    """
    if bits <= 0:
        return 0
    if bits >= 8:
        return (value >> (bits - 8)) & 0xFF

    result = 0
    shift = 8
    while shift > 0:
        shift -= bits
        if shift >= 0:
            result |= value << shift
        else:
            result |= value >> -shift
    return result & 0xFF
