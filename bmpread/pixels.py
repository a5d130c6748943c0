"""Row decoders.

The parser picks one of these once it knows the bit depth and compression,
then hands it every stored row. Each writes RGB (or RGBA) bytes straight into
the output buffer starting at ``offset``.
"""
from bmpread.bitfield import apply_bitfield, make_8_bits
from bmpread.readers import load_little_uint16, load_little_uint24, load_little_uint32

_LOADERS = {
    2: load_little_uint16,
    3: load_little_uint24,
    4: load_little_uint32,
}


class IndexedDecoder:
    """1, 4 and 8bpp: every sample is an index into the color table."""

    channels = 3

    def __init__(self, palette, bits_per_pixel):
        self.palette = palette
        self.bits = bits_per_pixel
        self.per_byte = 8 // bits_per_pixel
        self.index_mask = (1 << bits_per_pixel) - 1

    def decode_row(self, raw, out, offset, width):
        bits = self.bits
        per_byte = self.per_byte
        for x in range(width):
            byte = raw[x // per_byte]
            # Leftmost pixel lives in the high bits
            shift = 8 - bits * (x % per_byte + 1)
            r, g, b = self.palette[(byte >> shift) & self.index_mask]
            out[offset] = r
            out[offset + 1] = g
            out[offset + 2] = b
            offset += 3


class BitfieldDecoder:
    """16, 24 and 32bpp: components are pulled out of each sample by mask."""

    def __init__(self, masks, bits_per_pixel, alpha=False):
        self.step = bits_per_pixel // 8
        self.load = _LOADERS[self.step]
        fields = [masks.red, masks.green, masks.blue]
        if alpha:
            fields.append(masks.alpha)
        self.fields = fields
        self.channels = len(fields)

    def decode_row(self, raw, out, offset, width):
        step = self.step
        for x in range(width):
            sample = self.load(raw, x * step)
            for field in self.fields:
                out[offset] = make_8_bits(apply_bitfield(sample, field), field.span)
                offset += 1
