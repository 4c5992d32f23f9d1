"""
Bit-precise position inside a file.

Graphics inside ROM images are not always byte aligned (think of 1bpp fonts or
3bpp tiles), so every position is kept as a couple (byte offset, bit offset)
where the bit offset counts from the most significant bit of the byte.

The couple is always stored normalized, i.e. with the bit offset in [0, 8):

    >>> BitAddress(3, 9)
    <BitAddress(0x4:1)>
"""
import functools

from .exceptions import BoundsException


@functools.total_ordering
class BitAddress(object):
    '''Immutable value type: every arithmetic operation returns a new instance.

    Addresses can't be negative, trying to build one raises BoundsException so
    the caller must clamp (using plain integers of bits) before constructing.'''

    __slots__ = ('_bits',)

    def __init__(self, byte_offset=0, bit_offset=0):
        bits = byte_offset * 8 + bit_offset
        if bits < 0:
            raise BoundsException(f'negative address ({byte_offset}, {bit_offset})')

        self._bits = bits

    @classmethod
    def from_bits(cls, bits: int) -> "BitAddress":
        return cls(0, bits)

    @property
    def byte_offset(self) -> int:
        return self._bits // 8

    @property
    def bit_offset(self) -> int:
        return self._bits % 8

    @property
    def bits(self) -> int:
        '''Total number of bits from the start of the file'''
        return self._bits

    def __int__(self):
        return self._bits

    def __index__(self):
        return self._bits

    def __repr__(self):
        return '<%s(0x%x:%d)>' % (self.__class__.__name__, self.byte_offset, self.bit_offset)

    def __str__(self):
        return '0x%08x:%d' % (self.byte_offset, self.bit_offset)

    def __hash__(self):
        return hash(self._bits)

    @staticmethod
    def _to_bits(other):
        if isinstance(other, BitAddress):
            return other._bits
        if isinstance(other, int):
            return other

        return None

    def __eq__(self, other):
        bits = self._to_bits(other)
        if bits is None:
            return NotImplemented

        return self._bits == bits

    def __lt__(self, other):
        bits = self._to_bits(other)
        if bits is None:
            return NotImplemented

        return self._bits < bits

    def __add__(self, other):
        bits = self._to_bits(other)
        if bits is None:
            return NotImplemented

        return BitAddress.from_bits(self._bits + bits)

    __radd__ = __add__

    def __sub__(self, other):
        bits = self._to_bits(other)
        if bits is None:
            return NotImplemented

        return BitAddress.from_bits(self._bits - bits)
