'''
Decoding and encoding of a single element.

Both directions go through the offset map of the format (see
GraphicsFormat.offset_map()) so that encode() is by construction the
inverse of decode(): the same table says where each plane bit lives.
'''
import logging
from typing import Union

import numpy as np
from bitstring import Bits

from .exceptions import BoundsException, FormatException
from .formats import GraphicsFormat


logger = logging.getLogger(__name__)


class ElementBuffers(object):
    '''Decoded pixels of an element: one buffer per bit-plane holding the bit
    of that plane for each pixel, and the merged buffer with the palette indexes.'''

    def __init__(self, planes: np.ndarray, merged: np.ndarray):
        self.planes = planes
        self.merged = merged

    def __repr__(self):
        depth, height, width = self.planes.shape
        return f'<{self.__class__.__name__}({width}x{height}x{depth})>'

    @classmethod
    def allocate(cls, fmt: GraphicsFormat, width=None, height=None) -> "ElementBuffers":
        width = fmt.width if width is None else width
        height = fmt.height if height is None else height

        return cls(
            np.zeros((fmt.color_depth, height, width), dtype=np.uint8),
            np.zeros((height, width), dtype=np.uint8),
        )

    def copy(self) -> "ElementBuffers":
        return ElementBuffers(self.planes.copy(), self.merged.copy())


def _to_bits(data) -> Bits:
    if isinstance(data, Bits):
        return data

    return Bits(bytes(data))


def _unpack(bits: Bits) -> np.ndarray:
    return np.unpackbits(np.frombuffer(bits.tobytes(), dtype=np.uint8))[:len(bits)]


def _pack(flat: np.ndarray) -> Bits:
    return Bits(bytes=np.packbits(flat).tobytes(), length=len(flat))


def merge_planes(planes: np.ndarray, fmt: GraphicsFormat) -> np.ndarray:
    merged = np.zeros(planes.shape[1:], dtype=np.uint8)
    for plane, priority in enumerate(fmt.merge_priority):
        merged |= planes[plane] << priority

    return merged


def split_planes(merged: np.ndarray, fmt: GraphicsFormat) -> np.ndarray:
    planes = np.empty((fmt.color_depth, *merged.shape), dtype=np.uint8)
    for plane, priority in enumerate(fmt.merge_priority):
        planes[plane] = (merged >> priority) & 1

    return planes


def decode_element(data: Union[bytes, Bits], fmt: GraphicsFormat) -> ElementBuffers:
    '''Decode the bits of one element, data must start at the first bit of the element'''
    bits = _to_bits(data)
    if len(bits) < fmt.storage_size:
        raise BoundsException(f'{fmt!r} needs {fmt.storage_size} bits, only {len(bits)} available')

    flat = _unpack(bits[:fmt.storage_size])
    planes = flat[fmt.offset_map()].astype(np.uint8)

    return ElementBuffers(planes, merge_planes(planes, fmt))


def encode_element(pixels, fmt: GraphicsFormat, original: Union[bytes, Bits, None] = None) -> Bits:
    '''Encode the palette indexes into the bits of one element.

    pixels can be an ElementBuffers or an array of shape (height, width) with
    the merged indexes. The bits not covered by the format (the stride padding)
    are taken from original when passed, otherwise they are zeros.'''
    merged = pixels.merged if isinstance(pixels, ElementBuffers) else np.asarray(pixels)

    if merged.shape != (fmt.height, fmt.width):
        raise FormatException(f'pixels of shape {merged.shape} cannot be encoded by {fmt!r}')

    if (merged < 0).any() or (merged >> fmt.color_depth).any():
        raise BoundsException(f'pixel values do not fit in {fmt.color_depth} bits')

    merged = merged.astype(np.uint8)

    if original is not None:
        flat = _unpack(_to_bits(original)[:fmt.storage_size]).copy()
        if len(flat) < fmt.storage_size:
            flat = np.concatenate([flat, np.zeros(fmt.storage_size - len(flat), dtype=np.uint8)])
    else:
        flat = np.zeros(fmt.storage_size, dtype=np.uint8)

    flat[fmt.offset_map()] = split_planes(merged, fmt)

    return _pack(flat)


def read_element(stream, element, fmt: GraphicsFormat) -> ElementBuffers:
    '''Decode the element from the stream into its own buffers'''
    bits = stream.read_bits(element.address, fmt.storage_size)
    buffers = decode_element(bits, fmt)

    logger.debug('decoded element at %s with %r' % (element.address, fmt))

    element.buffers = buffers

    return buffers


def write_element(stream, element, fmt: GraphicsFormat) -> int:
    '''Encode the merged buffer of the element into the stream at its address'''
    original = stream.read_bits(element.address, fmt.storage_size)
    bits = encode_element(element.buffers.merged, fmt, original)

    logger.debug('encoding element at %s with %r' % (element.address, fmt))

    element.buffers.planes = split_planes(element.buffers.merged, fmt)

    return stream.write_bits(element.address, bits)
