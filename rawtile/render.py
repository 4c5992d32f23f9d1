'''
Glue between arrangers and Pillow images.

All the resources are passed explicitly as mappings keyed the same way the
elements reference them: streams by data file key, formats by name and
palettes by palette key.
'''
import logging
from typing import Dict, Mapping

import numpy as np
from PIL import Image

from . import codec
from .arranger import Arranger
from .exceptions import BoundsException, ColorNotFoundException
from .formats import GraphicsFormat
from .palette import Palette
from .streams import Stream


logger = logging.getLogger(__name__)


def _element_rgba(indexes: np.ndarray, palette: Palette) -> np.ndarray:
    rgba = palette.to_rgba()
    if indexes.max(initial=0) >= len(rgba):
        raise BoundsException(f'pixel index {indexes.max()} is outside {palette!r}')

    return rgba[indexes]


def render_arranger(arranger: Arranger, streams: Mapping[str, Stream], formats: Mapping[str, GraphicsFormat],
                    palettes: Mapping[str, Palette]) -> Image.Image:
    '''Decode every element of the arranger and compose them into an RGBA image,
    blank elements are left transparent.'''
    width, height = arranger.pixel_size
    if width <= 0 or height <= 0:
        raise ValueError(f'{arranger!r} has no pixels to render')

    pixels = np.zeros((height, width, 4), dtype=np.uint8)

    for element in arranger:
        if element.is_blank():
            continue

        fmt = formats[element.format_name]
        buffers = codec.read_element(streams[element.data_file_key], element, fmt)
        pixels[element.y1:element.y2 + 1, element.x1:element.x2 + 1] = _element_rgba(
            buffers.merged, palettes[element.palette_key])

    logger.debug('rendered %r (%dx%d)' % (arranger, width, height))

    return Image.fromarray(pixels, 'RGBA')


def _image_indexes(pixels: np.ndarray, palette: Palette, cache: Dict[int, int]) -> np.ndarray:
    '''Map the ARGB pixels of an element to palette indexes: exact
    matches first, nearest color otherwise.'''
    indexes = np.empty(pixels.shape, dtype=np.uint8)
    for color in np.unique(pixels):
        color = int(color)
        if color not in cache:
            try:
                cache[color] = palette.exact_index(color)
            except ColorNotFoundException:
                cache[color] = palette.nearest_index(color)
        indexes[pixels == color] = cache[color]

    return indexes


def save_image(image: Image.Image, arranger: Arranger, streams: Mapping[str, Stream],
               formats: Mapping[str, GraphicsFormat], palettes: Mapping[str, Palette]):
    '''Encode the image back into the files using the arranger for the
    placement and the palettes to find the indexes of the colors.'''
    if image.size != arranger.pixel_size:
        raise ValueError(f'image of size {image.size} does not match {arranger!r} {arranger.pixel_size}')

    rgba = np.asarray(image.convert('RGBA'), dtype=np.uint32)
    argb = (rgba[..., 3] << 24) | (rgba[..., 0] << 16) | (rgba[..., 1] << 8) | rgba[..., 2]

    caches: Dict[str, Dict[int, int]] = {}
    pending = []

    # nothing is written until every element has been encoded
    for element in arranger:
        if element.is_blank():
            continue

        fmt = formats[element.format_name]
        stream = streams[element.data_file_key]
        palette = palettes[element.palette_key]
        region = argb[element.y1:element.y2 + 1, element.x1:element.x2 + 1]

        indexes = _image_indexes(region, palette, caches.setdefault(element.palette_key, {}))
        bits = codec.encode_element(indexes, fmt, stream.read_bits(element.address, fmt.storage_size))

        pending.append((element, fmt, stream, indexes, bits))

    for element, fmt, stream, indexes, bits in pending:
        stream.write_bits(element.address, bits)

        if element.buffers is None:
            element.allocate_buffers(fmt)
        element.buffers.merged = indexes
        element.buffers.planes = codec.split_planes(indexes, fmt)

    logger.debug('saved image into %r (%d elements)' % (arranger, len(pending)))
