"""
# rawtile: raster graphics inside arbitrary binary files.

Game ROM images embed their graphics as raw packed bit-planes without any header,
so to look at them (and to edit them) we need to describe from the outside how
the bits are laid out.

Three main components are defined

 1. the graphics format and its codec: a data-driven description of how a
    rectangular block of pixels (an "element") is packed into a bit stream,
    with decode() and encode() operating on it.

 2. the palette: converts the colors stored in the file (foreign colors) into
    native ARGB32 colors and finds the palette index of a native color.

 3. the arranger: a grid of elements, each one with its own address inside a
    backing file; a sequential arranger scans the file and can be moved
    around without ever reading outside of it.

All the positions are BitAddress instances since the data is not necessarily
aligned to a byte.

The decode path is

    stream.read_bits(element.address, fmt.storage_size) -> codec.decode_element() -> palette

and the encode path goes the other way around.
"""
from .address import BitAddress
from .arranger import Arranger, ArrangerElement
from .codec import ElementBuffers, decode_element, encode_element, read_element, write_element
from .enum import ArrangerMode, ArrangerMoveType, ColorModel, ImageLayout
from .exceptions import (
    RawTileException,
    FormatException,
    ColorNotFoundException,
    BoundsException,
    ArrangerModeException,
)
from .formats import GraphicsFormat, PlaneGroup, load_formats
from .palette import Palette
from .streams import Stream
