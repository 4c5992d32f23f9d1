#!/usr/bin/env python3
'''
Render a window of a ROM as tiles into a PNG image

 $ tiledump.py game.sfc extra/formats/snes_4bpp.xml 0x20000 16 8 tiles.png
'''
import logging
import sys
import os

from rawtile import Arranger, BitAddress, GraphicsFormat, Palette, Stream
from rawtile.render import render_arranger


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logger.setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)


def usage(progname):
    print(f'usage: {progname} <rom> <format xml> <offset> <elements x> <elements y> <output png>')
    sys.exit(1)


def grayscale(depth):
    '''Evenly spaced grays, the darkest at index 0'''
    count = 1 << depth
    grays = [(0xff * _) // (count - 1) for _ in range(count)]

    return Palette.from_native('Default', [0xff000000 | (_ << 16) | (_ << 8) | _ for _ in grays])


if __name__ == '__main__':
    if len(sys.argv) < 7:
        usage(sys.argv[0])

    rom_path, format_path, offset, elements_x, elements_y, output_path = sys.argv[1:7]

    fmt = GraphicsFormat.from_xml(format_path)

    with Stream(rom_path, writable=False) as rom:
        arranger = Arranger.new_sequential(
            int(elements_x), int(elements_y), rom.key, rom.size, fmt,
            address=BitAddress(int(offset, 0)))

        logger.info(f'{arranger!r} at {arranger.initial_address}')

        image = render_arranger(arranger, {rom.key: rom}, {fmt.name: fmt}, {'Default': grayscale(fmt.color_depth)})

    image.save(output_path)
