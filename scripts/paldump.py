#!/usr/bin/env python3
import sys
import os
import logging

from rawtile import BitAddress, Palette, Stream
from rawtile.colors import color_model_names

if 'DEBUG' in os.environ:
    logging.basicConfig()
    logger = logging.getLogger('rawtile')
    logger.setLevel(logging.DEBUG)


def usage(progname):
    print('usage: %s <file> <offset> <%s> [entries]' % (progname, '|'.join(color_model_names())))
    sys.exit(1)


def dump_palette(palette):
    print(f'Palette {palette.name!r} ({palette.color_model.name}) at {palette.address}:')
    for idx, (foreign, native) in enumerate(zip(palette.foreign_colors, palette.native_colors)):
        print(f'  [{idx:3d}] 0x{foreign:08x} -> 0x{native:08x}')


if __name__ == '__main__':
    if len(sys.argv) < 4:
        usage(sys.argv[0])

    path = sys.argv[1]
    offset = int(sys.argv[2], 0)
    model = sys.argv[3]
    entries = int(sys.argv[4]) if len(sys.argv) > 4 else 16

    with Stream(path, writable=False) as stream:
        palette = Palette(os.path.basename(path)).load(stream, BitAddress(offset), model, entries=entries)

    dump_palette(palette)
