import pytest
from PIL import Image

from rawtile import Arranger, ArrangerElement, BitAddress, BoundsException, Palette, Stream
from rawtile.render import render_arranger, save_image


NES_TILE = bytes([
    0xff, 0x00, 0xff, 0x00, 0x00, 0x00, 0x00, 0x00,
    0x00, 0xff, 0xff, 0x00, 0x00, 0x00, 0x00, 0x00,
])

GRAYS = [0xff000000, 0xff555555, 0xffaaaaaa, 0xffffffff]


@pytest.fixture
def palettes():
    return {'Default': Palette.from_native('Default', GRAYS)}


def test_render(nes_format, palettes):
    stream = Stream(NES_TILE + bytes(16), key='rom.nes')
    arranger = Arranger.new_sequential(2, 1, stream.key, stream.size, nes_format)

    image = render_arranger(arranger, {stream.key: stream}, {nes_format.name: nes_format}, palettes)

    assert image.mode == 'RGBA'
    assert image.size == (16, 8)
    assert image.getpixel((0, 0)) == (0x55, 0x55, 0x55, 0xff)
    assert image.getpixel((7, 1)) == (0xaa, 0xaa, 0xaa, 0xff)
    assert image.getpixel((3, 2)) == (0xff, 0xff, 0xff, 0xff)
    assert image.getpixel((0, 3)) == (0, 0, 0, 0xff)
    assert image.getpixel((8, 0)) == (0, 0, 0, 0xff)


def test_render_blank(nes_format, palettes):
    stream = Stream(NES_TILE, key='rom.nes')
    arranger = Arranger.new_scattered(2, 1, 8, 8)
    arranger.set_element(ArrangerElement(stream.key, BitAddress(0), nes_format.name, storage_size=128), 1, 0)

    image = render_arranger(arranger, {stream.key: stream}, {nes_format.name: nes_format}, palettes)

    assert image.getpixel((0, 0)) == (0, 0, 0, 0)
    assert image.getpixel((8, 0)) == (0x55, 0x55, 0x55, 0xff)


def test_render_small_palette(nes_format):
    stream = Stream(NES_TILE, key='rom.nes')
    arranger = Arranger.new_sequential(1, 1, stream.key, stream.size, nes_format)
    palettes = {'Default': Palette.from_native('Default', GRAYS[:2])}

    with pytest.raises(BoundsException):
        render_arranger(arranger, {stream.key: stream}, {nes_format.name: nes_format}, palettes)


def test_save_image(nes_format, palettes):
    source = Stream(NES_TILE + bytes(16), key='rom.nes')
    arranger = Arranger.new_sequential(2, 1, source.key, source.size, nes_format)
    formats = {nes_format.name: nes_format}

    image = render_arranger(arranger, {source.key: source}, formats, palettes)
    # not in the palette, nearest is white
    image.putpixel((0, 7), (0xf0, 0xf0, 0xf0, 0xff))

    target = Stream(bytes(32), key='rom.nes')
    save_image(image, arranger, {target.key: target}, formats, palettes)

    data = target.getvalue()
    assert data[:16] == bytes([
        0xff, 0x00, 0xff, 0x00, 0x00, 0x00, 0x00, 0x80,
        0x00, 0xff, 0xff, 0x00, 0x00, 0x00, 0x00, 0x80,
    ])
    assert data[16:] == bytes(16)


def test_save_image_wrong_size(nes_format, palettes):
    arranger = Arranger.new_sequential(2, 1, 'rom.nes', 32, nes_format)
    image = render_arranger(arranger, {'rom.nes': Stream(bytes(32))}, {nes_format.name: nes_format}, palettes)

    with pytest.raises(ValueError):
        save_image(image.crop((0, 0, 8, 8)), arranger, {}, {}, palettes)


def test_save_image_is_all_or_nothing(nes_format):
    '''an element that cannot be encoded leaves the file untouched'''
    palettes = {'Default': Palette.from_native('Default', GRAYS + [0xffff0000])}
    target = Stream(bytes(32), key='rom.nes')
    arranger = Arranger.new_sequential(2, 1, target.key, target.size, nes_format)

    image = Image.new('RGBA', (16, 8), (0xff, 0xff, 0xff, 0xff))
    # index 4 does not fit in 2bpp
    image.putpixel((12, 4), (0xff, 0x00, 0x00, 0xff))

    with pytest.raises(BoundsException):
        save_image(image, arranger, {target.key: target}, {nes_format.name: nes_format}, palettes)

    assert target.getvalue() == bytes(32)
