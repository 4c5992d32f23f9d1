import logging

import pytest

from rawtile import (
    Arranger,
    ArrangerElement,
    ArrangerMode,
    ArrangerModeException,
    ArrangerMoveType,
    BitAddress,
    BoundsException,
    GraphicsFormat,
)


@pytest.fixture
def arranger(snes_format):
    '''4x4 elements of 8x8 4bpp over a 1KiB file'''
    return Arranger.new_sequential(4, 4, 'rom.sfc', 1024, snes_format)


def test_sequential(arranger):
    assert arranger.mode == ArrangerMode.SEQUENTIAL
    assert arranger.element_size == (4, 4)
    assert arranger.element_pixel_size == (8, 8)
    assert arranger.pixel_size == (32, 32)
    assert arranger.arranger_bit_size == 4096
    assert arranger.file_bit_length == 8192
    assert arranger.sequential_format_name == 'SNES 4bpp'
    assert arranger.name == 'rom.sfc'

    assert arranger.get_element(1, 0).address == BitAddress(32)
    assert arranger.get_element(0, 1).address == BitAddress(128)
    assert arranger.get_element(3, 3).address == BitAddress(15 * 32)

    element = arranger.get_element(2, 1)
    assert (element.x1, element.y1, element.x2, element.y2) == (16, 8, 23, 15)
    assert element.buffers.merged.shape == (8, 8)


def test_moves(arranger):
    assert arranger.move(ArrangerMoveType.BYTE_UP) == BitAddress(0)
    assert arranger.move(ArrangerMoveType.BYTE_DOWN) == BitAddress(1)
    assert arranger.move(ArrangerMoveType.HOME) == BitAddress(0)
    assert arranger.move(ArrangerMoveType.COL_RIGHT) == BitAddress(32)
    assert arranger.move(ArrangerMoveType.ROW_DOWN) == BitAddress(160)
    assert arranger.move(ArrangerMoveType.COL_LEFT) == BitAddress(128)
    assert arranger.move(ArrangerMoveType.ROW_UP) == BitAddress(0)
    assert arranger.move(ArrangerMoveType.PAGE_DOWN) == BitAddress(256)
    assert arranger.move(ArrangerMoveType.PAGE_DOWN) == BitAddress(512)
    # already at the end
    assert arranger.move(ArrangerMoveType.PAGE_DOWN) == BitAddress(512)
    assert arranger.move(ArrangerMoveType.PAGE_UP) == BitAddress(256)
    assert arranger.move(ArrangerMoveType.END) == BitAddress(512)
    assert arranger.get_element(3, 3).address == BitAddress(1024 - 32)
    assert arranger.move(ArrangerMoveType.ABSOLUTE, BitAddress(100, 3)) == BitAddress(100, 3)
    assert arranger.get_element(1, 0).address == BitAddress(132, 3)
    assert arranger.move(ArrangerMoveType.ABSOLUTE, BitAddress(1000)) == BitAddress(512)

    with pytest.raises(ValueError):
        arranger.move(ArrangerMoveType.ABSOLUTE)


def test_move_to(arranger):
    assert arranger.move_to(BitAddress(10, 4)) == BitAddress(10, 4)
    assert arranger.move_to(BitAddress(2000)) == BitAddress(512)


def test_larger_than_file(snes_format, caplog):
    with caplog.at_level(logging.WARNING):
        arranger = Arranger.new_sequential(4, 4, 'small', 16, snes_format, address=BitAddress(10))

    assert arranger.initial_address == BitAddress(0)
    assert 'bits but the file has only' in caplog.text

    assert arranger.move(ArrangerMoveType.END) == BitAddress(0)
    assert arranger.move(ArrangerMoveType.PAGE_DOWN) == BitAddress(0)


def test_resize(arranger):
    arranger.move_to(BitAddress(64))
    arranger.resize(2, 2)

    assert arranger.element_size == (2, 2)
    assert arranger.arranger_bit_size == 1024
    assert arranger.initial_address == BitAddress(64)

    # the new size needs the whole file
    arranger.resize(4, 8)
    assert arranger.initial_address == BitAddress(0)
    assert arranger.pixel_size == (32, 64)

    with pytest.raises(BoundsException):
        arranger.resize(0, 4)

    assert arranger.element_size == (4, 8)


def test_set_format(arranger, nes_format):
    arranger.move(ArrangerMoveType.END)
    arranger.set_format(nes_format)

    assert arranger.format is nes_format
    assert arranger.arranger_bit_size == 16 * 128
    assert arranger.initial_address == BitAddress(512)
    assert arranger.get_element(1, 0).address == BitAddress(528)
    assert {_.format_name for _ in arranger} == {'NES 2bpp'}


def test_palette_keys(arranger):
    assert arranger.palette_keys() == {'Default'}

    element = arranger.get_element(0, 0).clone()
    element.palette_key = 'Sprites'
    arranger.set_element(element, 3, 3)

    assert arranger.palette_keys() == {'Default', 'Sprites'}

    # the palettes survive a move
    arranger.move(ArrangerMoveType.BYTE_DOWN)
    assert arranger.get_element(3, 3).palette_key == 'Sprites'


def test_sub_arranger(arranger):
    arranger.move_to(BitAddress(64))
    sub = arranger.create_sub_arranger(1, 1, 2, 3, name='sub')

    assert sub.mode == ArrangerMode.SCATTERED
    assert sub.name == 'sub'
    assert sub.element_size == (2, 3)
    assert sub.pixel_size == (16, 24)

    element = sub.get_element(0, 0)
    assert element.address == arranger.get_element(1, 1).address
    assert (element.x1, element.y1) == (0, 0)
    assert sub.get_element(1, 2).address == arranger.get_element(2, 3).address

    with pytest.raises(ArrangerModeException):
        sub.file_size

    with pytest.raises(BoundsException):
        arranger.create_sub_arranger(3, 3, 2, 2)

    with pytest.raises(BoundsException):
        arranger.create_sub_arranger(-1, 0, 1, 1)


def test_clone(arranger):
    other = arranger.clone()
    other.move(ArrangerMoveType.END)

    assert arranger.initial_address == BitAddress(0)
    assert other.initial_address == BitAddress(512)
    assert other.file_size == 1024


def test_scattered():
    arranger = Arranger.new_scattered(2, 2, 8, 8, name='scattered')

    assert arranger.pixel_size == (16, 16)
    assert all(_.is_blank() for _ in arranger)

    with pytest.raises(ArrangerModeException):
        arranger.move(ArrangerMoveType.HOME)

    with pytest.raises(ArrangerModeException):
        arranger.format

    element = ArrangerElement('rom.sfc', BitAddress(0x200), 'SNES 4bpp', storage_size=256)
    arranger.set_element(element, 1, 1)

    stored = arranger.get_element(1, 1)
    assert stored is not element
    assert (stored.x1, stored.y1, stored.width) == (8, 8, 8)
    assert not stored.is_blank()

    with pytest.raises(BoundsException):
        arranger.set_element(element, 2, 0)

    arranger.resize(3, 3)
    assert arranger.element_size == (3, 3)
    assert arranger.get_element(1, 1).address == BitAddress(0x200)
    assert arranger.get_element(2, 2).is_blank()

    arranger.resize(1, 1)
    assert arranger.pixel_size == (8, 8)

    with pytest.raises(BoundsException):
        Arranger.new_scattered(0, 2, 8, 8)


def test_pixel_helpers(arranger):
    assert arranger.element_at_pixel(9, 0) == (1, 0)
    assert arranger.element_at_pixel(31, 31) == (3, 3)

    with pytest.raises(BoundsException):
        arranger.element_at_pixel(32, 0)

    assert arranger.selection_pixel_rect(4, 4, 8, 8) == (0, 0, 16, 16)
    assert arranger.selection_pixel_rect(8, 0, 8, 8) == (8, 0, 8, 8)
    assert arranger.selection_pixel_rect(30, 30, 8, 8) == (24, 24, 8, 8)


def test_set_element_sequential(arranger):
    with pytest.raises(ArrangerModeException):
        arranger.set_element(ArrangerElement('other', BitAddress(0x300), 'X', storage_size=0), 1, 0)

    element = arranger.get_element(0, 0).clone()
    element.address = BitAddress(0x300)
    element.palette_key = 'Sprites'
    arranger.set_element(element, 1, 0)

    # only the palette is taken, the address follows the grid
    assert arranger.get_element(1, 0).address == BitAddress(32)
    assert arranger.get_element(1, 0).palette_key == 'Sprites'

    arranger.move(ArrangerMoveType.COL_RIGHT)
    addresses = [_.address.bits for _ in arranger]
    assert addresses == [256 * (_ + 1) for _ in range(16)]
    assert {_.data_file_key for _ in arranger} == {'rom.sfc'}


def test_set_format_reclamps(arranger):
    arranger.move(ArrangerMoveType.END)
    arranger.set_format(GraphicsFormat('8bpp', 8))

    # 16 elements of 512 bits fill the whole file
    assert arranger.arranger_bit_size == 8192
    assert arranger.initial_address == BitAddress(0)


def test_set_format_reclamps_to_end(arranger):
    arranger.move_to(BitAddress(300))
    arranger.set_format(GraphicsFormat('6bpp', 6))

    assert arranger.arranger_bit_size == 16 * 384
    assert arranger.initial_address.bits == arranger.file_bit_length - arranger.arranger_bit_size
    assert arranger.initial_address == BitAddress(256)
