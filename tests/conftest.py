import pathlib

import pytest

from rawtile import GraphicsFormat, ImageLayout, PlaneGroup


@pytest.fixture
def test_root_dir():
    return pathlib.Path(__file__).parent


@pytest.fixture
def formats_dir(test_root_dir):
    return test_root_dir / '..' / 'extra' / 'formats'


@pytest.fixture
def nes_format():
    return GraphicsFormat('NES 2bpp', 2, plane_groups=[PlaneGroup(1), PlaneGroup(1)])


@pytest.fixture
def snes_format():
    return GraphicsFormat('SNES 4bpp', 4, plane_groups=[PlaneGroup(2, row_interlace=True), PlaneGroup(2, row_interlace=True)])


@pytest.fixture
def linear_format():
    return GraphicsFormat('1bpp Linear', 1, ImageLayout.LINEAR, width=8, height=1, fixed_size=False)


@pytest.fixture
def rom_path(tmp_path):
    '''1KiB file filled with a counter'''
    path = tmp_path / 'rom.bin'
    path.write_bytes(bytes(_ & 0xff for _ in range(1024)))

    return path
