import logging

import pytest
from bitstring import Bits

from rawtile import BitAddress, Stream


def test_path(rom_path):
    with Stream(rom_path) as stream:
        assert stream.key == str(rom_path)
        assert stream.size == 1024
        assert stream.bit_length == 8192
        assert stream.read_bits(BitAddress(2), 16) == Bits('0x0203')
        assert stream.read_bits(BitAddress(1, 4), 8) == Bits('0x10')

    assert stream.closed


def test_unaligned_write(rom_path):
    with Stream(rom_path) as stream:
        assert stream.write_bits(BitAddress(0, 4), Bits('0xff')) == 8

    assert rom_path.read_bytes()[:3] == b'\x0f\xf1\x02'


def test_read_only(rom_path):
    with Stream(str(rom_path), writable=False) as stream:
        with pytest.raises(PermissionError):
            stream.write_bits(BitAddress(0), Bits('0x00'))


def test_past_end(caplog):
    stream = Stream(b'\xab\xcd')

    with caplog.at_level(logging.WARNING):
        bits = stream.read_bits(BitAddress(1), 16)

    assert bits == Bits('0xcd00')
    assert 'past the end' in caplog.text

    assert stream.write_bits(BitAddress(1, 4), Bits('0x00ff')) == 4
    assert stream.getvalue() == b'\xab\xc0'
    assert stream.write_bits(BitAddress(2), Bits('0xff')) == 0
    assert stream.size == 2


def test_wrong_object():
    with pytest.raises(ValueError):
        Stream(42)
