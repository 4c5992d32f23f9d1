'''
Palettes of indexed graphics.

A palette is stored inside a host file (usually the ROM itself) as a sequence
of packed little-endian entries with no header: it's identified by the key of
the backing file, the BitAddress of the first entry, the color model and the
number of entries.

Each entry is kept in both representations, foreign (the raw value as read from
the file) and native (ARGB32).
'''
import logging
from typing import List, Sequence

import numpy as np
from bitstring import Bits, BitStream, pack

from . import colors
from .address import BitAddress
from .enum import ColorModel
from .exceptions import FormatException, BoundsException, ColorNotFoundException
from .streams import Stream


MAX_ENTRIES = 256


class Palette(object):

    def __init__(self, name: str):
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.color_model = ColorModel.ARGB32
        self.data_file_key = None
        self.address = BitAddress(0, 0)
        self.zero_index_transparent = True
        self._foreign: List[int] = []
        self._native: List[int] = []
        self._lab = None

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name!r}, {self.color_model.name}, entries={len(self)})>'

    def __len__(self):
        return len(self._native)

    def __getitem__(self, index: int) -> int:
        return self.get(index)

    def __iter__(self):
        return iter(self._native)

    @property
    def entries(self) -> int:
        return len(self._native)

    @property
    def has_alpha(self) -> bool:
        return colors.has_alpha(self.color_model)

    @property
    def foreign_colors(self) -> Sequence[int]:
        return tuple(self._foreign)

    @property
    def native_colors(self) -> Sequence[int]:
        return tuple(self._native)

    @classmethod
    def from_native(cls, name: str, native_colors, model=ColorModel.ARGB32, zero_index_transparent=False) -> "Palette":
        '''Build a palette not backed by any file'''
        palette = cls(name)
        palette.color_model = model
        palette.zero_index_transparent = zero_index_transparent
        palette._set_entries([colors.native_to_foreign(_, model) for _ in native_colors])

        return palette

    def rename(self, name: str):
        self.name = name

    def _set_entries(self, foreign: List[int]):
        if len(foreign) > MAX_ENTRIES:
            raise FormatException(f'palettes can have at most {MAX_ENTRIES} entries, not {len(foreign)}')

        self._foreign = list(foreign)
        self._native = [colors.foreign_to_native(_, self.color_model) for _ in self._foreign]
        self._apply_transparency()

    def _apply_transparency(self):
        if self.zero_index_transparent and self._native:
            self._native[0] &= 0x00ffffff

        self._lab = None

    def _check_index(self, index: int):
        if not 0 <= index < len(self._native):
            raise BoundsException(f'index {index} is outside the {len(self._native)} entries of {self!r}')

    def load(self, stream: Stream, address: BitAddress, model: ColorModel, zero_index_transparent: bool = True, entries: int = MAX_ENTRIES):
        '''Load the palette from the stream: entries are contiguous starting
        from address and are encoded following the color model.'''
        if isinstance(model, str):
            model = colors.color_model_from_string(model)

        if not 0 <= entries <= MAX_ENTRIES:
            raise FormatException(f'palettes can have at most {MAX_ENTRIES} entries, not {entries}')

        entry_bits = colors.bits_per_entry(model)

        self.logger.debug('loading %d entries of %s from %r at %s' % (entries, model.name, stream, address))

        data = BitStream(stream.read_bits(address, entry_bits * entries))
        foreign = [data.read(f'uintle:{entry_bits}') for _ in range(entries)]

        self.color_model = model
        self.zero_index_transparent = zero_index_transparent
        self.address = address
        self.data_file_key = stream.key
        self._set_entries(foreign)

        return self

    def reload(self, stream: Stream):
        '''Load again the palette from its underlying source'''
        return self.load(stream, self.address, self.color_model, self.zero_index_transparent, self.entries)

    def load_file(self, path):
        '''Load a 256-entry palette from a raw ARGB32 file, transparency is disabled'''
        with Stream(path, writable=False) as stream:
            if stream.size != MAX_ENTRIES * 4:
                raise FormatException(f'{path} is not a {MAX_ENTRIES} entries ARGB32 palette file')

            self.load(stream, BitAddress(0, 0), ColorModel.ARGB32, zero_index_transparent=False)

        self._set_entries([_ | 0xff000000 for _ in self._foreign])

        return self

    def save(self, stream: Stream):
        '''Write back the palette to its source location.

        The entries are encoded again from their native colors: entry zero
        is encoded from its foreign value when its alpha has been forced
        by the zero-index transparency.'''
        if stream.key != self.data_file_key:
            self.logger.warning('saving %r into %r instead of %r' % (self, stream, self.data_file_key))

        if not self._native:
            return

        entry_bits = colors.bits_per_entry(self.color_model)
        data = Bits().join(
            pack(f'uintle:{entry_bits}', colors.native_to_foreign(native, self.color_model))
            for native in self._natives_to_save()
        )

        self.logger.debug('saving %r at %s' % (self, self.address))

        stream.write_bits(self.address, data)

    def _natives_to_save(self):
        natives = list(self._native)
        if self.zero_index_transparent and natives:
            natives[0] = colors.foreign_to_native(self._foreign[0], self.color_model)

        return natives

    def get(self, index: int) -> int:
        '''Returns the native color at the specified index'''
        self._check_index(index)

        return self._native[index]

    def get_foreign(self, index: int) -> int:
        self._check_index(index)

        return self._foreign[index]

    def set_foreign_color(self, index: int, value: int):
        '''Replace the color at index with a foreign color and update the native one'''
        self._check_index(index)

        self._foreign[index] = value
        self._native[index] = colors.foreign_to_native(value, self.color_model)
        self._apply_transparency()

    def set_foreign_components(self, index: int, a: int, r: int, g: int, b: int):
        self.set_foreign_color(index, colors.join_foreign(a, r, g, b, self.color_model))

    def set_native_color(self, index: int, color: int):
        '''Replace the color at index with the nearest one representable by the color model'''
        self.set_foreign_color(index, colors.native_to_foreign(color, self.color_model))

    def exact_index(self, color: int) -> int:
        for index, native in enumerate(self._native):
            if native == color:
                return index

        raise ColorNotFoundException(color)

    def nearest_index(self, color: int) -> int:
        '''Index of the entry perceptually nearest (CIE94) to color,
        ties resolve to the lowest index.'''
        if not self._native:
            raise ColorNotFoundException(color)

        if self._lab is None:
            self._lab = colors.native_to_lab(self._native)

        distances = colors.cie94_distance(colors.native_to_lab([color])[0], self._lab)

        return int(np.argmin(distances))

    def index_of(self, color: int, exact_color_only: bool = False) -> int:
        if exact_color_only:
            return self.exact_index(color)

        return self.nearest_index(color)

    def to_rgba(self) -> np.ndarray:
        '''(n, 4) uint8 array with the RGBA channels of the native colors'''
        native = np.asarray(self._native, dtype=np.uint32)

        return np.stack([
            (native >> 16) & 0xff,
            (native >> 8) & 0xff,
            native & 0xff,
            (native >> 24) & 0xff,
        ], axis=-1).astype(np.uint8)

    def clone(self) -> "Palette":
        palette = Palette(self.name)
        palette.color_model = self.color_model
        palette.data_file_key = self.data_file_key
        palette.address = self.address
        palette.zero_index_transparent = self.zero_index_transparent
        palette._foreign = list(self._foreign)
        palette._native = list(self._native)

        return palette
