'''
# Arrangers

An arranger is a grid of elements: each element is a rectangle of pixels whose
data lives at some BitAddress of a backing file and is encoded with some
graphics format.

There are two modes

 1. SEQUENTIAL: all the elements share the same file and format and are read
    one after the other in row-major order, moving the arranger means
    changing the address of the first element.
 2. SCATTERED: each element is addressed independently.

The arranger never reads the file: it only computes the addresses, the
decoding is a job of the codec.
'''
import logging
from typing import Iterator, List, Optional, Set, Tuple

from .address import BitAddress
from .codec import ElementBuffers
from .enum import ArrangerMode, ArrangerMoveType
from .exceptions import ArrangerModeException, BoundsException
from .formats import GraphicsFormat


DEFAULT_PALETTE = 'Default'


class ArrangerElement(object):
    '''Contains all the data necessary to encode/decode a single element of an arranger'''

    def __init__(self, data_file_key: str = '', address: BitAddress = BitAddress(0, 0), format_name: str = '',
                 palette_key: str = DEFAULT_PALETTE, storage_size: int = 0):
        self.data_file_key = data_file_key
        self.address = address
        self.format_name = format_name
        self.palette_key = palette_key
        self.storage_size = storage_size
        self.buffers: Optional[ElementBuffers] = None
        self.x1 = 0
        self.y1 = 0
        self.width = 0
        self.height = 0

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.data_file_key!r}@{self.address}, {self.format_name!r}, ({self.x1}, {self.y1}, {self.x2}, {self.y2}))>'

    @property
    def x2(self) -> int:
        '''Right pixel coordinate, inclusive'''
        return self.x1 + self.width - 1

    @property
    def y2(self) -> int:
        '''Bottom pixel coordinate, inclusive'''
        return self.y1 + self.height - 1

    def place(self, x1: int, y1: int, width: int, height: int):
        self.x1 = x1
        self.y1 = y1
        self.width = width
        self.height = height

    def contains(self, px: int, py: int) -> bool:
        return self.x1 <= px <= self.x2 and self.y1 <= py <= self.y2

    def is_blank(self) -> bool:
        return not self.format_name

    def allocate_buffers(self, fmt: GraphicsFormat):
        self.buffers = ElementBuffers.allocate(fmt, self.width, self.height)

    def clone(self) -> "ArrangerElement":
        element = ArrangerElement(self.data_file_key, self.address, self.format_name, self.palette_key, self.storage_size)
        element.place(self.x1, self.y1, self.width, self.height)
        element.buffers = self.buffers.copy() if self.buffers is not None else None

        return element


class Arranger(object):

    def __init__(self, name: str = '', mode: ArrangerMode = ArrangerMode.SCATTERED):
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.mode = mode
        self._grid: List[List[ArrangerElement]] = []
        self._element_pixel_size = (0, 0)
        # sequential only
        self._format: Optional[GraphicsFormat] = None
        self._file_size = 0
        self._arranger_bit_size = 0

    def __repr__(self):
        width, height = self.element_size
        return f'<{self.__class__.__name__}({self.name!r}, {self.mode.name}, {width}x{height})>'

    @classmethod
    def new_sequential(cls, elements_x: int, elements_y: int, data_file_key: str, file_size: int, fmt: GraphicsFormat,
                       palette_key: str = DEFAULT_PALETTE, name: Optional[str] = None,
                       address: BitAddress = BitAddress(0, 0)) -> "Arranger":
        '''Create an arranger reading sequentially the file of file_size bytes'''
        arranger = cls(name if name is not None else data_file_key, ArrangerMode.SEQUENTIAL)
        arranger._file_size = file_size
        arranger._rebuild_sequential(elements_x, elements_y, fmt, address.bits, data_file_key, palette_key)

        return arranger

    @classmethod
    def new_scattered(cls, elements_x: int, elements_y: int, width: int, height: int, name: str = '') -> "Arranger":
        '''Create an arranger of blank elements of width x height pixels'''
        cls._check_size(elements_x, elements_y)
        if width <= 0 or height <= 0:
            raise BoundsException(f'invalid element size {width}x{height}')

        arranger = cls(name, ArrangerMode.SCATTERED)
        arranger._element_pixel_size = (width, height)
        arranger._grid = arranger._build_scattered_grid(elements_x, elements_y)

        return arranger

    @property
    def is_sequential(self) -> bool:
        return self.mode == ArrangerMode.SEQUENTIAL

    @property
    def element_size(self) -> Tuple[int, int]:
        '''Size of the arranger in elements'''
        if not self._grid:
            return 0, 0

        return len(self._grid[0]), len(self._grid)

    @property
    def element_pixel_size(self) -> Tuple[int, int]:
        return self._element_pixel_size

    @property
    def pixel_size(self) -> Tuple[int, int]:
        if not self._grid:
            return 0, 0

        last = self._grid[-1][-1]

        return last.x2 + 1, last.y2 + 1

    def _require_sequential(self):
        if not self.is_sequential:
            raise ArrangerModeException(f'{self!r} is not a sequential arranger')

    @property
    def file_size(self) -> int:
        '''Size in bytes of the file read by a sequential arranger'''
        self._require_sequential()
        return self._file_size

    @property
    def file_bit_length(self) -> int:
        self._require_sequential()
        return self._file_size * 8

    @property
    def arranger_bit_size(self) -> int:
        '''Number of bits read sequentially by the whole arranger'''
        self._require_sequential()
        return self._arranger_bit_size

    @property
    def format(self) -> GraphicsFormat:
        self._require_sequential()
        return self._format

    @property
    def initial_address(self) -> BitAddress:
        if not self._grid:
            return BitAddress(0, 0)

        return self._grid[0][0].address

    @property
    def sequential_format_name(self) -> str:
        self._require_sequential()
        return self._grid[0][0].format_name

    def __iter__(self) -> Iterator[ArrangerElement]:
        for row in self._grid:
            yield from row

    def iter_positions(self) -> Iterator[Tuple[int, int, ArrangerElement]]:
        for y, row in enumerate(self._grid):
            for x, element in enumerate(row):
                yield x, y, element

    def _check_position(self, x: int, y: int):
        width, height = self.element_size
        if not (0 <= x < width and 0 <= y < height):
            raise BoundsException(f'element ({x}, {y}) is outside the {width}x{height} grid of {self!r}')

    @staticmethod
    def _check_size(elements_x: int, elements_y: int):
        if elements_x <= 0 or elements_y <= 0:
            raise BoundsException(f'invalid arranger size {elements_x}x{elements_y}')

    def get_element(self, x: int, y: int) -> ArrangerElement:
        self._check_position(x, y)
        return self._grid[y][x]

    def set_element(self, element: ArrangerElement, x: int, y: int):
        '''Put a copy of element at (x, y), its rectangle follows the position.

        A sequential arranger derives file, format and address of its elements
        from the first one: only the palette key of element is taken, it must
        otherwise share file, format and storage size with the arranger.'''
        self._check_position(x, y)

        if self.is_sequential:
            current = self._grid[y][x]
            if (element.data_file_key, element.format_name, element.storage_size) != \
                    (current.data_file_key, current.format_name, current.storage_size):
                raise ArrangerModeException(f'{element!r} does not belong to the sequential {self!r}')

            current.palette_key = element.palette_key
            return

        element = element.clone()
        width, height = self._element_pixel_size
        element.place(x * width, y * height, width, height)
        self._grid[y][x] = element

    def palette_keys(self) -> Set[str]:
        return {_.palette_key for _ in self}

    def _build_scattered_grid(self, elements_x: int, elements_y: int) -> List[List[ArrangerElement]]:
        width, height = self._element_pixel_size
        grid = []
        for y in range(elements_y):
            row = []
            for x in range(elements_x):
                if y < len(self._grid) and x < len(self._grid[y]):
                    element = self._grid[y][x].clone()
                else:
                    element = ArrangerElement()
                element.place(x * width, y * height, width, height)
                row.append(element)
            grid.append(row)

        return grid

    def _clamp(self, bits: int, arranger_bit_size: int) -> int:
        '''Clamp the address (in bits) of the first element so that the
        arranger doesn't read outside the file.'''
        file_bits = self._file_size * 8

        if arranger_bit_size > file_bits:
            self.logger.warning('%r needs %d bits but the file has only %d' % (self, arranger_bit_size, file_bits))
            return 0

        if bits + arranger_bit_size > file_bits:
            bits = file_bits - arranger_bit_size

        if bits < 0:
            bits = 0

        return bits

    def _rebuild_sequential(self, elements_x: int, elements_y: int, fmt: GraphicsFormat, bits: int,
                            data_file_key: Optional[str] = None, palette_key: Optional[str] = None):
        '''Build a new grid for the sequential arranger and commit it only
        when it's completely built.'''
        self._check_size(elements_x, elements_y)

        storage_size = fmt.storage_size
        arranger_bit_size = elements_x * elements_y * storage_size
        bits = self._clamp(bits, arranger_bit_size)

        template = self._grid[0][0] if self._grid else None
        data_file_key = data_file_key if data_file_key is not None else template.data_file_key
        default_palette = palette_key if palette_key is not None else template.palette_key

        grid = []
        for y in range(elements_y):
            row = []
            for x in range(elements_x):
                previous = self._grid[y][x] if y < len(self._grid) and x < len(self._grid[y]) else None
                element = ArrangerElement(
                    data_file_key=data_file_key,
                    address=BitAddress.from_bits(bits),
                    format_name=fmt.name,
                    palette_key=previous.palette_key if previous and palette_key is None else default_palette,
                    storage_size=storage_size,
                )
                element.place(x * fmt.width, y * fmt.height, fmt.width, fmt.height)
                element.allocate_buffers(fmt)
                row.append(element)

                bits += storage_size
            grid.append(row)

        self._grid = grid
        self._format = fmt
        self._element_pixel_size = (fmt.width, fmt.height)
        self._arranger_bit_size = arranger_bit_size

        self.logger.debug('%r starts at %s and reads %d bits' % (self, self.initial_address, arranger_bit_size))

    def _relocate(self, bits: int) -> BitAddress:
        '''Walk the grid assigning the addresses starting from bits'''
        for element in self:
            element.address = BitAddress.from_bits(bits)
            bits += element.storage_size

        return self.initial_address

    def move_to(self, address: BitAddress) -> BitAddress:
        '''Move the sequential arranger to the address. If the arranger would
        overflow the file it seeks only to the furthest offset possible.'''
        self._require_sequential()

        bits = self._clamp(int(address), self._arranger_bit_size)

        return self._relocate(bits)

    def move(self, move_type: ArrangerMoveType, address: Optional[BitAddress] = None) -> BitAddress:
        '''Move the sequential arranger and update each element, it never moves
        outside of the bounds of the file. It returns the address of the first element.'''
        self._require_sequential()

        width, height = self.element_size
        storage_size = self._grid[0][0].storage_size
        bits = self.initial_address.bits

        if move_type == ArrangerMoveType.BYTE_DOWN:
            bits += 8
        elif move_type == ArrangerMoveType.BYTE_UP:
            bits -= 8
        elif move_type == ArrangerMoveType.ROW_DOWN:
            bits += width * storage_size
        elif move_type == ArrangerMoveType.ROW_UP:
            bits -= width * storage_size
        elif move_type == ArrangerMoveType.COL_RIGHT:
            bits += storage_size
        elif move_type == ArrangerMoveType.COL_LEFT:
            bits -= storage_size
        elif move_type == ArrangerMoveType.PAGE_DOWN:
            bits += width * storage_size * height // 2
        elif move_type == ArrangerMoveType.PAGE_UP:
            bits -= width * storage_size * height // 2
        elif move_type == ArrangerMoveType.HOME:
            bits = 0
        elif move_type == ArrangerMoveType.END:
            bits = self.file_bit_length - self._arranger_bit_size
        elif move_type == ArrangerMoveType.ABSOLUTE:
            if address is None:
                raise ValueError('an absolute move needs an address')
            bits = int(address)
        else:
            raise ValueError(f'unknown move {move_type!r}')

        bits = self._clamp(bits, self._arranger_bit_size)

        self.logger.debug('%s moves %r to bit %d' % (move_type.name, self, bits))

        return self._relocate(bits)

    def resize(self, elements_x: int, elements_y: int):
        '''Rebuild the grid with a new number of elements, a sequential arranger
        keeps (if possible) the address of the first element.'''
        if self.is_sequential:
            self._rebuild_sequential(elements_x, elements_y, self._format, self.initial_address.bits)
        else:
            self._check_size(elements_x, elements_y)
            self._grid = self._build_scattered_grid(elements_x, elements_y)

        return self.initial_address

    def set_format(self, fmt: GraphicsFormat) -> BitAddress:
        '''Change the graphics format of a sequential arranger'''
        self._require_sequential()

        width, height = self.element_size
        self._rebuild_sequential(width, height, fmt, self.initial_address.bits)

        return self.initial_address

    def create_sub_arranger(self, x: int, y: int, elements_x: int, elements_y: int, name: Optional[str] = None) -> "Arranger":
        '''Copy a region of elements into a new scattered arranger, the region
        must lay completely inside the grid.'''
        self._check_size(elements_x, elements_y)
        self._check_position(x, y)
        self._check_position(x + elements_x - 1, y + elements_y - 1)

        arranger = Arranger(name if name is not None else self.name, ArrangerMode.SCATTERED)
        arranger._element_pixel_size = self._element_pixel_size
        width, height = self._element_pixel_size

        grid = []
        for desty in range(elements_y):
            row = []
            for destx in range(elements_x):
                element = self._grid[y + desty][x + destx].clone()
                element.place(destx * width, desty * height, width, height)
                row.append(element)
            grid.append(row)

        arranger._grid = grid

        return arranger

    def clone(self) -> "Arranger":
        arranger = Arranger(self.name, self.mode)
        arranger._grid = [[_.clone() for _ in row] for row in self._grid]
        arranger._element_pixel_size = self._element_pixel_size
        arranger._format = self._format
        arranger._file_size = self._file_size
        arranger._arranger_bit_size = self._arranger_bit_size

        return arranger

    def element_at_pixel(self, px: int, py: int) -> Tuple[int, int]:
        '''Position in the grid of the element containing the pixel'''
        for x, y, element in self.iter_positions():
            if element.contains(px, py):
                return x, y

        raise BoundsException(f'pixel ({px}, {py}) is outside of {self!r}')

    def selection_pixel_rect(self, left: int, top: int, width: int, height: int) -> Tuple[int, int, int, int]:
        '''Extend a pixel rectangle to include the entirety of the partially
        selected elements, clamped to the arranger. It returns (left, top, width, height).'''
        x1, y1 = left, top
        x2, y2 = left + width - 1, top + height - 1

        for element in self:
            if element.x1 < x1 <= element.x2:
                x1 = element.x1
            if element.y1 < y1 <= element.y2:
                y1 = element.y1
            if element.x1 <= x2 < element.x2:
                x2 = element.x2
            if element.y1 <= y2 < element.y2:
                y2 = element.y2

        x2 += 1
        y2 += 1

        pixel_width, pixel_height = self.pixel_size
        x1 = max(x1, 0)
        y1 = max(y1, 0)
        x2 = min(x2, pixel_width)
        y2 = min(y2, pixel_height)

        return x1, y1, x2 - x1, y2 - y1
