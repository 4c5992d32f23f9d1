from enum import Enum, auto


class ImageLayout(Enum):
    '''How the plane groups of an element are laid out in the bit stream'''
    TILED  = 'tiled'
    LINEAR = 'linear'


class ColorModel(Enum):
    '''Bit layout of a foreign color as stored inside the file'''
    RGB24  = 0
    ARGB32 = auto()
    BGR15  = auto()
    ABGR16 = auto()
    RGB15  = auto()


class ArrangerMode(Enum):
    '''Sequential arrangers scan a single file linearly, scattered arrangers
    have independently addressed elements'''
    SEQUENTIAL = 0
    SCATTERED  = auto()


class ArrangerMoveType(Enum):
    BYTE_DOWN = 0
    BYTE_UP   = auto()
    ROW_DOWN  = auto()
    ROW_UP    = auto()
    COL_RIGHT = auto()
    COL_LEFT  = auto()
    PAGE_DOWN = auto()
    PAGE_UP   = auto()
    HOME      = auto()
    END       = auto()
    ABSOLUTE  = auto()
