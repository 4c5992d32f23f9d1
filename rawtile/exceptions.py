class RawTileException(Exception):
    '''Base class to extend in order to throw exception in rawtile.

    It takes an optional message that describes what went wrong.
    '''

    def __init__(self, message=None):
        self.message = message
        super().__init__(*([message] if message is not None else []))


class FormatException(RawTileException, ValueError):
    '''Raised while loading a graphics format, a color model or a palette
    with a configuration that cannot be honored: it's never retried.'''
    pass


class ColorNotFoundException(RawTileException, LookupError):
    '''The exact color requested is not present in the palette.'''

    def __init__(self, color):
        self.color = color
        super().__init__(f'color 0x{color:08x} not found in palette')


class BoundsException(RawTileException, IndexError):
    '''Something outside the allowed range was requested: a negative address,
    an element outside the grid, a palette index past the last entry.'''
    pass


class ArrangerModeException(RawTileException, RuntimeError):
    '''The operation is not available for the mode of the arranger.'''
    pass
