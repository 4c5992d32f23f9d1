import io
import logging
import os

from bitstring import Bits, BitArray

from .address import BitAddress


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file objects to uniform their
    properties: mainly we need to read and write a given number of bits
    starting at a BitAddress.

    A Stream is the explicit handle of a backing file: whoever owns the
    editing session opens it (better as a context manager) and passes it
    to the codec and to the palettes; the core never looks files up by name.

    Reading past the end of the file is allowed (it happens when an arranger
    is larger than the file itself): the missing bits are read as zeros.
    Writing past the end of the file never extends it.
    '''
    def __init__(self, obj, key=None, writable=True):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        if isinstance(obj, os.PathLike):
            obj = os.fspath(obj)

        self.obj = obj
        self.writable = writable
        self.key = key if key is not None else (obj if isinstance(obj, str) else '<memory>')

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)
        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of object to use as stream' % self.obj.__class__.__name__)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.key!r})>'

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, 'r+b' if self.writable else 'rb')

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    init_bytearray = init_bytes

    def close(self):
        if not self.obj.closed:
            logger.debug('closing %r' % self)
            self.obj.close()

    @property
    def size(self) -> int:
        '''Size of the underlying file in bytes'''
        position = self.obj.tell()
        size = self.obj.seek(0, io.SEEK_END)
        self.obj.seek(position)

        return size

    @property
    def bit_length(self) -> int:
        return self.size * 8

    def getvalue(self) -> bytes:
        '''Whole content of the stream'''
        self.obj.seek(0)
        return self.obj.read()

    def _read_span(self, address: BitAddress, n_bits: int) -> bytes:
        n_bytes = (address.bit_offset + n_bits + 7) // 8
        self.obj.seek(address.byte_offset)

        return self.obj.read(n_bytes)

    def read_bits(self, address: BitAddress, n_bits: int) -> Bits:
        '''Read n_bits starting at address, missing bits past EOF are zeros'''
        raw = self._read_span(address, n_bits)
        bits = Bits(raw)[address.bit_offset:address.bit_offset + n_bits]

        if len(bits) < n_bits:
            logger.warning('reading %d bits past the end of %r at %s' % (n_bits - len(bits), self, address))
            bits = bits + Bits(length=n_bits - len(bits))

        return bits

    def write_bits(self, address: BitAddress, bits: Bits) -> int:
        '''Write bits starting at address preserving the surrounding bits
        of the partially touched bytes. It returns the number of bits written.'''
        if not self.writable:
            raise PermissionError(f'{self!r} is opened read-only')

        raw = self._read_span(address, len(bits))
        if not raw:
            logger.warning('trying to write past the end of %r at %s' % (self, address))
            return 0

        data = BitArray(raw)
        available = len(data) - address.bit_offset
        if available < len(bits):
            logger.warning('truncating write of %d bits past the end of %r' % (len(bits) - available, self))
            bits = bits[:available]

        data.overwrite(bits, address.bit_offset)

        self.obj.seek(address.byte_offset)
        self.obj.write(data.tobytes())

        return len(bits)
