'''
# Graphics formats

A graphics format describes how a rectangular block of pixels ("element") is
packed into a bit stream. It's data-driven, normally loaded from an XML
description like the following (a SNES 4bpp tile)

    <format name="SNES 4bpp">
      <codec>
        <colortype>indexed</colortype>
        <colordepth>4</colordepth>
        <imagetype>tiled</imagetype>
        <width>8</width>
        <height>8</height>
        <fixedsize>true</fixedsize>
        <mergepriority>0,1,2,3</mergepriority>
      </codec>
      <images>
        <image><colordepth>2</colordepth><rowinterlace>true</rowinterlace></image>
        <image><colordepth>2</colordepth><rowinterlace>true</rowinterlace></image>
      </images>
    </format>

Each <image> is a group of bit-planes stored together: the groups are visited
in order and their depths must sum to the color depth of the format. Without
any <image> a tiled format stores one plane after the other (one group per
plane) and a linear format keeps the bits of a pixel together (a single group).

The bit read from the k-th physical plane becomes the bit mergepriority[k] of
the pixel index, the row pixel pattern maps the n-th pixel read in a row to the
pixel column pattern[n].
'''
import logging
import os
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

import numpy as np

from .enum import ImageLayout
from .exceptions import FormatException


logger = logging.getLogger(__name__)


MAX_COLOR_DEPTH = 8


def _parse_int_list(value: str) -> List[int]:
    value = value.replace(' ', '')
    try:
        return [int(_) for _ in value.split(',') if _ != '']
    except ValueError:
        raise FormatException(f'\'{value}\' is not a comma separated list of integers')


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value

    value = str(value).strip().lower()
    if value in ('true', '1', 'yes'):
        return True
    if value in ('false', '0', 'no'):
        return False

    raise FormatException(f'\'{value}\' is not a boolean')


class PlaneGroup(object):
    '''Group of bit-planes that are stored together.

    If row_interlace is set each plane's row is stored in turn, otherwise
    the bits of all the planes of a pixel are stored next to each other.
    '''

    def __init__(self, color_depth: int, row_interlace: bool = False, row_pixel_pattern: Optional[List[int]] = None):
        self.color_depth = color_depth
        self.row_interlace = row_interlace
        self.row_pixel_pattern = list(row_pixel_pattern) if row_pixel_pattern else None
        self.extended_pattern: List[int] = []

    def __repr__(self):
        return f'<{self.__class__.__name__}(depth={self.color_depth}, interlace={self.row_interlace})>'

    def extend_row_pattern(self, width: int):
        '''Repeat the pattern until it covers the whole row, every cycle
        is shifted by the length of the pattern.'''
        pattern = self.row_pixel_pattern or list(range(width))

        extended = []
        base = 0
        while len(extended) < width:
            extended.extend(base + _ for _ in pattern)
            base += len(pattern)

        extended = extended[:width]

        if sorted(extended) != list(range(width)):
            raise FormatException(f'row pixel pattern {pattern} cannot be extended to a row of {width} pixels')

        self.extended_pattern = extended

    def copy(self) -> "PlaneGroup":
        group = PlaneGroup(self.color_depth, self.row_interlace, self.row_pixel_pattern)
        group.extended_pattern = list(self.extended_pattern)

        return group


class GraphicsFormat(object):

    def __init__(self, name: str, color_depth: int, layout=ImageLayout.TILED, width: int = 8, height: int = 8,
                 merge_priority: Optional[List[int]] = None, plane_groups: Optional[List[PlaneGroup]] = None,
                 fixed_size: bool = True, row_stride: int = 0, element_stride: int = 0, color_type: str = 'indexed'):
        self.name = name
        self.color_depth = color_depth
        self.layout = ImageLayout(layout)
        self.fixed_size = fixed_size
        self.color_type = color_type
        self.merge_priority = list(merge_priority) if merge_priority is not None else list(range(color_depth))
        self.plane_groups = plane_groups if plane_groups is not None else self.default_plane_groups(color_depth, self.layout)
        self.row_stride = row_stride
        self.element_stride = element_stride
        self._width = width
        self._height = height
        self._offsets = None

        self.validate()

        for group in self.plane_groups:
            group.extend_row_pattern(width)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name!r}, {self.width}x{self.height}x{self.color_depth}, {self.layout.value})>'

    @staticmethod
    def default_plane_groups(color_depth: int, layout: ImageLayout) -> List[PlaneGroup]:
        '''Tiled elements store one plane after the other, linear ones
        keep the bits of each pixel together.'''
        if layout == ImageLayout.TILED:
            return [PlaneGroup(1) for _ in range(color_depth)]

        return [PlaneGroup(color_depth)]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def storage_size(self) -> int:
        '''Size of an element in bits'''
        return self.storage_size_for(self._width, self._height)

    def storage_size_for(self, width: int, height: int) -> int:
        return (width + self.row_stride) * height * self.color_depth + self.element_stride

    def validate(self):
        if not 1 <= self.color_depth <= MAX_COLOR_DEPTH:
            raise FormatException(f'color depth {self.color_depth} of \'{self.name}\' is outside [1, {MAX_COLOR_DEPTH}]')

        if len(self.merge_priority) != self.color_depth:
            raise FormatException(
                f'the number of entries in mergepriority ({len(self.merge_priority)}) does not match the colordepth ({self.color_depth})')

        if sorted(self.merge_priority) != list(range(self.color_depth)):
            raise FormatException(f'mergepriority {self.merge_priority} is not a permutation of the planes')

        if sum(_.color_depth for _ in self.plane_groups) != self.color_depth:
            raise FormatException(f'the planes of the images of \'{self.name}\' do not sum to the colordepth')

        if self._width <= 0 or self._height <= 0:
            raise FormatException(f'invalid element size {self._width}x{self._height}')

        if self.row_stride < 0 or self.element_stride < 0:
            raise FormatException('strides cannot be negative')

    def resize(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise FormatException(f'invalid element size {width}x{height}')

        groups = [_.copy() for _ in self.plane_groups]
        for group in groups:
            group.extend_row_pattern(width)

        self.plane_groups = groups
        self._width = width
        self._height = height
        self._offsets = None

    def copy(self) -> "GraphicsFormat":
        return GraphicsFormat(
            self.name, self.color_depth, self.layout, self._width, self._height,
            merge_priority=self.merge_priority,
            plane_groups=[_.copy() for _ in self.plane_groups],
            fixed_size=self.fixed_size,
            row_stride=self.row_stride,
            element_stride=self.element_stride,
            color_type=self.color_type,
        )

    def offset_map(self) -> np.ndarray:
        '''Array of shape (color_depth, height, width) holding, for each bit
        of each plane, its position in the bit stream of the element.'''
        if self._offsets is None:
            self._offsets = self._build_offset_map()

        return self._offsets

    def _iter_groups(self):
        plane = 0
        for group in self.plane_groups:
            yield plane, group
            plane += group.color_depth

    def _build_offset_map(self) -> np.ndarray:
        offsets = np.zeros((self.color_depth, self._height, self._width), dtype=np.int64)
        offset = 0

        def place_row(base, group, y, offset):
            pattern = group.extended_pattern
            if group.row_interlace:
                for plane in range(group.color_depth):
                    for x in range(self._width):
                        offsets[base + plane, y, pattern[x]] = offset
                        offset += 1
                    offset += self.row_stride
            else:
                for x in range(self._width):
                    for plane in range(group.color_depth):
                        offsets[base + plane, y, pattern[x]] = offset
                        offset += 1
                offset += self.row_stride * group.color_depth

            return offset

        if self.layout == ImageLayout.TILED:
            for base, group in self._iter_groups():
                for y in range(self._height):
                    offset = place_row(base, group, y, offset)
        else:
            for y in range(self._height):
                for base, group in self._iter_groups():
                    offset = place_row(base, group, y, offset)

        offset += self.element_stride

        logger.debug('built offset map for %r (%d bits)' % (self, offset))

        return offsets

    @classmethod
    def from_dict(cls, description: Dict) -> "GraphicsFormat":
        '''Build a format from a mapping with the same keys of the XML description'''
        try:
            name = description['name']
            color_depth = int(description['colordepth'])
            width = int(description['width'])
            height = int(description['height'])
            layout = ImageLayout(str(description.get('imagetype', 'tiled')).strip().lower())
        except KeyError as e:
            raise FormatException(f'format description is missing {e}')
        except ValueError as e:
            raise FormatException(str(e))

        merge_priority = description.get('mergepriority', list(range(color_depth)))
        if isinstance(merge_priority, str):
            merge_priority = _parse_int_list(merge_priority)

        if not name:
            raise FormatException('format description without a name')

        try:
            row_stride = int(description.get('rowstride', 0))
            element_stride = int(description.get('elementstride', 0))
        except ValueError as e:
            raise FormatException(f'invalid stride for \'{name}\': {e}')

        groups = []
        for image in description.get('images') or []:
            pattern = image.get('rowpixelpattern')
            if isinstance(pattern, str):
                pattern = _parse_int_list(pattern)
            try:
                depth = int(image['colordepth'])
            except (KeyError, ValueError):
                raise FormatException(f'image of \'{name}\' without a valid colordepth')

            groups.append(PlaneGroup(depth, _parse_bool(image.get('rowinterlace', False)), pattern))

        return cls(
            name, color_depth, layout, width, height,
            merge_priority=merge_priority,
            plane_groups=groups or None,
            fixed_size=_parse_bool(description.get('fixedsize', True)),
            row_stride=row_stride,
            element_stride=element_stride,
            color_type=description.get('colortype', 'indexed'),
        )

    @classmethod
    def from_xml(cls, source) -> "GraphicsFormat":
        '''Load a format from a path or from a string containing the XML'''
        try:
            if isinstance(source, str) and source.lstrip().startswith('<'):
                root = ET.fromstring(source)
            else:
                root = ET.parse(source).getroot()
        except ET.ParseError as e:
            raise FormatException(f'malformed format description: {e}')

        codec = root.find('codec')
        if codec is None:
            raise FormatException('format description without <codec>')

        description = {'name': root.get('name')}
        for child in codec:
            description[child.tag] = (child.text or '').strip()

        description['images'] = [
            {child.tag: (child.text or '').strip() for child in image}
            for image in root.iter('image')
        ]

        logger.debug('loaded format description \'%s\'' % description['name'])

        return cls.from_dict(description)


def load_formats(directory) -> Dict[str, GraphicsFormat]:
    '''Load all the *.xml format descriptions in a directory keyed by name'''
    formats = {}
    for filename in sorted(os.listdir(directory)):
        if not filename.endswith('.xml'):
            continue

        fmt = GraphicsFormat.from_xml(os.path.join(directory, filename))
        if fmt.name in formats:
            logger.warning('format \'%s\' defined more than once, using %s' % (fmt.name, filename))
        formats[fmt.name] = fmt

    return formats
