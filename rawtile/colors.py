'''
Conversion between foreign colors (the bit layout used by the target system)
and native colors (ARGB32 integers, 0xAARRGGBB).

# Foreign color models

 - RGB24: 0xRRGGBB, no alpha channel
 - ARGB32: 0xAARRGGBB, same as the native representation
 - BGR15: 0bxBBBBBGGGGGRRRRR, no alpha channel
 - ABGR16: 0bABBBBBGGGGGRRRRR, one bit of alpha
 - RGB15: 0bxRRRRRGGGGGBBBBB, no alpha channel

5-bit channels are expanded to 8-bit replicating the top bits, so that 0x1f
becomes 0xff and the conversion back to 5-bit (a plain shift) is exact.
'''
import logging
from typing import List, Tuple

import numpy as np

from .enum import ColorModel
from .exceptions import FormatException


logger = logging.getLogger(__name__)


# number of bits used to store one palette entry
MODEL_BITS = {
    ColorModel.RGB24:  24,
    ColorModel.ARGB32: 32,
    ColorModel.BGR15:  16,
    ColorModel.ABGR16: 16,
    ColorModel.RGB15:  16,
}

MODEL_HAS_ALPHA = {
    ColorModel.RGB24:  False,
    ColorModel.ARGB32: True,
    ColorModel.BGR15:  False,
    ColorModel.ABGR16: True,
    ColorModel.RGB15:  False,
}


def color_model_from_string(name: str) -> ColorModel:
    try:
        return ColorModel[name.strip().upper()]
    except KeyError:
        raise FormatException(f'ColorModel {name!r} is not supported')


def color_model_names() -> List[str]:
    return [_.name for _ in ColorModel]


def bits_per_entry(model: ColorModel) -> int:
    return MODEL_BITS[model]


def has_alpha(model: ColorModel) -> bool:
    return MODEL_HAS_ALPHA[model]


def _expand5(value: int) -> int:
    return (value << 3) | (value >> 2)


def _reduce5(value: int) -> int:
    return value >> 3


def split_native(color: int) -> Tuple[int, int, int, int]:
    '''Split a native color into its (A, R, G, B) components'''
    return (color >> 24) & 0xff, (color >> 16) & 0xff, (color >> 8) & 0xff, color & 0xff


def join_native(a: int, r: int, g: int, b: int) -> int:
    return ((a & 0xff) << 24) | ((r & 0xff) << 16) | ((g & 0xff) << 8) | (b & 0xff)


def split_foreign(value: int, model: ColorModel) -> Tuple[int, int, int, int]:
    '''Split a foreign color into its foreign (A, R, G, B) components,
    i.e. with the channel width of the model.'''
    if model == ColorModel.RGB24:
        return 0, (value >> 16) & 0xff, (value >> 8) & 0xff, value & 0xff
    elif model == ColorModel.ARGB32:
        return split_native(value)
    elif model == ColorModel.BGR15:
        return 0, value & 0x1f, (value >> 5) & 0x1f, (value >> 10) & 0x1f
    elif model == ColorModel.ABGR16:
        return (value >> 15) & 0x1, value & 0x1f, (value >> 5) & 0x1f, (value >> 10) & 0x1f
    elif model == ColorModel.RGB15:
        return 0, (value >> 10) & 0x1f, (value >> 5) & 0x1f, value & 0x1f

    raise FormatException(f'unsupported color model {model!r}')


def join_foreign(a: int, r: int, g: int, b: int, model: ColorModel) -> int:
    '''Build a foreign color from its foreign components'''
    if model == ColorModel.RGB24:
        return ((r & 0xff) << 16) | ((g & 0xff) << 8) | (b & 0xff)
    elif model == ColorModel.ARGB32:
        return join_native(a, r, g, b)
    elif model == ColorModel.BGR15:
        return (r & 0x1f) | ((g & 0x1f) << 5) | ((b & 0x1f) << 10)
    elif model == ColorModel.ABGR16:
        return (r & 0x1f) | ((g & 0x1f) << 5) | ((b & 0x1f) << 10) | ((a & 0x1) << 15)
    elif model == ColorModel.RGB15:
        return (b & 0x1f) | ((g & 0x1f) << 5) | ((r & 0x1f) << 10)

    raise FormatException(f'unsupported color model {model!r}')


def foreign_to_native(value: int, model: ColorModel) -> int:
    a, r, g, b = split_foreign(value, model)

    if model in (ColorModel.RGB24, ColorModel.ARGB32):
        return join_native(a if has_alpha(model) else 0xff, r, g, b)

    alpha = a * 0xff if has_alpha(model) else 0xff

    return join_native(alpha, _expand5(r), _expand5(g), _expand5(b))


def native_to_foreign(color: int, model: ColorModel) -> int:
    a, r, g, b = split_native(color)

    if model in (ColorModel.RGB24, ColorModel.ARGB32):
        return join_foreign(a, r, g, b, model)

    return join_foreign(1 if a >= 0x80 else 0, _reduce5(r), _reduce5(g), _reduce5(b), model)


# CIE94 parameters for graphic arts
_K1 = 0.045
_K2 = 0.015

# sRGB -> XYZ matrix for the D65 white point
_RGB2XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])
_WHITE_D65 = np.array([0.95047, 1.00000, 1.08883])


def native_to_lab(colors) -> np.ndarray:
    '''Convert an array-like of native colors into an (n, 3) array of CIE L*a*b*
    coordinates. The alpha channel does not take part in the conversion.'''
    colors = np.asarray(colors, dtype=np.uint32).reshape(-1)
    rgb = np.stack([
        (colors >> 16) & 0xff,
        (colors >> 8) & 0xff,
        colors & 0xff,
    ], axis=-1).astype(np.float64) / 255.0

    linear = np.where(rgb > 0.04045, ((rgb + 0.055) / 1.055) ** 2.4, rgb / 12.92)
    xyz = linear @ _RGB2XYZ.T / _WHITE_D65

    epsilon = 216 / 24389
    kappa = 24389 / 27
    f = np.where(xyz > epsilon, np.cbrt(xyz), (kappa * xyz + 16) / 116)

    lab = np.empty_like(f)
    lab[:, 0] = 116 * f[:, 1] - 16
    lab[:, 1] = 500 * (f[:, 0] - f[:, 1])
    lab[:, 2] = 200 * (f[:, 1] - f[:, 2])

    return lab


def cie94_distance(reference, candidates) -> np.ndarray:
    '''Distance between one reference L*a*b* color and an (n, 3) array of
    candidates, the chroma weighting is computed on the reference.'''
    reference = np.asarray(reference, dtype=np.float64).reshape(3)
    candidates = np.asarray(candidates, dtype=np.float64).reshape(-1, 3)

    delta_l = reference[0] - candidates[:, 0]
    c1 = np.hypot(reference[1], reference[2])
    c2 = np.hypot(candidates[:, 1], candidates[:, 2])
    delta_c = c1 - c2
    delta_a = reference[1] - candidates[:, 1]
    delta_b = reference[2] - candidates[:, 2]
    delta_h2 = np.maximum(delta_a ** 2 + delta_b ** 2 - delta_c ** 2, 0.0)

    sc = 1 + _K1 * c1
    sh = 1 + _K2 * c1

    return np.sqrt(delta_l ** 2 + (delta_c / sc) ** 2 + delta_h2 / sh ** 2)
