"""Ordered (Bayer) dithering.

Every pixel is nudged by its threshold from a repeating Bayer matrix and
then snapped to the nearest palette color. No state is shared between
pixels, so rows can be processed in any order.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence

import numpy as np

from dither_maker.core.bayer import build_bayer_matrix
from dither_maker.core.color import Color
from dither_maker.core.palette import Palette, as_palette
from dither_maker.core.quantize import nearest_index

logger = logging.getLogger(__name__)

# Fraction of the channel range the threshold pattern can shift a pixel by
DEFAULT_AMPLITUDE = 1.0 / 3.0
# Default for black and white output
MONO_AMPLITUDE = 1.0


def _threshold_offsets(
    matrix: np.ndarray, y: int, width: int, amplitude: float
) -> np.ndarray:
    n = matrix.shape[0]
    thresholds = matrix[np.arange(width) % n, y % n]
    return (thresholds - 0.5) * amplitude


def ordered_dither_row(
    row: np.ndarray,
    y: int,
    matrix: np.ndarray,
    palette: Palette,
    amplitude: float = DEFAULT_AMPLITUDE,
) -> np.ndarray:
    """Dither a single (width, 3) row located at image row ``y``."""
    perturbed = row + _threshold_offsets(matrix, y, row.shape[0], amplitude)[:, None]
    return palette.array[nearest_index(perturbed, palette.array)]


def ordered_dither_pixel(
    color: np.ndarray,
    x: int,
    y: int,
    matrix: np.ndarray,
    palette: Palette,
    amplitude: float = DEFAULT_AMPLITUDE,
) -> np.ndarray:
    """Dither one pixel; matches what ``ordered_dither`` writes at (x, y)."""
    n = matrix.shape[0]
    perturbed = np.asarray(color, dtype=np.float64) + (matrix[x % n, y % n] - 0.5) * amplitude
    return palette.array[nearest_index(perturbed, palette.array)]


def ordered_dither(
    image: np.ndarray,
    matrix_size: int,
    palette: Palette | Sequence[Color],
    amplitude: float = DEFAULT_AMPLITUDE,
) -> np.ndarray:
    """Dither an image with a ``matrix_size`` x ``matrix_size`` Bayer matrix.

    The threshold for pixel (x, y) is ``matrix[x % N, y % N]``.

    Raises:
        InvalidMatrixSizeError: ``matrix_size`` is not a positive power of two.
        EmptyPaletteError: palette has no colors.
    """
    matrix = build_bayer_matrix(matrix_size)
    palette = as_palette(palette)
    pixels = np.asarray(image, dtype=np.float64)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (height, width, 3) image, got shape {pixels.shape}")

    start = time.perf_counter()
    out = np.empty_like(pixels)
    for y in range(pixels.shape[0]):
        out[y] = ordered_dither_row(pixels[y], y, matrix, palette, float(amplitude))

    logger.debug(
        "Ordered dither %dx%d with %dx%d matrix against %d colors in %.3fs",
        pixels.shape[1],
        pixels.shape[0],
        matrix_size,
        matrix_size,
        len(palette),
        time.perf_counter() - start,
    )
    return out
