"""Nearest-color quantization against a palette."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from dither_maker.core.color import Color, weighted_distances
from dither_maker.core.palette import Palette, as_palette


@dataclass(frozen=True)
class QuantizationResult:
    color: Color  # Palette member closest to the input
    error: Color  # input - color, unclamped


def nearest_index(color: np.ndarray, palette_array: np.ndarray) -> np.ndarray | int:
    """Index of the closest palette entry, first entry winning ties.

    Accepts one color (3,) or a row of colors (n, 3).
    """
    scores = weighted_distances(color, palette_array)
    if scores.ndim == 1:
        return int(np.argmin(scores))
    return np.argmin(scores, axis=-1)


def quantize(
    color: Color | Sequence[float], palette: Palette | Sequence[Color]
) -> QuantizationResult:
    """Find the palette entry closest to ``color`` and the residual.

    Raises:
        EmptyPaletteError: if the palette has no entries.
    """
    palette = as_palette(palette)
    if not isinstance(color, Color):
        color = Color.from_array(color)
    chosen = palette[nearest_index(color.as_array(), palette.array)]
    return QuantizationResult(color=chosen, error=color - chosen)


def quantize_image(image: np.ndarray, palette: Palette | Sequence[Color]) -> np.ndarray:
    """Map every pixel to its nearest palette color, no dithering."""
    palette = as_palette(palette)
    pixels = np.asarray(image, dtype=np.float64)
    out = np.empty_like(pixels)
    for y in range(pixels.shape[0]):
        out[y] = palette.array[nearest_index(pixels[y], palette.array)]
    return out
