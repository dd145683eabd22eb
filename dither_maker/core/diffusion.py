"""Error diffusion dithering driven by a kernel table.

One engine serves every kernel in ``kernels.KERNELS``. Pixels are visited in
strict raster order; each pixel's quantization error is pushed forward to
the kernel's taps, which by construction are all still unvisited.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence

import numpy as np

from dither_maker.core.color import Color
from dither_maker.core.kernels import DiffusionKernel
from dither_maker.core.palette import Palette, as_palette
from dither_maker.core.quantize import nearest_index

logger = logging.getLogger(__name__)


def diffuse(
    image: np.ndarray,
    kernel: DiffusionKernel,
    palette: Palette | Sequence[Color],
) -> np.ndarray:
    """Dither an image by diffusing quantization error through ``kernel``.

    Args:
        image: float array of shape (height, width, 3) in [0.0, 1.0].
        kernel: diffusion kernel; validated once before the pass.
        palette: output colors.

    Returns:
        New array of the same shape where every pixel is a palette color.

    Raises:
        InvalidKernelError: bad divisor, weight or tap direction.
        EmptyPaletteError: palette has no colors.
    """
    kernel.validate()
    palette = as_palette(palette)
    pixels = np.asarray(image, dtype=np.float64)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (height, width, 3) image, got shape {pixels.shape}")

    h, w = pixels.shape[:2]
    left, right, down = kernel.extent
    start = time.perf_counter()

    # Padding soaks up taps that fall outside the image; it is never read
    acc = np.zeros((h + down, left + w + right, 3), dtype=np.float64)
    tap_dx = np.array([dx for dx, _, _ in kernel.taps], dtype=np.intp)
    tap_dy = np.array([dy for _, dy, _ in kernel.taps], dtype=np.intp)
    tap_share = np.array(
        [weight / kernel.divisor for _, _, weight in kernel.taps], dtype=np.float64
    )[:, None]

    colors = palette.array
    out = np.empty_like(pixels)
    for y in range(h):
        rows = y + tap_dy
        for x in range(w):
            effective = pixels[y, x] + acc[y, left + x]
            chosen = colors[nearest_index(effective, colors)]
            out[y, x] = chosen
            if tap_share.size:
                # add.at accumulates repeated taps
                np.add.at(acc, (rows, left + x + tap_dx), (effective - chosen) * tap_share)

    logger.debug(
        "Diffused %dx%d image with %s against %d colors in %.3fs",
        w,
        h,
        kernel.name,
        len(palette),
        time.perf_counter() - start,
    )
    return out
