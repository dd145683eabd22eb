"""Dithering algorithms bundled with the configuration they need.

Each variant carries its palette (and kernel or matrix size), so an
algorithm value is always ready to run. ``dither`` is the single entry
point used by the processing pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np

from dither_maker.core.diffusion import diffuse
from dither_maker.core.kernels import DiffusionKernel, KernelName, get_kernel
from dither_maker.core.ordered import DEFAULT_AMPLITUDE, ordered_dither
from dither_maker.core.palette import Palette
from dither_maker.core.quantize import quantize_image


class AlgorithmName(str, Enum):
    NONE = "none"
    BAYER = "bayer"
    FLOYD_STEINBERG = KernelName.FLOYD_STEINBERG.value
    JARVIS_JUDICE_NINKE = KernelName.JARVIS_JUDICE_NINKE.value
    ATKINSON = KernelName.ATKINSON.value
    BURKES = KernelName.BURKES.value
    STUCKI = KernelName.STUCKI.value
    SIERRA = KernelName.SIERRA.value
    SIERRA_TWO_ROW = KernelName.SIERRA_TWO_ROW.value
    SIERRA_LITE = KernelName.SIERRA_LITE.value
    BASIC = KernelName.BASIC.value


@dataclass(frozen=True)
class Quantize:
    """Nearest palette color per pixel, no dithering."""

    palette: Palette

    def apply(self, image: np.ndarray) -> np.ndarray:
        return quantize_image(image, self.palette)


@dataclass(frozen=True)
class ErrorDiffusion:
    kernel: DiffusionKernel
    palette: Palette

    def apply(self, image: np.ndarray) -> np.ndarray:
        return diffuse(image, self.kernel, self.palette)


@dataclass(frozen=True)
class Ordered:
    matrix_size: int
    palette: Palette
    amplitude: float = DEFAULT_AMPLITUDE

    def apply(self, image: np.ndarray) -> np.ndarray:
        return ordered_dither(image, self.matrix_size, self.palette, self.amplitude)


Algorithm = Union[Quantize, ErrorDiffusion, Ordered]


def build_algorithm(
    name: str | AlgorithmName,
    palette: Palette,
    matrix_size: int = 4,
    amplitude: float = DEFAULT_AMPLITUDE,
) -> Algorithm:
    """Build an algorithm from its name.

    Raises:
        ValueError: for an unknown name.
    """
    name = AlgorithmName(name)
    if name == AlgorithmName.NONE:
        return Quantize(palette)
    if name == AlgorithmName.BAYER:
        return Ordered(matrix_size, palette, amplitude)
    return ErrorDiffusion(get_kernel(name.value), palette)


def dither(image: np.ndarray, algorithm: Algorithm) -> np.ndarray:
    """Run ``algorithm`` over an (height, width, 3) float image."""
    return algorithm.apply(image)
