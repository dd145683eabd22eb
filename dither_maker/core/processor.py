"""Frame processing pipeline.

Resize → split alpha → grayscale (mono) → dither → re-attach alpha.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image

from dither_maker.core.algorithms import AlgorithmName, build_algorithm, dither
from dither_maker.core.ordered import DEFAULT_AMPLITUDE, MONO_AMPLITUDE
from dither_maker.core.palette import PALETTES, Palette, PaletteName, parse_palette
from dither_maker.core.reader import Frame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Processing settings that affect output."""

    algorithm: AlgorithmName = AlgorithmName.FLOYD_STEINBERG
    palette: str = PaletteName.MONO.value  # Preset name or comma separated hex
    matrix_size: int = 4
    amplitude: float | None = None  # None picks a default for the mode
    mono: bool = False
    width: int | None = None  # None keeps the source size
    height: int | None = None

    def hash(self) -> str:
        """Deterministic hash for cache keying."""
        data = (
            f"{AlgorithmName(self.algorithm).value}:{self.palette}:{self.matrix_size}:"
            f"{self.resolve_amplitude()}:{self.mono}:{self.width}:{self.height}"
        )
        return hashlib.md5(data.encode()).hexdigest()[:12]

    def resolve_palette(self) -> Palette:
        """Mono always dithers against black and white."""
        if self.mono:
            return PALETTES[PaletteName.MONO]
        return parse_palette(self.palette)

    def resolve_amplitude(self) -> float:
        """Explicit amplitude wins; mono defaults to the full channel range."""
        if self.amplitude is not None:
            return self.amplitude
        return MONO_AMPLITUDE if self.mono else DEFAULT_AMPLITUDE


@dataclass
class ProcessedFrame:
    """Result of processing a single frame."""

    image: Image.Image
    duration_ms: int
    index: int
    width: int = 0
    height: int = 0


def image_to_array(img: Image.Image) -> tuple[np.ndarray, np.ndarray | None]:
    """Split a PIL image into a float RGB array in [0, 1] and its alpha band.

    Returns:
        (rgb, alpha) where rgb has shape (height, width, 3) and alpha is a
        uint8 (height, width) array, or None when the image is opaque.
    """
    alpha = None
    if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
        rgba = img.convert("RGBA")
        alpha = np.array(rgba.getchannel("A"), dtype=np.uint8)
        img = rgba
    rgb = np.array(img.convert("RGB"), dtype=np.float64) / 255.0
    return rgb, alpha


def array_to_image(rgb: np.ndarray, alpha: np.ndarray | None = None) -> Image.Image:
    """Convert a float RGB array back to a PIL image, restoring alpha."""
    data = np.round(np.clip(rgb, 0.0, 1.0) * 255.0).astype(np.uint8)
    if alpha is None:
        return Image.fromarray(data)
    return Image.fromarray(np.dstack([data, alpha]))


def to_grayscale(rgb: np.ndarray) -> np.ndarray:
    """Replace each pixel by the mean of its channels."""
    gray = rgb.mean(axis=-1, keepdims=True)
    return np.repeat(gray, 3, axis=-1)


def _resize_frame(img: Image.Image, width: int | None, height: int | None) -> Image.Image:
    """Resize to the target size, keeping aspect ratio if only one side is set."""
    if width is None and height is None:
        return img
    src_w, src_h = img.size
    if width is None:
        width = max(1, round(src_w * height / src_h))
    elif height is None:
        height = max(1, round(src_h * width / src_w))
    return img.resize((width, height), Image.Resampling.LANCZOS)


def process_frame(
    frame: Frame, settings: Settings, palette: Palette | None = None
) -> ProcessedFrame:
    """Process a single frame through the full pipeline.

    ``palette`` skips re-parsing ``settings.palette`` when many frames share it.
    """
    if palette is None:
        palette = settings.resolve_palette()
    algorithm = build_algorithm(
        settings.algorithm, palette, settings.matrix_size, settings.resolve_amplitude()
    )

    resized = _resize_frame(frame.image, settings.width, settings.height)
    rgb, alpha = image_to_array(resized)
    if settings.mono:
        rgb = to_grayscale(rgb)

    logger.info(
        "Frame %d: %s %dx%d, %d colors",
        frame.index,
        AlgorithmName(settings.algorithm).value,
        resized.width,
        resized.height,
        len(palette),
    )
    dithered = dither(rgb, algorithm)

    return ProcessedFrame(
        image=array_to_image(dithered, alpha),
        duration_ms=frame.duration_ms,
        index=frame.index,
        width=resized.width,
        height=resized.height,
    )
