"""Palettes and palette presets.

A palette is an ordered, non-empty run of colors. Order only matters when
two entries are equally close to a pixel: the earlier entry wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Sequence

import numpy as np

from dither_maker.core.color import Color
from dither_maker.core.errors import EmptyPaletteError


@dataclass(frozen=True)
class Palette:
    colors: tuple[Color, ...]
    _array: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        colors = tuple(self.colors)
        if not colors:
            raise EmptyPaletteError()
        array = np.array([c.as_array() for c in colors], dtype=np.float64)
        array.setflags(write=False)
        object.__setattr__(self, "colors", colors)
        object.__setattr__(self, "_array", array)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[Color]:
        return iter(self.colors)

    def __getitem__(self, idx: int) -> Color:
        return self.colors[idx]

    @property
    def array(self) -> np.ndarray:
        """Read-only (n, 3) float array of the palette colors."""
        return self._array

    @classmethod
    def from_hex(cls, values: Iterable[str]) -> Palette:
        return cls(tuple(Color.from_hex(v) for v in values))

    @classmethod
    def from_rgb8(cls, values: Iterable[tuple[int, int, int]]) -> Palette:
        return cls(tuple(Color.from_rgb8(*v) for v in values))

    def to_hex(self) -> list[str]:
        return [c.to_hex() for c in self.colors]


def as_palette(colors: Palette | Sequence[Color]) -> Palette:
    """Accept a Palette or a plain sequence of colors.

    Raises:
        EmptyPaletteError: if there are no colors.
    """
    if isinstance(colors, Palette):
        return colors
    return Palette(tuple(colors))


class PaletteName(str, Enum):
    MONO = "mono"
    WEB_SAFE = "web-safe"
    EIGHT_BIT = "eight-bit"
    CGA = "cga"
    GAMEBOY = "gameboy"


def _web_safe() -> Palette:
    levels = range(0, 256, 51)
    return Palette.from_rgb8((r, g, b) for r in levels for g in levels for b in levels)


def _eight_bit() -> Palette:
    """RGB 3-3-2: eight red and green levels, four blue levels."""
    return Palette.from_rgb8(
        (round(r * 255 / 7), round(g * 255 / 7), round(b * 255 / 3))
        for r in range(8)
        for g in range(8)
        for b in range(4)
    )


CGA_HEX = (
    "000000", "0000aa", "00aa00", "00aaaa",
    "aa0000", "aa00aa", "aa5500", "aaaaaa",
    "555555", "5555ff", "55ff55", "55ffff",
    "ff5555", "ff55ff", "ffff55", "ffffff",
)

GAMEBOY_HEX = ("0f380f", "306230", "8bac0f", "9bbc0f")


PALETTES: dict[PaletteName, Palette] = {
    PaletteName.MONO: Palette((Color(0.0, 0.0, 0.0), Color(1.0, 1.0, 1.0))),
    PaletteName.WEB_SAFE: _web_safe(),
    PaletteName.EIGHT_BIT: _eight_bit(),
    PaletteName.CGA: Palette.from_hex(CGA_HEX),
    PaletteName.GAMEBOY: Palette.from_hex(GAMEBOY_HEX),
}

PRESET_NAMES = frozenset(name.value for name in PaletteName)


def parse_palette(spec: str) -> Palette:
    """Resolve a preset name or a comma separated list of hex colors.

    >>> len(parse_palette("mono"))
    2
    >>> parse_palette("#ff0000,00ff00").to_hex()
    ['#ff0000', '#00ff00']
    """
    spec = spec.strip()
    if spec.lower() in PRESET_NAMES:
        return PALETTES[PaletteName(spec.lower())]
    entries = [part for part in spec.split(",") if part.strip()]
    if not entries:
        raise EmptyPaletteError(f"No colors in palette spec: {spec!r}")
    return Palette.from_hex(entries)
