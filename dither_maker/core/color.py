"""Color values and the perceptual distance used for palette matching.

Channels are floats in [0.0, 1.0]. 8-bit and hex forms are only converted
at the edges.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

CHANNEL_MIN = 0.0
CHANNEL_MAX = 1.0
MIDPOINT = 0.5

# Per-channel weights, picked by whether the first color's red is above MIDPOINT
BRIGHT_WEIGHTS = np.array([3.0, 4.0, 2.0])
DARK_WEIGHTS = np.array([2.0, 4.0, 3.0])


@dataclass(frozen=True)
class Color:
    r: float
    g: float
    b: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.r, self.g, self.b))

    def __add__(self, other: Color) -> Color:
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __sub__(self, other: Color) -> Color:
        return Color(self.r - other.r, self.g - other.g, self.b - other.b)

    def __mul__(self, factor: float) -> Color:
        return Color(self.r * factor, self.g * factor, self.b * factor)

    __rmul__ = __mul__

    def as_array(self) -> np.ndarray:
        return np.array([self.r, self.g, self.b], dtype=np.float64)

    @classmethod
    def from_array(cls, values: Sequence[float] | np.ndarray) -> Color:
        r, g, b = (float(v) for v in values)
        return cls(r, g, b)

    @classmethod
    def from_rgb8(cls, r: int, g: int, b: int) -> Color:
        return cls(r / 255.0, g / 255.0, b / 255.0)

    def to_rgb8(self) -> tuple[int, int, int]:
        """Round to 8-bit channels, clamping out-of-range values."""
        r, g, b = (
            int(round(max(CHANNEL_MIN, min(CHANNEL_MAX, c)) * 255)) for c in self
        )
        return r, g, b

    @classmethod
    def from_hex(cls, value: str) -> Color:
        """Parse ``#rrggbb`` or ``rrggbb``.

        Raises:
            ValueError: if the string is not six hex digits.
        """
        digits = value.strip().lstrip("#")
        if len(digits) != 6:
            raise ValueError(f"Invalid hex color: {value!r}")
        try:
            r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        except ValueError:
            raise ValueError(f"Invalid hex color: {value!r}") from None
        return cls.from_rgb8(r, g, b)

    def to_hex(self) -> str:
        r, g, b = self.to_rgb8()
        return f"#{r:02x}{g:02x}{b:02x}"


def weighted_distances(color: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    """Score colors against every candidate in one pass.

    Args:
        color: shape (3,) for one color or (n, 3) for a row of colors.
        candidates: shape (p, 3), typically a palette array.

    Returns:
        Array of shape (p,) or (n, p) with weighted squared distances.
    """
    color = np.asarray(color, dtype=np.float64)
    candidates = np.asarray(candidates, dtype=np.float64)
    weights = np.where(color[..., :1] > MIDPOINT, BRIGHT_WEIGHTS, DARK_WEIGHTS)
    diff = candidates - color[..., None, :]
    return (weights[..., None, :] * diff * diff).sum(axis=-1)


def distance(a: Color | Sequence[float], b: Color | Sequence[float]) -> float:
    """Weighted squared Euclidean distance from ``a`` to ``b``.

    The weight set follows ``a``'s red channel only, so the result is not
    symmetric in general.
    """
    a_arr = np.asarray(tuple(a), dtype=np.float64)
    b_arr = np.asarray(tuple(b), dtype=np.float64)
    return float(weighted_distances(a_arr, b_arr[None, :])[0])
