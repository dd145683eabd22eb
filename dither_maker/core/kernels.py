"""Error diffusion kernels.

Each kernel lists taps as (dx, dy, weight) relative to the current pixel,
plus the divisor the weights are normalized by. Taps may only point at
pixels visited later in raster order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from dither_maker.core.errors import InvalidKernelError

Tap = tuple[int, int, int]


class KernelName(str, Enum):
    FLOYD_STEINBERG = "floyd-steinberg"
    JARVIS_JUDICE_NINKE = "jarvis-judice-ninke"
    ATKINSON = "atkinson"
    BURKES = "burkes"
    STUCKI = "stucki"
    SIERRA = "sierra"
    SIERRA_TWO_ROW = "sierra-two-row"
    SIERRA_LITE = "sierra-lite"
    BASIC = "basic"


@dataclass(frozen=True)
class DiffusionKernel:
    name: str
    taps: tuple[Tap, ...]
    divisor: int

    def validate(self) -> None:
        """Raise InvalidKernelError if the kernel cannot be used."""
        if self.divisor <= 0:
            raise InvalidKernelError(
                f"Kernel {self.name!r}: divisor must be positive, got {self.divisor}"
            )
        for dx, dy, weight in self.taps:
            if weight <= 0:
                raise InvalidKernelError(
                    f"Kernel {self.name!r}: tap ({dx}, {dy}) has non-positive weight {weight}"
                )
            if not (dy > 0 or (dy == 0 and dx > 0)):
                raise InvalidKernelError(
                    f"Kernel {self.name!r}: tap ({dx}, {dy}) points at an already visited pixel"
                )

    @property
    def weight_sum(self) -> int:
        return sum(weight for _, _, weight in self.taps)

    @property
    def extent(self) -> tuple[int, int, int]:
        """How far taps reach (left, right, down) from the current pixel."""
        if not self.taps:
            return 0, 0, 0
        left = max(0, max(-dx for dx, _, _ in self.taps))
        right = max(0, max(dx for dx, _, _ in self.taps))
        down = max(0, max(dy for _, dy, _ in self.taps))
        return left, right, down


KERNELS: dict[KernelName, DiffusionKernel] = {
    KernelName.FLOYD_STEINBERG: DiffusionKernel(
        "Floyd-Steinberg",
        (
                                  (1, 0, 7),
            (-1, 1, 5), (0, 1, 3), (1, 1, 1),
        ),
        16,
    ),
    KernelName.JARVIS_JUDICE_NINKE: DiffusionKernel(
        "Jarvis-Judice-Ninke",
        (
                                             (1, 0, 7), (2, 0, 5),
            (-2, 1, 3), (-1, 1, 5), (0, 1, 7), (1, 1, 5), (2, 1, 3),
            (-2, 2, 1), (-1, 2, 3), (0, 2, 5), (1, 2, 3), (2, 2, 1),
        ),
        48,
    ),
    # Weights sum to 6 of 8: a quarter of the error is discarded
    KernelName.ATKINSON: DiffusionKernel(
        "Atkinson",
        (
                                  (1, 0, 1), (2, 0, 1),
            (-1, 1, 1), (0, 1, 1), (1, 1, 1),
                        (0, 2, 1),
        ),
        8,
    ),
    KernelName.BURKES: DiffusionKernel(
        "Burkes",
        (
                                             (1, 0, 8), (2, 0, 4),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
        ),
        32,
    ),
    KernelName.STUCKI: DiffusionKernel(
        "Stucki",
        (
                                             (1, 0, 8), (2, 0, 4),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
            (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
        ),
        42,
    ),
    KernelName.SIERRA: DiffusionKernel(
        "Sierra",
        (
                                             (1, 0, 5), (2, 0, 3),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 5), (1, 1, 4), (2, 1, 2),
                        (-1, 2, 2), (0, 2, 3), (1, 2, 2),
        ),
        32,
    ),
    KernelName.SIERRA_TWO_ROW: DiffusionKernel(
        "Sierra Two-Row",
        (
                                             (1, 0, 4), (2, 0, 3),
            (-2, 1, 1), (-1, 1, 2), (0, 1, 3), (1, 1, 2), (2, 1, 1),
        ),
        16,
    ),
    KernelName.SIERRA_LITE: DiffusionKernel(
        "Sierra Lite",
        (
                                  (1, 0, 2),
            (-1, 1, 1), (0, 1, 1),
        ),
        4,
    ),
    # Carries the whole error to the next pixel in the row
    KernelName.BASIC: DiffusionKernel("Basic", ((1, 0, 1),), 1),
}


def get_kernel(name: str | KernelName) -> DiffusionKernel:
    """Look up a kernel by enum member or string value.

    Raises:
        ValueError: for an unknown name.
    """
    return KERNELS[KernelName(name)]
