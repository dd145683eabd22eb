"""Exceptions raised by the dithering core.

All of them are input-validation failures raised before any pixel is
written, so a caller never sees partial output.
"""

from __future__ import annotations


class DitherError(ValueError):
    """Base class for dithering errors."""


class EmptyPaletteError(DitherError):
    def __init__(self, message: str = "Palette has no colors") -> None:
        super().__init__(message)


class InvalidKernelError(DitherError):
    pass


class InvalidMatrixSizeError(DitherError):
    pass
