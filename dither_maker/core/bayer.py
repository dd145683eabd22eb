"""Recursive Bayer threshold matrix construction."""

from __future__ import annotations

from functools import lru_cache

import numpy as np

from dither_maker.core.errors import InvalidMatrixSizeError


def _check_size(size: int) -> None:
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
        raise InvalidMatrixSizeError(f"Matrix size must be an integer, got {size!r}")
    if size <= 0 or size & (size - 1):
        raise InvalidMatrixSizeError(
            f"Matrix size must be a positive power of two, got {size}"
        )


@lru_cache(maxsize=None)
def _build(size: int) -> np.ndarray:
    if size == 1:
        matrix = np.zeros((1, 1), dtype=np.float64)
    else:
        nested = _build(size // 2)
        mult = float(size * size)
        scaled = mult * nested
        top = np.concatenate([scaled, scaled + 2.0], axis=1)
        bottom = np.concatenate([scaled + 3.0, scaled + 1.0], axis=1)
        matrix = np.concatenate([top, bottom], axis=0) / mult
    matrix.setflags(write=False)
    return matrix


def build_bayer_matrix(size: int) -> np.ndarray:
    """Build the ``size`` x ``size`` threshold matrix with values in [0, 1).

    Matrices are memoized per size and returned read-only, so repeated
    calls hand back the same array.

    >>> build_bayer_matrix(2).tolist()
    [[0.0, 0.5], [0.75, 0.25]]

    Raises:
        InvalidMatrixSizeError: if ``size`` is not a positive power of two.
    """
    _check_size(size)
    return _build(int(size))
