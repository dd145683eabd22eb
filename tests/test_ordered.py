"""Tests for ordered (Bayer) dithering."""

import numpy as np
import pytest

from dither_maker.core.bayer import build_bayer_matrix
from dither_maker.core.errors import EmptyPaletteError, InvalidMatrixSizeError
from dither_maker.core.ordered import (
    DEFAULT_AMPLITUDE,
    ordered_dither,
    ordered_dither_pixel,
)
from dither_maker.core.palette import PALETTES, PaletteName
from dither_maker.core.quantize import quantize_image

MONO = PALETTES[PaletteName.MONO]
BLACK = [0.0, 0.0, 0.0]
WHITE = [1.0, 1.0, 1.0]


class TestOrderedDither:
    def test_default_amplitude(self):
        assert DEFAULT_AMPLITUDE == pytest.approx(1 / 3)

    def test_threshold_indexed_column_first(self):
        """Pixel (x, y) uses matrix[x % N, y % N]."""
        wide = np.full((1, 2, 3), 0.4)
        assert ordered_dither(wide, 2, MONO, amplitude=1.0).tolist() == [[BLACK, WHITE]]
        tall = np.full((2, 1, 3), 0.4)
        assert ordered_dither(tall, 2, MONO, amplitude=1.0).tolist() == [[BLACK], [BLACK]]

    def test_zero_amplitude_is_plain_quantization(self):
        img = np.random.default_rng(5).random((6, 6, 3))
        out = ordered_dither(img, 4, MONO, amplitude=0.0)
        assert np.array_equal(out, quantize_image(img, MONO))

    def test_mid_gray_pattern(self):
        gray = np.full((4, 4, 3), 0.5)
        out = ordered_dither(gray, 2, MONO, amplitude=1.0)
        # Thresholds 0 and 0.25 push below mid, 0.5 ties to black, 0.75 goes white
        red = out[:, :, 0].tolist()
        assert red == [
            [0.0, 1.0, 0.0, 1.0],
            [0.0, 0.0, 0.0, 0.0],
            [0.0, 1.0, 0.0, 1.0],
            [0.0, 0.0, 0.0, 0.0],
        ]

    def test_pattern_repeats(self):
        img = np.random.default_rng(9).random((4, 4, 3))
        tiled = np.tile(img, (2, 2, 1))
        out = ordered_dither(tiled, 4, MONO)
        assert np.array_equal(out[:4, :4], out[4:, 4:])
        assert np.array_equal(out[:4, :4], out[:4, 4:])

    def test_output_in_palette(self):
        palette = PALETTES[PaletteName.WEB_SAFE]
        img = np.random.default_rng(6).random((9, 7, 3))
        out = ordered_dither(img, 8, palette)
        members = {tuple(c) for c in palette.array.tolist()}
        assert all(tuple(px) in members for px in out.reshape(-1, 3).tolist())

    def test_order_independent(self):
        """Reverse pixel-by-pixel processing gives the same image."""
        palette = PALETTES[PaletteName.CGA]
        img = np.random.default_rng(11).random((13, 17, 3))
        matrix = build_bayer_matrix(4)
        full = ordered_dither(img, 4, palette, DEFAULT_AMPLITUDE)

        manual = np.empty_like(img)
        for y in reversed(range(img.shape[0])):
            for x in reversed(range(img.shape[1])):
                manual[y, x] = ordered_dither_pixel(
                    img[y, x], x, y, matrix, palette, DEFAULT_AMPLITUDE
                )
        assert np.array_equal(full, manual)

    def test_does_not_mutate_input(self):
        img = np.full((3, 3, 3), 0.6)
        ordered_dither(img, 2, MONO)
        assert np.all(img == 0.6)


class TestFailures:
    def test_invalid_matrix_size(self):
        with pytest.raises(InvalidMatrixSizeError):
            ordered_dither(np.zeros((2, 2, 3)), 3, MONO)

    def test_empty_palette(self):
        with pytest.raises(EmptyPaletteError):
            ordered_dither(np.zeros((2, 2, 3)), 2, [])

    def test_bad_shape(self):
        with pytest.raises(ValueError, match="Expected"):
            ordered_dither(np.zeros((2, 2, 4)), 2, MONO)
