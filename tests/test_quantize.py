"""Tests for nearest-color quantization."""

import numpy as np
import pytest

from dither_maker.core.color import Color, distance
from dither_maker.core.errors import EmptyPaletteError
from dither_maker.core.palette import PALETTES, Palette, PaletteName
from dither_maker.core.quantize import nearest_index, quantize, quantize_image

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)


class TestQuantize:
    def test_exact_member(self):
        result = quantize(WHITE, [BLACK, WHITE])
        assert result.color == WHITE
        assert result.error == Color(0.0, 0.0, 0.0)

    def test_residual_is_signed_and_unclamped(self):
        result = quantize(Color(1.2, 0.9, -0.1), [BLACK, WHITE])
        assert result.color == WHITE
        assert result.error.r == pytest.approx(0.2)
        assert result.error.g == pytest.approx(-0.1)
        assert result.error.b == pytest.approx(-1.1)

    def test_accepts_sequences(self):
        result = quantize((0.1, 0.1, 0.1), PALETTES[PaletteName.MONO])
        assert result.color == BLACK

    def test_empty_palette(self):
        with pytest.raises(EmptyPaletteError):
            quantize(WHITE, [])

    def test_tie_goes_to_first_entry(self):
        gray = Color(0.5, 0.5, 0.5)
        assert quantize(gray, [BLACK, WHITE]).color == BLACK
        assert quantize(gray, [WHITE, BLACK]).color == WHITE

    def test_duplicate_entries(self):
        red = Color(1.0, 0.0, 0.0)
        pal = Palette((BLACK, red, red))
        assert nearest_index(red.as_array(), pal.array) == 1

    def test_membership_and_nearest(self):
        rng = np.random.default_rng(7)
        palette = PALETTES[PaletteName.CGA]
        for values in rng.uniform(-0.2, 1.2, size=(200, 3)):
            color = Color.from_array(values)
            chosen = quantize(color, palette).color
            assert chosen in palette.colors
            best = distance(color, chosen)
            assert all(best <= distance(color, other) for other in palette)

    def test_nearest_index_row(self):
        pal = PALETTES[PaletteName.MONO]
        row = np.array([[0.1, 0.1, 0.1], [0.9, 0.9, 0.9], [0.4, 0.4, 0.4]])
        assert nearest_index(row, pal.array).tolist() == [0, 1, 0]


class TestQuantizeImage:
    def test_shape_and_membership(self):
        rng = np.random.default_rng(1)
        img = rng.random((6, 9, 3))
        pal = PALETTES[PaletteName.GAMEBOY]
        out = quantize_image(img, pal)
        assert out.shape == img.shape
        members = {tuple(c) for c in pal.array.tolist()}
        assert all(tuple(px) in members for px in out.reshape(-1, 3).tolist())

    def test_does_not_mutate_input(self):
        img = np.full((2, 2, 3), 0.3)
        quantize_image(img, PALETTES[PaletteName.MONO])
        assert np.all(img == 0.3)

    def test_empty_palette(self):
        with pytest.raises(EmptyPaletteError):
            quantize_image(np.zeros((2, 2, 3)), [])
