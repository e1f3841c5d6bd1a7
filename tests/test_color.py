"""Tests for the color model."""
import math

import pytest
import numpy as np

from flatvec.color import (
    BLACK,
    WHITE,
    Color,
    black_at_opacity,
    composite_over_white,
    round_half_up,
)


class TestColorConversions:
    """Test hex, RGB and HSL forms."""

    def test_hex_parsing(self):
        assert Color.from_hex("#FF8000") == Color(255, 128, 0)
        assert Color.from_hex("0a0b0c") == Color(10, 11, 12)
        assert Color.from_hex("#fff") == WHITE

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            Color.from_hex("#12345")
        with pytest.raises(ValueError):
            Color.from_hex("black")

    def test_hex_output_is_lowercase_six_digit(self):
        assert Color(1, 2, 255).hex == "#0102ff"
        assert str(BLACK) == "#000000"

    def test_channel_range_checked(self):
        with pytest.raises(ValueError):
            Color(256, 0, 0)
        with pytest.raises(ValueError):
            Color(0, 0, 0, alpha=1.5)

    def test_hsl_of_primaries(self):
        h, s, l = Color(255, 0, 0).hsl
        assert h == pytest.approx(0.0)
        assert s == pytest.approx(1.0)
        assert l == pytest.approx(0.5)

        h, _, _ = Color(0, 0, 255).hsl
        assert h == pytest.approx(240.0)

    def test_achromatic_hue_is_nan(self):
        h, s, l = Color(128, 128, 128).hsl
        assert math.isnan(h)
        assert s == 0.0
        assert l == pytest.approx(128 / 255)

    def test_rounding_is_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4999) == 2


class TestCompositing:
    """Test alpha compositing against white."""

    def test_half_black_over_white(self):
        assert Color(0, 0, 0, alpha=0.5).over_white() == Color(128, 128, 128)

    def test_black_at_opacity_extremes(self):
        assert black_at_opacity(1.0) == BLACK
        assert black_at_opacity(0.0) == WHITE

    def test_composite_array(self):
        pixels = np.array([
            [10, 20, 30, 255],
            [10, 20, 30, 0],
        ], dtype=np.uint8)
        flat = composite_over_white(pixels)
        assert flat.shape == (2, 3)
        assert flat.dtype == np.uint8
        assert flat[0].tolist() == [10, 20, 30]
        assert flat[1].tolist() == [255, 255, 255]

    def test_three_channels_pass_through(self):
        pixels = np.array([[1, 2, 3], [4, 5, 6]], dtype=np.uint8)
        assert composite_over_white(pixels).tolist() == pixels.tolist()
