"""
Tests for Lab-interpolated color scales.
"""
import pytest

from goodday.services.colors import LinearColorScale


class TestLinearColorScale:
    def test_stops_are_exact(self):
        scale = LinearColorScale(domain=(0, 2, 4), range=("#f87171", "#e9e9e9", "#0cb981"))
        assert scale(0) == "#f87171"
        assert scale(2) == "#e9e9e9"
        assert scale(4) == "#0cb981"

    def test_stops_are_normalized(self):
        scale = LinearColorScale(domain=(0, 1), range=("#ABC", "#4338CA"))
        assert scale(0) == "#aabbcc"
        assert scale(1) == "#4338ca"

    def test_clamps_outside_domain(self):
        scale = LinearColorScale(domain=(0, 4), range=("#eef2ff", "#4338ca"))
        assert scale(-1) == "#eef2ff"
        assert scale(10) == "#4338ca"

    def test_between_stops_is_hex_and_differs_from_both(self):
        scale = LinearColorScale(domain=(0, 4), range=("#eef2ff", "#4338ca"))
        mid = scale(2)
        assert mid.startswith("#") and len(mid) == 7
        assert mid == mid.lower()
        assert mid not in ("#eef2ff", "#4338ca")

    def test_grey_midpoint_between_black_and_white(self):
        mid = LinearColorScale(domain=(0, 1), range=("#000000", "#ffffff"))(0.5)
        r, g, b = (int(mid[i:i + 2], 16) for i in (1, 3, 5))
        assert max(r, g, b) - min(r, g, b) <= 1

    def test_invalid_color(self):
        with pytest.raises(ValueError):
            LinearColorScale(domain=(0, 1), range=("not-a-color", "#ffffff"))

    def test_mismatched_stops(self):
        with pytest.raises(ValueError):
            LinearColorScale(domain=(0, 1, 2), range=("#000000", "#ffffff"))

    def test_descending_domain(self):
        with pytest.raises(ValueError):
            LinearColorScale(domain=(4, 0), range=("#000000", "#ffffff"))
