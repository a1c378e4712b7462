"""
Piecewise-linear color scales interpolated in CIE L*a*b*.

Interpolating in Lab instead of RGB keeps the perceived lightness change
even between stops (no muddy midpoints between red and green).
"""
from __future__ import annotations

import bisect
from dataclasses import dataclass

from coloraide import Color
from matplotlib.colors import to_hex, to_rgb


def normalize_hex(color: str) -> str:
    """Lowercase #rrggbb form of any matplotlib color; ValueError if invalid."""
    return to_hex(to_rgb(color))


@dataclass(frozen=True)
class LinearColorScale:
    """Maps numbers to colors; values outside the domain are clamped."""
    domain: tuple[float, ...]
    range: tuple[str, ...]

    def __post_init__(self):
        if len(self.domain) != len(self.range) or len(self.domain) < 2:
            raise ValueError("color scale needs matching domain/range of at least two stops")
        if list(self.domain) != sorted(self.domain):
            raise ValueError("color scale domain must be ascending")
        object.__setattr__(self, "range", tuple(normalize_hex(c) for c in self.range))

    def __call__(self, value: float) -> str:
        if value <= self.domain[0]:
            return self.range[0]
        if value >= self.domain[-1]:
            return self.range[-1]
        i = bisect.bisect_right(self.domain, value) - 1
        if value == self.domain[i]:
            return self.range[i]
        lo, hi = self.domain[i], self.domain[i + 1]
        mixed = Color(self.range[i]).mix(self.range[i + 1], (value - lo) / (hi - lo), space="lab")
        return normalize_hex(mixed.to_string(hex=True))
