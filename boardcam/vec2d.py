"""Small two-dimensional vectors with integer and float components."""

from __future__ import annotations

import math
from dataclasses import dataclass


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halfway cases away from zero."""
    magnitude = math.floor(abs(value) + 0.5)
    return int(magnitude) if value >= 0 else -int(magnitude)


@dataclass(frozen=True)
class Vec2i:
    """Vector with integer components; scaling truncates toward zero."""

    x: int
    y: int

    def __add__(self, other: Vec2i) -> Vec2i:
        if not isinstance(other, Vec2i):
            return NotImplemented
        return Vec2i(self.x + other.x, self.y + other.y)

    def __mul__(self, factor: float) -> Vec2i:
        if not isinstance(factor, (int, float)):
            return NotImplemented
        return Vec2i(int(self.x * factor), int(self.y * factor))

    def __truediv__(self, divisor: float) -> Vec2i:
        if not isinstance(divisor, (int, float)):
            return NotImplemented
        return Vec2i(int(self.x / divisor), int(self.y / divisor))


@dataclass(frozen=True)
class Vec2f:
    """Vector with floating point components."""

    x: float
    y: float

    def __add__(self, other: Vec2f) -> Vec2f:
        if not isinstance(other, Vec2f):
            return NotImplemented
        return Vec2f(self.x + other.x, self.y + other.y)

    def __mul__(self, factor: float) -> Vec2f:
        if not isinstance(factor, (int, float)):
            return NotImplemented
        return Vec2f(self.x * factor, self.y * factor)

    def __truediv__(self, divisor: float) -> Vec2f:
        if not isinstance(divisor, (int, float)):
            return NotImplemented
        return Vec2f(self.x / divisor, self.y / divisor)

    def rounded(self) -> Vec2i:
        """Round both components to the nearest integer, halves away from zero."""
        return Vec2i(_round_half_away(self.x), _round_half_away(self.y))