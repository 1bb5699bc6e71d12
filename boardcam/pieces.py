"""Classify board squares as empty or occupied by comparing calibrated colours."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum, auto

from boardcam.frame import Frame
from boardcam.vec2d import Vec2i

RGB = tuple[int, int, int]


class FieldState(Enum):
    EMPTY = auto()
    UNKNOWN = auto()
    BLACK_PIECE = auto()
    WHITE_PIECE = auto()


@dataclass(frozen=True)
class ColorCalibration:
    """Reference colours, each pair indexed by whether the square is dark."""

    empty: tuple[RGB, RGB]
    white_piece: tuple[RGB, RGB]
    black_piece: tuple[RGB, RGB]


def avg_color_field(frame: Frame, field: Vec2i) -> RGB:
    """Average colour of a small window around a square's centre."""
    reach = frame.height // 60
    x_min = min(max(field.x - reach, 0), frame.width - 1)
    x_max = min(field.x + reach, frame.width)
    y_min = min(max(field.y - reach, 0), frame.height - 1)
    y_max = min(field.y + reach, frame.height)
    count = (x_max - x_min) * (y_max - y_min)
    if x_max <= x_min or y_max <= y_min:
        raise ValueError(f"no pixels to average around ({field.x}|{field.y})")
    sums = [0, 0, 0]
    for y in range(y_min, y_max):
        for x in range(x_min, x_max):
            for channel, value in enumerate(frame.rgb(x, y)):
                sums[channel] += value
    red, green, blue = (total // count for total in sums)
    return red, green, blue


def color_distance(a: RGB, b: RGB) -> int:
    """Squared Euclidean distance between two colours."""
    return sum((p - q) ** 2 for p, q in zip(a, b))


def _average(frame: Frame, squares: Iterable[Vec2i]) -> RGB:
    colors = [avg_color_field(frame, square) for square in squares]
    red, green, blue = (sum(color[channel] for color in colors) // len(colors) for channel in range(3))
    return red, green, blue


def calibrate_colors(frame: Frame, fields: Sequence[Sequence[Vec2i]]) -> ColorCalibration:
    """Sample the starting position to learn empty and occupied square colours.

    ``fields`` is indexed [x][y]; rows 0-1 hold white pieces, rows 6-7 black.
    """
    def pick(offsets):
        return [fields[i][offset(i & 1)] for i in range(8) for offset in offsets]

    empty_light = _average(frame, pick((lambda p: 3 - p, lambda p: 5 - p)))
    empty_dark = _average(frame, pick((lambda p: 2 + p, lambda p: 4 + p)))
    white_light = _average(frame, pick((lambda p: 1 - p,)))
    white_dark = _average(frame, pick((lambda p: p,)))
    black_light = _average(frame, pick((lambda p: 7 - p,)))
    black_dark = _average(frame, pick((lambda p: 6 + p,)))
    return ColorCalibration(
        empty=(empty_light, empty_dark),
        white_piece=(white_light, white_dark),
        black_piece=(black_light, black_dark),
    )


def get_field_state(frame: Frame, field: Vec2i, black_field: bool, calibration: ColorCalibration) -> FieldState:
    """Classify one square by the calibrated colour it is closest to.

    A piece colour wins over empty when it is closer than the empty colour;
    if both piece colours are, black wins.
    """
    index = int(bool(black_field))
    color = avg_color_field(frame, field)
    state = FieldState.EMPTY
    empty_distance = color_distance(color, calibration.empty[index])
    if color_distance(color, calibration.white_piece[index]) < empty_distance:
        state = FieldState.WHITE_PIECE
    if color_distance(color, calibration.black_piece[index]) < empty_distance:
        state = FieldState.BLACK_PIECE
    return state