"""Locate the colour markers at the board corners and derive square centres."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto

from boardcam.frame import Frame
from boardcam.vec2d import Vec2f, Vec2i

_log = logging.getLogger(__name__)

MARKER_COLOR_RES = 2
_MASK = (0xFF << (8 - MARKER_COLOR_RES)) & 0xFF
_LEVEL = 0x40
_SCAN_STEP = 8
_QUAD_OFFSETS = ((0, 0), (3, 0), (0, 3), (3, 3))


@dataclass(frozen=True)
class Marker:
    """A corner marker; the single origin marker is blue, the others green."""

    x: int
    y: int
    origin: bool = False


class MarkerCheck(Enum):
    NO_CHANGE = auto()
    ADJUSTED = auto()
    INVALID = auto()


def _half(total: int) -> int:
    """Halve with truncation toward zero."""
    return total // 2 if total >= 0 else -((-total) // 2)


def _matches(frame: Frame, x: int, y: int, origin: bool) -> bool:
    if not (0 <= x < frame.width and 0 <= y < frame.height):
        return False
    red, green, blue = (value & _MASK for value in frame.rgb(x, y))
    if red:
        return False
    if origin:
        return green < _LEVEL and blue >= _LEVEL
    return green >= _LEVEL and blue < _LEVEL


def check_possible_marker(frame: Frame, marker: Marker) -> Marker | None:
    """Measure the marker blob around ``marker``.

    Returns the marker moved to the blob's centre, or None if the blob is
    too large or too small to be a marker.
    """
    origin = marker.origin
    x_min = x_max = x = marker.x
    y_min = y_max = y = marker.y
    limit = frame.height // 10

    for _ in range(2):
        while x_min >= 0 and _matches(frame, x_min, y, origin):
            x_min -= 1
        while x_max < frame.width and _matches(frame, x_max, y, origin):
            x_max += 1
        x = _half(x_min + x_max)
        if x_max - x_min > limit:
            return None

        while y_min >= 0 and _matches(frame, x, y_min, origin):
            y_min -= 1
        while y_max < frame.height and _matches(frame, x, y_max, origin):
            y_max += 1
        y = _half(y_min + y_max)
        if y_max - y_min > limit:
            return None

    x_size = x_max - x_min
    y_size = y_max - y_min
    _log.debug("(%d-%d|%d-%d) (%d|%d)", x_min, x_max, y_min, y_max, x_size, y_size)
    minimum = frame.height // 32
    if x_size > minimum and y_size > minimum:
        return Marker(x, y, origin)
    return None


def _quad_sums(frame: Frame, x: int, y: int) -> tuple[int, int, int]:
    sums = [0, 0, 0]
    for dx, dy in _QUAD_OFFSETS:
        px = min(x + dx, frame.width - 1)
        py = min(y + dy, frame.height - 1)
        for channel, value in enumerate(frame.rgb(px, py)):
            sums[channel] += value & _MASK
    red, green, blue = sums
    return red, green, blue


def find_marker(frame: Frame, x_min: int, x_max: int, y_min: int, y_max: int) -> Marker | None:
    """Scan a region on a coarse grid and return the first confirmed marker."""
    threshold = _LEVEL * len(_QUAD_OFFSETS)
    for y in range(y_min, y_max, _SCAN_STEP):
        for x in range(x_min, x_max, _SCAN_STEP):
            red, green, blue = _quad_sums(frame, x, y)
            if red >= _LEVEL:
                continue
            if green >= threshold and blue < threshold:
                origin = False
            elif green < threshold and blue >= threshold:
                origin = True
            else:
                continue
            found = check_possible_marker(frame, Marker(x, y, origin))
            if found is not None:
                return found
    return None


def find_markers(frame: Frame) -> tuple[Marker, Marker, Marker, Marker] | None:
    """Find one marker per quadrant, clockwise from the top left.

    Returns None unless all four are found and exactly one is the origin.
    """
    _log.info("Searching markers...")
    half_w, half_h = frame.width // 2, frame.height // 2
    regions = (
        (0, half_w, 0, half_h),
        (half_w, frame.width, 0, half_h),
        (half_w, frame.width, half_h, frame.height),
        (0, half_w, half_h, frame.height),
    )
    found = [find_marker(frame, *region) for region in regions]
    markers = [marker for marker in found if marker is not None]
    origins = sum(marker.origin for marker in markers)
    _log.info("Found %d marker (%d marked as origin)", len(markers), origins)
    if len(markers) != 4 or origins != 1:
        return None
    first, second, third, fourth = markers
    return first, second, third, fourth


def calculate_fields(markers: Sequence[Marker]) -> tuple[tuple[Vec2i, ...], ...]:
    """Return the centres of the 64 squares, indexed [x][y]."""
    markers = tuple(markers)
    if len(markers) != 4:
        raise ValueError(f"expected 4 markers, got {len(markers)}")
    index = next((i for i, marker in enumerate(markers) if marker.origin), 0)
    o = markers[index]
    xm = markers[(index + 3) % 4]
    corner = markers[(index + 2) % 4]
    ym = markers[(index + 1) % 4]

    origin = Vec2f(o.x, o.y)
    x_axis = Vec2f(
        (xm.x - o.x + (corner.x - ym.x)) / 2,
        (xm.y - o.y + (corner.y - ym.y)) / 2,
    )
    y_axis = Vec2f(
        (ym.x - o.x + (corner.x - xm.x)) / 2,
        (ym.y - o.y + (corner.y - xm.y)) / 2,
    )
    _log.debug("x-axis: (%f|%f)", x_axis.x, x_axis.y)
    _log.debug("y-axis: (%f|%f)", y_axis.x, y_axis.y)

    return tuple(
        tuple(
            (origin + x_axis * (x + 1) / 9 + y_axis * (y + 1) / 9).rounded()
            for y in range(8)
        )
        for x in range(8)
    )


def check_markers(frame: Frame, markers: Sequence[Marker]) -> tuple[MarkerCheck, tuple[Marker, ...]]:
    """Re-measure known markers in a new frame.

    Returns the outcome and the markers to use from now on.
    """
    markers = tuple(markers)
    refined = []
    adjusted = False
    for index, marker in enumerate(markers):
        new = check_possible_marker(frame, marker)
        if new is None:
            return MarkerCheck.INVALID, markers
        if (new.x, new.y) != (marker.x, marker.y):
            _log.debug("%d (%d|%d)->(%d|%d)", index, marker.x, marker.y, new.x, new.y)
            adjusted = True
        refined.append(new)
    return (MarkerCheck.ADJUSTED if adjusted else MarkerCheck.NO_CHANGE), tuple(refined)