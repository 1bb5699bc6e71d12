"""Layout of the DMA ring that receives camera lines, and the sample filters.

The parallel camera bus delivers every byte of the sensor's output as a
*sample element*. Each element carries two byte lanes, called ``sample1``
and ``sample2`` here and passed around as ``(sample1, sample2)`` pairs.
A descriptor length is given in bytes, four bytes per element, just as
the hardware counts them.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum, auto

Sample = tuple[int, int]

_ELEMENT_BYTES = 4
_MAX_BUFFER = 4096
_DESCRIPTORS_PER_LINE_BUFFER = 4


class SamplingMode(Enum):
    """How the bus packs camera bytes into sample elements."""

    SM_0A0B_0B0C = auto()
    SM_0A0B_0C0D = auto()
    SM_0A00_0B00 = auto()


_BYTES_PER_SAMPLE = {
    SamplingMode.SM_0A00_0B00: 4,
    SamplingMode.SM_0A0B_0B0C: 4,
    SamplingMode.SM_0A0B_0C0D: 2,
}


def bytes_per_sample(mode: SamplingMode) -> int:
    """Return how many DMA bytes one camera byte occupies in ``mode``."""
    try:
        return _BYTES_PER_SAMPLE[mode]
    except KeyError:
        raise ValueError(f"invalid sampling mode {mode!r}") from None


@dataclass(frozen=True)
class DmaDescriptor:
    """One buffer of the receive ring; ``next_index`` links the ring."""

    index: int
    length: int
    next_index: int

    @property
    def size(self) -> int:
        return self.length

    @property
    def sample_count(self) -> int:
        return self.length // _ELEMENT_BYTES


@dataclass(frozen=True)
class DmaLayout:
    """How one camera line is split over the descriptors of the ring."""

    line_size: int
    buffer_size: int
    per_line: int
    descriptors: tuple[DmaDescriptor, ...]

    @property
    def count(self) -> int:
        return len(self.descriptors)

    @property
    def sample_count(self) -> int:
        return sum(descriptor.sample_count for descriptor in self.descriptors)


def dma_layout(width: int, in_bytes_per_pixel: int, mode: SamplingMode) -> DmaLayout:
    """Split a line of ``width`` pixels into buffers smaller than 4 KiB.

    The ring holds four lines' worth of buffers. In the SM_0A0B_0B0C mode
    the last buffer of every line is one element short.
    """
    if width <= 0 or width % 4:
        raise ValueError(f"width must be a positive multiple of 4, got {width}")
    if in_bytes_per_pixel <= 0:
        raise ValueError(f"bytes per pixel must be positive, got {in_bytes_per_pixel}")
    line_size = width * in_bytes_per_pixel * bytes_per_sample(mode)
    per_line = 1
    buffer_size = line_size
    while buffer_size >= _MAX_BUFFER:
        buffer_size //= 2
        per_line *= 2
    count = per_line * _DESCRIPTORS_PER_LINE_BUFFER
    short_last = mode is SamplingMode.SM_0A0B_0B0C
    descriptors = tuple(
        DmaDescriptor(
            index=i,
            length=buffer_size - _ELEMENT_BYTES if short_last and (i + 1) % per_line == 0 else buffer_size,
            next_index=(i + 1) % count,
        )
        for i in range(count)
    )
    return DmaLayout(line_size=line_size, buffer_size=buffer_size, per_line=per_line, descriptors=descriptors)


def _elements(samples: Iterable[Sample], length: int, block: int, tail: bool) -> tuple[list[Sample], int, bool]:
    """Validate input; return the elements, the number of blocks and whether a tail follows."""
    if length < 0:
        raise ValueError(f"length must not be negative, got {length}")
    elements = [(int(first), int(second)) for first, second in samples]
    for first, second in elements:
        if not (0 <= first <= 0xFF and 0 <= second <= 0xFF):
            raise ValueError(f"sample ({first}, {second}) is not a pair of bytes")
    blocks = length // _ELEMENT_BYTES // block
    has_tail = tail and (length & 0x7) != 0
    needed = blocks * block + (3 if has_tail else 0)
    if len(elements) < needed:
        raise ValueError(f"{needed} sample elements needed, got {len(elements)}")
    return elements, blocks, has_tail


def filter_jpeg(samples: Iterable[Sample], length: int) -> bytes:
    """Keep the first byte lane of each element (compressed stream)."""
    elements, blocks, _ = _elements(samples, length, 4, tail=False)
    return bytes(first for first, _ in elements[: blocks * 4])


def filter_grayscale(samples: Iterable[Sample], length: int) -> bytes:
    """Keep the luminance byte carried in the first lane of each element."""
    elements, blocks, _ = _elements(samples, length, 4, tail=False)
    return bytes(first for first, _ in elements[: blocks * 4])


def filter_grayscale_highspeed(samples: Iterable[Sample], length: int) -> bytes:
    """Keep every second element's first lane, as the fast clock doubles samples."""
    elements, blocks, has_tail = _elements(samples, length, 8, tail=True)
    out = bytearray(first for first, _ in elements[: blocks * 8 : 2])
    if has_tail:
        rest = elements[blocks * 8 :]
        out += bytes((rest[0][0], rest[2][0]))
    return bytes(out)


def filter_yuyv(samples: Iterable[Sample], length: int) -> bytes:
    """Interleave both lanes of each element into Y/U/Y/V bytes."""
    elements, blocks, _ = _elements(samples, length, 4, tail=False)
    return bytes(byte for pair in elements[: blocks * 4] for byte in pair)


def filter_yuyv_highspeed(samples: Iterable[Sample], length: int) -> bytes:
    """Keep the first lane of each element in the fast clock mode."""
    elements, blocks, has_tail = _elements(samples, length, 8, tail=True)
    out = bytearray(first for first, _ in elements[: blocks * 8])
    if has_tail:
        rest = elements[blocks * 8 :]
        out += bytes((rest[0][0], rest[1][0], rest[2][0], rest[2][1]))
    return bytes(out)


def _expand565(high: int, low: int) -> bytes:
    return bytes((
        (low & 0x1F) << 3,
        ((high & 0x07) << 5) | ((low & 0xE0) >> 3),
        high & 0xF8,
    ))


def filter_rgb888(samples: Iterable[Sample], length: int) -> bytes:
    """Expand each element's 16-bit colour (high, low lanes) to three bytes."""
    elements, blocks, _ = _elements(samples, length, 4, tail=False)
    return b"".join(_expand565(high, low) for high, low in elements[: blocks * 4])


def filter_rgb888_highspeed(samples: Iterable[Sample], length: int) -> bytes:
    """Expand 16-bit colours whose bytes arrive in two consecutive elements."""
    elements, blocks, has_tail = _elements(samples, length, 8, tail=True)
    body = elements[: blocks * 8]
    out = b"".join(_expand565(body[i][0], body[i + 1][0]) for i in range(0, len(body), 2))
    if has_tail:
        rest = elements[blocks * 8 :]
        out += _expand565(rest[0][0], rest[1][0]) + _expand565(rest[2][0], rest[2][1])
    return out


__all__: Sequence[str] = (
    "Sample",
    "SamplingMode",
    "bytes_per_sample",
    "DmaDescriptor",
    "DmaLayout",
    "dma_layout",
    "filter_jpeg",
    "filter_grayscale",
    "filter_grayscale_highspeed",
    "filter_yuyv",
    "filter_yuyv_highspeed",
    "filter_rgb888",
    "filter_rgb888_highspeed",
)