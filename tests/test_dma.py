import pytest

from boardcam.dma import (
    SamplingMode,
    bytes_per_sample,
    dma_layout,
    filter_grayscale,
    filter_grayscale_highspeed,
    filter_jpeg,
    filter_rgb888,
    filter_rgb888_highspeed,
    filter_yuyv,
    filter_yuyv_highspeed,
)


def _pack565(pixel):
    """Build the (high, low) byte pair that the filters expand to ``pixel``."""
    c0, c1, c2 = pixel
    value = ((c2 >> 3) << 11) | ((c1 >> 2) << 5) | (c0 >> 3)
    return value >> 8, value & 0xFF


@pytest.mark.parametrize(
    "mode, expected",
    [
        (SamplingMode.SM_0A00_0B00, 4),
        (SamplingMode.SM_0A0B_0B0C, 4),
        (SamplingMode.SM_0A0B_0C0D, 2),
    ],
)
def test_bytes_per_sample(mode, expected):
    assert bytes_per_sample(mode) == expected


def test_bytes_per_sample_rejects_unknown():
    with pytest.raises(ValueError):
        bytes_per_sample("bogus")


@pytest.mark.parametrize("mode", list(SamplingMode))
@pytest.mark.parametrize("width, bpp", [(96, 1), (320, 2), (800, 2), (1600, 2)])
def test_layout_invariants(mode, width, bpp):
    layout = dma_layout(width, bpp, mode)
    assert layout.line_size == width * bpp * bytes_per_sample(mode)
    assert layout.buffer_size < 4096
    assert layout.buffer_size * layout.per_line <= layout.line_size
    assert layout.count == 4 * layout.per_line
    assert [d.next_index for d in layout.descriptors] == [(i + 1) % layout.count for i in range(layout.count)]
    assert layout.sample_count == sum(d.length // 4 for d in layout.descriptors)
    assert all(d.size == d.length for d in layout.descriptors)


def test_small_line_fits_one_buffer():
    layout = dma_layout(96, 1, SamplingMode.SM_0A0B_0C0D)
    assert layout.per_line == 1
    assert layout.buffer_size == layout.line_size
    assert layout.count == 4


def test_large_line_is_split():
    layout = dma_layout(800, 2, SamplingMode.SM_0A00_0B00)
    assert layout.per_line > 1
    assert layout.buffer_size * layout.per_line == layout.line_size


def test_short_last_buffer_in_0b0c_mode():
    layout = dma_layout(800, 2, SamplingMode.SM_0A0B_0B0C)
    for d in layout.descriptors:
        if (d.index + 1) % layout.per_line == 0:
            assert d.length == layout.buffer_size - 4
        else:
            assert d.length == layout.buffer_size


def test_no_short_buffer_in_other_modes():
    layout = dma_layout(800, 2, SamplingMode.SM_0A00_0B00)
    assert {d.length for d in layout.descriptors} == {layout.buffer_size}


@pytest.mark.parametrize("width", [0, 6, -4])
def test_layout_rejects_bad_width(width):
    with pytest.raises(ValueError):
        dma_layout(width, 2, SamplingMode.SM_0A00_0B00)


def test_jpeg_and_grayscale_keep_first_lane():
    samples = [(i, 200 - i) for i in range(10)]
    assert filter_jpeg(samples, 32) == bytes(range(8))
    assert filter_grayscale(samples, 32) == bytes(range(8))


def test_partial_block_is_dropped():
    samples = [(i, 0) for i in range(8)]
    assert filter_grayscale(samples, 28) == bytes(range(4))


def test_grayscale_highspeed_takes_every_second():
    samples = [(i, 0) for i in range(16)]
    assert filter_grayscale_highspeed(samples, 64) == bytes(range(0, 16, 2))


def test_grayscale_highspeed_tail():
    samples = [(1, 0), (2, 0), (3, 0)]
    assert filter_grayscale_highspeed(samples, 12) == bytes([1, 3])


def test_yuyv_interleaves_lanes():
    samples = [(10, 11), (20, 21), (30, 31), (40, 41)]
    assert filter_yuyv(samples, 16) == bytes([10, 11, 20, 21, 30, 31, 40, 41])


def test_yuyv_highspeed_and_tail():
    samples = [(i, 100 + i) for i in range(11)]
    out = filter_yuyv_highspeed(samples, 44)
    assert out == bytes([0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 110])


def test_rgb888_white_and_black():
    assert filter_rgb888([(0xFF, 0xFF)] * 4, 16) == bytes([0xF8, 0xFC, 0xF8]) * 4
    assert filter_rgb888([(0, 0)] * 4, 16) == bytes(12)


def test_rgb888_round_trip():
    pixels = [(8, 4, 248), (128, 252, 0), (200, 100, 16), (0, 0, 0)]
    samples = [_pack565(p) for p in pixels]
    assert filter_rgb888(samples, 16) == bytes(v for p in pixels for v in p)


def test_rgb888_highspeed_matches_normal():
    pixels = [(8, 4, 248), (128, 252, 0), (200, 100, 16), (40, 60, 80)]
    packed = [_pack565(p) for p in pixels]
    split = [(byte, 0) for high, low in packed for byte in (high, low)]
    assert filter_rgb888_highspeed(split, 32) == filter_rgb888(packed, 16)


def test_rgb888_highspeed_tail():
    first, second = (16, 32, 64), (96, 128, 160)
    high1, low1 = _pack565(first)
    high2, low2 = _pack565(second)
    samples = [(high1, 0), (low1, 0), (high2, low2)]
    assert filter_rgb888_highspeed(samples, 12) == bytes(first + second)


@pytest.mark.parametrize(
    "func",
    [filter_jpeg, filter_grayscale, filter_grayscale_highspeed, filter_yuyv,
     filter_yuyv_highspeed, filter_rgb888, filter_rgb888_highspeed],
)
def test_too_few_samples(func):
    with pytest.raises(ValueError):
        func([(0, 0)], 64)


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        filter_jpeg([], -4)


def test_non_byte_sample_rejected():
    with pytest.raises(ValueError):
        filter_yuyv([(256, 0)] * 4, 16)