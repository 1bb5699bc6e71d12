import pytest

from boardcam.frame import (
    AspectRatio,
    Frame,
    FrameSize,
    PixelFormat,
    Resolution,
    render_channels,
    resolution,
)


def test_svga_resolution():
    assert resolution(FrameSize.SVGA) == Resolution(800, 600, AspectRatio.R4X3)


def test_resolution_accepts_plain_index():
    assert resolution(13) == resolution(FrameSize.UXGA)
    assert resolution(13).width == 1600


def test_every_frame_size_has_matching_aspect_ratio_orientation():
    for size in FrameSize:
        res = resolution(size)
        horizontal, vertical = res.aspect_ratio.value
        assert (res.width >= res.height) == (horizontal >= vertical)


def test_unknown_frame_size_raises():
    with pytest.raises(ValueError):
        resolution(len(FrameSize))


def test_pixel_access():
    frame = Frame(2, 1, bytes([1, 2, 3, 4, 5, 6]))
    assert frame.rgb(1, 0) == (4, 5, 6)
    assert frame.red(0, 0) == 1
    assert frame.green(0, 0) == 2
    assert frame.blue(1, 0) == 6


def test_pixel_outside_frame_raises():
    frame = Frame(2, 1, bytes(6))
    with pytest.raises(IndexError):
        frame.rgb(2, 0)


def test_wrong_data_length_raises():
    with pytest.raises(ValueError):
        Frame(2, 2, bytes(5))


def test_quantized_masks_every_byte_and_keeps_original():
    data = bytes(range(0, 240, 10))
    frame = Frame(4, 2, data)
    masked = frame.quantized(0b11000000)
    assert all(value & 0b00111111 == 0 for value in masked.data)
    assert all(m == d & 0b11000000 for m, d in zip(masked.data, data))
    assert frame.data == data


def test_quantized_rejects_non_byte_mask():
    with pytest.raises(ValueError):
        Frame(1, 1, bytes(3)).quantized(256)


def test_from_ppm_reads_pixels():
    pixels = bytes([10, 20, 30, 40, 50, 60])
    frame = Frame.from_ppm(b"P6\n2 1\n255\n" + pixels)
    assert (frame.width, frame.height) == (2, 1)
    assert frame.data == pixels
    assert frame.pixel_format is PixelFormat.RGB888


def test_from_ppm_skips_comments():
    pixels = bytes([7, 8, 9])
    frame = Frame.from_ppm(b"P6\n# a comment\n1 1\n255\n" + pixels)
    assert frame.rgb(0, 0) == (7, 8, 9)


def test_from_ppm_rejects_other_formats():
    with pytest.raises(ValueError):
        Frame.from_ppm(b"P3\n1 1\n255\n1 2 3")


def test_from_ppm_rejects_truncated_pixels():
    with pytest.raises(ValueError):
        Frame.from_ppm(b"P6\n2 2\n255\n" + bytes(5))


def test_render_channels_full_red():
    frame = Frame(8, 4, bytes([255, 0, 0]) * 32)
    assert render_channels(frame) == "##\n\n  \n\n  \n\n 6\n"


def test_render_channels_needs_rgb888():
    frame = Frame(2, 2, bytes(4), PixelFormat.GRAYSCALE)
    with pytest.raises(ValueError):
        render_channels(frame)