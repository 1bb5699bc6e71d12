"""Camera frames, sensor resolutions and a text rendering of RGB frames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto


class FrameSize(IntEnum):
    """Frame sizes a sensor can be set to, smallest index first."""

    R96X96 = 0
    QQVGA = 1
    QCIF = 2
    HQVGA = 3
    R240X240 = 4
    QVGA = 5
    CIF = 6
    HVGA = 7
    VGA = 8
    SVGA = 9
    XGA = 10
    HD = 11
    SXGA = 12
    UXGA = 13
    FHD = 14
    P_HD = 15
    P_3MP = 16
    QXGA = 17
    QHD = 18
    WQXGA = 19
    P_FHD = 20
    QSXGA = 21


class AspectRatio(Enum):
    """Aspect ratio of a frame size as (horizontal, vertical)."""

    R1X1 = (1, 1)
    R4X3 = (4, 3)
    R5X4 = (5, 4)
    R3X2 = (3, 2)
    R16X9 = (16, 9)
    R9X16 = (9, 16)
    R16X10 = (16, 10)


@dataclass(frozen=True)
class Resolution:
    width: int
    height: int
    aspect_ratio: AspectRatio


_RESOLUTIONS = {
    FrameSize.R96X96: Resolution(96, 96, AspectRatio.R1X1),
    FrameSize.QQVGA: Resolution(160, 120, AspectRatio.R4X3),
    FrameSize.QCIF: Resolution(176, 144, AspectRatio.R5X4),
    FrameSize.HQVGA: Resolution(240, 176, AspectRatio.R4X3),
    FrameSize.R240X240: Resolution(240, 240, AspectRatio.R1X1),
    FrameSize.QVGA: Resolution(320, 240, AspectRatio.R4X3),
    FrameSize.CIF: Resolution(400, 296, AspectRatio.R4X3),
    FrameSize.HVGA: Resolution(480, 320, AspectRatio.R3X2),
    FrameSize.VGA: Resolution(640, 480, AspectRatio.R4X3),
    FrameSize.SVGA: Resolution(800, 600, AspectRatio.R4X3),
    FrameSize.XGA: Resolution(1024, 768, AspectRatio.R4X3),
    FrameSize.HD: Resolution(1280, 720, AspectRatio.R16X9),
    FrameSize.SXGA: Resolution(1280, 1024, AspectRatio.R5X4),
    FrameSize.UXGA: Resolution(1600, 1200, AspectRatio.R4X3),
    FrameSize.FHD: Resolution(1920, 1080, AspectRatio.R16X9),
    FrameSize.P_HD: Resolution(720, 1280, AspectRatio.R9X16),
    FrameSize.P_3MP: Resolution(864, 1536, AspectRatio.R9X16),
    FrameSize.QXGA: Resolution(2048, 1536, AspectRatio.R4X3),
    FrameSize.QHD: Resolution(2560, 1440, AspectRatio.R16X9),
    FrameSize.WQXGA: Resolution(2560, 1600, AspectRatio.R16X10),
    FrameSize.P_FHD: Resolution(1088, 1920, AspectRatio.R9X16),
    FrameSize.QSXGA: Resolution(2560, 1920, AspectRatio.R4X3),
}


def resolution(frame_size: FrameSize | int) -> Resolution:
    """Return the pixel dimensions of a frame size."""
    return _RESOLUTIONS[FrameSize(frame_size)]


class PixelFormat(Enum):
    RGB565 = auto()
    YUV422 = auto()
    GRAYSCALE = auto()
    JPEG = auto()
    RGB888 = auto()


_BYTES_PER_PIXEL = {
    PixelFormat.RGB565: 2,
    PixelFormat.YUV422: 2,
    PixelFormat.GRAYSCALE: 1,
    PixelFormat.RGB888: 3,
}


@dataclass(frozen=True)
class Frame:
    """A captured image; RGB888 data is stored row by row as r, g, b bytes."""

    width: int
    height: int
    data: bytes
    pixel_format: PixelFormat = PixelFormat.RGB888

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"invalid frame dimensions {self.width}x{self.height}")
        per_pixel = _BYTES_PER_PIXEL.get(self.pixel_format)
        if per_pixel is not None and len(self.data) != self.width * self.height * per_pixel:
            raise ValueError(
                f"{self.pixel_format.name} frame of {self.width}x{self.height} "
                f"needs {self.width * self.height * per_pixel} bytes, got {len(self.data)}"
            )

    def rgb(self, x: int, y: int) -> tuple[int, int, int]:
        """Return the (red, green, blue) values of the pixel at (x, y)."""
        if self.pixel_format is not PixelFormat.RGB888:
            raise ValueError("pixel access needs an RGB888 frame")
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}|{y}) outside {self.width}x{self.height} frame")
        offset = (y * self.width + x) * 3
        red, green, blue = self.data[offset:offset + 3]
        return red, green, blue

    def red(self, x: int, y: int) -> int:
        return self.rgb(x, y)[0]

    def green(self, x: int, y: int) -> int:
        return self.rgb(x, y)[1]

    def blue(self, x: int, y: int) -> int:
        return self.rgb(x, y)[2]

    def quantized(self, mask: int) -> Frame:
        """Return a copy with every byte ANDed with ``mask``."""
        if not 0 <= mask <= 0xFF:
            raise ValueError(f"mask {mask} is not a byte")
        table = bytes(value & mask for value in range(256))
        return Frame(self.width, self.height, self.data.translate(table), self.pixel_format)

    @classmethod
    def from_ppm(cls, data: bytes) -> Frame:
        """Read a binary (P6) PPM image with a maximum value of 255."""
        fields: list[bytes] = []
        pos = 0
        while len(fields) < 4:
            while pos < len(data) and data[pos:pos + 1].isspace():
                pos += 1
            if data[pos:pos + 1] == b"#":
                pos = data.find(b"\n", pos)
                if pos < 0:
                    raise ValueError("truncated PPM header")
                continue
            start = pos
            while pos < len(data) and not data[pos:pos + 1].isspace():
                pos += 1
            if start == pos:
                raise ValueError("truncated PPM header")
            fields.append(data[start:pos])
        magic, width_field, height_field, maxval_field = fields
        if magic != b"P6":
            raise ValueError("not a binary PPM image")
        width, height, maxval = int(width_field), int(height_field), int(maxval_field)
        if maxval != 255:
            raise ValueError(f"unsupported PPM maximum value {maxval}")
        if pos >= len(data):
            raise ValueError("PPM image has no pixel data")
        pixels = data[pos + 1:pos + 1 + width * height * 3]
        if len(pixels) != width * height * 3:
            raise ValueError("truncated PPM pixel data")
        return cls(width, height, pixels, PixelFormat.RGB888)


_SHADES = " -+#"


def render_channels(frame: Frame) -> str:
    """Draw each colour channel as ASCII art, sampling every fourth pixel.

    The three channel drawings are separated by blank lines and followed
    by the number of characters drawn.
    """
    if frame.pixel_format is not PixelFormat.RGB888:
        raise ValueError("channel rendering needs an RGB888 frame")
    blocks = []
    count = 0
    for channel in range(3):
        rows = [
            "".join(
                _SHADES[frame.data[(y * frame.width + x) * 3 + channel] // 65]
                for x in range(0, frame.width, 4)
            )
            for y in range(0, frame.height, 4)
        ]
        count += sum(len(row) for row in rows)
        blocks.append("".join(row + "\n" for row in rows))
    return "\n".join(blocks) + f"\n {count}\n"