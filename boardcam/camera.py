"""Camera sensor detection, capture planning and frame assembly."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import IntEnum

from boardcam import dma
from boardcam.dma import DmaLayout, Sample, SamplingMode, dma_layout
from boardcam.frame import FrameSize, PixelFormat, resolution
from boardcam.framebuffers import FrameBuffer, FrameBufferRing
from boardcam.sccb import SCCB
from boardcam.twi import I2CError
from boardcam.xclk import ClockSettings, clock_settings

_log = logging.getLogger(__name__)

_REG_PID = 0x0A
_REG_VER = 0x0B
_REG_MIDH = 0x1C
_REG_MIDL = 0x1D
_REG16_CHIDH = 0x300A
_REG16_CHIDL = 0x300B

_OV2640_ADDRESS = 0x30
_WIDE_REGISTER_ADDRESS = 0x3C
_RESET_DELAY = 0.01
_HIGH_SPEED_CLOCK = 10_000_000


class CameraError(Exception):
    """The camera could not be detected, is not supported or was misconfigured."""


class CameraModel(IntEnum):
    NONE = 0
    UNKNOWN = 1
    OV7725 = 7725
    OV2640 = 2640
    OV3660 = 3660
    OV5640 = 5640


_MODEL_BY_PID = {
    0x26: CameraModel.OV2640,
    0x77: CameraModel.OV7725,
    0x36: CameraModel.OV3660,
    0x56: CameraModel.OV5640,
}

_MAX_FRAME_SIZE = {
    CameraModel.OV2640: FrameSize.UXGA,
    CameraModel.OV7725: FrameSize.VGA,
    CameraModel.OV3660: FrameSize.QXGA,
    CameraModel.OV5640: FrameSize.QSXGA,
}

_JPEG_MODELS = (CameraModel.OV2640, CameraModel.OV3660, CameraModel.OV5640)


@dataclass(frozen=True)
class CameraConfig:
    """What to capture and how the sensor clock is driven."""

    pixel_format: PixelFormat = PixelFormat.RGB888
    frame_size: FrameSize = FrameSize.SVGA
    jpeg_quality: int = 12
    fb_count: int = 1
    xclk_freq_hz: int = 20_000_000
    pin_xclk: int = 0
    ledc_timer: int = 0
    ledc_channel: int = 0


@dataclass(frozen=True)
class CapturePlan:
    """How frames of one format and size are received and stored."""

    model: CameraModel
    frame_size: FrameSize
    width: int
    height: int
    pixel_format: PixelFormat
    sampling_mode: SamplingMode
    filter: Callable[[Iterable[Sample], int], bytes]
    in_bytes_per_pixel: int
    fb_bytes_per_pixel: int
    fb_size: int

    @property
    def layout(self) -> DmaLayout:
        return dma_layout(self.width, self.in_bytes_per_pixel, self.sampling_mode)


def max_frame_size(model: CameraModel) -> FrameSize:
    """Return the largest frame size ``model`` can deliver."""
    try:
        return _MAX_FRAME_SIZE[CameraModel(model)]
    except (KeyError, ValueError):
        raise CameraError(f"camera model {model!r} is not supported") from None


def plan_capture(model: CameraModel, config: CameraConfig) -> CapturePlan:
    """Choose sampling mode, sample filter and buffer size for ``config``."""
    model = CameraModel(model)
    frame_size = FrameSize(min(FrameSize(config.frame_size), max_frame_size(model)))
    res = resolution(frame_size)
    width, height = res.width, res.height
    high_speed = config.xclk_freq_hz > _HIGH_SPEED_CLOCK
    fmt = config.pixel_format

    if fmt is PixelFormat.GRAYSCALE:
        if model in (CameraModel.OV3660, CameraModel.OV5640):
            if high_speed:
                mode, filt = SamplingMode.SM_0A00_0B00, dma.filter_yuyv_highspeed
            else:
                mode, filt = SamplingMode.SM_0A0B_0C0D, dma.filter_yuyv
            in_bpp = 1
        else:
            if high_speed and model is not CameraModel.OV7725:
                mode, filt = SamplingMode.SM_0A00_0B00, dma.filter_grayscale_highspeed
            else:
                mode, filt = SamplingMode.SM_0A0B_0C0D, dma.filter_grayscale
            in_bpp = 2
        fb_bpp = 1
        fb_size = width * height
    elif fmt in (PixelFormat.YUV422, PixelFormat.RGB565):
        if high_speed and model is not CameraModel.OV7725:
            mode, filt = SamplingMode.SM_0A00_0B00, dma.filter_yuyv_highspeed
        else:
            mode, filt = SamplingMode.SM_0A0B_0C0D, dma.filter_yuyv
        in_bpp = fb_bpp = 2
        fb_size = width * height * 2
    elif fmt is PixelFormat.RGB888:
        if high_speed:
            mode, filt = SamplingMode.SM_0A00_0B00, dma.filter_rgb888_highspeed
        else:
            mode, filt = SamplingMode.SM_0A0B_0C0D, dma.filter_rgb888
        in_bpp, fb_bpp = 2, 3
        fb_size = width * height * 3
    elif fmt is PixelFormat.JPEG:
        if model not in _JPEG_MODELS:
            raise CameraError("JPEG format is only supported for OV2640, OV3660 and OV5640")
        quality = config.jpeg_quality
        if quality > 10:
            ratio = 16
        elif quality > 5:
            ratio = 10
        else:
            ratio = 4
        in_bpp = fb_bpp = 2
        fb_size = width * height * fb_bpp // ratio
        mode, filt = SamplingMode.SM_0A00_0B00, dma.filter_jpeg
    else:
        raise CameraError(f"pixel format {fmt!r} is not supported")

    return CapturePlan(
        model=model,
        frame_size=frame_size,
        width=width,
        height=height,
        pixel_format=fmt,
        sampling_mode=mode,
        filter=filt,
        in_bytes_per_pixel=in_bpp,
        fb_bytes_per_pixel=fb_bpp,
        fb_size=fb_size,
    )


def probe_camera(sccb: SCCB) -> tuple[CameraModel, int]:
    """Find the sensor on the control bus; return its model and address."""
    address = sccb.probe()
    if address is None:
        raise CameraError("camera not detected")
    _log.debug("Detected camera at address=0x%02x", address)
    try:
        if address == _OV2640_ADDRESS:
            sccb.write(_OV2640_ADDRESS, 0xFF, 0x01)
            sccb.write(_OV2640_ADDRESS, 0x12, 0x80)
            time.sleep(_RESET_DELAY)
            address = sccb.probe()
            if address is None:
                raise CameraError("camera not detected after reset")
        if address == _WIDE_REGISTER_ADDRESS:
            pid = sccb.read16(address, _REG16_CHIDH)
            ver = sccb.read16(address, _REG16_CHIDL)
            _log.debug("Camera PID=0x%02x VER=0x%02x", pid, ver)
        else:
            pid = sccb.read(address, _REG_PID)
            ver = sccb.read(address, _REG_VER)
            midl = sccb.read(address, _REG_MIDL)
            midh = sccb.read(address, _REG_MIDH)
            _log.debug("Camera PID=0x%02x VER=0x%02x MIDL=0x%02x MIDH=0x%02x", pid, ver, midl, midh)
    except I2CError as exc:
        raise CameraError(f"could not read sensor id: {exc}") from exc
    model = _MODEL_BY_PID.get(pid)
    if model is None:
        raise CameraError(f"detected camera (PID 0x{pid:02x}) is not supported")
    return model, address


class Camera:
    """A detected sensor whose bus samples are assembled into frames."""

    def __init__(self, config: CameraConfig, sccb: SCCB) -> None:
        if config.fb_count < 1:
            raise CameraError(f"at least one frame buffer is needed, got {config.fb_count}")
        self.config = config
        self.clock: ClockSettings = clock_settings(
            config.pin_xclk, config.ledc_timer, config.ledc_channel, config.xclk_freq_hz
        )
        self.model, self.address = probe_camera(sccb)
        if self.model is CameraModel.OV7725 and config.pixel_format is PixelFormat.JPEG:
            raise CameraError("camera does not support JPEG")
        self.plan = plan_capture(self.model, config)
        self.layout = self.plan.layout
        self.ring = FrameBufferRing(config.fb_count, self.plan.fb_size)
        self._descriptor = 0

    def feed(self, samples: Iterable[Sample]) -> bool:
        """Take the samples of one DMA buffer; return whether they were stored."""
        descriptor = self.layout.descriptors[self._descriptor]
        self._descriptor = descriptor.next_index
        data = self.plan.filter(samples, descriptor.length)
        return self.ring.write_chunk(data, self.plan.width, self.plan.height, self.plan.pixel_format)

    def end_frame(self) -> FrameBuffer | None:
        """Close the frame being received; return it if it became available."""
        self._descriptor = 0
        return self.ring.finish_frame()

    def frame(self) -> FrameBuffer:
        """Return the latest finished frame; raise TimeoutError if none is ready."""
        return self.ring.get()

    def release(self, buffer: FrameBuffer) -> None:
        """Hand a frame obtained from frame() back for reuse."""
        self.ring.release(buffer)