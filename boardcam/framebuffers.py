"""Ring of frame buffers that the camera fills and the application borrows."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field

from boardcam.frame import PixelFormat

_JPEG_HEADER = b"\xff\xd8\xff"
_JPEG_TRAILER = b"\xff\xd9\x00\x00"


@dataclass(eq=False)
class FrameBuffer:
    """One buffer of the ring together with the frame it currently holds."""

    index: int
    data: bytearray
    length: int = 0
    width: int = 0
    height: int = 0
    pixel_format: PixelFormat | None = None
    timestamp: float = 0.0
    in_use: bool = False
    bad: bool = False
    next_index: int = field(default=0, repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def content(self) -> bytes:
        """The bytes of the frame held, ``length`` bytes long."""
        return bytes(self.data[: self.length])

    def _clear(self) -> None:
        self.length = 0
        self.data[:4] = bytes(min(4, len(self.data)))


def jpeg_length(data: bytes | bytearray, length: int) -> int:
    """Return the length of a JPEG stream cut after its end marker.

    The marker is searched backwards from ``length``. Lengths that are a
    multiple of 512 or of 100 are lengthened by one byte. If no marker is
    found ``length`` is returned unchanged.
    """
    if not 0 <= length <= len(data):
        raise ValueError(f"length {length} outside buffer of {len(data)} bytes")
    view = bytes(data)
    for position in range(length - 1, 0, -1):
        if view[position:position + 4] == _JPEG_TRAILER:
            result = position + 2
            if result & 0x1FF == 0:
                result += 1
            if result % 100 == 0:
                result += 1
            return result
    return length


class FrameBufferRing:
    """Frame buffers filled chunk by chunk and handed out whole.

    With one buffer the same buffer is refilled for every frame. With more,
    a finished frame is held for the reader until it is released, the
    newest unread frame replacing an older unread one.
    """

    def __init__(self, count: int, size: int) -> None:
        if count < 1:
            raise ValueError(f"at least one frame buffer is needed, got {count}")
        if size <= 0:
            raise ValueError(f"frame buffer size must be positive, got {size}")
        self.buffers = tuple(
            FrameBuffer(index=i, data=bytearray(size), next_index=(i + 1) % count)
            for i in range(count)
        )
        self._current = self.buffers[0]
        self._position = 0
        self._chunks = 0
        self._frame_ready = False
        self._out: FrameBuffer | None = None
        self._returned: deque[FrameBuffer] = deque()

    @property
    def count(self) -> int:
        return len(self.buffers)

    @property
    def current(self) -> FrameBuffer:
        """The buffer the next chunk is written to."""
        return self._current

    def _next(self, buffer: FrameBuffer) -> FrameBuffer:
        return self.buffers[buffer.next_index]

    def write_chunk(self, data: bytes, width: int, height: int, pixel_format: PixelFormat) -> bool:
        """Append converted pixel data to the frame being received.

        Returns False when the chunk is dropped: the buffer is in use or
        already marked bad, the chunk does not fit, or a JPEG frame does not
        start with a JPEG header (which marks the frame bad).
        """
        buffer = self._current
        if buffer.in_use or buffer.bad:
            return False
        chunk = bytes(data)
        start = self._position
        if start + len(chunk) > buffer.size:
            return False
        buffer.data[start:start + len(chunk)] = chunk
        if self._chunks == 0:
            if pixel_format is PixelFormat.JPEG and bytes(buffer.data[:3]) != _JPEG_HEADER:
                buffer.bad = True
                return False
            buffer.width = width
            buffer.height = height
            buffer.pixel_format = pixel_format
            buffer.timestamp = time.time()
        self._chunks += 1
        self._position += len(chunk)
        return True

    def finish_frame(self) -> FrameBuffer | None:
        """Close the frame being received; return it if it is now available."""
        buffer = self._current
        done = None
        if not buffer.in_use:
            if buffer.bad:
                buffer.bad = False
                buffer._clear()
            else:
                buffer.length = self._position
                if buffer.length:
                    if buffer.pixel_format is PixelFormat.JPEG:
                        buffer.length = jpeg_length(buffer.data, buffer.length)
                    done = self._frame_done()
        elif buffer.length:
            self._frame_done()
        self._position = 0
        self._chunks = 0
        return done

    def _frame_done(self) -> FrameBuffer | None:
        if self.count == 1:
            self._frame_ready = True
            return self._current

        finished = self._current
        published = None
        if not finished.in_use and finished.length:
            finished.in_use = True
            if self._out is not None:
                self._out.in_use = False
                self._out.length = 0
            self._out = finished
            published = finished

        while self._returned:
            returned = self._returned.popleft()
            returned.in_use = False
            returned.length = 0

        candidate = self._current
        if candidate.length:
            candidate = self._next(candidate)
        while candidate.in_use and self._next(candidate) is not finished:
            candidate = self._next(candidate)
        if not candidate.in_use:
            candidate._clear()
            self._current = candidate
        else:
            self._current = finished
        return published

    def get(self) -> FrameBuffer:
        """Take the latest finished frame; raise TimeoutError if there is none."""
        if self.count == 1:
            if not self._frame_ready:
                raise TimeoutError("no frame is ready")
            self._frame_ready = False
            return self._current
        if self._out is None:
            raise TimeoutError("no frame is ready")
        buffer, self._out = self._out, None
        return buffer

    def release(self, buffer: FrameBuffer) -> None:
        """Give a buffer obtained from get() back to be filled again."""
        if not any(buffer is own for own in self.buffers):
            raise ValueError("buffer does not belong to this ring")
        if self.count == 1:
            return
        self._returned.append(buffer)