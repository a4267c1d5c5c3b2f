"""The OV767X camera, backed by an input frame-buffer."""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum

from smcesim.arduino import ArduinoError
from smcesim.board_view import BoardView, FrameBuffer
from smcesim.config import FrameBufferDirection


class Resolution(IntEnum):
    """Capture resolutions."""

    VGA = 0  # 640x480
    CIF = 1  # 352x240
    QVGA = 2  # 320x240
    QCIF = 3  # 176x144
    QQVGA = 4  # 160x120


class CameraFormat(IntEnum):
    """Pixel formats of captured frames."""

    RGB888 = 0
    RGB444 = 1


_RESOLUTIONS = {
    Resolution.VGA: (640, 480),
    Resolution.CIF: (352, 240),
    Resolution.QVGA: (320, 240),
    Resolution.QCIF: (176, 144),
    Resolution.QQVGA: (160, 120),
}

# bits and bytes per pixel
_PIXEL_SIZES = {
    CameraFormat.RGB888: (24, 3),
    CameraFormat.RGB444: (16, 2),
}


class OV767X:
    """A camera reading frames that the host puts in frame-buffer ``key``."""

    def __init__(self, board_view: BoardView, key: int = 0) -> None:
        self._board_view = board_view
        self._key = key
        self._format = CameraFormat.RGB888
        self._begun = False
        self.pins: tuple[int, int, int, int, tuple[int, ...]] | None = None

    def _fb(self) -> FrameBuffer:
        return self._board_view.frame_buffers[self._key]

    def _require_begun(self, call: str) -> FrameBuffer:
        if not self._begun:
            raise ArduinoError(f"OV767X::{call}: device inactive")
        return self._fb()

    def set_pins(self, vsync: int, href: int, pclk: int, xclk: int, dpins: Sequence[int]) -> None:
        """Record the wiring; the simulated camera does not use it for capture."""
        self.pins = (vsync, href, pclk, xclk, tuple(dpins))

    def begin(self, resolution: int, fmt: int, fps: int) -> None:
        """Start capturing at the given resolution, format and frame rate."""
        if self._begun:
            raise ArduinoError("OV767X::begin: device already active")
        prefix = f"OV767X::begin({int(resolution)}, {int(fmt)}, {fps})"
        try:
            camera_format = CameraFormat(fmt)
        except ValueError:
            raise ArduinoError(f"{prefix}: Unknown format") from None
        try:
            size = _RESOLUTIONS[Resolution(resolution)]
        except ValueError:
            raise ArduinoError(f"{prefix}: Unknown resolution") from None
        fb = self._fb()
        if not fb.exists():
            raise ArduinoError(f"{prefix}: Framebuffer does not exist")
        if fb.direction() is not FrameBufferDirection.IN:
            raise ArduinoError(f"{prefix}: Framebuffer not in input mode")
        self._format = camera_format
        fb.width, fb.height = size
        fb.freq = fps
        self._begun = True

    def end(self) -> None:
        """Stop capturing and clear the frame-buffer geometry."""
        fb = self._require_begun("end")
        fb.width = 0
        fb.height = 0
        fb.freq = 0
        self._begun = False

    def width(self) -> int:
        """Frame width in pixels."""
        return self._require_begun("width").width

    def height(self) -> int:
        """Frame height in pixels."""
        return self._require_begun("height").height

    def bits_per_pixel(self) -> int:
        """Bits per pixel of the current format."""
        self._require_begun("bitsPerPixel")
        return _PIXEL_SIZES[self._format][0]

    def bytes_per_pixel(self) -> int:
        """Bytes per pixel of the current format."""
        self._require_begun("bytesPerPixel")
        return _PIXEL_SIZES[self._format][1]

    def read_frame(self) -> bytes | None:
        """The current frame in the chosen format, or None if no frame is available."""
        fb = self._require_begun("readFrame")
        size = self.bits_per_pixel() * self.width() * self.height() // 8
        if self._format is CameraFormat.RGB888:
            return fb.read_rgb888(size)
        return fb.read_rgb444(size)

    def horizontal_flip(self) -> None:
        """Ask for horizontally mirrored frames."""
        self._require_begun("horizontalFlip").needs_horizontal_flip = True

    def no_horizontal_flip(self) -> None:
        """Stop mirroring frames horizontally."""
        self._require_begun("noHorizontalFlip").needs_horizontal_flip = False

    def vertical_flip(self) -> None:
        """Ask for vertically mirrored frames."""
        self._require_begun("verticalFlip").needs_vertical_flip = True

    def no_vertical_flip(self) -> None:
        """Stop mirroring frames vertically."""
        self._require_begun("noVerticalFlip").needs_vertical_flip = False