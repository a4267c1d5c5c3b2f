"""Host-side and board-side views over the state of a virtual board.

Every operation here is no-fail: acting on something that does not exist
does nothing and reads back a neutral value.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import replace
from enum import Enum

from smcesim.board_data import (
    ActiveDriver,
    BoardData,
    DataDirection,
    DeviceAllocation,
    FrameBufferData,
    Pin,
    UartChannel,
)
from smcesim.config import FrameBufferDirection

_EMPTY_ALLOCATION = DeviceAllocation(
    count=0, r8=0, r16=0, r32=0, r64=0, a8=0, a16=0, a32=0, a64=0, mtx=0
)


class Link(Enum):
    """Bus a peripheral is reached through."""

    UART = "UART"
    SPI = "SPI"
    I2C = "I2C"


class _PinHandle:
    def __init__(self, board_data: BoardData | None, pin_id: int) -> None:
        self._board_data = board_data
        self._pin_id = pin_id

    def _pin(self) -> Pin | None:
        if self._board_data is None:
            return None
        return self._board_data.find_pin(self._pin_id)


class VirtualAnalogDriver(_PinHandle):
    """Analog driver of a GPIO pin."""

    def exists(self) -> bool:
        """Whether the pin exists and carries an analog driver."""
        pin = self._pin()
        return pin is not None and (pin.can_analog_read or pin.can_analog_write)

    def can_read(self) -> bool:
        """Whether the board may read the pin as analog."""
        pin = self._pin()
        return pin is not None and pin.can_analog_read

    def can_write(self) -> bool:
        """Whether the board may write the pin as analog."""
        pin = self._pin()
        return pin is not None and pin.can_analog_write

    def read(self) -> int:
        """Current analog value of the pin, 0 if there is no pin."""
        pin = self._pin()
        return pin.value if pin is not None else 0

    def write(self, value: int) -> None:
        """Set the analog value of the pin (16 bits)."""
        pin = self._pin()
        if pin is not None:
            pin.value = value & 0xFFFF


class VirtualDigitalDriver(_PinHandle):
    """Digital driver of a GPIO pin."""

    def exists(self) -> bool:
        """Whether the pin exists and carries a digital driver."""
        pin = self._pin()
        return pin is not None and (pin.can_digital_read or pin.can_digital_write)

    def can_read(self) -> bool:
        """Whether the board may read the pin as digital."""
        pin = self._pin()
        return pin is not None and pin.can_digital_read

    def can_write(self) -> bool:
        """Whether the board may write the pin as digital."""
        pin = self._pin()
        return pin is not None and pin.can_digital_write

    def read(self) -> bool:
        """Current digital level of the pin, False if there is no pin."""
        pin = self._pin()
        return pin is not None and pin.value != 0

    def write(self, value: bool) -> None:
        """Set the digital level of the pin."""
        pin = self._pin()
        if pin is not None:
            pin.value = 1 if value else 0


class VirtualPin(_PinHandle):
    """A GPIO pin."""

    def exists(self) -> bool:
        """Whether the pin exists on the board."""
        return self._pin() is not None

    def locked(self) -> bool:
        """Whether another peripheral than GPIO drives the pin."""
        pin = self._pin()
        return pin is not None and pin.active_driver is not ActiveDriver.GPIO

    @property
    def direction(self) -> DataDirection:
        """Data direction of the pin; IN when there is no pin."""
        pin = self._pin()
        return pin.data_direction if pin is not None else DataDirection.IN

    @direction.setter
    def direction(self, value: DataDirection) -> None:
        pin = self._pin()
        if pin is not None:
            pin.data_direction = DataDirection(value)

    def digital(self) -> VirtualDigitalDriver:
        """The digital driver of this pin."""
        return VirtualDigitalDriver(self._board_data, self._pin_id)

    def analog(self) -> VirtualAnalogDriver:
        """The analog driver of this pin."""
        return VirtualAnalogDriver(self._board_data, self._pin_id)


class VirtualPins:
    """The GPIO pins of a board, looked up by pin id."""

    def __init__(self, board_data: BoardData | None) -> None:
        self._board_data = board_data

    def __getitem__(self, pin_id: int) -> VirtualPin:
        return VirtualPin(self._board_data, pin_id)


class _UartDirection(Enum):
    RX = "rx"
    TX = "tx"


class _UartHandle:
    def __init__(self, board_data: BoardData | None, index: int) -> None:
        self._board_data = board_data
        self._index = index

    def _channel(self) -> UartChannel | None:
        if self._board_data is None:
            return None
        if not 0 <= self._index < len(self._board_data.uart_channels):
            return None
        return self._board_data.uart_channels[self._index]


class VirtualUartBuffer(_UartHandle):
    """One direction of a UART channel."""

    def __init__(self, board_data: BoardData | None, index: int, direction: _UartDirection) -> None:
        super().__init__(board_data, index)
        self._direction = direction

    def _parts(self):
        channel = self._channel()
        if channel is None:
            return None
        if self._direction is _UartDirection.RX:
            return channel.rx, channel.rx_lock, channel.max_buffered_rx
        return channel.tx, channel.tx_lock, channel.max_buffered_tx

    def exists(self) -> bool:
        """Whether the underlying channel exists."""
        return self._channel() is not None

    def max_size(self) -> int:
        """Capacity of the buffer in bytes."""
        parts = self._parts()
        return parts[2] if parts is not None else 0

    def size(self) -> int:
        """Number of bytes currently buffered."""
        parts = self._parts()
        if parts is None:
            return 0
        buffer, lock, _ = parts
        with lock:
            return len(buffer)

    def read(self, count: int) -> bytes:
        """Remove and return up to ``count`` bytes from the buffer."""
        parts = self._parts()
        if parts is None or count <= 0:
            return b""
        buffer, lock, _ = parts
        with lock:
            taken = min(count, len(buffer))
            return bytes(buffer.popleft() for _ in range(taken))

    def write(self, data: bytes) -> int:
        """Append as much of ``data`` as fits; return how many bytes were taken."""
        parts = self._parts()
        if parts is None:
            return 0
        buffer, lock, capacity = parts
        payload = bytes(data)
        with lock:
            room = max(capacity - len(buffer), 0)
            accepted = payload[:room]
            buffer.extend(accepted)
        return len(accepted)

    def front(self) -> int | None:
        """The next byte without removing it, or None when empty."""
        parts = self._parts()
        if parts is None:
            return None
        buffer, lock, _ = parts
        with lock:
            return buffer[0] if buffer else None


class VirtualUart(_UartHandle):
    """A UART channel."""

    def exists(self) -> bool:
        """Whether the channel exists."""
        return self._channel() is not None

    @property
    def active(self) -> bool:
        """Whether the board has opened the channel."""
        channel = self._channel()
        return channel is not None and channel.active

    @active.setter
    def active(self, value: bool) -> None:
        channel = self._channel()
        if channel is not None:
            channel.active = bool(value)

    def rx(self) -> VirtualUartBuffer:
        """Host-to-board buffer."""
        return VirtualUartBuffer(self._board_data, self._index, _UartDirection.RX)

    def tx(self) -> VirtualUartBuffer:
        """Board-to-host buffer."""
        return VirtualUartBuffer(self._board_data, self._index, _UartDirection.TX)


class VirtualUarts:
    """The UART channels of a board."""

    def __init__(self, board_data: BoardData | None) -> None:
        self._board_data = board_data

    def __getitem__(self, index: int) -> VirtualUart:
        return VirtualUart(self._board_data, index)

    def __iter__(self) -> Iterator[VirtualUart]:
        for index in range(len(self)):
            yield VirtualUart(self._board_data, index)

    def __len__(self) -> int:
        return len(self._board_data.uart_channels) if self._board_data is not None else 0


def _rgb888_to_rgb444(data: bytes) -> bytes:
    out = bytearray()
    for red, green, blue in zip(data[0::3], data[1::3], data[2::3]):
        out.append((green & 0xF0) | (blue >> 4))
        out.append(red >> 4)
    return bytes(out)


def _rgb444_to_rgb888(data: bytes) -> bytes:
    out = bytearray()
    for green_blue, red in zip(data[0::2], data[1::2]):
        out.append((red & 0x0F) * 0x11)
        out.append((green_blue >> 4) * 0x11)
        out.append((green_blue & 0x0F) * 0x11)
    return bytes(out)


class FrameBuffer:
    """An RGB888 frame-buffer holding a single frame (camera or screen)."""

    def __init__(self, board_data: BoardData | None, key: int) -> None:
        self._board_data = board_data
        self._key = key

    def _fb(self) -> FrameBufferData | None:
        if self._board_data is None:
            return None
        return next((fb for fb in self._board_data.frame_buffers if fb.key == self._key), None)

    def exists(self) -> bool:
        """Whether a frame-buffer with this key exists."""
        return self._fb() is not None

    def direction(self) -> FrameBufferDirection | None:
        """Data direction, or None when the frame-buffer does not exist."""
        fb = self._fb()
        return fb.direction if fb is not None else None

    def _flag(self, name: str) -> bool:
        fb = self._fb()
        return fb is not None and getattr(fb.transform, name)

    def _set_flag(self, name: str, value: bool) -> None:
        fb = self._fb()
        if fb is not None:
            fb.transform = replace(fb.transform, **{name: bool(value)})

    @property
    def needs_horizontal_flip(self) -> bool:
        """Whether frames must be flipped horizontally."""
        return self._flag("horiz_flip")

    @needs_horizontal_flip.setter
    def needs_horizontal_flip(self, value: bool) -> None:
        self._set_flag("horiz_flip", value)

    @property
    def needs_vertical_flip(self) -> bool:
        """Whether frames must be flipped vertically."""
        return self._flag("vert_flip")

    @needs_vertical_flip.setter
    def needs_vertical_flip(self, value: bool) -> None:
        self._set_flag("vert_flip", value)

    def _get(self, name: str) -> int:
        fb = self._fb()
        return getattr(fb, name) if fb is not None else 0

    def _set(self, name: str, value: int, mask: int) -> None:
        fb = self._fb()
        if fb is not None:
            setattr(fb, name, value & mask)

    @property
    def width(self) -> int:
        """Width in pixels."""
        return self._get("width")

    @width.setter
    def width(self, value: int) -> None:
        self._set("width", value, 0xFFFF)

    @property
    def height(self) -> int:
        """Height in pixels."""
        return self._get("height")

    @height.setter
    def height(self, value: int) -> None:
        self._set("height", value, 0xFFFF)

    @property
    def freq(self) -> int:
        """Frame frequency in Hz."""
        return self._get("freq")

    @freq.setter
    def freq(self, value: int) -> None:
        self._set("freq", value, 0xFF)

    def _store(self, frame: bytes, bytes_per_pixel: int, source_size: int) -> bool:
        fb = self._fb()
        if fb is None or source_size != fb.width * fb.height * bytes_per_pixel:
            return False
        with fb.lock:
            fb.data[:] = frame
        return True

    def _load(self, size: int, bytes_per_pixel: int) -> bytes | None:
        fb = self._fb()
        if fb is None:
            return None
        pixels = fb.width * fb.height
        if size != pixels * bytes_per_pixel:
            return None
        with fb.lock:
            if len(fb.data) != pixels * 3:
                return None
            return bytes(fb.data)

    def write_rgb888(self, data: bytes) -> bool:
        """Store a frame of packed RRRRRRRRGGGGGGGGBBBBBBBB pixels."""
        frame = bytes(data)
        return self._store(frame, 3, len(frame))

    def read_rgb888(self, size: int) -> bytes | None:
        """Return the frame as packed RGB888 pixels, or None if ``size`` does not match."""
        return self._load(size, 3)

    def write_rgb444(self, data: bytes) -> bool:
        """Store a frame of packed GGGGBBBB0000RRRR pixels."""
        frame = bytes(data)
        return self._store(_rgb444_to_rgb888(frame), 2, len(frame))

    def read_rgb444(self, size: int) -> bytes | None:
        """Return the frame as packed RGB444 pixels, or None if ``size`` does not match."""
        frame = self._load(size, 2)
        return _rgb888_to_rgb444(frame) if frame is not None else None


class FrameBuffers:
    """The frame-buffers of a board, looked up by key."""

    def __init__(self, board_data: BoardData | None) -> None:
        self._board_data = board_data

    def __getitem__(self, key: int) -> FrameBuffer:
        return FrameBuffer(self._board_data, key)


class BoardView:
    """Mutable view of a virtual board."""

    def __init__(self, board_data: BoardData | None = None) -> None:
        self._board_data = board_data
        self.pins = VirtualPins(board_data)
        self.uart_channels = VirtualUarts(board_data)
        self.frame_buffers = FrameBuffers(board_data)

    @property
    def board_data(self) -> BoardData | None:
        """The viewed board state."""
        return self._board_data

    def valid(self) -> bool:
        """Whether the view is attached to a board."""
        return self._board_data is not None

    def storage_get_root(self, link: Link, accessor: int) -> str:
        """Root directory of the storage device on ``link`` at ``accessor``, or ''."""
        if self._board_data is None:
            return ""
        for storage in self._board_data.direct_storages:
            if storage.bus == Link(link).value and storage.accessor == accessor:
                return storage.root_dir
        return ""


class BoardDeviceView:
    """Access to the storage allocated for user-defined board devices."""

    def __init__(self, board_view: BoardView) -> None:
        self._board_data = board_view.board_data

    def valid(self) -> bool:
        """Whether the view is attached to a board."""
        return self._board_data is not None

    def get_bases(self, dev_name: str) -> DeviceAllocation:
        """Storage offsets of the named device; a zero count if it is not installed."""
        if self._board_data is None:
            return _EMPTY_ALLOCATION
        return self._board_data.device_allocation_map.get(dev_name, _EMPTY_ALLOCATION)


__all__ = [
    "BoardDeviceView",
    "BoardView",
    "FrameBuffer",
    "FrameBuffers",
    "Link",
    "VirtualAnalogDriver",
    "VirtualDigitalDriver",
    "VirtualPin",
    "VirtualPins",
    "VirtualUart",
    "VirtualUartBuffer",
    "VirtualUarts",
    "deque",
]