"""In-memory state of a virtual board and its named shared segments."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from smcesim.config import BoardConfig, FrameBufferDirection


class DataDirection(Enum):
    """Direction of a GPIO pin."""

    IN = "in"
    OUT = "out"


class ActiveDriver(Enum):
    """Which peripheral currently drives a pin."""

    GPIO = "gpio"
    UART = "uart"
    I2C = "i2c"
    SPI = "spi"
    OPAQUE = "opaque"


class PixelFormat(IntEnum):
    """Pixel encoding of a frame-buffer."""

    RGB888 = 0
    RGB444 = 1
    RGB565 = 2


@dataclass(frozen=True)
class Transform:
    """Flip flags and pixel format of a frame-buffer."""

    horiz_flip: bool = False
    vert_flip: bool = False
    pixel_format: PixelFormat = PixelFormat.RGB888


@dataclass
class Pin:
    """A GPIO pin and its capabilities."""

    id: int
    can_digital_read: bool = False
    can_digital_write: bool = False
    can_analog_read: bool = False
    can_analog_write: bool = False
    value: int = 0
    data_direction: DataDirection = DataDirection.IN
    active_driver: ActiveDriver = ActiveDriver.GPIO


@dataclass
class UartChannel:
    """A UART channel with its receive and transmit buffers."""

    max_buffered_rx: int
    max_buffered_tx: int
    baud_rate: int
    rx_pin_override: int | None = None
    tx_pin_override: int | None = None
    active: bool = False
    rx: deque[int] = field(default_factory=deque)
    tx: deque[int] = field(default_factory=deque)
    rx_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    tx_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


@dataclass
class DirectStorage:
    """A storage device directly reachable by the board."""

    accessor: int
    root_dir: str
    bus: str = "SPI"


@dataclass
class FrameBufferData:
    """Shared state of one frame-buffer."""

    key: int
    direction: FrameBufferDirection
    width: int = 0
    height: int = 0
    freq: int = 0
    transform: Transform = field(default_factory=Transform)
    data: bytearray = field(default_factory=bytearray)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


@dataclass(frozen=True)
class DeviceAllocation:
    """Where the storage of one kind of board device starts in each bank.

    Raw offsets are in bytes into ``raw_bank``; the others are indices into
    the matching atomic or mutex bank.
    """

    count: int
    r8: int
    r16: int
    r32: int
    r64: int
    a8: int
    a16: int
    a32: int
    a64: int
    mtx: int


_RAW_KINDS = (("r8", 1), ("r16", 2), ("r32", 4), ("r64", 8))


def _align(offset: int, width: int) -> int:
    return -(-offset // width) * width


class BoardData:
    """The complete state of a configured virtual board."""

    def __init__(self, config: BoardConfig) -> None:
        self.pins: list[Pin] = [Pin(pin_id) for pin_id in sorted(set(config.pins))]
        self._pins_by_id = {pin.id: pin for pin in self.pins}
        for drivers in config.gpio_drivers:
            pin = self._pins_by_id.get(drivers.pin_id)
            if pin is None:
                raise ValueError(f"GPIO drivers given for unknown pin {drivers.pin_id}")
            if drivers.digital_driver is not None:
                pin.can_digital_read = drivers.digital_driver.board_read
                pin.can_digital_write = drivers.digital_driver.board_write
            if drivers.analog_driver is not None:
                pin.can_analog_read = drivers.analog_driver.board_read
                pin.can_analog_write = drivers.analog_driver.board_write

        self.uart_channels: list[UartChannel] = [
            UartChannel(
                max_buffered_rx=uart.rx_buffer_length,
                max_buffered_tx=uart.tx_buffer_length,
                baud_rate=uart.baud_rate,
                rx_pin_override=uart.rx_pin_override,
                tx_pin_override=uart.tx_pin_override,
            )
            for uart in config.uart_channels
        ]
        self.direct_storages: list[DirectStorage] = [
            DirectStorage(accessor=card.cspin, root_dir=str(card.root_dir)) for card in config.sd_cards
        ]
        self.frame_buffers: list[FrameBufferData] = [
            FrameBufferData(key=fb.key, direction=fb.direction) for fb in config.frame_buffers
        ]

        self.device_allocation_map: dict[str, DeviceAllocation] = {}
        self.a8_bank: list[int] = []
        self.a16_bank: list[int] = []
        self.a32_bank: list[int] = []
        self.a64_bank: list[int] = []
        self.mtx_bank: list[threading.Lock] = []
        atomic_banks = (
            ("a8", self.a8_bank),
            ("a16", self.a16_bank),
            ("a32", self.a32_bank),
            ("a64", self.a64_bank),
        )
        raw_size = 0
        for device in config.board_devices:
            spec = device.spec
            if spec.name in self.device_allocation_map:
                raise ValueError(f"board device {spec.name!r} installed twice")
            offsets: dict[str, int] = {}
            for kind, width in _RAW_KINDS:
                raw_size = _align(raw_size, width)
                offsets[kind] = raw_size
                raw_size += device.count * getattr(spec, f"{kind}_count") * width
            for kind, bank in atomic_banks:
                offsets[kind] = len(bank)
                bank.extend([0] * (device.count * getattr(spec, f"{kind}_count")))
            offsets["mtx"] = len(self.mtx_bank)
            self.mtx_bank.extend(threading.Lock() for _ in range(device.count * spec.mtx_count))
            self.device_allocation_map[spec.name] = DeviceAllocation(count=device.count, **offsets)
        self.raw_bank = bytearray(raw_size)

    def find_pin(self, pin_id: int) -> Pin | None:
        """Return the pin with the given id, or None."""
        return self._pins_by_id.get(pin_id)


_segments: dict[str, BoardData] = {}
_segments_lock = threading.Lock()


class SharedBoardData:
    """Handle on a named board segment, either owning it or attached to it."""

    def __init__(self) -> None:
        self._name: str | None = None
        self._board_data: BoardData | None = None
        self._master = False

    def __enter__(self) -> SharedBoardData:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.reset()

    @property
    def board_data(self) -> BoardData | None:
        """The board state, or None when nothing is attached."""
        return self._board_data

    def configure(self, name: str, config: BoardConfig) -> BoardData:
        """Create and own a new segment named ``name``."""
        self.reset()
        data = BoardData(config)
        with _segments_lock:
            if name in _segments:
                raise FileExistsError(f"board segment {name!r} already exists")
            _segments[name] = data
        self._name = name
        self._board_data = data
        self._master = True
        return data

    def open_as_child(self, name: str) -> BoardData:
        """Attach to an existing segment named ``name``."""
        with _segments_lock:
            data = _segments.get(name)
        if data is None:
            raise FileNotFoundError(f"no board segment named {name!r}")
        self.reset()
        self._name = name
        self._board_data = data
        self._master = False
        return data

    def reset(self) -> None:
        """Detach; the owner of a segment also removes it."""
        if self._master and self._name is not None:
            with _segments_lock:
                _segments.pop(self._name, None)
        self._name = None
        self._board_data = None
        self._master = False