"""Configuration records for boards, sketches, plugins and board devices."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass
class DigitalDriver:
    """Digital capabilities granted to a GPIO pin."""

    board_read: bool
    board_write: bool


@dataclass
class AnalogDriver:
    """Analog capabilities granted to a GPIO pin."""

    board_read: bool
    board_write: bool


@dataclass
class GpioDrivers:
    """Drivers to install on an existing GPIO pin."""

    pin_id: int = 0
    digital_driver: DigitalDriver | None = None
    analog_driver: AnalogDriver | None = None


@dataclass
class UartChannelConfig:
    """Configuration of one UART channel."""

    rx_pin_override: int | None = None
    tx_pin_override: int | None = None
    baud_rate: int = 9600
    rx_buffer_length: int = 64
    tx_buffer_length: int = 64
    flushing_threshold: int = 0


@dataclass
class SecureDigitalStorage:
    """An SD card reachable over SPI, backed by a host directory."""

    cspin: int = 0
    root_dir: Path = field(default_factory=Path)


class FrameBufferDirection(Enum):
    """Data direction of a frame-buffer."""

    IN = "in"  # host-to-board (camera)
    OUT = "out"  # board-to-host (screen)


@dataclass
class FrameBufferConfig:
    """Configuration of one frame-buffer."""

    key: int
    direction: FrameBufferDirection


@dataclass(frozen=True)
class BoardDeviceSpecification:
    """Storage layout of a user-defined board device."""

    full_string: str
    name: str
    r8_count: int = 0
    r16_count: int = 0
    r32_count: int = 0
    r64_count: int = 0
    a8_count: int = 0
    a16_count: int = 0
    a32_count: int = 0
    a64_count: int = 0
    mtx_count: int = 0


@dataclass
class BoardDevice:
    """A number of instances of a board device to install."""

    spec: BoardDeviceSpecification
    count: int


@dataclass
class BoardConfig:
    """Configuration for running a sketch."""

    pins: list[int] = field(default_factory=list)
    gpio_drivers: list[GpioDrivers] = field(default_factory=list)
    uart_channels: list[UartChannelConfig] = field(default_factory=list)
    sd_cards: list[SecureDigitalStorage] = field(default_factory=list)
    frame_buffers: list[FrameBufferConfig] = field(default_factory=list)
    board_devices: list[BoardDevice] = field(default_factory=list)


@dataclass
class ArduinoLibrary:
    """Library to pull from the Arduino library manager."""

    name: str
    version: str = ""  # empty means latest


class PluginDefaults(Enum):
    """Source layout conventions of a plugin."""

    ARDUINO = "arduino"  # src/** is sources, src/ is incdir, no linkdir
    SINGLE_DIR = "single_dir"  # ./* is sources, ./ is incdir, ./ is linkdir
    C = "c"  # src/* is sources, include/ is incdir, lib is linkdir
    NONE = "none"  # empty
    CMAKE = "cmake"  # no generated target, added as a subdirectory


@dataclass
class PluginManifest:
    """Description of a plugin to compile with a sketch."""

    name: str = ""
    version: str = ""
    depends: list[str] = field(default_factory=list)
    needs_devices: list[str] = field(default_factory=list)
    uri: str = ""
    patch_uri: str = ""
    defaults: PluginDefaults = PluginDefaults.ARDUINO
    incdirs: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    linkdirs: list[str] = field(default_factory=list)
    linklibs: list[str] = field(default_factory=list)
    development: bool = False


@dataclass
class SketchConfig:
    """Configuration for building a sketch."""

    fqbn: str = ""
    extra_board_uris: list[str] = field(default_factory=list)
    legacy_preproc_libs: list[ArduinoLibrary] = field(default_factory=list)
    plugins: list[PluginManifest] = field(default_factory=list)
    genbind_devices: list[BoardDeviceSpecification] = field(default_factory=list)


@dataclass(frozen=True)
class Uuid:
    """A 128-bit random identifier."""

    bytes: bytes

    def __post_init__(self) -> None:
        if len(self.bytes) != 16:
            raise ValueError(f"a Uuid holds 16 bytes, got {len(self.bytes)}")

    @classmethod
    def generate(cls) -> Uuid:
        """Return a new random identifier."""
        return cls(secrets.token_bytes(16))

    def to_hex(self) -> str:
        """Return the identifier as 32 lower-case hexadecimal digits."""
        return self.bytes.hex()