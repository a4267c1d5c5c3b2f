from pathlib import Path

import pytest

from smcesim.config import (
    ArduinoLibrary,
    BoardConfig,
    BoardDevice,
    BoardDeviceSpecification,
    FrameBufferConfig,
    FrameBufferDirection,
    GpioDrivers,
    PluginDefaults,
    PluginManifest,
    SecureDigitalStorage,
    SketchConfig,
    UartChannelConfig,
    Uuid,
)


def test_uart_defaults_match_source():
    uart = UartChannelConfig()
    assert uart.baud_rate == 9600
    assert uart.rx_buffer_length == 64
    assert uart.tx_buffer_length == 64
    assert uart.flushing_threshold == 0
    assert uart.rx_pin_override is None and uart.tx_pin_override is None


def test_sd_default_cspin_zero():
    card = SecureDigitalStorage()
    assert card.cspin == 0
    assert card.root_dir == Path()


def test_board_config_lists_are_independent():
    first = BoardConfig()
    second = BoardConfig()
    first.pins.append(3)
    assert second.pins == []


def test_gpio_drivers_default_empty():
    drivers = GpioDrivers()
    assert drivers.digital_driver is None
    assert drivers.analog_driver is None


def test_board_device_spec_is_hashable_and_equal():
    spec_a = BoardDeviceSpecification('"Dev" "1"', "Dev", r8_count=2)
    spec_b = BoardDeviceSpecification('"Dev" "1"', "Dev", r8_count=2)
    assert spec_a == spec_b
    assert len({spec_a, spec_b}) == 1
    device = BoardDevice(spec_a, 3)
    assert device.spec.r8_count == 2


def test_arduino_library_latest_by_default():
    assert ArduinoLibrary("WiFi").version == ""


def test_plugin_manifest_defaults():
    manifest = PluginManifest(name="lib", version="1.0", defaults=PluginDefaults.CMAKE)
    assert manifest.development is False
    assert manifest.defaults is PluginDefaults.CMAKE
    assert manifest.depends == []


def test_sketch_config_fields():
    conf = SketchConfig(fqbn="arduino:avr:uno", legacy_preproc_libs=[ArduinoLibrary("MQTT")])
    assert conf.fqbn == "arduino:avr:uno"
    assert conf.legacy_preproc_libs[0].name == "MQTT"
    assert conf.plugins == []


def test_frame_buffer_config():
    fb = FrameBufferConfig(key=1, direction=FrameBufferDirection.IN)
    assert fb.direction is FrameBufferDirection.IN


def test_uuid_hex_round_trip():
    uid = Uuid.generate()
    hex_text = uid.to_hex()
    assert len(hex_text) == 32
    assert Uuid(bytes.fromhex(hex_text)) == uid


def test_uuid_hex_of_known_bytes():
    assert Uuid(bytes(range(16))).to_hex() == "000102030405060708090a0b0c0d0e0f"


def test_uuid_generate_is_random():
    assert len({Uuid.generate() for _ in range(20)}) == 20


@pytest.mark.parametrize("size", [0, 15, 17])
def test_uuid_rejects_wrong_length(size):
    with pytest.raises(ValueError):
        Uuid(bytes(size))