import threading

import pytest

from smcesim.board_data import (
    ActiveDriver,
    BoardData,
    DataDirection,
    PixelFormat,
    SharedBoardData,
    Transform,
)
from smcesim.config import (
    AnalogDriver,
    BoardConfig,
    BoardDevice,
    BoardDeviceSpecification,
    DigitalDriver,
    FrameBufferConfig,
    FrameBufferDirection,
    GpioDrivers,
    SecureDigitalStorage,
    UartChannelConfig,
)


def _spec(name="Dev", **counts):
    return BoardDeviceSpecification(f'"{name}" "1"', name, **counts)


def test_pins_sorted_with_defaults():
    data = BoardData(BoardConfig(pins=[5, 1, 3]))
    assert [pin.id for pin in data.pins] == [1, 3, 5]
    pin = data.find_pin(3)
    assert pin.data_direction is DataDirection.IN
    assert pin.active_driver is ActiveDriver.GPIO
    assert not pin.can_digital_read
    assert data.find_pin(4) is None


def test_gpio_drivers_applied():
    config = BoardConfig(
        pins=[2, 7],
        gpio_drivers=[
            GpioDrivers(pin_id=2, digital_driver=DigitalDriver(True, False)),
            GpioDrivers(pin_id=7, analog_driver=AnalogDriver(False, True)),
        ],
    )
    data = BoardData(config)
    two, seven = data.find_pin(2), data.find_pin(7)
    assert two.can_digital_read and not two.can_digital_write
    assert not two.can_analog_read
    assert seven.can_analog_write and not seven.can_analog_read


def test_gpio_driver_on_unknown_pin_raises():
    config = BoardConfig(pins=[1], gpio_drivers=[GpioDrivers(pin_id=9)])
    with pytest.raises(ValueError):
        BoardData(config)


def test_uart_channels_from_config():
    uart_conf = UartChannelConfig(rx_pin_override=4, baud_rate=115200, rx_buffer_length=32)
    data = BoardData(BoardConfig(uart_channels=[uart_conf, UartChannelConfig()]))
    assert len(data.uart_channels) == 2
    channel = data.uart_channels[0]
    assert channel.baud_rate == 115200
    assert channel.max_buffered_rx == 32
    assert channel.max_buffered_tx == 64
    assert channel.rx_pin_override == 4
    assert not channel.active
    assert len(channel.rx) == 0 and len(channel.tx) == 0
    assert channel.rx is not data.uart_channels[1].rx


def test_storages_and_frame_buffers():
    config = BoardConfig(
        sd_cards=[SecureDigitalStorage(cspin=3, root_dir="card")],
        frame_buffers=[FrameBufferConfig(key=0, direction=FrameBufferDirection.OUT)],
    )
    data = BoardData(config)
    storage = data.direct_storages[0]
    assert storage.accessor == 3
    assert storage.root_dir == "card"
    assert storage.bus == "SPI"
    fb = data.frame_buffers[0]
    assert fb.direction is FrameBufferDirection.OUT
    assert (fb.width, fb.height, fb.freq) == (0, 0, 0)
    assert fb.transform == Transform(False, False, PixelFormat.RGB888)


def test_device_banks_sized_by_count():
    spec = _spec(r8_count=1, r32_count=2, a16_count=3, mtx_count=1)
    data = BoardData(BoardConfig(board_devices=[BoardDevice(spec, 4)]))
    alloc = data.device_allocation_map["Dev"]
    assert alloc.count == 4
    assert len(data.a16_bank) == 4 * 3
    assert len(data.mtx_bank) == 4
    assert all(isinstance(lock, type(threading.Lock())) for lock in data.mtx_bank)
    assert alloc.r32 % 4 == 0
    assert alloc.r32 >= alloc.r8 + 4 * 1
    assert len(data.raw_bank) >= alloc.r32 + 4 * 2 * 4


def test_two_devices_do_not_overlap():
    first = _spec("First", r16_count=1, a8_count=2)
    second = _spec("Second", r16_count=1, a8_count=1)
    data = BoardData(BoardConfig(board_devices=[BoardDevice(first, 2), BoardDevice(second, 3)]))
    a, b = data.device_allocation_map["First"], data.device_allocation_map["Second"]
    assert b.a8 == a.a8 + 2 * 2
    assert b.r16 >= a.r16 + 2 * 2
    assert len(data.a8_bank) == 2 * 2 + 3


def test_duplicate_device_raises():
    spec = _spec()
    with pytest.raises(ValueError):
        BoardData(BoardConfig(board_devices=[BoardDevice(spec, 1), BoardDevice(spec, 1)]))


def test_shared_configure_and_open_as_child():
    master = SharedBoardData()
    child = SharedBoardData()
    data = master.configure("segment-a", BoardConfig(pins=[1]))
    try:
        assert master.board_data is data
        assert child.open_as_child("segment-a") is data
        assert child.board_data.find_pin(1) is not None
    finally:
        master.reset()
    assert master.board_data is None
    with pytest.raises(FileNotFoundError):
        child.open_as_child("segment-a")


def test_configure_twice_with_same_name_raises():
    with SharedBoardData() as owner:
        owner.configure("segment-b", BoardConfig())
        with pytest.raises(FileExistsError):
            SharedBoardData().configure("segment-b", BoardConfig())


def test_child_reset_keeps_segment():
    with SharedBoardData() as owner:
        owner.configure("segment-c", BoardConfig())
        child = SharedBoardData()
        child.open_as_child("segment-c")
        child.reset()
        assert child.board_data is None
        assert SharedBoardData().open_as_child("segment-c") is owner.board_data


def test_open_unknown_segment_raises():
    with pytest.raises(FileNotFoundError):
        SharedBoardData().open_as_child("no-such-segment")