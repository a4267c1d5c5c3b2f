import pytest

from smcesim.arduino import ArduinoError
from smcesim.board_data import BoardData
from smcesim.board_view import BoardView
from smcesim.config import BoardConfig, UartChannelConfig
from smcesim.serial import HardwareSerial


@pytest.fixture
def view():
    return BoardView(BoardData(BoardConfig(uart_channels=[UartChannelConfig()])))


@pytest.fixture
def serial(view):
    port = HardwareSerial(view, 0)
    port.begin(9600)
    return port


def test_begin_activates_channel(view):
    port = HardwareSerial(view)
    assert view.uart_channels[0].active is False
    port.begin()
    assert view.uart_channels[0].active is True


def test_end_deactivates_and_twice_fails(view, serial):
    serial.end()
    assert view.uart_channels[0].active is False
    with pytest.raises(ArduinoError):
        serial.end()


def test_inactive_operations_raise(view):
    port = HardwareSerial(view)
    with pytest.raises(ArduinoError):
        port.available()
    with pytest.raises(ArduinoError):
        port.read()
    with pytest.raises(ArduinoError):
        port.write(b"x")


def test_write_reaches_tx(view, serial):
    assert serial.write(b"hello") == len(b"hello")
    assert view.uart_channels[0].tx().read(64) == b"hello"


def test_write_byte(view, serial):
    assert serial.write_byte(ord("Z")) == 1
    assert view.uart_channels[0].tx().read(1) == b"Z"


def test_write_truncates_at_capacity(view, serial):
    capacity = view.uart_channels[0].tx().max_size()
    assert serial.write(bytes(capacity + 10)) == capacity
    assert serial.available_for_write() == 0


def test_available_for_write(view, serial):
    tx = view.uart_channels[0].tx()
    serial.print("abc")
    assert serial.available_for_write() == tx.max_size() - len("abc")


def test_read_and_peek(view, serial):
    view.uart_channels[0].rx().write(b"ok")
    assert serial.available() == 2
    assert serial.peek() == ord("o")
    assert serial.read() == ord("o")
    assert serial.read() == ord("k")
    assert serial.read() == -1
    assert serial.peek() == -1


def test_parse_int_over_serial(view, serial):
    view.uart_channels[0].rx().write(b"42\n")
    assert serial.parse_int() == 42
    assert serial.read() == ord("\n")


def test_println_over_serial(view, serial):
    serial.println("hi")
    assert view.uart_channels[0].tx().read(64) == b"hi\r\n"


def test_read_string_until_over_serial(view, serial):
    view.uart_channels[0].rx().write(b"cmd;rest")
    assert serial.read_string_until(";") == "cmd"
    assert serial.available() == len("rest")