"""The sketch-side serial port backed by a virtual UART channel."""

from __future__ import annotations

from smcesim.arduino import ArduinoError
from smcesim.board_view import BoardView, VirtualUart
from smcesim.stream import Stream

SERIAL_8N1 = 0x06


class HardwareSerial(Stream):
    """A serial port reading the UART's rx buffer and writing its tx buffer."""

    def __init__(self, board_view: BoardView, channel: int = 0) -> None:
        super().__init__()
        self._board_view = board_view
        self._channel = channel

    def _uart(self) -> VirtualUart:
        return self._board_view.uart_channels[self._channel]

    def _active_uart(self, call: str) -> VirtualUart:
        uart = self._uart()
        if not uart.active:
            raise ArduinoError(f"HardwareSerial::{call}: Device inactive")
        return uart

    def begin(self, baud_rate: int = 9600, config: int = SERIAL_8N1) -> None:
        """Open the port; the baud rate and frame format are not simulated."""
        self._uart().active = True

    def end(self) -> None:
        """Close the port."""
        uart = self._uart()
        if not uart.active:
            raise ArduinoError("HardwareSerial::end(): Already inactive")
        uart.active = False

    def available(self) -> int:
        """Number of bytes waiting to be read."""
        return self._active_uart("available()").rx().size()

    def available_for_write(self) -> int:
        """Free space in the transmit buffer."""
        tx = self._active_uart("availableForWrite()").tx()
        return tx.max_size() - tx.size()

    def write_byte(self, byte: int) -> int:
        """Send one byte; return 1 if it was buffered."""
        uart = self._active_uart(f"write({byte})")
        return uart.tx().write(bytes([byte & 0xFF]))

    def _write_buffer(self, payload: bytes) -> int:
        uart = self._active_uart(f"write(?, {len(payload)})")
        return uart.tx().write(payload)

    def write(self, data) -> int:
        """Send as much of ``data`` as fits in the transmit buffer; return the count."""
        return super().write(data)

    def peek(self) -> int:
        """Next received byte without removing it, or -1."""
        front = self._active_uart("peek()").rx().front()
        return -1 if front is None else front

    def read(self) -> int:
        """Remove and return the next received byte, or -1."""
        data = self._active_uart("read()").rx().read(1)
        return data[0] if data else -1