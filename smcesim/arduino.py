"""Arduino core functions running against a virtual board."""

from __future__ import annotations

import os
import sys
import time
from collections.abc import Callable

from smcesim.board_data import DataDirection, DeviceAllocation, SharedBoardData
from smcesim.board_view import BoardDeviceView, BoardView

INPUT = False
OUTPUT = True
LOW = False
HIGH = True


class ArduinoError(RuntimeError):
    """A core function was used in a way the board does not allow."""


class Arduino:
    """Core I/O and timing functions of a sketch.

    When no view is given, the board segment named by ``segment_name`` (or the
    SEGNAME environment variable, or ".") is attached to on first use.
    """

    def __init__(self, board_view: BoardView | None = None, segment_name: str | None = None) -> None:
        self._board_view = board_view
        self._segment_name = segment_name
        self._shared: SharedBoardData | None = None
        self._start_ns = time.monotonic_ns()

    @property
    def board_view(self) -> BoardView:
        """The board this sketch runs on, attaching to it if needed."""
        if self._board_view is None:
            name = self._segment_name or os.environ.get("SEGNAME") or "."
            shared = SharedBoardData()
            data = shared.open_as_child(name)
            self._shared = shared
            self._board_view = BoardView(data)
        return self._board_view

    def _checked_pin(self, call: str, pin: int, capability: str | None, needed: DataDirection | None):
        vpin = self.board_view.pins[pin]
        if not vpin.exists():
            raise ArduinoError(f"{call}: Pin does not exist")
        if capability is not None:
            kind, action = capability.split("_")
            driver = vpin.digital() if kind == "digital" else vpin.analog()
            allowed = driver.can_read() if action == "read" else driver.can_write()
            if not allowed:
                verb = "reading" if action == "read" else "writing"
                raise ArduinoError(f"{call}: Pin has no {kind} driver capable of {verb}")
        if vpin.locked():
            raise ArduinoError(f"{call}: Pin is in use by another device")
        if needed is not None and vpin.direction is not needed:
            mode = "output" if needed is DataDirection.IN else "input"
            raise ArduinoError(f"{call}: Pin is in {mode} mode")
        return vpin

    def pin_mode(self, pin: int, mode: bool) -> None:
        """Set a pin to OUTPUT (True) or INPUT (False)."""
        call = f"pinMode({pin}, {'OUTPUT' if mode else 'INPUT'})"
        vpin = self._checked_pin(call, pin, None, None)
        vpin.direction = DataDirection.OUT if mode else DataDirection.IN

    def digital_read(self, pin: int) -> int:
        """Read the digital level of an input pin as 0 or 1."""
        vpin = self._checked_pin(f"digitalRead({pin})", pin, "digital_read", DataDirection.IN)
        return int(vpin.digital().read())

    def digital_write(self, pin: int, value: bool) -> None:
        """Drive an output pin HIGH or LOW."""
        call = f"digitalWrite({pin}, {'HIGH' if value else 'LOW'})"
        vpin = self._checked_pin(call, pin, "digital_write", DataDirection.OUT)
        vpin.digital().write(bool(value))

    def analog_read(self, pin: int) -> int:
        """Read the analog value of an input pin."""
        vpin = self._checked_pin(f"analogRead({pin})", pin, "analog_read", DataDirection.IN)
        return vpin.analog().read()

    def analog_write(self, pin: int, value: int) -> None:
        """Write a byte-sized analog value to an output pin."""
        value &= 0xFF
        vpin = self._checked_pin(f"analogWrite({pin}, {value})", pin, "analog_write", DataDirection.OUT)
        vpin.analog().write(value)

    def delay(self, ms: int) -> None:
        """Sleep for ``ms`` milliseconds."""
        time.sleep(ms / 1_000)

    def delay_microseconds(self, us: int) -> None:
        """Sleep for ``us`` microseconds."""
        time.sleep(us / 1_000_000)

    def micros(self) -> int:
        """Microseconds elapsed since this object was created."""
        return (time.monotonic_ns() - self._start_ns) // 1_000

    def millis(self) -> int:
        """Milliseconds elapsed since this object was created."""
        return (time.monotonic_ns() - self._start_ns) // 1_000_000

    def get_bases(self, name: str) -> DeviceAllocation:
        """Storage offsets of the named board device."""
        return BoardDeviceView(self.board_view).get_bases(name)


def run_sketch(
    setup: Callable[[Arduino], object],
    loop: Callable[[Arduino], object],
    board_view: BoardView | None = None,
    iterations: int | None = None,
) -> int:
    """Run ``setup`` once, then ``loop`` repeatedly; return the exit status.

    ``loop`` runs forever unless ``iterations`` is given. An exception ends the
    run with status 1 after being reported on standard error.
    """
    try:
        arduino = Arduino(board_view)
        arduino.board_view  # attach before the sketch starts
        setup(arduino)
        if iterations is None:
            while True:
                loop(arduino)
        for _ in range(iterations):
            loop(arduino)
    except Exception as exc:  # noqa: BLE001 - any sketch failure ends the run
        print(f"Exception occurred: {exc}", file=sys.stderr)
        print("Terminating.", file=sys.stderr)
        return 1
    return 0