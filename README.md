# smcesim

`smcesim` simulates an Arduino board in Python. A host application describes
the board with a `BoardConfig` and creates its state. Sketch code then runs
against that state through an Arduino-style runtime. The host watches and
drives the same state through a `BoardView`.

## Installation

```
pip install smcesim
```

To run the test suite, install the `test` extra and run pytest:

```
pip install "smcesim[test]"
pytest
```

## Modules

- **`smcesim.config`** holds the dataclasses for board and sketch
  configuration: `BoardConfig`, `GpioDrivers` (with `DigitalDriver` and
  `AnalogDriver`), `UartChannelConfig`, `SecureDigitalStorage`,
  `FrameBufferConfig`, `BoardDeviceSpecification`, `BoardDevice`,
  `SketchConfig`, `ArduinoLibrary` and `PluginManifest`. It also provides
  `Uuid`, a 16-byte random identifier with `Uuid.generate()` and `to_hex()`.
- **`smcesim.board_data`** holds the live board state.
  - `BoardData(config)` builds the pins, UART channels, storages and
    frame-buffers from the configuration. It also builds the storage banks
    for board devices.
  - `SharedBoardData` keeps an in-process registry of named boards.
    `configure(name, config)` creates and owns a board. `open_as_child(name)`
    attaches to an existing one. `reset()` detaches, and an owner that resets
    also removes its board from the registry. It can be used as a context
    manager.
- **`smcesim.board_view`** provides the no-fail view, where acting on
  something missing does nothing and reads back a neutral value.
  - `BoardView` offers `pins`, `uart_channels` and `frame_buffers`, together
    with `valid()` and `storage_get_root(link, accessor)`.
  - Each UART has bounded `rx()` and `tx()` buffers.
  - A frame-buffer takes frames through `write_rgb888`/`write_rgb444` and
    returns them through `read_rgb888`/`read_rgb444`.
  - `BoardDeviceView.get_bases(name)` returns the storage offsets of a board
    device.
- **`smcesim.arduino`** is the sketch-side runtime.
  - `Arduino` provides `pin_mode`, `digital_read`/`digital_write`,
    `analog_read`/`analog_write`, `delay`, `delay_microseconds`, `millis`,
    `micros` and `get_bases`. Misuse raises `ArduinoError`, for example
    writing to a pin that is in input mode.
  - With no view given, `Arduino` attaches on first use to the board named by
    `segment_name`. If that is not given, it uses the `SEGNAME` environment
    variable, and `"."` if that is unset too.
  - `run_sketch(setup, loop, board_view, iterations)` calls `setup(arduino)`
    once, then `loop(arduino)` `iterations` times, or forever if `iterations`
    is not given. It returns 0 on success. An exception is reported on
    standard error and gives 1.
- **`smcesim.wstring`** provides the mutable Arduino `String`.
- **`smcesim.stream`** provides the `Print` and `Stream` base classes.
  `Stream` has `parse_int`, `parse_float`, `find_until`, `read_bytes_until`
  and `read_string_until`.
- **`smcesim.serial`** provides `HardwareSerial`, a `Stream` over a virtual
  UART channel. It reads from the channel's rx buffer and writes to its tx
  buffer.
- **`smcesim.sd`** provides `SDClass` and `File`, backed by the host directory
  configured for an SD card.
- **`smcesim.camera`** provides the `OV767X` camera, which reads frames that
  the host places in an input frame-buffer.
- **`smcesim.mqtt`** provides `MQTTClient`, an arduino-mqtt style client built
  on paho-mqtt.

## Example

```python
from smcesim.config import BoardConfig, GpioDrivers, DigitalDriver, UartChannelConfig
from smcesim.board_data import BoardData
from smcesim.board_view import BoardView
from smcesim.arduino import run_sketch
from smcesim.serial import HardwareSerial

config = BoardConfig(
    pins=[13],
    gpio_drivers=[GpioDrivers(pin_id=13, digital_driver=DigitalDriver(board_read=True, board_write=True))],
    uart_channels=[UartChannelConfig()],
)
view = BoardView(BoardData(config))
serial = HardwareSerial(view, 0)

def setup(arduino):
    arduino.pin_mode(13, True)
    serial.begin(9600)

def loop(arduino):
    arduino.digital_write(13, True)
    serial.write(b"blink\n")

status = run_sketch(setup, loop, view, 3)

print(status)                              # 0
print(view.uart_channels[0].tx().read(64))  # b'blink\nblink\nblink\n'
print(view.pins[13].digital().read())       # True
```

A host can also register a named board and let sketch code find it by name:

```python
from smcesim.board_data import SharedBoardData
from smcesim.arduino import Arduino

with SharedBoardData() as host:
    host.configure("board-1", config)
    arduino = Arduino(segment_name="board-1")
    arduino.pin_mode(13, True)
```

## What it does not do

- It does not compile sketches. Sketch code is ordinary Python that calls the
  runtime.
- It provides no command-line program.
- Named boards in `SharedBoardData` live only inside the current Python
  process. They are not shared memory between separate processes.
- Baud rates and serial frame formats are recorded but not simulated.
- The pins passed to the camera are recorded but not used for capture.