"""A simulated Arduino board: configuration, board state, host-side views and a sketch-side runtime with serial, SD, camera and MQTT."""

__version__ = "0.1.0"