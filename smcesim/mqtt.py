"""An MQTT client with the arduino-mqtt interface."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass

import paho.mqtt.client as mqtt

from smcesim.wstring import String

SimpleCallback = Callable[[String, String], object]
AdvancedCallback = Callable[["MQTTClient", str, bytes], object]

_KEEPALIVE = 10


@dataclass
class _Will:
    topic: str
    payload: bytes
    retained: bool
    qos: int


def _as_bytes(payload: bytes | str | String) -> bytes:
    if isinstance(payload, (str, String)):
        return str(payload).encode()
    return bytes(payload)


def _new_client(client_id: str, clean_session: bool) -> mqtt.Client:
    api_version = getattr(mqtt, "CallbackAPIVersion", None)
    if api_version is not None:
        return mqtt.Client(api_version.VERSION2, client_id=client_id, clean_session=clean_session)
    return mqtt.Client(client_id=client_id, clean_session=clean_session)


def _ok(rc: object) -> bool:
    return rc == mqtt.MQTT_ERR_SUCCESS


class MQTTClient:
    """A client of an MQTT broker.

    Incoming messages go to the advanced callback when one is set, and to the
    simple one otherwise.
    """

    def __init__(self, buf_size: int = 128) -> None:
        self._client: mqtt.Client | None = None
        self._host = ""
        self._port = 1883
        self._clean_session = True
        self._keepalive = _KEEPALIVE
        self._will: _Will | None = None
        self._simple: SimpleCallback | None = None
        self._advanced: AdvancedCallback | None = None

    @property
    def host(self) -> str:
        """Broker host name."""
        return self._host

    @property
    def port(self) -> int:
        """Broker port."""
        return self._port

    def begin(self, client: object = None) -> None:
        """Accept a network client; the connection is made by the broker library."""

    def on_message(self, callback: SimpleCallback | None) -> None:
        """Set the callback receiving ``(topic, payload)`` as Strings."""
        self._simple = callback

    def on_message_advanced(self, callback: AdvancedCallback | None) -> None:
        """Set the callback receiving ``(client, topic, payload bytes)``."""
        self._advanced = callback

    def set_host(self, hostname: str, port: int = 1883) -> None:
        """Set the broker to connect to."""
        self._host = hostname
        self._port = port

    def set_will(
        self, topic: str, payload: bytes | str | String = b"", retained: bool = False, qos: int = 0
    ) -> None:
        """Set the last-will message sent by the broker if this client vanishes."""
        self._will = _Will(topic, _as_bytes(payload), bool(retained), qos)
        if self._client is not None:
            self._client.will_set(topic, self._will.payload, qos, self._will.retained)

    def clear_will(self) -> None:
        """Drop the last-will message."""
        self._will = None
        if self._client is not None:
            self._client.will_clear()

    def _on_paho_message(self, client: object, userdata: object, message: mqtt.MQTTMessage) -> None:
        self.dispatch(message.topic, message.payload)

    def connect(self, client_id: str, username: str | None = None, password: str | None = None) -> bool:
        """Connect to the broker set with ``set_host``; return whether it worked."""
        if self.connected():
            self.disconnect()
        try:
            if self._client is not None:
                self._client.reinitialise(client_id=client_id, clean_session=self._clean_session)
            else:
                self._client = _new_client(client_id, self._clean_session)
        except ValueError as exc:
            print(f"MQTTClient::connect failed: {exc}", file=sys.stderr)
            return False
        client = self._client
        if username is not None:
            client.username_pw_set(username, password)
        if self._will is not None:
            client.will_set(self._will.topic, self._will.payload, self._will.qos, self._will.retained)
        client.on_message = self._on_paho_message
        try:
            rc = client.connect(self._host, self._port, self._keepalive)
        except ValueError:
            print(
                f"MQTTClient::connect failed: invalid arguments in connect({self._host!r}, {self._port})",
                file=sys.stderr,
            )
            return False
        except OSError as exc:
            print(f"MQTTClient::connect failed: {exc}", file=sys.stderr)
            return False
        if _ok(rc):
            return True
        print(f"MQTTClient::connect failed: unknown return code {rc}", file=sys.stderr)
        return False

    def publish(
        self, topic: str, payload: bytes | str | String = b"", retained: bool = False, qos: int = 0
    ) -> bool:
        """Publish a message; return whether it was queued."""
        if self._client is None:
            return False
        try:
            info = self._client.publish(topic, _as_bytes(payload), qos, bool(retained))
        except ValueError:
            return False
        return _ok(info.rc)

    def subscribe(self, topic: str, qos: int = 0) -> bool:
        """Subscribe to a topic filter."""
        if self._client is None:
            return False
        try:
            rc, _ = self._client.subscribe(topic, qos)
        except ValueError:
            return False
        return _ok(rc)

    def unsubscribe(self, topic: str) -> bool:
        """Unsubscribe from a topic filter."""
        if self._client is None:
            return False
        try:
            rc, _ = self._client.unsubscribe(topic)
        except ValueError:
            return False
        return _ok(rc)

    def loop(self) -> bool:
        """Process pending network traffic without blocking."""
        if self._client is None:
            return False
        return _ok(self._client.loop(timeout=0))

    def connected(self) -> bool:
        """Whether a connection to the broker is open."""
        return self._client is not None and self._client.socket() is not None

    def disconnect(self) -> bool:
        """Close the connection to the broker."""
        if self._client is None:
            return False
        return _ok(self._client.disconnect())

    def dispatch(self, topic: str, payload: bytes | str | String) -> None:
        """Hand a received message to the registered callback."""
        data = _as_bytes(payload)
        if self._advanced is not None:
            self._advanced(self, topic, data)
            return
        if self._simple is not None:
            self._simple(String(topic), String(data.decode("latin-1")))