# walk_buddy/mqtt_gateway.py

import json
import threading
from typing import Callable, Optional

import paho.mqtt.client as mqtt


def _topic(base: str, suffix: str) -> str:
    base = base.rstrip("/")
    suffix = suffix.lstrip("/")
    return f"{base}/{suffix}" if suffix else base


def _parse_bool(payload: str) -> Optional[bool]:
    p = payload.strip().lower()
    if p in {"1", "true", "on", "yes"}:
        return True
    if p in {"0", "false", "off", "no"}:
        return False
    return None


def parse_payload(payload: str) -> object:
    """Accept either JSON or simple bool-ish strings."""
    try:
        return json.loads(payload)
    except ValueError:
        b = _parse_bool(payload)
        if b is not None:
            return {"on": b}
    return payload


class MqttGateway:
    def __init__(
        self,
        host: str,
        port: int,
        keepalive_sec: int,
        base_topic: str,
        on_command: Callable[[str, object], None],
        logger: Callable[[str], None] = print,
    ):
        self._host = host
        self._port = port
        self._keepalive = keepalive_sec
        self._base = base_topic.rstrip("/")
        self._on_command = on_command
        self._log = logger

        self._client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=f"{self._base}-device")
        self._client.will_set(_topic(self._base, "status"), payload="offline", retain=True)
        self._client.on_connect = self._on_connect
        self._client.on_message = self._on_message
        self._client.on_disconnect = self._on_disconnect
        self._client.reconnect_delay_set(min_delay=1, max_delay=10)

        self._started = False
        self._connected = threading.Event()
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._connected.is_set()

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True

        try:
            self._client.connect(self._host, self._port, self._keepalive)
            self._client.loop_start()
        except OSError as e:
            self._log(f"[MQTT] Disabled (cannot connect to broker {self._host}:{self._port}): {e}")

    def stop(self) -> None:
        try:
            self._client.publish(_topic(self._base, "status"), payload="offline", retain=True)
            self._client.loop_stop()
            self._client.disconnect()
        except OSError as e:
            self._log(f"[MQTT] Stop error: {e}")
        self._connected.clear()

    def publish(self, suffix: str, payload: str, retain: bool = False) -> bool:
        if not self.connected:
            return False
        info = self._client.publish(_topic(self._base, suffix), payload, qos=1, retain=retain)
        return info.rc == mqtt.MQTT_ERR_SUCCESS

    def publish_state(self, state_obj: dict) -> None:
        self.publish("state", json.dumps(state_obj), retain=True)

    def _on_connect(self, _client, _userdata, _flags, reason_code, _properties=None):
        if reason_code == 0:
            self._log("[MQTT] Connected")
            self._connected.set()
            self._client.publish(_topic(self._base, "status"), payload="online", retain=True)
            self._client.subscribe(_topic(self._base, "cmd/#"))
        else:
            self._log(f"[MQTT] Connect failed rc={reason_code}")

    def _on_disconnect(self, _client, _userdata, _flags, reason_code, _properties=None):
        self._connected.clear()
        if reason_code != 0:
            self._log(f"[MQTT] Disconnected rc={reason_code} (will retry)")

    def _on_message(self, _client, _userdata, msg):
        topic = msg.topic
        payload = msg.payload.decode("utf-8", errors="ignore")

        base_cmd = _topic(self._base, "cmd/")
        if not topic.startswith(base_cmd):
            return

        cmd_path = topic[len(base_cmd) :].strip("/")
        if not cmd_path:
            return

        try:
            self._on_command(cmd_path, parse_payload(payload))
        except Exception as e:
            # Never let a command crash the network thread.
            self._log(f"[MQTT] Command handler error: {e}")
