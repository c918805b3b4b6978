# walk_buddy/sms.py

import json
import os
import time
from typing import Callable, List, Optional, Tuple
from urllib.parse import quote, unquote

import serial
from serial import SerialException

from walk_buddy import config
from walk_buddy.errors import CapabilityDenied

SMS_SCHEME = "sms"


def build_sms_uri(contact: str, body: str) -> str:
    """Return ``sms:<contact>?body=<body>`` with the body percent-encoded.

    Only unreserved characters survive unencoded, so ``!`` and spaces become
    ``%21`` and ``%20``.
    """
    contact = (contact or "").strip()
    if not contact:
        raise CapabilityDenied("no recipient for sms uri")
    return f"{SMS_SCHEME}:{quote(contact, safe='+')}?body={quote(body, safe='')}"


def parse_sms_uri(uri: str) -> Tuple[str, str]:
    scheme, sep, rest = uri.partition(":")
    if not sep or scheme.lower() != SMS_SCHEME:
        raise CapabilityDenied(f"not an sms uri: {uri[:80]}")

    recipient, _, query = rest.partition("?")
    body = ""
    for part in query.split("&"):
        key, _, value = part.partition("=")
        if key == "body":
            body = unquote(value)

    recipient = unquote(recipient)
    if not recipient:
        raise CapabilityDenied("sms uri has no recipient")
    return recipient, body


class LoggingMessageSender:
    """Simulation sender: remembers every opened uri."""

    def __init__(self, enabled: bool = True, logger: Callable[[str], None] = print):
        self._enabled = enabled
        self._log = logger
        self.opened: List[str] = []

    def can_open(self, uri: str) -> bool:
        return self._enabled and uri.startswith(f"{SMS_SCHEME}:")

    def open(self, uri: str) -> bool:
        self.opened.append(uri)
        self._log(f"[SMS] (sim) {uri}")
        return True


class ModemMessageSender:
    """Sends text-mode SMS through a serial GSM modem using AT commands."""

    def __init__(
        self,
        port: str = config.MODEM_PORT,
        baudrate: int = config.MODEM_BAUDRATE,
        timeout: float = config.MODEM_TIMEOUT_SEC,
        serial_factory: Optional[Callable[..., object]] = None,
        command_delay: float = 0.5,
        logger: Callable[[str], None] = print,
    ):
        self._port = port
        self._baudrate = baudrate
        self._timeout = timeout
        self._serial_factory = serial_factory or serial.Serial
        self._command_delay = command_delay
        self._log = logger

    def can_open(self, uri: str) -> bool:
        if not uri.startswith(f"{SMS_SCHEME}:"):
            return False
        # Injected factories (tests, USB modems resolved elsewhere) skip the device check.
        if self._serial_factory is serial.Serial:
            return os.path.exists(self._port)
        return True

    def _send_at(self, modem, command: str) -> str:
        modem.write((command + "\r").encode())
        time.sleep(self._command_delay)
        return modem.read_all().decode(errors="ignore")

    def open(self, uri: str) -> bool:
        recipient, body = parse_sms_uri(uri)
        try:
            with self._serial_factory(self._port, self._baudrate, timeout=self._timeout) as modem:
                if "OK" not in self._send_at(modem, "AT"):
                    self._log(f"[MODEM] No response on {self._port}")
                    return False
                self._send_at(modem, "AT+CMGF=1")
                self._send_at(modem, f'AT+CMGS="{recipient}"')
                modem.write(body.encode("utf-8") + b"\x1a")
                time.sleep(self._command_delay)
                reply = modem.read_all().decode(errors="ignore")
        except (OSError, SerialException) as e:
            self._log(f"[MODEM] Send failed: {e}")
            return False

        ok = "ERROR" not in reply
        self._log(f"[MODEM] SMS to {recipient} {'sent' if ok else 'rejected'}")
        return ok


class MqttMessageSender:
    """Relays the message to a paired phone over MQTT."""

    def __init__(self, gateway, logger: Callable[[str], None] = print):
        self._gateway = gateway
        self._log = logger

    def can_open(self, uri: str) -> bool:
        return uri.startswith(f"{SMS_SCHEME}:") and self._gateway.connected

    def open(self, uri: str) -> bool:
        recipient, body = parse_sms_uri(uri)
        payload = {"ts": int(time.time() * 1000), "uri": uri, "to": recipient, "body": body}
        return self._gateway.publish("outbox/sms", json.dumps(payload))


def compose_emergency_message(
    sender,
    contact: str,
    body: str = config.EMERGENCY_MESSAGE,
    logger: Callable[[str], None] = print,
) -> bool:
    uri = build_sms_uri(contact, body)
    if not sender.can_open(uri):
        raise CapabilityDenied(f"cannot open {uri}")
    try:
        opened = sender.open(uri)
    except CapabilityDenied:
        raise
    except Exception as e:
        raise CapabilityDenied(f"opening {uri} failed: {e}") from e
    if not opened:
        raise CapabilityDenied(f"sender refused {uri}")
    logger(f"[SMS] Emergency message opened for {contact}")
    return True
