# walk_buddy/controller.py

import math
import time
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from walk_buddy import config
from walk_buddy.errors import CapabilityDenied, HardwareUnavailable, InvalidInput
from walk_buddy.scheduler import TaskHandle
from walk_buddy.sms import compose_emergency_message
from walk_buddy.strobe_state import BLACK, WHITE, StrobeState, clamp_speed


def now_ms() -> int:
    return int(time.time() * 1000)


def _parse_speed(value) -> float:
    if isinstance(value, bool):
        raise InvalidInput(f"speed must be a number, got {value!r}")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"speed must be a number, got {value!r}")
    if math.isnan(seconds):
        raise InvalidInput("speed must be a number, got nan")
    return clamp_speed(seconds)


class StrobeController:
    """Owns the strobe/panic state and drives torch, alarm and messaging.

    Every public operation is safe to call from the UI, the MQTT thread or the
    timer thread. Device failures are logged and recorded as notices; nothing
    here raises to the caller.
    """

    def __init__(
        self,
        torch,
        alarm,
        sender,
        settings,
        scheduler,
        state: Optional[StrobeState] = None,
        logger: Callable[[str], None] = print,
    ):
        self._torch = torch
        self._alarm = alarm
        self._sender = sender
        self._settings = settings
        self._scheduler = scheduler
        self.state = state or StrobeState()
        self._log = logger

        self._timer: Optional[TaskHandle] = None
        self._timer_token = 0
        self._notices: Deque[Dict] = deque(maxlen=config.MAX_NOTICES)
        self._torch_missing_reported = False

    # ---------------- Notices ----------------
    def _notice(self, kind: str, message: str) -> None:
        self._log(f"[STROBE] {kind}: {message}")
        self._notices.append({"ts": now_ms(), "kind": kind, "message": message})

    @property
    def notices(self) -> List[Dict]:
        with self.state.lock:
            return list(self._notices)

    def snapshot(self) -> Dict:
        with self.state.lock:
            # The buzzer worker ends on its own at ALARM_MAX_SECONDS.
            self.state.alarm_on = bool(self._alarm.is_playing)
            data = self.state.to_dict()
            data["notices"] = list(self._notices)
        return data

    # ---------------- Timer ----------------
    def _start_timer(self) -> None:
        self._cancel_timer()
        self._timer_token += 1
        token = self._timer_token
        self._timer = self._scheduler.call_every(
            self.state.flash_speed, lambda: self._on_timer(token)
        )

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._timer_token += 1

    def _on_timer(self, token: int) -> None:
        with self.state.lock:
            if token != self._timer_token:
                return
            self.on_tick()

    @property
    def timer(self) -> Optional[TaskHandle]:
        return self._timer

    # ---------------- Outputs ----------------
    def _report_torch_missing(self, reason: str) -> None:
        if not self._torch_missing_reported:
            self._torch_missing_reported = True
            self._notice("HardwareUnavailable", f"Torch not available ({reason})")

    def _set_torch(self, on: bool) -> None:
        if not self._torch.available():
            self._report_torch_missing("no torch on this device")
            return
        try:
            self._torch.set(on)
        except HardwareUnavailable as e:
            self._report_torch_missing(str(e))
            return
        self.state.torch_on = on

    def _stop_flashing(self) -> None:
        self._cancel_timer()
        self.state.is_flashing = False
        self.state.flash_on = False
        self._set_torch(False)
        self.state.background = BLACK

    # ---------------- Operations ----------------
    def toggle_flash(self) -> bool:
        with self.state.lock:
            if self.state.is_flashing:
                self._stop_flashing()
            else:
                self.state.is_flashing = True
                self._start_timer()
            self._log(f"[STROBE] Flashing {'ON' if self.state.is_flashing else 'OFF'}")
            return self.state.is_flashing

    def set_flash_speed(self, seconds) -> float:
        with self.state.lock:
            try:
                speed = _parse_speed(seconds)
            except InvalidInput as e:
                self._log(f"[STROBE] Ignoring speed: {e}")
                return self.state.flash_speed

            self.state.flash_speed = speed
            if self.state.is_flashing:
                self._start_timer()
            return speed

    def on_tick(self) -> None:
        with self.state.lock:
            if not self.state.is_flashing:
                return
            self.state.flash_on = not self.state.flash_on
            self._set_torch(self.state.flash_on)
            if self.state.display_flash_enabled:
                self.state.background = WHITE if self.state.flash_on else BLACK

    def set_display_flash_enabled(self, enabled: bool) -> None:
        with self.state.lock:
            self.state.display_flash_enabled = bool(enabled)
            if not self.state.display_flash_enabled:
                self.state.background = BLACK

    def toggle_panic_mode(self) -> bool:
        with self.state.lock:
            self.state.panic_active = not self.state.panic_active
            active = self.state.panic_active

            if active:
                self._log("[STROBE] Panic mode ON")
                if not self.state.is_flashing:
                    self.state.is_flashing = True
                    self._start_timer()
                self._play_alarm()
            else:
                self._log("[STROBE] Panic mode OFF")
                self._stop_flashing()
                self._stop_alarm()

        # Outside the lock; modem sends block for seconds.
        if active:
            self._send_emergency_message()
        return active

    def _play_alarm(self) -> None:
        try:
            self._alarm.play(config.ALARM_SOUND_ID)
            self.state.alarm_on = True
        except HardwareUnavailable as e:
            self._notice("HardwareUnavailable", f"Alarm not available ({e})")

    def _stop_alarm(self) -> None:
        self._alarm.stop()
        self.state.alarm_on = False

    def _send_emergency_message(self) -> None:
        contact = self._settings.get_contact()
        try:
            compose_emergency_message(self._sender, contact, logger=self._log)
        except CapabilityDenied as e:
            self._notice("CapabilityDenied", f"Emergency message not sent ({e})")

    def shutdown(self) -> None:
        with self.state.lock:
            self.state.panic_active = False
            self._stop_flashing()
            self._stop_alarm()
