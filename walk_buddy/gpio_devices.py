# walk_buddy/gpio_devices.py

import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from walk_buddy import config
from walk_buddy.errors import HardwareUnavailable

# sound id -> (on seconds, off seconds)
ALARM_PATTERNS: Dict[int, Tuple[float, float]] = {
    1005: (0.25, 0.25),
    1304: (0.5, 0.1),
}


def _load_gpio():
    import RPi.GPIO as GPIO

    return GPIO


class GpioTorch:
    """LED torch on a GPIO pin. Only full level or off."""

    def __init__(self, pin: int, gpio=None, logger: Callable[[str], None] = print):
        self._pin = pin
        self._gpio = gpio
        self._log = logger
        self._ready = False

    def setup(self) -> None:
        try:
            if self._gpio is None:
                self._gpio = _load_gpio()
            self._gpio.setup(self._pin, self._gpio.OUT, initial=self._gpio.LOW)
            self._ready = True
        except (ImportError, RuntimeError) as e:
            self._ready = False
            self._log(f"[TORCH] No torch on pin {self._pin}: {e}")

    def available(self) -> bool:
        return self._ready

    def set(self, on: bool) -> None:
        if not self._ready:
            raise HardwareUnavailable(f"torch on pin {self._pin} is not set up")
        self._gpio.output(self._pin, self._gpio.HIGH if on else self._gpio.LOW)


class SimulatedTorch:
    def __init__(self, present: bool = True, logger: Callable[[str], None] = print):
        self._present = present
        self._log = logger
        self.levels: List[bool] = []

    def setup(self) -> None:
        pass

    def available(self) -> bool:
        return self._present

    def set(self, on: bool) -> None:
        if not self._present:
            raise HardwareUnavailable("simulated device has no torch")
        self.levels.append(on)

    @property
    def is_on(self) -> bool:
        return bool(self.levels and self.levels[-1])


class BuzzerAlarm:
    """Beeps a GPIO buzzer on a worker thread until stopped or capped."""

    def __init__(
        self,
        pin: int,
        gpio=None,
        max_seconds: float = config.ALARM_MAX_SECONDS,
        logger: Callable[[str], None] = print,
    ):
        self._pin = pin
        self._gpio = gpio
        self._max_seconds = max_seconds
        self._log = logger
        self._ready = False

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def setup(self) -> None:
        try:
            if self._gpio is None:
                self._gpio = _load_gpio()
            self._gpio.setup(self._pin, self._gpio.OUT, initial=self._gpio.LOW)
            self._ready = True
        except (ImportError, RuntimeError) as e:
            self._ready = False
            self._log(f"[ALARM] No buzzer on pin {self._pin}: {e}")

    @property
    def is_playing(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def play(self, sound_id: int) -> None:
        if not self._ready:
            raise HardwareUnavailable(f"buzzer on pin {self._pin} is not set up")
        if self.is_playing:
            return
        on_sec, off_sec = ALARM_PATTERNS.get(sound_id, ALARM_PATTERNS[config.ALARM_SOUND_ID])
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, args=(on_sec, off_sec), name="ALARM", daemon=True
        )
        self._thread.start()
        self._log(f"[ALARM] Playing sound {sound_id}")

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)
        self._thread = None

    def _set(self, on: bool) -> None:
        self._gpio.output(self._pin, self._gpio.HIGH if on else self._gpio.LOW)

    def _run(self, on_sec: float, off_sec: float) -> None:
        start = time.time()
        try:
            while time.time() - start < self._max_seconds:
                self._set(True)
                if self._stop.wait(on_sec):
                    break
                self._set(False)
                if self._stop.wait(off_sec):
                    break
        finally:
            self._set(False)


class SimulatedAlarm:
    def __init__(self, logger: Callable[[str], None] = print):
        self._log = logger
        self.played: List[int] = []
        self.stops = 0
        self._playing = False

    def setup(self) -> None:
        pass

    @property
    def is_playing(self) -> bool:
        return self._playing

    def play(self, sound_id: int) -> None:
        self.played.append(sound_id)
        self._playing = True
        self._log(f"[ALARM] (sim) Playing sound {sound_id}")

    def stop(self) -> None:
        self.stops += 1
        self._playing = False
