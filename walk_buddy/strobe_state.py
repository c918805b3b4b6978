# walk_buddy/strobe_state.py

import threading
from dataclasses import dataclass, field

from walk_buddy import config

BLACK = "black"
WHITE = "white"


def clamp_speed(seconds: float) -> float:
    return min(max(float(seconds), config.FLASH_SPEED_MIN_SEC), config.FLASH_SPEED_MAX_SEC)


@dataclass
class StrobeState:
    # Strobe
    is_flashing: bool = False
    flash_on: bool = False  # only meaningful while is_flashing
    flash_speed: float = config.FLASH_SPEED_DEFAULT_SEC
    display_flash_enabled: bool = config.DISPLAY_FLASH_DEFAULT

    # Panic
    panic_active: bool = False
    alarm_on: bool = False

    # Outputs (last commanded)
    torch_on: bool = False
    background: str = BLACK

    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def __post_init__(self) -> None:
        self.flash_speed = clamp_speed(self.flash_speed)

    def to_dict(self) -> dict:
        return {
            "is_flashing": self.is_flashing,
            "flash_on": self.flash_on if self.is_flashing else False,
            "flash_speed": round(self.flash_speed, 3),
            "display_flash_enabled": self.display_flash_enabled,
            "panic_active": self.panic_active,
            "alarm_on": self.alarm_on,
            "torch_on": self.torch_on,
            "background": self.background,
        }
