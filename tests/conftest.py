"""Shared pytest fixtures."""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from walk_buddy.controller import StrobeController
from walk_buddy.gpio_devices import SimulatedAlarm, SimulatedTorch
from walk_buddy.scheduler import TaskHandle
from walk_buddy.settings_store import SettingsStore
from walk_buddy.sms import LoggingMessageSender


class FakeGPIO:
    """Records RPi.GPIO calls without touching hardware."""

    BCM = "BCM"
    OUT = "OUT"
    HIGH = 1
    LOW = 0

    def __init__(self, fail_setup: bool = False) -> None:
        self.fail_setup = fail_setup
        self.outputs: list[tuple[int, int]] = []
        self.setups: list[tuple[int, str, int]] = []

    def setup(self, pin: int, mode: str, initial: int = 0) -> None:
        if self.fail_setup:
            raise RuntimeError("No access to /dev/mem")
        self.setups.append((pin, mode, initial))

    def output(self, pin: int, value: int) -> None:
        self.outputs.append((pin, value))


class ManualScheduler:
    """Simulated-clock scheduler; time only moves through :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self._tasks: list = []

    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        handle = TaskHandle(interval)
        self._tasks.append([handle, callback, self.now + interval])
        return handle

    @property
    def active_handles(self) -> list:
        return [t[0] for t in self._tasks if t[0].active]

    def advance(self, seconds: float) -> None:
        end = self.now + seconds
        while True:
            due: Optional[list] = None
            for task in self._tasks:
                if task[0].active and task[2] <= end + 1e-9:
                    if due is None or task[2] < due[2]:
                        due = task
            if due is None:
                break
            self.now = due[2]
            due[2] += due[0].interval
            due[1]()
        self.now = end
        self._tasks = [t for t in self._tasks if t[0].active]


@pytest.fixture
def log():
    return []


@pytest.fixture
def fake_gpio():
    return FakeGPIO()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def settings(tmp_path, log):
    return SettingsStore(str(tmp_path / "settings.json"), logger=log.append)


@pytest.fixture
def torch(log):
    return SimulatedTorch(logger=log.append)


@pytest.fixture
def alarm(log):
    return SimulatedAlarm(logger=log.append)


@pytest.fixture
def sender(log):
    return LoggingMessageSender(logger=log.append)


@pytest.fixture
def controller(torch, alarm, sender, settings, scheduler, log):
    return StrobeController(torch, alarm, sender, settings, scheduler, logger=log.append)
