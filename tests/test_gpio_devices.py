"""Tests for the GPIO torch and buzzer adapters."""

from __future__ import annotations

import pytest

from conftest import FakeGPIO
from walk_buddy.errors import HardwareUnavailable
from walk_buddy.gpio_devices import BuzzerAlarm, GpioTorch, SimulatedAlarm, SimulatedTorch


class TestGpioTorch:
    def test_setup_and_levels(self, fake_gpio) -> None:
        torch = GpioTorch(21, gpio=fake_gpio, logger=lambda _m: None)
        torch.setup()
        assert torch.available() is True
        assert fake_gpio.setups == [(21, "OUT", 0)]

        torch.set(True)
        torch.set(False)
        assert fake_gpio.outputs == [(21, 1), (21, 0)]

    def test_missing_hardware(self, log) -> None:
        torch = GpioTorch(21, gpio=FakeGPIO(fail_setup=True), logger=log.append)
        torch.setup()
        assert torch.available() is False
        assert any("No torch" in line for line in log)
        with pytest.raises(HardwareUnavailable):
            torch.set(True)

    def test_set_before_setup_raises(self, fake_gpio) -> None:
        with pytest.raises(HardwareUnavailable):
            GpioTorch(21, gpio=fake_gpio).set(True)


class TestBuzzerAlarm:
    def test_play_then_stop(self, fake_gpio) -> None:
        alarm = BuzzerAlarm(23, gpio=fake_gpio, logger=lambda _m: None)
        alarm.setup()
        alarm.play(1005)
        assert alarm.is_playing is True

        alarm.stop()
        assert alarm.is_playing is False
        assert fake_gpio.outputs[0] == (23, 1)
        assert fake_gpio.outputs[-1] == (23, 0)

    def test_play_is_idempotent(self, fake_gpio) -> None:
        alarm = BuzzerAlarm(23, gpio=fake_gpio, logger=lambda _m: None)
        alarm.setup()
        alarm.play(1005)
        first = alarm._thread
        alarm.play(1005)
        assert alarm._thread is first
        alarm.stop()

    def test_stops_itself_at_cap(self, fake_gpio) -> None:
        alarm = BuzzerAlarm(23, gpio=fake_gpio, max_seconds=0.0, logger=lambda _m: None)
        alarm.setup()
        alarm.play(1005)
        alarm._thread.join(timeout=1.0)
        assert alarm.is_playing is False
        assert fake_gpio.outputs == [(23, 0)]

    def test_missing_buzzer(self) -> None:
        alarm = BuzzerAlarm(23, gpio=FakeGPIO(fail_setup=True), logger=lambda _m: None)
        alarm.setup()
        with pytest.raises(HardwareUnavailable):
            alarm.play(1005)

    def test_stop_without_play_is_harmless(self, fake_gpio) -> None:
        alarm = BuzzerAlarm(23, gpio=fake_gpio, logger=lambda _m: None)
        alarm.setup()
        alarm.stop()
        assert alarm.is_playing is False


def test_simulated_devices() -> None:
    torch = SimulatedTorch(logger=lambda _m: None)
    torch.set(True)
    assert torch.is_on is True

    alarm = SimulatedAlarm(logger=lambda _m: None)
    alarm.play(1005)
    assert alarm.is_playing is True
    alarm.stop()
    assert alarm.is_playing is False
    assert alarm.played == [1005]
