from __future__ import annotations

import asyncio

import pytest

from conftest import FakeClock
from infrastructure.audio import SoundPlayer
from infrastructure.gpio import GpioController
from services.exceptions import DriverError


def test_sound_player_skips_missing_files(tmp_path):
    async def scenario():
        player = SoundPlayer(tmp_path, executable="definitely-not-ffplay")
        return await player.play("move"), await player.play("unknown")

    assert asyncio.run(scenario()) == (False, False)


def test_sound_player_raises_when_ffplay_is_missing(tmp_path):
    (tmp_path / "grab.mp3").write_bytes(b"")

    async def scenario():
        player = SoundPlayer(tmp_path, executable="definitely-not-ffplay")
        with pytest.raises(DriverError):
            await player.play("grab")

    asyncio.run(scenario())


def test_move_sound_is_rate_limited(tmp_path):
    (tmp_path / "move.mp3").write_bytes(b"")
    clock = FakeClock()

    async def scenario():
        player = SoundPlayer(tmp_path, executable="definitely-not-ffplay", clock=clock)
        with pytest.raises(DriverError):
            await player.play("move")
        clock.advance(100)
        within_cooldown = await player.play("move")
        clock.advance(300)
        with pytest.raises(DriverError):
            await player.play("move")
        return within_cooldown

    assert asyncio.run(scenario()) is False


def test_gpio_write_raises_when_gpioset_is_missing():
    async def scenario():
        gpio = GpioController("gpiochip0", executable="definitely-not-gpioset")
        with pytest.raises(DriverError):
            await gpio.write(17, 1)
        with pytest.raises(DriverError):
            await gpio.blink_direction("up")
        # unknown names are ignored
        await gpio.blink_direction("sideways")
        await gpio.close()

    asyncio.run(scenario())


class PinLog(GpioController):
    """GpioController whose writes are recorded instead of shelling out."""

    def __init__(self, write_delay: float = 0.001):
        super().__init__("gpiochip0")
        self.write_delay = write_delay
        self.writes: list[tuple[int, int]] = []

    async def write(self, pin: int, value: int) -> None:
        await asyncio.sleep(self.write_delay)
        self.writes.append((pin, value))


def _fast_lamp(monkeypatch):
    import infrastructure.gpio as gpio_module

    monkeypatch.setattr(gpio_module, "LAMP_BLINK_ON_S", 0.002)
    monkeypatch.setattr(gpio_module, "LAMP_BLINK_INTERVAL_S", 0.005)


def test_overlapping_lamp_on_calls_leave_one_blinker(monkeypatch):
    _fast_lamp(monkeypatch)
    lamp_pin = PinLog().pins["lamp"]

    async def scenario():
        gpio = PinLog()
        await asyncio.gather(gpio.set_lamp(True), gpio.set_lamp(True))
        await asyncio.sleep(0.02)
        await gpio.set_lamp(False)
        settled = len(gpio.writes)
        await asyncio.sleep(0.05)
        return gpio, settled

    gpio, settled = asyncio.run(scenario())
    assert len(gpio.writes) == settled
    assert gpio.writes[-1] == (lamp_pin, 0)
    assert gpio._lamp_task is None


def test_lamp_calls_apply_in_arrival_order(monkeypatch):
    _fast_lamp(monkeypatch)

    async def scenario():
        gpio = PinLog(write_delay=0.01)
        await asyncio.gather(gpio.set_lamp(True), gpio.set_lamp(False))
        await asyncio.sleep(0.05)
        running = gpio._lamp_task
        await gpio.close()
        return running

    assert asyncio.run(scenario()) is None


def test_missing_cues_lists_absent_files(tmp_path):
    (tmp_path / "grab.mp3").write_bytes(b"")
    assert SoundPlayer(tmp_path).missing_cues() == ["move"]
    assert SoundPlayer(tmp_path / "nowhere").missing_cues() == ["move", "grab"]
