"""GPIO output for the claw cabinet: direction LEDs and the sugar lamp.

Pins are driven by shelling out to libgpiod's `gpioset`, one call per level
change. Every public coroutine returns as soon as the first level is written;
the rest of a blink pattern runs as a background task.
"""
import asyncio
import logging
import shutil
from typing import Optional

import config
from services.exceptions import DriverError

logger = logging.getLogger(__name__)

PINS = {
    "up": 17,
    "down": 27,
    "left": 22,
    "right": 23,
    "grab": 24,
    "lamp": 25,
}

DIRECTION_PULSE_S = 0.2
GRAB_PULSES = 5
GRAB_PULSE_INTERVAL_S = 0.2
GRAB_PULSE_ON_S = 0.1
LAMP_BLINK_INTERVAL_S = 0.3
LAMP_BLINK_ON_S = 0.12


class GpioController:
    """Drives direction/grab LEDs and the blinking sugar lamp."""

    def __init__(
        self,
        chip: str = config.GPIO_CHIP,
        *,
        pins: Optional[dict[str, int]] = None,
        executable: str = config.GPIOSET_EXECUTABLE,
    ):
        self.chip = chip
        self.pins = dict(pins or PINS)
        self.executable = executable
        self._pattern_tasks: set[asyncio.Task] = set()
        self._lamp_task: Optional[asyncio.Task] = None
        self._lamp_lock = asyncio.Lock()

    def _gpioset(self) -> str:
        path = shutil.which(self.executable)
        if not path:
            raise DriverError(f"{self.executable} executable not found; install libgpiod tools or set CLAW_GPIOSET")
        return path

    async def write(self, pin: int, value: int) -> None:
        proc = await asyncio.create_subprocess_exec(
            self._gpioset(),
            self.chip,
            f"{pin}={value}",
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise DriverError(
                f"gpioset {self.chip} {pin}={value} failed ({proc.returncode}): {stderr.decode(errors='replace').strip()}"
            )

    async def reset(self, *, include_lamp: bool = False) -> None:
        """Drive pins low. The lamp keeps its own state unless asked."""
        for name, pin in self.pins.items():
            if name == "lamp" and not include_lamp:
                continue
            try:
                await self.write(pin, 0)
            except DriverError as exc:
                logger.warning(f"[GPIO] couldn't reset pin {pin}: {exc}")

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._pattern_tasks.add(task)
        task.add_done_callback(self._pattern_tasks.discard)
        return task

    async def _pulse(self, pin: int, on_s: float) -> None:
        await self.write(pin, 1)
        await asyncio.sleep(on_s)
        await self.write(pin, 0)

    async def _later_off(self, pin: int, delay_s: float) -> None:
        await asyncio.sleep(delay_s)
        try:
            await self.write(pin, 0)
        except DriverError as exc:
            logger.warning(f"[GPIO] couldn't clear pin {pin}: {exc}")

    async def _grab_pattern(self, pin: int) -> None:
        for _ in range(GRAB_PULSES - 1):
            await asyncio.sleep(GRAB_PULSE_INTERVAL_S)
            try:
                await self._pulse(pin, GRAB_PULSE_ON_S)
            except DriverError as exc:
                logger.warning(f"[GPIO] grab pulse failed: {exc}")
                return

    async def blink_direction(self, direction: str) -> None:
        """Flash the LED for a direction (or the grab pattern)."""
        pin = self.pins.get(direction)
        if pin is None or direction == "lamp":
            logger.debug(f"[GPIO] no pin for '{direction}'")
            return
        logger.info(f"[GPIO] blink {direction} (pin {pin})")
        await self.reset()
        await self.write(pin, 1)
        if direction == "grab":
            self._spawn(self._later_off(pin, GRAB_PULSE_ON_S))
            self._spawn(self._grab_pattern(pin))
        else:
            self._spawn(self._later_off(pin, DIRECTION_PULSE_S))

    async def _lamp_blink(self, pin: int) -> None:
        while True:
            try:
                await self._pulse(pin, LAMP_BLINK_ON_S)
            except DriverError as exc:
                logger.warning(f"[GPIO] lamp blink failed, stopping: {exc}")
                return
            await asyncio.sleep(LAMP_BLINK_INTERVAL_S - LAMP_BLINK_ON_S)

    async def set_lamp(self, on: bool) -> None:
        """Start (on) or stop (off) the blinking sugar lamp.

        Calls are applied one at a time in arrival order; the previous blink
        task is detached and cancelled before any pin is written.
        """
        pin = self.pins.get("lamp")
        if pin is None:
            return
        async with self._lamp_lock:
            task, self._lamp_task = self._lamp_task, None
            if task is not None:
                task.cancel()
                await self.write(pin, 0)
            if on:
                logger.info(f"[GPIO] sugar lamp on (pin {pin})")
                await self.write(pin, 1)
                self._lamp_task = asyncio.create_task(self._lamp_blink(pin))

    async def close(self) -> None:
        """Stop background patterns and drive every pin low."""
        if self._lamp_task is not None:
            self._lamp_task.cancel()
            self._lamp_task = None
        for task in list(self._pattern_tasks):
            task.cancel()
        await self.reset(include_lamp=True)
