"""
Sound effects for the claw cabinet.

Plays short MP3 cues through `ffplay` on the Pi's PulseAudio server.
Only one cue plays at a time; move cues are rate limited.
"""
import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Optional

import config
from services.exceptions import DriverError
from utils.time import now_ms

logger = logging.getLogger(__name__)

SOUND_FILES = {
    "move": "move.mp3",
    "grab": "grab.mp3",
}

MOVE_COOLDOWN_MS = 300


class SoundPlayer:
    """Fire-and-forget ffplay wrapper."""

    def __init__(
        self,
        sounds_dir: Path = config.SOUNDS_DIR,
        *,
        executable: str = config.FFPLAY_EXECUTABLE,
        move_cooldown_ms: int = MOVE_COOLDOWN_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self.sounds_dir = Path(sounds_dir)
        self.executable = executable
        self.move_cooldown_ms = move_cooldown_ms
        self._clock = clock
        self._last_move_ms: Optional[int] = None
        self._current: Optional[asyncio.subprocess.Process] = None
        self._watchers: set[asyncio.Task] = set()
        self._reported_missing: set[str] = set()

    def missing_cues(self) -> list[str]:
        """Cue names whose sound file is not present in `sounds_dir`."""
        return [kind for kind, name in SOUND_FILES.items() if not (self.sounds_dir / name).exists()]

    def _env(self) -> dict[str, str]:
        env = os.environ.copy()
        env.setdefault("PULSE_SERVER", "unix:/run/user/1000/pulse/native")
        env.setdefault("XDG_RUNTIME_DIR", "/run/user/1000")
        env.setdefault("HOME", "/home/pi")
        return env

    def _stop_current(self) -> None:
        proc = self._current
        self._current = None
        if proc is not None and proc.returncode is None:
            try:
                proc.terminate()
            except ProcessLookupError:
                pass

    async def _watch(self, kind: str, proc: asyncio.subprocess.Process) -> None:
        code = await proc.wait()
        if self._current is proc:
            self._current = None
        if code == 0:
            logger.debug(f"[AUDIO] played {kind}")
        elif code > 0:
            logger.warning(f"[AUDIO] ffplay exited with code {code} for {kind}")

    async def play(self, kind: str) -> bool:
        """Start the cue for `kind`. Returns False when skipped.

        Raises:
            DriverError: If ffplay is missing or cannot be started.
        """
        name = SOUND_FILES.get(kind)
        path = self.sounds_dir / name if name else None
        if path is None or not path.exists():
            if kind not in self._reported_missing:
                self._reported_missing.add(kind)
                logger.warning(f"[AUDIO] missing sound file for '{kind}': {path}; cue disabled")
            return False

        if kind == "move":
            now = self._clock()
            if self._last_move_ms is not None and now - self._last_move_ms < self.move_cooldown_ms:
                return False
            self._last_move_ms = now

        ffplay = shutil.which(self.executable)
        if not ffplay:
            raise DriverError(f"{self.executable} executable not found; install ffmpeg or set CLAW_FFPLAY")

        self._stop_current()
        try:
            proc = await asyncio.create_subprocess_exec(
                ffplay, "-nodisp", "-loglevel", "quiet", "-autoexit", str(path.resolve()),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
                env=self._env(),
            )
        except OSError as exc:
            raise DriverError(f"ffplay failed to start for {kind}: {exc}") from exc

        self._current = proc
        watcher = asyncio.create_task(self._watch(kind, proc))
        self._watchers.add(watcher)
        watcher.add_done_callback(self._watchers.discard)
        return True

    async def close(self) -> None:
        self._stop_current()
        for task in list(self._watchers):
            task.cancel()
