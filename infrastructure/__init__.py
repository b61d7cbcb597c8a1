"""Infrastructure helpers (Redis broadcast, expiry timers, GPIO, audio).

Expose a small public surface used by app startup in `main.py`.
"""
from .redis import RedisClient
from .broadcast import Broadcaster, RedisBroadcaster, LogBroadcaster, create_broadcaster
from .timers import ExpiryTimer
from .gpio import GpioController
from .audio import SoundPlayer

__all__ = [
    "RedisClient",
    "Broadcaster",
    "RedisBroadcaster",
    "LogBroadcaster",
    "create_broadcaster",
    "ExpiryTimer",
    "GpioController",
    "SoundPlayer",
]
