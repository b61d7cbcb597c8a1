import os
from pathlib import Path


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


BASE_DIR = Path(__file__).parent

# Path to the SQLite database file used by stores. Can be overridden
# using the CLAW_DB_PATH environment variable.
DB_PATH = os.environ.get("CLAW_DB_PATH", str(BASE_DIR / "clawcore.sqlite3"))

# Object catalogs and sound files shipped with the service
DATA_DIR = Path(os.environ.get("CLAW_DATA_DIR", str(BASE_DIR / "data")))
FOOD_CATALOG_PATH = DATA_DIR / "food_bg_impact.json"
EXERCISE_CATALOG_PATH = DATA_DIR / "exercise_bg_effects.json"
SOUNDS_DIR = Path(os.environ.get("CLAW_SOUNDS_DIR", str(DATA_DIR / "sounds")))

# Broadcast: unset CLAW_REDIS_URL means notifications are only logged
REDIS_URL = os.environ.get("CLAW_REDIS_URL") or None
BROADCAST_CHANNEL = os.environ.get("CLAW_BROADCAST_CHANNEL", "joystick-channel")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CLAW_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# Turn arbitration
SESSION_SECONDS = int(os.environ.get("CLAW_SESSION_SECONDS", "30"))
EXPIRY_GRACE_MS = int(os.environ.get("CLAW_EXPIRY_GRACE_MS", "500"))
REQUIRE_ACTIVE_SESSION = _env_flag("CLAW_REQUIRE_ACTIVE_SESSION", "true")

# Hardware drivers (Raspberry Pi GPIO + ffplay audio)
HARDWARE_ENABLED = _env_flag("CLAW_HARDWARE_ENABLED", "true")
GPIO_CHIP = os.environ.get("CLAW_GPIO_CHIP", "gpiochip0")
GPIOSET_EXECUTABLE = os.environ.get("CLAW_GPIOSET", "gpioset")
FFPLAY_EXECUTABLE = os.environ.get("CLAW_FFPLAY", "ffplay")

LOG_LEVEL = os.environ.get("CLAW_LOG_LEVEL", "INFO").upper()
