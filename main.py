from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from infrastructure import ExpiryTimer, GpioController, SoundPlayer, create_broadcaster
from routes import events_router, game_router, queue_router, health_router
from services import GameState, SessionScheduler, WorldObjectGenerator
from stores import open_stores

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    *,
    db_path: Optional[str] = None,
    redis_url: Optional[str] = None,
    hardware_enabled: Optional[bool] = None,
    session_seconds: Optional[int] = None,
    require_active_session: Optional[bool] = None,
) -> FastAPI:
    """Build the app. Unset arguments fall back to `config`."""
    db_path = db_path or config.DB_PATH
    redis_url = redis_url if redis_url is not None else config.REDIS_URL
    hardware_enabled = config.HARDWARE_ENABLED if hardware_enabled is None else hardware_enabled
    session_seconds = config.SESSION_SECONDS if session_seconds is None else session_seconds
    require_active_session = (
        config.REQUIRE_ACTIVE_SESSION if require_active_session is None else require_active_session
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        round_store, scheduler_store = await open_stores(db_path)
        broadcaster = await create_broadcaster(redis_url, config.BROADCAST_CHANNEL)
        timer = ExpiryTimer()
        timer.start()

        gpio = audio = None
        if hardware_enabled:
            gpio = GpioController()
            audio = SoundPlayer()
            missing = audio.missing_cues()
            if missing:
                logger.warning(f"No sound files for {missing} in {audio.sounds_dir}; see data/sounds/README.md")
        else:
            logger.info("Hardware disabled; GPIO and audio are skipped")

        generator = WorldObjectGenerator.from_files(config.FOOD_CATALOG_PATH, config.EXERCISE_CATALOG_PATH)
        scheduler = SessionScheduler(
            scheduler_store,
            timer,
            broadcaster=broadcaster,
            duration_ms=session_seconds * 1000,
        )
        game = GameState(round_store, generator, broadcaster=broadcaster, gpio=gpio, audio=audio)

        await scheduler.load()
        await game.load()

        app.state.broadcaster = broadcaster
        app.state.scheduler = scheduler
        app.state.game = game
        app.state.require_active_session = require_active_session
        logger.info(f"Claw core ready (db={db_path}, session={session_seconds}s)")
        try:
            yield
        finally:
            timer.shutdown()
            if gpio is not None:
                await gpio.close()
            if audio is not None:
                await audio.close()
            await broadcaster.close()
            await round_store.close()
            await scheduler_store.close()
            logger.info("Claw core stopped")

    app = FastAPI(lifespan=lifespan)

    # --- Middleware ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["POST", "GET"],
        allow_headers=["*"],
    )

    # --- Register routes ---
    app.include_router(health_router)
    app.include_router(events_router)
    app.include_router(game_router)
    app.include_router(queue_router)

    return app


app = create_app()
