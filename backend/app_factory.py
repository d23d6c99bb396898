"""Application factory and context for the Creature Arena API.

All runtime state lives in an ``AppContext`` instead of module globals, so
each test can build its own app with its own world.

Usage:
------
    # For production (settings from the environment)
    app = create_app()

    # For testing (custom world, runner not started automatically)
    context = AppContext(config=SimulationConfig(seed=1, learning_enabled=False))
    app = create_app(context=context, autostart=False)
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arena.config.server import DEFAULT_API_PORT
from arena.config.simulation_config import SimulationConfig, load_config_from_env
from backend.broadcast import Broadcaster, EventBridge
from backend.logging_config import configure_logging
from backend.models import SimulationStatus
from backend.observers import ObserverRegistry
from backend.simulation_runner import SimulationRunner


@dataclass
class AppContext:
    """Runtime context holding all application state."""

    # Configuration
    config: SimulationConfig = field(default_factory=load_config_from_env)
    api_port: int = field(
        default_factory=lambda: int(os.getenv("ARENA_API_PORT", str(DEFAULT_API_PORT)))
    )
    production_mode: bool = field(
        default_factory=lambda: os.getenv("PRODUCTION", "false").lower() == "true"
    )
    allowed_origins: list = field(
        default_factory=lambda: os.getenv("ALLOWED_ORIGINS", "*").split(",")
    )

    # Broadcast pipeline
    observers: ObserverRegistry = field(default_factory=ObserverRegistry)
    bridge: EventBridge = field(default_factory=EventBridge)

    # Runtime state (initialized lazily or during lifespan)
    runner: Optional[SimulationRunner] = None
    broadcaster: Optional[Broadcaster] = None

    server_start_time: float = field(default_factory=time.time)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("backend"))

    def ensure_runner(self) -> SimulationRunner:
        if self.runner is None:
            self.runner = SimulationRunner(self.config, event_sink=self.bridge.publish)
        return self.runner

    def get_status(self) -> SimulationStatus:
        status = self.ensure_runner().status()
        return SimulationStatus(**status, observers=len(self.observers))

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self.server_start_time


def create_app(
    *,
    context: Optional[AppContext] = None,
    autostart: bool = True,
    production_mode: Optional[bool] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Pre-configured AppContext (for testing). If None, creates a new one.
        autostart: Start ticking as soon as the app starts up.
        production_mode: Override production mode (default: from PRODUCTION env var)

    Returns:
        Configured FastAPI application with context attached as app.state.context
    """
    logger = configure_logging()

    if context is None:
        context = AppContext()
    if production_mode is not None:
        context.production_mode = production_mode
    context.logger = logger

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the broadcaster and the runner; shut both down on exit."""
        ctx = app.state.context
        try:
            ctx.bridge.bind(asyncio.get_running_loop())
            runner = ctx.ensure_runner()
            ctx.broadcaster = Broadcaster(ctx.bridge, ctx.observers)
            ctx.broadcaster.start()
            if autostart:
                runner.start()
            ctx.logger.info(
                "LIFESPAN: Startup complete (population=%d, tick=%.1fms, seed=%s)",
                ctx.config.initial_population,
                ctx.config.tick_period_ms,
                ctx.config.seed,
            )
            yield
            ctx.logger.info("LIFESPAN: Received shutdown signal")
        except Exception as e:
            ctx.logger.error(f"Exception in lifespan startup: {e}", exc_info=True)
            raise
        finally:
            if ctx.broadcaster is not None:
                await ctx.broadcaster.stop()
            if ctx.runner is not None:
                await asyncio.to_thread(ctx.runner.close)

    app = FastAPI(
        title="Creature Arena API",
        lifespan=lifespan,
        docs_url=None if context.production_mode else "/docs",
        redoc_url=None if context.production_mode else "/redoc",
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=context.allowed_origins if context.production_mode else ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    _setup_routers(app, context)
    return app


def _setup_routers(app: FastAPI, ctx: AppContext) -> None:
    """Setup and include all API routers."""
    from backend.routers import simulation, websocket

    app.include_router(simulation.setup_router(ctx))
    app.include_router(websocket.setup_router(ctx))
    ctx.logger.debug("API routers configured")
