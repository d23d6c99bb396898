"""HTTP endpoints for health and simulation control."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter

from backend import __version__
from backend.models import CommandResponse, HealthResponse, SimulationStatus

if TYPE_CHECKING:
    from backend.app_factory import AppContext

logger = logging.getLogger(__name__)


def setup_router(ctx: "AppContext") -> APIRouter:
    """Create the simulation router bound to an app context.

    Endpoints:
        GET  /health
        GET  /api/simulation
        POST /api/simulation/start
        POST /api/simulation/stop
    """
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__)

    @router.get("/api/simulation", response_model=SimulationStatus)
    async def get_simulation() -> SimulationStatus:
        return ctx.get_status()

    @router.post("/api/simulation/start", response_model=CommandResponse)
    async def start_simulation() -> CommandResponse:
        runner = ctx.ensure_runner()
        runner.start()
        logger.info("Start requested over HTTP")
        return CommandResponse(success=True, command="start", running=True)

    @router.post("/api/simulation/stop", response_model=CommandResponse)
    async def stop_simulation() -> CommandResponse:
        runner = ctx.ensure_runner()
        runner.stop()
        logger.info("Stop requested over HTTP")
        return CommandResponse(success=True, command="stop", running=False)

    return router
