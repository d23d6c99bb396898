"""API response models."""

from typing import Dict

from pydantic import BaseModel


class SimulationStatus(BaseModel):
    """Current state of the simulation runner and world."""

    running: bool
    tick: int
    generation: int
    population: int
    food: int
    season: str
    total_days: int
    best_score: float
    historical_best_score: float
    longest_lifespan: int = 0
    deaths_by_cause: Dict[str, int] = {}
    transient_faults: int = 0
    feedback_skipped: int = 0
    ticks_per_second: float = 0.0
    observers: int = 0


class CommandResponse(BaseModel):
    """Result of a control command."""

    success: bool
    command: str
    running: bool


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
