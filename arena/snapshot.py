"""Read-only views of the world for observers.

A snapshot copies out the observable fields of every live entity so it can
be serialized after the tick without touching world state again. Policy
internals (weights, memory, exploration rate) never appear in it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Tuple

if TYPE_CHECKING:
    from arena.world import World

SNAPSHOT_TYPE = "snapshot"


@dataclass(frozen=True)
class CreatureView:
    id: str
    x: float
    y: float
    size: float
    color: str
    energy: float
    food_eaten: int
    prey_eaten: int
    age_counter: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pos": {"x": self.x, "y": self.y},
            "size": self.size,
            "color": self.color,
            "energy": self.energy,
            "foodEaten": self.food_eaten,
            "preyEaten": self.prey_eaten,
            "ageCounter": self.age_counter,
        }


@dataclass(frozen=True)
class FoodView:
    id: str
    x: float
    y: float
    kind: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "pos": {"x": self.x, "y": self.y}, "kind": self.kind}


@dataclass(frozen=True)
class WorldSnapshot:
    """Observable state of the world after one tick."""

    tick: int
    creatures: Tuple[CreatureView, ...]
    food: Tuple[FoodView, ...]
    season: str
    generation: int
    total_days: int
    best_score: float
    historical_best_score: float
    births: int = 0
    deaths: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": SNAPSHOT_TYPE,
            "tick": self.tick,
            "creatures": [c.to_dict() for c in self.creatures],
            "food": [f.to_dict() for f in self.food],
            "season": self.season,
            "generation": self.generation,
            "totalDays": self.total_days,
            "bestScore": self.best_score,
            "historicalBestScore": self.historical_best_score,
            "stats": {"births": self.births, "deaths": self.deaths},
        }


def build_snapshot(world: "World") -> WorldSnapshot:
    """Capture every live creature and available food item."""
    state = world.state
    creatures = tuple(
        CreatureView(
            id=c.id,
            x=c.pos.x,
            y=c.pos.y,
            size=c.size,
            color=c.color,
            energy=c.energy,
            food_eaten=c.food_eaten,
            prey_eaten=c.prey_eaten,
            age_counter=c.age_counter,
        )
        for c in state.creatures
        if c.alive
    )
    food = tuple(
        FoodView(id=f.id, x=f.pos.x, y=f.pos.y, kind=f.kind.value) for f in state.food if f.available
    )
    return WorldSnapshot(
        tick=state.tick,
        creatures=creatures,
        food=food,
        season=state.clock.season.value,
        generation=state.generation,
        total_days=state.clock.total_days,
        best_score=world.tracker.epoch_best_score,
        historical_best_score=world.tracker.historical_best_score,
        births=state.stats.births,
        deaths=state.stats.deaths,
    )
