"""Entity types living in the arena."""

from arena.entities.creature import Creature, DeathCause
from arena.entities.food import Food, FoodKind
from arena.entities.ids import new_entity_id

__all__ = ["Creature", "DeathCause", "Food", "FoodKind", "new_entity_id"]
