"""Season cycle and world clock.

Seasons rotate every ``SEASON_LENGTH_TICKS`` ticks and set the pace of food
respawn and the size of litters. The clock also derives the in-world day
count shown to observers.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

from arena.config.seasons import (
    DAYS_PER_YEAR,
    FOOD_RESPAWN_TICKS,
    OFFSPRING_COUNT,
    SEASON_LENGTH_TICKS,
    TICKS_PER_YEAR,
)


class Season(Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"

    def next(self) -> "Season":
        order = list(Season)
        return order[(order.index(self) + 1) % len(order)]

    @property
    def food_respawn_ticks(self) -> int:
        return FOOD_RESPAWN_TICKS[self.value]

    def offspring_count(self, rng: random.Random) -> int:
        """Litter size for a reproduction happening in this season."""
        choices = OFFSPRING_COUNT[self.value]
        if len(choices) == 1:
            return choices[0]
        return rng.choice(choices)


@dataclass
class WorldClock:
    """Tick counters that reset with every epoch.

    Attributes:
        time_counter: Ticks elapsed in the current epoch.
        food_respawn_counter: Ticks since the last food respawn.
        season_counter: Ticks since the last season change.
        season: Current season.
    """

    time_counter: int = 0
    food_respawn_counter: int = 0
    season_counter: int = 0
    season: Season = Season.SPRING
    season_length: int = SEASON_LENGTH_TICKS

    def advance(self) -> bool:
        """Advance one tick.

        Returns:
            True when a food item is due to respawn on this tick
        """
        self.time_counter += 1

        self.food_respawn_counter += 1
        respawn_due = self.food_respawn_counter >= self.season.food_respawn_ticks
        if respawn_due:
            self.food_respawn_counter = 0

        self.season_counter += 1
        if self.season_counter >= self.season_length:
            self.season_counter = 0
            self.season = self.season.next()

        return respawn_due

    @property
    def total_days(self) -> int:
        return int(self.time_counter / TICKS_PER_YEAR * DAYS_PER_YEAR)

    def reset(self) -> None:
        self.time_counter = 0
        self.food_respawn_counter = 0
        self.season_counter = 0
        self.season = Season.SPRING
