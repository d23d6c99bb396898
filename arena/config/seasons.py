"""Season cycle constants.

Resource abundance follows the seasons: food respawns quickly in spring and
slowly in winter, and litters are larger when food is plentiful.
"""

SEASON_LENGTH_TICKS = 3600

# Ticks between food respawns in each season
FOOD_RESPAWN_TICKS = {
    "spring": 10,
    "summer": 50,
    "autumn": 100,
    "winter": 200,
}

# Offspring per reproduction; autumn alternates between its two values
OFFSPRING_COUNT = {
    "spring": (5,),
    "summer": (4,),
    "autumn": (4, 3),
    "winter": (3,),
}

# One in-world year is 14400 ticks
TICKS_PER_YEAR = 14400
DAYS_PER_YEAR = 365
