"""Food physics and nutrition constants."""

FOOD_LIFETIME_TICKS = 3600  # One minute at 60 ticks per second

# Food drifts in a slow random walk so it does not pile up in one place.
FOOD_INITIAL_SPEED = 0.125  # Initial velocity per axis is uniform in +/- this
FOOD_DRIFT_JITTER = 0.0125  # Per-tick velocity jitter per axis, uniform in +/- this
FOOD_MAX_SPEED = 0.125

GROWTH_FOOD_CHANCE = 0.5

# Nutrition per kind: (size gain, energy gain)
NORMAL_FOOD_SIZE_GAIN = 2.0
NORMAL_FOOD_ENERGY_GAIN = 100.0
GROWTH_FOOD_SIZE_GAIN = 4.0
GROWTH_FOOD_ENERGY_GAIN = 200.0
