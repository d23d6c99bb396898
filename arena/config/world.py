"""Arena and tick configuration constants."""

# Arena dimensions in world units (must match the observer canvas)
ARENA_WIDTH = 1900
ARENA_HEIGHT = 800

# Fixed tick period of the stepper, in milliseconds
TICK_PERIOD_MS = 15

# Multiplier applied to creature top speed (ticks are shorter than a 60 FPS frame)
FRAME_RATE_MULTIPLIER = 1.5

# Creatures and food seeded at the start of every epoch
INITIAL_POPULATION = 20
INITIAL_FOOD = 50

# Build a snapshot every N ticks (1 = every tick)
SNAPSHOT_INTERVAL = 1

# =============================================================================
# BORDER DWELLING
# =============================================================================
# Reflecting borders alone let a policy park a creature on a wall forever.
# These timeouts turn wall hugging, corner camping and standing still into
# deaths so the population keeps moving through the arena.
CORNER_THRESHOLD = 50  # A creature within 50 units of two walls is "in a corner"
CORNER_TIMEOUT_TICKS = 180
IMMOBILE_DISTANCE = 0.5  # Moving less than this per tick counts as standing still
IMMOBILE_TIMEOUT_TICKS = 180
BORDER_TIMEOUT_TICKS = 600
