"""Creature biology constants.

Sizes, energy budgets and the thresholds that drive growth, starvation and
reproduction. Energy drain against food intake decides whether a policy
keeps its creature alive long enough to reproduce.
"""

# =============================================================================
# SIZE
# =============================================================================
INITIAL_SIZE = 11.0
MIN_SIZE = 5.0  # A creature at or below this size dies
MATURITY_SIZE = 37.5  # Splits into offspring at or above this size
OFFSPRING_SIZE_FRACTION = 0.9  # Share of the parent's size passed to the litter
PARENT_SIZE_DIVISOR = 3.0  # Parent keeps size / 3 after splitting

# =============================================================================
# ENERGY & METABOLISM
# =============================================================================
INITIAL_ENERGY = 100.0
ENERGY_DRAIN_PER_SPEED = 0.08  # Energy lost per unit of speed per tick
STARVATION_TICKS = 1000  # Ticks without a meal before shrinking
STARVATION_SIZE_LOSS = 1.0

# =============================================================================
# MOVEMENT
# =============================================================================
SPEED_MULTIPLIER = 1.0
FORCE_SMOOTHING = 0.2  # Share of a chosen force that reaches the acceleration

# =============================================================================
# SENSING
# =============================================================================
# Olfactory range grows linearly with size between these bounds.
OLFACTORY_SIZE_CEILING = 100.0
OLFACTORY_MIN_RANGE = 75.0
OLFACTORY_MAX_RANGE = 250.0

# =============================================================================
# PREDATION
# =============================================================================
PREY_SIZE_TRANSFER = 0.5  # Predator gains half the victim's size
PREY_ENERGY_PER_SIZE = 50.0  # Predator gains victim size * 50 energy

# =============================================================================
# GENETICS
# =============================================================================
INITIAL_COLORS = ("red", "blue", "yellow", "green")
COLOR_MUTATION_FACTOR = 1.0  # Mutation probability = min(factor * share, cap)
COLOR_MUTATION_CAP = 0.9
MUTATION_WINDOW_SIZE = 10  # Offspring sharing one mutant color before a new draw
POLICY_MUTATION_RATE_MIN = 0.01
POLICY_MUTATION_RATE_MAX = 0.06

# =============================================================================
# FITNESS
# =============================================================================
FITNESS_AGE_WEIGHT = 0.01
FITNESS_FOOD_WEIGHT = 1.0
FITNESS_PREY_MULTIPLIER = 2.0  # Prey counts double relative to food
FITNESS_REPRODUCTION_WEIGHT = 3.0
FITNESS_SCALE_BY_ENERGY = False
