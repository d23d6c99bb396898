"""Entity identifiers.

Identifiers are UUID4 strings, but the random bits come from the world rng
rather than the OS so a seeded run hands out the same ids every time.
"""

import random
import uuid


def new_entity_id(rng: random.Random) -> str:
    """Return a fresh UUID4 string drawn from ``rng``."""
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))
