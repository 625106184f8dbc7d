"""
Dyeing plan identifier generation.

Format: ``DP`` + YYMMDD + 4 random base-36 characters, e.g. ``DP261019K3ZQ``.
Identifiers are only generated, never parsed.
"""

import random
import string
from datetime import datetime
from typing import Optional

from dyeplan.shared.timezone import get_plant_now

PLAN_ID_PREFIX = "DP"
SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 4


def generate_plan_id(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None
) -> str:
    """
    Generate a new plan identifier.

    Args:
        now: Clock reading to stamp the id with (defaults to plant time)
        rng: Random source for the suffix (defaults to the module RNG)

    Example:
        >>> generate_plan_id(datetime(2026, 1, 5), random.Random(1))[:8]
        'DP260105'
    """
    now = now or get_plant_now()
    rng = rng or random
    suffix = "".join(rng.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{PLAN_ID_PREFIX}{now.strftime('%y%m%d')}{suffix}"
