from __future__ import annotations

import random
from typing import Final


# Width of the symmetric tie-break perturbation added to move scores.
NOISE_SPAN: Final = 15.0


def noise(rng: random.Random) -> float:
    """Uniform perturbation in ``[-NOISE_SPAN / 2, NOISE_SPAN / 2]``."""
    return (rng.random() - 0.5) * NOISE_SPAN
