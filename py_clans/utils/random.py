"""
Random number generation utilities.

Every generation step takes an explicit numpy ``Generator``. There is no
module-level random state; pass the same generator from terrain
generation into placement to get a reproducible world from one seed.
"""

from typing import Optional, Union

import numpy as np


def make_rng(seed: Optional[Union[int, np.random.Generator]] = None) -> np.random.Generator:
    """
    Create (or pass through) a random stream.

    Args:
        seed: Integer seed, an existing Generator, or None for OS entropy

    Returns:
        numpy Generator owned by the caller
    """
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)
