## Project: Megasena Predictor
## Purpose: Turn the network's per-number probabilities into one game
## Notes:
##   - Highest probabilities win; equal probabilities go to the lower number
##   - NaN outputs rank below every real value
##   - The pick is returned ascending

from typing import Tuple

import numpy as np

from pipeline import PICK_SIZE


def rank_numbers(prediction) -> Tuple[int, ...]:
    """All 1-based numbers ordered by probability descending, ties by number ascending."""
    values = np.asarray(prediction, dtype=float).ravel()
    values = np.where(np.isnan(values), -np.inf, values)
    # lexsort uses the last key as primary: -value first, then index.
    order = np.lexsort((np.arange(values.size), -values))
    return tuple(int(i) + 1 for i in order)


def select_numbers(prediction, pick_size: int = PICK_SIZE) -> Tuple[int, ...]:
    values = np.asarray(prediction, dtype=float).ravel()
    if values.size < pick_size:
        raise ValueError(f"Need at least {pick_size} probabilities, got {values.size}.")

    top = rank_numbers(values)[:pick_size]
    return tuple(sorted(top))
