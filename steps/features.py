## Project: Megasena Predictor
## Purpose of File: Multi-Horizon Feature Extraction
## Description:
## Turns a most-recent-first window of draws into one feature vector. For every sub-window size
## two blocks of length number_range are produced:
##   - frequency: occurrences of each number / draws in the sub-window
##   - last occurrence: draws since the number last appeared / draws in the sub-window
##     (0.0 = in the most recent draw, 1.0 = not seen in the sub-window)
## Blocks are concatenated in ascending sub-window order.

import logging
from concurrent.futures import Executor
from functools import partial
from typing import Iterable, Optional, Sequence

import numpy as np

from pipeline import NUMBER_RANGE, SUB_WINDOWS, EmptyWindowError

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def window_matrix(window: Sequence, number_range: int = NUMBER_RANGE) -> np.ndarray:
    """
    Stack a window of draws into an int matrix of shape (draws, 6).

    Accepts DrawRecord objects or plain integer sequences. Raises EmptyWindowError for an
    empty window and ValueError for numbers outside 1..number_range.
    """
    if len(window) == 0:
        raise EmptyWindowError("Cannot compute statistics over an empty window.")

    matrix = np.asarray([tuple(draw) for draw in window], dtype=int)
    if matrix.ndim != 2:
        raise ValueError(f"Window must be a list of draws, got shape {matrix.shape}")

    if matrix.min() < 1 or matrix.max() > number_range:
        bad = sorted(set(matrix[(matrix < 1) | (matrix > number_range)].tolist()))
        raise ValueError(f"Numbers outside 1..{number_range} in window: {bad}")
    return matrix


def calculate_frequency(window: Sequence, number_range: int = NUMBER_RANGE) -> np.ndarray:
    matrix = window_matrix(window, number_range)
    counts = np.bincount(matrix.ravel() - 1, minlength=number_range).astype(float)
    return counts / float(matrix.shape[0])


def calculate_last_occurrence(window: Sequence, number_range: int = NUMBER_RANGE) -> np.ndarray:
    matrix = window_matrix(window, number_range)
    n_draws = matrix.shape[0]

    last_occ = np.full(number_range, float(n_draws))
    # Walk oldest -> newest so the most recent appearance is written last.
    for i in range(n_draws - 1, -1, -1):
        last_occ[matrix[i] - 1] = float(i)

    return last_occ / float(n_draws)


def _sub_window_features(window: Sequence, size: int, number_range: int) -> np.ndarray:
    partial_window = window[:min(size, len(window))]
    freq = calculate_frequency(partial_window, number_range)
    last_occ = calculate_last_occurrence(partial_window, number_range)
    return np.concatenate((freq, last_occ))


def feature_length(sub_windows: Iterable[int] = SUB_WINDOWS, number_range: int = NUMBER_RANGE) -> int:
    return 2 * number_range * len(tuple(sub_windows))


def extract_features(
    window: Sequence,
    sub_windows: Iterable[int] = SUB_WINDOWS,
    number_range: int = NUMBER_RANGE,
    executor: Optional[Executor] = None,
) -> np.ndarray:
    """
    Build the multi-window feature vector for `window` (most recent draw first).

    Each sub-window is independent, so they may be computed on `executor`; results are merged
    in ascending sub-window order regardless of completion order.
    """
    if len(window) == 0:
        raise EmptyWindowError("Cannot extract features from an empty window.")

    sizes = sorted(int(w) for w in sub_windows)
    if not sizes or sizes[0] < 1:
        raise ValueError(f"Sub-window sizes must be positive integers, got {sizes}")

    window = list(window)
    compute = partial(_sub_window_features, window, number_range=number_range)

    if executor is not None:
        blocks = list(executor.map(compute, sizes))
    else:
        blocks = [compute(size) for size in sizes]

    return np.concatenate(blocks).astype(float)
