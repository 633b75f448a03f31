## Project: Megasena Predictor
## Purpose of File: Training Set Construction
## Description:
## Slides a fixed-size window over the full history. For every index i in [H, N) the example is
##   input  -> features of history[i-H:i]
##   output -> 60-length indicator vector of the draw at history[i]
## Example construction is independent per index and can run on a thread pool; inputs and
## outputs are always kept paired and ordered by i.

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from pipeline import HISTORY_WINDOW, NUMBER_RANGE, SUB_WINDOWS
from steps.features import extract_features, feature_length

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


@dataclass(frozen=True)
class TrainingSet:
    inputs: np.ndarray
    outputs: np.ndarray

    def __post_init__(self) -> None:
        if self.inputs.shape[0] != self.outputs.shape[0]:
            raise ValueError(
                f"inputs ({self.inputs.shape[0]}) and outputs ({self.outputs.shape[0]}) must pair up."
            )

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def input_size(self) -> int:
        return int(self.inputs.shape[1])

    @property
    def output_size(self) -> int:
        return int(self.outputs.shape[1])


def occurrence_vector(draw, number_range: int = NUMBER_RANGE) -> np.ndarray:
    """Indicator vector with 1.0 at each drawn number (1-based) and 0.0 elsewhere."""
    out = np.zeros(number_range, dtype=float)
    for n in draw:
        if not 1 <= n <= number_range:
            raise ValueError(f"Number {n} outside 1..{number_range}")
        out[n - 1] = 1.0
    return out


def _build_example(
    history: Sequence,
    i: int,
    history_window: int,
    sub_windows: Tuple[int, ...],
    number_range: int,
) -> Tuple[np.ndarray, np.ndarray]:
    window = history[i - history_window:i]
    features = extract_features(window, sub_windows, number_range)
    return features, occurrence_vector(history[i], number_range)


def build_training_set(
    history: Sequence,
    history_window: int = HISTORY_WINDOW,
    sub_windows: Iterable[int] = SUB_WINDOWS,
    number_range: int = NUMBER_RANGE,
    workers: Optional[int] = None,
) -> TrainingSet:
    """
    Build one (features -> occurrence) pair per index in [history_window, len(history)).

    When the history holds no more than `history_window` draws the returned set is empty and a
    warning is logged; callers must treat it as non-trainable.
    """
    sub_windows = tuple(sorted(int(w) for w in sub_windows))
    history = list(history)
    n_draws = len(history)
    width = feature_length(sub_windows, number_range)

    if n_draws <= history_window:
        logging.warning(
            f"Insufficient data: {n_draws} draws cannot fill a training window of {history_window}. "
            "No training examples produced."
        )
        return TrainingSet(
            inputs=np.zeros((0, width), dtype=float),
            outputs=np.zeros((0, number_range), dtype=float),
        )

    indices = range(history_window, n_draws)

    def build(i):
        return _build_example(history, i, history_window, sub_windows, number_range)

    if workers is not None and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            examples = list(executor.map(build, indices))
    else:
        examples = [build(i) for i in indices]

    inputs = np.vstack([features for features, _ in examples]).astype(float)
    outputs = np.vstack([labels for _, labels in examples]).astype(float)

    logging.info(f"Training set built: {len(examples)} examples, {width} features each.")
    return TrainingSet(inputs=inputs, outputs=outputs)
