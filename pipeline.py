## Project: Megasena Predictor
## Purpose: Core Constants, Predictor Configuration and Error Taxonomy
## Description:
##   - Holds the default parameters for every prediction stage
##   - PredictorConfig bundles them into one validated, immutable object

import os
import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple

NUMBER_RANGE = 60
PICK_SIZE = 6

HISTORY_WINDOW = 100
SUB_WINDOWS = (10, 20, 50, 100)

MAX_EPOCHS = 30000
STAGNATION_CAP = 500
MIN_ERROR = 1e-5
LOG_EVERY = 100

OPTIMAL_DEEPNESS = 50
LEGACY_MAX_ITERATIONS = 20
LEGACY_ERROR_THRESHOLD = 0.001
LEGACY_PASS_RATE = 0.9
LEGACY_MAX_CYCLES = 1000

HIDDEN_ACTIVATIONS = ("relu", "tanh")

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")


# ============================================================
# Errors
# ============================================================
class PredictorError(Exception):
    """Base class for every error raised by the prediction core."""


class InsufficientDataError(PredictorError):
    """History is too short for a stage that has no degraded mode."""


class EmptyWindowError(PredictorError, ValueError):
    """A statistic was asked to summarise zero draws."""


class LegacyCycleLimitError(PredictorError):
    """The legacy train/validate cycle did not accept within its cap."""


class TrainingCancelledError(PredictorError):
    """Cancellation was requested while a predictor was still running."""


# ============================================================
# Configuration
# ============================================================
@dataclass(frozen=True)
class PredictorConfig:
    number_range: int = NUMBER_RANGE
    pick_size: int = PICK_SIZE

    history_window: int = HISTORY_WINDOW
    sub_windows: Tuple[int, ...] = SUB_WINDOWS

    max_epochs: int = MAX_EPOCHS
    stagnation_cap: int = STAGNATION_CAP
    min_error: float = MIN_ERROR
    hidden_activation: str = "relu"
    log_every: int = LOG_EVERY

    deepness: int = OPTIMAL_DEEPNESS
    legacy_max_iterations: int = LEGACY_MAX_ITERATIONS
    legacy_error_threshold: float = LEGACY_ERROR_THRESHOLD
    legacy_pass_rate: float = LEGACY_PASS_RATE
    legacy_max_cycles: int = LEGACY_MAX_CYCLES

    workers: Optional[int] = None
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.number_range < self.pick_size or self.pick_size < 1:
            raise ValueError(
                f"number_range ({self.number_range}) must be >= pick_size ({self.pick_size}) >= 1."
            )
        if self.history_window < 1:
            raise ValueError("history_window must be a positive integer.")

        windows = tuple(int(w) for w in self.sub_windows)
        if not windows or any(w < 1 for w in windows):
            raise ValueError(f"sub_windows must be positive integers, got {self.sub_windows!r}.")
        # Frozen dataclass: normalise the field in place.
        object.__setattr__(self, "sub_windows", tuple(sorted(windows)))

        if self.max_epochs < 0 or self.stagnation_cap < 0:
            raise ValueError("max_epochs and stagnation_cap cannot be negative.")
        if self.hidden_activation not in HIDDEN_ACTIVATIONS:
            raise ValueError(
                f"hidden_activation must be one of {HIDDEN_ACTIVATIONS}, got {self.hidden_activation!r}."
            )
        if self.log_every < 1:
            raise ValueError("log_every must be >= 1.")
        if self.deepness < 1:
            raise ValueError("deepness must be a positive integer.")
        if self.legacy_max_iterations < 1 or self.legacy_max_cycles < 1:
            raise ValueError("Legacy iteration and cycle caps must be >= 1.")
        if not 0.0 <= self.legacy_pass_rate <= 1.0:
            raise ValueError("legacy_pass_rate must lie in [0, 1].")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be None or >= 1.")

    def with_overrides(self, **changes: Any) -> "PredictorConfig":
        return replace(self, **changes)
