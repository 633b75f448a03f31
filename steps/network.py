"""
Project: Megasena Predictor

Purpose:
    Feed-forward network engine shared by the enhanced and legacy predictors.

Design:
    1) Keras Sequential model of Dense layers, every layer with a bias.
    2) Weights drawn Glorot-uniform (biases included) from a per-network generator, so a seeded
       network is reproducible and repeated reset() calls keep drawing fresh weights.
    3) Training = full-batch iRprop+ (config.resilient) wrapped in a best-state loop:
         - the error of epoch k belongs to the weights epoch k started from,
         - a strictly better error captures those weights as an immutable WeightSnapshot,
         - stop on max_epochs, on more than `stagnation_cap` epochs without improvement,
           on error < min_error, or on cancellation,
         - the best snapshot is always restored before train() returns.
    4) predict() is a single forward pass with no training side effects.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import tensorflow as tf
from tensorflow import keras

from config.resilient import ResilientPropagation
from pipeline import MAX_EPOCHS, MIN_ERROR, NUMBER_RANGE, STAGNATION_CAP, InsufficientDataError

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

ACTIVATIONS = ("relu", "tanh", "sigmoid", "linear")


# ===================== Value types ===================== #

@dataclass(frozen=True)
class WeightSnapshot:
    weights: Tuple[np.ndarray, ...]
    error: float
    epoch: int

    @classmethod
    def capture(cls, model, error: float, epoch: int) -> "WeightSnapshot":
        arrays = []
        for w in model.get_weights():
            w = np.array(w, copy=True)
            w.setflags(write=False)
            arrays.append(w)
        return cls(weights=tuple(arrays), error=float(error), epoch=int(epoch))


class StopReason(str, Enum):
    MAX_EPOCHS = "max_epochs"
    STAGNATION = "stagnation"
    MIN_ERROR = "min_error"
    CANCELLED = "cancelled"


@dataclass
class TrainingReport:
    epochs_run: int = 0
    errors: List[float] = field(default_factory=list)
    best_error: float = float("inf")
    best_epoch: int = -1
    stop_reason: StopReason = StopReason.MAX_EPOCHS


class EarlyStopMonitor:
    """Tracks the best error and how many epochs have passed without beating it."""

    def __init__(self, stagnation_cap: int = STAGNATION_CAP, min_error: float = MIN_ERROR):
        self.stagnation_cap = stagnation_cap
        self.min_error = min_error
        self.best_error = float("inf")
        self.epochs_without_improvement = 0

    def update(self, error: float) -> bool:
        if error < self.best_error:
            self.best_error = error
            self.epochs_without_improvement = 0
            return True
        self.epochs_without_improvement += 1
        return False

    @property
    def stagnated(self) -> bool:
        return self.epochs_without_improvement > self.stagnation_cap

    def converged(self, error: float) -> bool:
        return error < self.min_error


# ===================== Network ===================== #

class FeedForwardNetwork:
    def __init__(
        self,
        layer_sizes: Sequence[int],
        activations: Sequence[str],
        seed: Optional[int] = None,
        name: Optional[str] = None,
    ):
        layer_sizes = [int(n) for n in layer_sizes]
        activations = list(activations)
        if len(layer_sizes) < 2:
            raise ValueError("A network needs at least an input and an output layer.")
        if len(activations) != len(layer_sizes) - 1:
            raise ValueError(
                f"Expected {len(layer_sizes) - 1} activations for {len(layer_sizes)} layers, got {len(activations)}."
            )
        if any(n < 1 for n in layer_sizes):
            raise ValueError(f"Layer sizes must be positive, got {layer_sizes}")
        unknown = [a for a in activations if a not in ACTIVATIONS]
        if unknown:
            raise ValueError(f"Unsupported activations {unknown}; choose from {ACTIVATIONS}.")

        self.layer_sizes = tuple(layer_sizes)
        self.activations = tuple(activations)
        self._rng = np.random.default_rng(seed)

        self._dense = [
            keras.layers.Dense(size, activation=act, use_bias=True)
            for size, act in zip(layer_sizes[1:], activations)
        ]
        self.model = keras.Sequential(
            [keras.layers.Input(shape=(layer_sizes[0],))] + self._dense,
            name=name,
        )
        self.reset()

    @property
    def input_size(self) -> int:
        return self.layer_sizes[0]

    @property
    def output_size(self) -> int:
        return self.layer_sizes[-1]

    def reset(self, seed: Optional[int] = None) -> None:
        """Re-draw every weight and bias. Passing a seed restarts the generator first."""
        if seed is not None:
            self._rng = np.random.default_rng(seed)

        weights = []
        for fan_in, fan_out in zip(self.layer_sizes[:-1], self.layer_sizes[1:]):
            limit = np.sqrt(6.0 / (fan_in + fan_out))
            weights.append(self._rng.uniform(-limit, limit, size=(fan_in, fan_out)).astype(np.float32))
            weights.append(self._rng.uniform(-limit, limit, size=(fan_out,)).astype(np.float32))
        self.model.set_weights(weights)

    def snapshot(self, error: float = float("inf"), epoch: int = -1) -> WeightSnapshot:
        return WeightSnapshot.capture(self.model, error, epoch)

    def restore(self, snapshot: WeightSnapshot) -> None:
        self.model.set_weights([np.array(w) for w in snapshot.weights])

    # ===================== Inference ===================== #

    def predict_batch(self, inputs) -> np.ndarray:
        x = np.asarray(inputs, dtype=np.float32)
        if x.ndim == 1:
            x = x.reshape(1, -1)
        if x.ndim != 2 or x.shape[1] != self.input_size:
            raise ValueError(f"Expected inputs of width {self.input_size}, got shape {x.shape}")
        return np.asarray(self.model(tf.constant(x), training=False), dtype=float)

    def predict(self, features) -> np.ndarray:
        """Single forward pass for one feature vector; returns a 1D output vector."""
        return self.predict_batch(np.asarray(features).reshape(1, -1))[0]

    def evaluate(self, inputs, targets) -> float:
        """Full-batch mean squared error, computed the same way the trainer computes it."""
        x = tf.constant(np.asarray(inputs, dtype=np.float32))
        y = tf.constant(np.asarray(targets, dtype=np.float32))
        predictions = tf.cast(self.model(x, training=False), tf.float32)
        return float(tf.reduce_mean(tf.square(y - predictions)))

    # ===================== Training ===================== #

    def trainer_for(self, training_set) -> ResilientPropagation:
        if training_set.is_empty:
            raise InsufficientDataError("Cannot train on an empty training set.")
        return ResilientPropagation(self.model, training_set.inputs, training_set.outputs)

    def train(
        self,
        training_set,
        max_epochs: int = MAX_EPOCHS,
        stagnation_cap: int = STAGNATION_CAP,
        min_error: float = MIN_ERROR,
        cancel_event: Optional[threading.Event] = None,
        callbacks: Optional[Iterable[keras.callbacks.Callback]] = None,
    ) -> TrainingReport:
        trainer = self.trainer_for(training_set)
        monitor = EarlyStopMonitor(stagnation_cap, min_error)
        report = TrainingReport()
        best: Optional[WeightSnapshot] = None

        callback_list = keras.callbacks.CallbackList(list(callbacks or []), model=self.model)
        self.model.stop_training = False
        callback_list.on_train_begin()

        for epoch in range(max_epochs):
            if (cancel_event is not None and cancel_event.is_set()) or self.model.stop_training:
                report.stop_reason = StopReason.CANCELLED
                break

            callback_list.on_epoch_begin(epoch)
            error, gradients = trainer.compute_gradients()

            if monitor.update(error):
                best = WeightSnapshot.capture(self.model, error, epoch)

            trainer.apply_gradients(gradients, error)
            report.errors.append(error)
            report.epochs_run = epoch + 1

            callback_list.on_epoch_end(epoch, {"loss": error, "best_loss": monitor.best_error})

            if monitor.stagnated:
                report.stop_reason = StopReason.STAGNATION
                break
            if monitor.converged(error):
                report.stop_reason = StopReason.MIN_ERROR
                break

        if best is not None:
            self.restore(best)
            report.best_error = best.error
            report.best_epoch = best.epoch

        callback_list.on_train_end({"loss": report.best_error, "best_loss": report.best_error})
        logging.info(
            f"Training stopped ({report.stop_reason.value}) after {report.epochs_run} epochs; "
            f"best error {report.best_error} at epoch {report.best_epoch}."
        )
        return report


def build_enhanced_network(
    input_size: int,
    output_size: int = NUMBER_RANGE,
    hidden_activation: str = "relu",
    seed: Optional[int] = None,
) -> FeedForwardNetwork:
    """
    input -> 2x input -> 2x input -> 1x input (hidden_activation) -> output_size (sigmoid).
    Sigmoid outputs give one independent probability per number.
    """
    return FeedForwardNetwork(
        layer_sizes=[input_size, input_size * 2, input_size * 2, input_size, output_size],
        activations=[hidden_activation, hidden_activation, hidden_activation, "sigmoid"],
        seed=seed,
        name="enhanced_network",
    )
