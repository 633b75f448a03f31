"""
Project: Megasena Predictor

Purpose:
    Full-batch resilient propagation (iRprop+) for Keras models.

How one iteration works:
    1) Forward pass over the whole training set, mean squared error against the targets.
    2) Gradient of that error for every trainable weight.
    3) Per-weight step sizes adapt to the gradient sign only:
         - same sign as last iteration  -> step *= 1.2 (capped at 50)
         - sign flipped                 -> step *= 0.5 (floored at 1e-6), last change is undone
                                           only if the error went up, gradient memory cleared
         - no previous sign             -> step unchanged
       and each weight moves by -sign(gradient) * step.

Correctness notes:
    - The reported error belongs to the weights the iteration STARTED from; callers that want to
      checkpoint "the weights that produced this error" must snapshot between
      compute_gradients() and apply_gradients().
    - All updates of an iteration are applied together, after the full gradient is known.
"""

import numpy as np
import tensorflow as tf

# =========================== Configuration =========================== #

DEFAULT_INITIAL_UPDATE = 0.1
DEFAULT_MAX_STEP = 50.0
DEFAULT_MIN_STEP = 1e-6
POSITIVE_ETA = 1.2
NEGATIVE_ETA = 0.5


class ResilientPropagation:
    def __init__(
        self,
        model,
        inputs,
        targets,
        initial_update: float = DEFAULT_INITIAL_UPDATE,
        max_step: float = DEFAULT_MAX_STEP,
        min_step: float = DEFAULT_MIN_STEP,
        eta_plus: float = POSITIVE_ETA,
        eta_minus: float = NEGATIVE_ETA,
    ):
        inputs = np.asarray(inputs, dtype=np.float32)
        targets = np.asarray(targets, dtype=np.float32)
        if inputs.ndim != 2 or targets.ndim != 2:
            raise ValueError(f"inputs/targets must be 2D, got {inputs.shape} and {targets.shape}")
        if inputs.shape[0] == 0:
            raise ValueError("Resilient propagation needs at least one training example.")
        if inputs.shape[0] != targets.shape[0]:
            raise ValueError(f"{inputs.shape[0]} inputs but {targets.shape[0]} targets.")

        self.model = model
        self.inputs = tf.constant(inputs)
        self.targets = tf.constant(targets)

        self.initial_update = float(initial_update)
        self.max_step = float(max_step)
        self.min_step = float(min_step)
        self.eta_plus = float(eta_plus)
        self.eta_minus = float(eta_minus)

        self._variables = list(model.trainable_variables)
        self._last_gradients = [self._state_like(v, 0.0) for v in self._variables]
        self._steps = [self._state_like(v, self.initial_update) for v in self._variables]
        self._last_changes = [self._state_like(v, 0.0) for v in self._variables]
        self._last_error = tf.Variable(np.inf, dtype=tf.float32, trainable=False)

        self.error = float("inf")
        self.iterations = 0

        self._compute = tf.function(self._compute_gradients)
        self._apply = tf.function(self._apply_gradients)

    @staticmethod
    def _state_like(variable, value):
        return tf.Variable(tf.fill(tuple(variable.shape), tf.constant(value, dtype=tf.float32)), trainable=False)

    def reset(self) -> None:
        """Forget step sizes and gradient history (weights are left alone)."""
        for last_grad, step, last_change in zip(self._last_gradients, self._steps, self._last_changes):
            last_grad.assign(tf.zeros_like(last_grad))
            step.assign(tf.fill(tf.shape(step), tf.constant(self.initial_update, dtype=tf.float32)))
            last_change.assign(tf.zeros_like(last_change))
        self._last_error.assign(np.inf)
        self.error = float("inf")
        self.iterations = 0

    # ===================== Graph functions ===================== #

    def _compute_gradients(self):
        with tf.GradientTape() as tape:
            predictions = self.model(self.inputs, training=False)
            error = tf.reduce_mean(tf.square(self.targets - tf.cast(predictions, tf.float32)))
        gradients = tape.gradient(error, self._variables)
        return error, gradients

    def _apply_gradients(self, gradients, error):
        error_rose = error > self._last_error

        for variable, gradient, last_grad, step, last_change in zip(
            self._variables, gradients, self._last_gradients, self._steps, self._last_changes
        ):
            gradient = tf.cast(gradient, tf.float32)
            sign_change = gradient * last_grad
            kept = sign_change > 0.0
            flipped = sign_change < 0.0

            new_step = tf.where(
                kept,
                tf.minimum(step * self.eta_plus, self.max_step),
                tf.where(flipped, tf.maximum(step * self.eta_minus, self.min_step), step),
            )
            backtrack = tf.where(error_rose, -last_change, tf.zeros_like(last_change))
            change = tf.where(flipped, backtrack, -tf.sign(gradient) * new_step)

            variable.assign_add(tf.cast(change, variable.dtype))
            step.assign(new_step)
            last_grad.assign(tf.where(flipped, tf.zeros_like(gradient), gradient))
            last_change.assign(change)

        self._last_error.assign(error)

    # ===================== Public API ===================== #

    def compute_gradients(self):
        """Return (error, gradients) for the current weights without touching them."""
        error, gradients = self._compute()
        return float(error), gradients

    def apply_gradients(self, gradients, error: float) -> None:
        self._apply(gradients, tf.constant(error, dtype=tf.float32))
        self.error = float(error)
        self.iterations += 1

    def iteration(self) -> float:
        error, gradients = self.compute_gradients()
        self.apply_gradients(gradients, error)
        return error
