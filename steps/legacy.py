"""
Project: Megasena Predictor

Purpose:
    Legacy regression predictor, kept as the fallback when the enhanced path cannot produce a
    game. The network regresses the six raw numbers of the next draw from the raw numbers of the
    previous `deepness` draws.

Network:
    6*deep inputs -> 30*deep sigmoid -> 30*deep sigmoid -> 6 linear

Training pairs (history index 0 = most recent draw), for k in [0, deep):
    target -> history[k]
    input  -> history[k+1 : k+1+deep], flattened oldest draw first
Held-out input -> history[0 : deep], flattened oldest draw first.
Each input window ends at the draw right before its target, with no draw skipped in between,
so training windows have the same layout as the held-out window. This needs 2*deep draws.

State machine:
    INIT               -> re-draw all weights, forget trainer state -> TRAIN_AND_VALIDATE
    TRAIN_AND_VALIDATE -> up to `legacy_max_iterations` iterations (or error <= threshold),
                          exact-match validation of every example, held-out prediction
        held-out has a value outside 1..60                   -> INIT
        pass rate < legacy_pass_rate or held-out not valid   -> TRAIN_AND_VALIDATE (weights kept)
        otherwise                                            -> ACCEPT
    The TRAIN_AND_VALIDATE visits are capped by `legacy_max_cycles`; without the cap the loop
    has no termination guarantee.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from pipeline import (
    PICK_SIZE,
    InsufficientDataError,
    LegacyCycleLimitError,
    PredictorConfig,
    TrainingCancelledError,
)
from steps.draw import DrawRecord
from steps.network import FeedForwardNetwork
from steps.training_set import TrainingSet

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

HIDDEN_FACTOR = 5


class LegacyState(str, Enum):
    INIT = "init"
    TRAIN_AND_VALIDATE = "train_and_validate"
    ACCEPT = "accept"


@dataclass(frozen=True)
class LegacyOutcome:
    numbers: Tuple[int, ...]
    cycles: int
    restarts: int
    pass_count: int

    def __str__(self) -> str:
        return ",".join(str(n) for n in self.numbers)


def build_legacy_network(deepness: int, seed: Optional[int] = None) -> FeedForwardNetwork:
    width = PICK_SIZE * deepness
    return FeedForwardNetwork(
        layer_sizes=[width, HIDDEN_FACTOR * width, HIDDEN_FACTOR * width, PICK_SIZE],
        activations=["sigmoid", "sigmoid", "linear"],
        seed=seed,
        name="legacy_network",
    )


def flatten_oldest_first(draws: Sequence) -> np.ndarray:
    """Raw values of a most-recent-first slice, laid out oldest draw first."""
    return np.asarray([v for draw in reversed(list(draws)) for v in draw], dtype=float)


def build_legacy_training_set(history: Sequence, deepness: int) -> Tuple[TrainingSet, np.ndarray]:
    """Return the `deepness` regression pairs and the held-out input for the next draw."""
    if len(history) < 2 * deepness:
        raise InsufficientDataError(
            f"Legacy predictor needs at least {2 * deepness} draws for deepness {deepness}, "
            f"got {len(history)}."
        )

    inputs = np.vstack([flatten_oldest_first(history[k + 1:k + 1 + deepness]) for k in range(deepness)])
    outputs = np.vstack([np.asarray(tuple(history[k]), dtype=float) for k in range(deepness)])
    held_out = flatten_oldest_first(history[:deepness])

    return TrainingSet(inputs=inputs, outputs=outputs), held_out


class LegacyRegressionPredictor:
    def __init__(self, config: Optional[PredictorConfig] = None):
        self.config = config or PredictorConfig()

    def next_state(self, pass_count: int, n_examples: int, predicted: DrawRecord) -> LegacyState:
        cfg = self.config
        if predicted.is_out(cfg.number_range):
            return LegacyState.INIT
        if pass_count < n_examples * cfg.legacy_pass_rate or not predicted.is_valid(cfg.number_range):
            return LegacyState.TRAIN_AND_VALIDATE
        return LegacyState.ACCEPT

    def count_passes(self, network: FeedForwardNetwork, training_set: TrainingSet) -> int:
        computed = network.predict_batch(training_set.inputs)
        passed = 0
        for expected_row, computed_row in zip(training_set.outputs, computed):
            should = DrawRecord.from_values(expected_row)
            got = DrawRecord.from_values(computed_row)
            ok = should == got
            passed += int(ok)
            logging.debug(f"{str(should):>17} {'==' if ok else '!='} {str(got):<17} {'PASS' if ok else 'FAIL'}")
        return passed

    def _train_inner(self, trainer) -> float:
        cfg = self.config
        step = 0
        while True:
            error = trainer.iteration()
            step += 1
            logging.debug(f"Train Error: {error}")
            if error <= cfg.legacy_error_threshold or step >= cfg.legacy_max_iterations:
                return error

    def predict(self, history: Sequence, cancel_event: Optional[threading.Event] = None) -> LegacyOutcome:
        cfg = self.config
        training_set, held_out = build_legacy_training_set(history, cfg.deepness)

        network = build_legacy_network(cfg.deepness, seed=cfg.seed)
        trainer = network.trainer_for(training_set)

        state = LegacyState.INIT
        cycles = 0
        restarts = 0
        pass_count = 0
        predicted = None

        while state is not LegacyState.ACCEPT:
            if cancel_event is not None and cancel_event.is_set():
                raise TrainingCancelledError(f"Legacy predictor cancelled after {cycles} cycles.")

            if state is LegacyState.INIT:
                network.reset()
                trainer.reset()
                restarts += 1
                state = LegacyState.TRAIN_AND_VALIDATE
                continue

            cycles += 1
            if cycles > cfg.legacy_max_cycles:
                raise LegacyCycleLimitError(
                    f"Legacy predictor did not converge within {cfg.legacy_max_cycles} cycles "
                    f"({restarts} restarts)."
                )

            error = self._train_inner(trainer)
            pass_count = self.count_passes(network, training_set)
            predicted = DrawRecord.from_values(network.predict(held_out))
            state = self.next_state(pass_count, len(training_set), predicted)

            logging.info(
                f"[LegacyPredictor] Cycle {cycles}: error={error:.6f}, passed {pass_count}/{len(training_set)}, "
                f"held-out {predicted} -> {state.value}"
            )

        return LegacyOutcome(
            numbers=predicted.sorted(),
            cycles=cycles,
            restarts=restarts - 1,
            pass_count=pass_count,
        )
