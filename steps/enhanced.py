"""
Project: Megasena Predictor

Purpose:
    Primary prediction path: multi-window statistics -> probability network -> six numbers.

Flow (single deterministic path per call):
    1) Warn if the history is shorter than the main window, then carry on with what exists.
    2) Features of the most recent `history_window` draws (the prediction input).
    3) Sliding-window training set over the whole history.
    4) Fresh network trained with best-state resilient propagation.
    5) Forward pass on the prediction input, top six numbers selected.

The outcome is reported as a PredictionResult instead of an exception, so the executor can
choose the legacy path by inspecting `result.kind`. Only an empty history (a caller bug)
raises.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from config.logs import EpochLogger
from pipeline import EmptyWindowError, PredictorConfig, TrainingCancelledError
from steps.features import extract_features
from steps.network import StopReason, TrainingReport, build_enhanced_network
from steps.selector import select_numbers
from steps.training_set import build_training_set

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


class PredictionKind(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"
    FAILED = "failed"


@dataclass(frozen=True)
class PredictionResult:
    kind: PredictionKind
    numbers: Tuple[int, ...] = ()
    message: str = ""
    error: Optional[BaseException] = None
    report: Optional[TrainingReport] = None

    @property
    def ok(self) -> bool:
        return self.kind is PredictionKind.OK


class EnhancedPredictor:
    def __init__(self, config: Optional[PredictorConfig] = None):
        self.config = config or PredictorConfig()
        self.last_prediction: Optional[np.ndarray] = None

    def latest_features(self, history: Sequence) -> np.ndarray:
        cfg = self.config
        latest_window = list(history[:cfg.history_window])

        if cfg.workers is not None and cfg.workers > 1:
            with ThreadPoolExecutor(max_workers=cfg.workers) as executor:
                return extract_features(latest_window, cfg.sub_windows, cfg.number_range, executor)
        return extract_features(latest_window, cfg.sub_windows, cfg.number_range)

    def predict_next_numbers(
        self,
        history: Sequence,
        cancel_event: Optional[threading.Event] = None,
    ) -> PredictionResult:
        cfg = self.config

        if len(history) == 0:
            raise EmptyWindowError("Enhanced predictor received an empty history.")

        if len(history) < cfg.history_window:
            logging.warning(
                f"[EnhancedPredictor] Few draws in history ({len(history)}). "
                f"Ideal >= {cfg.history_window} for better results."
            )

        try:
            features = self.latest_features(history)

            training_set = build_training_set(
                history,
                history_window=cfg.history_window,
                sub_windows=cfg.sub_windows,
                number_range=cfg.number_range,
                workers=cfg.workers,
            )
            if training_set.is_empty:
                return PredictionResult(
                    kind=PredictionKind.INSUFFICIENT_DATA,
                    message=(
                        f"{len(history)} draws do not exceed the {cfg.history_window}-draw window; "
                        "nothing to train on."
                    ),
                )

            network = build_enhanced_network(
                input_size=features.size,
                output_size=cfg.number_range,
                hidden_activation=cfg.hidden_activation,
                seed=cfg.seed,
            )

            logging.info("[EnhancedPredictor] Starting multi-window training...")
            report = network.train(
                training_set,
                max_epochs=cfg.max_epochs,
                stagnation_cap=cfg.stagnation_cap,
                min_error=cfg.min_error,
                cancel_event=cancel_event,
                callbacks=[EpochLogger(log_every=cfg.log_every)],
            )
            if report.stop_reason is StopReason.CANCELLED:
                raise TrainingCancelledError(f"Training cancelled after {report.epochs_run} epochs.")

            prediction = network.predict(features)
            self.last_prediction = prediction
            numbers = select_numbers(prediction, cfg.pick_size)

        except EmptyWindowError:
            raise
        except Exception as e:
            logging.error(f"[EnhancedPredictor] Prediction failed: {e}")
            return PredictionResult(kind=PredictionKind.FAILED, message=str(e), error=e)

        logging.info("[EnhancedPredictor] Prediction complete.")
        return PredictionResult(kind=PredictionKind.OK, numbers=numbers, report=report)
