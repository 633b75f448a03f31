## Project: Megasena Predictor
## Purpose of File: Multi-Game Execution
## Description:
## Runs one independent prediction per requested game. In enhanced mode the enhanced predictor
## is tried first and its PredictionResult decides whether the legacy predictor takes over; in
## original mode the legacy predictor runs directly. A game that fails is logged and recorded
## without stopping the remaining games.

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from data_io import CURRENT_GAMES_FILE, load_history, save_games
from pipeline import PredictorConfig
from steps.enhanced import EnhancedPredictor
from steps.legacy import LegacyRegressionPredictor

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

SOURCE_ENHANCED = "enhanced"
SOURCE_LEGACY = "legacy"
SOURCE_FAILED = "failed"


@dataclass(frozen=True)
class GameOutcome:
    index: int
    numbers: Optional[Tuple[int, ...]]
    source: str
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.numbers is not None


def format_game(numbers: Sequence[int]) -> str:
    return " - ".join(f"{n:02d}" for n in numbers)


def predict_game(
    history: Sequence,
    config: PredictorConfig,
    use_enhanced: bool = True,
    cancel_event: Optional[threading.Event] = None,
) -> Tuple[Tuple[int, ...], str]:
    """Return (numbers, source) for one game. Raises if the legacy path fails too."""
    if use_enhanced:
        result = EnhancedPredictor(config).predict_next_numbers(history, cancel_event)
        if result.ok:
            return result.numbers, SOURCE_ENHANCED
        logging.warning(
            f"Enhanced predictor returned '{result.kind.value}' ({result.message}). "
            "Using the legacy predictor as fallback..."
        )

    outcome = LegacyRegressionPredictor(config).predict(history, cancel_event)
    return outcome.numbers, SOURCE_LEGACY


def run(
    games: int,
    history: Sequence,
    config: Optional[PredictorConfig] = None,
    use_enhanced: bool = True,
    cancel_event: Optional[threading.Event] = None,
) -> List[GameOutcome]:
    config = config or PredictorConfig()
    history = list(history)

    logging.info("Starting prediction process...")
    logging.info(f"Mode: {'Enhanced' if use_enhanced else 'Original'}")
    logging.info(f"Deepness: {config.deepness}")
    logging.info(f"Games: {games}")

    outcomes: List[GameOutcome] = []
    for i in range(games):
        logging.info(f"Processing game {i + 1} of {games}...")
        try:
            numbers, source = predict_game(history, config, use_enhanced, cancel_event)
            outcomes.append(GameOutcome(index=i + 1, numbers=tuple(numbers), source=source))
            logging.info(f"[OK] Game {i + 1} completed ({source}).")
        except Exception as e:
            logging.error(f"[ERROR] Game {i + 1} failed: {e}")
            outcomes.append(GameOutcome(index=i + 1, numbers=None, source=SOURCE_FAILED, message=str(e)))

    return outcomes


def run_from_file(
    games: int,
    dataset_path: str,
    config: Optional[PredictorConfig] = None,
    use_enhanced: bool = True,
    games_path: Optional[str] = CURRENT_GAMES_FILE,
) -> List[GameOutcome]:
    history = load_history(dataset_path, (config or PredictorConfig()).number_range)
    outcomes = run(games, history, config, use_enhanced)
    if games_path:
        save_games([o.numbers for o in outcomes], games_path)
    return outcomes


def render_report(outcomes: Sequence[GameOutcome]) -> str:
    lines = []
    for outcome in outcomes:
        body = format_game(outcome.numbers) if outcome.ok else f"failed: {outcome.message}"
        lines.append(f"Game {outcome.index:02d}   ---   {body}")
    return "\n".join(lines)
