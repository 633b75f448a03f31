## Project: Megasena Predictor
## Purpose of File: Manage Input/Output for Draw History and Generated Games
## Description:
## Loads the draw history from the plain-text dataset, where the third whitespace-separated
## field of every line holds the six drawn numbers ("1234 2020-01-01 4,10,23,35,41,58").
## The file is chronological, so the loaded list is reversed to put the most recent draw first.
## Generated games are saved to and loaded from `current_games.json`.

import json  # For JSON read/write operations
import os  # For checking file existence
import logging  # For logging events and errors
from typing import List, Optional, Sequence  # For type annotations

from pipeline import NUMBER_RANGE
from steps.draw import DrawRecord

# Configure logging for this module
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

# Constants for file paths
DATASET_FILE = "MegaSenaDataSet.txt"  # The draw history shipped next to the program
CURRENT_GAMES_FILE = "current_games.json"  # The file storing the last generated games


def parse_draw_line(line: str) -> DrawRecord:
    """
    Parses one dataset line into a DrawRecord.

    Raises:
    - ValueError: If the line has fewer than three fields or the numbers field is not six integers.
    """
    fields = line.split()
    if len(fields) < 3:
        raise ValueError(f"Expected at least 3 fields, got {len(fields)}")
    values = [int(v) for v in fields[2].split(",")]
    return DrawRecord(tuple(values))


def load_history(path: str = DATASET_FILE, number_range: int = NUMBER_RANGE) -> List[DrawRecord]:
    """
    Loads the draw history from `path`, most recent draw first.

    Blank lines are ignored. Lines that cannot be parsed or hold an invalid draw are logged and
    skipped.

    Raises:
    - FileNotFoundError: If the dataset does not exist.
    """
    if not os.path.exists(path):
        logging.error(f"Dataset '{path}' not found.")
        raise FileNotFoundError(path)

    history: List[DrawRecord] = []
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                draw = parse_draw_line(line)
            except (ValueError, TypeError) as e:
                logging.warning(f"Skipping line {line_no} of '{path}': {e}.")
                continue
            if not draw.is_valid(number_range):
                logging.warning(f"Skipping line {line_no} of '{path}': invalid draw {draw}.")
                continue
            history.append(draw)

    history.reverse()
    logging.info(f"Loaded {len(history)} draws from '{path}'.")
    return history


def load_games(path: str = CURRENT_GAMES_FILE) -> List[Optional[List[int]]]:
    """
    Loads the last generated games from `path`.

    Expected JSON structure:
    {
        "games": [[int, int, int, int, int, int] | null, ...]
    }

    Returns:
    - List[Optional[List[int]]]: The loaded games. If the file does not exist or contains
      invalid JSON, returns an empty list.
    """
    if not os.path.exists(path):
        logging.warning(f"'{path}' not found. Returning no games.")
        return []

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logging.error(f"Error decoding JSON from '{path}': {e}. Returning no games.")
        return []

    if not isinstance(data, dict) or not isinstance(data.get("games"), list):
        logging.error(f"Invalid structure in '{path}'. Expected 'games' as a list.")
        return []

    logging.info(f"Successfully loaded {len(data['games'])} game(s) from '{path}'.")
    return data["games"]


def save_games(games: Sequence[Optional[Sequence[int]]], path: str = CURRENT_GAMES_FILE) -> None:
    """
    Saves generated games to `path`. A game that failed is stored as null so positions match
    the requested game numbers.

    Raises:
    - ValueError: If a game is neither None nor a sequence of integers.
    """
    normalized = []
    for idx, game in enumerate(games):
        if game is None:
            normalized.append(None)
            continue
        try:
            normalized.append([int(n) for n in game])
        except (TypeError, ValueError) as e:
            logging.error(f"Game at index {idx} is not a list of integers: {e}.")
            raise ValueError(f"Invalid game at index {idx}: {game!r}") from e

    with open(path, "w") as f:
        json.dump({"games": normalized}, f, indent=2)
    logging.info(f"Successfully saved {len(normalized)} game(s) to '{path}'.")
