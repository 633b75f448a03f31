## Project: Megasena Predictor
## Purpose of File: Main Program Execution
## Description:
## Entry point for the Megasena predictor. Handles the dataset location, game generation in
## original or enhanced mode, and displays saved games and number statistics of the latest window.

# -*- coding: utf-8 -*-

import os

import numpy as np

from data_io import CURRENT_GAMES_FILE, DATASET_FILE, load_games, load_history
from executor import format_game, render_report, run_from_file
from pipeline import PredictorConfig
from steps.features import calculate_frequency, calculate_last_occurrence


# ============================================================
# Utility Functions
# ============================================================
def dataset_path():
    """Dataset path from LOTTO_DATASET, falling back to the bundled file name."""
    return os.environ.get("LOTTO_DATASET", DATASET_FILE)


def view_number_stats(config):
    """Display frequency and recency of every number over the latest history window."""
    try:
        history = load_history(dataset_path(), config.number_range)
    except FileNotFoundError:
        print(f"Dataset '{dataset_path()}' not found.")
        return
    if not history:
        print("No draws in dataset.")
        return

    window = history[:config.history_window]
    frequency = calculate_frequency(window, config.number_range)
    last_occ = calculate_last_occurrence(window, config.number_range)

    print(f"\n--- Numbers over the last {len(window)} draws ---")
    print("Number | Occurrences | % of draws | Draws since seen")
    for i in range(config.number_range):
        count = int(round(frequency[i] * len(window)))
        since = int(round(last_occ[i] * len(window)))
        seen = f"{since:5d}" if since < len(window) else "  never"
        print(f"{i+1:2d}     | {count:10d}   | {frequency[i] * 100:7.2f}%  | {seen}")

    hottest = np.argsort(-frequency, kind="stable")[:config.pick_size] + 1
    print(f"\nMost frequent: {format_game(sorted(hottest.tolist()))}")


def generate_games(config):
    mode = input("\nPrediction mode - 1: Original, 2: Enhanced (recommended): ").strip()
    use_enhanced = mode != "1"

    try:
        games = int(input("How many games do you want to generate? "))
        if games < 1:
            raise ValueError("At least one game is required.")
    except ValueError as e:
        print(f"Invalid input: {e}")
        return

    try:
        outcomes = run_from_file(games, dataset_path(), config, use_enhanced, CURRENT_GAMES_FILE)
    except FileNotFoundError:
        print(f"Dataset '{dataset_path()}' not found.")
        return

    print("\n================================================================")
    print("          Megasena Number Prediction")
    print("================================================================\n")
    print(render_report(outcomes))

    if use_enhanced:
        print("\nEnhanced mode notes:")
        print("- Numbers come from a network trained on multi-window frequency and recency statistics")
        print("- Games fall back to the original regression model when the enhanced model cannot run")
        print("- No predictive validity is claimed\n")


# ============================================================
# Main Program Loop
# ============================================================
def main():
    config = PredictorConfig()

    while True:
        print("\n--- Megasena Predictor Menu ---")
        print("1. Display Last Generated Games")
        print("2. Generate Games")
        print("3. Number Stats")
        print("4. Exit")

        choice = input("Enter your choice (1-4): ")

        if choice == "1":
            games = load_games(CURRENT_GAMES_FILE)
            if not games:
                print("No saved games. Generate some first.")
            else:
                print("\n--- Last Generated Games ---")
                for idx, game in enumerate(games, 1):
                    print(f"Game {idx:02d}   ---   {format_game(game) if game else 'failed'}")

        elif choice == "2":
            generate_games(config)

        elif choice == "3":
            view_number_stats(config)

        elif choice == "4":
            print("Exiting.")
            break

        else:
            print("Invalid choice. Select 1-4.")


if __name__ == "__main__":
    main()
