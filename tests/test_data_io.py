import logging

import pytest

from data_io import load_games, load_history, parse_draw_line, save_games
from steps.draw import DrawRecord


def test_parse_draw_line():
    assert parse_draw_line("1 11/03/1996 41,5,4,52,30,33").numbers == (41, 5, 4, 52, 30, 33)
    with pytest.raises(ValueError):
        parse_draw_line("1 11/03/1996")
    with pytest.raises(ValueError):
        parse_draw_line("1 11/03/1996 41,5,4")


def test_load_history_is_most_recent_first_and_skips_bad_lines(tmp_path, caplog):
    dataset = tmp_path / "dataset.txt"
    dataset.write_text(
        "1 11/03/1996 41,5,4,52,30,33\n"
        "\n"
        "2 18/03/1996 9,39,37,49,43,41\n"
        "3 25/03/1996 36,30,10,11,29,47\n"
        "4 01/04/1996 6,59,42,27,1,5,99\n"
        "5 08/04/1996 1,1,2,3,4,5\n"
        "6 15/04/1996 x,2,3,4,5,6\n"
    )
    with caplog.at_level(logging.WARNING):
        history = load_history(str(dataset))

    assert history == [
        DrawRecord.of(36, 30, 10, 11, 29, 47),
        DrawRecord.of(9, 39, 37, 49, 43, 41),
        DrawRecord.of(41, 5, 4, 52, 30, 33),
    ]
    assert "Skipping line 5" in caplog.text
    assert "Skipping line 6" in caplog.text
    assert "Skipping line 7" in caplog.text


def test_missing_dataset_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_history(str(tmp_path / "missing.txt"))


def test_games_round_trip(tmp_path):
    path = str(tmp_path / "games.json")
    save_games([(4, 10, 23, 35, 41, 58), None], path)
    assert load_games(path) == [[4, 10, 23, 35, 41, 58], None]


def test_invalid_game_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        save_games([("a", 2, 3, 4, 5, 6)], str(tmp_path / "games.json"))


def test_missing_or_corrupt_games_file_loads_empty(tmp_path):
    assert load_games(str(tmp_path / "missing.json")) == []

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json")
    assert load_games(str(corrupt)) == []

    wrong = tmp_path / "wrong.json"
    wrong.write_text('{"tickets": []}')
    assert load_games(str(wrong)) == []
