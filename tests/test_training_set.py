import logging

import numpy as np
import pytest

from steps.features import extract_features
from steps.training_set import build_training_set, occurrence_vector

SUB_WINDOWS = (2, 5)


def test_history_equal_to_window_yields_no_examples(history_factory, caplog):
    history = history_factory(5)
    with caplog.at_level(logging.WARNING):
        training_set = build_training_set(history, history_window=5, sub_windows=SUB_WINDOWS)
    assert training_set.is_empty
    assert training_set.inputs.shape == (0, 240)
    assert training_set.outputs.shape == (0, 60)
    assert "Insufficient data" in caplog.text


def test_history_shorter_than_window_yields_no_examples(history_factory):
    training_set = build_training_set(history_factory(3), history_window=5, sub_windows=SUB_WINDOWS)
    assert len(training_set) == 0


def test_one_example_per_index_after_window(short_history):
    training_set = build_training_set(short_history, history_window=5, sub_windows=SUB_WINDOWS)
    assert len(training_set) == len(short_history) - 5
    assert training_set.input_size == 240
    assert training_set.output_size == 60
    np.testing.assert_array_equal(training_set.outputs.sum(axis=1), np.full(len(training_set), 6.0))


def test_examples_reproduce_extracted_window(short_history):
    h = 5
    training_set = build_training_set(short_history, history_window=h, sub_windows=SUB_WINDOWS)
    for k, i in enumerate(range(h, len(short_history))):
        window = short_history[i - h:i]
        np.testing.assert_array_equal(training_set.inputs[k], extract_features(window, SUB_WINDOWS))
        np.testing.assert_array_equal(training_set.outputs[k], occurrence_vector(short_history[i]))


def test_threaded_build_matches_sequential(history_factory):
    history = history_factory(40, seed=9)
    sequential = build_training_set(history, history_window=10, sub_windows=(5, 10))
    threaded = build_training_set(history, history_window=10, sub_windows=(5, 10), workers=4)
    np.testing.assert_array_equal(sequential.inputs, threaded.inputs)
    np.testing.assert_array_equal(sequential.outputs, threaded.outputs)


def test_occurrence_vector():
    out = occurrence_vector((1, 7, 13, 29, 44, 60))
    assert out.sum() == 6.0
    assert out[0] == out[59] == 1.0
    with pytest.raises(ValueError):
        occurrence_vector((0, 7, 13, 29, 44, 60))
