import pytest

from pipeline import (
    EmptyWindowError,
    PredictorConfig,
    PredictorError,
    SUB_WINDOWS,
)


def test_defaults():
    config = PredictorConfig()
    assert config.number_range == 60
    assert config.pick_size == 6
    assert config.history_window == 100
    assert config.sub_windows == SUB_WINDOWS
    assert config.max_epochs == 30000
    assert config.stagnation_cap == 500
    assert config.min_error == 1e-5
    assert config.deepness == 50
    assert config.legacy_max_iterations == 20
    assert config.legacy_error_threshold == 0.001
    assert config.legacy_pass_rate == 0.9


def test_sub_windows_are_sorted():
    assert PredictorConfig(sub_windows=(50, 10, 20)).sub_windows == (10, 20, 50)


@pytest.mark.parametrize(
    "changes",
    [
        {"sub_windows": ()},
        {"sub_windows": (0, 10)},
        {"hidden_activation": "softmax"},
        {"legacy_pass_rate": 1.5},
        {"workers": 0},
        {"pick_size": 61},
        {"deepness": 0},
    ],
)
def test_invalid_values_are_rejected(changes):
    with pytest.raises(ValueError):
        PredictorConfig(**changes)


def test_with_overrides_returns_new_config():
    base = PredictorConfig()
    tanh = base.with_overrides(hidden_activation="tanh", seed=5)
    assert tanh.hidden_activation == "tanh" and tanh.seed == 5
    assert base.hidden_activation == "relu"


def test_error_hierarchy():
    assert issubclass(EmptyWindowError, PredictorError)
    assert issubclass(EmptyWindowError, ValueError)
