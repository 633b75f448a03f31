import logging
import threading

import numpy as np
import pytest
import tensorflow as tf

from config.logs import EpochLogger
from pipeline import InsufficientDataError
from steps.network import (
    EarlyStopMonitor,
    FeedForwardNetwork,
    StopReason,
    WeightSnapshot,
    build_enhanced_network,
)
from steps.training_set import TrainingSet


@pytest.fixture
def toy_set():
    rng = np.random.default_rng(42)
    inputs = rng.random((12, 8))
    outputs = (rng.random((12, 5)) > 0.6).astype(float)
    return TrainingSet(inputs=inputs, outputs=outputs)


@pytest.fixture
def toy_network():
    return FeedForwardNetwork([8, 16, 16, 8, 5], ["relu", "relu", "relu", "sigmoid"], seed=1)


def weights_equal(a, b):
    return all(np.array_equal(x, y) for x, y in zip(a, b))


def test_enhanced_topology():
    network = build_enhanced_network(10, hidden_activation="tanh", seed=0)
    assert network.layer_sizes == (10, 20, 20, 10, 60)
    assert network.activations == ("tanh", "tanh", "tanh", "sigmoid")
    # kernel + bias for each of the four Dense layers
    assert len(network.model.get_weights()) == 8


def test_invalid_topology_is_rejected():
    with pytest.raises(ValueError):
        FeedForwardNetwork([4], [])
    with pytest.raises(ValueError):
        FeedForwardNetwork([4, 2], ["relu", "relu"])
    with pytest.raises(ValueError):
        FeedForwardNetwork([4, 2], ["softplus"])


def test_seeded_networks_are_reproducible():
    a = FeedForwardNetwork([6, 4, 3], ["relu", "sigmoid"], seed=123)
    b = FeedForwardNetwork([6, 4, 3], ["relu", "sigmoid"], seed=123)
    assert weights_equal(a.model.get_weights(), b.model.get_weights())


def test_reset_draws_fresh_weights(toy_network):
    before = toy_network.model.get_weights()
    toy_network.reset()
    after = toy_network.model.get_weights()
    assert not weights_equal(before, after)


def test_predict_has_no_side_effects(toy_network):
    features = np.linspace(0.0, 1.0, 8)
    before = toy_network.model.get_weights()
    first = toy_network.predict(features)
    second = toy_network.predict(features)
    assert first.shape == (5,)
    assert np.all((first > 0.0) & (first < 1.0))
    np.testing.assert_array_equal(first, second)
    assert weights_equal(before, toy_network.model.get_weights())


def test_predict_rejects_wrong_width(toy_network):
    with pytest.raises(ValueError):
        toy_network.predict(np.zeros(3))


def test_restored_weights_reproduce_best_error(toy_set, toy_network):
    report = toy_network.train(toy_set, max_epochs=60, stagnation_cap=500, min_error=0.0)

    assert report.epochs_run == len(report.errors) > 0
    assert report.best_error == pytest.approx(min(report.errors))
    assert report.errors[report.best_epoch] == report.best_error

    fresh_error = toy_network.evaluate(toy_set.inputs, toy_set.outputs)
    assert fresh_error == pytest.approx(report.best_error, rel=1e-4, abs=1e-6)
    for error in report.errors:
        assert fresh_error <= error + 1e-6


def test_training_improves_on_initial_error(toy_set, toy_network):
    initial = toy_network.evaluate(toy_set.inputs, toy_set.outputs)
    report = toy_network.train(toy_set, max_epochs=100, min_error=0.0)
    assert report.best_error < initial


def test_min_error_stops_training(toy_set, toy_network):
    report = toy_network.train(toy_set, max_epochs=50, min_error=1.0)
    assert report.epochs_run == 1
    assert report.stop_reason is StopReason.MIN_ERROR


def test_max_epochs_stops_training(toy_set, toy_network):
    report = toy_network.train(toy_set, max_epochs=5, min_error=0.0)
    assert report.epochs_run == 5
    assert report.stop_reason is StopReason.MAX_EPOCHS


def test_cancellation_is_honoured_before_first_epoch(toy_set, toy_network):
    cancel = threading.Event()
    cancel.set()
    before = toy_network.model.get_weights()
    report = toy_network.train(toy_set, max_epochs=50, cancel_event=cancel)
    assert report.epochs_run == 0
    assert report.stop_reason is StopReason.CANCELLED
    assert weights_equal(before, toy_network.model.get_weights())


class StopAfter(tf.keras.callbacks.Callback):
    def __init__(self, epoch):
        super().__init__()
        self.stop_epoch = epoch

    def on_epoch_end(self, epoch, logs=None):
        if epoch == self.stop_epoch:
            self.model.stop_training = True


def test_callback_can_stop_training(toy_set, toy_network):
    report = toy_network.train(toy_set, max_epochs=50, min_error=0.0, callbacks=[StopAfter(2)])
    assert report.epochs_run == 3
    assert report.stop_reason is StopReason.CANCELLED


def test_epoch_logger_reports_progress(toy_set, toy_network, caplog):
    with caplog.at_level(logging.INFO):
        toy_network.train(toy_set, max_epochs=3, min_error=0.0, callbacks=[EpochLogger(log_every=1)])
    assert "[Training] Epoch 0: Error =" in caplog.text
    assert "[Training] Epoch 2: Error =" in caplog.text
    assert "best error" in caplog.text


def test_empty_training_set_is_rejected(toy_network):
    empty = TrainingSet(inputs=np.zeros((0, 8)), outputs=np.zeros((0, 5)))
    with pytest.raises(InsufficientDataError):
        toy_network.train(empty, max_epochs=5)


def test_snapshot_is_read_only(toy_network):
    snapshot = toy_network.snapshot(error=0.5, epoch=3)
    assert isinstance(snapshot, WeightSnapshot)
    with pytest.raises(ValueError):
        snapshot.weights[0][0, 0] = 1.0

    original = snapshot.weights
    toy_network.reset()
    toy_network.restore(snapshot)
    assert weights_equal(original, toy_network.model.get_weights())


def test_early_stop_monitor_counts_stagnation():
    monitor = EarlyStopMonitor(stagnation_cap=2, min_error=1e-5)
    assert monitor.update(1.0)
    assert monitor.update(0.9)
    assert not monitor.update(0.95)
    assert not monitor.update(0.9)      # equal is not an improvement
    assert not monitor.stagnated
    assert not monitor.update(0.91)
    assert monitor.stagnated            # three epochs without improvement > cap of two
    assert monitor.best_error == 0.9
    assert monitor.update(0.5)
    assert monitor.epochs_without_improvement == 0
    assert monitor.converged(1e-6) and not monitor.converged(1e-5)


def test_stagnation_stops_training_and_restores_best(toy_set, toy_network):
    report = toy_network.train(toy_set, max_epochs=5000, stagnation_cap=3, min_error=0.0)

    assert report.stop_reason is StopReason.STAGNATION
    assert report.epochs_run < 5000
    assert report.epochs_run - 1 - report.best_epoch == 3 + 1
    assert report.best_error == min(report.errors)

    restored_error = toy_network.evaluate(toy_set.inputs, toy_set.outputs)
    assert restored_error == pytest.approx(report.best_error, rel=1e-4, abs=1e-6)
