import numpy as np
import pytest

from steps.draw import DrawRecord


def random_history(n, seed=7, number_range=60):
    rng = np.random.default_rng(seed)
    return [
        DrawRecord(tuple(int(v) for v in rng.choice(np.arange(1, number_range + 1), size=6, replace=False)))
        for _ in range(n)
    ]


@pytest.fixture
def history_factory():
    return random_history


@pytest.fixture
def short_history():
    return random_history(12, seed=11)
