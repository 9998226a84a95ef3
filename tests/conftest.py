"""
Shared fixtures: tracks built straight from numpy masks, so no image assets
are needed.
"""

import numpy as np
import pytest

from neurodrive.config import TrainingConfig
from neurodrive.storage import ChromosomeStore
from neurodrive.track import Track


# Layer 1 all 0.5, then accel row positive, steer row zero, brake row negative
STRAIGHT_DRIVER = [0.5] * 20 + [0.5] * 4 + [0.0] * 4 + [-0.5] * 4


class FixedPolicy:
    """Stands in for a network: always returns the same controls."""

    def __init__(self, controls):
        self.controls = list(controls)
        self.dimensions = [5, 3]
        self.last_inputs = None

    def feed_forward(self, inputs):
        self.last_inputs = list(inputs)
        return list(self.controls)

    def serialize(self):
        return []


@pytest.fixture
def open_track():
    """960x540, road everywhere, three checkpoints 100 px apart."""
    return Track.from_mask(np.ones((960, 540), dtype=bool), [(100, 270), (200, 270), (300, 270)])


@pytest.fixture
def wall_track():
    """Road only for x < 60."""
    mask = np.zeros((400, 100), dtype=bool)
    mask[:60, :] = True
    return Track.from_mask(mask, [(10, 50)])


@pytest.fixture
def offroad_track():
    """No road at all, so every car is off-road from the start."""
    return Track.from_mask(np.zeros((200, 100), dtype=bool), [(50, 50)])


@pytest.fixture
def store(tmp_path):
    return ChromosomeStore("test", str(tmp_path))


@pytest.fixture
def config():
    return TrainingConfig(seed=7, spawn_jitter=0)


@pytest.fixture
def messages():
    return []


@pytest.fixture
def straight_driver():
    return list(STRAIGHT_DRIVER)


@pytest.fixture
def fixed_policy():
    return FixedPolicy
