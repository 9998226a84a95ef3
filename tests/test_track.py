import json

import numpy as np
import pygame
import pytest

from neurodrive.constants import ROAD_COLOR
from neurodrive.errors import ConfigurationError
from neurodrive.track import Track


def test_is_road_bounds(wall_track):
    assert wall_track.is_road(0, 0)
    assert wall_track.is_road(59.9, 99.9)
    assert not wall_track.is_road(60, 50)
    assert not wall_track.is_road(-0.5, 50)
    assert not wall_track.is_road(10, 100)


def test_mask_is_read_only(wall_track):
    with pytest.raises(ValueError):
        wall_track.road_mask[0, 0] = False


def test_checkpoints_hit_in_order(open_track):
    assert open_track.checkpoints_hit(150, 270, 60) == [0, 1]
    assert open_track.checkpoints_hit(150, 270, 40) == []
    assert open_track.goal_index == 2


def test_spawn_point(open_track):
    class FixedRandom:
        def random(self):
            return 1.0

    assert open_track.spawn_point() == (100, 270)
    assert open_track.spawn_point(FixedRandom(), jitter=43) == pytest.approx((100, 270 + 21.5))


def test_load_from_image(tmp_path):
    surface = pygame.Surface((20, 10), pygame.SRCALPHA)
    surface.fill((0, 0, 0, 255))
    surface.fill(ROAD_COLOR, pygame.Rect(0, 0, 8, 10))
    pygame.image.save(surface, str(tmp_path / "track3.png"))
    with open(tmp_path / "track3.json", "w") as f:
        json.dump({"checkpoints": [[2, 5], [6, 5]]}, f)

    track = Track.load(3, str(tmp_path))
    assert (track.width, track.height) == (20, 10)
    assert track.is_road(7, 9)
    assert not track.is_road(8, 0)
    assert track.checkpoints == [(2.0, 5.0), (6.0, 5.0)]
    assert int(np.sum(track.road_mask)) == 80


def test_missing_track_files(tmp_path):
    with pytest.raises(ConfigurationError):
        Track.load(0, str(tmp_path))


def test_track_data_without_checkpoints(tmp_path):
    surface = pygame.Surface((4, 4), pygame.SRCALPHA)
    pygame.image.save(surface, str(tmp_path / "track1.png"))
    (tmp_path / "track1.json").write_text('{"start": [0, 0]}')
    with pytest.raises(ConfigurationError):
        Track.load(1, str(tmp_path))
