import numpy as np
import pytest

from neurodrive.radar import Radar, SensorArray
from neurodrive.track import Track


def test_open_beam_reaches_max_length(open_track):
    reading = Radar(0, 200, 2).probe(open_track, 100, 270, 0)
    assert reading.length == 200
    assert not reading.has_collided


def test_beam_stops_at_wall(wall_track):
    reading = Radar(0, 200, 2).probe(wall_track, 10, 50, 0)
    assert reading.length == 50
    assert reading.has_collided
    assert reading.end_x == pytest.approx(60)


def test_beam_follows_heading(wall_track):
    # Heading 90 points down the screen, the track is 100 px tall
    reading = Radar(0, 200, 2).probe(wall_track, 10, 50, 90)
    assert reading.length == 50
    assert reading.end_y == pytest.approx(100)


def test_length_is_clamped_to_max():
    track = Track.from_mask(np.ones((50, 50), dtype=bool), [])
    reading = Radar(0, 5, 2).probe(track, 10, 10, 0)
    assert reading.length == 5
    assert not reading.has_collided


def test_off_road_origin_reads_zero(offroad_track):
    sensors = SensorArray()
    readings = sensors.scan(offroad_track, 50, 50, 0)
    assert len(readings) == len(sensors) == 5
    assert [r.length for r in readings] == [0] * 5
    assert sensors.normalize(readings) == [0.0] * 5


def test_normalize(wall_track):
    sensors = SensorArray(angles=(0, 90))
    readings = sensors.scan(wall_track, 10, 50, 0)
    assert sensors.normalize(readings) == [0.25, 0.25]


def test_offset_moves_reference_point(wall_track):
    sensors = SensorArray(angles=(0,), offset=20)
    assert sensors.reference_point(10, 50, 0) == pytest.approx((30, 50))
    assert sensors.scan(wall_track, 10, 50, 0)[0].length == 30


def test_scan_does_not_change_track(wall_track):
    sensors = SensorArray()
    first = sensors.scan(wall_track, 10, 50, 0)
    second = sensors.scan(wall_track, 10, 50, 0)
    assert first == second


@pytest.mark.parametrize("max_length, step", [(0, 2), (200, 0), (-1, 2)])
def test_invalid_radar_settings(max_length, step):
    with pytest.raises(ValueError):
        SensorArray(max_length=max_length, step=step)
