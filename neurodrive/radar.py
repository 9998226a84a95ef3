"""
Radar probes for the driving simulation.
Each radar walks along a fixed angle relative to the car until it leaves the
road or reaches its maximum length.
"""
import math
from dataclasses import dataclass

from .constants import RADAR_ANGLES, RADAR_MAX_LENGTH, RADAR_STEP, RADAR_OFFSET


@dataclass
class RadarReading:
    angle: float
    length: float
    has_collided: bool
    end_x: float
    end_y: float


class Radar:
    def __init__(self, angle, max_length=RADAR_MAX_LENGTH, step=RADAR_STEP):
        self.angle = angle
        self.max_length = max_length
        self.step = step

    def probe(self, track, x, y, heading):
        """Step along the beam from (x, y). The origin itself is tested first."""
        rad_angle = math.radians(heading + self.angle)
        dx = math.cos(rad_angle)
        dy = math.sin(rad_angle)

        length = 0
        end_x, end_y = x, y
        while length < self.max_length and track.is_road(end_x, end_y):
            length += self.step
            end_x = x + dx * length
            end_y = y + dy * length

        length = min(length, self.max_length)
        return RadarReading(self.angle, length, length < self.max_length, end_x, end_y)


class SensorArray:
    """A fixed fan of radars mounted at the car's reference point."""

    def __init__(self, angles=RADAR_ANGLES, max_length=RADAR_MAX_LENGTH, step=RADAR_STEP, offset=RADAR_OFFSET):
        if max_length <= 0 or step <= 0:
            raise ValueError("Radar max_length and step must be positive")
        self.radars = [Radar(angle, max_length, step) for angle in angles]
        self.max_length = max_length
        self.offset = offset

    def __len__(self):
        return len(self.radars)

    def reference_point(self, x, y, heading):
        rad_angle = math.radians(heading)
        return x + math.cos(rad_angle) * self.offset, y + math.sin(rad_angle) * self.offset

    def scan(self, track, x, y, heading):
        ox, oy = self.reference_point(x, y, heading)
        return [radar.probe(track, ox, oy, heading) for radar in self.radars]

    def normalize(self, readings):
        return [reading.length / self.max_length for reading in readings]
