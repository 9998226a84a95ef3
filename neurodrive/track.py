"""
Track loading and collision surface for the driving simulation.
A track is a road mask rasterised from trackN.png plus the ordered checkpoint
list from trackN.json. The last checkpoint is the goal.
"""
import json
import math
import os

import numpy as np
import pygame

from .constants import TRACK_DIR, ROAD_COLOR, CHECKPOINT_RADIUS, SPAWN_JITTER
from .errors import ConfigurationError


class Track:
    def __init__(self, road_mask, checkpoints):
        # Indexed [x, y] like pygame.surfarray
        self.road_mask = np.asarray(road_mask, dtype=bool)
        self.road_mask.setflags(write=False)
        self.width, self.height = self.road_mask.shape
        self.checkpoints = [(float(cx), float(cy)) for cx, cy in checkpoints]

    @classmethod
    def from_mask(cls, road_mask, checkpoints):
        return cls(road_mask, checkpoints)

    @classmethod
    def load(cls, track_index, track_dir=TRACK_DIR, road_color=ROAD_COLOR):
        """Load track{index}.png and track{index}.json from track_dir."""
        image_path = os.path.join(track_dir, f"track{track_index}.png")
        data_path = os.path.join(track_dir, f"track{track_index}.json")

        try:
            surface = pygame.image.load(image_path)
            rgb = pygame.surfarray.array3d(surface)
            alpha = pygame.surfarray.array_alpha(surface)
            with open(data_path, 'r', encoding='utf-8') as f:
                checkpoints = json.load(f)["checkpoints"]
            r, g, b, a = road_color
            road_mask = (
                (rgb[:, :, 0] == r) & (rgb[:, :, 1] == g) & (rgb[:, :, 2] == b) & (alpha == a)
            )
            track = cls(road_mask, checkpoints)
        except (OSError, pygame.error, ValueError, KeyError, TypeError) as e:
            raise ConfigurationError(f"Could not load track {track_index} from {track_dir}: {e}") from e

        print(f"Track {track_index} loaded: {track.width}x{track.height}, "
              f"{len(track.checkpoints)} checkpoints, {int(road_mask.sum())} road pixels")
        return track

    @property
    def goal_index(self):
        return len(self.checkpoints) - 1

    def is_road(self, x, y):
        if x < 0 or x >= self.width or y < 0 or y >= self.height:
            return False
        return bool(self.road_mask[int(x), int(y)])

    def checkpoints_hit(self, x, y, radius=CHECKPOINT_RADIUS):
        """Indices of every checkpoint within radius of (x, y), in track order."""
        return [
            index for index, (cx, cy) in enumerate(self.checkpoints)
            if math.hypot(cx - x, cy - y) < radius
        ]

    def spawn_point(self, rng=None, jitter=SPAWN_JITTER):
        """Start on checkpoint 0 with a random vertical offset."""
        if not self.checkpoints:
            return self.width / 2, self.height / 2
        start_x, start_y = self.checkpoints[0]
        if rng is None or not jitter:
            return start_x, start_y
        return start_x, start_y + (rng.random() - 0.5) * jitter
