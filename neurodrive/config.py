"""
Training session configuration.
Collects the defaults from constants.py into one object that is validated
before any generation runs. Can be read from a JSON file.
"""
import json
from dataclasses import dataclass, field, asdict, fields, replace

from .constants import *
from .ai_models import check_dimensions
from .errors import ConfigurationError


@dataclass
class PhysicsConfig:
    max_speed: float = MAX_SPEED
    slipping_speed_ratio: float = SLIPPING_SPEED_RATIO
    deceleration: float = DECELERATION
    acceleration: float = ACCELERATION
    brake_multiplier: float = BRAKE_MULTIPLIER
    brake_threshold: float = BRAKE_THRESHOLD
    turn_gain: float = TURN_GAIN
    coast_decay: float = COAST_DECAY

    @property
    def slipping_speed(self):
        return self.max_speed * self.slipping_speed_ratio


@dataclass
class RadarConfig:
    angles: tuple = RADAR_ANGLES
    max_length: float = RADAR_MAX_LENGTH
    step: float = RADAR_STEP
    offset: float = RADAR_OFFSET


@dataclass
class TrainingConfig:
    network_dimensions: tuple = NETWORK_DIMENSIONS
    population_count: int = POPULATION_SIZE
    keep_count: int = KEEP_COUNT
    mutation_rate: float = MUTATION_RATE
    hypermutation_enabled: bool = HYPERMUTATION_ENABLED
    max_generation_iterations: int = MAX_GENERATION_ITERATIONS
    stagnation_threshold: int = STAGNATION_THRESHOLD

    track_index: int = 0
    track_dir: str = TRACK_DIR
    storage_dir: str = STORAGE_DIR
    storage_key: str = STORAGE_KEY
    seed: int = None

    frame_duration: float = FRAME_DURATION
    max_ticks: int = MAX_TICKS
    checkpoint_radius: float = CHECKPOINT_RADIUS
    spawn_jitter: float = SPAWN_JITTER
    average_speed_term: bool = True

    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    radar: RadarConfig = field(default_factory=RadarConfig)

    def validate(self):
        """Raise ConfigurationError for any combination the trainer cannot run."""
        self.network_dimensions = tuple(check_dimensions(self.network_dimensions))
        if self.population_count < 1:
            raise ConfigurationError("Population must contain at least one car")
        if self.keep_count < 1:
            raise ConfigurationError(f"keep_count must be at least 1, got {self.keep_count}")
        if self.keep_count >= self.population_count:
            raise ConfigurationError(
                f"keep_count ({self.keep_count}) must be smaller than population_count ({self.population_count})"
            )
        if not 0 <= self.mutation_rate <= 1:
            raise ConfigurationError(f"mutation_rate must lie in [0, 1], got {self.mutation_rate}")
        if self.max_generation_iterations < 1:
            raise ConfigurationError("max_generation_iterations must be at least 1")
        if self.stagnation_threshold < 1:
            raise ConfigurationError("stagnation_threshold must be at least 1")
        if self.frame_duration <= 0:
            raise ConfigurationError("frame_duration must be positive")
        if self.max_ticks is not None and self.max_ticks < 1:
            raise ConfigurationError("max_ticks must be positive or None")

        physics = self.physics
        if physics.max_speed <= 0:
            raise ConfigurationError("max_speed must be positive")
        if not 0 <= physics.slipping_speed_ratio <= 1:
            raise ConfigurationError("slipping_speed_ratio must lie in [0, 1]")
        if physics.deceleration < 0 or physics.acceleration < 0 or physics.brake_multiplier < 0:
            raise ConfigurationError("deceleration, acceleration and brake_multiplier cannot be negative")
        if not 0 <= physics.coast_decay <= 1:
            raise ConfigurationError("coast_decay must lie in [0, 1]")

        radar = self.radar
        if not radar.angles:
            raise ConfigurationError("At least one radar angle is required")
        if radar.max_length <= 0 or radar.step <= 0:
            raise ConfigurationError("Radar max_length and step must be positive")
        return self

    @classmethod
    def from_dict(cls, data):
        data = dict(data)
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        radar_data = dict(data.pop("radar", {}))
        if "angles" in radar_data:
            radar_data["angles"] = tuple(radar_data["angles"])
        try:
            physics = PhysicsConfig(**data.pop("physics", {}))
            radar = RadarConfig(**radar_data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid physics or radar settings: {e}") from e
        if "network_dimensions" in data:
            data["network_dimensions"] = tuple(data["network_dimensions"])
        return cls(physics=physics, radar=radar, **data)

    @classmethod
    def from_file(cls, path):
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Could not parse {path}: {e}") from e
        return cls.from_dict(data)

    def to_dict(self):
        return asdict(self)

    def updated(self, **changes):
        """Copy with some fields replaced, validated."""
        return replace(self, **changes).validate()
