"""

 ██████  █████  ██████     ██████  ██    ██ 
██      ██   ██ ██   ██    ██   ██  ██  ██  
██      ███████ ██████     ██████    ████   
██      ██   ██ ██   ██    ██         ██    
 ██████ ██   ██ ██   ██ ██ ██         ██    
                                            
                                            
 
Car class and related functionality for the AI driving simulation.
Contains the kinematic vehicle model, its radar fan and the per-run
statistics that fitness is computed from.
"""

import math

from .config import PhysicsConfig
from .constants import CHECKPOINT_RADIUS, INITIAL_EDGE_DISTANCE
from .fitness import RankableChromosome
from .radar import SensorArray


class Car:
    def __init__(self, x, y, heading=0.0, physics=None, sensors=None):
        # Core state
        self.x = x
        self.y = y
        self.heading = heading  # degrees, y grows downwards
        self.speed = 0.0
        self.physics = physics if physics is not None else PhysicsConfig()

        # Sensors
        self.sensors = sensors if sensors is not None else SensorArray()
        self.radar_readings = []
        self.measurements = [0.0] * len(self.sensors)

        # Status
        self.is_running = True
        self.last_checkpoint_passed = 0
        self.smallest_edge_distance = INITIAL_EDGE_DISTANCE

        # Run statistics
        self.distance_covered = 0.0
        self.survival_time = 0.0
        self.wall_proximity_penalty = 0.0

        # Last controls, kept for display
        self.acceleration_output = 0.0
        self.steer_output = 0.0
        self.brake_output = 0.0

    def scan(self, track):
        """Probe the track with every radar and return normalized readings."""
        self.radar_readings = self.sensors.scan(track, self.x, self.y, self.heading)
        for reading in self.radar_readings:
            if reading.length < self.smallest_edge_distance:
                self.smallest_edge_distance = reading.length
        self.measurements = self.sensors.normalize(self.radar_readings)
        return self.measurements

    def steer_impact(self):
        """Steering authority, fading linearly once above the slipping speed."""
        slipping_speed = self.physics.slipping_speed
        if self.speed > slipping_speed:
            return 1 - (self.speed - slipping_speed) / self.physics.max_speed
        return 1.0

    def update(self, delta_time, controls=None):
        """Integrate one tick. controls is [accel, steer, brake]; missing entries count as 0."""
        physics = self.physics
        render_speed = delta_time * 60
        self.speed -= physics.deceleration

        if self.is_running:
            controls = list(controls or [])
            controls += [0.0] * (3 - len(controls))
            acceleration, steer, brake = controls[:3]
            self.acceleration_output = acceleration
            self.steer_output = steer
            self.brake_output = brake

            if brake > physics.brake_threshold:
                self.speed -= physics.deceleration * physics.brake_multiplier
            if acceleration > 0:
                self.speed += physics.acceleration

            # Clamp speed
            self.speed = max(0.0, min(self.speed, physics.max_speed))

            self.heading += steer * self.speed * self.steer_impact() * render_speed * physics.turn_gain
        else:
            # Coast to a stop once the engine is off
            self.speed -= physics.coast_decay * self.speed
            self.speed = max(0.0, self.speed)

        # Engine shuts off when the car stalls
        if self.speed <= 0 and self.is_running:
            self.speed = 0.0
            self.shut_off()

        # Move along the new heading
        radians = math.radians(self.heading)
        self.x += self.speed * render_speed * math.cos(radians)
        self.y += self.speed * render_speed * math.sin(radians)

        if self.is_running:
            self.distance_covered += abs(self.speed * render_speed)
            self.survival_time += delta_time
            self.wall_proximity_penalty += self._proximity_factor() * delta_time

    def _proximity_factor(self):
        """0 when every radar sees open road, 1 when all of them touch a wall."""
        if not self.radar_readings:
            return 0.0
        avg_length = sum(r.length for r in self.radar_readings) / len(self.radar_readings)
        return 1 - avg_length / self.sensors.max_length

    def step(self, delta_time, policy, track, checkpoint_radius=CHECKPOINT_RADIUS):
        """
        Sense, think, move, then check the road and the checkpoints. A car that
        stops during this tick still collects the checkpoints it reached.
        """
        was_running = self.is_running
        controls = None
        if was_running:
            controls = policy.feed_forward(self.scan(track))
        self.update(delta_time, controls)

        if self.is_running and not track.is_road(self.x, self.y):
            self.shut_off()
        if was_running:
            for checkpoint_id in track.checkpoints_hit(self.x, self.y, checkpoint_radius):
                self.hit_checkpoint(checkpoint_id)

    def hit_checkpoint(self, checkpoint_id):
        """Checkpoints count only in order; going back to an earlier one ends the run."""
        if checkpoint_id - self.last_checkpoint_passed == 1:
            self.last_checkpoint_passed = checkpoint_id
        elif checkpoint_id < self.last_checkpoint_passed:
            self.shut_off()

    def shut_off(self):
        self.is_running = False

    def has_reached_goal(self, track):
        return len(track.checkpoints) > 1 and self.last_checkpoint_passed == track.goal_index

    def summary(self, policy):
        """Freeze this run into the unit the evolution engine works on."""
        return RankableChromosome(
            chromosome=policy.serialize(),
            dimensions=list(policy.dimensions),
            highest_checkpoint=self.last_checkpoint_passed,
            distance_covered=self.distance_covered,
            survival_time=self.survival_time,
            wall_proximity_penalty=self.wall_proximity_penalty,
            smallest_edge_distance=self.smallest_edge_distance,
        )
