"""
Fitness scoring for evolved drivers.
One scoring function is shared by elitism and by best-fitness reporting so
both always agree on the ranking.
"""
import math
from dataclasses import dataclass, field
from typing import List

from .constants import (DISTANCE_WEIGHT, SURVIVAL_WEIGHT, WALL_PENALTY_WEIGHT, AVG_SPEED_WEIGHT,
                        CHECKPOINT_BASE_REWARD, CHECKPOINT_REWARD_GROWTH)


@dataclass
class RankableChromosome:
    """A chromosome together with the terminal statistics of the run that produced it."""
    chromosome: List[float]
    dimensions: List[int] = field(default_factory=list)
    highest_checkpoint: int = 0
    distance_covered: float = 0.0
    survival_time: float = 0.0
    wall_proximity_penalty: float = 0.0
    smallest_edge_distance: float = 0.0


def progressive_checkpoint_reward(checkpoints_passed):
    """
    Reward for passing checkpoints 1..n. Each checkpoint is worth 1.5x the
    previous one: 100, 150, 225, 337, 506, ...
    """
    total_reward = 0
    for i in range(1, checkpoints_passed + 1):
        total_reward += math.floor(CHECKPOINT_BASE_REWARD * CHECKPOINT_REWARD_GROWTH ** (i - 1))
    return total_reward


def calculate_fitness(c, average_speed_term=True):
    """Weighted fitness score, higher is better."""
    fitness = (
        c.distance_covered * DISTANCE_WEIGHT
        + progressive_checkpoint_reward(c.highest_checkpoint)
        + c.survival_time * SURVIVAL_WEIGHT
        + c.wall_proximity_penalty * WALL_PENALTY_WEIGHT
    )
    if average_speed_term:
        avg_speed = c.distance_covered / c.survival_time if c.survival_time > 0 else 0.0
        fitness += avg_speed * AVG_SPEED_WEIGHT
    return fitness


def rank_chromosomes(chromosomes, average_speed_term=True):
    """Best first. Ties keep their input order."""
    return sorted(chromosomes, key=lambda c: calculate_fitness(c, average_speed_term), reverse=True)
