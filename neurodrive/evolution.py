"""


███████ ██    ██  ██████  ██      ██    ██ ████████ ██  ██████  ███    ██    ██████  ██    ██ 
██      ██    ██ ██    ██ ██      ██    ██    ██    ██ ██    ██ ████   ██    ██   ██  ██  ██  
█████   ██    ██ ██    ██ ██      ██    ██    ██    ██ ██    ██ ██ ██  ██    ██████    ████   
██       ██  ██  ██    ██ ██      ██    ██    ██    ██ ██    ██ ██  ██ ██    ██         ██    
███████   ████    ██████  ███████  ██████     ██    ██  ██████  ██   ████ ██ ██         ██    
                                                                                              
                                                                                              

Evolution engine for the AI driving simulation.
Contains the genetic algorithm operators: elitism, single-point crossover,
adaptive mutation and stagnation-triggered hypermutation with immigrants.
"""

import math
import random

from .constants import *
from .fitness import rank_chromosomes


def gaussian(rng):
    """Standard normal sample (Box-Muller)."""
    u = 0.0
    v = 0.0
    while u == 0.0:
        u = rng.random()
    while v == 0.0:
        v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def random_chromosome(length, rng):
    return [rng.uniform(-1, 1) for _ in range(length)]


def clamp(value, low=-1.0, high=1.0):
    return max(low, min(high, value))


class Evolution:
    def __init__(self, population_count, keep_count, mutation_rate=MUTATION_RATE, rng=None,
                 average_speed_term=True):
        self.population_count = population_count
        self.keep_count = keep_count
        self.mutation_rate = mutation_rate
        self.rng = rng if rng is not None else random.Random()
        self.average_speed_term = average_speed_term
        self.generation = 0

    def mutation_parameters(self, is_stagnated=False):
        """Current (rate, strength, replacement_chance); both decay as generations pass."""
        g = self.generation
        rate = max(self.mutation_rate * MIN_RATE_FACTOR, self.mutation_rate / (1 + RATE_DECAY * g))
        strength = max(MIN_MUTATION_STRENGTH, BASE_MUTATION_STRENGTH / (1 + STRENGTH_DECAY * g))
        replacement_chance = REPLACEMENT_CHANCE
        if is_stagnated:
            # Hypermutation
            rate = min(HYPERMUTATION_CAP, rate * HYPERMUTATION_RATE_FACTOR)
            strength = min(HYPERMUTATION_CAP, strength * HYPERMUTATION_STRENGTH_FACTOR)
            replacement_chance = HYPERMUTATION_REPLACEMENT_CHANCE
        return rate, strength, replacement_chance

    def execute(self, rankable_chromosomes, is_stagnated=False):
        """Build the next generation: exactly population_count chromosomes, elites first."""
        if not rankable_chromosomes:
            raise ValueError("Evolution needs at least one ranked chromosome")

        ranked = rank_chromosomes(rankable_chromosomes, self.average_speed_term)
        elites = [list(c.chromosome) for c in ranked[:self.keep_count]]
        offspring = [list(c) for c in elites]
        gene_count = len(elites[0])

        # Random immigrants bring fresh genes in when progress stalls
        if is_stagnated:
            immigrant_count = int((self.population_count - self.keep_count) * IMMIGRANT_RATIO)
            for _ in range(immigrant_count):
                if len(offspring) >= self.population_count:
                    break
                offspring.append(random_chromosome(gene_count, self.rng))

        # Cross over
        while len(offspring) < self.population_count:
            parent1, parent2 = self._pick_parents(elites)
            split_index = self.rng.randrange(len(parent1)) if parent1 else 0
            offspring.append(parent1[:split_index] + parent2[split_index:])

        # Mutation (elites stay untouched)
        rate, strength, replacement_chance = self.mutation_parameters(is_stagnated)
        for child in offspring[len(elites):]:
            self._mutate(child, rate, strength, replacement_chance)

        self.generation += 1

        if len(offspring) != self.population_count:
            raise RuntimeError("Offspring length is not equal to population count")
        return offspring

    def _pick_parents(self, elites):
        first = self.rng.randrange(len(elites))
        if len(elites) == 1:
            return elites[first], elites[first]
        second = self.rng.randrange(len(elites) - 1)
        if second >= first:
            second += 1
        return elites[first], elites[second]

    def _mutate(self, chromosome, rate, strength, replacement_chance):
        rng = self.rng
        for i in range(len(chromosome)):
            if rng.random() >= rate:
                continue
            if rng.random() < replacement_chance:
                chromosome[i] = rng.uniform(-1, 1)
            else:
                chromosome[i] = clamp(chromosome[i] + gaussian(rng) * strength)
