"""

███████ ██ ███    ███ ██    ██ ██       █████  ████████ ██  ██████  ███    ██          ██████  ██████  ██████  ███████    ██████  ██    ██ 
██      ██ ████  ████ ██    ██ ██      ██   ██    ██    ██ ██    ██ ████   ██         ██      ██    ██ ██   ██ ██         ██   ██  ██  ██  
███████ ██ ██ ████ ██ ██    ██ ██      ███████    ██    ██ ██    ██ ██ ██  ██         ██      ██    ██ ██████  █████      ██████    ████   
     ██ ██ ██  ██  ██ ██    ██ ██      ██   ██    ██    ██ ██    ██ ██  ██ ██         ██      ██    ██ ██   ██ ██         ██         ██    
███████ ██ ██      ██  ██████  ███████ ██   ██    ██    ██  ██████  ██   ████ ███████  ██████  ██████  ██   ██ ███████ ██ ██         ██    
                                                                                                                                           
                                                                                                                                           
Core simulation logic and the generational training loop.
Owns the population, ticks every car until the whole generation has stopped,
then scores, evolves and saves the elites.
"""

import random
from collections import deque

import torch

from .ai_models import PolicyNetwork, StandardPopulation, ExternalPolicy, policy_from_model
from .car import Car
from .config import TrainingConfig
from .constants import FITNESS_HISTORY_LENGTH
from .errors import InvalidChromosome
from .evolution import Evolution
from .fitness import calculate_fitness, rank_chromosomes
from .radar import SensorArray
from .storage import ChromosomeStore
from .track import Track


def build_sensors(radar_config):
    return SensorArray(radar_config.angles, radar_config.max_length, radar_config.step, radar_config.offset)


class SimulationCore:
    def __init__(self, config=None, track=None, store=None, source=None, log=print):
        """Initialize a training session. Configuration is validated before anything else."""
        self.config = (config if config is not None else TrainingConfig()).validate()
        config = self.config
        self.track = track if track is not None else Track.load(config.track_index, config.track_dir)
        self.log = log
        self.store = store if store is not None else ChromosomeStore(config.storage_key, config.storage_dir, log)
        self.source = source if source is not None else StandardPopulation()

        self._seed_random(config.seed)
        self.evolution = self._new_evolution()

        # Training state
        self.round = 1
        self.max_checkpoint_ever = 0
        self.stagnation_count = 0
        self.fitness_history = deque(maxlen=FITNESS_HISTORY_LENGTH)
        self.tick = 0
        self.cars = []
        self.networks = self._initial_networks()
        self.reset_cars()

    def _seed_random(self, seed):
        # Separate random sources so evolution stays reproducible under a fixed seed
        self.evolution_rng = random.Random(seed)
        self.spawn_rng = random.Random(None if seed is None else seed + 1)
        self.weight_generator = torch.Generator()
        if seed is not None:
            self.weight_generator.manual_seed(seed)
        else:
            self.weight_generator.seed()

    def _new_evolution(self):
        config = self.config
        return Evolution(config.population_count, config.keep_count, config.mutation_rate,
                         self.evolution_rng, config.average_speed_term)

    @property
    def is_stagnated(self):
        # Hypermutation only kicks in when enabled
        return self.config.hypermutation_enabled and self.stagnation_count >= self.config.stagnation_threshold

    @property
    def alive_count(self):
        return sum(1 for car in self.cars if car.is_running)

    def can_continue(self):
        return self.round < self.config.max_generation_iterations

    def _new_network(self):
        return PolicyNetwork(self.config.network_dimensions, self.weight_generator)

    def _initial_networks(self):
        """Random networks, then the external model and the stored elites on top."""
        networks = [self._new_network() for _ in range(self.config.population_count)]
        first_slot = 0
        if isinstance(self.source, ExternalPolicy):
            if list(self.source.dimensions) != list(self.config.network_dimensions):
                raise InvalidChromosome(
                    f"External model dimensions {list(self.source.dimensions)} do not match "
                    f"network dimensions {list(self.config.network_dimensions)}"
                )
            networks[0] = self.source.build()
            first_slot = 1

        stored = self.store.load()
        loaded = 0
        for network, chromosome in zip(networks[first_slot:], stored):
            try:
                network.deserialize(chromosome)
                loaded += 1
            except InvalidChromosome as e:
                # Keep the random weights for this slot
                self.log(f"Discarding stored chromosome: {e}")
        if loaded:
            self.log(f"Seeded {loaded} cars from {self.store.filepath}")
        return networks

    def reset_cars(self):
        """Put a fresh car on the start line for every network."""
        sensors = build_sensors(self.config.radar)
        self.cars = []
        for _ in self.networks:
            x, y = self.track.spawn_point(self.spawn_rng, self.config.spawn_jitter)
            self.cars.append(Car(x, y, 0.0, self.config.physics, sensors))
        self.tick = 0

    def step(self):
        """Advance every car by one tick."""
        config = self.config
        for car, network in zip(self.cars, self.networks):
            car.step(config.frame_duration, network, self.track, config.checkpoint_radius)
        self.tick += 1

    def run_generation(self, cancel_event=None):
        """
        Tick until every car has stopped. Returns False when cancelled; the
        generation is left as it was and a later call carries on from there.
        """
        max_ticks = self.config.max_ticks
        if self.tick == 0:
            self.log(f"=== Round {self.round} ===")
        while any(car.is_running for car in self.cars):
            # Cancellation is only honoured between ticks
            if cancel_event is not None and cancel_event.is_set():
                return False
            if max_ticks is not None and self.tick >= max_ticks:
                self.log(f"Tick limit reached, stopping {self.alive_count} cars")
                for car in self.cars:
                    if car.is_running:
                        car.shut_off()
                break
            self.step()
        return True

    def results(self):
        return [car.summary(network) for car, network in zip(self.cars, self.networks)]

    def evolve_and_save(self):
        """Score the finished generation, evolve the next one and save its elites."""
        config = self.config
        log = self.log
        log(f"=== Round {self.round} Results ===")

        results = self.results()
        ranked = rank_chromosomes(results, config.average_speed_term)
        avg_checkpoint = sum(c.highest_checkpoint for c in results) / len(results)
        cars_reached_goal = sum(1 for car in self.cars if car.has_reached_goal(self.track))
        leaders = ranked[:config.keep_count]
        avg_smallest_edge_distance = sum(c.smallest_edge_distance for c in leaders) / len(leaders)

        # Stagnation detection
        best_checkpoint = max(c.highest_checkpoint for c in results)
        was_stagnated = self.is_stagnated
        if best_checkpoint > self.max_checkpoint_ever:
            if was_stagnated:
                log("Hypermutation OFF - progress made!")
            log(f"NEW RECORD! Max Checkpoint: {best_checkpoint}")
            self.max_checkpoint_ever = best_checkpoint
            self.stagnation_count = 0
        else:
            self.stagnation_count += 1
            if config.hypermutation_enabled:
                if self.stagnation_count == config.stagnation_threshold:
                    log("PLATEAU DETECTED! Entering Hypermutation mode...")
                elif self.stagnation_count > config.stagnation_threshold:
                    log(f"Hypermutation active (stuck for {self.stagnation_count} gens)")

        log(f"Average checkpoint: {avg_checkpoint:.2f}")
        log(f"Cars reached goal: {cars_reached_goal}/{config.population_count}")
        log(f"Average smallest edge distance: {avg_smallest_edge_distance:.2f}")

        best_fitness = calculate_fitness(ranked[0], config.average_speed_term)
        offspring = self.evolution.execute(results, self.is_stagnated)
        self.store.save(offspring[:config.keep_count])

        self.fitness_history.append((self.round, best_fitness))
        log(f"Generation {self.round} evolved! Best fitness: {best_fitness:.2f}")

        self.networks = []
        for chromosome in offspring:
            network = self._new_network()
            network.deserialize(chromosome)
            self.networks.append(network)
        self.round += 1
        self.reset_cars()
        return best_fitness

    def train(self, cancel_event=None):
        """Run generations until max_generation_iterations is reached or training is cancelled."""
        while True:
            if not self.run_generation(cancel_event):
                self.log(f"Training paused during round {self.round}")
                break
            self.evolve_and_save()
            if not self.can_continue():
                break
        return list(self.fitness_history)

    def update_config(self, **changes):
        """
        Change settings between generations. The track, the store and the random
        sources follow their settings; the population is rebuilt when its size,
        the network shape or the store changes.
        """
        old_config = self.config
        new_config = old_config.updated(**changes)
        # Load first so a bad track leaves the session untouched
        track_changed = ((new_config.track_index, new_config.track_dir)
                         != (old_config.track_index, old_config.track_dir))
        if track_changed:
            self.track = Track.load(new_config.track_index, new_config.track_dir)
        self.config = new_config

        store_changed = ((new_config.storage_key, new_config.storage_dir)
                         != (old_config.storage_key, old_config.storage_dir))
        if store_changed:
            self.store = ChromosomeStore(new_config.storage_key, new_config.storage_dir, self.log)
        if new_config.seed != old_config.seed:
            self._seed_random(new_config.seed)

        generation = self.evolution.generation
        self.evolution = self._new_evolution()
        self.evolution.generation = generation

        rebuild = (store_changed
                   or new_config.population_count != old_config.population_count
                   or tuple(new_config.network_dimensions) != tuple(old_config.network_dimensions))
        if rebuild:
            self.networks = self._initial_networks()
        if rebuild or track_changed:
            self.reset_cars()
        self.log(f"Training config updated: {changes}")


def replay(source=None, config=None, track=None, store=None, cancel_event=None, log=print):
    """
    Drive a single model around the track and report how it did. Without an
    external model the best stored chromosome is used.
    """
    config = (config if config is not None else TrainingConfig()).validate()
    track = track if track is not None else Track.load(config.track_index, config.track_dir)

    if source is None or isinstance(source, StandardPopulation):
        store = store if store is not None else ChromosomeStore(config.storage_key, config.storage_dir, log)
        stored = store.load()
        if not stored:
            raise InvalidChromosome(f"No saved chromosomes in {store.filepath}")
        network = PolicyNetwork(config.network_dimensions)
        network.deserialize(stored[0], strict=True)
    else:
        network = policy_from_model(source).build()

    x, y = track.spawn_point()
    car = Car(x, y, 0.0, config.physics, build_sensors(config.radar))
    tick = 0
    while car.is_running:
        if cancel_event is not None and cancel_event.is_set():
            break
        if config.max_ticks is not None and tick >= config.max_ticks:
            car.shut_off()
            break
        car.step(config.frame_duration, network, track, config.checkpoint_radius)
        tick += 1

    result = car.summary(network)
    fitness = calculate_fitness(result, config.average_speed_term)
    log(f"Replay finished after {tick} ticks: checkpoint {result.highest_checkpoint}/{track.goal_index}, "
        f"fitness {fitness:.2f}")
    return result, fitness
