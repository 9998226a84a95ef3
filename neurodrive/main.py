"""
Command line entry point for the neuroevolution trainer.

Usage:
    neurodrive --track 0 train --generations 20 --population 30 --seed 42
    neurodrive --track 0 replay best_model.json
"""

import argparse
import json
import signal
import sys
import threading

from .ai_models import policy_from_model
from .config import TrainingConfig
from .errors import ConfigurationError, InvalidChromosome
from .simulation_core import SimulationCore, replay


def build_config(args):
    config = TrainingConfig.from_file(args.config) if args.config else TrainingConfig()
    overrides = {
        'track_index': args.track,
        'track_dir': args.track_dir,
        'max_generation_iterations': getattr(args, 'generations', None),
        'population_count': getattr(args, 'population', None),
        'keep_count': getattr(args, 'keep', None),
        'seed': getattr(args, 'seed', None),
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    if getattr(args, 'no_hypermutation', False):
        config.hypermutation_enabled = False
    return config.validate()


def run_train(args):
    config = build_config(args)
    cancel_event = threading.Event()

    def _stop(signum, frame):
        print("Stopping after the current tick...")
        cancel_event.set()

    core = SimulationCore(config)
    signal.signal(signal.SIGINT, _stop)
    history = core.train(cancel_event)
    if history:
        generation, best_fitness = max(history, key=lambda item: item[1])
        print(f"Best fitness {best_fitness:.2f} in generation {generation}")
    return 0


def run_replay(args):
    config = build_config(args)
    source = None
    if args.model:
        with open(args.model, 'r', encoding='utf-8') as f:
            source = policy_from_model(json.load(f))
    replay(source, config)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Evolve neural drivers on a 2D track.")
    parser.add_argument("--config", help="JSON file with training settings")
    parser.add_argument("--track", type=int, default=None, help="Track index")
    parser.add_argument("--track-dir", default=None, help="Directory holding trackN.png and trackN.json")
    subparsers = parser.add_subparsers(dest="command")

    train_parser = subparsers.add_parser("train", help="Run the genetic algorithm")
    train_parser.add_argument("--generations", type=int, help="Maximum generation iterations")
    train_parser.add_argument("--population", type=int, help="Population size")
    train_parser.add_argument("--keep", type=int, help="Elites kept per generation")
    train_parser.add_argument("--seed", type=int, help="Random seed")
    train_parser.add_argument("--no-hypermutation", action="store_true", help="Disable hypermutation on plateaus")

    replay_parser = subparsers.add_parser("replay", help="Drive one saved or external model")
    replay_parser.add_argument("model", nargs="?", help="JSON model with 'chromosome' and 'dimensions'")

    args = parser.parse_args(argv)
    try:
        if args.command == "replay":
            return run_replay(args)
        return run_train(args)
    except (ConfigurationError, InvalidChromosome, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
