"""
Chromosome persistence for the driving simulation.
Keeps the elite chromosomes of the latest generation in a JSON file so a new
training session can start from them.
"""
import json
import os

from .constants import STORAGE_DIR, STORAGE_KEY, STORAGE_PREFIX


class ChromosomeStore:
    def __init__(self, key=STORAGE_KEY, directory=STORAGE_DIR, log=print):
        self.key = f"{STORAGE_PREFIX}{key}"
        self.directory = directory
        self.log = log

    @property
    def filepath(self):
        return os.path.join(self.directory, f"{self.key}.json")

    def save(self, chromosomes):
        """Write the chromosomes, replacing whatever was stored before."""
        try:
            # Create the storage directory if it doesn't exist
            os.makedirs(self.directory, exist_ok=True)
            data = {'chromosomes': [list(map(float, c)) for c in chromosomes]}
            with open(self.filepath, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            return True
        except (OSError, TypeError, ValueError) as e:
            self.log(f"Error saving chromosomes: {e}")
            return False

    def load(self):
        """Stored chromosomes, or an empty list when nothing usable is stored."""
        if not os.path.exists(self.filepath):
            return []
        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
            chromosomes = data['chromosomes']
            if not isinstance(chromosomes, list):
                raise TypeError(f"expected a list of chromosomes, got {type(chromosomes).__name__}")
            return chromosomes
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.log(f"Error loading chromosomes: {e}")
            return []

    def clear(self):
        if os.path.exists(self.filepath):
            os.remove(self.filepath)
