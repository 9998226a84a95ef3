"""
Exceptions raised at the configuration and chromosome boundaries.
"""


class ConfigurationError(ValueError):
    """Invalid population, keep count, network dimensions or physics constants."""


class InvalidChromosome(ValueError):
    """A chromosome that cannot be loaded into a policy network."""
