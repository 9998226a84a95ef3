"""

 █████  ██         ███    ███  ██████  ██████  ███████ ██      ███████    ██████  ██    ██ 
██   ██ ██         ████  ████ ██    ██ ██   ██ ██      ██      ██         ██   ██  ██  ██  
███████ ██         ██ ████ ██ ██    ██ ██   ██ █████   ██      ███████    ██████    ████   
██   ██ ██         ██  ██  ██ ██    ██ ██   ██ ██      ██           ██    ██         ██    
██   ██ ██ ███████ ██      ██  ██████  ██████  ███████ ███████ ███████ ██ ██         ██    
                                                                                           
                                                                                           

AI models for the driving simulation.
Contains the policy network that maps radar readings to driving controls,
its flat chromosome encoding and the sources a population can be seeded from.
"""

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass

import torch
import torch.nn as nn

from .constants import EXTERNAL_MODEL_DIMENSIONS
from .errors import ConfigurationError, InvalidChromosome


def check_dimensions(dimensions):
    """Validate a layer size list such as [5, 4, 3]."""
    try:
        dims = list(dimensions)
    except TypeError:
        raise ConfigurationError(f"Network dimensions must be a list of sizes, got {dimensions!r}")
    if len(dims) < 2:
        raise ConfigurationError(f"Network needs at least an input and an output size, got {dims}")
    for size in dims:
        if isinstance(size, bool) or not isinstance(size, numbers.Integral) or size < 1:
            raise ConfigurationError(f"Invalid layer size {size!r} in {dims}")
    return [int(size) for size in dims]


def validate_chromosome(chromosome):
    """Return the genes of a chromosome as floats, or raise InvalidChromosome."""
    if isinstance(chromosome, Mapping):
        chromosome = chromosome.get("chromosome")
    elif hasattr(chromosome, "chromosome"):
        chromosome = chromosome.chromosome
    if chromosome is None or isinstance(chromosome, (str, bytes)) or not hasattr(chromosome, "__iter__"):
        raise InvalidChromosome(f"Chromosome is not iterable: {type(chromosome).__name__}")
    genes = []
    for index, gene in enumerate(chromosome):
        if isinstance(gene, bool) or not isinstance(gene, numbers.Real):
            raise InvalidChromosome(f"Gene {index} is not a number: {gene!r}")
        value = float(gene)
        if not math.isfinite(value):
            raise InvalidChromosome(f"Gene {index} is not finite: {value}")
        genes.append(value)
    return genes


class PolicyNetwork(nn.Module):
    """Feedforward tanh network without biases. Evolved, never trained by gradients."""

    def __init__(self, dimensions, generator=None):
        super(PolicyNetwork, self).__init__()
        self.dimensions = check_dimensions(dimensions)
        # float64 keeps serialize/deserialize lossless for Python floats
        self.layers = nn.ModuleList(
            nn.Linear(n_in, n_out, bias=False, dtype=torch.float64)
            for n_in, n_out in zip(self.dimensions[:-1], self.dimensions[1:])
        )
        for layer in self.layers:
            layer.weight.requires_grad_(False)
        self.randomize_weights(generator)

        # Preallocated buffers reused on every tick
        self._input_buffer = torch.zeros(self.dimensions[0], dtype=torch.float64)
        self.layer_outputs = [torch.zeros(layer.out_features, dtype=torch.float64) for layer in self.layers]
        self.inputs = [0.0] * self.dimensions[0]

    def randomize_weights(self, generator=None):
        with torch.no_grad():
            for layer in self.layers:
                layer.weight.uniform_(-1, 1, generator=generator)

    @property
    def gene_count(self):
        return sum(layer.weight.numel() for layer in self.layers)

    def forward(self, x):
        for layer in self.layers:
            x = torch.tanh(layer(x))
        return x

    def feed_forward(self, inputs):
        """
        Map radar measurements to the control vector.
        Missing inputs count as zero and surplus inputs are ignored. Every
        layer's output stays available in layer_outputs for HUD display.
        """
        buffer = self._input_buffer
        buffer.zero_()
        count = min(len(inputs), buffer.shape[0])
        if count:
            buffer[:count] = torch.as_tensor(list(inputs[:count]), dtype=torch.float64)
        self.inputs = buffer.tolist()

        x = buffer
        with torch.no_grad():
            for layer, out in zip(self.layers, self.layer_outputs):
                torch.tanh(torch.mv(layer.weight, x), out=out)
                x = out
        return x.tolist()

    def serialize(self):
        """Flatten all weights: layer by layer, output neuron by output neuron."""
        return torch.cat([layer.weight.detach().reshape(-1) for layer in self.layers]).tolist()

    def deserialize(self, chromosome, strict=False):
        """
        Overwrite the weights from a chromosome in serialize() order.
        A short chromosome only replaces the leading weights unless strict is set,
        in which case the length has to match gene_count exactly.
        """
        genes = validate_chromosome(chromosome)
        if strict and len(genes) != self.gene_count:
            raise InvalidChromosome(
                f"Chromosome has {len(genes)} genes, network {self.dimensions} needs {self.gene_count}"
            )
        offset = 0
        with torch.no_grad():
            for layer in self.layers:
                if offset >= len(genes):
                    break
                flat = layer.weight.view(-1)
                chunk = genes[offset:offset + flat.numel()]
                flat[:len(chunk)] = torch.tensor(chunk, dtype=torch.float64)
                offset += flat.numel()


@dataclass(frozen=True)
class StandardPopulation:
    """Random networks, seeded from the chromosome store when it has entries."""


@dataclass(frozen=True)
class ExternalPolicy:
    """A user supplied model, already validated."""
    dimensions: tuple
    chromosome: tuple

    def build(self):
        network = PolicyNetwork(self.dimensions)
        network.deserialize(self.chromosome, strict=True)
        return network


def policy_from_model(model):
    """Turn a gene list or a {"dimensions", "chromosome"} blob into an ExternalPolicy."""
    if isinstance(model, ExternalPolicy):
        return model
    if isinstance(model, Mapping):
        chromosome = model.get("chromosome")
        dimensions = model.get("dimensions") or EXTERNAL_MODEL_DIMENSIONS
    else:
        chromosome = model
        dimensions = EXTERNAL_MODEL_DIMENSIONS

    genes = validate_chromosome(chromosome)
    try:
        dims = check_dimensions(dimensions)
    except ConfigurationError as e:
        raise InvalidChromosome(str(e)) from e
    policy = ExternalPolicy(tuple(dims), tuple(genes))
    # Shape check happens here rather than at first use
    expected = sum(a * b for a, b in zip(dims[:-1], dims[1:]))
    if len(genes) != expected:
        raise InvalidChromosome(f"Chromosome has {len(genes)} genes, network {dims} needs {expected}")
    return policy
