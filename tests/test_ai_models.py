import math

import pytest
import torch

from neurodrive.ai_models import (PolicyNetwork, ExternalPolicy, check_dimensions, policy_from_model,
                                  validate_chromosome)
from neurodrive.errors import ConfigurationError, InvalidChromosome
from neurodrive.fitness import RankableChromosome


def test_serialize_round_trip_is_exact():
    generator = torch.Generator().manual_seed(3)
    network = PolicyNetwork([5, 4, 3], generator)
    chromosome = network.serialize()
    assert len(chromosome) == 5 * 4 + 4 * 3 == network.gene_count

    copy = PolicyNetwork([5, 4, 3])
    copy.deserialize(chromosome)
    assert copy.serialize() == chromosome


def test_gene_order_is_layer_then_output_then_input():
    network = PolicyNetwork([2, 2, 1])
    network.deserialize([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    assert network.layers[0].weight.tolist() == [[1.0, 2.0], [3.0, 4.0]]
    assert network.layers[1].weight.tolist() == [[5.0, 6.0]]


def test_initial_weights_in_unit_range():
    network = PolicyNetwork([5, 4, 3])
    assert all(-1.0 <= w <= 1.0 for w in network.serialize())


def test_zero_network_outputs_zero():
    network = PolicyNetwork([5, 4, 2])
    network.deserialize([0.0] * 28)
    assert network.feed_forward([0, 0, 0, 0, 0]) == [0.0, 0.0]


def test_feed_forward_single_layer():
    network = PolicyNetwork([2, 1])
    network.deserialize([0.5, -0.25])
    assert network.feed_forward([1.0, 0.0]) == pytest.approx([math.tanh(0.5)])
    assert network.feed_forward([1.0, 2.0]) == pytest.approx([0.0])


def test_feed_forward_pads_and_truncates_inputs():
    network = PolicyNetwork([2, 1])
    network.deserialize([0.5, -0.25])
    expected = network.feed_forward([1.0, 0.0])
    assert network.feed_forward([1.0]) == expected
    assert network.feed_forward([1.0, 0.0, 9.0]) == expected
    assert network.inputs == [1.0, 0.0]


def test_layer_outputs_are_kept():
    network = PolicyNetwork([3, 4, 2])
    outputs = network.feed_forward([0.2, 0.4, 0.6])
    assert [len(o) for o in network.layer_outputs] == [4, 2]
    assert network.layer_outputs[-1].tolist() == outputs
    assert all(-1.0 <= v <= 1.0 for v in outputs)


def test_forward_matches_feed_forward():
    network = PolicyNetwork([3, 4, 2])
    inputs = [0.1, 0.5, 0.9]
    with torch.no_grad():
        tensor_out = network(torch.tensor(inputs, dtype=torch.float64)).tolist()
    assert tensor_out == pytest.approx(network.feed_forward(inputs))


def test_short_chromosome_keeps_remaining_weights():
    network = PolicyNetwork([5, 4, 3])
    before = network.serialize()
    network.deserialize([0.5, 0.5])
    after = network.serialize()
    assert after[:2] == [0.5, 0.5]
    assert after[2:] == before[2:]


def test_strict_deserialize_rejects_wrong_length():
    network = PolicyNetwork([5, 4, 3])
    with pytest.raises(InvalidChromosome):
        network.deserialize([0.5, 0.5], strict=True)


@pytest.mark.parametrize("bad", ["abc", None, 5, [1.0, "x"], [float("nan")], [float("inf")], [True],
                                 {"chromosome": 5}])
def test_invalid_chromosomes_raise(bad):
    network = PolicyNetwork([2, 1])
    before = network.serialize()
    with pytest.raises(InvalidChromosome):
        network.deserialize(bad)
    assert network.serialize() == before


def test_deserialize_accepts_mapping_and_rankable():
    network = PolicyNetwork([2, 1])
    network.deserialize({"chromosome": [0.1, 0.2]})
    assert network.serialize() == [0.1, 0.2]
    network.deserialize(RankableChromosome(chromosome=[0.3, 0.4], dimensions=[2, 1]))
    assert network.serialize() == [0.3, 0.4]


def test_validate_chromosome_returns_floats():
    assert validate_chromosome((1, 2.5)) == [1.0, 2.5]


@pytest.mark.parametrize("dims", [[5], [5, 0], [5, "a"], [5, 2.5], 7])
def test_bad_dimensions(dims):
    with pytest.raises(ConfigurationError):
        check_dimensions(dims)


def test_policy_from_bare_list_uses_default_dimensions():
    policy = policy_from_model([0.0] * 28)
    assert isinstance(policy, ExternalPolicy)
    assert policy.dimensions == (5, 4, 2)
    assert policy.build().feed_forward([1, 1, 1, 1, 1]) == [0.0, 0.0]


def test_policy_from_mapping():
    genes = [0.25] * 6
    policy = policy_from_model({"dimensions": [2, 2, 1], "chromosome": genes})
    assert policy.build().serialize() == genes


def test_policy_from_model_rejects_bad_shapes():
    with pytest.raises(InvalidChromosome):
        policy_from_model({"dimensions": [2, 2, 1], "chromosome": [0.1] * 5})
    with pytest.raises(InvalidChromosome):
        policy_from_model({"dimensions": [2], "chromosome": [0.1]})
    with pytest.raises(InvalidChromosome):
        policy_from_model({"weights": [0.1]})
