import numpy as np
import pytest

from backpropnets.core.errors import InvalidTopology
from backpropnets.core.network import Network, new_network


@pytest.mark.parametrize("topology", [[1, 1], [2, 4, 1], [3, 5, 2, 4]])
def test_layers_follow_topology(topology):
    net = new_network(topology, seed=0)
    assert len(net.layers) == len(topology)
    for idx, size in enumerate(topology):
        layer = net.layers[idx]
        assert len(layer) == size + 1
        expected = topology[idx + 1] if idx + 1 < len(topology) else 0
        for neuron in layer:
            assert len(neuron.outgoing_connections) == expected


def test_connections_start_uniform_without_momentum():
    net = new_network([3, 5, 2], seed=1)
    for layer in net.layers[:-1]:
        for neuron in layer:
            for connection in neuron.outgoing_connections:
                assert 0.0 <= connection.weight < 1.0
                assert connection.delta_weight == 0.0


def test_bias_is_last_neuron_with_unit_output():
    net = new_network([2, 3, 1], seed=0)
    for layer in net.layers:
        assert layer.bias.is_bias
        assert layer.bias.index == len(layer) - 1
        assert layer[-1].output_value == 1.0
        assert not any(neuron.is_bias for neuron in layer[:-1])


def test_neuron_index_is_its_position():
    net = new_network([4, 2], seed=0)
    assert [neuron.index for neuron in net.layers[0]] == list(range(5))
    with pytest.raises(IndexError):
        net.layers[0][5]


@pytest.mark.parametrize(
    "topology",
    [[], [3], [2, 0, 1], [2, -1], [2, 1.5], [2, True], "ab", None],
)
def test_invalid_topology_is_rejected(topology):
    with pytest.raises(InvalidTopology):
        new_network(topology)


def test_seed_controls_initial_weights():
    first = new_network([2, 4, 1], seed=5).state_dict()
    second = Network([2, 4, 1], rng=np.random.default_rng(5)).state_dict()
    other = new_network([2, 4, 1], seed=6).state_dict()
    assert np.array_equal(first["W0"], second["W0"])
    assert np.array_equal(first["W1"], second["W1"])
    assert not np.array_equal(first["W0"], other["W0"])


def test_layer_arrays_are_read_only():
    net = new_network([2, 1], seed=0)
    with pytest.raises(ValueError):
        net.layers[0].outputs[-1] = 0.0
    with pytest.raises(ValueError):
        net.layers[0].weights[0, 0] = 0.0
    assert net.layers[0].bias.output_value == 1.0


def test_load_state_dict_validates_before_applying():
    net = new_network([2, 3, 1], seed=0)
    before = net.state_dict()
    bad = {"W0": np.zeros((3, 3)), "W1": np.zeros((2, 1))}
    with pytest.raises(ValueError):
        net.load_state_dict(bad)
    assert np.array_equal(net.state_dict()["W0"], before["W0"])
    with pytest.raises(KeyError):
        net.load_state_dict({"W0": np.zeros((3, 3))})


def test_load_state_dict_resets_missing_momentum():
    net = new_network([1, 1], seed=0)
    net.load_state_dict({"W0": [[0.5], [0.25]], "dW0": [[0.1], [0.2]]})
    assert net.layers[0][0].outgoing_connections[0].delta_weight == pytest.approx(0.1)
    net.load_state_dict({"W0": [[0.5], [0.25]]})
    assert net.layers[0].delta_weights.sum() == 0.0


def test_parameter_count_and_layer_sizes():
    net = new_network([2, 4, 1], seed=0)
    assert net.layer_sizes() == [3, 5, 2]
    assert net.parameter_count() == 3 * 4 + 5 * 1


def test_rng_and_seed_are_mutually_exclusive():
    with pytest.raises(TypeError):
        Network([1, 1], rng=np.random.default_rng(0), seed=1)
