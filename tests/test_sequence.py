import numpy as np
import pytest

from nnets.activations import LogisticSigmoid, UnitStep
from nnets.layer import FullyConnected
from nnets.random_source import RandomSource
from nnets.sequence import Sequence
from nnets.xor_net import XorNet


@pytest.fixture
def layers():
    random = RandomSource(123)
    first = FullyConnected(3, 4, activation=LogisticSigmoid(), dtype=np.float64, id=0)
    second = FullyConnected(4, 2, activation='linear', dtype=np.float64, id=1)
    first.init_weights(random)
    second.init_weights(random)
    random.generate_uniform(first.bias, 0.1, 0.5)
    random.generate_uniform(second.bias, 0.1, 0.5)
    return first, second


def test_forward_backward_equals_manual_chaining(layers):
    first, second = layers
    net = Sequence([first, second])
    x = np.array([0.5, -1.0, 2.0])
    g = np.array([1.0, -0.5])

    net.forward(x)
    net_output = net.output().copy()
    net.backward(g)
    net_input_grad = net.input_grad().copy()
    net_weight_grads = first.weight_gradient.copy(), second.weight_gradient.copy()

    net.zero_grad()
    first.forward(x)
    second.forward(first.output())
    second.backward(g)
    first.backward(second.input_grad())

    np.testing.assert_allclose(net_output, second.output())
    np.testing.assert_allclose(net_input_grad, first.input_grad())
    np.testing.assert_allclose(net_weight_grads[0], first.weight_gradient)
    np.testing.assert_allclose(net_weight_grads[1], second.weight_gradient)


def test_output_and_input_grad_come_from_end_modules(layers):
    first, second = layers
    net = Sequence([first, second])
    net.forward(np.ones(3))
    net.backward(np.ones(2))
    assert net.output() is second.output()
    assert net.input_grad() is first.input_grad()


def test_operations_fan_out_to_every_module(layers):
    first, second = layers
    net = Sequence([first, second])
    net.forward(np.array([1.0, 2.0, 3.0]))
    net.backward(np.array([1.0, 1.0]))
    before = first.weights.copy(), second.weights.copy()

    net.step_grad(0.1)
    np.testing.assert_allclose(first.weights, before[0] - 0.1 * first.weight_gradient)
    np.testing.assert_allclose(second.weights, before[1] - 0.1 * second.weight_gradient)

    net.step_grad_rms_prop(0.01, 0.9, 1e-8)
    assert np.any(first.weight_gradient_history > 0.0)
    assert np.any(second.weight_gradient_history > 0.0)

    net.zero_grad()
    np.testing.assert_array_equal(first.weight_gradient, 0.0)
    np.testing.assert_array_equal(second.bias_gradient, 0.0)


def test_init_weights_reaches_every_module():
    first, second = FullyConnected(2, 3), FullyConnected(3, 1)
    Sequence([first, second]).init_weights(RandomSource(5))
    assert np.any(first.weights != 0.0)
    assert np.any(second.weights != 0.0)


def test_known_weights_compute_xor():
    hidden = FullyConnected(2, 2, activation=UnitStep())
    hidden.weights[...] = [[2, 2], [-2, -2]]
    hidden.bias[...] = [-1, 3]
    output = FullyConnected(2, 1, activation=UnitStep())
    output.weights[...] = [[1, 1]]
    output.bias[...] = [-2]
    net = Sequence([hidden, output])

    for x, expected in [((0, 0), 0), ((0, 1), 1), ((1, 0), 1), ((1, 1), 0)]:
        net.forward(np.array(x, dtype=np.float32))
        assert net.output()[0] == expected


def test_nested_sequences_and_shared_layers(layers):
    first, second = layers
    inner = Sequence([first])
    outer = Sequence([inner, second])
    flat = Sequence([first, second])
    x = np.array([0.1, 0.2, 0.3])

    outer.forward(x)
    nested_output = outer.output().copy()
    flat.forward(x)

    np.testing.assert_allclose(nested_output, flat.output())


def test_empty_sequence_raises():
    with pytest.raises(ValueError, match="at least one module"):
        Sequence([])


def test_container_protocol(layers):
    first, second = layers
    net = Sequence(iter([first, second]))
    assert len(net) == 2
    assert list(net) == [first, second]
    assert net[1] is second
    assert "Total Parameters: 26" in net.summary()


def test_summary_counts_parameters_of_nested_members(layers):
    first, second = layers
    outer = Sequence([Sequence([first]), second])
    assert outer.num_params() == 26
    assert "Total Parameters: 26" in outer.summary()

    with_xor = Sequence([first, second, XorNet()])
    assert with_xor.num_params() == 26 + 9
    assert "Total Parameters: 35" in with_xor.summary()
