import numpy as np
import logging

from .activations import LogisticSigmoid, UnitStep
from .layer import FullyConnected
from .module import Module
from .random_source import RandomSource
from .sequence import Sequence


class XorNet(Module):
    """
    Small 2-2-1 network for learning the XOR function.

    By default both layers use the logistic sigmoid so the network can be
    trained. `set_correct_weights` replaces them with unit-step layers whose
    weights compute XOR exactly.
    """

    def __init__(self):
        self.hidden_layer = FullyConnected(2, 2, activation=LogisticSigmoid(), id=0)
        self.output_layer = FullyConnected(2, 1, activation=LogisticSigmoid(), id=1)
        self.sequence = Sequence([self.hidden_layer, self.output_layer])

    def set_correct_weights(self):
        """Instead of training, set up known good weights."""
        hidden_layer = FullyConnected(2, 2, activation=UnitStep(), id=0)
        output_layer = FullyConnected(2, 1, activation=UnitStep(), id=1)

        # Hidden unit 0 fires for "a OR b", unit 1 for "NOT (a AND b)"
        hidden_layer.weights[...] = np.array([[2, 2], [-2, -2]])
        hidden_layer.bias[...] = np.array([-1, 3])

        # Output fires only when both hidden units fire
        output_layer.weights[...] = np.array([[1, 1]])
        output_layer.bias[...] = np.array([-2])

        self.hidden_layer = hidden_layer
        self.output_layer = output_layer
        self.sequence = Sequence([hidden_layer, output_layer])
        logging.info("XorNet: using hand-set unit-step weights.")

    def forward(self, inputs: np.ndarray) -> None:
        self.sequence.forward(inputs)

    def backward(self, output_gradient: np.ndarray) -> None:
        self.sequence.backward(output_gradient)

    def zero_grad(self) -> None:
        self.sequence.zero_grad()

    def step_grad(self, learning_rate: float) -> None:
        self.sequence.step_grad(learning_rate)

    def step_grad_rms_prop(self, learning_rate: float, history_influence: float,
                           smoothing_term: float) -> None:
        self.sequence.step_grad_rms_prop(learning_rate, history_influence, smoothing_term)

    def init_weights(self, random: RandomSource) -> None:
        self.sequence.init_weights(random)

    def output(self) -> np.ndarray:
        return self.sequence.output()

    def input_grad(self) -> np.ndarray:
        return self.sequence.input_grad()

    def num_params(self) -> int:
        return self.sequence.num_params()
