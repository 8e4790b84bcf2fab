"""
Module interface shared by every network component.

A module caches the results of its last forward and backward passes and
exposes them through `output()` and `input_grad()`. The arrays returned
are the module's own buffers: they stay valid only until the next call to
`forward` (for `output()`) or `backward` (for `input_grad()`) overwrites
them. Copy them if the values must outlive the next pass.

Gradients computed by `backward` are *added* to per-parameter accumulators,
so several forward/backward pairs can be run over a mini-batch before one
call to a step function. Accumulators are only cleared by `zero_grad`.
"""

from abc import ABC, abstractmethod

import numpy as np

from .random_source import RandomSource


class Module(ABC):
    """
    Abstract base class for all layers and layer containers.

    Calls on one instance must be strictly sequential; modules hold mutable
    buffers and perform no synchronization.
    """

    @abstractmethod
    def forward(self, inputs: np.ndarray) -> None:
        """Activates the module. Results are read back with `output()`."""

    @abstractmethod
    def backward(self, output_gradient: np.ndarray) -> None:
        """
        Backpropagates the gradient of the loss with respect to this module's output.

        Must follow a matching `forward` call. The gradient with respect to the
        input is read back with `input_grad()`.
        """

    @abstractmethod
    def zero_grad(self) -> None:
        """Resets the accumulated parameter gradients to zero."""

    @abstractmethod
    def step_grad(self, learning_rate: float) -> None:
        """Gradient descent step: param -= learning_rate * accumulated gradient."""

    @abstractmethod
    def step_grad_rms_prop(self, learning_rate: float, history_influence: float,
                           smoothing_term: float) -> None:
        """
        RMSProp step using the accumulated gradient.

        history = history_influence * history + (1 - history_influence) * grad^2
        param  -= learning_rate / sqrt(history + smoothing_term) * grad
        """

    @abstractmethod
    def init_weights(self, random: RandomSource) -> None:
        """Draws initial parameter values from `random`."""

    @abstractmethod
    def output(self) -> np.ndarray:
        """Activation results from the last call to `forward`."""

    @abstractmethod
    def input_grad(self) -> np.ndarray:
        """Gradient of the loss with respect to the inputs from the last call to `backward`."""

    def num_params(self) -> int:
        """Number of trainable parameters. Modules without parameters keep the default of 0."""
        return 0
