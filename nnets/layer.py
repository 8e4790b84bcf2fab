import numpy as np
from typing import Optional, Union
import logging

from .activations import Activation, get_activation
from .module import Module
from .random_source import RandomSource


class FullyConnected(Module):
    """
    Fully connected (dense) layer: an affine transform followed by an activation.

    Conceptually, a layer consists of multiple 'neurons', where each neuron
    computes a weighted sum of its inputs, adds a bias, and applies an activation
    function. This implementation works on one input vector at a time and
    computes all neurons at once with a matrix-vector product.

    Every buffer is allocated in __init__ and updated in place afterwards, so
    forward, backward and the step functions do not allocate.

    Key Attributes:
        weights (np.ndarray): Weight matrix of shape (output_size, input_size). Row j holds
                              the weights of neuron j, so weights[j, i] connects input i
                              to output j.
        bias (np.ndarray): Bias vector of shape (output_size,).
        activation_fn (Activation): The activation function applied element-wise to the
                                    potential.
        last_input (np.ndarray): The input of the last forward pass. When the caller passes
                                 an array of the layer's dtype this is the caller's array
                                 itself (not a copy); it must not be mutated before the
                                 matching backward pass.
        potential (np.ndarray): Weighted sum plus bias from the last forward pass.
        activations (np.ndarray): Activation output from the last forward pass.
        activation_derivative (np.ndarray): Activation derivative at `potential`, from the
                                            last backward pass.
        input_gradient (np.ndarray): Gradient of the loss w.r.t. the layer input, from the
                                     last backward pass. Shape: (input_size,).
        weight_gradient (np.ndarray): Accumulated gradients of the loss with respect to the
                                      weights. Shape: (output_size, input_size).
        bias_gradient (np.ndarray): Accumulated gradients of the loss with respect to the
                                    bias. Shape: (output_size,).
        weight_gradient_history, bias_gradient_history (np.ndarray): RMSProp running averages
                                    of the squared gradients. Not cleared by zero_grad.
    """

    def __init__(
        self,
        input_size: int,
        output_size: int,
        activation: Union[str, Activation, None] = 'relu',
        dtype=np.float32,
        id: int = 0,
    ):
        """
        Initializes the layer with zero weights and bias. Call `init_weights` to
        draw random weights.

        Args:
            input_size: Number of input features (size of the previous layer).
            output_size: Number of output features (number of conceptual neurons in this layer).
            activation: Activation function identifier (e.g., 'relu', 'sigmoid') or an
                        Activation instance. None means 'linear'.
            dtype: Floating point type of all buffers.
            id: An identifier for the layer (optional, for logging/debugging).

        Raises:
            ValueError: If a size is not positive.
        """
        if input_size <= 0 or output_size <= 0:
            raise ValueError(
                f"Layer {id}: input_size and output_size must be positive, "
                f"got {input_size} and {output_size}"
            )

        self.input_size = input_size
        self.output_size = output_size
        self.id = id
        self.dtype = np.dtype(dtype)

        # Build the activation function
        if isinstance(activation, str):
            self.activation_fn = get_activation(activation)
        elif isinstance(activation, Activation):
            self.activation_fn = activation
        elif activation is None:
            self.activation_fn = get_activation('linear')
        else:
            raise ValueError(f"Layer {id}: Invalid activation type '{type(activation)}'")

        weight_shape = (output_size, input_size)

        # Parameters
        self.weights = np.zeros(weight_shape, dtype=self.dtype)
        self.bias    = np.zeros(output_size, dtype=self.dtype)

        # Values computed during the forward pass
        self.last_input: Optional[np.ndarray] = None
        self.potential   = np.zeros(output_size, dtype=self.dtype)
        self.activations = np.zeros(output_size, dtype=self.dtype)

        # Values computed during the backward pass
        self.activation_derivative = np.zeros(output_size, dtype=self.dtype)
        self.input_gradient        = np.zeros(input_size, dtype=self.dtype)

        # Gradient accumulators and RMSProp state
        self.weight_gradient         = np.zeros(weight_shape, dtype=self.dtype)
        self.bias_gradient           = np.zeros(output_size, dtype=self.dtype)
        self.weight_gradient_history = np.zeros(weight_shape, dtype=self.dtype)
        self.bias_gradient_history   = np.zeros(output_size, dtype=self.dtype)

        # Scratch space: delta (dL/dPotential) and elementwise update terms
        self._delta          = np.zeros(output_size, dtype=self.dtype)
        self._weight_scratch = np.zeros(weight_shape, dtype=self.dtype)
        self._bias_scratch   = np.zeros(output_size, dtype=self.dtype)

        logging.debug(
            f"Layer #{self.id} created: input_size={input_size}, "
            f"output_size={output_size}, activation={self.activation_fn!r}, "
            f"dtype={self.dtype.name}, weight_shape={self.weights.shape}"
        )

    def forward(self, inputs: np.ndarray) -> None:
        """
        Performs the forward pass through the layer.

        Computes potential = W @ x + b, followed by activations = activation_fn(potential).

        Args:
            inputs: Input vector of shape (input_size,).
        """
        # No copy when inputs already has the layer's dtype
        x = np.asarray(inputs, dtype=self.dtype)
        self.last_input = x

        np.matmul(self.weights, x, out=self.potential)
        self.potential += self.bias
        self.activation_fn.forward(self.potential, out=self.activations)

    def backward(self, output_gradient: np.ndarray) -> None:
        """
        Performs the backward pass through the layer.

        Adds the gradients of the loss with respect to the weights and bias to the
        accumulators and computes the gradient with respect to the layer input,
        which is passed on to the previous layer.

        Args:
            output_gradient: Gradient of the loss with respect to the output activations
                             of this layer (dL/dA). Shape: (output_size,).

        Raises:
            RuntimeError: If forward pass hasn't been called.
        """
        if self.last_input is None:
            raise RuntimeError(f"Layer {self.id}: Must call forward() before backward().")

        g = np.asarray(output_gradient, dtype=self.dtype)

        # 1. dA/dZ at the cached potential, then delta = dL/dZ = dL/dA * dA/dZ
        self.activation_fn.derivative(self.potential, out=self.activation_derivative)
        np.multiply(g, self.activation_derivative, out=self._delta)

        # 2. dL/db = delta
        self.bias_gradient += self._delta

        # 3. dL/dW = outer(delta, x)
        np.multiply(self._delta[:, np.newaxis], self.last_input, out=self._weight_scratch)
        self.weight_gradient += self._weight_scratch

        # 4. dL/dX = delta @ W
        np.matmul(self._delta, self.weights, out=self.input_gradient)

    def zero_grad(self) -> None:
        """Resets the accumulated gradients for weights and bias to zero."""
        self.weight_gradient.fill(0.0)
        self.bias_gradient.fill(0.0)

    def step_grad(self, learning_rate: float) -> None:
        """
        Updates weights and bias with plain gradient descent.

        Applies the update rule: W = W - learning_rate * dL/dW
                                 b = b - learning_rate * dL/db

        Gradients are not reset; call zero_grad() before the next batch.
        """
        np.multiply(self.weight_gradient, learning_rate, out=self._weight_scratch)
        self.weights -= self._weight_scratch
        np.multiply(self.bias_gradient, learning_rate, out=self._bias_scratch)
        self.bias -= self._bias_scratch
        self._check_finite()

    def step_grad_rms_prop(self, learning_rate: float, history_influence: float,
                           smoothing_term: float) -> None:
        """
        Updates weights and bias with RMSProp.

        Args:
            learning_rate: The learning rate hyperparameter.
            history_influence: Decay of the running average of squared gradients, in [0, 1).
            smoothing_term: Strictly positive term added under the square root to keep the
                            division finite.

        Raises:
            ValueError: If smoothing_term is not positive.
        """
        if smoothing_term <= 0.0:
            raise ValueError(f"Layer {self.id}: smoothing_term must be positive, got {smoothing_term}")

        _rms_prop_update(self.weights, self.weight_gradient, self.weight_gradient_history,
                         self._weight_scratch, learning_rate, history_influence, smoothing_term)
        _rms_prop_update(self.bias, self.bias_gradient, self.bias_gradient_history,
                         self._bias_scratch, learning_rate, history_influence, smoothing_term)
        self._check_finite()

    def init_weights(self, random: RandomSource) -> None:
        """
        Draws weights from N(0, sqrt(2 / (input_size * output_size))).

        The bias is left unchanged.
        """
        stdev = np.sqrt(2.0 / (self.input_size * self.output_size))
        random.generate_normal(self.weights, 0.0, stdev)
        logging.debug(f"Layer #{self.id}: Initialized weights with normal distribution (stdev={stdev:.4f}).")

    def output(self) -> np.ndarray:
        return self.activations

    def input_grad(self) -> np.ndarray:
        return self.input_gradient

    def _check_finite(self):
        if not (np.all(np.isfinite(self.weights)) and np.all(np.isfinite(self.bias))):
            logging.warning(f"Layer {self.id}: NaN or Inf detected in parameters after update.")

    def num_params(self) -> int:
        """Number of trainable parameters (weights and bias)."""
        return self.weights.size + self.bias.size

    def summary(self) -> str:
        """Returns a string summary of the layer's configuration."""
        params = self.num_params()
        return (
            f"Layer Summary (id={self.id}):\n"
            f"  Type: Fully Connected\n"
            f"  Input size: {self.input_size}\n"
            f"  Output size: {self.output_size}\n"
            f"  Activation: {self.activation_fn!r}\n"
            f"  Weights shape: {self.weights.shape}\n"
            f"  Bias shape: {self.bias.shape}\n"
            f"  Parameters: {params:,} parameters\n"
        )

    def __repr__(self):
        """Returns a concise string representation of the layer object."""
        return (f"FullyConnected(id={self.id}, input_size={self.input_size}, "
                f"output_size={self.output_size}, "
                f"activation={self.activation_fn!r})")


def _rms_prop_update(param, grad, history, scratch, learning_rate, history_influence, smoothing_term):
    """In-place RMSProp update of one parameter array; `scratch` has the shape of `param`."""
    # history = beta * history + (1 - beta) * grad^2
    history *= history_influence
    np.square(grad, out=scratch)
    scratch *= 1.0 - history_influence
    history += scratch

    # param -= lr / sqrt(history + eps) * grad
    np.add(history, smoothing_term, out=scratch)
    np.sqrt(scratch, out=scratch)
    np.divide(grad, scratch, out=scratch)
    scratch *= learning_rate
    param -= scratch
