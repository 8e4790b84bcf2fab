import numpy as np
from typing import Optional, Union
import logging

ArrayLike = Union[float, np.ndarray]


def _output_buffer(x: ArrayLike, out: Optional[np.ndarray]) -> np.ndarray:
    """Returns `out` if given, otherwise a fresh float buffer shaped like `x`."""
    if out is not None:
        return out
    x = np.asarray(x)
    return np.empty(x.shape, dtype=np.result_type(x, np.float32))


def _exp_limit(dtype) -> float:
    """Largest argument for which exp() and 2 * cosh() stay finite in `dtype`, with a margin."""
    return float(np.log(np.finfo(dtype).max)) - 1.0


class Activation:
    """Base class for all activation functions.

    An activation is an elementwise function together with its derivative.
    Both methods accept an optional `out` buffer; layers pass their own
    preallocated arrays so that the forward and backward passes never
    allocate.
    """

    def forward(self, x: ArrayLike, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Compute the activation function value.

        Args:
            x: Input data (scalar or numpy array), typically the layer potential.
            out: Optional buffer the result is written into. Must have the shape of `x`.

        Returns:
            Activated output (`out` if it was given).
        """
        raise NotImplementedError

    def derivative(self, x: ArrayLike, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Compute the derivative of the activation function with respect to its input 'x'.
           Note: 'x' here is the *input* to the activation function (the potential),
           not its output.

        Args:
            x: Input data where the derivative is evaluated (scalar or numpy array).
            out: Optional buffer the result is written into.

        Returns:
            Derivative of the activation function evaluated at x.
        """
        raise NotImplementedError

    def __call__(self, x: ArrayLike, out: Optional[np.ndarray] = None) -> np.ndarray:
        return self.forward(x, out=out)

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class ReLU(Activation):
    """Rectified Linear Unit activation function.

    Mathematical form:
        forward: f(x) = max(0, x)
        derivative: f'(x) = 1 if x >= 0 else 0

    The subgradient at x = 0 is taken to be 1.
    """

    def forward(self, x, out=None):
        out = _output_buffer(x, out)
        np.maximum(x, 0.0, out=out)
        return out

    def derivative(self, x, out=None):
        out = _output_buffer(x, out)
        # heaviside(x, 1) is 0 for x < 0 and 1 for x >= 0
        np.heaviside(x, 1.0, out=out)
        return out


class UnitStep(Activation):
    """Unit step (Heaviside) activation function.

    Mathematical form:
        forward: f(x) = 1 if x >= 0 else 0
        derivative: f'(x) = 0

    The derivative carries no gradient, so layers using it are only useful
    with hand-set weights.
    """

    def forward(self, x, out=None):
        out = _output_buffer(x, out)
        np.heaviside(x, 1.0, out=out)
        return out

    def derivative(self, x, out=None):
        out = _output_buffer(x, out)
        out.fill(0.0)
        return out


class LogisticSigmoid(Activation):
    """Logistic sigmoid activation function with steepness `lam`.

    Mathematical form:
        forward: f(x) = 1 / (1 + e^(-lam * x))
        derivative: f'(x) = lam * f(x) * (1 - f(x))
    """

    def __init__(self, lam: float = 1.0):
        """Initialize with the steepness parameter.

        Args:
            lam: Steepness (lambda) of the sigmoid. 1.0 gives the standard logistic function.
        """
        self.lam = lam

    def forward(self, x, out=None):
        out = _output_buffer(x, out)
        limit = _exp_limit(out.dtype)
        np.multiply(x, -self.lam, out=out)
        # Clip to avoid overflow in exp for large negative inputs
        np.clip(out, -limit, limit, out=out)
        np.exp(out, out=out)
        out += 1.0
        np.reciprocal(out, out=out)
        return out

    def derivative(self, x, out=None):
        out = _output_buffer(x, out)
        limit = _exp_limit(out.dtype)
        # f(x) * (1 - f(x)) == f(x) * f(-x) == 1 / (2 + 2 cosh(lam * x))
        np.multiply(x, self.lam, out=out)
        np.clip(out, -limit, limit, out=out)
        np.cosh(out, out=out)
        out *= 2.0
        out += 2.0
        np.reciprocal(out, out=out)
        out *= self.lam
        return out

    def __repr__(self):
        return f"LogisticSigmoid(lam={self.lam})"


class Linear(Activation):
    """Linear activation function (identity).

    Mathematical form:
        forward: f(x) = x
        derivative: f'(x) = 1
    """

    def forward(self, x, out=None):
        out = _output_buffer(x, out)
        np.copyto(out, x)
        return out

    def derivative(self, x, out=None):
        out = _output_buffer(x, out)
        out.fill(1.0)
        return out


# Dictionary mapping activation function names to their classes
ACTIVATION_FUNCTIONS = {
    'relu': ReLU,
    'unit_step': UnitStep,
    'sigmoid': LogisticSigmoid,
    'linear': Linear,
}


def get_activation(name: str, **kwargs) -> Activation:
    """Factory function to get an activation function instance by name.

    Args:
        name: Name of the activation function (case-insensitive).
        **kwargs: Additional arguments to pass to the activation function's constructor
                  (e.g., 'lam' for the LogisticSigmoid activation).

    Returns:
        An instance of the requested Activation class.

    Raises:
        ValueError: If the activation function name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in ACTIVATION_FUNCTIONS:
        raise ValueError(
            f"Unknown activation function '{name}'. "
            f"Available functions: {list(ACTIVATION_FUNCTIONS.keys())}"
        )
    activation = ACTIVATION_FUNCTIONS[name_lower](**kwargs)
    logging.debug(f"Built activation {activation!r} from name '{name}'")
    return activation
