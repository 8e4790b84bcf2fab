"""
nnets - a small feed-forward neural network toolkit built on NumPy.

Layers and containers share the Module interface (forward, backward,
zero_grad, step_grad, step_grad_rms_prop, init_weights, output, input_grad).
"""

from .activations import (
    ACTIVATION_FUNCTIONS,
    Activation,
    Linear,
    LogisticSigmoid,
    ReLU,
    UnitStep,
    get_activation,
)
from .dataset import (
    Dataset,
    num_categories,
    parse_input_vector,
    parse_integer,
    read_dataset,
    write_predictions,
)
from .layer import FullyConnected
from .module import Module
from .random_source import RandomSource
from .sequence import Sequence
from .xor_net import XorNet

__version__ = "0.1.0"

__all__ = [
    "ACTIVATION_FUNCTIONS",
    "Activation",
    "Dataset",
    "FullyConnected",
    "Linear",
    "LogisticSigmoid",
    "Module",
    "RandomSource",
    "ReLU",
    "Sequence",
    "UnitStep",
    "XorNet",
    "get_activation",
    "num_categories",
    "parse_input_vector",
    "parse_integer",
    "read_dataset",
    "write_predictions",
]
