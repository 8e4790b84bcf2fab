import numpy as np
from typing import Iterable, Iterator
import logging

from .module import Module
from .random_source import RandomSource


class Sequence(Module):
    """
    Modules arranged in a linear sequence.

    The output of each module is the input of the next one. Modules are held
    by reference, so the same layer object may take part in several sequences;
    such sequences must not be driven at the same time.
    """

    def __init__(self, modules: Iterable[Module]):
        """
        Args:
            modules: The modules, in forward order. At least one is required.

        Raises:
            ValueError: If no modules are given.
        """
        self.modules = tuple(modules)
        if not self.modules:
            raise ValueError("Sequence must contain at least one module.")
        logging.debug(f"Created sequence of {len(self.modules)} modules: {list(self.modules)}")

    def forward(self, inputs: np.ndarray) -> None:
        """Threads `inputs` through every module; each output feeds the next module."""
        current = inputs
        for module in self.modules:
            module.forward(current)
            current = module.output()

    def backward(self, output_gradient: np.ndarray) -> None:
        """
        Threads the loss gradient through the modules in reverse order; each
        module's input gradient is the output gradient of the module before it.
        """
        current = output_gradient
        for module in reversed(self.modules):
            module.backward(current)
            current = module.input_grad()

    def zero_grad(self) -> None:
        for module in self.modules:
            module.zero_grad()

    def step_grad(self, learning_rate: float) -> None:
        for module in self.modules:
            module.step_grad(learning_rate)

    def step_grad_rms_prop(self, learning_rate: float, history_influence: float,
                           smoothing_term: float) -> None:
        for module in self.modules:
            module.step_grad_rms_prop(learning_rate, history_influence, smoothing_term)

    def init_weights(self, random: RandomSource) -> None:
        for module in self.modules:
            module.init_weights(random)

    def output(self) -> np.ndarray:
        return self.modules[-1].output()

    def input_grad(self) -> np.ndarray:
        return self.modules[0].input_grad()

    def num_params(self) -> int:
        """Number of trainable parameters, counted through nested members."""
        return sum(module.num_params() for module in self.modules)

    def __len__(self) -> int:
        return len(self.modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(self.modules)

    def __getitem__(self, index: int) -> Module:
        return self.modules[index]

    def summary(self) -> str:
        """
        Generates a text summary of the modules in the sequence.

        Modules without a summary() of their own are listed by their repr.
        """
        summary_str = "\n" + "="*50 + "\n"
        summary_str += "Sequence Summary\n"
        summary_str += "="*50 + "\n"
        for i, module in enumerate(self.modules):
            summary_str += f"[{i}] "
            if hasattr(module, 'summary'):
                summary_str += module.summary()
            else:
                summary_str += f"{module!r}\n"
            summary_str += "-"*50 + "\n"
        summary_str += f"Total Parameters: {self.num_params()}\n"
        summary_str += "="*50 + "\n"
        return summary_str

    def __repr__(self):
        return f"Sequence({list(self.modules)!r})"
