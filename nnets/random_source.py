import numpy as np
from typing import Optional
import logging


class RandomSource:
    """
    Seeded source of random numbers used for weight initialization and shuffling.

    Buffers are filled in place, so a layer can initialize its own weight
    matrix without reallocating it. Results are deterministic given the seed
    and the sequence of calls.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Args:
            seed: Optional seed. If None, the generator is seeded from OS entropy.
        """
        self._rng = np.random.default_rng(seed)

    def seed(self, value: int):
        """Reseeds the underlying generator."""
        self._rng = np.random.default_rng(value)
        logging.debug(f"RandomSource reseeded with {value}")

    def generate_uniform(self, buffer: np.ndarray, low: float, high: float) -> np.ndarray:
        """
        Fills `buffer` with samples of the uniform distribution on [low, high).

        Args:
            buffer: Contiguous float32 or float64 array, overwritten in place.
            low: Lower bound (inclusive).
            high: Upper bound (exclusive).

        Returns:
            The filled buffer.
        """
        self._rng.random(out=buffer, dtype=buffer.dtype)
        buffer *= high - low
        buffer += low
        return buffer

    def generate_normal(self, buffer: np.ndarray, mean: float, stdev: float) -> np.ndarray:
        """
        Fills `buffer` with samples of the normal distribution N(mean, stdev^2).

        Args:
            buffer: Contiguous float32 or float64 array, overwritten in place.
            mean: Mean of the distribution.
            stdev: Standard deviation of the distribution.

        Returns:
            The filled buffer.
        """
        self._rng.standard_normal(out=buffer, dtype=buffer.dtype)
        buffer *= stdev
        buffer += mean
        return buffer

    @property
    def rng(self) -> np.random.Generator:
        """The underlying NumPy generator (used for shuffling datasets)."""
        return self._rng
