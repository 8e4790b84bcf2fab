import numpy as np
import pytest

from nnets.random_source import RandomSource


def test_same_seed_same_sequence():
    a, b = np.empty(16, dtype=np.float32), np.empty(16, dtype=np.float32)
    RandomSource(42).generate_normal(a, 0.0, 1.0)
    RandomSource(42).generate_normal(b, 0.0, 1.0)
    np.testing.assert_array_equal(a, b)


def test_reseed_restarts_sequence():
    random = RandomSource(1)
    first = random.generate_uniform(np.empty(8), 0.0, 1.0).copy()
    random.generate_uniform(np.empty(8), 0.0, 1.0)
    random.seed(1)
    np.testing.assert_array_equal(random.generate_uniform(np.empty(8), 0.0, 1.0), first)


def test_generate_uniform_fills_buffer_in_place():
    buffer = np.zeros((50, 40), dtype=np.float32)
    result = RandomSource(3).generate_uniform(buffer, -2.0, 5.0)
    assert result is buffer
    assert buffer.min() >= -2.0
    assert buffer.max() < 5.0
    assert buffer.mean() == pytest.approx(1.5, abs=0.1)


def test_generate_normal_statistics():
    buffer = np.empty(20000)
    RandomSource(9).generate_normal(buffer, 3.0, 2.0)
    assert buffer.mean() == pytest.approx(3.0, abs=0.05)
    assert buffer.std() == pytest.approx(2.0, rel=0.02)


def test_rng_is_a_numpy_generator():
    assert isinstance(RandomSource(0).rng, np.random.Generator)
