from AgentKinetics.processes import (validate_rate_constant, total_rate,
                                     sample_interval)
import math
import numpy as np
import pytest


def test_validate_rate_constant():
    assert validate_rate_constant(2) == 2.0
    assert validate_rate_constant(0.0) == 0.0

    with pytest.raises(ValueError, match='Negative'):
        validate_rate_constant(-1e-3)
    with pytest.raises(ValueError):
        validate_rate_constant(float('nan'))
    with pytest.raises(ValueError):
        validate_rate_constant(math.inf)


def test_total_rate():
    assert total_rate([20.0, 5.0]) == pytest.approx(25.0)
    assert total_rate([]) == 0.0
    assert total_rate([1e-14, 0.0]) == 0.0

    with pytest.raises(RuntimeError):
        total_rate([1.0, -2.0])


def test_sample_interval():
    rng = np.random.default_rng(seed=0)
    assert sample_interval(0.0, rng) == math.inf

    samples = [sample_interval(4.0, rng) for _ in range(20000)]
    assert np.all(np.array(samples) >= 0)
    assert np.mean(samples) == pytest.approx(0.25, rel=0.05)
