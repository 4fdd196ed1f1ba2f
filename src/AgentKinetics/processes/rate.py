import math
from typing import Iterable

import numpy as np

# Rates closer to zero than this are treated as exactly zero
RATE_TOLERANCE = 1e-12


def validate_rate_constant(rate_constant: float) -> float:
    """
    Checks that a rate constant (or rate) is a finite, non-negative
    number. Negative values are never clamped to zero; they indicate a
    modeling error.

    Args:
        rate_constant (float): The value to check

    Returns:
        float: The validated rate constant
    """
    rate_constant = float(rate_constant)
    if math.isnan(rate_constant) or math.isinf(rate_constant):
        raise ValueError(f'Rate constant must be finite, got {rate_constant}')
    if rate_constant < 0:
        raise ValueError(f'Negative rate constant: {rate_constant}')
    return rate_constant


def total_rate(rates: Iterable[float]) -> float:
    """
    Computes the total of a collection of process rates.

    Raises:
        RuntimeError: If the total is negative. This can only happen if a
            process produced an invalid rate.
    """
    total = float(np.sum(np.fromiter(rates, dtype=float)))
    if abs(total) < RATE_TOLERANCE:
        return 0.0
    if total < 0:
        raise RuntimeError(f'Negative total rate: {total}')
    return total


def sample_interval(rate: float, rng: np.random.Generator) -> float:
    """
    Draws the waiting time until the next occurrence of a process (or
    system of processes) with the given rate. A zero rate never fires.
    """
    if rate <= 0:
        return math.inf
    return float(rng.exponential(1.0 / rate))
