"""Shared fixtures for lenstrace tests."""

import numpy as np
import pytest


class MidpointRng:
    """Deterministic stand-in for a numpy Generator.

    Every draw returns the middle of its range, so unit-sphere and disk
    samples collapse to the origin and pixel jitter lands on cell centers.
    """

    def random(self):
        return 0.5

    def uniform(self, low=0.0, high=1.0, size=None):
        mid = (low + high) / 2.0
        if size is None:
            return mid
        return np.full(size, mid, dtype=np.float64)


@pytest.fixture
def midpoint_rng():
    return MidpointRng()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
