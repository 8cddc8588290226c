"""
NEAT Random Source Module

Every stochastic decision in the package draws from a RandomSource which the
caller creates and passes explicitly; nothing uses a global generator. Given
the same seed and the same sequence of calls, the draws are identical.

Classes:
    RandomSource: Seeded wrapper around a NumPy random generator
"""

from typing import Sequence, TypeVar

import numpy as np

T = TypeVar('T')

class RandomSource:
    """
    Deterministic source of uniform reals, bounded integers and Bernoulli draws.

    Public Methods:
        uniform_real(low, high): Real number drawn uniformly from [low, high)
        uniform_int(n):          Integer drawn uniformly from [0, n)
        bernoulli(p):            True with probability p
        gauss(mean, stdev):      Normally distributed real number
        choice(sequence):        Uniformly selected element of a non-empty sequence
    """

    def __init__(self, seed: int | None = None):
        """
        Parameters:
            seed: seed for the underlying generator (None draws fresh OS entropy)
        """
        self.seed      : int | None          = seed
        self._generator: np.random.Generator = np.random.default_rng(seed)

    def uniform_real(self, low: float, high: float) -> float:
        return float(self._generator.uniform(low, high))

    def uniform_int(self, n: int) -> int:
        if n <= 0:
            raise ValueError(f"cannot draw an integer from an empty range (n={n})")
        return int(self._generator.integers(0, n))

    def bernoulli(self, p: float) -> bool:
        # random() is in [0, 1): p=0 never succeeds, p=1 always does
        return bool(self._generator.random() < p)

    def gauss(self, mean: float, stdev: float) -> float:
        return float(self._generator.normal(mean, stdev))

    def choice(self, sequence: Sequence[T]) -> T:
        return sequence[self.uniform_int(len(sequence))]
