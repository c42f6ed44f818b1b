"""Injectable random sources for the grid simulation."""

from abc import ABC, abstractmethod
from itertools import cycle
from typing import Iterable, Optional
import numpy as np


class RandomSource(ABC):
    """Source of uniform draws in [0, 1)."""

    @abstractmethod
    def random(self) -> float:
        """Return the next uniform draw."""
        pass

    def symmetric(self, amplitude: float) -> float:
        """Uniform draw in [-amplitude, +amplitude)."""
        return (self.random() - 0.5) * 2 * amplitude


class NumpyRandomSource(RandomSource):
    """Random source backed by a numpy ``RandomState``."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.RandomState(seed)

    def random(self) -> float:
        return float(self.rng.random_sample())


class SequenceRandomSource(RandomSource):
    """Replays a fixed sequence of draws, cycling when exhausted.

    Used for deterministic replays and tests.
    """

    def __init__(self, values: Iterable[float]):
        values = list(values)
        if not values:
            raise ValueError("SequenceRandomSource needs at least one value")
        for value in values:
            if not 0 <= value < 1:
                raise ValueError(f"Draw {value} outside [0, 1)")
        self._values = cycle(values)

    def random(self) -> float:
        return next(self._values)
