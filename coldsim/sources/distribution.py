"""Building blocks shared by atom sources: weighted sampling and species."""

from __future__ import annotations

import bisect
import math
import random
from dataclasses import dataclass
from itertools import accumulate
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterable, TypeVar

if TYPE_CHECKING:
    from coldsim.world import World

T = TypeVar("T")

_default_rng = random.Random()


@dataclass
class VelocityCap:
    """Resource: the greatest speed, m/s, at which sources emit atoms."""

    value: float


class WeightedProbabilityDistribution(Generic[T]):
    """A discrete distribution that draws values with given relative weights."""

    def __init__(self, values: Iterable[T], weights: Iterable[float]) -> None:
        values = list(values)
        weights = [float(w) for w in weights]
        if len(values) != len(weights):
            raise ValueError("values and weights differ in length")
        if not weights:
            raise ValueError("a distribution needs at least one weight")
        if any(not (w >= 0.0) or math.isinf(w) for w in weights):
            raise ValueError("weights must be finite and non-negative")
        cumulative = list(accumulate(weights))
        total = cumulative[-1]
        if total <= 0.0:
            raise ValueError("all weights are zero")
        self.values: tuple[T, ...] = tuple(values)
        self.weights: tuple[float, ...] = tuple(weights)
        self._cumulative = cumulative
        self._total = total
        self._last = max(i for i, w in enumerate(weights) if w > 0.0)

    def __len__(self) -> int:
        return len(self.values)

    def sample(self, rng: random.Random | None = None) -> T:
        """Draw one value at random."""
        rng = rng if rng is not None else _default_rng
        target = rng.random() * self._total
        index = bisect.bisect_right(self._cumulative, target)
        return self.values[min(index, self._last)]

    def __repr__(self) -> str:
        return f"WeightedProbabilityDistribution(<{len(self.values)} values>)"


@dataclass(frozen=True)
class AtomCreator:
    """A species that sources create; tags every new atom with its components.

    ``components`` holds zero-argument factories, each producing one component
    that is attached to a newly created atom.
    """

    name: str
    components: tuple[Callable[[], Any], ...] = ()

    def mutate(self, world: World, entity: int) -> None:
        """Schedule the species components for a newly created atom."""
        for factory in self.components:
            world.lazy_insert(entity, factory())