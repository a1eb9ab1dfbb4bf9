"""Masses and isotopic abundances of created atoms."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable

from coldsim.atom import Mass

_default_rng = random.Random()


@dataclass
class MassRatio:
    """The abundance of one isotope."""

    mass: float
    ratio: float


class MassDistribution:
    """Relative abundance of each mass; normalised on construction."""

    def __init__(self, distribution: Iterable[MassRatio]) -> None:
        self.distribution = [MassRatio(mr.mass, mr.ratio) for mr in distribution]
        self.normalised = False
        self.normalise()

    def normalise(self) -> None:
        """Scale the ratios so that they add to one."""
        total = sum(mr.ratio for mr in self.distribution)
        if total == 0:
            raise ValueError("mass ratios sum to zero")
        for mr in self.distribution:
            mr.ratio /= total
        self.normalised = True

    def draw_random_mass(self, rng: random.Random | None = None) -> Mass:
        """Draw a mass at random according to the abundances."""
        if not self.normalised:
            raise RuntimeError("mass distribution is not normalised")
        rng = rng or _default_rng
        luck = rng.random()
        level = 0.0
        final_mass = 0.0
        for mr in self.distribution:
            level += mr.ratio
            if level > luck:
                return Mass(mr.mass)
            final_mass = mr.mass
        return Mass(final_mass)

    def __repr__(self) -> str:
        return (
            f"MassDistribution(distribution={self.distribution!r}, "
            f"normalised={self.normalised!r})"
        )