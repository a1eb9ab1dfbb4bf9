"""Precalculated mass and speed distributions for thermal atom sources."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from coldsim.constant import AMU, BOLTZCONST
from coldsim.sources.distribution import WeightedProbabilityDistribution
from coldsim.sources.mass import MassDistribution
from coldsim.world import World

_log = logging.getLogger(__name__)

_V_POINTS = 2000


def probability_v(temperature: float, mass: float, v: float, power: float) -> float:
    """Unnormalised probability that a particle has speed ``v``.

    ``p(v)`` is proportional to ``u**power * exp(-u**2)`` with
    ``u = v / sqrt(2 k T / m)``.  Temperature in kelvin, mass in kg, speed in m/s.
    """
    norm_v = v / math.sqrt(2.0 * BOLTZCONST * temperature / mass)
    return 2.0 * norm_v**power * math.exp(-(norm_v**2))


def create_v_distribution(
    temperature: float, mass: float, power: float
) -> WeightedProbabilityDistribution[float]:
    """Discretise the effusive Maxwell-Boltzmann speed distribution.

    Temperature in kelvin, mass in kg.
    """
    max_velocity = 7.0 * math.sqrt(2.0 * BOLTZCONST * temperature / mass)
    velocities = [
        (i + 0.5) / (_V_POINTS + 1.0) * max_velocity for i in range(_V_POINTS)
    ]
    weights = [probability_v(temperature, mass, v, power) for v in velocities]
    return WeightedProbabilityDistribution(velocities, weights)


@dataclass
class Species:
    """A mass, in atomic mass units, and its speed distribution."""

    mass: float
    v_distribution: WeightedProbabilityDistribution[float]

    @classmethod
    def create(cls, mass: float, temperature: float, power: float) -> Species:
        return cls(mass, create_v_distribution(temperature, mass * AMU, power))


@dataclass
class PrecalculatedSpeciesInformation:
    """Everything needed to draw the mass and speed of a new atom."""

    species: tuple[Species, ...]
    distribution: WeightedProbabilityDistribution[Species]

    @classmethod
    def create(
        cls, temperature: float, mass_distribution: MassDistribution, power: float
    ) -> PrecalculatedSpeciesInformation:
        species = tuple(
            Species.create(mr.mass, temperature, power)
            for mr in mass_distribution.distribution
        )
        ratios = [mr.ratio for mr in mass_distribution.distribution]
        return cls(species, WeightedProbabilityDistribution(species, ratios))

    def generate_random_mass_v(
        self, rng: random.Random | None = None
    ) -> tuple[float, float]:
        """Return ``(mass in amu, speed in m/s)`` drawn at random."""
        chosen = self.distribution.sample(rng)
        return chosen.mass, chosen.v_distribution.sample(rng)


@runtime_checkable
class MaxwellBoltzmannSource(Protocol):
    """A thermal source: a temperature and the power of ``v`` in ``p(v)``."""

    @property
    def temperature(self) -> float: ...

    @property
    def v_dist_power(self) -> float: ...


def precalculate_for_species(world: World, source_type: type) -> None:
    """Replace each source's ``MassDistribution`` with precalculated information.

    Only sources of ``source_type`` that have no precalculated information yet
    are processed.
    """
    pending = [
        (
            entity,
            PrecalculatedSpeciesInformation.create(
                source.temperature, mass_distribution, source.v_dist_power
            ),
        )
        for entity, source, mass_distribution in world.query(
            source_type, MassDistribution, without=PrecalculatedSpeciesInformation
        )
    ]
    for entity, info in pending:
        world.remove(entity, MassDistribution)
        world.insert(entity, info)
        _log.info("Precalculated velocity and mass distributions for a source.")