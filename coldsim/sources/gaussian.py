"""Atom sources with gaussian velocity distributions."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

import numpy as np

from coldsim.atom import Atom, Force, InitialVelocity, Mass, Position, Velocity
from coldsim.constant import EXP
from coldsim.sources.distribution import AtomCreator, WeightedProbabilityDistribution
from coldsim.sources.emit import AtomNumberToEmit
from coldsim.world import NewlyCreated, World

_log = logging.getLogger(__name__)

_HALF_POINTS = 1000

_default_rng = random.Random()


def _vector(value) -> np.ndarray:
    array = np.array(value, dtype=float)
    if array.shape != (3,):
        raise ValueError("expected a 3-vector")
    return array


@dataclass
class GaussianVelocityDistributionSourceDefinition:
    """A source emitting atoms with per-axis gaussian velocities, m/s."""

    mean: np.ndarray
    std: np.ndarray
    species: AtomCreator

    def __post_init__(self) -> None:
        self.mean = _vector(self.mean)
        self.std = _vector(self.std)


@dataclass
class GaussianVelocityDistributionSource:
    """Precalculated per-axis velocity distributions of a gaussian source."""

    vx_distribution: WeightedProbabilityDistribution[float]
    vy_distribution: WeightedProbabilityDistribution[float]
    vz_distribution: WeightedProbabilityDistribution[float]
    species: AtomCreator

    def random_velocity(self, rng: random.Random | None = None) -> np.ndarray:
        """Draw a velocity at random."""
        rng = rng if rng is not None else _default_rng
        return np.array(
            [
                self.vx_distribution.sample(rng),
                self.vy_distribution.sample(rng),
                self.vz_distribution.sample(rng),
            ]
        )


def create_gaussian_velocity_distribution(
    mean: float, std: float
) -> WeightedProbabilityDistribution[float]:
    """Discretise a gaussian of given mean and standard deviation, m/s.

    The table spans five standard deviations either side of the mean.
    """
    if std == 0:
        raise ValueError("standard deviation must be non-zero")
    velocities = []
    weights = []
    for i in range(-_HALF_POINTS, _HALF_POINTS):
        v = i / _HALF_POINTS * 5.0 * std
        velocities.append(v + mean)
        weights.append(EXP ** (-((v / std) ** 2) / 2.0))
    return WeightedProbabilityDistribution(velocities, weights)


def precalculate_gaussian_sources(world: World) -> None:
    """Attach precalculated distributions to gaussian sources lacking them."""
    pending = [
        (
            entity,
            GaussianVelocityDistributionSource(
                *(
                    create_gaussian_velocity_distribution(m, s)
                    for m, s in zip(definition.mean, definition.std)
                ),
                species=definition.species,
            ),
        )
        for entity, definition in world.query(
            GaussianVelocityDistributionSourceDefinition,
            without=GaussianVelocityDistributionSource,
        )
    ]
    for entity, source in pending:
        world.insert(entity, source)
        _log.info("Precalculated velocity distributions for a gaussian source.")


def gaussian_create_atoms(world: World, rng: random.Random | None = None) -> None:
    """Create this frame's atoms from every gaussian source.

    The new entities exist at once; their components arrive at the next
    ``World.maintain``.
    """
    rng = rng if rng is not None else _default_rng
    for _, source, to_emit, position, mass in world.query(
        GaussianVelocityDistributionSource, AtomNumberToEmit, Position, Mass
    ):
        for _ in range(to_emit.number):
            atom = world.create_entity()
            velocity = source.random_velocity(rng)
            world.lazy_insert(atom, Velocity(velocity))
            world.lazy_insert(atom, Position(position.pos.copy()))
            world.lazy_insert(atom, Force())
            world.lazy_insert(atom, Mass(mass.value))
            world.lazy_insert(atom, Atom())
            world.lazy_insert(atom, InitialVelocity(velocity))
            world.lazy_insert(atom, NewlyCreated())
            source.species.mutate(world, atom)