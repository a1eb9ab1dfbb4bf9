"""Ovens: sources that release hot atoms into a beam."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Union

import numpy as np

from coldsim.atom import Atom, Force, InitialVelocity, Mass, Position, Velocity
from coldsim.constant import PI
from coldsim.sources.distribution import (
    AtomCreator,
    VelocityCap,
    WeightedProbabilityDistribution,
)
from coldsim.sources.emit import AtomNumberToEmit
from coldsim.sources.precalc import PrecalculatedSpeciesInformation
from coldsim.world import NewlyCreated, World

_THETA_POINTS = 1000
_REFERENCE = np.array([2.0, 1.0, 0.5])

_default_rng = random.Random()


def _unit(value) -> np.ndarray:
    array = np.array(value, dtype=float)
    if array.shape != (3,):
        raise ValueError("expected a 3-vector")
    norm = float(np.linalg.norm(array))
    if norm == 0.0:
        raise ValueError("direction must be non-zero")
    return array / norm


def _perpendicular_basis(direction: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    dir_1 = np.cross(direction, _REFERENCE)
    dir_1 = dir_1 / np.linalg.norm(dir_1)
    dir_2 = np.cross(direction, dir_1)
    dir_2 = dir_2 / np.linalg.norm(dir_2)
    return dir_1, dir_2


@dataclass(frozen=True)
class CubicAperture:
    """A box-shaped aperture with the given side lengths, metres."""

    size: tuple[float, float, float]


@dataclass(frozen=True)
class CircularAperture:
    """A disc-shaped aperture of given radius and thickness, metres."""

    radius: float
    thickness: float


Aperture = Union[CubicAperture, CircularAperture]


def velocity_generate(
    v_mag: float,
    direction,
    theta_distribution: WeightedProbabilityDistribution[float],
    rng: random.Random | None = None,
) -> tuple[np.ndarray, float]:
    """Return a velocity of magnitude ``v_mag`` and its polar angle ``theta``.

    ``theta`` is drawn from ``theta_distribution`` and measured from
    ``direction``; the azimuth is uniform.
    """
    rng = rng if rng is not None else _default_rng
    raw = np.array(direction, dtype=float)
    unit = _unit(raw)
    dir_1, dir_2 = _perpendicular_basis(raw)
    theta = theta_distribution.sample(rng)
    phi = rng.uniform(0.0, 2.0 * PI)
    divergence = (
        dir_1 * math.sin(theta) * math.cos(phi)
        + dir_2 * math.sin(theta) * math.sin(phi)
    )
    final_direction = unit * math.cos(theta) + divergence
    return final_direction * v_mag, theta


def jtheta(theta: float, channel_radius: float, channel_length: float) -> float:
    """Angular emission profile ``j(theta)`` of a cylindrical channel.

    Describes collision-free (transparent) flow through a channel of given
    radius and length, metres; ``theta`` is the angle in radians from the
    channel axis.  ``j`` is defined per unit solid angle and tends to one on
    the axis.
    """
    beta = 2.0 * channel_radius / channel_length
    q = math.tan(theta) / beta
    root = math.sqrt(1.0 + beta**2)
    alpha = 0.5 - 1.0 / (3.0 * beta**2) * (
        1.0 - 2.0 * beta**3 + (2.0 * beta**2 - 1.0) * root
    ) / (root - beta**2 * math.asinh(1.0 / beta))

    cos_theta = math.cos(theta)
    if q <= 1.0:
        r_q = math.acos(q) - q * math.sqrt(1.0 - q**2)
        return alpha * cos_theta + (2.0 / PI) * cos_theta * (
            (1.0 - alpha) * r_q
            + 2.0 / (3.0 * q) * (1.0 - 2.0 * alpha) * (1.0 - (1.0 - q**2) ** 1.5)
        )
    return alpha * cos_theta + 4.0 / (3.0 * PI * q) * (1.0 - 2.0 * alpha) * cos_theta


def create_jtheta_distribution(
    channel_radius: float, channel_length: float
) -> WeightedProbabilityDistribution[float]:
    """Discretise ``p(theta) = j(theta) sin(theta)`` over ``(0, pi/2)``."""
    thetas = [
        (i + 0.5) / (_THETA_POINTS + 1.0) * PI / 2.0 for i in range(_THETA_POINTS)
    ]
    weights = [
        jtheta(theta, channel_radius, channel_length) * math.sin(theta)
        for theta in thetas
    ]
    return WeightedProbabilityDistribution(thetas, weights)


@dataclass
class Oven:
    """A source of hot atoms.

    Atoms spawn within the aperture and leave at a polar angle drawn from the
    ``j(theta)`` distribution about ``direction``.  Atoms drawn at an angle
    greater than ``max_theta`` (limited, say, by a heated lip) are discarded.
    """

    temperature: float
    aperture: Aperture
    direction: np.ndarray
    theta_distribution: WeightedProbabilityDistribution[float]
    max_theta: float
    species: AtomCreator

    def __post_init__(self) -> None:
        self.direction = _unit(self.direction)

    @property
    def v_dist_power(self) -> float:
        return 3.0

    def random_spawn_position(self, rng: random.Random | None = None) -> np.ndarray:
        """Return a random point in the aperture, relative to the oven."""
        rng = rng if rng is not None else _default_rng
        aperture = self.aperture
        if isinstance(aperture, CubicAperture):
            return np.array(
                [rng.uniform(-0.5 * s, 0.5 * s) for s in aperture.size], dtype=float
            )
        dir_1, dir_2 = _perpendicular_basis(self.direction)
        theta = rng.uniform(0.0, 2.0 * PI)
        r = rng.uniform(0.0, aperture.radius)
        h = rng.uniform(-0.5 * aperture.thickness, 0.5 * aperture.thickness)
        return (
            self.direction * h
            + r * dir_1 * math.sin(theta)
            + r * dir_2 * math.cos(theta)
        )


class OvenBuilder:
    """Builds an ``Oven`` step by step; each setter returns the builder."""

    def __init__(self, temperature: float, direction, species: AtomCreator) -> None:
        self.temperature = temperature
        self.direction = _unit(direction)
        self.species = species
        self.aperture: Aperture = CircularAperture(radius=3.0e-3, thickness=1.0e-3)
        self.microchannel_length = 4e-3
        self.microchannel_radius = 0.2e-3
        self.max_theta = PI / 2.0

    def with_microchannels(
        self, microchannel_length: float, microchannel_radius: float
    ) -> OvenBuilder:
        self.microchannel_length = microchannel_length
        self.microchannel_radius = microchannel_radius
        return self

    def with_lip(self, lip_length: float, lip_radius: float) -> OvenBuilder:
        self.max_theta = math.atan(lip_radius / lip_length)
        return self

    def with_aperture(self, aperture: Aperture) -> OvenBuilder:
        self.aperture = aperture
        return self

    def build(self) -> Oven:
        return Oven(
            temperature=self.temperature,
            aperture=self.aperture,
            direction=self.direction.copy(),
            theta_distribution=create_jtheta_distribution(
                self.microchannel_radius, self.microchannel_length
            ),
            max_theta=self.max_theta,
            species=self.species,
        )


def oven_create_atoms(world: World, rng: random.Random | None = None) -> None:
    """Create this frame's atoms from every oven with precalculated species data.

    Atoms faster than the ``VelocityCap`` resource, if present, or emitted
    beyond the oven's ``max_theta`` are skipped.  Components of new atoms
    arrive at the next ``World.maintain``.
    """
    rng = rng if rng is not None else _default_rng
    max_vel = (
        world.resource(VelocityCap).value
        if world.has_resource(VelocityCap)
        else math.inf
    )
    for _, oven, to_emit, oven_position, precalc in world.query(
        Oven, AtomNumberToEmit, Position, PrecalculatedSpeciesInformation
    ):
        for _ in range(to_emit.number):
            mass, speed = precalc.generate_random_mass_v(rng)
            if speed > max_vel:
                continue
            velocity, theta = velocity_generate(
                speed, oven.direction, oven.theta_distribution, rng
            )
            if theta > oven.max_theta:
                continue
            atom = world.create_entity()
            start = oven_position.pos + oven.random_spawn_position(rng)
            world.lazy_insert(atom, Position(start))
            world.lazy_insert(atom, Velocity(velocity))
            world.lazy_insert(atom, Force())
            world.lazy_insert(atom, Mass(mass))
            world.lazy_insert(atom, Atom())
            world.lazy_insert(atom, InitialVelocity(velocity.copy()))
            world.lazy_insert(atom, NewlyCreated())
            oven.species.mutate(world, atom)