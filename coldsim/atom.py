"""Common atom components and the force-clearing step."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from coldsim.world import World


def _vector(value) -> np.ndarray:
    array = np.array(value, dtype=float)
    if array.shape != (3,):
        raise ValueError("expected a 3-vector")
    return array


def _zeros() -> np.ndarray:
    return np.zeros(3)


def _format(vec: np.ndarray) -> str:
    return "({!r},{!r},{!r})".format(*(float(x) for x in vec))


@dataclass
class Position:
    """Position in space, metres."""

    pos: np.ndarray = field(default_factory=_zeros)

    def __post_init__(self) -> None:
        self.pos = _vector(self.pos)

    def data(self) -> list[float]:
        return [float(x) for x in self.pos]

    def __str__(self) -> str:
        return _format(self.pos)


@dataclass
class Velocity:
    """Velocity, metres per second."""

    vel: np.ndarray = field(default_factory=_zeros)

    def __post_init__(self) -> None:
        self.vel = _vector(self.vel)

    def data(self) -> list[float]:
        return [float(x) for x in self.vel]

    def __str__(self) -> str:
        return _format(self.vel)


@dataclass
class InitialVelocity:
    """Velocity an atom was created with, metres per second."""

    vel: np.ndarray = field(default_factory=_zeros)

    def __post_init__(self) -> None:
        self.vel = _vector(self.vel)


@dataclass
class Force:
    """Force acting on an entity, newtons."""

    force: np.ndarray = field(default_factory=_zeros)

    def __post_init__(self) -> None:
        self.force = _vector(self.force)


@dataclass
class Mass:
    """Inertial and gravitational mass, atomic mass units."""

    value: float


@dataclass
class Atom:
    """Marks an entity as an atom."""


def clear_forces(world: World) -> None:
    """Reset every force to zero at the start of a step."""
    for _, force in world.query(Force):
        force.force = np.zeros(3)