"""How many atoms each source emits per frame."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from coldsim.integrator import Timestep
from coldsim.world import World

_default_rng = random.Random()


@dataclass
class EmitNumberPerFrame:
    """The source emits a fixed number of atoms every frame."""

    number: int


@dataclass
class EmitFixedRate:
    """The source emits at a fixed average rate, atoms per second."""

    rate: float


@dataclass
class EmitOnce:
    """The source emits only on its first frame."""


@dataclass
class AtomNumberToEmit:
    """Number of atoms the source emits in the current frame."""

    number: int = 0


def emit_number_per_frame(world: World) -> None:
    """Set the emission count of fixed-number sources."""
    for _, emit_number, to_emit in world.query(EmitNumberPerFrame, AtomNumberToEmit):
        to_emit.number = emit_number.number


def emit_fixed_rate(world: World, rng: random.Random | None = None) -> None:
    """Set the emission count of fixed-rate sources.

    When rate times timestep is not an integer, the count fluctuates between
    the neighbouring integers so that the mean rate is right.
    """
    rng = rng or _default_rng
    dt = world.resource(Timestep).delta
    for _, rate, to_emit in world.query(EmitFixedRate, AtomNumberToEmit):
        average = rate.rate * dt
        guaranteed = math.floor(average)
        extra = 1 if rng.random() < average - guaranteed else 0
        to_emit.number = int(guaranteed) + extra


def emit_once(world: World) -> None:
    """Set the emission count of emit-once sources to zero."""
    for _, _, to_emit in world.query(EmitOnce, AtomNumberToEmit):
        to_emit.number = 0