"""The force of gravity."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from coldsim import constant
from coldsim.atom import Force, Mass
from coldsim.world import World

_DOWN = np.array([0.0, 0.0, -1.0])


@dataclass
class ApplyGravityOption:
    """Resource whose presence switches gravity on."""


def apply_gravity(world: World) -> None:
    """Add the gravitational force to every entity with a mass."""
    if not world.has_resource(ApplyGravityOption):
        return
    for _, force, mass in world.query(Force, Mass):
        force.force = force.force + mass.value * constant.AMU * constant.GC * _DOWN