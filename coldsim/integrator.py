"""Time integration of the classical equations of motion."""

from __future__ import annotations

from dataclasses import dataclass, field

from coldsim import constant
from coldsim.atom import Force, Mass, Position, Velocity
from coldsim.world import NewlyCreated, World

INTEGRATE_POSITION_SYSTEM_NAME = "integrate_position"
INTEGRATE_VELOCITY_SYSTEM_NAME = "integrate_velocity"


@dataclass
class Step:
    """Number of the current integration step."""

    n: int = 0


@dataclass
class Timestep:
    """Duration of one integration step, seconds.

    It should be small enough to resolve the fastest motion being simulated;
    about one microsecond suits a typical magneto-optical trap.
    """

    delta: float


@dataclass
class OldForce:
    """The force acting on an entity during the previous step."""

    force: Force = field(default_factory=Force)


def euler_update(
    velocity: Velocity, position: Position, force: Force, mass: Mass, dt: float
) -> None:
    """Advance position and velocity by one Euler step, in place."""
    position.pos = position.pos + velocity.vel * dt
    velocity.vel = velocity.vel + force.force * dt / (constant.AMU * mass.value)


def euler_integrate(world: World) -> None:
    """Integrate every massive entity with the Euler method: ``x' = x + v dt``."""
    dt = world.resource(Timestep).delta
    world.resource(Step).n += 1
    for _, velocity, position, force, mass in world.query(
        Velocity, Position, Force, Mass
    ):
        euler_update(velocity, position, force, mass, dt)


def verlet_integrate_position(world: World) -> None:
    """Velocity-Verlet position update; remembers this step's force as ``OldForce``."""
    dt = world.resource(Timestep).delta
    world.resource(Step).n += 1
    for _, position, velocity, old_force, force, mass in world.query(
        Position, Velocity, OldForce, Force, Mass
    ):
        acceleration = force.force / (constant.AMU * mass.value)
        position.pos = position.pos + velocity.vel * dt + acceleration / 2.0 * dt * dt
        old_force.force = Force(force.force.copy())


def verlet_integrate_velocity(world: World) -> None:
    """Velocity-Verlet velocity update using the mean of the new and old force."""
    dt = world.resource(Timestep).delta
    for _, velocity, force, old_force, mass in world.query(
        Velocity, Force, OldForce, Mass
    ):
        total = force.force + old_force.force.force
        velocity.vel = velocity.vel + total / (constant.AMU * mass.value) / 2.0 * dt


def add_old_force_to_new_atoms(world: World) -> None:
    """Schedule an ``OldForce`` for newly created entities lacking one."""
    for entity, _ in world.query(NewlyCreated, without=OldForce):
        world.lazy_insert(entity, OldForce())