"""S-wave collisions between atoms by direct simulation Monte Carlo.

Space is divided into a cubic grid of collision boxes.  From the density and
mean speed in each box, simple kinetic theory predicts how many collisions
should occur in one step, and that many random pairs of atoms in the box are
made to collide.

The atoms within a box are assumed to be roughly thermal, so that the mean
relative speed is sqrt(2) times the mean speed.  A single species with a
constant, velocity-independent cross section is assumed.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

import numpy as np

from coldsim.atom import Atom, Position, Velocity
from coldsim.constant import PI, SQRT2
from coldsim.integrator import Timestep
from coldsim.world import World

#: Box id given to atoms outside the collision grid; such atoms never collide.
OUT_OF_GRID = 2**63 - 1

_default_rng = random.Random()


@dataclass
class ApplyCollisionsOption:
    """Resource whose presence switches collisions on."""


@dataclass
class BoxID:
    """The collision box an atom is in."""

    id: int = 0


class CollisionLimitExceeded(RuntimeError):
    """Raised when a box would need more collisions in one step than allowed."""


@dataclass(frozen=True)
class CollisionParameters:
    """Parameters of the collision model."""

    #: Number of real atoms that one simulated particle stands for.
    macroparticle: float
    #: Number of boxes along each side of the grid.
    box_number: int
    #: Width of one box, metres.
    box_width: float
    #: Collisional cross section, square metres.
    sigma: float
    #: Most collisions allowed in one box in one step.
    collision_limit: float


@dataclass
class CollisionsTracker:
    """Per-box statistics from the most recent step."""

    num_collisions: list[int] = field(default_factory=list)
    num_particles: list[int] = field(default_factory=list)
    num_atoms: list[float] = field(default_factory=list)


@dataclass
class CollisionBox:
    """A cell of space whose atoms may collide with one another."""

    velocities: list[Velocity] = field(default_factory=list)
    expected_collision_number: float = 0.0
    collision_number: int = 0
    density: float = 0.0
    volume: float = 0.0
    atom_number: float = 0.0
    particle_number: int = 0

    def do_collisions(
        self,
        params: CollisionParameters,
        dt: float,
        rng: random.Random | None = None,
    ) -> None:
        """Perform this step's collisions between the atoms in the box."""
        rng = rng or _default_rng
        self.particle_number = len(self.velocities)
        self.atom_number = self.particle_number * params.macroparticle

        if self.particle_number <= 1:
            return

        # Mean speed, not mean velocity.
        vbar = sum(float(np.linalg.norm(v.vel)) for v in self.velocities) / len(
            self.velocities
        )

        # N_p * n * sigma * vrel * dt / 2 with vrel = sqrt(2) vbar; the factor
        # of two avoids counting each collision of identical particles twice.
        density = self.atom_number / params.box_width**3
        self.expected_collision_number = (
            self.particle_number * density * params.sigma * vbar * dt / SQRT2
        )

        remaining = self.expected_collision_number
        if remaining > params.collision_limit:
            raise CollisionLimitExceeded(
                "Number of collisions in a box in a single frame exceeds limit. "
                f"Number of collisions={remaining}, limit={params.collision_limit}, "
                f"particles={self.particle_number}."
            )

        count = len(self.velocities)
        while remaining > 0.0:
            collide = remaining > 1.0 or rng.random() < remaining
            if collide:
                idx1 = rng.randrange(count)
                idx2 = idx1
                while idx2 == idx1:
                    idx2 = rng.randrange(count)
                first, second = self.velocities[idx1], self.velocities[idx2]
                first.vel, second.vel = do_collision(first.vel, second.vel, rng)
                self.collision_number += 1
            remaining -= 1.0


def do_collision(
    v1, v2, rng: random.Random | None = None
) -> tuple[np.ndarray, np.ndarray]:
    """Scatter two velocities isotropically in their centre-of-mass frame.

    Energy and momentum are conserved.
    """
    rng = rng or _default_rng
    v1 = np.asarray(v1, dtype=float)
    v2 = np.asarray(v2, dtype=float)
    vcm = 0.5 * (v1 + v2)
    energy = 0.5 * (
        float(np.linalg.norm(v1 - vcm)) ** 2 + float(np.linalg.norm(v2 - vcm)) ** 2
    )

    cos_theta = rng.uniform(-1.0, 1.0)
    sin_theta = math.sqrt(1.0 - cos_theta**2)
    phi = rng.uniform(0.0, 2.0 * PI)
    speed = math.sqrt(energy)

    v_prime = np.array(
        [
            speed * sin_theta * math.cos(phi),
            speed * sin_theta * math.sin(phi),
            speed * cos_theta,
        ]
    )
    return vcm + v_prime, vcm - v_prime


def pos_to_id(pos, n: int, width: float) -> int:
    """Return the id of the box containing ``pos``.

    With an even number of boxes a box vertex sits on the origin; with an odd
    number a box centre does.  Boxes include their lower bound and exclude
    their upper.  Positions outside the grid get ``OUT_OF_GRID``.
    """
    x, y, z = (float(c) for c in pos)
    bound = n / 2.0 * width
    if abs(x) > bound or abs(y) > bound or abs(z) > bound:
        return OUT_OF_GRID
    xp, yp, zp = (math.floor(c / width + 0.5 * n) for c in (x, y, z))
    return xp + n * yp + n * n * zp


def apply_collisions(world: World, rng: random.Random | None = None) -> None:
    """Collide atoms within each box of the grid and record statistics.

    Must run after velocity integration, or energy is not conserved.  Atoms
    lacking a ``BoxID`` receive one at the next ``World.maintain``.
    """
    if not world.has_resource(ApplyCollisionsOption):
        return
    rng = rng or _default_rng
    params: CollisionParameters = world.resource(CollisionParameters)
    dt = world.resource(Timestep).delta
    tracker: CollisionsTracker = world.resource(CollisionsTracker)

    for entity, _ in world.query(Atom, without=BoxID):
        world.lazy_insert(entity, BoxID(0))

    for _, position, box_id in world.query(Position, BoxID):
        box_id.id = pos_to_id(position.pos, params.box_number, params.box_width)

    boxes: dict[int, CollisionBox] = {}
    for _, velocity, box_id in world.query(Velocity, BoxID):
        if box_id.id == OUT_OF_GRID:
            continue
        boxes.setdefault(box_id.id, CollisionBox()).velocities.append(velocity)

    for collision_box in boxes.values():
        collision_box.do_collisions(params, dt, rng)

    tracker.num_atoms = [b.atom_number for b in boxes.values()]
    tracker.num_collisions = [b.collision_number for b in boxes.values()]
    tracker.num_particles = [b.particle_number for b in boxes.values()]