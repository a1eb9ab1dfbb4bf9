# coldsim

A small, data-oriented toolkit for simulating cold atom experiments. Entities
such as atoms and ovens live in a `World` and carry plain component objects.
Plain system functions advance them one frame at a time. Each system takes
the world and, where it needs randomness, an optional `random.Random`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Concepts

- **World** (`coldsim.world.World`) holds entities (integer ids), their
  components (one of each type per entity) and global resources.
  - `create_entity(*components)` returns a new id.
  - `insert`, `remove`, `get` and `has` work on one entity's components.
  - `query(*types, without=...)` yields `(entity, *components)` in entity order.
  - `insert_resource`, `resource` and `has_resource` manage resources.
  - `lazy_insert`, `lazy_remove` and `delete` are deferred. `maintain()`
    applies the component changes first and then the deletions.
- **Markers**: `NewlyCreated` and `ToBeDestroyed` (`coldsim.world`).
  `deflag_new_atoms` schedules removal of `NewlyCreated` from every entity.
  `delete_to_be_destroyed` schedules deletion of every entity marked
  `ToBeDestroyed`.
- **Atom components** (`coldsim.atom`):
  - `Position` (m), `Velocity` (m/s), `InitialVelocity` and `Force` (N) hold
    3-vectors stored as numpy arrays.
  - `Mass` is in atomic mass units. `Atom` is a marker.
  - `clear_forces` zeroes every force.
- **Constants** (`coldsim.constant`): `HBAR`, `GC`, `EXP`, `PI`, `BOHRMAG`,
  `BOLTZCONST`, `AMU`, `C` and `SQRT2`.

## Systems

| Module | Functions | Notes |
| --- | --- | --- |
| `coldsim.integrator` | `euler_integrate`, `verlet_integrate_position`, `verlet_integrate_velocity`, `add_old_force_to_new_atoms`, `euler_update` | Need the `Timestep` and `Step` resources. The Verlet pair uses an `OldForce` component. |
| `coldsim.gravity` | `apply_gravity` | Acts only when the `ApplyGravityOption` resource is present. |
| `coldsim.collisions` | `apply_collisions` | Direct-simulation Monte Carlo collisions on a cubic grid of boxes; see below. |
| `coldsim.dipole` | `apply_dipole_force` | Adds `Polarizability.prefactor` times the intensity gradient of each `DipoleLight` beam. The gradients are read from the atom's `IntensityGradientSamplers`. |

## Example: a falling atom

```python
import numpy as np

from coldsim.world import World, NewlyCreated, deflag_new_atoms
from coldsim.atom import Atom, Force, Mass, Position, Velocity, clear_forces
from coldsim.gravity import ApplyGravityOption, apply_gravity
from coldsim.integrator import (
    Step,
    Timestep,
    add_old_force_to_new_atoms,
    verlet_integrate_position,
    verlet_integrate_velocity,
)

world = World()
world.insert_resource(Timestep(1.0e-6))
world.insert_resource(Step(0))
world.insert_resource(ApplyGravityOption())

world.create_entity(
    Position(np.zeros(3)),
    Velocity(np.array([0.0, 0.0, 1.0])),
    Force(),
    Mass(87.0),
    Atom(),
    NewlyCreated(),
)

for _ in range(1000):
    add_old_force_to_new_atoms(world)
    deflag_new_atoms(world)
    world.maintain()
    verlet_integrate_position(world)
    clear_forces(world)
    apply_gravity(world)
    verlet_integrate_velocity(world)
```

## Collisions

To switch collisions on, insert these resources:

- `ApplyCollisionsOption`
- `CollisionParameters(macroparticle, box_number, box_width, sigma, collision_limit)`
- `CollisionsTracker()`

`apply_collisions` works in these steps:

1. It gives every `Atom` a `BoxID`. The new `BoxID` components arrive at the
   next `maintain()`.
2. It bins atoms by `pos_to_id`. Atoms outside the grid get `OUT_OF_GRID` and
   never collide.
3. It collides random pairs in each box.
4. It records per-box counts in the tracker.

If a box would need more collisions than `collision_limit`, it raises
`CollisionLimitExceeded`.

## Atom sources

`coldsim.sources` holds the pieces for creating atoms.

- **`distribution`**
  - `WeightedProbabilityDistribution` does weighted discrete sampling.
  - `VelocityCap` is a resource holding the greatest speed at which sources
    emit atoms.
  - `AtomCreator` names a species. It holds factories for the extra components
    it adds to each new atom.
- **`mass`**: `MassDistribution` and `MassRatio` describe isotope abundances.
- **`emit`**
  - `EmitNumberPerFrame`, `EmitFixedRate` and `EmitOnce` choose how much a
    source emits.
  - `emit_number_per_frame`, `emit_fixed_rate` and `emit_once` fill in each
    source's `AtomNumberToEmit`.
- **`precalc`**
  - `probability_v` and `create_v_distribution` give the effusive
    Maxwell-Boltzmann speed distribution.
  - `precalculate_for_species` replaces a source's `MassDistribution` with
    `PrecalculatedSpeciesInformation`.
- **`oven`**
  - `OvenBuilder` and `Oven` model the oven. `CubicAperture` and
    `CircularAperture` model its aperture.
  - `jtheta` and `create_jtheta_distribution` give the angular emission
    profile.
  - `oven_create_atoms` creates atoms from ovens.
- **`gaussian`**
  - `GaussianVelocityDistributionSourceDefinition` defines a source by the
    mean and spread of its velocities on each axis.
  - `precalculate_gaussian_sources` attaches the precalculated distributions
    to such sources.
  - `gaussian_create_atoms` creates atoms from them.

```python
import random

from coldsim.world import World
from coldsim.atom import Position
from coldsim.sources.distribution import AtomCreator
from coldsim.sources.emit import AtomNumberToEmit, EmitOnce, emit_once
from coldsim.sources.mass import MassDistribution, MassRatio
from coldsim.sources.oven import CircularAperture, Oven, OvenBuilder, oven_create_atoms
from coldsim.sources.precalc import precalculate_for_species

strontium = AtomCreator("strontium88")
oven = (
    OvenBuilder(776.0, [1.0, 0.0, 0.0], strontium)
    .with_aperture(CircularAperture(radius=0.005, thickness=0.001))
    .build()
)

world = World()
world.create_entity(
    oven,
    Position([-0.083, 0.0, 0.0]),
    MassDistribution([MassRatio(88.0, 1.0)]),
    AtomNumberToEmit(1000),
    EmitOnce(),
)

rng = random.Random(1)
precalculate_for_species(world, Oven)
oven_create_atoms(world, rng)
emit_once(world)
world.maintain()  # the new atoms receive their components here
```

Pass a seeded `random.Random` to the sampling functions to make a run
reproducible.

## What this package does not do

- **No scheduler.** There is no simulation builder and no plugin system. You
  call the system functions yourself, in the order you want, and call
  `World.maintain()` between them.
- **No laser beams.** There are no beam shapes, no laser cooling and no
  scattering rates.
- **No intensity gradients.** `apply_dipole_force` reads gradients that the
  caller has stored in `IntensityGradientSamplers`. It does not compute them
  from a beam.
- **No magnetic fields or magnetic forces.**
- **No simulation volumes.**
- **No surface sources.**
- **No file output.** Nothing is written to disk.
- **No command-line program.**