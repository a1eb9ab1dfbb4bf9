import math
import random
from dataclasses import dataclass

import numpy as np
import pytest

from coldsim.atom import Atom, InitialVelocity, Mass, Position, Velocity
from coldsim.sources.distribution import AtomCreator, VelocityCap
from coldsim.sources.emit import AtomNumberToEmit
from coldsim.sources.mass import MassDistribution, MassRatio
from coldsim.sources.oven import (
    CircularAperture,
    CubicAperture,
    Oven,
    OvenBuilder,
    create_jtheta_distribution,
    jtheta,
    oven_create_atoms,
    velocity_generate,
)
from coldsim.sources.precalc import (
    PrecalculatedSpeciesInformation,
    precalculate_for_species,
)
from coldsim.world import NewlyCreated, World


@dataclass
class Marker:
    pass


SPECIES = AtomCreator("test", (Marker,))


def _world_with_oven(builder, number=50):
    world = World()
    oven = builder.build()
    source = world.create_entity(
        oven,
        Position([0.1, 0.0, 0.0]),
        MassDistribution([MassRatio(88.0, 1.0)]),
        AtomNumberToEmit(number),
    )
    precalculate_for_species(world, Oven)
    return world, source


def _atoms(world):
    return list(world.query(Atom, Position, Velocity, Mass))


def test_jtheta_is_one_on_axis():
    assert jtheta(1e-7, 0.2e-3, 4e-3) == pytest.approx(1.0, rel=1e-5)


def test_jtheta_is_continuous_at_branch_point():
    radius, length = 0.2e-3, 4e-3
    beta = 2.0 * radius / length
    edge = math.atan(beta)
    below = jtheta(edge * (1 - 1e-9), radius, length)
    above = jtheta(edge * (1 + 1e-9), radius, length)
    assert below == pytest.approx(above, rel=1e-6)


def test_jtheta_decreases_away_from_axis():
    values = [jtheta(t, 0.2e-3, 4e-3) for t in (0.01, 0.2, 0.5, 1.0, 1.4)]
    assert all(a > b for a, b in zip(values, values[1:]))
    assert all(v > 0 for v in values)


def test_jtheta_distribution_spans_quarter_turn():
    dist = create_jtheta_distribution(0.2e-3, 4e-3)
    assert len(dist) == 1000
    assert all(0.0 < t < math.pi / 2 for t in dist.values)
    assert list(dist.values) == sorted(dist.values)


def test_velocity_generate_magnitude_and_angle():
    rng = random.Random(1)
    dist = create_jtheta_distribution(0.2e-3, 4e-3)
    direction = np.array([0.0, 3.0, 4.0])
    for _ in range(50):
        velocity, theta = velocity_generate(250.0, direction, dist, rng)
        assert np.linalg.norm(velocity) == pytest.approx(250.0)
        cos_angle = velocity @ (direction / 5.0) / 250.0
        assert cos_angle == pytest.approx(math.cos(theta), abs=1e-9)


def test_builder_defaults_and_setters():
    builder = OvenBuilder(776.0, [2.0, 0.0, 0.0], SPECIES)
    oven = builder.build()
    assert oven.max_theta == pytest.approx(math.pi / 2)
    assert oven.aperture == CircularAperture(radius=3.0e-3, thickness=1.0e-3)
    np.testing.assert_allclose(oven.direction, [1.0, 0.0, 0.0])
    assert oven.temperature == 776.0
    assert oven.v_dist_power == 3.0

    cubic = CubicAperture((1e-3, 2e-3, 3e-3))
    same = builder.with_lip(2.0, 1.0).with_aperture(cubic)
    assert same is builder
    built = builder.build()
    assert built.max_theta == pytest.approx(math.atan(0.5))
    assert built.aperture == cubic


def test_builder_rejects_zero_direction():
    with pytest.raises(ValueError):
        OvenBuilder(300.0, [0.0, 0.0, 0.0], SPECIES)


def test_circular_spawn_position_within_aperture():
    rng = random.Random(2)
    aperture = CircularAperture(radius=0.005, thickness=0.001)
    oven = OvenBuilder(300.0, [1.0, 1.0, 0.0], SPECIES).with_aperture(aperture).build()
    for _ in range(200):
        point = oven.random_spawn_position(rng)
        along = point @ oven.direction
        radial = np.linalg.norm(point - along * oven.direction)
        assert abs(along) <= 0.0005 + 1e-15
        assert radial <= 0.005 + 1e-12


def test_cubic_spawn_position_within_aperture():
    rng = random.Random(3)
    size = (1e-3, 2e-3, 3e-3)
    oven = (
        OvenBuilder(300.0, [0.0, 0.0, 1.0], SPECIES)
        .with_aperture(CubicAperture(size))
        .build()
    )
    for _ in range(200):
        point = oven.random_spawn_position(rng)
        assert all(abs(p) <= s / 2 for p, s in zip(point, size))


def test_oven_creates_atoms():
    builder = OvenBuilder(776.0, [1.0, 0.0, 0.0], SPECIES)
    world, source = _world_with_oven(builder, number=50)
    assert world.has(source, PrecalculatedSpeciesInformation)
    assert not world.has(source, MassDistribution)

    oven_create_atoms(world, random.Random(4))
    world.maintain()
    atoms = _atoms(world)
    assert len(atoms) == 50
    for entity, _, position, velocity, mass in atoms:
        assert mass.value == 88.0
        assert world.has(entity, Marker)
        assert world.has(entity, NewlyCreated)
        np.testing.assert_array_equal(world.get(entity, InitialVelocity).vel, velocity.vel)
        assert np.linalg.norm(position.pos - np.array([0.1, 0.0, 0.0])) < 0.01
        assert velocity.vel[0] > 0.0


def test_velocity_cap_blocks_all_atoms():
    builder = OvenBuilder(776.0, [1.0, 0.0, 0.0], SPECIES)
    world, _ = _world_with_oven(builder, number=30)
    world.insert_resource(VelocityCap(0.0))
    oven_create_atoms(world, random.Random(5))
    world.maintain()
    assert _atoms(world) == []


def test_closed_lip_blocks_all_atoms():
    builder = OvenBuilder(776.0, [1.0, 0.0, 0.0], SPECIES).with_lip(1.0, 0.0)
    world, _ = _world_with_oven(builder, number=30)
    oven_create_atoms(world, random.Random(6))
    world.maintain()
    assert _atoms(world) == []


def test_velocity_cap_respected():
    builder = OvenBuilder(776.0, [0.0, 0.0, 1.0], SPECIES)
    world, _ = _world_with_oven(builder, number=200)
    world.insert_resource(VelocityCap(300.0))
    oven_create_atoms(world, random.Random(7))
    world.maintain()
    atoms = _atoms(world)
    assert 0 < len(atoms) < 200
    assert all(np.linalg.norm(v.vel) <= 300.0 for _, _, _, v, _ in atoms)