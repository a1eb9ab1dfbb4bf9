import numpy as np
import pytest

from coldsim import constant
from coldsim.atom import Force
from coldsim.dipole import (
    DipoleLight,
    IntensityGradientSamplers,
    Polarizability,
    apply_dipole_force,
)
from coldsim.world import World

BEAMS = 8


def _samplers(gradient):
    return IntensityGradientSamplers([gradient] * BEAMS)


def test_dipole_light_frequency():
    light = DipoleLight(wavelength=1064.0e-9)
    assert light.frequency() == pytest.approx(constant.C / 1064.0e-9)
    assert light.frequency() == pytest.approx(2.8176e14, rel=1e-4)


def test_dipole_light_wavenumber():
    light = DipoleLight(wavelength=1064.0e-9)
    assert light.wavenumber() == pytest.approx(5.905249e6, rel=1e-6)


def test_red_detuned_polarizability_is_attractive():
    assert Polarizability.calculate_for(1064e-9, 461e-9, 32e6).prefactor > 0


def test_blue_detuned_polarizability_is_repulsive():
    assert Polarizability.calculate_for(400e-9, 461e-9, 32e6).prefactor < 0


def test_polarizability_scales_with_linewidth():
    one = Polarizability.calculate_for(1064e-9, 461e-9, 32e6).prefactor
    two = Polarizability.calculate_for(1064e-9, 461e-9, 64e6).prefactor
    assert two == pytest.approx(2.0 * one)


def test_apply_dipole_force_direction():
    world = World()
    world.create_entity(DipoleLight(wavelength=1064.0e-9, index=0))
    transition = Polarizability.calculate_for(1064e-9, 461e-9, 32e6)
    atom = world.create_entity(Force(), _samplers([0.0, 1.0, -2.0]), transition)
    apply_dipole_force(world)
    force = world.get(atom, Force).force
    assert force[0] == 0.0
    assert force[1] > 0.0
    assert force[2] == pytest.approx(-2.0 * force[1])


def test_apply_dipole_force_again():
    world = World()
    world.create_entity(DipoleLight(wavelength=1064.0e-9, index=0))
    transition = Polarizability.calculate_for(1064e-9, 461e-9, 32e6)
    atom = world.create_entity(
        Force(),
        _samplers([-8.4628e7, -4.33992902e13, -4.33992902e13]),
        transition,
    )
    apply_dipole_force(world)
    force = world.get(atom, Force).force
    assert force[0] == pytest.approx(-6.386888332902177e-29, abs=3e-30)
    assert force[1] == pytest.approx(-3.11151847e-23, abs=2e-24)
    assert force[2] == pytest.approx(-3.11151847e-23, abs=2e-24)


def test_forces_from_two_beams_add():
    world = World()
    world.create_entity(DipoleLight(wavelength=1064.0e-9, index=0))
    world.create_entity(DipoleLight(wavelength=1064.0e-9, index=1))
    gradients = np.zeros((BEAMS, 3))
    gradients[0] = [1.0, 0.0, 0.0]
    gradients[1] = [0.0, 3.0, 0.0]
    atom = world.create_entity(
        Force(), IntensityGradientSamplers(gradients), Polarizability(2.0)
    )
    apply_dipole_force(world)
    assert world.get(atom, Force).force.tolist() == [2.0, 6.0, 0.0]


def test_existing_force_is_kept():
    world = World()
    world.create_entity(DipoleLight(wavelength=1064.0e-9))
    atom = world.create_entity(
        Force([1.0, 1.0, 1.0]), _samplers([1.0, 0.0, 0.0]), Polarizability(0.5)
    )
    apply_dipole_force(world)
    assert world.get(atom, Force).force.tolist() == [1.5, 1.0, 1.0]


def test_no_dipole_light_leaves_force_unchanged():
    world = World()
    atom = world.create_entity(
        Force(), _samplers([1.0, 2.0, 3.0]), Polarizability(1.0)
    )
    apply_dipole_force(world)
    assert world.get(atom, Force).force.tolist() == [0.0, 0.0, 0.0]


def test_atom_without_polarizability_is_untouched():
    world = World()
    world.create_entity(DipoleLight(wavelength=1064.0e-9))
    atom = world.create_entity(Force(), _samplers([1.0, 2.0, 3.0]))
    apply_dipole_force(world)
    assert world.get(atom, Force).force.tolist() == [0.0, 0.0, 0.0]


def test_beam_index_outside_samplers_raises():
    world = World()
    world.create_entity(DipoleLight(wavelength=1064.0e-9, index=BEAMS))
    world.create_entity(Force(), _samplers([1.0, 0.0, 0.0]), Polarizability(1.0))
    with pytest.raises(IndexError):
        apply_dipole_force(world)


def test_samplers_reject_bad_shape():
    with pytest.raises(ValueError):
        IntensityGradientSamplers([[1.0, 2.0]])