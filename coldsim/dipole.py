"""Optical dipole forces from far-detuned laser beams."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from coldsim import constant
from coldsim.atom import Force
from coldsim.world import World


@dataclass(frozen=True)
class DipoleLight:
    """Marks a laser beam as dipole-trapping light.

    ``wavelength`` is in metres; ``index`` is the beam's slot in each atom's
    ``IntensityGradientSamplers``.
    """

    wavelength: float
    index: int = 0

    def frequency(self) -> float:
        """Frequency of the light, Hz."""
        return constant.C / self.wavelength

    def wavenumber(self) -> float:
        """Wavenumber of the light, radians per metre."""
        return 2.0 * constant.PI / self.wavelength


@dataclass(frozen=True)
class Polarizability:
    """How strongly an atom is pushed by an intensity gradient.

    The force on the atom, in newtons, is ``prefactor * intensity_gradient``
    with the gradient in W/m^3.
    """

    prefactor: float

    @classmethod
    def calculate_for(
        cls,
        dipole_beam_wavelength: float,
        optical_transition_wavelength: float,
        optical_transition_linewidth: float,
    ) -> Polarizability:
        """Polarizability in a beam detuned from a strong optical transition.

        Wavelengths in metres, linewidth in Hz.
        """
        transition_f = constant.C / optical_transition_wavelength
        dipole_f = constant.C / dipole_beam_wavelength
        prefactor = (
            -3.0
            * constant.PI
            * constant.C**2
            / (2.0 * (2.0 * constant.PI * transition_f) ** 3)
            * optical_transition_linewidth
            * -(1.0 / (transition_f - dipole_f) + 1.0 / (transition_f + dipole_f))
        )
        return cls(prefactor)


@dataclass
class IntensityGradientSamplers:
    """Intensity gradient of each laser beam at an atom, one row per beam, W/m^3."""

    contents: np.ndarray

    def __post_init__(self) -> None:
        array = np.array(self.contents, dtype=float)
        if array.ndim != 2 or array.shape[1] != 3:
            raise ValueError("expected one 3-vector gradient per beam")
        self.contents = array


def apply_dipole_force(world: World) -> None:
    """Add the force of every dipole beam to each polarizable atom."""
    lights = [light for _, light in world.query(DipoleLight)]
    if not lights:
        return
    for _, force, polarizability, samplers in world.query(
        Force, Polarizability, IntensityGradientSamplers
    ):
        beams = len(samplers.contents)
        total = np.zeros(3)
        for light in lights:
            if not 0 <= light.index < beams:
                raise IndexError(
                    f"dipole beam index {light.index} outside {beams} samplers"
                )
            total = total + polarizability.prefactor * samplers.contents[light.index]
        force.force = force.force + total