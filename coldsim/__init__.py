"""Data-oriented simulation of cold atoms: world, integrators, gravity, collisions, dipole forces and atom sources."""

__version__ = "0.7.1"