"""Mathematical and physical constants in SI units."""

import math

#: Reduced Planck constant, J s.
HBAR = 1.0545718e-34

#: Gravitational acceleration, m/s^2.
GC = 9.80665

#: Euler's number.
EXP = math.e

#: Pi.
PI = math.pi

#: Bohr magneton, J/T.
BOHRMAG = 9.274e-24

#: Boltzmann constant, J/K.
BOLTZCONST = 1.38e-23

#: One atomic mass unit, kg.
AMU = 1.6605e-27

#: Speed of light, m/s.
C = 299792458.0

#: Square root of two.
SQRT2 = math.sqrt(2.0)