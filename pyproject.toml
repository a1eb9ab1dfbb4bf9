[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "coldsim"
version = "0.7.1"
description = "Data-oriented simulation of cold atom experiments: atom sources, integrators, gravity, collisions and dipole forces."
requires-python = ">=3.10"
keywords = ["physics", "cold-atoms", "amop", "ecs", "simulation", "monte-carlo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["coldsim"]

[tool.pytest.ini_options]
addopts = "-ra"
