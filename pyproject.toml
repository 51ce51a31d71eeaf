[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "planarsolver"
version = "0.1.0"
description = "A simple 2D rigid-body constraint solver with pluggable linear and ODE solvers"
requires-python = ">=3.10"
dependencies = []
keywords = ["physics", "rigid body", "constraints", "simulation", "2d", "solver"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["planarsolver*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
