"""Simple 2D rigid-body constraint solver: bodies, constraints, force generators, linear and ODE solvers."""

__version__ = "0.1.0"