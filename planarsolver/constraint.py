"""Base class for constraints and the per-constraint output record."""

from __future__ import annotations

import sys

from .system_state import SystemState

MAX_CONSTRAINT_COUNT = 3
MAX_BODY_COUNT = 2

UNLIMITED = sys.float_info.max


def _zero_rows(width: int) -> list[list[float]]:
    return [[0.0] * width for _ in range(MAX_CONSTRAINT_COUNT)]


class ConstraintOutput:
    """Values a constraint reports for one evaluation.

    Each list has one row per scalar constraint (up to ``MAX_CONSTRAINT_COUNT``).
    ``j`` and ``j_dot`` rows have three columns (x, y, theta) per body.
    ``limits`` rows are ``[lower, upper]`` bounds on the constraint force.
    """

    __slots__ = ("c", "j", "j_dot", "v_bias", "limits", "ks", "kd")

    def __init__(self) -> None:
        width = 3 * MAX_BODY_COUNT
        self.c = [0.0] * MAX_CONSTRAINT_COUNT
        self.j = _zero_rows(width)
        self.j_dot = _zero_rows(width)
        self.v_bias = [0.0] * MAX_CONSTRAINT_COUNT
        self.ks = [0.0] * MAX_CONSTRAINT_COUNT
        self.kd = [0.0] * MAX_CONSTRAINT_COUNT
        self.limits: list[list[float]] = []
        self.no_limits()

    def no_limits(self) -> None:
        """Make every constraint force unbounded."""
        self.limits = [[-UNLIMITED, UNLIMITED] for _ in range(MAX_CONSTRAINT_COUNT)]


class Constraint:
    """A set of up to three scalar constraints acting on up to two bodies.

    ``bodies`` holds the constrained rigid bodies; ``f_x``, ``f_y`` and
    ``f_t`` receive the reaction forces per constraint row and body once a
    system has been processed.
    """

    def __init__(self, constraint_count: int, body_count: int) -> None:
        if not 0 <= constraint_count <= MAX_CONSTRAINT_COUNT:
            raise ValueError(
                f"constraint count must be between 0 and {MAX_CONSTRAINT_COUNT}"
            )
        if not 0 <= body_count <= MAX_BODY_COUNT:
            raise ValueError(f"body count must be between 0 and {MAX_BODY_COUNT}")

        self._constraint_count = constraint_count
        self.body_count = body_count
        self.index = -1
        self.bodies: list = [None] * body_count

        self.f_x = [[0.0] * MAX_BODY_COUNT for _ in range(MAX_CONSTRAINT_COUNT)]
        self.f_y = [[0.0] * MAX_BODY_COUNT for _ in range(MAX_CONSTRAINT_COUNT)]
        self.f_t = [[0.0] * MAX_BODY_COUNT for _ in range(MAX_CONSTRAINT_COUNT)]

    @property
    def constraint_count(self) -> int:
        return self._constraint_count

    def calculate(self, state: SystemState) -> ConstraintOutput:
        """Evaluate the constraint against ``state``."""
        return ConstraintOutput()

    def _body_index(self, slot: int) -> int:
        body = self.bodies[slot]
        if body is None:
            raise ValueError(f"no body attached in slot {slot}")
        if body.index == -1:
            raise ValueError(f"body in slot {slot} is not part of a system")
        return body.index