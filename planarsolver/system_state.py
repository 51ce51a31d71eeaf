"""Flat per-body and per-constraint state arrays integrated by the ODE solvers."""

from __future__ import annotations

import math

_BODY_FIELDS = (
    "a_theta",
    "v_theta",
    "theta",
    "a_x",
    "a_y",
    "v_x",
    "v_y",
    "p_x",
    "p_y",
    "f_x",
    "f_y",
    "t",
    "m",
)

_REACTION_FIELDS = ("r_x", "r_y", "r_t")


class SystemState:
    """State of ``n`` bodies and ``n_c`` scalar constraints.

    Body quantities are lists of length ``n``. Constraint reaction forces
    (``r_x``, ``r_y``, ``r_t``) hold two slots per constraint, one per body.
    """

    def __init__(self, body_count: int = 0, constraint_count: int = 0) -> None:
        self.n = 0
        self.n_c = 0
        self.dt = 0.0
        self._allocate(0, 0)
        self.resize(body_count, constraint_count)

    def _allocate(self, body_count: int, constraint_count: int) -> None:
        if body_count < 0 or constraint_count < 0:
            raise ValueError("counts must not be negative")
        self.n = body_count
        self.n_c = constraint_count
        for name in _BODY_FIELDS:
            setattr(self, name, [0.0] * body_count)
        for name in _REACTION_FIELDS:
            setattr(self, name, [0.0] * (2 * constraint_count))
        self.index_map = [0] * constraint_count

    def resize(self, body_count: int, constraint_count: int) -> None:
        """Reallocate if either count grows; contents are then zeroed.

        The state never shrinks: if it already holds at least the requested
        number of bodies and constraints it is left untouched.
        """
        if self.n >= body_count and self.n_c >= constraint_count:
            return
        self._allocate(body_count, constraint_count)

    def copy(self) -> SystemState:
        """Return an independent copy of the arrays."""
        result = SystemState(self.n, self.n_c)
        for name in _BODY_FIELDS + _REACTION_FIELDS:
            setattr(result, name, list(getattr(self, name)))
        result.index_map = list(self.index_map)
        return result

    def local_to_world(self, x: float, y: float, body: int) -> tuple[float, float]:
        """Transform a point in ``body``'s frame into world coordinates."""
        cos_theta = math.cos(self.theta[body])
        sin_theta = math.sin(self.theta[body])
        return (
            cos_theta * x - sin_theta * y + self.p_x[body],
            sin_theta * x + cos_theta * y + self.p_y[body],
        )

    def velocity_at_point(self, x: float, y: float, body: int) -> tuple[float, float]:
        """World velocity of the point at local (x, y) on ``body``."""
        w_x, w_y = self.local_to_world(x, y, body)
        omega = self.v_theta[body]
        return (
            self.v_x[body] - omega * (w_y - self.p_y[body]),
            self.v_y[body] + omega * (w_x - self.p_x[body]),
        )

    def apply_force(
        self, x_l: float, y_l: float, f_x: float, f_y: float, body: int
    ) -> None:
        """Accumulate a force applied at local point (x_l, y_l) and its torque."""
        w_x, w_y = self.local_to_world(x_l, y_l, body)
        self.f_x[body] += f_x
        self.f_y[body] += f_y
        self.t[body] += (w_y - self.p_y[body]) * -f_x + (w_x - self.p_x[body]) * f_y