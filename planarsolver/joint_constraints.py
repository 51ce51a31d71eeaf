"""Positional constraints: fixed point, fixed angle, link between bodies, line."""

from __future__ import annotations

import math

from .constraint import UNLIMITED, Constraint, ConstraintOutput
from .rigid_body import RigidBody
from .system_state import SystemState


class FixedPositionConstraint(Constraint):
    """Pins a point of a body (in its local frame) to a world position."""

    def __init__(self, body: RigidBody | None = None) -> None:
        super().__init__(2, 1)
        self.bodies[0] = body
        self.local_x = self.local_y = 0.0
        self.world_x = self.world_y = 0.0
        self.ks = 10.0
        self.kd = 1.0

    def set_world_position(self, x: float, y: float) -> None:
        self.world_x = x
        self.world_y = y

    def set_local_position(self, x: float, y: float) -> None:
        self.local_x = x
        self.local_y = y

    def calculate(self, state: SystemState) -> ConstraintOutput:
        body = self._body_index(0)
        q3 = state.theta[body]
        w = state.v_theta[body]
        cos_q3, sin_q3 = math.cos(q3), math.sin(q3)
        lx, ly = self.local_x, self.local_y

        current_x = state.p_x[body] + cos_q3 * lx - sin_q3 * ly
        current_y = state.p_y[body] + sin_q3 * lx + cos_q3 * ly

        out = ConstraintOutput()
        out.j[0][:3] = [1.0, 0.0, -sin_q3 * lx - cos_q3 * ly]
        out.j[1][:3] = [0.0, 1.0, cos_q3 * lx - sin_q3 * ly]
        out.j_dot[0][:3] = [0.0, 0.0, -cos_q3 * w * lx + sin_q3 * w * ly]
        out.j_dot[1][:3] = [0.0, 0.0, -sin_q3 * w * lx - cos_q3 * w * ly]

        out.ks[0] = out.ks[1] = self.ks
        out.kd[0] = out.kd[1] = self.kd
        out.c[0] = current_x - self.world_x
        out.c[1] = current_y - self.world_y
        out.no_limits()
        return out


class FixedRotationConstraint(Constraint):
    """Holds a body at a fixed angle."""

    def __init__(self, body: RigidBody | None = None) -> None:
        super().__init__(1, 1)
        self.bodies[0] = body
        self.rotation = 0.0
        self.ks = 10.0
        self.kd = 1.0

    def calculate(self, state: SystemState) -> ConstraintOutput:
        body = self._body_index(0)
        out = ConstraintOutput()
        out.j[0][:3] = [0.0, 0.0, 1.0]
        out.ks[0] = self.ks
        out.kd[0] = self.kd
        out.c[0] = state.theta[body] - self.rotation
        out.no_limits()
        return out


class LinkConstraint(Constraint):
    """Joins a point of one body to a point of another, like a pin joint."""

    def __init__(
        self, body1: RigidBody | None = None, body2: RigidBody | None = None
    ) -> None:
        super().__init__(2, 2)
        self.bodies[0] = body1
        self.bodies[1] = body2
        self.local_x_1 = self.local_y_1 = 0.0
        self.local_x_2 = self.local_y_2 = 0.0
        self.ks = 10.0
        self.kd = 1.0
        self.max_force = UNLIMITED

    def set_local_position1(self, x: float, y: float) -> None:
        self.local_x_1 = x
        self.local_y_1 = y

    def set_local_position2(self, x: float, y: float) -> None:
        self.local_x_2 = x
        self.local_y_2 = y

    def calculate(self, state: SystemState) -> ConstraintOutput:
        b1 = self._body_index(0)
        b2 = self._body_index(1)

        q3 = state.theta[b1]
        q6 = state.theta[b2]
        w3 = state.v_theta[b1]
        w6 = state.v_theta[b2]
        cos_q3, sin_q3 = math.cos(q3), math.sin(q3)
        cos_q6, sin_q6 = math.cos(q6), math.sin(q6)
        lx1, ly1 = self.local_x_1, self.local_y_1
        lx2, ly2 = self.local_x_2, self.local_y_2

        body_x = state.p_x[b1] + cos_q3 * lx1 - sin_q3 * ly1
        body_y = state.p_y[b1] + sin_q3 * lx1 + cos_q3 * ly1
        linked_x = state.p_x[b2] + cos_q6 * lx2 - sin_q6 * ly2
        linked_y = state.p_y[b2] + sin_q6 * lx2 + cos_q6 * ly2

        out = ConstraintOutput()
        out.j[0] = [
            1.0, 0.0, -sin_q3 * lx1 - cos_q3 * ly1,
            -1.0, 0.0, sin_q6 * lx2 + cos_q6 * ly2,
        ]
        out.j[1] = [
            0.0, 1.0, cos_q3 * lx1 - sin_q3 * ly1,
            0.0, -1.0, -cos_q6 * lx2 + sin_q6 * ly2,
        ]
        out.j_dot[0] = [
            0.0, 0.0, -cos_q3 * w3 * lx1 + sin_q3 * w3 * ly1,
            0.0, 0.0, cos_q6 * w6 * lx2 - sin_q6 * w6 * ly2,
        ]
        out.j_dot[1] = [
            0.0, 0.0, -sin_q3 * w3 * lx1 - cos_q3 * w3 * ly1,
            0.0, 0.0, sin_q6 * w6 * lx2 + cos_q6 * w6 * ly2,
        ]

        out.kd[0] = out.kd[1] = self.kd
        out.ks[0] = out.ks[1] = self.ks
        out.c[0] = body_x - linked_x
        out.c[1] = body_y - linked_y
        out.limits[0] = [-self.max_force, self.max_force]
        out.limits[1] = [-self.max_force, self.max_force]
        return out


class LineConstraint(Constraint):
    """Keeps a point of a body on the line through (p0_x, p0_y) along (dx, dy)."""

    def __init__(self, body: RigidBody | None = None) -> None:
        super().__init__(1, 1)
        self.bodies[0] = body
        self.local_x = self.local_y = 0.0
        self.p0_x = self.p0_y = 0.0
        self.dx = self.dy = 0.0
        self.ks = 10.0
        self.kd = 1.0

    def calculate(self, state: SystemState) -> ConstraintOutput:
        body = self._body_index(0)
        q3 = state.theta[body]
        w = state.v_theta[body]
        cos_q3, sin_q3 = math.cos(q3), math.sin(q3)
        lx, ly = self.local_x, self.local_y

        body_x = state.p_x[body] + cos_q3 * lx - sin_q3 * ly
        body_y = state.p_y[body] + sin_q3 * lx + cos_q3 * ly

        perp_x = -self.dy
        perp_y = self.dx

        delta_x = body_x - self.p0_x
        delta_y = body_y - self.p0_y

        out = ConstraintOutput()
        out.j[0][:3] = [
            perp_x,
            perp_y,
            (-sin_q3 * lx - cos_q3 * ly) * perp_x
            + (cos_q3 * lx - sin_q3 * ly) * perp_y,
        ]
        out.j_dot[0][:3] = [
            0.0,
            0.0,
            (-cos_q3 * w * lx + sin_q3 * w * ly) * perp_x
            + (-sin_q3 * w * lx - cos_q3 * w * ly) * perp_y,
        ]
        out.ks[0] = self.ks
        out.kd[0] = self.kd
        out.c[0] = delta_x * perp_x + delta_y * perp_y
        out.no_limits()
        return out