"""Constraint that makes one body roll without slipping along a line on another."""

from __future__ import annotations

import math

from .constraint import Constraint, ConstraintOutput
from .rigid_body import RigidBody
from .system_state import SystemState


class RollingConstraint(Constraint):
    """Keeps a round body of ``radius`` touching a line fixed to a base body.

    The line passes through (``local_x``, ``local_y``) in the base body's frame
    with direction (``dx``, ``dy``). The first row ties the rolling body's
    rotation to the distance travelled along the line, and the second keeps
    its centre at ``radius`` from the line.
    """

    def __init__(
        self,
        base_body: RigidBody | None = None,
        rolling_body: RigidBody | None = None,
    ) -> None:
        super().__init__(2, 2)
        self.bodies[0] = base_body
        self.bodies[1] = rolling_body
        self.local_x = self.local_y = 0.0
        self.dx = self.dy = 0.0
        self.radius = 0.0
        self.ks = 10.0
        self.kd = 1.0

    def calculate(self, state: SystemState) -> ConstraintOutput:
        base = self._body_index(0)
        rolling = self._body_index(1)

        q1 = state.p_x[base]
        q2 = state.p_y[base]
        q3 = state.theta[base]

        q4 = state.p_x[rolling]
        q5 = state.p_y[rolling]
        q6 = state.theta[rolling]

        q1_dot = state.v_x[base]
        q2_dot = state.v_y[base]
        w = state.v_theta[base]

        q4_dot = state.v_x[rolling]
        q5_dot = state.v_y[rolling]

        lx, ly = self.local_x, self.local_y
        mdx, mdy = self.dx, self.dy
        r = self.radius

        cos_q3 = math.cos(q3)
        sin_q3 = math.sin(q3)

        origin_x = q1 + cos_q3 * lx - sin_q3 * ly
        origin_y = q2 + sin_q3 * lx + cos_q3 * ly
        dx = cos_q3 * mdx - sin_q3 * mdy
        dy = sin_q3 * mdx + cos_q3 * mdy

        dx_dot = -sin_q3 * w * mdx - cos_q3 * w * mdy
        dy_dot = cos_q3 * w * mdx - sin_q3 * w * mdy

        perp_x = -dy
        perp_y = dx

        delta_x = q4 - origin_x
        delta_y = q5 - origin_y

        delta_x_dot = q4_dot - (q1_dot - sin_q3 * w * lx - cos_q3 * w * ly)
        delta_y_dot = q5_dot - (q2_dot + cos_q3 * w * lx - sin_q3 * w * ly)

        s = delta_x * dx + delta_y * dy

        c0 = -q6 - s * r
        c1 = r - (perp_x * delta_x + perp_y * delta_y)

        d_origin_x_dq3 = -sin_q3 * lx - cos_q3 * ly
        d_origin_y_dq3 = cos_q3 * lx - sin_q3 * ly

        d_delta_x_dq1 = -1.0
        d_delta_x_dq3 = -d_origin_x_dq3
        d_delta_x_dq4 = 1.0

        d_delta_y_dq2 = -1.0
        d_delta_y_dq3 = -d_origin_y_dq3
        d_delta_y_dq5 = 1.0

        d_dx_dq3 = -dy
        d_dy_dq3 = dx

        d_dx_dq3_dot = -cos_q3 * w * mdx + sin_q3 * w * mdy
        d_dy_dq3_dot = -sin_q3 * w * mdx - cos_q3 * w * mdy
        d_delta_x_dq3_dot = cos_q3 * w * lx - sin_q3 * w * ly
        d_delta_y_dq3_dot = sin_q3 * w * lx + cos_q3 * w * ly

        ds_dq1 = d_delta_x_dq1 * dx
        ds_dq2 = d_delta_y_dq2 * dy
        ds_dq3 = (d_delta_x_dq3 * dx + delta_x * d_dx_dq3) + (
            d_delta_y_dq3 * dy + delta_y * d_dy_dq3
        )

        ds_dq1_dot = d_delta_x_dq1 * dx_dot
        ds_dq2_dot = d_delta_y_dq2 * dy_dot
        ds_dq3_dot = (
            (d_delta_x_dq3_dot * dx + d_delta_x_dq3 * dx_dot)
            + (delta_x_dot * d_dx_dq3 + delta_x * d_dx_dq3_dot)
            + (d_delta_y_dq3_dot * dy + d_delta_y_dq3 * dy_dot)
            + (delta_y_dot * d_dy_dq3 + delta_y * d_dy_dq3_dot)
        )

        out = ConstraintOutput()
        out.j[0] = [
            -ds_dq1 * r,
            -ds_dq2 * r,
            -ds_dq3 * r,
            -dx * r,
            -dy * r,
            -1.0,
        ]
        out.j[1] = [
            dy * d_delta_x_dq1,
            -dx * d_delta_y_dq2,
            (d_dy_dq3 * delta_x + dy * d_delta_x_dq3)
            - (d_dx_dq3 * delta_y + dx * d_delta_y_dq3),
            dy * d_delta_x_dq4,
            -dx * d_delta_y_dq5,
            0.0,
        ]

        out.j_dot[0] = [
            -ds_dq1_dot * r,
            -ds_dq2_dot * r,
            -ds_dq3_dot * r,
            -dx_dot * r,
            -dy_dot * r,
            0.0,
        ]
        out.j_dot[1] = [
            dy_dot * d_delta_x_dq1,
            -dx_dot * d_delta_y_dq2,
            (d_dy_dq3_dot * delta_x + d_dy_dq3 * delta_x_dot)
            + (dy_dot * d_delta_x_dq3 + dy * d_delta_x_dq3_dot)
            - (d_dx_dq3_dot * delta_y + d_dx_dq3 * delta_y_dot)
            - (dx_dot * d_delta_y_dq3 + dx * d_delta_y_dq3_dot),
            dy_dot * d_delta_x_dq4,
            -dx_dot * d_delta_y_dq5,
            0.0,
        ]

        out.ks[0] = 0.0
        out.kd[0] = 0.0
        out.ks[1] = self.ks
        out.kd[1] = self.kd

        out.c[0] = c0
        out.c[1] = c1

        out.v_bias[0] = 0.0
        out.v_bias[1] = 0.0

        out.no_limits()
        return out