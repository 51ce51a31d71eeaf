"""Generators that add external forces and torques to a SystemState."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from .rigid_body import RigidBody
from .system_state import SystemState


class ForceGenerator(ABC):
    """Something that adds forces to a system each evaluation."""

    def __init__(self) -> None:
        self.index = -1

    @abstractmethod
    def apply(self, state: SystemState) -> None:
        """Accumulate forces into ``state.f_x``, ``state.f_y`` and ``state.t``."""


def _require(body: RigidBody | None, name: str) -> RigidBody:
    if body is None:
        raise ValueError(f"{name} is not set")
    return body


class GravityForceGenerator(ForceGenerator):
    """Uniform downward gravity on every body."""

    def __init__(self, g: float = 9.81) -> None:
        super().__init__()
        self.g = g

    def apply(self, state: SystemState) -> None:
        for i in range(state.n):
            state.f_y[i] += -state.m[i] * self.g


class StaticForceGenerator(ForceGenerator):
    """A constant force applied at a fixed point of one body."""

    def __init__(self, body: RigidBody | None = None) -> None:
        super().__init__()
        self.body = body
        self.f_x = self.f_y = 0.0
        self.p_x = self.p_y = 0.0

    def set_force(self, f_x: float, f_y: float) -> None:
        self.f_x = f_x
        self.f_y = f_y

    def set_position(self, p_x: float, p_y: float) -> None:
        self.p_x = p_x
        self.p_y = p_y

    def apply(self, state: SystemState) -> None:
        body = _require(self.body, "body")
        state.apply_force(self.p_x, self.p_y, self.f_x, self.f_y, body.index)


class Spring(ForceGenerator):
    """Damped spring between a point on each of two bodies.

    A body with index -1 is treated as fixed: its position is read from the
    body itself and it receives no force.
    """

    def __init__(
        self, body1: RigidBody | None = None, body2: RigidBody | None = None
    ) -> None:
        super().__init__()
        self.body1 = body1
        self.body2 = body2
        self.rest_length = 1.0
        self.ks = 0.0
        self.kd = 0.0
        self.p1_x = self.p1_y = 0.0
        self.p2_x = self.p2_y = 0.0

    @staticmethod
    def _end(
        state: SystemState, body: RigidBody, x: float, y: float
    ) -> tuple[float, float, float, float]:
        if body.index != -1:
            w_x, w_y = state.local_to_world(x, y, body.index)
            v_x, v_y = state.velocity_at_point(x, y, body.index)
            return w_x, w_y, v_x, v_y
        w_x, w_y = body.local_to_world(x, y)
        return w_x, w_y, 0.0, 0.0

    def apply(self, state: SystemState) -> None:
        if self.body1 is None or self.body2 is None:
            return

        x1, y1, v_x1, v_y1 = self._end(state, self.body1, self.p1_x, self.p1_y)
        x2, y2, v_x2, v_y2 = self._end(state, self.body2, self.p2_x, self.p2_y)

        dx = x2 - x1
        dy = y2 - y1
        length = math.hypot(dx, dy)
        if length >= 1e-2:
            dx /= length
            dy /= length
        else:
            dx = dy = 0.0

        rel_v_x = v_x2 - v_x1
        rel_v_y = v_y2 - v_y1
        stretch = length - self.rest_length

        force_x = dx * stretch * self.ks + rel_v_x * self.kd
        force_y = dy * stretch * self.ks + rel_v_y * self.kd

        if self.body1.index != -1:
            state.apply_force(self.p1_x, self.p1_y, force_x, force_y, self.body1.index)
        if self.body2.index != -1:
            state.apply_force(
                self.p2_x, self.p2_y, -force_x, -force_y, self.body2.index
            )

    def ends(self) -> tuple[tuple[float, float], tuple[float, float]] | None:
        """World positions of both attachment points, or None if a body is missing."""
        if self.body1 is None or self.body2 is None:
            return None
        return (
            self.body1.local_to_world(self.p1_x, self.p1_y),
            self.body2.local_to_world(self.p2_x, self.p2_y),
        )

    def energy(self) -> float:
        """Potential energy stored in the spring."""
        ends = self.ends()
        if ends is None:
            return 0.0
        (x1, y1), (x2, y2) = ends
        stretch = math.hypot(x2 - x1, y2 - y1) - self.rest_length
        return 0.5 * self.ks * stretch * stretch


class ConstantSpeedMotor(ForceGenerator):
    """Applies torque between two bodies to drive their relative spin to ``speed``.

    If ``body0`` has index -1 it is treated as a fixed, non-rotating frame.
    """

    def __init__(
        self, body0: RigidBody | None = None, body1: RigidBody | None = None
    ) -> None:
        super().__init__()
        self.body0 = body0
        self.body1 = body1
        self.ks = 1.0
        self.kd = 1.0
        self.max_torque = 500.0
        self.speed = 1.0

    def apply(self, state: SystemState) -> None:
        body0 = _require(self.body0, "body0")
        body1 = _require(self.body1, "body1")

        if body0.index == -1:
            v0 = a0 = 0.0
        else:
            v0 = state.v_theta[body0.index]
            a0 = state.a_theta[body0.index]

        rel_v = state.v_theta[body1.index] - v0
        rel_a = state.a_theta[body1.index] - a0

        total = (self.speed - rel_v) * self.ks - rel_a * self.kd
        limited = min(self.max_torque, max(-self.max_torque, total))

        if body0.index != -1:
            state.t[body0.index] -= limited
        state.t[body1.index] += limited