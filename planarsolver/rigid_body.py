"""A planar rigid body."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class RigidBody:
    """Position, velocity, mass and inertia of a body in the plane.

    ``index`` is the body's slot in a system, or -1 when it is not part of one.
    """

    p_x: float = 0.0
    p_y: float = 0.0
    v_x: float = 0.0
    v_y: float = 0.0
    theta: float = 0.0
    v_theta: float = 0.0
    m: float = 0.0
    I: float = 0.0  # noqa: E741
    index: int = -1

    def local_to_world(self, x: float, y: float) -> tuple[float, float]:
        """Transform a point in the body frame into world coordinates."""
        cos_theta = math.cos(self.theta)
        sin_theta = math.sin(self.theta)
        return (
            cos_theta * x - sin_theta * y + self.p_x,
            sin_theta * x + cos_theta * y + self.p_y,
        )

    def world_to_local(self, x: float, y: float) -> tuple[float, float]:
        """Transform a world point into the body frame."""
        cos_theta = math.cos(self.theta)
        sin_theta = math.sin(self.theta)
        dx = x - self.p_x
        dy = y - self.p_y
        return (
            cos_theta * dx + sin_theta * dy,
            -sin_theta * dx + cos_theta * dy,
        )

    def reset(self) -> None:
        """Zero the kinematic and mass properties; the index is kept."""
        self.p_x = self.p_y = 0.0
        self.v_x = self.v_y = 0.0
        self.theta = 0.0
        self.v_theta = 0.0
        self.m = 0.0
        self.I = 0.0

    def energy(self) -> float:
        """Kinetic energy, translational plus rotational."""
        speed_2 = self.v_x * self.v_x + self.v_y * self.v_y
        return 0.5 * self.m * speed_2 + 0.5 * self.I * self.v_theta * self.v_theta