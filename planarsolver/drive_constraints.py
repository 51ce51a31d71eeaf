"""Rotational drive constraints: constant spin, clutch, friction and gearing."""

from __future__ import annotations

from .constraint import UNLIMITED, Constraint, ConstraintOutput
from .rigid_body import RigidBody
from .system_state import SystemState


class ConstantRotationConstraint(Constraint):
    """Drives a body's angular velocity towards ``rotation_speed``.

    The driving torque is bounded by ``min_torque`` and ``max_torque``.
    """

    def __init__(self, body: RigidBody | None = None) -> None:
        super().__init__(1, 1)
        self.bodies[0] = body
        self.rotation_speed = 0.0
        self.max_torque = UNLIMITED
        self.min_torque = -UNLIMITED
        self.ks = 10.0
        self.kd = 1.0

    def calculate(self, state: SystemState) -> ConstraintOutput:
        out = ConstraintOutput()
        out.j[0][:3] = [0.0, 0.0, 1.0]
        out.ks[0] = self.ks
        out.kd[0] = self.kd
        out.c[0] = 0.0
        out.v_bias[0] = self.rotation_speed
        out.limits[0] = [self.min_torque, self.max_torque]
        return out


class ClutchConstraint(Constraint):
    """Couples the spin of two bodies with a bounded transmitted torque."""

    def __init__(
        self, body1: RigidBody | None = None, body2: RigidBody | None = None
    ) -> None:
        super().__init__(1, 2)
        self.bodies[0] = body1
        self.bodies[1] = body2
        self.ks = 10.0
        self.kd = 1.0
        self.max_torque = UNLIMITED
        self.min_torque = -UNLIMITED

    def calculate(self, state: SystemState) -> ConstraintOutput:
        out = ConstraintOutput()
        out.c[0] = 0.0
        out.j[0] = [0.0, 0.0, -1.0, 0.0, 0.0, 1.0]
        out.kd[0] = self.kd
        out.ks[0] = self.ks
        out.v_bias[0] = 0.0
        out.limits[0] = [self.min_torque, self.max_torque]
        return out


class RotationFrictionConstraint(Constraint):
    """Resists a body's spin with a bounded friction torque."""

    def __init__(self, body: RigidBody | None = None) -> None:
        super().__init__(1, 1)
        self.bodies[0] = body
        self.ks = 10.0
        self.kd = 1.0
        self.max_torque = UNLIMITED
        self.min_torque = -UNLIMITED

    def calculate(self, state: SystemState) -> ConstraintOutput:
        out = ConstraintOutput()
        out.c[0] = 0.0
        out.j[0][:3] = [0.0, 0.0, 1.0]
        out.kd[0] = self.kd
        out.ks[0] = self.ks
        out.v_bias[0] = 0.0
        out.limits[0] = [self.min_torque, self.max_torque]
        return out


class SimpleGearConstraint(Constraint):
    """Ties the spin of body 1 to ``ratio`` times the spin of body 2.

    In ``neutral`` the gear transmits no torque.
    """

    def __init__(
        self, body1: RigidBody | None = None, body2: RigidBody | None = None
    ) -> None:
        super().__init__(1, 2)
        self.bodies[0] = body1
        self.bodies[1] = body2
        self.ks = 10.0
        self.kd = 1.0
        self.ratio = 1.0
        self.neutral = False

    def calculate(self, state: SystemState) -> ConstraintOutput:
        out = ConstraintOutput()
        out.c[0] = 0.0
        out.j[0] = [0.0, 0.0, 1.0, 0.0, 0.0, -self.ratio]
        out.kd[0] = self.kd
        out.ks[0] = self.ks
        out.v_bias[0] = 0.0
        if self.neutral:
            out.limits[0] = [0.0, 0.0]
        else:
            out.no_limits()
        return out