import random
import sys

import pytest

from planarsolver.joint_constraints import (
    FixedPositionConstraint,
    FixedRotationConstraint,
    LineConstraint,
    LinkConstraint,
)
from planarsolver.rigid_body import RigidBody
from planarsolver.system_state import SystemState

Q_FIELDS = ("p_x", "p_y", "theta")
V_FIELDS = ("v_x", "v_y", "v_theta")


def random_state(seed, n=2):
    rng = random.Random(seed)
    state = SystemState(n, 2)
    for i in range(n):
        for name in Q_FIELDS + V_FIELDS:
            getattr(state, name)[i] = (rng.random() - 0.5) * 10
    return state


def check_jacobian(constraint, state, h=1e-6, tol=1e-5):
    checked = 0
    for slot in range(constraint.body_count):
        body = constraint.bodies[slot].index
        for comp, name in enumerate(Q_FIELDS):
            values = getattr(state, name)
            original = values[body]
            values[body] = original + h
            plus = constraint.calculate(state)
            values[body] = original - h
            minus = constraint.calculate(state)
            values[body] = original
            centre = constraint.calculate(state)
            for row in range(constraint.constraint_count):
                derivative = (plus.c[row] - minus.c[row]) / (2 * h)
                assert derivative == pytest.approx(
                    centre.j[row][slot * 3 + comp], abs=tol
                )
                checked += 1
    return checked


def check_jacobian_rate(constraint, state, h=1e-6, tol=1e-5):
    saved = {name: list(getattr(state, name)) for name in Q_FIELDS}

    def shift(sign):
        for q, v in zip(Q_FIELDS, V_FIELDS):
            getattr(state, q)[:] = [
                p + sign * h * vel for p, vel in zip(saved[q], getattr(state, v))
            ]
        return constraint.calculate(state)

    after = shift(1)
    before = shift(-1)
    for name in Q_FIELDS:
        getattr(state, name)[:] = saved[name]
    centre = constraint.calculate(state)

    width = 3 * constraint.body_count
    for row in range(constraint.constraint_count):
        for col in range(width):
            rate = (after.j[row][col] - before.j[row][col]) / (2 * h)
            assert rate == pytest.approx(centre.j_dot[row][col], abs=tol)


def bodies(n=2):
    return [RigidBody(index=i) for i in range(n)]


@pytest.mark.parametrize("seed", range(5))
def test_fixed_position_derivatives(seed):
    (body,) = bodies(1)
    constraint = FixedPositionConstraint(body)
    constraint.set_local_position(0.3, -0.7)
    constraint.set_world_position(1.0, 2.0)
    state = random_state(seed, 1)
    assert check_jacobian(constraint, state) == 6
    check_jacobian_rate(constraint, state)


def test_fixed_position_satisfied_at_target():
    body = RigidBody(p_x=1.0, p_y=2.0, theta=0.4, index=0)
    constraint = FixedPositionConstraint(body)
    constraint.set_local_position(0.5, 0.25)
    constraint.set_world_position(*body.local_to_world(0.5, 0.25))

    state = SystemState(1, 2)
    state.p_x[0], state.p_y[0], state.theta[0] = 1.0, 2.0, 0.4

    out = constraint.calculate(state)
    assert out.c[0] == pytest.approx(0.0, abs=1e-12)
    assert out.c[1] == pytest.approx(0.0, abs=1e-12)
    assert out.ks[:2] == [10.0, 10.0]
    assert out.kd[:2] == [1.0, 1.0]
    assert out.limits[0] == [-sys.float_info.max, sys.float_info.max]


def test_fixed_rotation_output():
    (body,) = bodies(1)
    constraint = FixedRotationConstraint(body)
    constraint.rotation = 0.2
    state = SystemState(1, 1)
    state.theta[0] = 0.7

    out = constraint.calculate(state)
    assert out.c[0] == pytest.approx(0.5)
    assert out.j[0][:3] == [0.0, 0.0, 1.0]
    assert out.j_dot[0][:3] == [0.0, 0.0, 0.0]


@pytest.mark.parametrize("seed", range(5))
def test_fixed_rotation_derivatives(seed):
    (body,) = bodies(1)
    constraint = FixedRotationConstraint(body)
    state = random_state(seed, 1)
    assert check_jacobian(constraint, state) == 3
    check_jacobian_rate(constraint, state)


@pytest.mark.parametrize("seed", range(5))
def test_link_derivatives(seed):
    body1, body2 = bodies()
    constraint = LinkConstraint(body1, body2)
    constraint.set_local_position1(0.4, 1.1)
    constraint.set_local_position2(-0.6, 0.2)
    state = random_state(seed)
    assert check_jacobian(constraint, state) == 12
    check_jacobian_rate(constraint, state)


def test_link_satisfied_when_points_coincide():
    body1, body2 = bodies()
    constraint = LinkConstraint(body1, body2)
    constraint.set_local_position1(1.0, 0.0)
    constraint.set_local_position2(-1.0, 0.0)
    state = SystemState(2, 2)
    state.p_x[1] = 2.0

    out = constraint.calculate(state)
    assert out.c[0] == pytest.approx(0.0, abs=1e-12)
    assert out.c[1] == pytest.approx(0.0, abs=1e-12)


def test_link_limits_follow_max_force():
    body1, body2 = bodies()
    constraint = LinkConstraint(body1, body2)
    state = SystemState(2, 2)
    assert constraint.calculate(state).limits[0] == [
        -sys.float_info.max,
        sys.float_info.max,
    ]
    constraint.max_force = 5.0
    out = constraint.calculate(state)
    assert out.limits[0] == [-5.0, 5.0]
    assert out.limits[1] == [-5.0, 5.0]


@pytest.mark.parametrize("seed", range(5))
def test_line_derivatives(seed):
    (body,) = bodies(1)
    constraint = LineConstraint(body)
    constraint.local_x, constraint.local_y = 0.2, -0.5
    constraint.p0_x, constraint.p0_y = 1.0, -1.0
    constraint.dx, constraint.dy = 0.6, 0.8
    state = random_state(seed, 1)
    assert check_jacobian(constraint, state) == 3
    check_jacobian_rate(constraint, state)


def test_line_constraint_zero_on_line():
    (body,) = bodies(1)
    constraint = LineConstraint(body)
    constraint.p0_x, constraint.p0_y = 0.0, 5.0
    constraint.dx, constraint.dy = 1.0, 0.0
    state = SystemState(1, 1)
    state.p_x[0], state.p_y[0] = 3.0, 5.0
    assert constraint.calculate(state).c[0] == pytest.approx(0.0)

    state.p_y[0] = 7.0
    assert constraint.calculate(state).c[0] == pytest.approx(2.0)


@pytest.mark.parametrize(
    "constraint",
    [
        FixedPositionConstraint(),
        FixedRotationConstraint(),
        LineConstraint(),
        LinkConstraint(RigidBody(index=0)),
    ],
)
def test_missing_body_raises(constraint):
    with pytest.raises(ValueError):
        constraint.calculate(SystemState(2, 2))


def test_body_outside_system_raises():
    constraint = FixedRotationConstraint(RigidBody())
    with pytest.raises(ValueError):
        constraint.calculate(SystemState(1, 1))