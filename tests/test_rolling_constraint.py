import random

import pytest

from planarsolver.rigid_body import RigidBody
from planarsolver.rolling_constraint import RollingConstraint
from planarsolver.system_state import SystemState


def _verify(state, constraint):
    n = constraint.body_count
    m = constraint.constraint_count
    d = 0.1
    dt = 0.001

    positions = (state.p_x, state.p_y, state.theta)
    velocities = (state.v_x, state.v_y, state.v_theta)

    for i in range(m):
        for j in range(n * 3):
            q = positions[j % 3]
            q_dot = velocities[j % 3]
            body = j // 3

            v0 = q[body]
            q_dot[body] = d
            o0 = constraint.calculate(state)
            q[body] += d * dt
            o1 = constraint.calculate(state)
            q[body] = v0
            q_dot[body] = 0.0

            dc = (o1.c[i] - o0.c[i]) / (d * dt)
            assert dc == pytest.approx((o0.j[i][j] + o1.j[i][j]) / 2, abs=1e-4)

            for k in range(n * 3):
                for row in range(m):
                    j_dot = (o1.j[row][k] - o0.j[row][k]) / dt
                    assert j_dot == pytest.approx(
                        (o0.j_dot[row][k] + o1.j_dot[row][k]) / 2, abs=1e-4
                    )


def _setup():
    state = SystemState(2, 2)
    base = RigidBody(index=0)
    rolling = RigidBody(index=1)
    constraint = RollingConstraint(base, rolling)
    constraint.dx = 1.0
    constraint.dy = 0.0
    constraint.local_x = 0.0
    constraint.local_y = 0.1
    constraint.radius = 1.0
    return state, constraint


def test_rolling_constraint_jacobians_match_finite_differences():
    state, constraint = _setup()
    rng = random.Random(0)

    for _ in range(10):
        state.p_x[0] = (rng.random() - 0.5) * 100
        state.p_x[1] = (rng.random() - 0.5) * 100
        state.p_y[0] = (rng.random() - 0.5) * 100
        state.p_y[1] = (rng.random() - 0.5) * 100
        state.theta[0] = (rng.random() - 0.5) * 100
        state.theta[1] = (rng.random() - 0.5) * 100
        for name in ("v_x", "v_y", "v_theta"):
            getattr(state, name)[:] = [0.0, 0.0]

        _verify(state, constraint)


def test_rolling_constraint_satisfied_when_touching():
    state = SystemState(2, 2)
    constraint = RollingConstraint(RigidBody(index=0), RigidBody(index=1))
    constraint.dx = 1.0
    constraint.radius = 1.0
    state.p_y[1] = 1.0

    out = constraint.calculate(state)

    assert out.c[0] == pytest.approx(0.0)
    assert out.c[1] == pytest.approx(0.0)


def test_rolling_constraint_stiffness_only_on_contact_row():
    state, constraint = _setup()
    out = constraint.calculate(state)

    assert out.ks[0] == 0.0
    assert out.kd[0] == 0.0
    assert out.ks[1] == constraint.ks
    assert out.kd[1] == constraint.kd
    assert out.j[0][5] == -1.0
    assert constraint.constraint_count == 2


def test_rolling_constraint_requires_bodies_in_system():
    state = SystemState(2, 2)
    constraint = RollingConstraint(RigidBody(), RigidBody(index=1))
    with pytest.raises(ValueError):
        constraint.calculate(state)


def test_rolling_constraint_requires_attached_bodies():
    with pytest.raises(ValueError):
        RollingConstraint().calculate(SystemState(2, 2))