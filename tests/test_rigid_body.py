import math

import pytest

from planarsolver.rigid_body import RigidBody


def test_new_body_is_detached():
    body = RigidBody()
    assert body.index == -1
    assert body.m == 0.0
    assert body.energy() == 0.0


def test_reset_keeps_index():
    body = RigidBody(p_x=1.0, v_y=2.0, theta=0.3, m=4.0, I=5.0, index=3)
    body.reset()
    assert body.index == 3
    assert (body.p_x, body.v_y, body.theta, body.m, body.I) == (0.0, 0.0, 0.0, 0.0, 0.0)


@pytest.mark.parametrize("theta", [0.0, 0.4, -2.1, math.pi])
def test_local_world_round_trip(theta):
    body = RigidBody(p_x=1.5, p_y=-2.0, theta=theta)
    w = body.local_to_world(0.3, 0.7)
    assert body.world_to_local(*w) == pytest.approx((0.3, 0.7))


def test_local_to_world_origin_is_position():
    body = RigidBody(p_x=1.5, p_y=-2.0, theta=1.1)
    assert body.local_to_world(0.0, 0.0) == pytest.approx((1.5, -2.0))


def test_quarter_turn():
    body = RigidBody(theta=math.pi / 2)
    x, y = body.local_to_world(1.0, 0.0)
    assert x == pytest.approx(0.0, abs=1e-12)
    assert y == pytest.approx(1.0)


def test_energy_translational():
    body = RigidBody(v_x=3.0, m=2.0)
    assert body.energy() == pytest.approx(9.0)


def test_energy_scales_with_square_of_spin():
    slow = RigidBody(v_theta=1.0, I=2.0)
    fast = RigidBody(v_theta=2.0, I=2.0)
    assert fast.energy() == pytest.approx(4 * slow.energy())