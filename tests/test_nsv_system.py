import pytest

from planarsolver.drive_constraints import ConstantRotationConstraint
from planarsolver.force_generators import GravityForceGenerator
from planarsolver.gauss_seidel import GaussSeidelSleSolver
from planarsolver.gaussian_elimination import GaussianEliminationSleSolver
from planarsolver.joint_constraints import FixedPositionConstraint
from planarsolver.nsv_system import OptimizedNsvRigidBodySystem
from planarsolver.rigid_body import RigidBody
from planarsolver.sle_solver import ConvergenceError, SleSolver


def _system(solver, g=10.0, mass=2.0, gravity=True):
    system = OptimizedNsvRigidBodySystem(solver)
    body = RigidBody(m=mass, I=1.0)
    system.add_rigid_body(body)
    if gravity:
        system.add_force_generator(GravityForceGenerator(g))
    return system, body


def test_free_fall_single_step():
    g, dt = 10.0, 0.1
    system, body = _system(GaussSeidelSleSolver(), g)
    system.process(dt)
    assert body.v_y == pytest.approx(-g * dt)
    assert body.p_y == pytest.approx(-g * dt * dt)
    assert system.time_elapsed == pytest.approx(dt)


def test_free_fall_substeps():
    g, dt = 10.0, 0.2
    system, body = _system(GaussSeidelSleSolver(), g)
    system.process(dt, steps=2)
    h = dt / 2
    assert body.v_y == pytest.approx(-g * dt)
    assert body.p_y == pytest.approx(-g * h * h - 2 * g * h * h)


def test_time_elapsed_accumulates():
    system, _ = _system(GaussSeidelSleSolver())
    system.process(0.1)
    system.process(0.25)
    assert system.time_elapsed == pytest.approx(0.35)


def test_fixed_position_holds_body_and_reports_force():
    g, mass = 10.0, 2.0
    system, body = _system(GaussSeidelSleSolver(), g, mass)
    constraint = FixedPositionConstraint(body)
    system.add_constraint(constraint)
    for _ in range(3):
        system.process(0.01)
    assert body.p_y == pytest.approx(0.0, abs=1e-9)
    assert body.v_y == pytest.approx(0.0, abs=1e-9)
    assert constraint.f_y[1][0] == pytest.approx(mass * g)
    assert constraint.f_x[0][0] == pytest.approx(0.0, abs=1e-9)


def test_unlimited_solver_reaches_target_speed():
    speed, dt = 100.0, 0.1
    system, body = _system(GaussianEliminationSleSolver(), gravity=False)
    drive = ConstantRotationConstraint(body)
    drive.rotation_speed = speed
    system.add_constraint(drive)
    system.process(dt)
    assert body.v_theta == pytest.approx(-speed)


def test_limited_solver_clamps_torque():
    speed, dt, max_torque = 100.0, 0.1, 1.0
    system, body = _system(GaussSeidelSleSolver(), gravity=False)
    drive = ConstantRotationConstraint(body)
    drive.rotation_speed = speed
    drive.max_torque = max_torque
    drive.min_torque = -max_torque
    system.add_constraint(drive)
    system.process(dt)
    assert abs(body.v_theta) == pytest.approx(max_torque * dt / body.I)
    assert drive.f_t[0][0] == pytest.approx(-max_torque)


def test_bias_factor_default_and_override():
    assert OptimizedNsvRigidBodySystem(GaussSeidelSleSolver()).bias_factor == 1.0
    system = OptimizedNsvRigidBodySystem(GaussSeidelSleSolver(), bias_factor=0.5)
    assert system.bias_factor == 0.5


def test_base_solver_raises():
    system, body = _system(SleSolver())
    system.add_constraint(FixedPositionConstraint(body))
    with pytest.raises(ConvergenceError):
        system.process(0.01)


def test_zero_steps_rejected():
    system, _ = _system(GaussSeidelSleSolver())
    with pytest.raises(ValueError):
        system.process(0.01, steps=0)