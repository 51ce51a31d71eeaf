import pytest

from planarsolver.ode_solvers import (
    EulerOdeSolver,
    NsvOdeSolver,
    OdeSolver,
    Rk4OdeSolver,
    RkStage,
)
from planarsolver.system_state import SystemState


def _run(solver, steps, t, state):
    dt = t / steps
    for _ in range(steps):
        solver.start(state, dt)
        while True:
            complete = solver.step(state)
            solver.solve(state)
            if complete:
                break
        solver.end()


def _state(v_theta=0.0, v_x=0.0, v_y=0.0):
    state = SystemState(1, 1)
    state.a_theta[0] = 10.0
    state.v_theta[0] = v_theta
    state.a_x[0] = -2.0
    state.a_y[0] = -10.0
    state.v_x[0] = v_x
    state.v_y[0] = v_y
    return state


def test_base_solver_steps_once():
    solver = OdeSolver()
    solver.start(SystemState(1, 1), 0.5)
    assert solver.dt == 0.5
    assert solver.step(SystemState(1, 1)) is True


def test_euler_sanity():
    assert EulerOdeSolver().step(SystemState(1, 1)) is True


def test_euler_integrate_1_step():
    state = _state()
    _run(EulerOdeSolver(), 1, 0.1, state)
    assert state.v_x[0] == pytest.approx(-0.2, abs=1e-7)
    assert state.v_y[0] == pytest.approx(-1.0, abs=1e-7)
    assert state.p_x[0] == pytest.approx(-0.01, abs=1e-1)
    assert state.p_y[0] == pytest.approx(-0.05, abs=1e-1)
    assert state.v_theta[0] == pytest.approx(1.0, abs=1e-7)
    assert state.theta[0] == pytest.approx(0.0, abs=1e-7)


def test_euler_integrate_100_steps():
    state = _state(v_theta=9.0, v_x=9.0, v_y=5.0)
    _run(EulerOdeSolver(), 100, 10.0, state)
    assert state.v_x[0] == pytest.approx(-11.0, abs=1e-7)
    assert state.v_y[0] == pytest.approx(-95.0, abs=1e-7)
    assert state.p_x[0] == pytest.approx(-10.0, abs=1.0 + 1e-9)
    assert state.p_y[0] == pytest.approx(-450.0, abs=10.0)
    assert state.v_theta[0] == pytest.approx(100.0, abs=10.0)
    assert state.theta[0] == pytest.approx(550.0, abs=50.0)


def test_euler_sets_state_dt():
    state = _state()
    solver = EulerOdeSolver()
    solver.start(state, 0.25)
    solver.step(state)
    assert state.dt == 0.25


def test_nsv_uses_updated_velocity():
    state = _state(v_x=1.0)
    solver = NsvOdeSolver()
    solver.start(state, 0.1)
    assert solver.step(state) is True
    solver.solve(state)
    assert state.v_x[0] == pytest.approx(1.0 - 0.2)
    assert state.p_x[0] == pytest.approx(state.v_x[0] * 0.1)
    assert state.theta[0] == pytest.approx(state.v_theta[0] * 0.1)


def test_rk4_sanity():
    assert Rk4OdeSolver().step(SystemState(1, 1)) is False


def test_rk4_integrate_1_step():
    state = _state()
    _run(Rk4OdeSolver(), 1, 0.1, state)
    assert state.v_x[0] == pytest.approx(-0.2, abs=1e-7)
    assert state.v_y[0] == pytest.approx(-1.0, abs=1e-7)
    assert state.p_x[0] == pytest.approx(-0.01, abs=1e-7)
    assert state.p_y[0] == pytest.approx(-0.05, abs=1e-7)
    assert state.v_theta[0] == pytest.approx(1.0, abs=1e-7)
    assert state.theta[0] == pytest.approx(0.05, abs=1e-7)


def test_rk4_integrate_100_steps():
    state = _state(v_theta=9.0, v_x=9.0, v_y=5.0)
    _run(Rk4OdeSolver(), 100, 10.0, state)
    assert state.v_x[0] == pytest.approx(-11.0, abs=1e-7)
    assert state.v_y[0] == pytest.approx(-95.0, abs=1e-7)
    assert state.p_x[0] == pytest.approx(-10.0, abs=1e-7)
    assert state.p_y[0] == pytest.approx(-450.0, abs=1e-7)
    assert state.v_theta[0] == pytest.approx(109.0, abs=1e-7)
    assert state.theta[0] == pytest.approx(590.0, abs=1e-7)


def test_rk4_runs_four_stages():
    state = _state()
    solver = Rk4OdeSolver()
    solver.start(state, 0.1)
    results = []
    while True:
        done = solver.step(state)
        results.append(done)
        solver.solve(state)
        if done:
            break
    assert results == [False, False, False, True]
    solver.end()
    assert solver.stage is RkStage.UNDEFINED


@pytest.mark.parametrize(
    "stage, expected",
    [
        (RkStage.STAGE_1, RkStage.STAGE_2),
        (RkStage.STAGE_2, RkStage.STAGE_3),
        (RkStage.STAGE_3, RkStage.STAGE_4),
        (RkStage.STAGE_4, RkStage.COMPLETE),
        (RkStage.COMPLETE, RkStage.UNDEFINED),
        (RkStage.UNDEFINED, RkStage.UNDEFINED),
    ],
)
def test_rk4_next_stage(stage, expected):
    assert Rk4OdeSolver.next_stage(stage) is expected


def test_rk4_leaves_initial_copy_untouched():
    state = _state(v_x=1.0)
    solver = Rk4OdeSolver()
    _run(solver, 1, 0.1, state)
    second = _state(v_x=1.0)
    _run(Rk4OdeSolver(), 1, 0.1, second)
    assert state.p_x == pytest.approx(second.p_x)