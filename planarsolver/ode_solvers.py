"""Time integrators that advance a SystemState."""

from __future__ import annotations

from enum import Enum, auto

from .system_state import SystemState


class OdeSolver:
    """Base integrator.

    A time step runs as: ``start``, then ``step`` / (evaluate accelerations) /
    ``solve`` repeated until ``step`` returns True, then ``end``.
    """

    def __init__(self) -> None:
        self.dt = 0.0

    def start(self, initial: SystemState, dt: float) -> None:
        self.dt = dt

    def step(self, system: SystemState) -> bool:
        """Prepare the next stage; return True if it is the last one."""
        return True

    def solve(self, system: SystemState) -> None:
        """Integrate using the accelerations currently in ``system``."""

    def end(self) -> None:
        """Finish the time step."""


class EulerOdeSolver(OdeSolver):
    """Explicit Euler: positions advance with the old velocities."""

    def step(self, system: SystemState) -> bool:
        system.dt = self.dt
        return True

    def solve(self, system: SystemState) -> None:
        dt = self.dt
        system.dt = dt
        for i in range(system.n):
            system.p_x[i] += system.v_x[i] * dt
            system.p_y[i] += system.v_y[i] * dt
            system.theta[i] += system.v_theta[i] * dt

            system.v_x[i] += system.a_x[i] * dt
            system.v_y[i] += system.a_y[i] * dt
            system.v_theta[i] += system.a_theta[i] * dt


class NsvOdeSolver(OdeSolver):
    """Semi-implicit Euler: positions advance with the updated velocities."""

    def step(self, system: SystemState) -> bool:
        system.dt = self.dt
        return True

    def solve(self, system: SystemState) -> None:
        dt = self.dt
        system.dt = dt
        for i in range(system.n):
            system.v_x[i] += system.a_x[i] * dt
            system.v_y[i] += system.a_y[i] * dt
            system.v_theta[i] += system.a_theta[i] * dt

            system.p_x[i] += system.v_x[i] * dt
            system.p_y[i] += system.v_y[i] * dt
            system.theta[i] += system.v_theta[i] * dt


class RkStage(Enum):
    STAGE_1 = auto()
    STAGE_2 = auto()
    STAGE_3 = auto()
    STAGE_4 = auto()
    COMPLETE = auto()
    UNDEFINED = auto()


_NEXT_STAGE = {
    RkStage.STAGE_1: RkStage.STAGE_2,
    RkStage.STAGE_2: RkStage.STAGE_3,
    RkStage.STAGE_3: RkStage.STAGE_4,
    RkStage.STAGE_4: RkStage.COMPLETE,
}

_STAGE_WEIGHT = {
    RkStage.STAGE_1: 1.0,
    RkStage.STAGE_2: 2.0,
    RkStage.STAGE_3: 2.0,
    RkStage.STAGE_4: 1.0,
}


class Rk4OdeSolver(OdeSolver):
    """Classical fourth-order Runge-Kutta in four stages."""

    def __init__(self) -> None:
        super().__init__()
        self.stage = RkStage.UNDEFINED
        self._next_stage = RkStage.UNDEFINED
        self._initial_state = SystemState()
        self._accumulator = SystemState()

    def start(self, initial: SystemState, dt: float) -> None:
        super().start(initial, dt)
        self._initial_state = initial.copy()
        self._accumulator = initial.copy()
        self.stage = RkStage.STAGE_1

    def _predict(self, state: SystemState, h: float) -> None:
        init = self._initial_state
        for i in range(state.n):
            state.v_theta[i] = init.v_theta[i] + h * state.a_theta[i]
            state.theta[i] = init.theta[i] + h * state.v_theta[i]
            state.v_x[i] = init.v_x[i] + h * state.a_x[i]
            state.v_y[i] = init.v_y[i] + h * state.a_y[i]
            state.p_x[i] = init.p_x[i] + h * state.v_x[i]
            state.p_y[i] = init.p_y[i] + h * state.v_y[i]
        state.dt = h

    def step(self, system: SystemState) -> bool:
        if self.stage is RkStage.STAGE_1:
            system.dt = 0.0
        elif self.stage in (RkStage.STAGE_2, RkStage.STAGE_3):
            self._predict(system, self.dt / 2.0)
        elif self.stage is RkStage.STAGE_4:
            self._predict(system, self.dt)

        self._next_stage = self.next_stage(self.stage)
        return self._next_stage is RkStage.COMPLETE

    def solve(self, system: SystemState) -> None:
        acc = self._accumulator
        k = (self.dt / 6.0) * _STAGE_WEIGHT.get(self.stage, 0.0)

        for i in range(system.n):
            acc.v_theta[i] += k * system.a_theta[i]
            acc.theta[i] += k * system.v_theta[i]
            acc.v_x[i] += k * system.a_x[i]
            acc.v_y[i] += k * system.a_y[i]
            acc.p_x[i] += k * system.v_x[i]
            acc.p_y[i] += k * system.v_y[i]

        for i in range(system.n_c):
            acc.r_x[i] += k * system.r_x[i]
            acc.r_y[i] += k * system.r_y[i]
            acc.r_t[i] += k * system.r_t[i]

        if self.stage is RkStage.STAGE_4:
            for name in ("v_theta", "theta", "v_x", "v_y", "p_x", "p_y"):
                getattr(system, name)[: system.n] = getattr(acc, name)[: system.n]
            for name in ("r_x", "r_y", "r_t"):
                getattr(system, name)[: system.n_c] = getattr(acc, name)[: system.n_c]

        self.stage = self._next_stage

    def end(self) -> None:
        super().end()
        self.stage = self._next_stage = RkStage.UNDEFINED

    @staticmethod
    def next_stage(stage: RkStage) -> RkStage:
        """Stage that follows ``stage``; UNDEFINED after COMPLETE or UNDEFINED."""
        return _NEXT_STAGE.get(stage, RkStage.UNDEFINED)