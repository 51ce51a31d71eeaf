"""Rigid body system that solves constraints with a pluggable integrator."""

from __future__ import annotations

import time
from collections.abc import Iterator, Sequence

from .constraint import MAX_BODY_COUNT, Constraint, ConstraintOutput
from .matrix import Matrix
from .ode_solvers import OdeSolver
from .rigid_body_system import RigidBodySystem
from .sle_solver import SleSolver
from .sparse_matrix import SparseMatrix
from .system_state import SystemState


def _now_us() -> int:
    return time.perf_counter_ns() // 1000


def _velocity_vector(state: SystemState, n: int) -> Matrix:
    """Generalised velocities (v_x, v_y, v_theta per body) as a column vector."""
    return Matrix.column(
        v
        for i in range(n)
        for v in (state.v_x[i], state.v_y[i], state.v_theta[i])
    )


def _force_vector(state: SystemState, n: int) -> Matrix:
    """Generalised external forces (f_x, f_y, torque per body) as a column vector."""
    return Matrix.column(
        v for i in range(n) for v in (state.f_x[i], state.f_y[i], state.t[i])
    )


def _evaluate(
    constraints: Sequence[Constraint], state: SystemState
) -> Iterator[tuple[int, Constraint, int, ConstraintOutput]]:
    """Evaluate each constraint once and yield one item per scalar row.

    Items are ``(row, constraint, k, output)`` where ``row`` is the global
    row index and ``k`` the row within the constraint's output.
    """
    row = 0
    for constraint in constraints:
        output = constraint.calculate(state)
        for k in range(constraint.constraint_count):
            yield row, constraint, k, output
            row += 1


def _active_slots(constraint: Constraint) -> list[tuple[int, int]]:
    """``(slot, body index)`` pairs for the bodies that belong to a system."""
    slots = []
    for slot, body in enumerate(constraint.bodies[: constraint.body_count]):
        if body is None:
            raise ValueError(f"constraint has no body attached in slot {slot}")
        if body.index != -1:
            slots.append((slot, body.index))
    return slots


def _set_row(
    matrix: SparseMatrix,
    row: int,
    slots: list[tuple[int, int]],
    values: Sequence[float],
) -> None:
    for slot, index in slots:
        matrix.set_block(row, slot, index)
        for axis in range(3):
            matrix.set_value(row, slot, axis, values[3 * slot + axis])


def _store_reactions(
    state: SystemState, constraints: Sequence[Constraint], scaled_j: SparseMatrix
) -> None:
    """Write the per-row, per-body reaction forces held in ``scaled_j``."""
    row = 0
    for constraint in constraints:
        slots = _active_slots(constraint)
        for _ in range(constraint.constraint_count):
            for slot in range(MAX_BODY_COUNT):
                state.r_x[2 * row + slot] = 0.0
                state.r_y[2 * row + slot] = 0.0
                state.r_t[2 * row + slot] = 0.0
            for slot, _index in slots:
                state.r_x[2 * row + slot] = scaled_j.value(row, slot, 0)
                state.r_y[2 * row + slot] = scaled_j.value(row, slot, 1)
                state.r_t[2 * row + slot] = scaled_j.value(row, slot, 2)
            row += 1


def _compute_accelerations(
    state: SystemState,
    constraints: Sequence[Constraint],
    f_ext: Matrix,
    m_inv: Matrix,
    n: int,
) -> None:
    """Sum external and reaction forces and divide by mass and inertia."""
    for i in range(n):
        state.a_x[i] = f_ext[0, 3 * i]
        state.a_y[i] = f_ext[0, 3 * i + 1]
        state.a_theta[i] = f_ext[0, 3 * i + 2]

    row = 0
    for constraint in constraints:
        slots = _active_slots(constraint)
        for _ in range(constraint.constraint_count):
            for slot, index in slots:
                state.a_x[index] += state.r_x[2 * row + slot]
                state.a_y[index] += state.r_y[2 * row + slot]
                state.a_theta[index] += state.r_t[2 * row + slot]
            row += 1

    for i in range(n):
        inv_mass = m_inv[0, 3 * i]
        inv_inertia = m_inv[0, 3 * i + 2]
        state.a_x[i] *= inv_mass
        state.a_y[i] *= inv_mass
        state.a_theta[i] *= inv_inertia


class GenericRigidBodySystem(RigidBodySystem):
    """Solves constraint forces at acceleration level with Baumgarte-style
    stiffness and damping, integrating with any ``OdeSolver``."""

    def __init__(self, sle_solver: SleSolver, ode_solver: OdeSolver) -> None:
        super().__init__()
        self.sle_solver = sle_solver
        self.ode_solver = ode_solver
        self._lambda = Matrix(1, 1)
        self._m_inv = Matrix(1, 0)

    def process(self, dt: float, steps: int = 1) -> None:
        if steps < 1:
            raise ValueError("steps must be at least 1")

        ode_solve_time = constraint_solve_time = 0
        force_eval_time = constraint_eval_time = 0

        self._populate_system_state()
        _, self._m_inv = self._populate_mass_matrices()
        state = self._state

        for _ in range(steps):
            self.ode_solver.start(state, dt / steps)

            while True:
                done = self.ode_solver.step(state)

                s0 = _now_us()
                self._process_forces()
                s1 = _now_us()

                eval_time, solve_time = self._process_constraints()

                s2 = _now_us()
                self.ode_solver.solve(state)
                s3 = _now_us()

                constraint_solve_time += solve_time
                constraint_eval_time += eval_time
                ode_solve_time += s3 - s2
                force_eval_time += s1 - s0

                if done:
                    break

            self.ode_solver.end()

        self._propagate_results()
        self._record_timings(
            ode_solve_time, constraint_solve_time, force_eval_time, constraint_eval_time
        )

    def _propagate_results(self) -> None:
        state = self._state
        for i, body in enumerate(self._rigid_bodies):
            body.v_x = state.v_x[i]
            body.v_y = state.v_y[i]
            body.p_x = state.p_x[i]
            body.p_y = state.p_y[i]
            body.v_theta = state.v_theta[i]
            body.theta = state.theta[i]

        row = 0
        for constraint in self._constraints:
            for j in range(constraint.constraint_count):
                for k in range(constraint.body_count):
                    constraint.f_x[j][k] = state.r_x[row]
                    constraint.f_y[j][k] = state.r_y[row]
                    constraint.f_t[j][k] = state.r_t[row]
                row += 1

    def _process_constraints(self) -> tuple[int, int]:
        """Solve for constraint forces and set accelerations.

        Returns the evaluation and solve times in microseconds.
        """
        s0 = _now_us()

        state = self._state
        constraints = self._constraints
        m_inv = self._m_inv
        n = len(self._rigid_bodies)
        m_f = self.full_constraint_count

        q_dot = _velocity_vector(state, n)
        f_ext = _force_vector(state, n)

        right = None
        j_sparse = None
        if m_f > 0:
            j_sparse = SparseMatrix(3 * n, m_f, 3, 2)
            j_dot_sparse = SparseMatrix(3 * n, m_f, 3, 2)
            ks = [0.0] * m_f
            kd = [0.0] * m_f
            c = [0.0] * m_f

            for row, constraint, k, output in _evaluate(constraints, state):
                slots = _active_slots(constraint)
                _set_row(j_sparse, row, slots, output.j[k])
                _set_row(j_dot_sparse, row, slots, output.j_dot[k])
                if slots:
                    ks[row] = output.ks[k]
                    kd[row] = output.kd[k]
                    c[row] = output.c[k]

            jq = j_sparse.multiply(q_dot)
            damping = Matrix.column(kd[i] * jq[0, i] for i in range(m_f))
            stiffness = Matrix.column(ks[i] * c[i] for i in range(m_f))

            external = j_sparse.multiply(f_ext.left_scale(m_inv))
            right = -j_dot_sparse.multiply(q_dot) - external - stiffness - damping

        s1 = _now_us()

        if j_sparse is not None:
            self._lambda = self.sle_solver.solve(j_sparse, m_inv, right, self._lambda)

        s2 = _now_us()

        if j_sparse is not None:
            _store_reactions(state, constraints, j_sparse.left_scale(self._lambda))
        _compute_accelerations(state, constraints, f_ext, m_inv, n)

        s3 = _now_us()
        return (s1 - s0) + (s3 - s2), s2 - s1