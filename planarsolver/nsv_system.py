"""Rigid body system solved at velocity level with semi-implicit Euler."""

from __future__ import annotations

from .generic_system import (
    _active_slots,
    _compute_accelerations,
    _evaluate,
    _force_vector,
    _now_us,
    _set_row,
    _store_reactions,
    _velocity_vector,
)
from .matrix import Matrix
from .ode_solvers import NsvOdeSolver
from .rigid_body_system import RigidBodySystem
from .sle_solver import SleSolver
from .sparse_matrix import SparseMatrix


class OptimizedNsvRigidBodySystem(RigidBodySystem):
    """Computes constraint impulses for each step and integrates with
    semi-implicit Euler.

    Position error is corrected by a velocity bias of
    ``bias_factor / dt * C``. Solvers that support limits receive the
    constraints' force bounds scaled by the time step.
    """

    def __init__(self, sle_solver: SleSolver, bias_factor: float = 1.0) -> None:
        super().__init__()
        self.sle_solver = sle_solver
        self.bias_factor = bias_factor
        self._ode_solver = NsvOdeSolver()
        self._t = 0.0
        self._lambda = Matrix(1, 0)
        self._m_inv = Matrix(1, 0)

    @property
    def time_elapsed(self) -> float:
        """Total simulated time so far."""
        return self._t

    def process(self, dt: float, steps: int = 1) -> None:
        if steps < 1:
            raise ValueError("steps must be at least 1")

        ode_solve_time = constraint_solve_time = 0
        force_eval_time = constraint_eval_time = 0

        self._populate_system_state()
        _, self._m_inv = self._populate_mass_matrices()
        state = self._state
        h = dt / steps

        for _ in range(steps):
            self._ode_solver.start(state, h)

            while True:
                done = self._ode_solver.step(state)

                s0 = _now_us()
                self._process_forces()
                s1 = _now_us()

                eval_time, solve_time = self._process_constraints(h)

                s2 = _now_us()
                self._ode_solver.solve(state)
                s3 = _now_us()

                constraint_solve_time += solve_time
                constraint_eval_time += eval_time
                ode_solve_time += s3 - s2
                force_eval_time += s1 - s0

                if done:
                    break

            self._ode_solver.end()

        self._propagate_results()
        self._record_timings(
            ode_solve_time, constraint_solve_time, force_eval_time, constraint_eval_time
        )
        self._t += dt

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
                    constraint.f_x[j][k] = state.r_x[row * 2 + k]
                    constraint.f_y[j][k] = state.r_y[row * 2 + k]
                    constraint.f_t[j][k] = state.r_t[row * 2 + k]
                row += 1

    def _process_constraints(self, dt: float) -> tuple[int, int]:
        """Solve for constraint impulses and set accelerations.

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

        j_sparse = None
        right = limits = None
        if m_f > 0:
            j_sparse = SparseMatrix(3 * n, m_f, 3, 2)
            v_bias = [0.0] * m_f
            c = [0.0] * m_f
            limits = Matrix(2, m_f)

            for row, constraint, k, output in _evaluate(constraints, state):
                _set_row(j_sparse, row, _active_slots(constraint), output.j[k])
                v_bias[row] = output.v_bias[k]
                c[row] = output.c[k]
                limits[0, row] = output.limits[k][0] * dt
                limits[1, row] = output.limits[k][1] * dt

            q_dot_prime = f_ext.scale(dt).left_scale(m_inv) + q_dot
            b_err = Matrix.column(c).scale(self.bias_factor / dt)
            right = -(j_sparse.multiply(q_dot_prime) + Matrix.column(v_bias) + b_err)

        s1 = _now_us()

        if j_sparse is not None:
            if self.sle_solver.supports_limits:
                self._lambda = self.sle_solver.solve_with_limits(
                    j_sparse, m_inv, right, limits, self._lambda
                )
            else:
                self._lambda = self.sle_solver.solve(
                    j_sparse, m_inv, right, self._lambda
                )

        s2 = _now_us()

        if j_sparse is not None:
            forces = j_sparse.left_scale(self._lambda.scale(1 / dt))
            _store_reactions(state, constraints, forces)
        _compute_accelerations(state, constraints, f_ext, m_inv, n)

        s3 = _now_us()
        return (s1 - s0) + (s3 - s2), s2 - s1