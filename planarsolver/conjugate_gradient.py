"""Conjugate gradient solver for the constraint linear system."""

from __future__ import annotations

from .matrix import Matrix
from .sle_solver import ConvergenceError, SleSolver
from .sparse_matrix import SparseMatrix


class ConjugateGradientSleSolver(SleSolver):
    """Iterative conjugate gradient method; does not support limits.

    Iteration stops once every residual entry ``r_i`` satisfies
    ``|r_i| <= max(|max_error * right_i|, min_error)``.
    """

    def __init__(
        self,
        max_iterations: int = 1000,
        max_error: float = 1e-2,
        min_error: float = 1e-3,
    ) -> None:
        super().__init__(supports_limits=False)
        self.max_iterations = max_iterations
        self.max_error = max_error
        self.min_error = min_error

    def solve(
        self,
        j: SparseMatrix,
        w: Matrix,
        right: Matrix,
        previous: Matrix | None = None,
    ) -> Matrix:
        n = right.height

        if previous is not None and previous.height == n:
            x = previous.copy()
        else:
            x = Matrix(1, n)

        r = right.copy()
        r.madd(self._apply(j, w, x), -1.0)
        if self._sufficiently_small(r, right):
            return x

        p = r.copy()
        for _ in range(self.max_iterations):
            ap = self._apply(j, w, p)

            rk_mag = r.vector_magnitude_squared()
            denominator = p.dot(ap)
            if denominator == 0:
                raise ConvergenceError("search direction became degenerate")
            alpha = rk_mag / denominator
            x.madd(p, alpha)
            r.madd(ap, -alpha)

            if self._sufficiently_small(r, right):
                return x

            beta = r.vector_magnitude_squared() / rk_mag
            p.pmadd(r, beta)

        raise ConvergenceError(
            f"no convergence within {self.max_iterations} iterations"
        )

    @staticmethod
    def _apply(j: SparseMatrix, w: Matrix, x: Matrix) -> Matrix:
        """Return ``J * diag(W) * J^T * x``."""
        return j.multiply(w.component_multiply(j.transpose_multiply_vector(x)))

    def _sufficiently_small(self, residual: Matrix, target: Matrix) -> bool:
        return all(
            abs(residual[0, i])
            <= max(abs(self.max_error * target[0, i]), self.min_error)
            for i in range(residual.height)
        )