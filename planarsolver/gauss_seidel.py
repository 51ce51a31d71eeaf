"""Gauss-Seidel solver for the constraint linear system."""

from __future__ import annotations

from .matrix import Matrix
from .sle_solver import ConvergenceError, SleSolver
from .sparse_matrix import SparseMatrix


class GaussSeidelSleSolver(SleSolver):
    """Iterative Gauss-Seidel method; supports clamping to limits."""

    def __init__(self, max_iterations: int = 128, min_delta: float = 1e-1) -> None:
        super().__init__(supports_limits=True)
        self.max_iterations = max_iterations
        self.min_delta = min_delta

    @staticmethod
    def _start(right: Matrix, previous: Matrix | None) -> Matrix:
        n = right.height
        if previous is not None and previous.height == n:
            return previous.copy()
        return Matrix(1, n)

    def solve(
        self,
        j: SparseMatrix,
        w: Matrix,
        right: Matrix,
        previous: Matrix | None = None,
    ) -> Matrix:
        return self._run(j, w, right, None, previous)

    def solve_with_limits(
        self,
        j: SparseMatrix,
        w: Matrix,
        right: Matrix,
        limits: Matrix,
        previous: Matrix | None = None,
    ) -> Matrix:
        if limits.width != 2 or limits.height != right.height:
            raise ValueError("limits must have width 2 and match the right side")
        return self._run(j, w, right, limits, previous)

    def _run(
        self,
        j: SparseMatrix,
        w: Matrix,
        right: Matrix,
        limits: Matrix | None,
        previous: Matrix | None,
    ) -> Matrix:
        result = self._start(right, previous)
        left = j.right_scale(w).multiply_transpose(j)
        if left.height != right.height:
            raise ValueError("right side does not match the system size")

        for _ in range(self.max_iterations):
            if self._iterate(left, right, limits, result) < self.min_delta:
                return result

        raise ConvergenceError(
            f"no convergence within {self.max_iterations} iterations"
        )

    @staticmethod
    def _iterate(
        left: Matrix, right: Matrix, limits: Matrix | None, k: Matrix
    ) -> float:
        """Update ``k`` in place by one sweep; return the largest relative change."""
        n = k.height
        max_difference = 0.0

        for i in range(n):
            s = sum(left[c, i] * k[0, c] for c in range(i))
            s += sum(left[c, i] * k[0, c] for c in range(i + 1, n))

            diagonal = left[i, i]
            if diagonal == 0:
                raise ConvergenceError(f"zero on the diagonal in row {i}")
            k_next = (right[0, i] - s) / diagonal
            old = k[0, i]

            if limits is None:
                min_k = max(1e-3, old)
                delta = (abs(k_next) - min_k) / min_k
            else:
                k_next = max(limits[0, i], min(limits[1, i], k_next))
                min_k = max(1e-3, abs(old))
                delta = abs(k_next - old) / min_k

            max_difference = max(max_difference, delta)
            k[0, i] = k_next

        return max_difference