"""Direct solver for the constraint linear system by Gaussian elimination."""

from __future__ import annotations

import math

from .matrix import Matrix
from .sle_solver import ConvergenceError, SleSolver
from .sparse_matrix import SparseMatrix


class SingularSystemError(ConvergenceError):
    """Raised when the system has no unique finite solution."""


class GaussianEliminationSleSolver(SleSolver):
    """Gaussian elimination with partial pivoting; does not support limits."""

    def __init__(self) -> None:
        super().__init__(supports_limits=False)

    def solve(
        self,
        j: SparseMatrix,
        w: Matrix,
        right: Matrix,
        previous: Matrix | None = None,
    ) -> Matrix:
        """Solve directly; ``previous`` is accepted for interface parity and ignored."""
        left = j.right_scale(w).multiply_transpose(j)
        size = left.height
        if right.height != left.width:
            raise ValueError("right side does not match the system size")
        if size == 0:
            return Matrix(1, 0)

        columns = left.width + 1
        rows = [
            [left[c, r] for c in range(left.width)] + [right[0, r]]
            for r in range(size)
        ]

        h = k = 0
        while h < size and k < columns:
            pivot = max(range(h, size), key=lambda i: abs(rows[i][k]))
            if rows[pivot][k] == 0:
                k += 1
                continue

            rows[h], rows[pivot] = rows[pivot], rows[h]
            pivot_row = rows[h]
            for row in rows[h + 1:]:
                f = row[k] / pivot_row[k]
                row[k] = 0.0
                for c in range(k + 1, columns):
                    row[c] -= pivot_row[c] * f
            h += 1
            k += 1

        last = rows[size - 1]
        if last[columns - 2] == 0:
            raise SingularSystemError("system matrix is singular")

        x = [0.0] * size
        x[size - 1] = last[columns - 1] / last[columns - 2]
        for i in range(size - 2, -1, -1):
            row = rows[i]
            total = 0.0
            for c in range(size - 1, i, -1):
                total += row[c] * x[c]
            x[i] = (row[columns - 1] - total) / row[i] if row[i] != 0 else 0.0

        if not all(math.isfinite(v) for v in x):
            raise SingularSystemError("solution is not finite")

        return Matrix.column(x)