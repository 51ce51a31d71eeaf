"""Common interface of the solvers for the constraint linear system."""

from __future__ import annotations

from .matrix import Matrix
from .sparse_matrix import SparseMatrix


class ConvergenceError(RuntimeError):
    """Raised when a solver cannot produce a solution of the system."""


class SleSolver:
    """Solves ``(J * diag(W) * J^T) x = right`` for ``x``.

    ``J`` is a block-sparse Jacobian and ``W`` a column vector of weights
    (usually inverse masses). Subclasses that honour per-row bounds on ``x``
    are created with ``supports_limits=True``.
    """

    def __init__(self, supports_limits: bool = False) -> None:
        self._supports_limits = supports_limits

    @property
    def supports_limits(self) -> bool:
        return self._supports_limits

    def solve(
        self,
        j: SparseMatrix,
        w: Matrix,
        right: Matrix,
        previous: Matrix | None = None,
    ) -> Matrix:
        """Return the solution as a column vector.

        ``previous`` is an optional earlier solution used as a starting guess.
        """
        raise ConvergenceError(f"{type(self).__name__} cannot solve systems")

    def solve_with_limits(
        self,
        j: SparseMatrix,
        w: Matrix,
        right: Matrix,
        limits: Matrix,
        previous: Matrix | None = None,
    ) -> Matrix:
        """Return a solution whose entries lie within ``limits``.

        ``limits`` has width 2: column 0 holds lower and column 1 upper bounds.
        """
        raise ConvergenceError(
            f"{type(self).__name__} cannot solve systems with limits"
        )