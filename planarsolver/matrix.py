"""Dense matrix of floats used by the constraint solvers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


class Matrix:
    """A dense ``width`` x ``height`` matrix of floats.

    Elements are addressed as ``matrix[column, row]``.
    """

    __slots__ = ("_width", "_height", "_rows")

    def __init__(self, width: int = 0, height: int = 0, value: float = 0.0) -> None:
        if width < 0 or height < 0:
            raise ValueError("matrix dimensions must not be negative")
        self._width = width
        self._height = height
        self._rows = [[float(value)] * width for _ in range(height)]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> Matrix:
        """Build a matrix from a sequence of equally long rows."""
        rows = [list(map(float, row)) for row in rows]
        width = len(rows[0]) if rows else 0
        if any(len(row) != width for row in rows):
            raise ValueError("all rows must have the same length")
        matrix = cls(width, len(rows))
        matrix._rows = rows
        return matrix

    @classmethod
    def column(cls, values: Iterable[float]) -> Matrix:
        """Build a column vector (width 1) from values."""
        return cls.from_rows([[v] for v in values])

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def resize(self, width: int, height: int) -> None:
        """Change the shape; contents are zeroed unless the shape is unchanged."""
        if width == self._width and height == self._height:
            return
        if width < 0 or height < 0:
            raise ValueError("matrix dimensions must not be negative")
        self._width = width
        self._height = height
        self._rows = [[0.0] * width for _ in range(height)]

    def fill(self, value: float) -> None:
        """Set every element to ``value``."""
        self._rows = [[float(value)] * self._width for _ in range(self._height)]

    def set_data(self, data: Iterable[float]) -> None:
        """Replace the contents with row-major ``data``."""
        values = [float(v) for v in data]
        if len(values) != self._width * self._height:
            raise ValueError(
                f"expected {self._width * self._height} values, got {len(values)}"
            )
        w = self._width
        self._rows = [values[r * w:(r + 1) * w] for r in range(self._height)]

    def copy(self) -> Matrix:
        result = Matrix(self._width, self._height)
        result._rows = [list(row) for row in self._rows]
        return result

    def _check_index(self, column: int, row: int) -> None:
        if not (0 <= column < self._width and 0 <= row < self._height):
            raise IndexError(
                f"index ({column}, {row}) outside {self._width}x{self._height} matrix"
            )

    def __getitem__(self, key: tuple[int, int]) -> float:
        column, row = key
        self._check_index(column, row)
        return self._rows[row][column]

    def __setitem__(self, key: tuple[int, int], value: float) -> None:
        column, row = key
        self._check_index(column, row)
        self._rows[row][column] = float(value)

    def add_at(self, column: int, row: int, value: float) -> None:
        """Add ``value`` to the element at (column, row)."""
        self._check_index(column, row)
        self._rows[row][column] += value

    def _require_same_shape(self, other: Matrix) -> None:
        if self._width != other._width or self._height != other._height:
            raise ValueError(
                f"shape mismatch: {self._width}x{self._height} "
                f"vs {other._width}x{other._height}"
            )

    def _from_rows_unchecked(self, width: int, rows: list[list[float]]) -> Matrix:
        result = Matrix(width, len(rows))
        result._rows = rows
        return result

    def multiply(self, other: Matrix) -> Matrix:
        """Return the matrix product ``self * other``."""
        if self._width != other._height:
            raise ValueError("inner dimensions do not agree")
        columns = list(zip(*other._rows)) or [()] * other._width
        if other._height == 0:
            columns = [()] * other._width
        rows = [
            [sum(a * b for a, b in zip(row, col)) for col in columns]
            for row in self._rows
        ]
        return self._from_rows_unchecked(other._width, rows)

    def component_multiply(self, other: Matrix) -> Matrix:
        """Return the element-wise product."""
        self._require_same_shape(other)
        rows = [
            [a * b for a, b in zip(ra, rb)] for ra, rb in zip(self._rows, other._rows)
        ]
        return self._from_rows_unchecked(self._width, rows)

    def transpose_multiply(self, other: Matrix) -> Matrix:
        """Return ``transpose(self) * other``."""
        if self._height != other._height:
            raise ValueError("matrices must have the same height")
        return self.transpose().multiply(other)

    def left_scale(self, scale: Matrix) -> Matrix:
        """Scale each row by the matching entry of column vector ``scale``."""
        if scale._width != 1 or scale._height != self._height:
            raise ValueError("scale must be a column vector matching the height")
        rows = [
            [s * v for v in row] for (s,), row in zip(scale._rows, self._rows)
        ]
        return self._from_rows_unchecked(self._width, rows)

    def right_scale(self, scale: Matrix) -> Matrix:
        """Scale each column by the matching entry of column vector ``scale``."""
        if scale._width != 1 or scale._height != self._width:
            raise ValueError("scale must be a column vector matching the width")
        factors = [s for (s,) in scale._rows]
        rows = [[f * v for f, v in zip(factors, row)] for row in self._rows]
        return self._from_rows_unchecked(self._width, rows)

    def scale(self, s: float) -> Matrix:
        """Return the matrix multiplied by scalar ``s``."""
        rows = [[s * v for v in row] for row in self._rows]
        return self._from_rows_unchecked(self._width, rows)

    def __add__(self, other: object) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        self._require_same_shape(other)
        rows = [
            [a + b for a, b in zip(ra, rb)] for ra, rb in zip(self._rows, other._rows)
        ]
        return self._from_rows_unchecked(self._width, rows)

    def __sub__(self, other: object) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        self._require_same_shape(other)
        rows = [
            [a - b for a, b in zip(ra, rb)] for ra, rb in zip(self._rows, other._rows)
        ]
        return self._from_rows_unchecked(self._width, rows)

    def __neg__(self) -> Matrix:
        rows = [[-v for v in row] for row in self._rows]
        return self._from_rows_unchecked(self._width, rows)

    def equals(self, other: Matrix, err: float = 1e-6) -> bool:
        """True if shapes match and all elements differ by at most ``err``."""
        if self._width != other._width or self._height != other._height:
            return False
        return all(
            abs(a - b) <= err
            for ra, rb in zip(self._rows, other._rows)
            for a, b in zip(ra, rb)
        )

    def _require_vector(self) -> None:
        if self._width != 1:
            raise ValueError("operation requires a column vector")

    def vector_magnitude_squared(self) -> float:
        """Squared Euclidean length of a column vector."""
        self._require_vector()
        return sum(v * v for (v,) in self._rows)

    def dot(self, other: Matrix) -> float:
        """Dot product of two column vectors of equal height."""
        self._require_vector()
        other._require_vector()
        if self._height != other._height:
            raise ValueError("vectors must have the same height")
        return sum(a * b for (a,), (b,) in zip(self._rows, other._rows))

    def madd(self, other: Matrix, s: float) -> None:
        """In place: ``self += other * s``."""
        self._require_same_shape(other)
        self._rows = [
            [a + b * s for a, b in zip(ra, rb)] for ra, rb in zip(self._rows, other._rows)
        ]

    def pmadd(self, other: Matrix, s: float) -> None:
        """In place: ``self = self * s + other``."""
        self._require_same_shape(other)
        self._rows = [
            [s * a + b for a, b in zip(ra, rb)] for ra, rb in zip(self._rows, other._rows)
        ]

    def transpose(self) -> Matrix:
        rows = [list(col) for col in zip(*self._rows)]
        if self._height == 0:
            rows = [[] for _ in range(self._width)]
        return self._from_rows_unchecked(self._height, rows)

    def swap_rows(self, a: int, b: int) -> None:
        """Exchange rows ``a`` and ``b`` in place."""
        if not (0 <= a < self._height and 0 <= b < self._height):
            raise IndexError("row index out of range")
        self._rows[a], self._rows[b] = self._rows[b], self._rows[a]

    def __repr__(self) -> str:
        return f"Matrix.from_rows({self._rows!r})"