"""Block-sparse matrix whose rows hold a few fixed-width blocks."""

from __future__ import annotations

from collections.abc import Iterator

from .matrix import Matrix


class SparseMatrix:
    """A ``width`` x ``height`` matrix where every row has up to ``entries``
    non-empty blocks of ``stride`` consecutive columns.

    Block ``index`` covers columns ``index * stride`` .. ``index * stride + stride - 1``.
    An empty entry has block ``None``.
    """

    def __init__(
        self, width: int = 0, height: int = 0, stride: int = 3, entries: int = 2
    ) -> None:
        if stride < 1 or entries < 1:
            raise ValueError("stride and entries must be positive")
        self._stride = stride
        self._entries = entries
        self._width = 0
        self._height = 0
        self._blocks: list[list[int | None]] = []
        self._values: list[list[float]] = []
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def stride(self) -> int:
        return self._stride

    @property
    def entries(self) -> int:
        return self._entries

    def resize(self, width: int, height: int) -> None:
        """Reshape the matrix and clear every entry."""
        if width < 0 or height < 0:
            raise ValueError("matrix dimensions must not be negative")
        self._width = width
        self._height = height
        self._blocks = [[None] * self._entries for _ in range(height)]
        self._values = [[0.0] * (self._entries * self._stride) for _ in range(height)]

    def _check(self, row: int, entry: int, slice_: int = 0) -> None:
        if not 0 <= row < self._height:
            raise IndexError(f"row {row} out of range")
        if not 0 <= entry < self._entries:
            raise IndexError(f"entry {entry} out of range")
        if not 0 <= slice_ < self._stride:
            raise IndexError(f"slice {slice_} out of range")

    def set_block(self, row: int, entry: int, index: int) -> None:
        """Make ``entry`` of ``row`` refer to block ``index``."""
        self._check(row, entry)
        if index < 0 or (index + 1) * self._stride > self._width:
            raise IndexError(f"block {index} outside matrix width {self._width}")
        self._blocks[row][entry] = index

    def block(self, row: int, entry: int) -> int | None:
        """Block index of an entry, or None when it is empty."""
        self._check(row, entry)
        return self._blocks[row][entry]

    def set_value(self, row: int, entry: int, slice: int, value: float) -> None:
        self._check(row, entry, slice)
        self._values[row][entry * self._stride + slice] = float(value)

    def value(self, row: int, entry: int, slice: int) -> float:
        self._check(row, entry, slice)
        return self._values[row][entry * self._stride + slice]

    def set_empty(self, row: int, entry: int) -> None:
        """Clear an entry and zero its values."""
        self._check(row, entry)
        self._blocks[row][entry] = None
        start = entry * self._stride
        self._values[row][start:start + self._stride] = [0.0] * self._stride

    def _row_items(self, row: int) -> Iterator[tuple[int, list[float]]]:
        """Yield (block index, block values) for the non-empty entries of a row."""
        values = self._values[row]
        for entry, block in enumerate(self._blocks[row]):
            if block is not None:
                start = entry * self._stride
                yield block, values[start:start + self._stride]

    def expand(self) -> Matrix:
        """Return the equivalent dense matrix."""
        result = Matrix(self._width, self._height)
        for row in range(self._height):
            for block, values in self._row_items(row):
                for k, v in enumerate(values):
                    result[block * self._stride + k, row] = v
        return result

    def expand_transposed(self) -> Matrix:
        """Return the transpose of the equivalent dense matrix."""
        result = Matrix(self._height, self._width)
        for row in range(self._height):
            for block, values in self._row_items(row):
                for k, v in enumerate(values):
                    result[row, block * self._stride + k] = v
        return result

    def multiply_transpose(self, other: SparseMatrix) -> Matrix:
        """Return ``self * transpose(other)`` as a dense matrix."""
        if self._width != other._width:
            raise ValueError("matrices must have the same width")
        if self._stride != other._stride:
            raise ValueError("matrices must have the same stride")
        own = [list(self._row_items(i)) for i in range(self._height)]
        theirs = [list(other._row_items(j)) for j in range(other._height)]
        result = Matrix(other._height, self._height)
        for i, own_row in enumerate(own):
            for j, other_row in enumerate(theirs):
                result[j, i] = sum(
                    a * b
                    for block0, values0 in own_row
                    for block1, values1 in other_row
                    if block0 == block1
                    for a, b in zip(values0, values1)
                )
        return result

    def transpose_multiply_vector(self, vector: Matrix) -> Matrix:
        """Return ``transpose(self) * vector`` for a column vector."""
        if vector.width != 1 or vector.height != self._height:
            raise ValueError("vector must be a column matching the matrix height")
        result = Matrix(1, self._width)
        for row in range(self._height):
            b = vector[0, row]
            for block, values in self._row_items(row):
                for k, v in enumerate(values):
                    result.add_at(0, block * self._stride + k, v * b)
        return result

    def multiply(self, matrix: Matrix) -> Matrix:
        """Return ``self * matrix`` as a dense matrix."""
        if matrix.height != self._width:
            raise ValueError("inner dimensions do not agree")
        result = Matrix(matrix.width, self._height)
        for row in range(self._height):
            items = list(self._row_items(row))
            for column in range(matrix.width):
                result[column, row] = sum(
                    v * matrix[column, block * self._stride + k]
                    for block, values in items
                    for k, v in enumerate(values)
                )
        return result

    def _empty_like(self) -> SparseMatrix:
        return SparseMatrix(self._width, self._height, self._stride, self._entries)

    def right_scale(self, scale: Matrix) -> SparseMatrix:
        """Scale each column by the matching entry of column vector ``scale``."""
        if scale.width != 1 or scale.height != self._width:
            raise ValueError("scale must be a column vector matching the width")
        target = self._empty_like()
        for row in range(self._height):
            for entry, block in enumerate(self._blocks[row]):
                if block is None:
                    continue
                target.set_block(row, entry, block)
                for k in range(self._stride):
                    target.set_value(
                        row,
                        entry,
                        k,
                        scale[0, block * self._stride + k]
                        * self._values[row][entry * self._stride + k],
                    )
        return target

    def left_scale(self, scale: Matrix) -> SparseMatrix:
        """Scale each row by the matching entry of column vector ``scale``."""
        if scale.height != self._height or (scale.width != 1 and self._height != 0):
            raise ValueError("scale must be a column vector matching the height")
        target = self._empty_like()
        for row in range(self._height):
            factor = scale[0, row]
            for entry, block in enumerate(self._blocks[row]):
                if block is None:
                    continue
                target.set_block(row, entry, block)
                for k in range(self._stride):
                    target.set_value(
                        row,
                        entry,
                        k,
                        factor * self._values[row][entry * self._stride + k],
                    )
        return target