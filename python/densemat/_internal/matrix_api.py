from __future__ import annotations

import operator
import warnings
from typing import Any, Iterable, Iterator, Sequence

import numpy as np

from . import coercion as _coercion
from . import formatting as _formatting
from . import ops as _ops
from .errors import DimensionError, MissingArgumentError, ShapeMismatchError
from .warnings import RaggedRowsWarning


def _as_dimension(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{name} must be an integer, got bool")
    try:
        n = operator.index(value)
    except TypeError:
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}") from None
    if n < 0:
        raise DimensionError(name, n)
    return n


_is_scalar = _coercion.is_real_scalar


def _freeze(array: np.ndarray) -> np.ndarray:
    # A view would leave its writable base reachable through row views.
    if not array.flags.owndata:
        array = array.copy()
    array.flags.writeable = False
    return array


MatrixMixin = _formatting.MatrixMixin


class Matrix(MatrixMixin):
    """Immutable dense row-major matrix of float64 values.

    ``Matrix(rows, columns, elements)`` reads exactly ``rows * columns``
    values from ``elements`` in row-major order; extra values are ignored and
    a shortfall raises ``SizeMismatchError``. See ``from_flat``,
    ``from_rows`` and ``from_numpy`` for the other construction paths.

    Every arithmetic operation returns a new Matrix:

    - ``m + n``, ``m - n``: elementwise, shapes must match.
    - ``m * n`` / ``m @ n``: matrix product, ``m.columns == n.rows``.
    - ``m + s``, ``s + m``, ``m - s``, ``m * s``, ``s * m``, ``m / s``:
      the scalar is broadcast over every element.
    - ``s / m``: elementwise ``s / m[r, c]``.
    - ``s - m`` returns the same values as ``m - s`` (not its negation).
    """

    __slots__ = ("_data",)

    # NumPy defers binary operators to the methods below.
    __array_ufunc__ = None

    def __init__(self, rows: int, columns: int, elements: Iterable[float]) -> None:
        rows = _as_dimension("rows", rows)
        columns = _as_dimension("columns", columns)
        if elements is None:
            raise MissingArgumentError("elements")
        data = _coercion.take_elements(elements, rows * columns)
        self._data = _freeze(data.reshape(rows, columns))

    @classmethod
    def from_flat(cls, columns: int, elements: Sequence[float]) -> "Matrix":
        """Build a matrix from a flat row-major list and a column count.

        ``rows`` is ``len(elements) // columns`` (0 when ``columns`` is 0);
        trailing elements that do not fill a whole row are ignored.
        """
        columns = _as_dimension("columns", columns)
        rows, elements = _coercion.flat_row_count(columns, elements)
        return cls(rows, columns, elements)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        """Build a matrix from nested rows.

        The column count is taken from the first row and the rows are
        flattened before reshaping, so rows of unequal length are not
        rejected: values spill over into the following row. A
        ``RaggedRowsWarning`` is emitted when that happens.
        """
        n_rows, n_cols, stream, ragged = _coercion.flatten_rows(rows)
        if ragged:
            warnings.warn(
                f"rows have unequal lengths; values are read row-major as "
                f"{n_rows}x{n_cols} from the concatenated rows",
                RaggedRowsWarning,
                stacklevel=2,
            )
        return cls(n_rows, n_cols, stream)

    @classmethod
    def from_numpy(cls, array: Any) -> "Matrix":
        """Copy a 0-, 1- or 2-D array-like into a new matrix (1-D becomes one row)."""
        return cls._wrap(_coercion.coerce_numpy(array))

    @classmethod
    def _wrap(cls, array: np.ndarray) -> "Matrix":
        # Takes ownership of an already-shaped float64 array; no validation.
        obj = cls.__new__(cls)
        obj._data = _freeze(array)
        return obj

    # Properties ------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def columns(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return (self._data.shape[0], self._data.shape[1])

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    def __len__(self) -> int:
        return self.rows

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._data)

    def __getitem__(self, key: Any) -> Any:
        """``m[r]`` is a read-only row view, ``m[r, c]`` a float."""
        if isinstance(key, tuple):
            if len(key) != 2:
                raise TypeError(f"Matrix index must be (row, column), got {len(key)} items")
            row, col = operator.index(key[0]), operator.index(key[1])
            return float(self._data[row, col])
        return self._data[operator.index(key)]

    # Value semantics --------------------------------------------------------

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        return hash((self.shape, tuple(self._data.ravel().tolist())))

    def __reduce__(self) -> tuple[Any, ...]:
        return (Matrix, (self.rows, self.columns, self._data.ravel().tolist()))

    def allclose(self, other: "Matrix", *, rtol: float = 1e-9, atol: float = 0.0) -> bool:
        if not isinstance(other, Matrix):
            raise TypeError(f"allclose expects a Matrix, got {type(other).__name__}")
        if self.shape != other.shape:
            return False
        return bool(np.allclose(self._data, other._data, rtol=rtol, atol=atol))

    # Interop ---------------------------------------------------------------

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def __array__(self, dtype: Any = None, copy: Any = None) -> np.ndarray:
        return np.array(self._data, dtype=dtype, copy=True)

    def tolist(self) -> list[list[float]]:
        return self._data.tolist()

    # Named operations ------------------------------------------------------

    def add(self, other: Any) -> "Matrix":
        return add(self, other)

    def subtract(self, other: Any) -> "Matrix":
        return subtract(self, other)

    def multiply(self, other: Any) -> "Matrix":
        return multiply(self, other)

    def scale(self, scalar: float) -> "Matrix":
        return scale(self, scalar)

    def divide(self, scalar: float) -> "Matrix":
        return divide(self, scalar)

    def reciprocal_divide(self, scalar: float) -> "Matrix":
        """Return ``scalar / self`` elementwise."""
        return reciprocal_divide(scalar, self)

    def transpose(self) -> "Matrix":
        return transpose(self)

    # Operators ---------------------------------------------------------------

    def __add__(self, other: Any) -> Any:
        if other is None or isinstance(other, Matrix) or _is_scalar(other):
            return add(self, other)
        return NotImplemented

    def __radd__(self, other: Any) -> Any:
        if other is None or _is_scalar(other):
            return add(other, self)
        return NotImplemented

    def __sub__(self, other: Any) -> Any:
        if other is None or isinstance(other, Matrix) or _is_scalar(other):
            return subtract(self, other)
        return NotImplemented

    def __rsub__(self, other: Any) -> Any:
        if other is None or _is_scalar(other):
            return subtract(other, self)
        return NotImplemented

    def __mul__(self, other: Any) -> Any:
        if other is None or isinstance(other, Matrix) or _is_scalar(other):
            return multiply(self, other)
        return NotImplemented

    def __rmul__(self, other: Any) -> Any:
        if other is None or _is_scalar(other):
            return multiply(other, self)
        return NotImplemented

    def __matmul__(self, other: Any) -> Any:
        if other is None or isinstance(other, Matrix):
            return matmul(self, other)
        return NotImplemented

    def __truediv__(self, other: Any) -> Any:
        if other is None or _is_scalar(other):
            return divide(self, other)
        return NotImplemented

    def __rtruediv__(self, other: Any) -> Any:
        if other is None or _is_scalar(other):
            return reciprocal_divide(other, self)
        return NotImplemented


def _require_matrix(name: str, value: Any) -> "Matrix":
    if value is None:
        raise MissingArgumentError(name)
    if not isinstance(value, Matrix):
        raise TypeError(f"{name} must be a Matrix, got {type(value).__name__}")
    return value


def _require_scalar(name: str, value: Any) -> float:
    if value is None:
        raise MissingArgumentError(name)
    if not _is_scalar(value):
        raise TypeError(f"{name} must be a real number, got {type(value).__name__}")
    return float(value)


def _check_same_shape(operation: str, symbol: str, left: Matrix, right: Matrix) -> None:
    if left.shape != right.shape:
        raise ShapeMismatchError(operation, left.shape, right.shape, symbol)


def add(left: Any, right: Any) -> Matrix:
    """Elementwise sum of two matrices, or a scalar broadcast over one.

    ``add(s, m)`` is the same as ``add(m, s)``.
    """
    if left is None:
        raise MissingArgumentError("left")
    if right is None:
        raise MissingArgumentError("right")
    if not isinstance(left, Matrix):
        matrix = _require_matrix("right", right)
        return add(matrix, _require_scalar("left", left))
    if isinstance(right, Matrix):
        _check_same_shape("addition", "+", left, right)
        return Matrix._wrap(_ops.add(left._data, right._data))
    return Matrix._wrap(_ops.add_scalar(left._data, _require_scalar("right", right)))


def subtract(left: Any, right: Any) -> Matrix:
    """Elementwise difference of two matrices, or a broadcast scalar.

    ``subtract(m, s)`` adds ``-s`` to every element. ``subtract(s, m)``
    returns the same values as ``subtract(m, s)``; it does not negate.
    """
    if left is None:
        raise MissingArgumentError("left")
    if right is None:
        raise MissingArgumentError("right")
    if not isinstance(left, Matrix):
        # scalar - matrix keeps the matrix - scalar result.
        matrix = _require_matrix("right", right)
        return subtract(matrix, _require_scalar("left", left))
    if isinstance(right, Matrix):
        _check_same_shape("subtraction", "-", left, right)
        return Matrix._wrap(_ops.subtract(left._data, right._data))
    return add(left, _require_scalar("right", right) * -1)


def multiply(left: Any, right: Any) -> Matrix:
    """Matrix product when both operands are matrices, otherwise scaling."""
    if left is None:
        raise MissingArgumentError("left")
    if right is None:
        raise MissingArgumentError("right")
    if isinstance(left, Matrix) and isinstance(right, Matrix):
        return matmul(left, right)
    if isinstance(left, Matrix):
        return scale(left, right)
    return scale(_require_matrix("right", right), _require_scalar("left", left))


def matmul(left: Any, right: Any) -> Matrix:
    left = _require_matrix("left", left)
    right = _require_matrix("right", right)
    if left.columns != right.rows:
        raise ShapeMismatchError("multiplication", left.shape, right.shape, "*")
    return Matrix._wrap(_ops.matmul(left._data, right._data))


def scale(matrix: Any, scalar: Any) -> Matrix:
    matrix = _require_matrix("matrix", matrix)
    return Matrix._wrap(_ops.multiply_scalar(matrix._data, _require_scalar("scalar", scalar)))


def divide(matrix: Any, scalar: Any) -> Matrix:
    """``matrix * (1 / scalar)``; a zero scalar yields inf/nan, not an error."""
    matrix = _require_matrix("matrix", matrix)
    return scale(matrix, _ops.reciprocal(_require_scalar("scalar", scalar)))


def reciprocal_divide(scalar: Any, matrix: Any) -> Matrix:
    """Elementwise ``scalar / matrix[r, c]``."""
    matrix = _require_matrix("matrix", matrix)
    return Matrix._wrap(_ops.scalar_divide(_require_scalar("scalar", scalar), matrix._data))


def transpose(matrix: Any) -> Matrix:
    matrix = _require_matrix("matrix", matrix)
    return Matrix._wrap(_ops.transpose(matrix._data))
