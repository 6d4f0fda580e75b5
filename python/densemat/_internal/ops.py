"""Array kernels behind the Matrix operators.

Every function takes float64 arrays of validated shape and returns a freshly
allocated array; operands are never written to. Two implementations exist:

- ``numpy``: vectorized NumPy loops (default).
- ``python``: reference loops over Python floats.

Both follow IEEE-754 semantics for overflow and division by zero (``inf`` /
``nan``, no exceptions or RuntimeWarnings).
"""
from __future__ import annotations

import inspect
import logging
import os
import warnings

import numpy as np

from . import config as _config
from .warnings import DenseMatPerformanceWarning

logger = logging.getLogger(__name__)

# Multiply-adds above which the pure-Python matmul warns.
PYTHON_MATMUL_WARN_FLOPS = 10_000_000


def _external_stacklevel() -> int:
    """Stack level of the first frame outside densemat, seen from our caller."""
    package_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    frame = inspect.currentframe()
    frame = frame.f_back if frame is not None else None
    level = 1
    while frame is not None and os.path.abspath(frame.f_code.co_filename).startswith(package_dir + os.sep):
        frame = frame.f_back
        level += 1
    return level


def _use_python() -> bool:
    return _config.get_kernel() == "python"


def _to_array(values: list[list[float]], rows: int, cols: int) -> np.ndarray:
    return np.array(values, dtype=np.float64).reshape(rows, cols)


def add(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    if _use_python():
        out = [[a + b for a, b in zip(lrow, rrow)] for lrow, rrow in zip(left.tolist(), right.tolist())]
        return _to_array(out, *left.shape)
    with np.errstate(all="ignore"):
        return np.add(left, right)


def subtract(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    if _use_python():
        out = [[a - b for a, b in zip(lrow, rrow)] for lrow, rrow in zip(left.tolist(), right.tolist())]
        return _to_array(out, *left.shape)
    with np.errstate(all="ignore"):
        return np.subtract(left, right)


def add_scalar(matrix: np.ndarray, scalar: float) -> np.ndarray:
    if _use_python():
        out = [[v + scalar for v in row] for row in matrix.tolist()]
        return _to_array(out, *matrix.shape)
    with np.errstate(all="ignore"):
        return np.add(matrix, scalar)


def multiply_scalar(matrix: np.ndarray, scalar: float) -> np.ndarray:
    if _use_python():
        out = [[v * scalar for v in row] for row in matrix.tolist()]
        return _to_array(out, *matrix.shape)
    with np.errstate(all="ignore"):
        return np.multiply(matrix, scalar)


def reciprocal(scalar: float) -> float:
    with np.errstate(all="ignore"):
        return float(np.float64(1.0) / np.float64(scalar))


def scalar_divide(scalar: float, matrix: np.ndarray) -> np.ndarray:
    """Elementwise ``scalar / matrix[r, c]``."""
    with np.errstate(all="ignore"):
        if _use_python():
            numerator = np.float64(scalar)
            out = [[float(numerator / v) for v in row] for row in matrix.tolist()]
            return _to_array(out, *matrix.shape)
        return np.divide(scalar, matrix)


def transpose(matrix: np.ndarray) -> np.ndarray:
    rows, cols = matrix.shape
    if _use_python():
        values = matrix.tolist()
        out = [[values[r][c] for r in range(rows)] for c in range(cols)]
        return _to_array(out, cols, rows)
    return matrix.T.copy()


def matmul(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """Matrix product computed against the transposed right operand.

    Transposing once up front lets every result cell be a dot product of two
    contiguous rows: row ``r`` of ``left`` and row ``c`` of ``right.T``.
    """
    rows, common = left.shape
    cols = right.shape[1]
    right_t = transpose(right)

    if _use_python():
        flops = rows * cols * common
        if flops > PYTHON_MATMUL_WARN_FLOPS:
            warnings.warn(
                f"pure-Python matmul of {rows}x{common} by {common}x{cols} "
                f"({flops} multiply-adds) will be slow; consider the numpy kernel",
                DenseMatPerformanceWarning,
                stacklevel=_external_stacklevel(),
            )
        logger.debug("matmul %dx%d * %dx%d on python kernel", rows, common, common, cols)
        return _python_matmul(left.tolist(), right_t.tolist(), rows, cols)

    logger.debug("matmul %dx%d * %dx%d on numpy kernel", rows, common, common, cols)
    result = np.empty((rows, cols), dtype=np.float64)
    with np.errstate(all="ignore"):
        for r in range(rows):
            result[r] = right_t @ left[r]
    return result


def _python_matmul(
    left_rows: list[list[float]],
    right_t_rows: list[list[float]],
    rows: int,
    cols: int,
) -> np.ndarray:
    out: list[list[float]] = []
    for left_row in left_rows:
        result_row: list[float] = []
        for right_row in right_t_rows:
            acc = 0.0
            for a, b in zip(left_row, right_row):
                acc += a * b
            result_row.append(acc)
        out.append(result_row)
    return _to_array(out, rows, cols)
