from __future__ import annotations

import itertools
import numbers
from collections.abc import Sequence as _SequenceABC
from typing import Any, Iterable, Iterator

import numpy as np

from .errors import MissingArgumentError, SizeMismatchError


def is_real_scalar(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def is_sequence_like(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return value.ndim >= 1
    return isinstance(value, _SequenceABC) and not isinstance(value, (str, bytes, bytearray))


def take_elements(elements: Iterable[Any], count: int) -> np.ndarray:
    """Read exactly ``count`` values from ``elements`` in row-major order.

    Values beyond ``count`` are left unread. A 2-D array is read row by row.
    """
    if elements is None:
        raise MissingArgumentError("elements")
    if isinstance(elements, np.ndarray):
        if elements.dtype.kind not in "iuf":
            raise TypeError(f"matrix elements must be real numbers, got dtype {elements.dtype}")
        values = elements.ravel()[:count]
        if values.size < count:
            raise SizeMismatchError(count, int(values.size))
        return np.array(values, dtype=np.float64)
    values = list(itertools.islice(iter(elements), count))
    if len(values) < count:
        raise SizeMismatchError(count, len(values))
    for value in values:
        if not is_real_scalar(value):
            raise TypeError(f"matrix elements must be real numbers, got {type(value).__name__}")
    return np.array(values, dtype=np.float64)


def flat_row_count(columns: int, elements: Any) -> tuple[int, Any]:
    """Rows implied by a flat element list; the list is materialized if needed."""
    if elements is None:
        return 0, None
    if isinstance(elements, np.ndarray):
        count = int(elements.size)
    else:
        if not hasattr(elements, "__len__"):
            elements = list(elements)
        count = len(elements)
    if columns > 0:
        return count // columns, elements
    return 0, elements


def flatten_rows(candidate: Any) -> tuple[int, int, Iterator[Any], bool]:
    """Flatten nested rows into a single element stream.

    Returns ``(rows, columns, stream, ragged)`` where ``columns`` is the length
    of the first row. Row boundaries are not enforced; ``ragged`` reports
    whether any row differs in length from the first.
    """
    if candidate is None:
        raise MissingArgumentError("rows")
    if not is_sequence_like(candidate):
        raise TypeError("Matrix rows must be provided as a nested sequence or a 2D NumPy array.")

    rows: list[Any] = []
    for row in candidate:
        if row is None:
            row = ()
        elif not is_sequence_like(row):
            raise TypeError("Each matrix row must be a sequence of entries.")
        rows.append(row)

    columns = len(rows[0]) if rows else 0
    ragged = any(len(row) != columns for row in rows)
    return len(rows), columns, itertools.chain.from_iterable(rows), ragged


def coerce_numpy(candidate: Any) -> np.ndarray:
    """Return a private float64 copy of ``candidate`` shaped as a 2-D array."""
    if candidate is None:
        raise MissingArgumentError("array")
    source = np.asarray(candidate)
    if source.dtype.kind not in "iuf":
        raise TypeError(f"matrix elements must be real numbers, got dtype {source.dtype}")
    array = np.array(source, dtype=np.float64, copy=True)
    if array.ndim == 0:
        return array.reshape(1, 1)
    if array.ndim == 1:
        return array.reshape(1, -1)
    if array.ndim != 2:
        raise ValueError(f"Matrix input must be at most 2D, got {array.ndim} dimensions.")
    return array
