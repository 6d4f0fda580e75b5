"""Exception types raised by densemat.

Each class also derives from the builtin exception a caller would expect
(``ValueError`` / ``TypeError``), so ``except ValueError`` keeps working.
"""
from __future__ import annotations

from typing import Any


class DenseMatError(Exception):
    """Base class for all densemat errors."""


class DimensionError(DenseMatError, ValueError):
    """A row or column count is negative."""

    def __init__(self, name: str, value: Any) -> None:
        self.name = name
        self.value = value
        super().__init__(f"{name} = {value} (must be non-negative)")


class MissingArgumentError(DenseMatError, TypeError):
    """A required operand or element source is None."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} must not be None")


class ShapeMismatchError(DenseMatError, ValueError):
    """Operand shapes are incompatible for the requested operation."""

    def __init__(
        self,
        operation: str,
        left_shape: tuple[int, int],
        right_shape: tuple[int, int],
        symbol: str,
    ) -> None:
        self.operation = operation
        self.left_shape = left_shape
        self.right_shape = right_shape
        super().__init__(
            f"Invalid matrix {operation}: "
            f"{left_shape[0]}x{left_shape[1]} {symbol} {right_shape[0]}x{right_shape[1]}"
        )


class SizeMismatchError(DenseMatError, ValueError):
    """The element source ran out before rows * columns values were read."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected {expected} elements, got {actual}")
