"""Immutable dense float64 matrices with shape-checked arithmetic."""
from __future__ import annotations

import logging as _logging
from importlib.metadata import PackageNotFoundError as _PackageNotFoundError
from importlib.metadata import version as _version

from ._internal import config as _config
from ._internal.config import (
    get_kernel,
    get_print_options,
    set_kernel,
    set_print_options,
    use_kernel,
)
from ._internal.errors import (
    DenseMatError,
    DimensionError,
    MissingArgumentError,
    ShapeMismatchError,
    SizeMismatchError,
)
from ._internal.matrix_api import (
    Matrix,
    add,
    divide,
    matmul,
    multiply,
    reciprocal_divide,
    scale,
    subtract,
    transpose,
)
from ._internal.warnings import (
    DenseMatPerformanceWarning,
    DenseMatWarning,
    RaggedRowsWarning,
)

try:
    __version__ = _version("densemat")
except _PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "unknown"

_logging.getLogger(__name__).addHandler(_logging.NullHandler())


def reset_config() -> None:
    """Drop kernel/print overrides; DENSEMAT_* variables are re-read on next use."""
    _config.reset()


__all__ = [
    "Matrix",
    "add",
    "subtract",
    "multiply",
    "matmul",
    "scale",
    "divide",
    "reciprocal_divide",
    "transpose",
    "DenseMatError",
    "DimensionError",
    "MissingArgumentError",
    "ShapeMismatchError",
    "SizeMismatchError",
    "DenseMatWarning",
    "RaggedRowsWarning",
    "DenseMatPerformanceWarning",
    "get_kernel",
    "set_kernel",
    "use_kernel",
    "get_print_options",
    "set_print_options",
    "reset_config",
]
