from __future__ import annotations

import logging
import os
import warnings
from contextlib import contextmanager
from typing import Iterator

from . import formatting as _formatting
from .warnings import DenseMatWarning

logger = logging.getLogger(__name__)

KERNELS = ("numpy", "python")
KERNEL_ENV_VAR = "DENSEMAT_KERNEL"
EDGE_ITEMS_ENV_VAR = "DENSEMAT_PRINT_EDGE_ITEMS"

_DEFAULT_KERNEL = "numpy"
_DEFAULT_EDGE_ITEMS = 4


class Settings:
    def __init__(
        self,
        *,
        kernel_env_var: str = KERNEL_ENV_VAR,
        edge_items_env_var: str = EDGE_ITEMS_ENV_VAR,
    ) -> None:
        self._kernel_env_var = kernel_env_var
        self._edge_items_env_var = edge_items_env_var
        self._kernel_cache: str | None = None
        self._edge_items_cache: int | None = None

    def kernel(self) -> str:
        if self._kernel_cache is not None:
            return self._kernel_cache

        env = os.environ.get(self._kernel_env_var)
        if env:
            kernel = _normalize_kernel(env)
            logger.debug("kernel %r selected from %s", kernel, self._kernel_env_var)
        else:
            kernel = _DEFAULT_KERNEL

        self._kernel_cache = kernel
        return kernel

    def set_kernel(self, name: str) -> None:
        kernel = _normalize_kernel(name)
        logger.debug("kernel set to %r", kernel)
        self._kernel_cache = kernel

    def edge_items(self) -> int:
        if self._edge_items_cache is not None:
            return self._edge_items_cache

        env = os.environ.get(self._edge_items_env_var)
        edge_items = _DEFAULT_EDGE_ITEMS
        if env:
            try:
                edge_items = _validate_edge_items(int(env))
            except ValueError:
                warnings.warn(
                    f"ignoring {self._edge_items_env_var}={env!r}: expected an integer >= 1; "
                    f"using {_DEFAULT_EDGE_ITEMS}",
                    DenseMatWarning,
                    stacklevel=2,
                )
                edge_items = _DEFAULT_EDGE_ITEMS

        self._edge_items_cache = edge_items
        return edge_items

    def set_edge_items(self, edge_items: int) -> None:
        edge_items = _validate_edge_items(int(edge_items))
        logger.debug("print edge_items set to %d", edge_items)
        self._edge_items_cache = edge_items

    def reset(self) -> None:
        self._kernel_cache = None
        self._edge_items_cache = None


def _normalize_kernel(name: str) -> str:
    if not isinstance(name, str):
        raise TypeError(f"kernel name must be a string, got {type(name).__name__}")
    s = name.strip().lower()
    if s not in KERNELS:
        raise ValueError(f"Unknown kernel {name!r}; expected one of {', '.join(KERNELS)}")
    return s


def _validate_edge_items(edge_items: int) -> int:
    if edge_items < 1:
        raise ValueError(f"edge_items must be at least 1, got {edge_items}")
    return edge_items


_settings = Settings()
_formatting.configure(edge_items=_settings.edge_items)


def get_kernel() -> str:
    """Return the active arithmetic kernel name ("numpy" or "python")."""
    return _settings.kernel()


def set_kernel(name: str) -> None:
    """Select the arithmetic kernel used by every Matrix operation."""
    _settings.set_kernel(name)


@contextmanager
def use_kernel(name: str) -> Iterator[None]:
    """Temporarily switch kernels, restoring the previous one on exit.

    The setting is process-global; this is not intended to provide thread
    isolation.
    """
    prev = _settings.kernel()
    _settings.set_kernel(name)
    try:
        yield
    finally:
        _settings.set_kernel(prev)


def set_print_options(*, edge_items: int) -> None:
    _settings.set_edge_items(edge_items)


def get_print_options() -> dict[str, int]:
    return {"edge_items": _settings.edge_items()}


def reset() -> None:
    """Drop overrides; settings are re-read from the environment on next use."""
    _settings.reset()
