"""densemat warning categories.

These exist so users can filter/suppress densemat warnings without
catching all UserWarning.

Keep this module lightweight and dependency-free to avoid import cycles.
"""


class DenseMatWarning(UserWarning):
    """Base warning category for all densemat user-facing warnings."""


class RaggedRowsWarning(DenseMatWarning):
    """Nested rows of unequal length were flattened before reshaping."""


class DenseMatPerformanceWarning(DenseMatWarning):
    """Warnings about likely performance pitfalls (e.g., slow fallbacks)."""
