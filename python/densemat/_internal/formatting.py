from __future__ import annotations

from typing import Any, Callable


_edge_items_getter: Callable[[], int] = lambda: 4


def configure(*, edge_items: Callable[[], int]) -> None:
    global _edge_items_getter
    _edge_items_getter = edge_items


def _edge_indices(length: int) -> tuple[list[int], list[int], bool]:
    edge = _edge_items_getter()
    if length <= edge * 2:
        return list(range(length)), [], False
    head = list(range(edge))
    tail = list(range(length - edge, length))
    return head, tail, True


def _format_value(value: float) -> str:
    return f"{value:g}"


def _format_matrix_row(
    matrix: Any,
    row_index: int,
    col_head: list[int],
    col_tail: list[int],
    truncated: bool,
) -> str:
    entries = [_format_value(matrix[row_index, col]) for col in col_head]
    if truncated:
        entries.append("...")
    entries.extend(_format_value(matrix[row_index, col]) for col in col_tail)
    return " ".join(entries)


def matrix_str(self: Any) -> str:
    rows = self.rows
    cols = self.columns

    header = f"{self.__class__.__name__}(shape=({rows}, {cols}))"

    if rows == 0 or cols == 0:
        return header + "\n[]"

    row_head, row_tail, rows_truncated = _edge_indices(rows)
    col_head, col_tail, cols_truncated = _edge_indices(cols)

    lines = [header, "["]
    for row_index in row_head:
        row_repr = _format_matrix_row(self, row_index, col_head, col_tail, cols_truncated)
        lines.append(f" [{row_repr}]")
    if rows_truncated:
        lines.append(" ...")
    for row_index in row_tail:
        row_repr = _format_matrix_row(self, row_index, col_head, col_tail, cols_truncated)
        lines.append(f" [{row_repr}]")
    lines.append("]")
    return "\n".join(lines)


class MatrixMixin:
    def __str__(self) -> str:
        return matrix_str(self)

    def __repr__(self) -> str:
        shape = getattr(self, "shape", None)
        return f"<{self.__class__.__name__} shape={shape}>"
