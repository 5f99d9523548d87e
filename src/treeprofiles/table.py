# -------------------------------------
# Table formatting
# -------------------------------------
"""
Minimal dict-based tables for CLI reports:

    {"columns": ["col1", "col2"], "rows": [[val1, val2], ...]}
"""
from __future__ import annotations

from typing import Any

MAX_FORMAT_ROWS = 100_000


def table_validate(table: dict[str, Any]) -> None:
    """Raise ValueError unless every row has one value per column."""
    if "columns" not in table or "rows" not in table:
        raise ValueError("table must have 'columns' and 'rows' keys")
    n_cols = len(table["columns"])
    for i, row in enumerate(table["rows"]):
        if len(row) != n_cols:
            raise ValueError(f"row {i} has {len(row)} values, expected {n_cols}")


def _format_value(v: Any) -> str:
    if v is None:
        return ""
    # tabs and newlines would break the layout
    return str(v).replace("\t", "\\t").replace("\n", "\\n")


def format_table(table: dict[str, Any]) -> str:
    """Format a table dict as a tab-separated string with header.

    Raises:
        ValueError: If table has more than MAX_FORMAT_ROWS rows
    """
    table_validate(table)
    n_rows = len(table["rows"])
    if n_rows > MAX_FORMAT_ROWS:
        raise ValueError(f"Table has {n_rows:,} rows, exceeds limit of {MAX_FORMAT_ROWS:,}")

    lines = []

    # Header
    lines.append("\t".join(str(c) for c in table["columns"]))

    # Rows
    for row in table["rows"]:
        lines.append("\t".join(_format_value(v) for v in row))

    return "\n".join(lines)


def print_table(table: dict[str, Any]) -> None:
    """Print a table with header and rows to stdout."""
    print(format_table(table))
