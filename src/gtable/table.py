# -------------------------------------
# Table - immutable ordered relation
# -------------------------------------
"""
Immutable, ordered two dimensional relations.

A Table is a set of named columns, where each column is a read-only
one-dimensional numpy array and all columns have the same length. Column
order is insertion order. A Table with no columns is the canonical empty
table (zero rows, zero columns), which is distinct from a table that has
columns but zero rows.

A Table's structure is immutable. Adding a column returns a new Table
that shares every untouched column array with the original.

A Table is also a trivial grouping: it has no groups when empty and a
single group at the root GroupID otherwise.

This module provides:
- Table: add, add_const, column, must_column, const, columns, equals
- Builder: deferred-check accumulation of columns
- Dict interop: Table.from_dict, Table.to_dict
- Output: format_table, print_table
"""
from __future__ import annotations
from typing import Any, Literal, TYPE_CHECKING

import numpy as np

from . import state
from .errors import LengthMismatch, UnknownColumn
from .generic import as_column, cycle, multi_index

if TYPE_CHECKING:
    from .grouping import GroupID, Grouping


class _Const:
    """A constant column value; takes on the row count of its table."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"_Const({self.value!r})"


def _data_len(cols: dict[str, Any]) -> int | None:
    """Length of the first non-constant column, or None if there is none."""
    for col in cols.values():
        if not isinstance(col, _Const):
            return len(col)
    return None


class Table:
    """
    An immutable ordered relation of equal-length named columns.

    The zero-argument constructor returns the canonical empty table.
    Build tables with add/add_const or with a Builder.
    """

    __slots__ = ("_cols", "_len")

    def __init__(self):
        self._cols: dict[str, np.ndarray | _Const] = {}
        self._len = 0

    @classmethod
    def new(cls) -> Table:
        """Return the canonical empty table."""
        return cls()

    @classmethod
    def _make(cls, cols: dict[str, Any], length: int) -> Table:
        t = cls.__new__(cls)
        t._cols = cols
        t._len = length
        return t

    def __len__(self) -> int:
        return self._len

    def __repr__(self) -> str:
        return f"Table(columns={self.columns()!r}, len={self._len})"

    def len(self) -> int:
        """Return the number of rows."""
        return self._len

    def is_empty(self) -> bool:
        """Report whether this is the canonical empty table (no columns)."""
        return not self._cols

    # -------------------------------------
    # Construction
    # -------------------------------------

    def add(self, name: str, data: Any) -> Table:
        """
        Return a new Table with column name bound to data.

        If the table already has a column called name, it is removed first,
        so name moves to the end of the column order. data must have the
        same length as the existing non-constant columns; the first such
        column sets the row count. Passing None removes the column.

        Raises:
            LengthMismatch: If len(data) differs from the row count
        """
        cols = {k: v for k, v in self._cols.items() if k != name}
        if data is None:
            length = _data_len(cols)
            return Table._make(cols, 0 if length is None else length)

        col = as_column(data)
        if _data_len(cols) is None:
            length = len(col)
        elif len(col) != self._len:
            raise LengthMismatch(name, len(col), self._len)
        else:
            length = self._len
        cols[name] = col
        return Table._make(cols, length)

    def add_const(self, name: str, value: Any) -> Table:
        """
        Return a new Table with a constant column name holding value.

        Constant columns take on the row count of the table and never
        determine it.
        """
        cols = {k: v for k, v in self._cols.items() if k != name}
        cols[name] = _Const(value)
        length = _data_len(cols)
        return Table._make(cols, 0 if length is None else length)

    # -------------------------------------
    # Access
    # -------------------------------------

    def columns(self) -> list[str]:
        """Return the column names in order."""
        return list(self._cols)

    def has(self, name: str) -> bool:
        return name in self._cols

    def column(self, name: str) -> np.ndarray | None:
        """Return the data of column name, or None if there is no such column."""
        col = self._cols.get(name)
        if isinstance(col, _Const):
            return cycle(as_column([col.value]), self._len)
        return col

    def must_column(self, name: str) -> np.ndarray:
        """
        Like column, but raises if there is no such column.

        Raises:
            UnknownColumn: If the table has no column called name
        """
        col = self.column(name)
        if col is None:
            raise UnknownColumn(name)
        return col

    def const(self, name: str) -> tuple[Any, bool]:
        """Return (value, True) if name is a constant column, else (None, False)."""
        col = self._cols.get(name)
        if isinstance(col, _Const):
            return col.value, True
        return None, False

    def dtype(self, name: str) -> np.dtype:
        """Return the element dtype of column name."""
        col = self._cols.get(name)
        if col is None:
            raise UnknownColumn(name)
        if isinstance(col, _Const):
            return as_column([col.value]).dtype
        return col.dtype

    def equals(self, other: Table) -> bool:
        """Report whether other has the same columns, in order, with equal values."""
        if self is other:
            return True
        if self.columns() != other.columns() or self._len != other._len:
            return False
        for name in self._cols:
            a, b = self.column(name), other.column(name)
            if a.dtype.kind != b.dtype.kind:
                return False
            equal_nan = a.dtype.kind in "fc"
            if not np.array_equal(a, b, equal_nan=equal_nan):
                return False
        return True

    def _gather(self, rows: Any) -> Table:
        """Project every column through rows; constant columns stay constant."""
        rows = np.asarray(rows, dtype=np.intp)
        cols: dict[str, Any] = {}
        for name, col in self._cols.items():
            cols[name] = col if isinstance(col, _Const) else multi_index(col, rows)
        return Table._make(cols, len(rows) if _data_len(cols) is not None else 0)

    # -------------------------------------
    # Grouping protocol
    # -------------------------------------

    def groups(self) -> list[GroupID]:
        """Return [] for the empty table, else [ROOT]."""
        from .grouping import ROOT
        return [] if self.is_empty() else [ROOT]

    tables = groups

    def table(self, gid: GroupID) -> Table | None:
        """Return self if gid is ROOT and this table is non-empty, else None."""
        from .grouping import ROOT
        if gid is ROOT and not self.is_empty():
            return self
        return None

    def add_table(self, gid: GroupID, t: Table) -> Grouping:
        """
        Return a Grouping with this table at ROOT and t at gid.

        If gid is ROOT, t replaces this table.
        """
        from .grouping import as_grouping
        return as_grouping(self).add_table(gid, t)

    # -------------------------------------
    # Dict interop
    # -------------------------------------

    @classmethod
    def from_dict(cls, table: dict[str, Any]) -> Table:
        """
        Build a Table from a plain dict table.

        Dict tables have 'columns' (names) and 'rows', plus an optional
        'orientation': "row" (default, rows is a list of row lists),
        "column" or "arrow" (rows is a list of column sequences).

        Raises:
            ValueError: If a required key is missing or the orientation is unknown
        """
        for key in ("columns", "rows"):
            if key not in table:
                raise ValueError(f"Table missing required key: '{key}'")
        orientation = table.get("orientation", "row")
        names = table["columns"]
        if orientation == "row":
            data = [[row[i] for row in table["rows"]] for i in range(len(names))]
        elif orientation in ("column", "arrow"):
            data = table["rows"]
            if len(data) != len(names):
                raise ValueError(
                    f"Number of data columns ({len(data)}) does not match "
                    f"column names ({len(names)})"
                )
        else:
            raise ValueError(f"Unsupported orientation: {orientation}")

        b = Builder()
        for name, col in zip(names, data):
            b.add(name, col)
        return b.done()

    def to_dict(self, orientation: Literal["row", "column"] = "column") -> dict[str, Any]:
        """Convert to a plain dict table with Python values."""
        names = self.columns()
        cols = [self.column(name).tolist() for name in names]
        if orientation == "column":
            return {"orientation": "column", "columns": names, "rows": cols}
        if orientation == "row":
            rows = [[c[i] for c in cols] for i in range(self._len)]
            return {"orientation": "row", "columns": names, "rows": rows}
        raise ValueError(f"Unsupported orientation: {orientation}")


# -------------------------------------
# Builder
# -------------------------------------

class Builder:
    """
    Accumulates columns for a Table and checks lengths once in done().

    Adding a name that is already present replaces it and moves it to the
    end, matching Table.add.
    """

    def __init__(self):
        self._cols: dict[str, np.ndarray | _Const] = {}

    def add(self, name: str, data: Any) -> Builder:
        self._cols.pop(name, None)
        if data is not None:
            self._cols[name] = as_column(data)
        return self

    def add_const(self, name: str, value: Any) -> Builder:
        self._cols.pop(name, None)
        self._cols[name] = _Const(value)
        return self

    def has(self, name: str) -> bool:
        return name in self._cols

    def done(self) -> Table:
        """
        Return the accumulated Table.

        Raises:
            LengthMismatch: If the non-constant columns differ in length
        """
        length = None
        for name, col in self._cols.items():
            if isinstance(col, _Const):
                continue
            if length is None:
                length = len(col)
            elif len(col) != length:
                raise LengthMismatch(name, len(col), length)
        return Table._make(dict(self._cols), 0 if length is None else length)


# -------------------------------------
# Output
# -------------------------------------

def _format_value(v: Any) -> str:
    """Format a value for table output.

    Floats use the float_format option; other values are converted as-is.
    """
    if isinstance(v, float):
        if v == 0:
            return "0"
        return format(v, state.get_option("float_format"))
    return str(v)


def format_table(table: Table) -> str:
    """Format a Table as a tab-separated string with header.

    Raises:
        ValueError: If table has more than max_format_rows rows
    """
    limit = state.get_option("max_format_rows")
    if len(table) > limit:
        raise ValueError(f"Table has {len(table):,} rows, exceeds limit of {limit:,}")

    names = table.columns()
    cols = [table.column(name).tolist() for name in names]
    lines = ["\t".join(str(c) for c in names)]
    for i in range(len(table)):
        lines.append("\t".join(_format_value(c[i]) for c in cols))
    return "\n".join(lines)


def print_table(table: Table) -> None:
    """Print a Table with header and rows to stdout.

    Raises:
        ValueError: If table has more than max_format_rows rows
    """
    print(format_table(table))
