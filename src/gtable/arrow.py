# -------------------------------------
# PyArrow interop
# -------------------------------------
"""
Conversion between gtable values and PyArrow tables.

PyArrow is imported lazily, so the rest of gtable works without it.
String columns come back from Arrow as numpy unicode columns; other
columns go through Arrow's own numpy conversion.
"""
from __future__ import annotations
from pathlib import Path
from typing import Any, TYPE_CHECKING

import numpy as np

from .grouping import Grouping, as_grouping
from .ops import flatten
from .table import Builder, Table

# Use guarded import so module works without pyarrow installed
pa = None

# For type checking only - doesn't require runtime import
if TYPE_CHECKING:
    import pyarrow as pa


def _import_pyarrow():
    """Import pyarrow lazily, raising a clear error if not installed."""
    global pa
    if pa is None:
        try:
            import pyarrow as _pa
            pa = _pa
        except ImportError:
            raise ImportError(
                "PyArrow is required for Arrow interop. "
                "Install with: pip install pyarrow"
            )
    return pa


def _column_to_arrow(col: np.ndarray) -> Any:
    _pa = _import_pyarrow()
    if col.dtype.kind in "OUS":
        return _pa.array(col.tolist())
    return _pa.array(col)


def _column_from_arrow(col: Any) -> Any:
    _pa = _import_pyarrow()
    if _pa.types.is_string(col.type) or _pa.types.is_large_string(col.type):
        if col.null_count == 0:
            return np.asarray(col.to_pylist(), dtype=str)
        return col.to_pylist()
    return col.to_numpy()


def table_to_arrow(table: Table) -> pa.Table:
    """
    Convert a Table to a pyarrow.Table with the same column order.

    Constant columns are materialized.
    """
    _pa = _import_pyarrow()
    return _pa.table({name: _column_to_arrow(table.column(name)) for name in table.columns()})


def table_from_arrow(arrow_table: pa.Table) -> Table:
    """Convert a pyarrow.Table to a Table with the same column order."""
    b = Builder()
    for name in arrow_table.column_names:
        b.add(name, _column_from_arrow(arrow_table.column(name)))
    return b.done()


def grouping_to_arrow(g: Grouping | Table, group_col: str = "group") -> pa.Table:
    """
    Flatten g into a pyarrow.Table with a leading group path column.

    Args:
        g: Grouping or Table
        group_col: Name of the column holding each row's GroupID path

    Returns:
        pyarrow.Table with group_col followed by g's columns
    """
    _pa = _import_pyarrow()
    g = as_grouping(g)
    labels: list[str] = []
    for gid in g.groups():
        labels.extend([str(gid)] * len(g.table(gid)))
    arrow_table = table_to_arrow(flatten(g))
    if arrow_table.num_columns == 0:
        return _pa.table({group_col: _pa.array(labels, type=_pa.string())})
    return arrow_table.add_column(0, group_col, _pa.array(labels, type=_pa.string()))


def read_csv(path: str | Path) -> Table:
    """Read a CSV file with PyArrow's CSV reader."""
    _import_pyarrow()
    import pyarrow.csv as pv
    return table_from_arrow(pv.read_csv(str(path)))


def read_parquet(path: str | Path) -> Table:
    """Read a Parquet file with PyArrow."""
    _import_pyarrow()
    import pyarrow.parquet as pq
    return table_from_arrow(pq.read_table(str(path)))


def write_parquet(table: Table, path: str | Path) -> None:
    """Write a Table to a Parquet file."""
    _import_pyarrow()
    import pyarrow.parquet as pq
    pq.write_table(table_to_arrow(table), str(path))
