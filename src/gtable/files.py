# -------------------------------------
# file reading utilities
# -------------------------------------
"""
Read Tables from files.

Supported formats, chosen by suffix:
- .csv: PyArrow CSV reader
- .parquet, .pq: PyArrow Parquet reader
- .yml, .yaml: YAML table with 'Columns' and 'Rows' keys, optionally
  nested under a dot-separated key path

Tables are immutable, so file contents are cached across calls.
"""
from pathlib import Path
from typing import Any

import yaml

from .table import Table

# Global cache for parsed tables
_table_cache: dict[tuple[str, str | None], Table] = {}


def clear_cache() -> None:
    """Clear the table cache."""
    _table_cache.clear()


def _yaml_table(data: Any, key_path: str | None, fn: str) -> Table:
    current = data
    if key_path:
        for key in key_path.split("."):
            if not isinstance(current, dict) or key not in current:
                raise ValueError(f"Key path '{key_path}' not found in '{fn}'")
            current = current[key]

    where = f"'{key_path}'" if key_path else f"top level of '{fn}'"
    if not isinstance(current, dict):
        raise ValueError(f"Table at {where} is not a dict")

    # Accept both the capitalized and the lower-case spelling
    columns = current.get("Columns", current.get("columns"))
    rows = current.get("Rows", current.get("rows"))
    if columns is None:
        raise ValueError(f"Table at {where} is missing 'Columns' key")
    if rows is None:
        raise ValueError(f"Table at {where} is missing 'Rows' key")
    if not isinstance(columns, list):
        raise ValueError(f"'Columns' at {where} is not a list")
    if not isinstance(rows, list):
        raise ValueError(f"'Rows' at {where} is not a list")

    return Table.from_dict({"orientation": "row", "columns": columns, "rows": rows})


def read_table(path: str | Path, key_path: str | None = None) -> Table:
    """
    Read a Table from path, caching the result.

    Args:
        path: File to read
        key_path: For YAML files, dot-separated path to the embedded table

    Returns:
        The parsed Table

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the suffix is unsupported or the YAML table is malformed
    """
    path = Path(path)
    cache_key = (str(path.resolve()), key_path)
    if cache_key in _table_cache:
        return _table_cache[cache_key]

    suffix = path.suffix.lower()
    if suffix == ".csv":
        from .arrow import read_csv
        table = read_csv(path)
    elif suffix in (".parquet", ".pq"):
        from .arrow import read_parquet
        table = read_parquet(path)
    elif suffix in (".yml", ".yaml"):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        table = _yaml_table(data, key_path, str(path))
    else:
        raise ValueError(f"Unsupported table file type: '{path.suffix}'")

    _table_cache[cache_key] = table
    return table
