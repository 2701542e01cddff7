# -------------------------------------
# Generic column operations
# -------------------------------------
"""
Type-dispatching primitives over one-dimensional columns.

Columns are read-only numpy arrays. Each operation dispatches on the
dtype kind: a numpy fast path handles the primitive kinds (bool, signed
and unsigned integers, floats, strings, datetimes), and a Python-object
fallback handles dtype=object columns holding arbitrary values.

This module provides:
- Column normalization: as_column
- Gather and broadcast: multi_index, cycle
- Conversion: convert_slice
- Ordering: sorter, Sorter, register_order, stable_argsort
- Equality: factorize, partition_rows, equal_rows
"""
from __future__ import annotations
from typing import Any, Callable, Iterable
import warnings

import numpy as np

from .errors import (
    EmptySequence,
    IndexOutOfRange,
    NotASequence,
    NotComparable,
    NotConvertible,
    NotOrderable,
)

# Kinds with a numpy ordering we accept for sorting
_ORDERED_KINDS = "biufUSMm"

# Kinds np.unique can partition without Python-level hashing
_UNIQUE_KINDS = "biuUSMm"

_NUMERIC_KINDS = "biuf"


# -------------------------------------
# Column normalization
# -------------------------------------

def _freeze(arr: np.ndarray) -> np.ndarray:
    """Return a read-only view of arr (arr itself if already read-only)."""
    if arr.flags.writeable:
        arr = arr.view()
        arr.flags.writeable = False
    return arr


def _object_column(values: list) -> np.ndarray:
    # Element-wise assignment keeps tuples and lists as single values.
    arr = np.empty(len(values), dtype=object)
    for i, v in enumerate(values):
        arr[i] = v
    return arr


def as_column(data: Any) -> np.ndarray:
    """
    Normalize data into a one-dimensional, read-only column.

    numpy arrays are wrapped without copying. Anything exposing __array__
    (e.g. PyArrow arrays) goes through np.asarray. Other iterables are
    materialized; mixed element types that numpy would coerce to strings,
    and elements numpy would turn into extra dimensions, produce an
    object column instead.

    Args:
        data: ndarray, list, tuple or other iterable of values

    Returns:
        Read-only 1-D ndarray

    Raises:
        NotASequence: If data is a scalar, a string, or multi-dimensional
    """
    if isinstance(data, np.ndarray):
        if data.ndim != 1:
            raise NotASequence(f"{data.ndim}-dimensional array is not a column")
        return _freeze(data)

    if isinstance(data, (str, bytes)) or not isinstance(data, Iterable):
        raise NotASequence(f"{type(data).__name__} is not a sequence")

    if hasattr(data, "__array__"):
        arr = np.asarray(data)
        if arr.ndim != 1:
            raise NotASequence(f"{arr.ndim}-dimensional array is not a column")
        return _freeze(arr)

    values = list(data)
    try:
        arr = np.asarray(values)
    except (ValueError, TypeError):
        # Ragged nested sequences
        return _freeze(_object_column(values))

    if arr.ndim != 1:
        return _freeze(_object_column(values))
    if arr.dtype.kind == "U" and not all(isinstance(v, str) for v in values):
        return _freeze(_object_column(values))
    if arr.dtype.kind == "S" and not all(isinstance(v, bytes) for v in values):
        return _freeze(_object_column(values))
    return _freeze(arr)


# -------------------------------------
# Gather and broadcast
# -------------------------------------

def multi_index(col: Any, indexes: Any) -> np.ndarray:
    """
    Gather col through a sequence of row indexes.

    Returns a new column w of the same dtype with w[i] = col[indexes[i]].
    Indexes may repeat and need not be ordered.

    Raises:
        IndexOutOfRange: If any index is negative or >= len(col)
    """
    col = as_column(col)
    idx = np.asarray(indexes, dtype=np.intp)
    if idx.ndim != 1:
        raise NotASequence(f"{idx.ndim}-dimensional index is not a sequence")
    n = len(col)
    if idx.size:
        bad = (idx < 0) | (idx >= n)
        if bad.any():
            raise IndexOutOfRange(
                f"index {int(idx[bad][0])} out of range for column of length {n}"
            )
    return _freeze(col[idx])


def cycle(col: Any, length: int) -> np.ndarray:
    """
    Build a column of exactly length elements from col.

    If len(col) >= length this is a zero-copy slice of col. Otherwise col
    is repeated from the start until length elements are produced.

    Raises:
        EmptySequence: If col is empty and length != 0
    """
    col = as_column(col)
    if length < 0:
        raise ValueError(f"negative length: {length}")
    if len(col) >= length:
        return col[:length]
    if len(col) == 0:
        raise EmptySequence(f"cannot cycle empty column to length {length}")
    return _freeze(np.resize(col, length))


# -------------------------------------
# Conversion
# -------------------------------------

def _can_convert(src: np.dtype, dst: np.dtype) -> bool:
    if dst.kind == "O":
        return True
    if src.kind in _NUMERIC_KINDS and dst.kind in _NUMERIC_KINDS + "c":
        return True
    return src.kind == dst.kind


def convert_slice(dtype: Any, col: Any) -> np.ndarray:
    """
    Convert each element of col to dtype.

    If col already has dtype, col itself is returned (zero-copy alias).
    Numeric and bool columns convert to any numeric dtype, columns convert
    within their own kind (e.g. between string widths), and anything
    converts to object. Object columns convert element-wise as long as
    every element converts.

    Args:
        dtype: Destination dtype (anything np.dtype accepts)
        col: Source column

    Returns:
        Column with the destination dtype

    Raises:
        NotConvertible: If the element type cannot convert to dtype
    """
    col = as_column(col)
    dst = np.dtype(dtype)
    src = col.dtype
    if src == dst:
        return col

    if _can_convert(src, dst):
        return _freeze(col.astype(dst))

    if src.kind == "O":
        if dst.kind in _NUMERIC_KINDS + "c" and any(isinstance(v, (str, bytes)) for v in col):
            raise NotConvertible(f"object column holding strings cannot be converted to {dst}")
        try:
            return _freeze(col.astype(dst))
        except (TypeError, ValueError) as e:
            raise NotConvertible(f"object column cannot be converted to {dst}: {e}") from e

    raise NotConvertible(f"{src} cannot be converted to {dst}")


# -------------------------------------
# Ordering
# -------------------------------------

# Total orders for element types without a natural one, keyed by type
_ORDERS: dict[type, Callable[[Any], Any]] = {}


def register_order(cls: type, key: Callable[[Any], Any]) -> None:
    """
    Register a sort key for elements of type cls (and its subclasses).

    Object columns whose elements are instances of cls are sorted by
    key(element) instead of the elements' own < operator.
    """
    _ORDERS[cls] = key


def unregister_order(cls: type) -> None:
    """Remove the sort key registered for cls, if any."""
    _ORDERS.pop(cls, None)


def _registered_key(values: list) -> Callable[[Any], Any] | None:
    if not values:
        return None
    for cls in type(values[0]).__mro__:
        if cls in _ORDERS:
            return _ORDERS[cls]
    return None


class Sorter:
    """
    Comparator view over a column, usable by a stable sort.

    Primitive dtypes are compared by numpy. Object columns are compared
    through a sort key: the one passed in, else the one registered for
    the element type, else the elements themselves.
    """

    def __init__(self, col: Any, key: Callable[[Any], Any] | None = None):
        col = as_column(col)
        self.col = col
        kind = col.dtype.kind
        if kind == "O":
            values = col.tolist()
            if key is None:
                key = _registered_key(values)
            self._keys = [key(v) for v in values] if key is not None else values
            self._fast = False
        elif kind in _ORDERED_KINDS:
            self._keys = col if key is None else as_column([key(v) for v in col.tolist()])
            self._fast = self._keys.dtype.kind in _ORDERED_KINDS
            if not self._fast:
                self._keys = self._keys.tolist()
        else:
            raise NotOrderable(f"{col.dtype} is not orderable")

    def __len__(self) -> int:
        return len(self.col)

    def less(self, i: int, j: int) -> bool:
        """Report whether element i sorts before element j."""
        try:
            return bool(self._keys[i] < self._keys[j])
        except TypeError as e:
            raise NotOrderable(str(e)) from e

    def is_sorted(self) -> bool:
        """Report whether argsort() would be the identity permutation."""
        keys = self._keys
        if len(keys) < 2:
            return True
        if self._fast:
            if (keys[1:] < keys[:-1]).any():
                return False
            if keys.dtype.kind in "fMm":
                # NaN and NaT sort last
                nan = np.isnan(keys) if keys.dtype.kind == "f" else np.isnat(keys)
                return not (nan[:-1] & ~nan[1:]).any()
            return True
        try:
            return not any(keys[i + 1] < keys[i] for i in range(len(keys) - 1))
        except TypeError as e:
            raise NotOrderable(str(e)) from e

    def argsort(self) -> np.ndarray:
        """Return the stable sort permutation of the column."""
        if self._fast:
            return np.argsort(self._keys, kind="stable")
        keys = self._keys
        try:
            perm = sorted(range(len(keys)), key=keys.__getitem__)
        except TypeError as e:
            raise NotOrderable(str(e)) from e
        return np.asarray(perm, dtype=np.intp)


def sorter(col: Any, key: Callable[[Any], Any] | None = None) -> Sorter:
    """
    Build a Sorter over col.

    Raises:
        NotOrderable: If the column's element type has no ordering
    """
    return Sorter(col, key)


def stable_argsort(col: Any, key: Callable[[Any], Any] | None = None) -> np.ndarray:
    """Return the stable sort permutation of col."""
    return Sorter(col, key).argsort()


# -------------------------------------
# Equality
# -------------------------------------

def factorize(col: Any) -> tuple[np.ndarray, int]:
    """
    Assign each distinct value of col an ordinal in first-seen order.

    Args:
        col: Column to index

    Returns:
        (codes, n) where codes[i] is the ordinal of col[i] and n is the
        number of distinct values

    Raises:
        NotComparable: If an object element is not hashable
    """
    col = as_column(col)
    n = len(col)
    if n == 0:
        return np.empty(0, dtype=np.intp), 0

    if col.dtype.kind in _UNIQUE_KINDS:
        _, first, inverse = np.unique(col, return_index=True, return_inverse=True)
        order = np.argsort(first, kind="stable")
        rank = np.empty(len(order), dtype=np.intp)
        rank[order] = np.arange(len(order), dtype=np.intp)
        return rank[inverse.reshape(-1)], len(order)

    # Floats go through Python equality so that every NaN is distinct.
    index: dict[Any, int] = {}
    codes = np.empty(n, dtype=np.intp)
    try:
        for i, x in enumerate(col.tolist()):
            codes[i] = index.setdefault(x, len(index))
    except TypeError as e:
        raise NotComparable(f"{type(x).__name__} values cannot be compared for equality") from e
    return codes, len(index)


def partition_rows(col: Any) -> list[np.ndarray]:
    """
    Split the row indexes of col by value.

    Returns one ascending index array per distinct value, ordered by the
    first row holding that value.
    """
    codes, n = factorize(col)
    if n == 0:
        return []
    perm = np.argsort(codes, kind="stable")
    bounds = np.cumsum(np.bincount(codes, minlength=n))[:-1]
    return np.split(perm, bounds)


def _is_scalar(value: Any) -> bool:
    try:
        return np.ndim(value) == 0
    except ValueError:
        # Ragged nested sequences
        return False


def equal_rows(col: Any, value: Any) -> np.ndarray:
    """Return the ascending row indexes where col equals value."""
    col = as_column(col)
    # Sequence values would broadcast against col and match by position.
    if col.dtype.kind != "O" and _is_scalar(value):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            try:
                mask = col == value
            except (TypeError, ValueError):
                mask = None
        if isinstance(mask, np.ndarray) and mask.shape == col.shape and mask.dtype == bool:
            return np.flatnonzero(mask)
    return np.fromiter(
        (i for i, x in enumerate(col.tolist()) if _equal(x, value)),
        dtype=np.intp,
    )


def _equal(x: Any, value: Any) -> bool:
    try:
        return bool(x == value)
    except (TypeError, ValueError):
        # Element-wise comparisons (e.g. against an ndarray) are not equality
        return False
