# -------------------------------------
# Grouping operations
# -------------------------------------
"""
Operations over groupings.

Every operation takes a Grouping (or a Table, which is a trivial
grouping) and returns a new value; inputs are never modified. Most
operations work on each group independently; group_by sub-divides
groups and ungroup/flatten/concat combine them.

This module provides:
- Partitioning: group_by, ungroup, flatten
- Combining: concat
- Per-group row transforms: sort_by, filter_eq
- Per-group mapping: map_tables, map_cols
"""
from __future__ import annotations
from typing import Any, Callable, Iterable
import logging

import numpy as np

from .generic import equal_rows, partition_rows, sorter
from .grouping import (
    Grouping,
    GroupingBuilder,
    GroupID,
    _check_table,
    as_grouping,
)
from .table import Builder, Table

logger = logging.getLogger(__name__)


def _same_const(consts: list[tuple[Any, bool]]) -> bool:
    first = consts[0][0]
    for value, ok in consts:
        if not ok:
            return False
        try:
            if value is not first and not bool(value == first):
                return False
        except (TypeError, ValueError):
            return False
    return True


def _concat_tables(tables: list[Table], columns: list[str]) -> Table:
    """Concatenate the rows of tables (which share columns) in order."""
    if len(tables) == 1:
        return tables[0]
    b = Builder()
    for name in columns:
        consts = [t.const(name) for t in tables]
        if _same_const(consts):
            b.add_const(name, consts[0][0])
            continue
        parts = [t.column(name) for t in tables]
        # Zero-row parts would only promote the dtype.
        nonempty = [p for p in parts if len(p)]
        b.add(name, np.concatenate(nonempty or parts[:1]))
    return b.done()


# -------------------------------------
# Partitioning
# -------------------------------------

def _group_by_one(g: Grouping, col: str) -> Grouping:
    out = GroupingBuilder()
    for gid in g.groups():
        t = g.table(gid)
        # Sub-group ordinals follow the first row holding each value.
        for i, rows in enumerate(partition_rows(t.must_column(col))):
            out.add(gid.extend(i), t._gather(rows))
    result = out.done()
    logger.debug("group_by %r: %d groups -> %d groups", col, len(g), len(result))
    return result


def group_by(g: Grouping | Table, *cols: str) -> Grouping | Table:
    """
    Sub-divide every group so that rows in each group share values of cols.

    Columns are peeled off one at a time: the first column splits each
    group into children labelled by first-seen ordinal ("0", "1", ...),
    then the remaining columns split each child further, adding one
    GroupID level per column. Relative row order is kept within every
    child. Keys are compared by equality; they need not be orderable.

    Args:
        g: Grouping or Table
        *cols: Column names to group by

    Returns:
        g itself if cols is empty, else a new Grouping

    Raises:
        UnknownColumn: If a group lacks one of cols
        NotComparable: If key values cannot be compared for equality
    """
    if not cols:
        return g
    out = as_grouping(g)
    for col in cols:
        out = _group_by_one(out, col)
    return out


def ungroup(g: Grouping | Table) -> Grouping:
    """
    Undo one level of group_by.

    Groups sharing an immediate parent GroupID are concatenated, in
    grouping order, into a single table bound to that parent. Parents are
    ordered by their first child.
    """
    g = as_grouping(g)
    siblings: dict[GroupID, list[Table]] = {}
    for gid in g.groups():
        siblings.setdefault(gid.parent(), []).append(g.table(gid))

    out = GroupingBuilder()
    for parent, tables in siblings.items():
        out.add(parent, _concat_tables(tables, g.columns()))
    result = out.done()
    logger.debug("ungroup: %d groups -> %d groups", len(g), len(result))
    return result


def flatten(g: Grouping | Table) -> Table:
    """
    Concatenate every group of g, in group order, into a single Table.

    Zero groups give the empty table; a single group gives that group's
    Table itself.
    """
    if isinstance(g, Table):
        return g
    groups = g.groups()
    if not groups:
        return Table()
    if len(groups) == 1:
        return g.table(groups[0])
    return _concat_tables([g.table(gid) for gid in groups], g.columns())


def concat(*gs: Grouping | Table) -> Grouping:
    """
    Concatenate the rows of matching groups across gs.

    The result's GroupIDs are the union of the GroupIDs in gs, in
    first-seen order. Tables bound to the same GroupID are concatenated
    in argument order. Column order comes from the first non-empty input.

    Raises:
        MissingColumn: If an input lacks a column of the first input
        ExtraColumn: If an input has a column the first input lacks
    """
    groupings = [x for x in (as_grouping(x) for x in gs) if len(x)]
    if not groupings:
        return Grouping()
    columns = groupings[0].columns()

    parts: dict[GroupID, list[Table]] = {}
    for x in groupings:
        for gid in x.groups():
            t = x.table(gid)
            _check_table(columns, None, t)
            parts.setdefault(gid, []).append(t)

    out = GroupingBuilder()
    for gid, tables in parts.items():
        out.add(gid, _concat_tables(tables, columns))
    return out.done()


# -------------------------------------
# Per-group row transforms
# -------------------------------------

def sort_by(
    g: Grouping | Table,
    col: str,
    key: Callable[[Any], Any] | None = None,
) -> Grouping:
    """
    Stable-sort every group by column col.

    Primitive columns use their natural order. Object columns use key if
    given, else an order registered with register_order, else the
    elements' own < operator. Groups that are already sorted keep their
    Table unchanged.

    Raises:
        UnknownColumn: If a group lacks col
        NotOrderable: If col's values have no ordering
    """
    g = as_grouping(g)
    out = GroupingBuilder()
    for gid in g.groups():
        t = g.table(gid)
        s = sorter(t.must_column(col), key)
        if s.is_sorted():
            # Avoid shuffling everything by the identity permutation.
            out.add(gid, t)
            continue
        out.add(gid, t._gather(s.argsort()))
    return out.done()


def filter_eq(g: Grouping | Table, col: str, value: Any) -> Grouping:
    """
    Keep only rows where column col equals value.

    Groups with no matching rows become zero-row tables; they are not
    removed.
    """
    def keep(_: GroupID, t: Table) -> Table:
        return t._gather(equal_rows(t.must_column(col), value))

    return map_tables(g, keep)


# -------------------------------------
# Mapping
# -------------------------------------

def map_tables(
    g: Grouping | Table,
    f: Callable[[GroupID, Table], Table],
) -> Grouping:
    """
    Apply f to every (GroupID, Table) of g.

    Returns a Grouping with the same GroupIDs, in the same order, bound
    to the Tables f returns. The returned tables must share a column set.
    """
    g = as_grouping(g)
    out = GroupingBuilder()
    for gid in g.groups():
        out.add(gid, f(gid, g.table(gid)))
    return out.done()


def map_cols(
    g: Grouping | Table,
    f: Callable[..., Any],
    cols: str | Iterable[str],
    out: str | Iterable[str] | None = None,
) -> Grouping:
    """
    Compute new columns from existing ones in every group.

    f is called with the columns named by cols and returns one column, or
    a tuple with one column per output name. Results are bound to out
    (default: cols), replacing same-named columns.

    Raises:
        ValueError: If f returns a different number of columns than out names
        LengthMismatch: If a result's length differs from the group's rows
    """
    cols = [cols] if isinstance(cols, str) else list(cols)
    if out is None:
        names = cols
    else:
        names = [out] if isinstance(out, str) else list(out)

    def apply(_: GroupID, t: Table) -> Table:
        result = f(*[t.must_column(c) for c in cols])
        if not isinstance(result, tuple):
            result = (result,)
        if len(result) != len(names):
            raise ValueError(f"function returned {len(result)} columns, expected {len(names)}")
        for name, data in zip(names, result):
            t = t.add(name, data)
        return t

    return map_tables(g, apply)
