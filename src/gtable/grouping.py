# -------------------------------------
# Grouping - tables partitioned by GroupID
# -------------------------------------
"""
Group identities and groupings of tables.

A GroupID identifies a group. GroupIDs form a tree rooted at ROOT; each
node has a parent and a diagnostic label. Equality is identity: extend()
always returns a new GroupID that is not equal to any existing one, even
if the label repeats.

A Grouping is an ordered set of (GroupID -> Table) bindings in which
every Table has the same set of columns. The column order is that of the
first table adopted. A Grouping ignores the GroupID hierarchy and simply
operates on a flat map of distinct GroupIDs.

Visually, a Grouping can be thought of as follows:

       Col A  Col B  Col C
    ------- group a ------
    1   5.4    "x"     90
    2   -.2    "y"     30
    ------- group b ------
    1   9.3    "a"     10

Like a Table, a Grouping's structure is immutable: add_table returns a
new Grouping. GroupingBuilder assembles many groups without the
per-call copy.
"""
from __future__ import annotations
from typing import Any, Iterator

import numpy as np

from . import state
from .errors import ColumnTypeMismatch, ExtraColumn, MissingColumn
from .table import Table, format_table


# -------------------------------------
# GroupID
# -------------------------------------

class GroupID:
    """A node in the group identity tree. Compared by identity."""

    __slots__ = ("_parent", "_label", "_depth")

    def __init__(self, parent: GroupID | None = None, label: str = ""):
        self._parent = parent
        self._label = label
        self._depth = 0 if parent is None else parent._depth + 1

    @staticmethod
    def root() -> GroupID:
        """Return the root of the GroupID tree."""
        return ROOT

    def extend(self, label: Any) -> GroupID:
        """
        Return a new child of this GroupID.

        The label is purely diagnostic; nothing enforces its uniqueness
        among siblings.
        """
        return GroupID(self, str(label))

    def parent(self) -> GroupID:
        """Return the parent GroupID. The parent of the root is the root."""
        return self if self._parent is None else self._parent

    @property
    def label(self) -> str:
        return self._label

    @property
    def depth(self) -> int:
        return self._depth

    def is_root(self) -> bool:
        return self._parent is None

    def path_string(self) -> str:
        """
        Return the labels on the path to this GroupID joined by "/".

        The root is "/". This is diagnostic only and may not uniquely
        identify the GroupID.
        """
        if self._parent is None:
            return "/"
        labels = []
        p = self
        while p._parent is not None:
            labels.append(p._label)
            p = p._parent
        return "/" + "/".join(reversed(labels))

    def __str__(self) -> str:
        return self.path_string()

    def __repr__(self) -> str:
        return f"GroupID({self.path_string()!r})"


ROOT = GroupID()


# -------------------------------------
# Column set checks
# -------------------------------------

def _table_dtypes(t: Table) -> dict[str, np.dtype] | None:
    if len(t) == 0:
        return None
    return {name: t.dtype(name) for name in t.columns()}


def _check_table(columns: list[str], dtypes: dict[str, np.dtype] | None, t: Table) -> None:
    """
    Check that t has exactly the given columns.

    Raises:
        MissingColumn: If t lacks one of columns
        ExtraColumn: If t has a column not in columns
        ColumnTypeMismatch: If check_dtypes is on and an element kind differs
    """
    for name in columns:
        if not t.has(name):
            raise MissingColumn(name)
    if len(t.columns()) != len(columns):
        have = set(columns)
        for name in t.columns():
            if name not in have:
                raise ExtraColumn(name)

    # Zero-row columns carry no values, so their dtype is not checked.
    if dtypes is None or len(t) == 0 or not state.get_option("check_dtypes"):
        return
    for name in columns:
        got = t.dtype(name)
        if got.kind != dtypes[name].kind:
            raise ColumnTypeMismatch(name, dtypes[name], got)


def _bind(
    tables: dict[GroupID, Table],
    columns: list[str] | None,
    dtypes: dict[str, np.dtype] | None,
    gid: GroupID,
    t: Table,
) -> tuple[list[str] | None, dict[str, np.dtype] | None]:
    """
    Bind t to gid in tables (in place) and return the new (columns, dtypes).

    tables is left untouched if t is rejected.
    """
    if t is None or t.is_empty():
        return columns, dtypes
    if not tables or (len(tables) == 1 and gid in tables):
        tables.pop(gid, None)
        tables[gid] = t
        return t.columns(), _table_dtypes(t)
    _check_table(columns, dtypes, t)
    tables.pop(gid, None)
    tables[gid] = t
    if dtypes is None:
        dtypes = _table_dtypes(t)
    return columns, dtypes


# -------------------------------------
# Grouping
# -------------------------------------

class Grouping:
    """
    An ordered set of tables with identical column sets, keyed by GroupID.

    The zero-argument constructor returns the grouping with no groups.
    """

    __slots__ = ("_tables", "_columns", "_dtypes")

    def __init__(self):
        self._tables: dict[GroupID, Table] = {}
        self._columns: list[str] | None = None
        self._dtypes: dict[str, np.dtype] | None = None

    @classmethod
    def _make(cls, tables, columns, dtypes) -> Grouping:
        g = cls.__new__(cls)
        g._tables = tables
        g._columns = columns
        g._dtypes = dtypes
        return g

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self) -> Iterator[GroupID]:
        return iter(list(self._tables))

    def __repr__(self) -> str:
        groups = ", ".join(str(gid) for gid in self._tables)
        return f"Grouping(columns={self.columns()!r}, groups=[{groups}])"

    def columns(self) -> list[str]:
        """Return the column names shared by every table ([] if there are none)."""
        return list(self._columns or [])

    def groups(self) -> list[GroupID]:
        """Return the GroupIDs in order of last insertion."""
        return list(self._tables)

    tables = groups

    def table(self, gid: GroupID) -> Table | None:
        """Return the Table bound to gid, or None."""
        return self._tables.get(gid)

    def items(self) -> list[tuple[GroupID, Table]]:
        return list(self._tables.items())

    def add_table(self, gid: GroupID, t: Table) -> Grouping:
        """
        Return a new Grouping with Table t bound to gid.

        Adding the canonical empty table is a no-op. If gid is already
        bound, the old binding is removed and gid moves to the end. Unless
        t replaces the only group, t must have exactly the grouping's
        column set.

        While the check_dtypes option is on (the default), each column
        must also keep the numpy dtype kind of the existing groups, so an
        int column and a float column do not mix. Zero-row tables are not
        checked. Turn the option off to accept any element types.

        Raises:
            MissingColumn: If t lacks one of the grouping's columns
            ExtraColumn: If t has a column the grouping lacks
            ColumnTypeMismatch: If a column's element kind differs
        """
        if t is None or t.is_empty():
            return self
        tables = dict(self._tables)
        columns, dtypes = _bind(tables, self._columns, self._dtypes, gid, t)
        return Grouping._make(tables, columns, dtypes)

    def equals(self, other: Grouping | Table) -> bool:
        """Report whether other has the same GroupIDs, in order, with equal tables."""
        other = as_grouping(other)
        if self.groups() != other.groups():
            return False
        return all(self._tables[gid].equals(other.table(gid)) for gid in self._tables)


class GroupingBuilder:
    """Accumulates (GroupID, Table) bindings; same contract as add_table."""

    def __init__(self):
        self._tables: dict[GroupID, Table] = {}
        self._columns: list[str] | None = None
        self._dtypes: dict[str, np.dtype] | None = None

    def add(self, gid: GroupID, t: Table) -> GroupingBuilder:
        self._columns, self._dtypes = _bind(self._tables, self._columns, self._dtypes, gid, t)
        return self

    def done(self) -> Grouping:
        return Grouping._make(dict(self._tables), self._columns, self._dtypes)


def as_grouping(g: Grouping | Table) -> Grouping:
    """Return g as a Grouping; a Table becomes a one-group (or empty) Grouping."""
    if isinstance(g, Grouping):
        return g
    if isinstance(g, Table):
        return Grouping().add_table(ROOT, g)
    raise TypeError(f"{type(g).__name__} is not a Table or Grouping")


# -------------------------------------
# Output
# -------------------------------------

def format_grouping(g: Grouping | Table) -> str:
    """Format every group as a '# <path>' line followed by its table."""
    g = as_grouping(g)
    parts = []
    for gid in g.groups():
        parts.append(f"# {gid}\n{format_table(g.table(gid))}")
    return "\n".join(parts)


def print_grouping(g: Grouping | Table) -> None:
    """Print every group of g to stdout."""
    print(format_grouping(g))
