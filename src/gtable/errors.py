# -------------------------------------
# gtable errors
# -------------------------------------
"""
Error taxonomy for table and grouping operations.

Every error is a programmer-contract violation raised at the call that
violates the contract. All of them derive from TableError and from the
closest builtin exception, so callers can catch either.
"""


class TableError(Exception):
    """Base class for all gtable errors."""


# -------------------------------------
# Table structure
# -------------------------------------

class LengthMismatch(TableError, ValueError):
    """Column length differs from the table's row count."""

    def __init__(self, name: str, got: int, want: int):
        self.name = name
        self.got = got
        self.want = want
        super().__init__(
            f"cannot add column {name!r} with {got} elements to table with {want} rows"
        )


class UnknownColumn(TableError, LookupError):
    """Lookup of a column name that does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown column: {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class ColumnSetMismatch(TableError, ValueError):
    """Table column set does not match the grouping's column set."""

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(message)


class MissingColumn(ColumnSetMismatch):
    def __init__(self, name: str):
        super().__init__(name, f"table missing column {name!r}")


class ExtraColumn(ColumnSetMismatch):
    def __init__(self, name: str):
        super().__init__(name, f"table has extra column {name!r}")


class ColumnTypeMismatch(TableError, TypeError):
    """Column element kind differs between groups of a grouping."""

    def __init__(self, name: str, have, got):
        self.name = name
        self.have = have
        self.got = got
        super().__init__(f"{have} and {got} for column {name!r}")


# -------------------------------------
# Generic operations
# -------------------------------------

class NotASequence(TableError, TypeError):
    """Value cannot be used as a one-dimensional column."""


class NotOrderable(TableError, TypeError):
    """Column element type has no ordering."""


class NotConvertible(TableError, TypeError):
    """Column element type cannot be converted to the requested type."""


class NotComparable(TableError, TypeError):
    """Column element type cannot be compared for equality."""


class IndexOutOfRange(TableError, IndexError):
    """Gather index outside the column bounds."""


class EmptySequence(TableError, ValueError):
    """Operation needs at least one element."""


# -------------------------------------
# Pipelines
# -------------------------------------

class PipelineError(TableError, ValueError):
    """Malformed pipeline description."""
