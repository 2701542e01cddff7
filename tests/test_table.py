# -------------------------------------
# Table and Grouping tests
# -------------------------------------
"""
Tests for gtable.table and gtable.grouping.
"""
import numpy as np
import pytest

from gtable import state
from gtable.table import Table, Builder, format_table, print_table
from gtable.grouping import (
    ROOT,
    GroupID,
    Grouping,
    GroupingBuilder,
    as_grouping,
    format_grouping,
)
from gtable.errors import (
    ColumnSetMismatch,
    ColumnTypeMismatch,
    ExtraColumn,
    LengthMismatch,
    MissingColumn,
    UnknownColumn,
)

xgid = ROOT.extend("xgid")
ygid = ROOT.extend("ygid")


def is_empty(g):
    """Report whether g is the empty table or the empty grouping."""
    if isinstance(g, Table) and len(g) != 0:
        return False
    return g.columns() == [] and g.groups() == []


@pytest.fixture(autouse=True)
def _reset_options():
    yield
    state.reset_options()


# -------------------------------------
# Table
# -------------------------------------

class TestEmptyTable:

    def test_empty(self):
        tab = Table()
        assert is_empty(tab)
        assert tab.is_empty()
        assert len(tab) == 0
        assert tab.len() == 0
        assert tab.columns() == []

    def test_new_is_empty(self):
        assert Table.new().is_empty()

    def test_lookup(self):
        tab = Table()
        assert tab.column("x") is None
        with pytest.raises(UnknownColumn, match="unknown column"):
            tab.must_column("x")

    def test_grouping_protocol(self):
        tab = Table()
        assert tab.groups() == []
        assert tab.table(ROOT) is None
        assert tab.table(xgid) is None

    def test_add_does_not_mutate(self):
        tab = Table()
        tab.add("x", [1, 2, 3])
        assert tab.is_empty()

    def test_add_empty_to_empty(self):
        tab1 = Table().add("x", [])
        assert is_empty(Table().add_table(ROOT, Table()))
        assert Table().add_table(ROOT, tab1).equals(as_grouping(tab1))
        assert tab1.add_table(ROOT, Table()).equals(as_grouping(tab1))


class TestTable:

    def test_zero_rows(self):
        tab = Table().add("x", [])
        assert not tab.is_empty()
        assert len(tab) == 0
        assert tab.columns() == ["x"]
        assert tab.groups() == [ROOT]
        assert tab.table(ROOT) is tab

    def test_one_row(self):
        col = [1]
        tab = Table().add("x", col)
        assert len(tab) == 1
        assert tab.column("x").tolist() == col
        assert tab.must_column("x").tolist() == col
        assert tab.column("y") is None
        with pytest.raises(UnknownColumn):
            tab.must_column("y")

    def test_override_only_column(self):
        tab = Table().add("x", [1])
        assert len(tab.add("x", [])) == 0
        assert len(tab.add("x", [1, 2, 3])) == 3

    def test_length_mismatch(self):
        tab = Table().add("x", [1, 2, 3])
        with pytest.raises(LengthMismatch, match="column 'y' with 2 elements to table with 3 rows") as e:
            tab.add("y", [1, 2])
        assert (e.value.name, e.value.got, e.value.want) == ("y", 2, 3)
        # The original table is untouched
        assert tab.columns() == ["x"]
        assert len(tab) == 3

    def test_length_mismatch_is_value_error(self):
        with pytest.raises(ValueError):
            Table().add("x", [1]).add("y", [])

    def test_remove_column(self):
        tab = Table().add("x", [1]).add("y", [2])
        assert tab.add("y", None).columns() == ["x"]
        assert is_empty(Table().add("x", [1]).add("x", None))

    def test_columns_share_data(self):
        tab = Table().add("x", [1, 2]).add("y", [3, 4])
        tab2 = tab.add("z", [5, 6])
        assert tab2.column("x") is tab.column("x")

    def test_columns_are_read_only(self):
        tab = Table().add("x", [1, 2])
        with pytest.raises(ValueError):
            tab.column("x")[0] = 5

    def test_column_order(self):
        cols = ["a", "b", "c", "d"]
        tab = Table()
        for col in cols:
            tab = tab.add(col, [])
        assert tab.columns() == cols

    def test_readd_moves_to_end(self):
        tab = Table().add("a", []).add("b", []).add("a", [])
        assert tab.columns() == ["b", "a"]

    def test_equals(self):
        a = Table().add("x", [1, 2]).add("y", ["a", "b"])
        b = Table().add("x", [1, 2]).add("y", ["a", "b"])
        assert a.equals(b)
        assert not a.equals(b.add("x", [2, 1]))
        assert not a.equals(Table().add("y", ["a", "b"]).add("x", [1, 2]))

    def test_equals_nan(self):
        a = Table().add("x", [1.0, np.nan])
        assert a.equals(Table().add("x", [1.0, np.nan]))


class TestConstColumns:

    def test_const_takes_table_length(self):
        tab = Table().add("x", [1, 2, 3]).add_const("c", "k")
        assert tab.column("c").tolist() == ["k", "k", "k"]
        assert tab.const("c") == ("k", True)
        assert tab.const("x") == (None, False)

    def test_const_does_not_set_length(self):
        tab = Table().add_const("c", 1.5)
        assert len(tab) == 0
        assert not tab.is_empty()
        tab = tab.add("x", [1, 2])
        assert len(tab) == 2
        assert tab.column("c").tolist() == [1.5, 1.5]

    def test_gather_keeps_const(self):
        tab = Table().add("x", [1, 2, 3]).add_const("c", 7)
        sub = tab._gather([2, 0])
        assert sub.const("c") == (7, True)
        assert sub.column("c").tolist() == [7, 7]
        assert sub.column("x").tolist() == [3, 1]


class TestBuilder:

    def test_build(self):
        b = Builder()
        b.add("x", [1, 2]).add("y", ["a", "b"])
        assert b.has("x")
        assert not b.has("z")
        tab = b.done()
        assert tab.columns() == ["x", "y"]
        assert len(tab) == 2

    def test_replace(self):
        tab = Builder().add("x", [1]).add("y", [2]).add("x", [3]).done()
        assert tab.columns() == ["y", "x"]
        assert tab.column("x").tolist() == [3]

    def test_deferred_length_check(self):
        b = Builder().add("x", [1, 2]).add("y", [1])
        with pytest.raises(LengthMismatch):
            b.done()

    def test_const(self):
        tab = Builder().add_const("c", "z").add("x", [1, 2]).done()
        assert tab.column("c").tolist() == ["z", "z"]

    def test_empty(self):
        assert Builder().done().is_empty()


class TestDictInterop:

    def test_from_row_dict(self):
        tab = Table.from_dict({"columns": ["a", "b"], "rows": [[1, "x"], [2, "y"]]})
        assert tab.columns() == ["a", "b"]
        assert tab.column("a").tolist() == [1, 2]
        assert tab.column("b").tolist() == ["x", "y"]

    def test_from_column_dict(self):
        tab = Table.from_dict({"orientation": "column", "columns": ["a"], "rows": [[1, 2, 3]]})
        assert len(tab) == 3

    def test_to_dict(self):
        tab = Table().add("a", [1, 2]).add("b", ["x", "y"])
        assert tab.to_dict("row") == {
            "orientation": "row",
            "columns": ["a", "b"],
            "rows": [[1, "x"], [2, "y"]],
        }
        assert tab.to_dict()["rows"] == [[1, 2], ["x", "y"]]

    def test_missing_key(self):
        with pytest.raises(ValueError, match="missing required key: 'rows'"):
            Table.from_dict({"columns": []})

    def test_bad_orientation(self):
        with pytest.raises(ValueError, match="Unsupported orientation"):
            Table.from_dict({"orientation": "diagonal", "columns": [], "rows": []})


class TestFormat:

    def test_format_table(self):
        tab = Table().add("a", [1, 3]).add("b", [2.0, 0.12345])
        lines = format_table(tab).split("\n")
        assert lines[0] == "a\tb"
        assert lines[1] == "1\t2"
        assert lines[2] == "3\t0.123"

    def test_float_format_option(self):
        state.set_option("float_format", ".2f")
        assert format_table(Table().add("x", [1.5])).split("\n")[1] == "1.50"

    def test_row_limit(self):
        state.set_option("max_format_rows", 2)
        with pytest.raises(ValueError, match="exceeds limit"):
            format_table(Table().add("x", [1, 2, 3]))

    def test_print_table(self, capsys):
        print_table(Table().add("col1", [1]).add("col2", [2]))
        captured = capsys.readouterr()
        assert "col1\tcol2" in captured.out
        assert "1\t2" in captured.out

    def test_unknown_option(self):
        with pytest.raises(KeyError):
            state.set_option("nope", 1)
        with pytest.raises(KeyError):
            state.get_option("nope")

    def test_reset_options(self):
        state.set_option("max_format_rows", 5)
        assert state.get_options()["max_format_rows"] == 5
        state.reset_options()
        assert state.get_option("max_format_rows") == 100_000


# -------------------------------------
# GroupID
# -------------------------------------

class TestGroupID:

    def test_root(self):
        assert GroupID.root() is ROOT
        assert ROOT.parent() is ROOT
        assert ROOT.path_string() == "/"
        assert ROOT.is_root()
        assert ROOT.depth == 0

    def test_extend(self):
        a = ROOT.extend("a")
        b = a.extend(1)
        assert b.parent() is a
        assert a.parent() is ROOT
        assert b.label == "1"
        assert b.depth == 2
        assert b.path_string() == "/a/1"
        assert str(b) == "/a/1"

    def test_identity(self):
        assert ROOT.extend("a") != ROOT.extend("a")
        a = ROOT.extend("a")
        assert a == a
        assert len({a, ROOT.extend("a")}) == 2


# -------------------------------------
# Grouping
# -------------------------------------

class TestAddTable:

    tab0 = Table().add("x", [])
    tab1 = Table().add("x", [1])
    tab_y = Table().add("y", [])
    tab_xy = Table().add("x", []).add("y", [])

    def test_replace_root(self):
        assert self.tab0.add_table(ROOT, self.tab0).equals(as_grouping(self.tab0))
        assert self.tab0.add_table(ROOT, self.tab1).equals(as_grouping(self.tab1))
        assert self.tab0.add_table(ROOT, self.tab_y).equals(as_grouping(self.tab_y))

    def test_missing_column(self):
        with pytest.raises(MissingColumn, match="table missing column 'x'") as e:
            self.tab0.add_table(xgid, self.tab_y)
        assert e.value.name == "x"

    def test_extra_column(self):
        with pytest.raises(ExtraColumn, match="table has extra column 'y'"):
            self.tab0.add_table(xgid, self.tab_xy)

    def test_mismatch_base_class(self):
        with pytest.raises(ColumnSetMismatch):
            self.tab0.add_table(xgid, self.tab_xy)

    def test_two_groups(self):
        g = self.tab0.add_table(xgid, self.tab1)
        assert g.columns() == ["x"]
        assert g.groups() == [ROOT, xgid]
        assert g.tables() == [ROOT, xgid]
        assert g.table(ROOT) is self.tab0
        assert g.table(xgid) is self.tab1
        assert g.table(ROOT.extend("ygid")) is None
        assert len(g) == 2

    def test_add_empty_is_noop(self):
        g = self.tab0.add_table(xgid, self.tab1)
        assert g.add_table(ROOT, Table()) is g
        assert g.add_table(ygid, Table()) is g

    def test_from_empty_grouping(self):
        g = Grouping().add_table(xgid, self.tab0).add_table(ygid, self.tab1)
        assert g.groups() == [xgid, ygid]

    def test_dtype_kind_mismatch(self):
        ints = Table().add("x", [1, 2])
        floats = Table().add("x", [1.5])
        with pytest.raises(ColumnTypeMismatch, match="int64 and float64 for column 'x'"):
            ints.add_table(xgid, floats)

    def test_dtype_check_option(self):
        state.set_option("check_dtypes", False)
        g = Table().add("x", [1, 2]).add_table(xgid, Table().add("x", [1.5]))
        assert len(g) == 2

    def test_zero_rows_skip_dtype_check(self):
        g = Table().add("x", [1, 2]).add_table(xgid, Table().add("x", []))
        assert g.table(xgid).column("x").dtype == np.float64

    def test_column_order_from_first_table(self):
        g = Grouping().add_table(xgid, Table().add("a", [1]).add("b", [2]))
        g = g.add_table(ygid, Table().add("b", [3]).add("a", [4]))
        assert g.columns() == ["a", "b"]

    def test_input_unchanged(self):
        g = Grouping().add_table(xgid, self.tab1)
        g.add_table(ygid, self.tab1)
        assert g.groups() == [xgid]


class TestGroupOrder:

    gids = [ROOT.extend("a"), ROOT.extend("b"), ROOT.extend("c"), ROOT.extend("d")]
    tab = Table().add("col", [])

    def test_insertion_order(self):
        g = Grouping()
        for gid in self.gids:
            g = g.add_table(gid, self.tab)
        assert g.groups() == self.gids

    def test_readd_moves_to_end(self):
        g = Grouping()
        g = g.add_table(self.gids[0], self.tab).add_table(self.gids[1], self.tab).add_table(self.gids[0], self.tab)
        assert g.groups() == [self.gids[1], self.gids[0]]

    def test_builder(self):
        b = GroupingBuilder()
        for gid in self.gids:
            b.add(gid, self.tab)
        b.add(self.gids[0], self.tab)
        assert b.done().groups() == self.gids[1:] + self.gids[:1]

    def test_builder_checks_columns(self):
        b = GroupingBuilder().add(xgid, self.tab)
        with pytest.raises(MissingColumn):
            b.add(ygid, Table().add("other", []))

    def test_rejected_readd_keeps_binding(self):
        a, b = self.gids[:2]
        gb = GroupingBuilder().add(a, Table().add("x", [1])).add(b, Table().add("x", [2]))
        with pytest.raises(MissingColumn):
            gb.add(b, Table().add("y", [3]))
        g = gb.done()
        assert g.groups() == [a, b]
        assert g.table(b).must_column("x").tolist() == [2]

    def test_replace_only_group_changes_columns(self):
        g = Grouping().add_table(xgid, Table().add("x", [1]))
        g = g.add_table(xgid, Table().add("y", [2]))
        assert g.columns() == ["y"]


class TestAsGrouping:

    def test_table(self):
        tab = Table().add("x", [1])
        g = as_grouping(tab)
        assert g.groups() == [ROOT]
        assert g.table(ROOT) is tab

    def test_empty_table(self):
        assert len(as_grouping(Table())) == 0

    def test_grouping_passthrough(self):
        g = Grouping()
        assert as_grouping(g) is g

    def test_other(self):
        with pytest.raises(TypeError):
            as_grouping([1, 2])

    def test_format_grouping(self):
        g = Grouping().add_table(xgid, Table().add("x", [1]))
        assert format_grouping(g) == "# /xgid\nx\n1"
