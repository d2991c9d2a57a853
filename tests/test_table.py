"""Tests for VirtualTable structure and cell operations."""

from __future__ import annotations

import pytest

from ced.contracts.errors import (
    ArityMismatch,
    ColumnNotFound,
    DuplicateColumn,
    ForceWithoutDefault,
    IndexOutOfRange,
    InvalidName,
    ModeError,
    TypeMismatch,
)
from ced.contracts.limiter import Limiter
from ced.contracts.table import ByIndex, ByName, Column, parse_selector
from ced.engine.table import VirtualTable


def test_construction_checks_arity():
    with pytest.raises(ArityMismatch):
        VirtualTable(["a", "b"], [["1"]])


def test_resolve_column(people_table):
    assert people_table.resolve_column(ByName(name="age")) == 2
    assert people_table.resolve_column(ByIndex(index=1)) == 1
    assert people_table.resolve_column("name") == 1
    assert people_table.resolve_column(0) == 0
    with pytest.raises(ColumnNotFound):
        people_table.resolve_column("missing")
    with pytest.raises(ColumnNotFound):
        people_table.resolve_column(3)


def test_parse_selector():
    assert parse_selector("2") == ByIndex(index=2)
    assert parse_selector("-2") == ByName(name="-2")
    assert parse_selector("name") == ByName(name="name")


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("name, error", [("", InvalidName), ("12", InvalidName), ("-3", InvalidName), ("id", DuplicateColumn)])
def test_add_column_rejects_bad_names(people_table, name, error):
    before = people_table.snapshot()
    with pytest.raises(error):
        people_table.add_column(name)
    assert people_table.snapshot() == before


def test_add_column_index_out_of_range(people_table):
    with pytest.raises(IndexOutOfRange):
        people_table.add_column("x", 4)


def test_add_column_fills_existing_rows(people_table):
    assert people_table.add_column("score", 1, Limiter(type="number")) == 1
    assert people_table.get_column("score") == ["0", "0", "0"]
    people_table.add_column("tag", placeholder="n/a")
    assert people_table.get_column("tag") == ["n/a", "n/a", "n/a"]
    assert people_table.limiter("tag").placeholder == "n/a"


def test_delete_column_returns_column_and_values(people_table):
    column, values = people_table.delete_column("name")
    assert column == Column(name="name")
    assert values == ["alice", "bob", "carol"]
    assert people_table.column_names() == ["id", "age"]
    assert people_table.get_row(0) == ["1", "30"]


def test_deleting_last_column_clears_rows_and_insert_restores_them():
    table = VirtualTable(["a"], [["1"], ["2"]])
    column, values = table.delete_column(0)
    assert table.row_count == 0
    table.insert_column(0, column, values)
    assert table.rows() == [["1"], ["2"]]


def test_rename_column(people_table):
    assert people_table.rename_column("id", "key") == "id"
    assert people_table.column_names() == ["key", "name", "age"]
    people_table.rename_column("key", "key")
    with pytest.raises(DuplicateColumn):
        people_table.rename_column("key", "name")


def test_move_column(people_table):
    assert people_table.move_column("age", 0) == 2
    assert people_table.column_names() == ["age", "id", "name"]
    assert people_table.get_row(0) == ["30", "1", "alice"]
    with pytest.raises(IndexOutOfRange):
        people_table.move_column("age", 3)


# ---------------------------------------------------------------------------
# Rows and cells
# ---------------------------------------------------------------------------


def test_add_row_requires_columns():
    with pytest.raises(ArityMismatch):
        VirtualTable().add_row(0, ["1"])


def test_add_row_checks_arity_and_index(people_table):
    with pytest.raises(ArityMismatch):
        people_table.add_row(0, ["1", "2"])
    with pytest.raises(IndexOutOfRange):
        people_table.add_row(5, ["4", "dan", "1"])
    assert people_table.add_row(3, ["4", "dan", "1"]) == ["4", "dan", "1"]
    assert people_table.row_count == 4


def test_add_row_without_values_uses_fill_values(people_table):
    people_table.set_limiter("age", Limiter(type="number", default="18"))
    assert people_table.add_row() == ["", "", "18"]


def test_add_row_validation_failure_leaves_table_unchanged(people_table):
    people_table.set_limiter("age", Limiter(type="number"))
    before = people_table.snapshot()
    with pytest.raises(TypeMismatch):
        people_table.add_row(0, ["4", "dan", "old"])
    assert people_table.snapshot() == before


def test_delete_and_move_rows(people_table):
    assert people_table.delete_row() == ["3", "carol", "41"]
    people_table.move_row(0, 1)
    assert [r[0] for r in people_table.rows()] == ["2", "1"]
    with pytest.raises(IndexOutOfRange):
        people_table.move_row(0, 2)
    with pytest.raises(IndexOutOfRange):
        VirtualTable(["a"]).delete_row()


def test_set_cell_returns_previous(people_table):
    assert people_table.set_cell(0, "name", "ann") == "alice"
    assert people_table.get_cell(0, 1) == "ann"


def test_set_cell_validation_failure_is_atomic(people_table):
    people_table.set_limiter("age", Limiter(type="number"))
    with pytest.raises(TypeMismatch):
        people_table.set_cell(0, "age", "old")
    assert people_table.get_cell(0, "age") == "30"


def test_set_row_none_keeps_cell(people_table):
    assert people_table.set_row(1, [None, "robert", "20"]) == ["2", "bob", ""]
    assert people_table.get_row(1) == ["2", "robert", "20"]


def test_set_column(people_table):
    previous = people_table.set_column("age", "1")
    assert previous == ["30", "", "41"]
    assert people_table.get_column("age") == ["1", "1", "1"]


# ---------------------------------------------------------------------------
# Limiters
# ---------------------------------------------------------------------------


def test_install_forced_limiter_replaces_failing_cells():
    table = VirtualTable(["col"], [["3"], ["x"], ["7"]])
    previous, old, new = table.install_limiter("col", Limiter(type="number", default="0", force=True))
    assert previous is None
    assert old == ["3", "x", "7"]
    assert new == ["3", "0", "7"]
    assert table.get_column("col") == ["3", "0", "7"]


def test_install_forced_limiter_without_default_is_atomic():
    table = VirtualTable(["col"], [["3"], ["x"], ["7"]])
    before = table.snapshot()
    with pytest.raises(ForceWithoutDefault):
        table.install_limiter("col", Limiter(type="number", force=True))
    assert table.snapshot() == before


# ---------------------------------------------------------------------------
# Raw mode
# ---------------------------------------------------------------------------


def test_raw_mode_allows_ragged_rows_and_numeric_names():
    table = VirtualTable(["1", "2", "3"], [["a", "b"], ["x", "y", "z", "w"]], raw=True)
    assert table.mode == "raw"
    assert table.get_column(2) == [None, "z"]
    assert table.add_row(values=["only"]) == ["only"]
    table.add_column("1")
    assert table.column_names() == ["1", "2", "3", "1"]


def test_raw_mode_rejects_limiters():
    table = VirtualTable(["a"], [["1"]], raw=True)
    with pytest.raises(ModeError):
        table.install_limiter("a", Limiter())
    with pytest.raises(ModeError):
        table.add_column("b", limiter=Limiter())


def test_raw_add_column_keeps_headerless_cells():
    table = VirtualTable(raw=True)
    table.add_row(0, ["a", "b"])
    table.add_column("x")
    assert table.rows() == [["", "a", "b"]]
    table.delete_column(0)
    assert table.rows() == [["a", "b"]]


def test_raw_add_column_skips_rows_that_end_before_it():
    table = VirtualTable(["a", "b"], [["1", "2"], ["3"]], raw=True)
    table.add_column("c", 2, placeholder="-")
    assert table.rows() == [["1", "2", "-"], ["3"]]


def test_raw_delete_last_column_keeps_wider_rows():
    table = VirtualTable(["h"], [["x", "y"]], raw=True)
    column, values = table.delete_column(0)
    assert table.column_count == 0
    assert table.rows() == [["y"]]
    table.insert_column(0, column, values)
    assert table.rows() == [["x", "y"]]


def test_raw_move_column_pads_short_rows():
    table = VirtualTable(["a", "b", "c"], [["1", "2", "3"], ["4"], []], raw=True)
    widths = table.row_widths()
    table.move_column(0, 2)
    assert table.column_names() == ["b", "c", "a"]
    assert table.rows() == [["2", "3", "1"], ["", "", "4"], []]
    table.move_column(2, 0)
    table.trim_rows(widths)
    assert table.rows() == [["1", "2", "3"], ["4"], []]
