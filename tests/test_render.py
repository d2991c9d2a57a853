"""Tests for plain-text rendering."""

from __future__ import annotations

import json

from ced.contracts.limiter import Limiter
from ced.engine.table import VirtualTable
from ced.view.render import (
    ARRAY_BANNER,
    EMPTY_MESSAGE,
    describe_column,
    display_value,
    render_cell,
    render_columns,
    render_row,
    render_table,
)


def test_render_table_pads_columns(people_table):
    assert render_table(people_table).splitlines() == [
        "H | [0]:id [1]:name  [2]:age",
        "0 | [0]:1  [1]:alice [2]:30",
        "1 | [0]:2  [1]:bob   [2]:",
        "2 | [0]:3  [1]:carol [2]:41",
    ]


def test_render_without_numbers(people_table):
    assert render_table(people_table, numbered=False).splitlines()[0] == "[0]:id [1]:name  [2]:age"


def test_render_empty_tables():
    assert render_table(VirtualTable()) == EMPTY_MESSAGE
    assert render_table(VirtualTable(["a"])).splitlines() == ["H | [0]:a", EMPTY_MESSAGE]


def test_render_raw_table():
    table = VirtualTable(["a"], [["1", "2"]], raw=True)
    lines = render_table(table).splitlines()
    assert lines[0] == ARRAY_BANNER
    assert lines[2] == "0 | [0]:1 [1]:2"


def test_values_with_delimiter_are_quoted():
    assert display_value("a, b") == '"a, b"'
    assert display_value('say "hi"') == '"say ""hi"""'
    assert display_value("plain") == "plain"


def test_render_row_and_cell(people_table):
    assert render_row(people_table, 1) == "1 | [0]:2 [1]:bob [2]:"
    assert render_cell(people_table, 0, 1) == "alice"
    assert render_cell(people_table, 0, 1, "verbose") == "'alice'"
    assert render_cell(people_table, 0, 1, "d").endswith("Cell data : 'alice'")


def test_describe_column(people_table):
    people_table.set_limiter("age", Limiter(type="number", default="0"))
    age = people_table.columns[2]
    assert describe_column(age) == "Name: age\nType: Number"
    verbose = describe_column(age, "v")
    assert "Limiter =\nType: Number\nDefault: 0\nForce: false" in verbose
    debug = json.loads(describe_column(age, "debug"))
    assert debug["limiter"]["default"] == "0"


def test_render_columns(people_table):
    assert render_columns(people_table) == ": --id,name,age-- :"
