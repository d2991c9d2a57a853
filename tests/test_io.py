"""Tests for file operations, CSV import/export, schema and preset files."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from ced.contracts.errors import InvalidLimiter, ModeError, TableIOError, UnknownPreset
from ced.contracts.limiter import Limiter, ValueType
from ced.engine.table import VirtualTable
from ced.io.csvfile import parse_rows, read_table, table_from_rows, to_csv_text, write_table
from ced.io.fileops import TableLock, atomic_write, backup, fingerprint, read_text_safe, write_text_locked
from ced.io.presets import BUILTIN_PRESETS, PresetStore
from ced.io.schema import export_schema, load_schema

# ---------------------------------------------------------------------------
# fileops
# ---------------------------------------------------------------------------


def test_fingerprint(people_csv: Path):
    fp = fingerprint(people_csv)
    assert fp.startswith("sha256:")
    assert len(fp) == 71  # sha256: + 64 hex chars
    assert fingerprint(people_csv) == fp


def test_backup(people_csv: Path):
    bak_path = backup(people_csv)
    assert Path(bak_path).exists()
    assert ".bak" in bak_path
    assert Path(bak_path).read_bytes() == people_csv.read_bytes()


def test_atomic_write_overwrites(tmp_path: Path):
    target = tmp_path / "output.csv"
    target.write_bytes(b"old content")
    atomic_write(target, b"new content")
    assert target.read_bytes() == b"new content"
    assert not [p for p in tmp_path.iterdir() if p.name.startswith(".ced_tmp_")]


def test_read_text_safe_drops_bom(tmp_path: Path):
    path = tmp_path / "bom.csv"
    path.write_bytes(b"\xef\xbb\xbfid,name\r\n1,a\r\n")
    assert read_text_safe(path) == "id,name\r\n1,a\r\n"


def test_lock_creates_sidecar_with_pid(people_csv: Path):
    with TableLock(people_csv) as lock:
        assert lock.lock_path.exists()
    assert f"pid={os.getpid()}" in lock.lock_path.read_text()


def test_locked_table_cannot_be_written(people_csv: Path):
    with TableLock(people_csv):
        with pytest.raises(TableIOError, match="locked"):
            write_text_locked(people_csv, "x\n")
    write_text_locked(people_csv, "x\n")
    assert people_csv.read_text() == "x\n"


def test_write_into_missing_directory(tmp_path: Path):
    with pytest.raises(TableIOError):
        write_text_locked(tmp_path / "nope" / "out.csv", "x\n")


# ---------------------------------------------------------------------------
# csv
# ---------------------------------------------------------------------------


def test_parse_rows_skips_blank_lines_unless_strict():
    text = "a,b\n\n1,2\n"
    assert parse_rows(text) == [["a", "b"], ["1", "2"]]
    assert parse_rows(text, strict=True) == [["a", "b"], [], ["1", "2"]]


def test_parse_rows_quoted_fields():
    assert parse_rows('id,note\n1,"a, b"\n') == [["id", "note"], ["1", "a, b"]]


def test_table_from_rows_checks_arity():
    with pytest.raises(TableIOError) as exc:
        table_from_rows([["a", "b"], ["1", "2"], ["3"]])
    assert exc.value.details["line"] == 3


def test_empty_file_gives_empty_table(tmp_path: Path):
    path = tmp_path / "empty.csv"
    path.write_text("")
    table = read_table(path)
    assert table.column_count == 0 and table.row_count == 0


def test_numeric_header_rejected_in_tabular_mode(tmp_path: Path):
    path = tmp_path / "nums.csv"
    path.write_text("1,2\na,b\n")
    with pytest.raises(TableIOError, match="cannot be a number"):
        read_table(path)
    assert read_table(path, raw=True).column_names() == ["1", "2"]


def test_semicolon_delimiter(tmp_path: Path):
    path = tmp_path / "semi.csv"
    path.write_text("a;b\n1;2\n")
    table = read_table(path, delimiter=";")
    assert table.rows() == [["1", "2"]]
    assert to_csv_text(table, delimiter=";") == "a;b\n1;2\n"


def test_write_table_round_trip(tmp_path: Path):
    table = VirtualTable(["id", "note"], [["1", "a, b"], ["2", 'say "hi"']])
    path = tmp_path / "out.csv"
    assert write_table(table, path) is None
    assert read_table(path) == table


def test_to_csv_text_cr_and_headerless():
    table = VirtualTable(["a"], [["1"], ["2"]])
    assert to_csv_text(table, cr=True) == "a\r1\r2\r"
    assert to_csv_text(table, header=False) == "1\n2\n"


# ---------------------------------------------------------------------------
# schema
# ---------------------------------------------------------------------------


def test_load_schema(tmp_path: Path):
    path = tmp_path / "schema.csv"
    path.write_text(
        "column,type,default,variant,pattern,force\n"
        "age,number,0,,,\n"
        "status,text,open,open closed,,true\n"
    )
    entries = load_schema(path)
    assert [name for name, _ in entries] == ["age", "status"]
    age, status = entries[0][1], entries[1][1]
    assert age.type is ValueType.NUMBER and age.force is False
    assert status.variants == ("open", "closed") and status.force is True
    assert load_schema(path, force=True)[0][1].force is True


def test_load_schema_errors(tmp_path: Path):
    path = tmp_path / "schema.csv"
    path.write_text("column,type,default,variant,pattern\nage,number\n")
    with pytest.raises(InvalidLimiter) as exc:
        load_schema(path)
    assert exc.value.details["line"] == 2

    path.write_text("column,type,default,variant,pattern\nage,number,x,,\n")
    with pytest.raises(InvalidLimiter, match="Schema line 2"):
        load_schema(path)

    with pytest.raises(TableIOError):
        load_schema(tmp_path / "missing.csv")


def test_export_schema():
    table = VirtualTable(["id", "age"])
    table.set_limiter("age", Limiter(type="number", default="0", force=True))
    assert export_schema(table) == [
        ["column", "type", "default", "variant", "pattern", "force"],
        ["id", "text", "", "", "", "false"],
        ["age", "number", "0", "", "", "true"],
    ]
    with pytest.raises(ModeError):
        export_schema(VirtualTable(["a"], raw=True))


# ---------------------------------------------------------------------------
# presets
# ---------------------------------------------------------------------------


def test_builtin_presets():
    store = PresetStore.builtin()
    assert store.names() == sorted(BUILTIN_PRESETS)
    assert store.get("date").default == "2000-01-01"
    assert store.get("number").type is ValueType.NUMBER
    with pytest.raises(UnknownPreset):
        store.get("nope")


def test_preset_file_extends_and_overrides(tmp_path: Path):
    path = tmp_path / "presets.csv"
    path.write_text("name,type,default,variants,pattern\nyesno,text,no,yes no,\ndate,text,,,\n")
    store = PresetStore.load(path)
    assert "yesno" in store
    assert store.get("yesno").variants == ("yes", "no")
    assert store.get("date").pattern is None
    assert "email" in store


def test_missing_preset_file_means_builtins(tmp_path: Path):
    store = PresetStore.load(tmp_path / "absent.csv")
    assert store.names() == sorted(BUILTIN_PRESETS)
    assert PresetStore.load(tmp_path / "absent.csv", builtins=False).names() == []


def test_bad_preset_line(tmp_path: Path):
    path = tmp_path / "presets.csv"
    path.write_text("broken,text\n")
    with pytest.raises(InvalidLimiter, match="Preset line 1"):
        PresetStore.load(path)
