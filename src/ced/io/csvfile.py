"""Delimited-text import and export for VirtualTable."""

from __future__ import annotations

import csv
import io
from pathlib import Path

from ced.contracts.errors import CedError, TableIOError
from ced.engine.table import VirtualTable
from ced.io.fileops import read_text_safe, write_text_locked


def parse_rows(text: str, *, delimiter: str = ",", strict: bool = False) -> list[list[str]]:
    """Split CSV text into rows. Blank lines are dropped unless ``strict``."""
    rows: list[list[str]] = []
    for row in csv.reader(io.StringIO(text, newline=""), delimiter=delimiter):
        if not row and not strict:
            continue
        rows.append(row)
    return rows


def table_from_rows(
    rows: list[list[str]],
    *,
    has_header: bool = True,
    raw: bool = False,
) -> VirtualTable:
    if not rows:
        return VirtualTable(raw=raw)
    if has_header:
        names, body = rows[0], rows[1:]
    else:
        width = max(len(r) for r in rows) if raw else len(rows[0])
        names, body = [f"column{i}" for i in range(width)], rows
    if not raw:
        for line, row in enumerate(body, start=2 if has_header else 1):
            if len(row) != len(names):
                raise TableIOError(
                    f"Line {line}: expected {len(names)} values but found {len(row)}",
                    line=line,
                )
    return VirtualTable(names, body, raw=raw)


def read_table(
    path: str | Path,
    *,
    has_header: bool = True,
    raw: bool = False,
    delimiter: str = ",",
    strict: bool = False,
) -> VirtualTable:
    """Load a table from disk. Tabular imports must be rectangular."""
    path = Path(path)
    try:
        text = read_text_safe(path)
    except (OSError, UnicodeDecodeError) as e:
        raise TableIOError(f"Failed to read {path}: {e}", path=str(path)) from e
    try:
        return table_from_rows(
            parse_rows(text, delimiter=delimiter, strict=strict),
            has_header=has_header,
            raw=raw,
        )
    except TableIOError as e:
        e.details.setdefault("path", str(path))
        raise
    except csv.Error as e:
        raise TableIOError(f"Malformed CSV in {path}: {e}", path=str(path)) from e
    except CedError as e:
        raise TableIOError(f"Cannot import {path}: {e.message}", path=str(path)) from e


def rows_to_text(rows: list[list[str]], *, delimiter: str = ",", cr: bool = False) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, lineterminator="\r" if cr else "\n")
    writer.writerows(rows)
    return buf.getvalue()


def to_csv_text(
    table: VirtualTable,
    *,
    delimiter: str = ",",
    cr: bool = False,
    header: bool = True,
) -> str:
    rows = table.rows()
    if header:
        rows.insert(0, table.column_names())
    return rows_to_text(rows, delimiter=delimiter, cr=cr)


def write_table(
    table: VirtualTable,
    path: str | Path,
    *,
    delimiter: str = ",",
    cr: bool = False,
    make_backup: bool = False,
) -> str | None:
    """Write ``table`` to ``path``; returns the backup path if one was made."""
    return write_text_locked(
        path,
        to_csv_text(table, delimiter=delimiter, cr=cr),
        make_backup=make_backup,
    )
