"""Schema files: one CSV row of limiter fields per column."""

from __future__ import annotations

from pathlib import Path

from ced.contracts.errors import CedError, InvalidLimiter, ModeError, TableIOError
from ced.contracts.limiter import LIMITER_ATTRIBUTE_LEN, Limiter, parse_bool
from ced.engine.table import VirtualTable
from ced.io.csvfile import parse_rows
from ced.io.fileops import read_text_safe

SCHEMA_HEADER = ["column", "type", "default", "variant", "pattern"]


def load_schema(path: str | Path, *, force: bool = False) -> list[tuple[str, Limiter]]:
    """Read ``(column, limiter)`` pairs from a schema file.

    A row's optional sixth field overrides ``force`` for that column.
    """
    path = Path(path)
    try:
        text = read_text_safe(path)
    except (OSError, UnicodeDecodeError) as e:
        raise TableIOError(f"Failed to read schema {path}: {e}", path=str(path)) from e
    rows = parse_rows(text)
    if not rows:
        raise TableIOError(f"Schema {path} does not have a header", path=str(path))

    entries: list[tuple[str, Limiter]] = []
    for line, row in enumerate(rows[1:], start=2):
        if len(row) not in (LIMITER_ATTRIBUTE_LEN + 1, LIMITER_ATTRIBUTE_LEN + 2):
            raise InvalidLimiter(
                f"Schema line {line}: expected {LIMITER_ATTRIBUTE_LEN + 1} or "
                f"{LIMITER_ATTRIBUTE_LEN + 2} fields but found {len(row)}",
                path=str(path),
                line=line,
            )
        row_force = force
        if len(row) > LIMITER_ATTRIBUTE_LEN + 1 and row[-1].strip():
            try:
                row_force = parse_bool(row[-1])
            except ValueError as e:
                raise InvalidLimiter(f"Schema line {line}: {e}", path=str(path), line=line) from e
        try:
            limiter = Limiter.from_fields(row[1 : LIMITER_ATTRIBUTE_LEN + 1], force=row_force)
        except CedError as e:
            raise InvalidLimiter(f"Schema line {line}: {e.message}", path=str(path), line=line) from e
        entries.append((row[0], limiter))
    return entries


def export_schema(table: VirtualTable) -> list[list[str]]:
    """Schema rows (header first) describing the table's limiters."""
    if table.raw:
        raise ModeError("Cannot export a schema from a raw table")
    rows = [SCHEMA_HEADER + ["force"]]
    for column in table.columns:
        limiter = column.limiter or Limiter()
        rows.append([column.name, *limiter.to_fields(), str(limiter.force).lower()])
    return rows
