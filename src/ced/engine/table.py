"""In-memory table: ordered columns, ordered rows of raw string cells.

Every operation checks its indexes and runs limiters before touching storage,
so a failing call leaves the table exactly as it was.
"""

from __future__ import annotations

import re
from typing import Sequence

from ced.contracts.errors import (
    ArityMismatch,
    ColumnNotFound,
    DuplicateColumn,
    IndexOutOfRange,
    InvalidName,
    ModeError,
)
from ced.contracts.limiter import Limiter
from ced.contracts.table import ByIndex, ByName, Column
from ced.validation.limiter import revalidate, validate

_INTEGER_NAME = re.compile(r"[+-]?\d+")

Selector = ByIndex | ByName | int | str


class VirtualTable:
    """Columns plus rows, in tabular or raw (array) mode.

    Raw mode accepts ragged rows and any column names, and never carries
    limiters.
    """

    def __init__(
        self,
        columns: Sequence[Column | str] = (),
        rows: Sequence[Sequence[str]] = (),
        *,
        raw: bool = False,
    ) -> None:
        self.raw = raw
        self._columns: list[Column] = []
        self._rows: list[list[str]] = []
        for column in columns:
            if isinstance(column, str):
                column = Column(name=column)
            if not raw:
                self._check_name(column.name)
            self._columns.append(column)
        for row in rows:
            if not raw and len(row) != len(self._columns):
                raise ArityMismatch(
                    f"Row has {len(row)} values but the table has {len(self._columns)} columns"
                )
            self._rows.append(list(row))

    # -- accessors ----------------------------------------------------------

    @property
    def mode(self) -> str:
        return "raw" if self.raw else "tabular"

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def columns(self) -> tuple[Column, ...]:
        return tuple(self._columns)

    def column_names(self) -> list[str]:
        return [c.name for c in self._columns]

    def rows(self) -> list[list[str]]:
        return [list(r) for r in self._rows]

    def limiter(self, selector: Selector) -> Limiter | None:
        return self._columns[self.resolve_column(selector)].limiter

    def resolve_column(self, selector: Selector) -> int:
        """Turn an index or name selector into a checked column index."""
        if isinstance(selector, int):
            selector = ByIndex(index=selector) if selector >= 0 else ByName(name=str(selector))
        elif isinstance(selector, str):
            selector = ByName(name=selector)
        if isinstance(selector, ByIndex):
            if selector.index >= len(self._columns):
                raise ColumnNotFound(
                    f"Column index {selector.index} is out of range ({len(self._columns)} columns)",
                    column=selector.index,
                )
            return selector.index
        for i, column in enumerate(self._columns):
            if column.name == selector.name:
                return i
        raise ColumnNotFound(f"Column '{selector.name}' does not exist", column=selector.name)

    def get_cell(self, row: int, selector: Selector) -> str:
        col = self.resolve_column(selector)
        cells = self._rows[self._check_row(row)]
        if col >= len(cells):
            raise IndexOutOfRange(f"Row {row} has no cell in column {col}", row=row, column=col)
        return cells[col]

    def get_row(self, row: int) -> list[str]:
        return list(self._rows[self._check_row(row)])

    def get_column(self, selector: Selector) -> list[str | None]:
        col = self.resolve_column(selector)
        return [r[col] if col < len(r) else None for r in self._rows]

    def snapshot(self) -> tuple:
        return (self.raw, tuple(self._columns), tuple(tuple(r) for r in self._rows))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VirtualTable):
            return NotImplemented
        return self.snapshot() == other.snapshot()

    def __repr__(self) -> str:
        return f"VirtualTable(mode={self.mode!r}, columns={self.column_names()!r}, rows={self.row_count})"

    # -- checks -------------------------------------------------------------

    def _check_name(self, name: str, *, exclude: int | None = None) -> None:
        if self.raw:
            return
        if name.strip() == "":
            raise InvalidName("Column name cannot be empty")
        if _INTEGER_NAME.fullmatch(name):
            raise InvalidName(f"Column name '{name}' cannot be a number", name=name)
        for i, column in enumerate(self._columns):
            if i != exclude and column.name == name:
                raise DuplicateColumn(f"Column '{name}' already exists", name=name)

    def _check_row(self, row: int, *, allow_end: bool = False) -> int:
        limit = len(self._rows) + (1 if allow_end else 0)
        if row < 0 or row >= limit:
            raise IndexOutOfRange(
                f"Row index {row} is out of range ({len(self._rows)} rows)", row=row
            )
        return row

    def _checked(self, col: int, value: str, enabled: bool) -> str:
        if not enabled or self.raw:
            return value
        return validate(value, self._columns[col].limiter)

    def _fill(self, column: Column) -> str:
        return column.limiter.fill_value() if column.limiter is not None else ""

    # -- columns ------------------------------------------------------------

    def add_column(
        self,
        name: str,
        index: int | None = None,
        limiter: Limiter | None = None,
        placeholder: str | None = None,
    ) -> int:
        """Insert a column and give every existing row its fill value."""
        if index is None:
            index = len(self._columns)
        if index < 0 or index > len(self._columns):
            raise IndexOutOfRange(
                f"Column index {index} is out of range ({len(self._columns)} columns)",
                column=index,
            )
        self._check_name(name)
        if self.raw:
            if limiter is not None:
                raise ModeError("Cannot set a limiter in raw mode")
            fill = placeholder or ""
            column = Column(name=name)
            # rows that end before the new column get no cell
            values = [fill if index <= len(row) else None for row in self._rows]
        else:
            if placeholder is not None:
                fields = limiter.model_dump() if limiter is not None else {}
                fields["placeholder"] = placeholder
                limiter = Limiter.create(**fields)
            column = Column(name=name, limiter=limiter)
            values = [self._fill(column)] * len(self._rows)
        self.insert_column(index, column, values)
        return index

    def insert_column(self, index: int, column: Column, values: Sequence[str | None]) -> None:
        """Put a column back with exactly the given cells (no validation).

        ``None`` leaves that row without a cell. On an empty table the values
        rebuild the rows, which is the inverse of deleting the last column of
        a tabular table.
        """
        if not self._columns and not self._rows:
            self._rows = [[v] if v is not None else [] for v in values]
            self._columns.append(column)
            return
        if len(values) != len(self._rows):
            raise ArityMismatch(
                f"Column has {len(values)} values but the table has {len(self._rows)} rows"
            )
        self._columns.insert(index, column)
        for row, value in zip(self._rows, values):
            if value is not None:
                row.insert(min(index, len(row)), value)

    def delete_column(self, selector: Selector) -> tuple[Column, list[str | None]]:
        col = self.resolve_column(selector)
        values = self.get_column(col)
        column = self._columns.pop(col)
        if not self._columns and not self.raw:
            self._rows = []
        else:
            # raw rows may be wider than the header, so they outlive it
            for row in self._rows:
                if col < len(row):
                    del row[col]
        return column, values

    def rename_column(self, selector: Selector, new_name: str) -> str:
        col = self.resolve_column(selector)
        self._check_name(new_name, exclude=col)
        old = self._columns[col]
        self._columns[col] = old.model_copy(update={"name": new_name})
        return old.name

    def move_column(self, selector: Selector, target: int) -> int:
        src = self.resolve_column(selector)
        if target < 0 or target >= len(self._columns):
            raise IndexOutOfRange(
                f"Target column index {target} is out of range ({len(self._columns)} columns)",
                column=target,
            )
        low, high = min(src, target), max(src, target)
        self._columns.insert(target, self._columns.pop(src))
        for row in self._rows:
            if len(row) <= low:
                continue
            # a short raw row is padded so its cells follow the header
            row.extend([""] * (high + 1 - len(row)))
            row.insert(target, row.pop(src))
        return src

    def row_widths(self) -> tuple[int, ...]:
        return tuple(len(r) for r in self._rows)

    def trim_rows(self, widths: Sequence[int]) -> None:
        """Cut rows back to the given widths, dropping move padding."""
        for row, width in zip(self._rows, widths):
            del row[width:]

    # -- rows ---------------------------------------------------------------

    def add_row(
        self,
        index: int | None = None,
        values: Sequence[str] | None = None,
        *,
        validate: bool = True,
    ) -> list[str]:
        """Insert a row; omitted values take each column's fill value."""
        if index is None:
            index = len(self._rows)
        self._check_row(index, allow_end=True)
        if not self.raw and not self._columns:
            raise ArityMismatch("Table has no columns; create some before adding rows")
        if values is None:
            cells = [self._fill(c) for c in self._columns]
        elif self.raw:
            cells = list(values)
        else:
            if len(values) != len(self._columns):
                raise ArityMismatch(
                    f"Row has {len(values)} values but the table has {len(self._columns)} columns",
                    expected=len(self._columns),
                    actual=len(values),
                )
            cells = [self._checked(i, v, validate) for i, v in enumerate(values)]
        self._rows.insert(index, cells)
        return list(cells)

    def delete_row(self, index: int | None = None) -> list[str]:
        if index is None:
            index = len(self._rows) - 1
        return self._rows.pop(self._check_row(index))

    def move_row(self, source: int, target: int) -> None:
        self._check_row(source)
        self._check_row(target)
        self._rows.insert(target, self._rows.pop(source))

    # -- cells --------------------------------------------------------------

    def set_cell(self, row: int, selector: Selector, value: str, *, validate: bool = True) -> str:
        """Write one cell and return the value it replaced."""
        col = self.resolve_column(selector)
        previous = self.get_cell(row, col)
        self._rows[row][col] = self._checked(col, value, validate)
        return previous

    def set_row(
        self,
        row: int,
        values: Sequence[str | None],
        *,
        validate: bool = True,
    ) -> list[str]:
        """Replace a row; ``None`` keeps the current cell. Returns the old row."""
        previous = self.get_row(row)
        if self.raw:
            cells = [
                v if v is not None else (previous[i] if i < len(previous) else "")
                for i, v in enumerate(values)
            ]
        else:
            if len(values) != len(self._columns):
                raise ArityMismatch(
                    f"Row has {len(values)} values but the table has {len(self._columns)} columns",
                    expected=len(self._columns),
                    actual=len(values),
                )
            cells = [
                previous[i] if v is None else self._checked(i, v, validate)
                for i, v in enumerate(values)
            ]
        self._rows[row] = cells
        return previous

    def set_column(
        self,
        selector: Selector,
        values: str | Sequence[str | None],
        *,
        validate: bool = True,
    ) -> list[str | None]:
        """Write a column; a single string is written to every row."""
        col = self.resolve_column(selector)
        if isinstance(values, str):
            values = [values] * len(self._rows)
        if len(values) != len(self._rows):
            raise ArityMismatch(
                f"Column has {len(values)} values but the table has {len(self._rows)} rows"
            )
        cells = [None if v is None else self._checked(col, v, validate) for v in values]
        previous = self.get_column(col)
        for row, value in zip(self._rows, cells):
            if value is not None and col < len(row):
                row[col] = value
        return previous

    # -- limiters -----------------------------------------------------------

    def set_limiter(self, selector: Selector, limiter: Limiter | None) -> Limiter | None:
        """Swap a column's limiter without touching its cells."""
        col = self.resolve_column(selector)
        if self.raw and limiter is not None:
            raise ModeError("Cannot set a limiter in raw mode")
        previous = self._columns[col].limiter
        self._columns[col] = self._columns[col].model_copy(update={"limiter": limiter})
        return previous

    def install_limiter(
        self, selector: Selector, limiter: Limiter
    ) -> tuple[Limiter | None, list[str], list[str]]:
        """Install a limiter, re-validating existing cells by its force rule.

        Returns the previous limiter with the column's cells before and after.
        """
        if self.raw:
            raise ModeError("Cannot set a limiter in raw mode")
        col = self.resolve_column(selector)
        old = [r[col] for r in self._rows]
        new = revalidate(old, limiter)
        previous = self.set_limiter(col, limiter)
        self.set_column(col, new, validate=False)
        return previous, old, new
