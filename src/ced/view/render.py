"""Plain-text rendering of tables, rows, cells and columns."""

from __future__ import annotations

import orjson

from ced.contracts.table import Column
from ced.engine.table import VirtualTable

EMPTY_MESSAGE = ": CSV is empty :"
ARRAY_BANNER = "-- Mode: Array --"


def display_value(value: str, delimiter: str = ",") -> str:
    """Quote values that would otherwise read as several fields."""
    if delimiter in value or '"' in value or "\n" in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def _cells(values: list[str], delimiter: str) -> list[str]:
    return [f"[{i}]:{display_value(v, delimiter)}" for i, v in enumerate(values)]


def render_table(table: VirtualTable, *, numbered: bool = True, delimiter: str = ",") -> str:
    """Render the table with ``[i]:value`` cells padded to each column's width."""
    if table.row_count == 0 and table.column_count == 0:
        return EMPTY_MESSAGE
    header = _cells(table.column_names(), delimiter)
    body = [_cells(row, delimiter) for row in table.rows()]

    width_count = max([len(header)] + [len(r) for r in body])
    widths = [0] * width_count
    for line in [header, *body]:
        for i, cell in enumerate(line):
            widths[i] = max(widths[i], len(cell))

    def join(line: list[str]) -> str:
        return " ".join(cell.ljust(widths[i]) for i, cell in enumerate(line)).rstrip()

    label_width = max(1, len(str(max(table.row_count - 1, 0))))
    lines = []
    if table.raw:
        lines.append(ARRAY_BANNER)
    prefix = f"{'H':<{label_width}} | " if numbered else ""
    lines.append(prefix + join(header))
    if not body:
        lines.append(EMPTY_MESSAGE)
    for index, line in enumerate(body):
        prefix = f"{index:<{label_width}} | " if numbered else ""
        lines.append(prefix + join(line))
    return "\n".join(lines)


def render_row(table: VirtualTable, index: int, *, delimiter: str = ",") -> str:
    row = table.get_row(index)
    return f"{index} | " + " ".join(_cells(row, delimiter))


def render_cell(table: VirtualTable, row: int, column: int, mode: str = "simple") -> str:
    value = table.get_cell(row, column)
    mode = mode.lower()
    if mode in ("v", "verbose"):
        return repr(value)
    if mode in ("d", "debug"):
        return describe_column(table.columns[column], "debug") + f"\nCell data : {value!r}"
    return value


def describe_column(column: Column, mode: str = "simple") -> str:
    limiter = column.limiter
    type_name = limiter.type.value.capitalize() if limiter else "Text"
    mode = mode.lower()
    if mode in ("d", "debug"):
        return orjson.dumps(column.model_dump(mode="json"), option=orjson.OPT_INDENT_2).decode()
    if mode in ("v", "verbose"):
        text = limiter.describe() if limiter else "None"
        return f"Column = \nName: {column.name}\nType: {type_name}\n---\nLimiter =\n{text}"
    return f"Name: {column.name}\nType: {type_name}"


def render_columns(table: VirtualTable) -> str:
    return f": --{','.join(table.column_names())}-- :"
