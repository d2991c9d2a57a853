"""Apply and revert recordable commands against a VirtualTable.

``apply_command`` returns the command with its memento filled in; passing
that bound command to ``revert_command`` restores the table exactly, and
passing it to ``apply_command`` again replays it (redo).
"""

from __future__ import annotations

from ced.contracts.commands import (
    AddColumn,
    AddRow,
    CommandModel,
    Create,
    DeleteColumn,
    DeleteRow,
    EditCell,
    EditColumn,
    EditRow,
    Limit,
    MoveColumn,
    MoveRow,
    RenameColumn,
    Schema,
)
from ced.contracts.common import ChangeRecord
from ced.contracts.errors import ArgumentError, CedError, ColumnNotFound
from ced.contracts.limiter import Limiter
from ced.contracts.table import ByIndex
from ced.engine.table import VirtualTable


def apply_command(table: VirtualTable, cmd: CommandModel) -> CommandModel:
    """Run ``cmd``; the table is unchanged if this raises."""
    if isinstance(cmd, Create):
        start = table.column_count
        added = 0
        try:
            for name in cmd.names:
                table.add_column(name)
                added += 1
        except CedError:
            for _ in range(added):
                table.delete_column(table.column_count - 1)
            raise
        return cmd.model_copy(update={"position": start})

    elif isinstance(cmd, AddColumn):
        limiter = Limiter.create(type=cmd.type) if cmd.type is not None else None
        index = cmd.position if cmd.position is not None else cmd.index
        position = table.add_column(cmd.name, index, limiter, cmd.placeholder)
        return cmd.model_copy(update={"position": position})

    elif isinstance(cmd, DeleteColumn):
        if cmd.column is None:
            if table.column_count == 0:
                raise ColumnNotFound("Table has no columns to delete")
            position = table.column_count - 1
        else:
            position = table.resolve_column(cmd.column)
        removed, values = table.delete_column(position)
        return cmd.model_copy(
            update={"position": position, "removed": removed, "values": tuple(values)}
        )

    elif isinstance(cmd, RenameColumn):
        position = table.resolve_column(cmd.column)
        old_name = table.rename_column(position, cmd.new_name)
        return cmd.model_copy(update={"position": position, "old_name": old_name})

    elif isinstance(cmd, MoveColumn):
        widths = table.row_widths()
        position = table.move_column(cmd.column, cmd.target)
        return cmd.model_copy(update={"position": position, "widths": widths})

    elif isinstance(cmd, AddRow):
        if cmd.position is not None:
            table.add_row(cmd.position, cmd.values, validate=False)
            return cmd
        position = table.row_count if cmd.index is None else cmd.index
        values = table.add_row(position, cmd.values)
        return cmd.model_copy(update={"position": position, "values": tuple(values)})

    elif isinstance(cmd, DeleteRow):
        position = table.row_count - 1 if cmd.index is None else cmd.index
        removed = table.delete_row(position)
        return cmd.model_copy(update={"position": position, "removed": tuple(removed)})

    elif isinstance(cmd, MoveRow):
        table.move_row(cmd.source, cmd.target)
        return cmd.model_copy(update={"position": cmd.source})

    elif isinstance(cmd, EditCell):
        position = table.resolve_column(cmd.column)
        old = table.set_cell(cmd.row, position, cmd.value)
        new = table.get_cell(cmd.row, position)
        return cmd.model_copy(update={"position": position, "old": old, "new": new})

    elif isinstance(cmd, EditRow):
        old = table.set_row(cmd.row, cmd.values)
        return cmd.model_copy(update={"position": cmd.row, "old": tuple(old)})

    elif isinstance(cmd, EditColumn):
        position = table.resolve_column(cmd.column)
        old = table.set_column(position, cmd.value)
        return cmd.model_copy(update={"position": position, "old": tuple(old)})

    elif isinstance(cmd, Limit):
        if cmd.limiter is None:
            raise ArgumentError(f"Preset '{cmd.preset}' has not been resolved to a limiter")
        position = table.resolve_column(cmd.column)
        previous, old, new = table.install_limiter(position, cmd.limiter)
        return cmd.model_copy(
            update={
                "position": position,
                "previous": previous,
                "old": tuple(old),
                "new": tuple(new),
            }
        )

    elif isinstance(cmd, Schema):
        done: list[CommandModel] = []
        try:
            for entry in cmd.entries:
                done.append(apply_command(table, entry))
        except CedError:
            for bound in reversed(done):
                revert_command(table, bound)
            raise
        return cmd.model_copy(update={"entries": tuple(done), "applied": True})

    raise TypeError(f"Unsupported command: {type(cmd).__name__}")


def revert_command(table: VirtualTable, cmd: CommandModel) -> None:
    """Undo a bound command returned by :func:`apply_command`."""
    if not cmd.bound:
        raise ValueError(f"Command '{getattr(cmd, 'kind', '?')}' was never applied")

    if isinstance(cmd, Create):
        for index in reversed(range(cmd.position, cmd.position + len(cmd.names))):
            table.delete_column(index)

    elif isinstance(cmd, AddColumn):
        table.delete_column(cmd.position)

    elif isinstance(cmd, DeleteColumn):
        table.insert_column(cmd.position, cmd.removed, cmd.values)

    elif isinstance(cmd, RenameColumn):
        table.rename_column(cmd.position, cmd.old_name)

    elif isinstance(cmd, MoveColumn):
        table.move_column(ByIndex(index=cmd.target), cmd.position)
        table.trim_rows(cmd.widths)

    elif isinstance(cmd, AddRow):
        table.delete_row(cmd.position)

    elif isinstance(cmd, DeleteRow):
        table.add_row(cmd.position, cmd.removed, validate=False)

    elif isinstance(cmd, MoveRow):
        table.move_row(cmd.target, cmd.source)

    elif isinstance(cmd, EditCell):
        table.set_cell(cmd.row, cmd.position, cmd.old, validate=False)

    elif isinstance(cmd, EditRow):
        table.set_row(cmd.row, cmd.old, validate=False)

    elif isinstance(cmd, EditColumn):
        table.set_column(cmd.position, cmd.old, validate=False)

    elif isinstance(cmd, Limit):
        table.set_limiter(cmd.position, cmd.previous)
        table.set_column(cmd.position, cmd.old, validate=False)

    elif isinstance(cmd, Schema):
        for entry in reversed(cmd.entries):
            revert_command(table, entry)

    else:
        raise TypeError(f"Unsupported command: {type(cmd).__name__}")


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------
_MESSAGES = {
    "create": "New columns added",
    "add-column": "New column added",
    "delete-column": "Column deleted",
    "rename-column": "Column renamed",
    "move-column": "Column moved",
    "add-row": "New row added",
    "delete-row": "Row deleted",
    "move-row": "Row moved",
    "edit": "Cell content changed",
    "edit-row": "Row content changed",
    "edit-column": "Column content changed",
    "limit": "Limiter updated",
    "schema": "Schema applied",
}


def message_for(cmd: CommandModel) -> str:
    return _MESSAGES.get(getattr(cmd, "kind", ""), "Done")


def change_record(cmd: CommandModel) -> ChangeRecord:
    """Summarize a bound command for the response envelope."""
    kind = getattr(cmd, "kind", "unknown")
    if isinstance(cmd, Create):
        return ChangeRecord(type=kind, target=",".join(cmd.names), after=list(cmd.names))
    if isinstance(cmd, AddColumn):
        return ChangeRecord(type=kind, target=cmd.name, impact={"column": cmd.position})
    if isinstance(cmd, DeleteColumn):
        name = cmd.removed.name if cmd.removed is not None else ""
        return ChangeRecord(
            type=kind,
            target=name,
            before=list(cmd.values),
            impact={"column": cmd.position, "cells": len(cmd.values)},
        )
    if isinstance(cmd, RenameColumn):
        return ChangeRecord(type=kind, target=str(cmd.position), before=cmd.old_name, after=cmd.new_name)
    if isinstance(cmd, MoveColumn):
        return ChangeRecord(type=kind, target=str(cmd.column), before=cmd.position, after=cmd.target)
    if isinstance(cmd, AddRow):
        return ChangeRecord(type=kind, target=str(cmd.position), after=list(cmd.values or ()))
    if isinstance(cmd, DeleteRow):
        return ChangeRecord(type=kind, target=str(cmd.position), before=list(cmd.removed))
    if isinstance(cmd, MoveRow):
        return ChangeRecord(type=kind, target=str(cmd.source), before=cmd.source, after=cmd.target)
    if isinstance(cmd, EditCell):
        return ChangeRecord(
            type=kind, target=f"{cmd.row},{cmd.position}", before=cmd.old, after=cmd.new
        )
    if isinstance(cmd, EditRow):
        return ChangeRecord(type=kind, target=str(cmd.row), before=list(cmd.old), after=list(cmd.values))
    if isinstance(cmd, EditColumn):
        return ChangeRecord(
            type=kind,
            target=str(cmd.column),
            before=list(cmd.old),
            after=cmd.value,
            impact={"cells": len(cmd.old)},
        )
    if isinstance(cmd, Limit):
        changed = sum(1 for a, b in zip(cmd.old, cmd.new) if a != b)
        return ChangeRecord(
            type=kind,
            target=str(cmd.column),
            before=cmd.previous.model_dump(mode="json") if cmd.previous else None,
            after=cmd.limiter.model_dump(mode="json") if cmd.limiter else None,
            impact={"cells": changed},
        )
    if isinstance(cmd, Schema):
        return ChangeRecord(type=kind, target=cmd.path, impact={"columns": len(cmd.entries)})
    return ChangeRecord(type=kind, target="")
