"""Recordable command models.

Each command is a frozen model tagged by ``kind``. The parser fills in the
user's arguments; applying a command returns a copy whose memento fields
(``position``, ``old``, ``removed`` ...) hold what is needed to revert it.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ced.contracts.limiter import Limiter, ValueType
from ced.contracts.table import Column, ColumnSelector


class CommandModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def bound(self) -> bool:
        """True once the command has been applied and carries its memento."""
        return getattr(self, "position", None) is not None


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------
class Create(CommandModel):
    kind: Literal["create"] = "create"
    names: tuple[str, ...]
    position: int | None = None


class AddColumn(CommandModel):
    kind: Literal["add-column"] = "add-column"
    name: str
    index: int | None = None
    type: ValueType | None = None
    placeholder: str | None = None
    position: int | None = None


class DeleteColumn(CommandModel):
    kind: Literal["delete-column"] = "delete-column"
    column: ColumnSelector | None = None
    position: int | None = None
    removed: Column | None = None
    values: tuple[str | None, ...] = ()


class RenameColumn(CommandModel):
    kind: Literal["rename-column"] = "rename-column"
    column: ColumnSelector
    new_name: str
    position: int | None = None
    old_name: str | None = None


class MoveColumn(CommandModel):
    kind: Literal["move-column"] = "move-column"
    column: ColumnSelector
    target: int
    position: int | None = None
    widths: tuple[int, ...] = ()


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------
class AddRow(CommandModel):
    kind: Literal["add-row"] = "add-row"
    index: int | None = None
    values: tuple[str, ...] | None = None
    position: int | None = None


class DeleteRow(CommandModel):
    kind: Literal["delete-row"] = "delete-row"
    index: int | None = None
    position: int | None = None
    removed: tuple[str, ...] = ()


class MoveRow(CommandModel):
    kind: Literal["move-row"] = "move-row"
    source: int
    target: int
    position: int | None = None


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------
class EditCell(CommandModel):
    kind: Literal["edit"] = "edit"
    row: int
    column: ColumnSelector
    value: str = ""
    position: int | None = None
    old: str | None = None
    new: str | None = None


class EditRow(CommandModel):
    """Replace a row; ``None`` entries keep the current cell."""

    kind: Literal["edit-row"] = "edit-row"
    row: int
    values: tuple[str | None, ...]
    position: int | None = None
    old: tuple[str, ...] = ()


class EditColumn(CommandModel):
    kind: Literal["edit-column"] = "edit-column"
    column: ColumnSelector
    value: str
    position: int | None = None
    old: tuple[str | None, ...] = ()


# ---------------------------------------------------------------------------
# Limiters
# ---------------------------------------------------------------------------
class Limit(CommandModel):
    """Install a limiter on a column.

    ``preset`` names a preset to resolve into ``limiter`` before applying;
    ``force`` then overrides the preset's own flag.
    """

    kind: Literal["limit"] = "limit"
    column: ColumnSelector
    limiter: Limiter | None = None
    preset: str | None = None
    force: bool = False
    position: int | None = None
    previous: Limiter | None = None
    old: tuple[str, ...] = ()
    new: tuple[str, ...] = ()


class Schema(CommandModel):
    """Install every limiter of a schema file as one history entry."""

    kind: Literal["schema"] = "schema"
    path: str
    force: bool = False
    entries: tuple[Limit, ...] = ()
    applied: bool = False

    @property
    def bound(self) -> bool:
        return self.applied


Command = Annotated[
    Union[
        Create,
        AddColumn,
        DeleteColumn,
        RenameColumn,
        MoveColumn,
        AddRow,
        DeleteRow,
        MoveRow,
        EditCell,
        EditRow,
        EditColumn,
        Limit,
        Schema,
    ],
    Field(discriminator="kind"),
]
