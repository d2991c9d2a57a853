"""Command-name resolution and argument parsing.

A statement's first token names the command (full name or alias); the rest
are checked against that command's signature and turned into either a
recordable command model or a list of plain arguments for session commands.
"""

from __future__ import annotations

from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from ced.contracts.commands import (
    AddColumn,
    AddRow,
    Command,
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
from ced.contracts.errors import ArgumentError, CedError, UnknownCommand
from ced.contracts.limiter import LIMITER_ATTRIBUTE_LEN, Limiter, parse_bool, parse_value_type
from ced.contracts.table import parse_selector
from ced.engine.tokenizer import Tokenizer


class CommandSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    aliases: tuple[str, ...] = ()
    usage: str = ""
    summary: str = ""
    recordable: bool = False


_SPECS = [
    CommandSpec(name="create", aliases=("c",), usage="create NAMES", summary="Append columns", recordable=True),
    CommandSpec(
        name="add-column",
        aliases=("ac",),
        usage="add-column NAME [INDEX] [TYPE] [PLACEHOLDER]",
        summary="Insert a column",
        recordable=True,
    ),
    CommandSpec(name="delete-column", aliases=("dc",), usage="delete-column [COLUMN]", summary="Delete a column", recordable=True),
    CommandSpec(
        name="rename-column",
        aliases=("rc",),
        usage="rename-column COLUMN NEW_NAME",
        summary="Rename a column",
        recordable=True,
    ),
    CommandSpec(name="move-column", aliases=("mc",), usage="move-column COLUMN TARGET", summary="Move a column", recordable=True),
    CommandSpec(name="add-row", aliases=("ar",), usage="add-row [INDEX] [VALUES]", summary="Insert a row", recordable=True),
    CommandSpec(name="delete-row", aliases=("dr",), usage="delete-row [INDEX]", summary="Delete a row", recordable=True),
    CommandSpec(name="move-row", aliases=("move", "m"), usage="move-row FROM TO", summary="Move a row", recordable=True),
    CommandSpec(name="edit", aliases=("edit-cell", "e"), usage="edit ROW,COLUMN [VALUE]", summary="Edit a cell", recordable=True),
    CommandSpec(name="edit-row", aliases=("er",), usage="edit-row ROW [VALUES]", summary="Edit a row", recordable=True),
    CommandSpec(
        name="edit-column",
        aliases=("ec",),
        usage="edit-column COLUMN VALUE",
        summary="Set every cell of a column",
        recordable=True,
    ),
    CommandSpec(
        name="limit",
        aliases=("l",),
        usage="limit COLUMN,TYPE,DEFAULT,VARIANTS,PATTERN,FORCE | limit COLUMN [TYPE] [key=value...]",
        summary="Set a column limiter",
        recordable=True,
    ),
    CommandSpec(
        name="limit-preset",
        aliases=("lp",),
        usage="limit-preset COLUMN PRESET [FORCE]",
        summary="Set a column limiter from a preset",
        recordable=True,
    ),
    CommandSpec(name="schema", aliases=("s",), usage="schema FILE [FORCE]", summary="Apply a schema file", recordable=True),
    CommandSpec(name="undo", aliases=("u",), usage="undo", summary="Undo the last change"),
    CommandSpec(name="redo", aliases=("r",), usage="redo", summary="Redo the last undone change"),
    CommandSpec(name="print", aliases=("p",), usage="print [VIEWER...]", summary="Print the table"),
    CommandSpec(name="print-cell", aliases=("pc",), usage="print-cell ROW,COLUMN [MODE]", summary="Print a cell"),
    CommandSpec(name="print-row", aliases=("pr",), usage="print-row ROW [VIEWER...]", summary="Print a row"),
    CommandSpec(name="print-column", aliases=("pl",), usage="print-column [COLUMN] [MODE]", summary="Print a column"),
    CommandSpec(name="history", aliases=("y",), usage="history", summary="Show undo/redo depth"),
    CommandSpec(name="import", aliases=("i",), usage="import FILE [HAS_HEADER] [cr]", summary="Load a CSV file"),
    CommandSpec(name="import-raw", aliases=("ir",), usage="import-raw FILE [HAS_HEADER] [cr]", summary="Load a CSV file as an array"),
    CommandSpec(name="export", aliases=("x",), usage="export FILE", summary="Write the table to another file"),
    CommandSpec(name="write", aliases=("w",), usage="write [CACHE]", summary="Overwrite the source file"),
    CommandSpec(name="schema-init", aliases=("si",), usage="schema-init [FILE]", summary="Write an empty schema file"),
    CommandSpec(name="schema-export", aliases=("se",), usage="schema-export FILE", summary="Write the limiters as a schema"),
    CommandSpec(name="execute", aliases=("ex",), usage="execute FILE", summary="Run commands from a file"),
    CommandSpec(name="help", aliases=("h",), usage="help [COMMAND]", summary="Show help"),
    CommandSpec(name="version", aliases=("v",), usage="version", summary="Show the version"),
    CommandSpec(name="exit", aliases=("quit", "q"), usage="exit", summary="Leave the shell"),
]

COMMANDS: dict[str, CommandSpec] = {spec.name: spec for spec in _SPECS}
ALIASES: dict[str, str] = {alias: spec.name for spec in _SPECS for alias in spec.aliases}

LIMIT_KEYS = ("type", "default", "variants", "pattern", "placeholder", "force")


class Statement(BaseModel):
    """A parsed statement.

    ``command`` is set for recordable commands, ``args`` holds the unquoted
    arguments of session commands, and ``prompt`` names the interactive form
    still needed to complete ``command``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    text: str = ""
    command: Command | None = None
    args: list[str] = Field(default_factory=list)
    prompt: str | None = None

    @property
    def spec(self) -> CommandSpec:
        return COMMANDS[self.name]


def resolve_name(token: str) -> str:
    name = token.lower()
    if name in COMMANDS:
        return name
    if name in ALIASES:
        return ALIASES[name]
    raise UnknownCommand(f"Unknown command '{token}'", command=token)


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------
def _index(token: str, position: int, what: str = "row") -> int:
    if token.isascii() and token.isdigit():
        return int(token)
    raise ArgumentError(f"'{token}' is not a valid {what} number", position=position, token=token)


def _flag(token: str, position: int) -> bool:
    try:
        return parse_bool(token)
    except ValueError as e:
        raise ArgumentError(str(e), position=position, token=token) from e


def _arity(name: str, args: list[str], minimum: int, maximum: int | None) -> None:
    if len(args) < minimum:
        raise ArgumentError(
            f"Insufficient arguments for {name}: {COMMANDS[name].usage}",
            position=len(args) + 1,
        )
    if maximum is not None and len(args) > maximum:
        raise ArgumentError(
            f"Too many arguments for {name}: {COMMANDS[name].usage}",
            position=maximum + 1,
            token=args[maximum],
        )


def _coordinate(tok: Tokenizer, raw: str, position: int) -> tuple[int, str]:
    parts = tok.split_on(raw)
    if len(parts) != 2:
        raise ArgumentError(
            f"'{tok.unquote(raw)}' is not a cell coordinate (expected ROW,COLUMN)",
            position=position,
        )
    return _index(parts[0], position), parts[1]


# ---------------------------------------------------------------------------
# limit
# ---------------------------------------------------------------------------
def _limit_from_fields(tok: Tokenizer, raw: str) -> Limit:
    fields = tok.split_on(raw)
    if len(fields) != LIMITER_ATTRIBUTE_LEN + 2:
        raise ArgumentError(
            f"limit needs {LIMITER_ATTRIBUTE_LEN + 2} comma separated values "
            "(column,type,default,variants,pattern,force)",
            position=1,
        )
    column, force_text = fields[0], fields[-1]
    force = True if force_text == "" else _flag(force_text, 1)
    limiter = Limiter.from_fields(fields[1 : LIMITER_ATTRIBUTE_LEN + 1], force=force)
    return Limit(column=parse_selector(column), limiter=limiter, force=force)


def _limit_from_keywords(tok: Tokenizer, args: list[str]) -> Limit:
    column = tok.unquote(args[0])
    fields: dict[str, object] = {}
    for position, raw in enumerate(args[1:], start=2):
        key, sep, value_raw = raw.partition("=")
        key = key.strip().lower()
        if not sep:
            if position == 2:
                fields["type"] = tok.unquote(raw)
                continue
            raise ArgumentError(f"Expected key=value but got '{raw}'", position=position, token=raw)
        if key not in LIMIT_KEYS:
            raise ArgumentError(
                f"Unknown limiter field '{key}' (expected one of: {', '.join(LIMIT_KEYS)})",
                position=position,
                token=raw,
            )
        if key == "force":
            fields["force"] = _flag(tok.unquote(value_raw), position)
        elif key == "variants":
            items = tok.split_on(value_raw)
            fields["variants"] = items if len(items) > 1 else tok.unquote(value_raw).split()
        else:
            fields[key] = tok.unquote(value_raw)
    limiter = Limiter.create(**fields)
    return Limit(column=parse_selector(column), limiter=limiter, force=limiter.force)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def parse_statement(text: str, tokenizer: Tokenizer | None = None) -> Statement:
    """Parse one statement (no statement separators)."""
    tok = tokenizer or Tokenizer()
    tokens = tok.tokenize(text)
    if not tokens:
        raise ArgumentError("Empty command", position=0)
    name = resolve_name(tok.unquote(tokens[0]))
    raw = tokens[1:]
    args = [tok.unquote(t) for t in raw]

    def statement(**kwargs: object) -> Statement:
        return Statement(name=name, text=text, **kwargs)

    try:
        return _parse(name, tok, raw, args, statement)
    except CedError as e:
        e.details.setdefault("command", name)
        raise


def _parse(  # noqa: C901
    name: str,
    tok: Tokenizer,
    raw: list[str],
    args: list[str],
    statement: Callable[..., Statement],
) -> Statement:
    if name == "create":
        _arity(name, args, 1, None)
        # "create id, name" reads the same as "create id,name"
        names = tok.split_on(" ".join(raw))
        return statement(command=Create(names=tuple(names)))

    if name == "add-column":
        _arity(name, args, 1, 4)
        index = _index(args[1], 2, "column") if len(args) > 1 else None
        value_type = None
        if len(args) > 2:
            try:
                value_type = parse_value_type(args[2])
            except ValueError as e:
                raise ArgumentError(str(e), position=3, token=args[2]) from e
        placeholder = args[3] if len(args) > 3 else None
        return statement(
            command=AddColumn(name=args[0], index=index, type=value_type, placeholder=placeholder)
        )

    if name == "delete-column":
        _arity(name, args, 0, 1)
        column = parse_selector(args[0]) if args else None
        return statement(command=DeleteColumn(column=column))

    if name == "rename-column":
        _arity(name, args, 2, 2)
        return statement(command=RenameColumn(column=parse_selector(args[0]), new_name=args[1]))

    if name == "move-column":
        _arity(name, args, 2, 2)
        return statement(
            command=MoveColumn(column=parse_selector(args[0]), target=_index(args[1], 2, "column"))
        )

    if name == "add-row":
        _arity(name, args, 0, 2)
        index = _index(args[0], 1) if args else None
        if len(args) < 2:
            return statement(command=AddRow(index=index), prompt="add-row")
        return statement(command=AddRow(index=index, values=tuple(tok.split_on(raw[1]))))

    if name == "delete-row":
        _arity(name, args, 0, 1)
        return statement(command=DeleteRow(index=_index(args[0], 1) if args else None))

    if name == "move-row":
        _arity(name, args, 2, 2)
        return statement(command=MoveRow(source=_index(args[0], 1), target=_index(args[1], 2)))

    if name == "edit":
        _arity(name, args, 1, None)
        row, column = _coordinate(tok, raw[0], 1)
        value = " ".join(args[1:])
        return statement(command=EditCell(row=row, column=parse_selector(column), value=value))

    if name == "edit-row":
        _arity(name, args, 1, 2)
        row = _index(args[0], 1)
        if len(args) < 2:
            return statement(command=EditRow(row=row, values=()), prompt="edit-row")
        return statement(command=EditRow(row=row, values=tuple(tok.split_on(raw[1]))))

    if name == "edit-column":
        _arity(name, args, 2, None)
        return statement(
            command=EditColumn(column=parse_selector(args[0]), value=" ".join(args[1:]))
        )

    if name == "limit":
        if not args:
            return statement(prompt="limit")
        if len(args) == 1 and len(tok.split_on(raw[0])) > 1:
            return statement(command=_limit_from_fields(tok, raw[0]))
        return statement(command=_limit_from_keywords(tok, raw))

    if name == "limit-preset":
        _arity(name, args, 2, 3)
        force = _flag(args[2], 3) if len(args) > 2 else False
        return statement(command=Limit(column=parse_selector(args[0]), preset=args[1], force=force))

    if name == "schema":
        _arity(name, args, 1, 2)
        force = _flag(args[1], 2) if len(args) > 1 else False
        return statement(command=Schema(path=args[0], force=force))

    # -- session commands ---------------------------------------------------
    if name in ("undo", "redo", "history", "version", "exit"):
        _arity(name, args, 0, 0)
    elif name in ("import", "import-raw"):
        _arity(name, args, 1, 3)
        if len(args) > 1:
            _flag(args[1], 2)
        if len(args) > 2 and args[2].lower() != "cr":
            raise ArgumentError(f"Unknown line ending '{args[2]}' (expected cr)", position=3)
    elif name in ("export", "schema-export", "execute"):
        _arity(name, args, 1, 1)
    elif name == "write":
        _arity(name, args, 0, 1)
        if args:
            _flag(args[0], 1)
    elif name in ("schema-init", "help"):
        _arity(name, args, 0, 1)
    elif name == "print-cell":
        _arity(name, args, 1, 2)
        _coordinate(tok, raw[0], 1)
    elif name == "print-row":
        _arity(name, args, 1, None)
        _index(args[0], 1)
    elif name == "print-column":
        _arity(name, args, 0, 2)
    return statement(args=args)
