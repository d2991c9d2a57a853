"""Executor: statement text in, response envelope out.

Each statement is parsed, completed (prompts, presets, schema files), applied
to the session table and, if it is recordable, pushed onto the history. A
failure at any step leaves the table and history untouched and comes back as
an error envelope carrying the original input.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Protocol, Sequence

from ced import __version__
from ced.contracts.commands import CommandModel, Limit, Schema
from ced.contracts.common import ChangeRecord, HistoryInfo, ResponseEnvelope
from ced.contracts.errors import ArgumentError, CedError, ModeError, TableIOError
from ced.contracts.limiter import parse_bool
from ced.contracts.table import ByName, parse_selector
from ced.engine.context import TableContext
from ced.engine.dispatcher import envelope_for_error, success_envelope
from ced.engine.history import History, LinearHistory
from ced.engine.operations import apply_command, change_record, message_for
from ced.engine.parser import Statement, parse_statement
from ced.engine.table import VirtualTable
from ced.observe.events import EditorEvent, EventEmitter, Timer

MAX_EXECUTE_DEPTH = 8
SCHEMA_INIT_FILE = "ced_schema.csv"


class Prompter(Protocol):
    """Collects interactive input for commands given without values.

    Both methods return ``None`` when the user cancels.
    """

    def row(self, table: VirtualTable, existing: list[str] | None) -> list[str | None] | None: ...

    def limiter(self, table: VirtualTable) -> Limit | None: ...


class Executor:
    """Runs statements against one session's table and history."""

    def __init__(
        self,
        ctx: TableContext,
        *,
        history: History | None = None,
        events: EventEmitter | None = None,
        prompter: Prompter | None = None,
        confirm: Callable[[str], bool] | None = None,
        viewer: Callable[[Sequence[str], str], int] | None = None,
    ) -> None:
        self.ctx = ctx
        self.events = events or EventEmitter(enabled=ctx.config.events)
        self.history = history or LinearHistory(ctx.config.history_capacity, events=self.events)
        self.prompter = prompter
        self.confirm = confirm
        if viewer is None:
            from ced.view.viewer import run_viewer

            viewer = run_viewer
        self.viewer = viewer
        self.running = True
        self._depth = 0

    @property
    def table(self) -> VirtualTable:
        return self.ctx.table

    def history_info(self) -> HistoryInfo:
        return HistoryInfo(
            undo=len(self.history.past),
            redo=len(self.history.future),
            capacity=self.history.capacity,
        )

    # -- entry points -------------------------------------------------------

    def run_line(self, line: str) -> list[ResponseEnvelope]:
        """Run every statement of ``line``, stopping at the first failure."""
        envelopes: list[ResponseEnvelope] = []
        for text in self.ctx.tokenizer.split_statements(line):
            envelope = self.execute(text)
            envelopes.append(envelope)
            if not envelope.ok or not self.running:
                break
        return envelopes

    def execute(self, text: str) -> ResponseEnvelope:
        """Run one statement and wrap the outcome in an envelope."""
        name = ""
        error: CedError | None = None
        result: dict[str, Any] = {}
        changes: list[ChangeRecord] = []
        with Timer() as timer:
            try:
                stmt = parse_statement(text, self.ctx.tokenizer)
                name = stmt.name
                result, changes = self._run(stmt)
            except CedError as e:
                error = e
        if error is not None:
            self.events.emit(
                EditorEvent.COMMAND_FAILED,
                {"command": name, "input": text, "code": error.code, "message": error.message},
            )
            return envelope_for_error(
                name,
                error,
                input=text,
                target=self.ctx.target(),
                history=self.history_info(),
                duration_ms=timer.elapsed_ms,
            )
        return success_envelope(
            name,
            result,
            input=text,
            target=self.ctx.target(),
            changes=changes,
            history=self.history_info(),
            duration_ms=timer.elapsed_ms,
        )

    # -- dispatch -----------------------------------------------------------

    def _run(self, stmt: Statement) -> tuple[dict[str, Any], list[ChangeRecord]]:
        if stmt.spec.recordable:
            cmd = self._complete(stmt)
            if cmd is None:
                return {"message": "Input cancelled", "cancelled": True}, []
            bound = apply_command(self.table, cmd)
            self.history.record(bound)
            self.events.emit(EditorEvent.COMMAND_APPLIED, {"command": stmt.name, "input": stmt.text})
            return {"message": message_for(bound)}, [change_record(bound)]

        name = stmt.name
        args = stmt.args

        if name == "undo":
            cmd = self.history.undo(self.table)
            return {"message": f"Undid {cmd.kind}"}, [change_record(cmd)]

        elif name == "redo":
            cmd = self.history.redo(self.table)
            return {"message": f"Redid {cmd.kind}"}, [change_record(cmd)]

        elif name == "print":
            viewer = args or self.ctx.config.viewer
            if viewer:
                from ced.io.csvfile import to_csv_text

                self.viewer(viewer, to_csv_text(self.table, delimiter=self.ctx.config.delimiter))
                return {"viewer": list(viewer)}, []
            from ced.view.render import render_table

            return {"text": render_table(self.table, delimiter=self.ctx.config.delimiter)}, []

        elif name == "print-cell":
            from ced.view.render import render_cell

            coordinate = self.ctx.tokenizer.split_on(args[0])
            row = int(coordinate[0])
            column = self.table.resolve_column(parse_selector(coordinate[1]))
            mode = args[1] if len(args) > 1 else "simple"
            return {"text": render_cell(self.table, row, column, mode)}, []

        elif name == "print-row":
            row = int(args[0])
            viewer = args[1:] or self.ctx.config.viewer
            if viewer:
                from ced.io.csvfile import rows_to_text

                text = rows_to_text([self.table.get_row(row)], delimiter=self.ctx.config.delimiter)
                self.viewer(viewer, text)
                return {"viewer": list(viewer)}, []
            from ced.view.render import render_row

            return {"text": render_row(self.table, row, delimiter=self.ctx.config.delimiter)}, []

        elif name == "print-column":
            from ced.view.render import describe_column, render_columns

            if not args:
                return {"text": render_columns(self.table)}, []
            column = self.table.columns[self.table.resolve_column(parse_selector(args[0]))]
            mode = args[1] if len(args) > 1 else "simple"
            return {"text": describe_column(column, mode)}, []

        elif name == "history":
            info = self.history_info()
            text = f"Undo: {info.undo} / Redo: {info.redo} / Capacity: {info.capacity}"
            return {"text": text, **info.model_dump()}, []

        elif name in ("import", "import-raw"):
            return self._import(args, raw=name == "import-raw"), []

        elif name == "export":
            self.ctx.save(args[0])
            return {"message": f"Exported to {args[0]}", "path": args[0]}, []

        elif name == "write":
            cache = parse_bool(args[0]) if args else True
            if self.confirm is not None and not self.confirm("Overwrite ? (y/N) "):
                return {"message": "Write cancelled", "cancelled": True}, []
            backup_path = self.ctx.save(make_backup=cache)
            return {"message": f"Wrote {self.ctx.path}", "path": str(self.ctx.path), "backup": backup_path}, []

        elif name == "schema-init":
            return self._schema_init(args[0] if args else SCHEMA_INIT_FILE), []

        elif name == "schema-export":
            from ced.io.csvfile import rows_to_text
            from ced.io.fileops import write_text_locked
            from ced.io.schema import export_schema

            write_text_locked(args[0], rows_to_text(export_schema(self.table)))
            return {"message": f"Schema exported to {args[0]}", "path": args[0]}, []

        elif name == "execute":
            return self._execute_file(args[0])

        elif name == "help":
            from ced.help.text import command_help, general_help

            return {"text": command_help(args[0]) if args else general_help()}, []

        elif name == "version":
            return {"text": f"ced, {__version__}"}, []

        elif name == "exit":
            self.running = False
            return {"message": "Exiting"}, []

        raise ArgumentError(f"Command '{name}' cannot be run here", position=0)

    # -- helpers ------------------------------------------------------------

    def _require_prompter(self) -> Prompter:
        if self.prompter is None:
            raise ArgumentError("interactive input is not available; pass the values explicitly")
        return self.prompter

    def _complete(self, stmt: Statement) -> CommandModel | None:
        """Fill in prompted values, presets and schema entries."""
        cmd = stmt.command
        if stmt.prompt == "add-row":
            values = self._require_prompter().row(self.table, None)
            if values is None:
                return None
            cmd = cmd.model_copy(update={"values": tuple(v or "" for v in values)})
        elif stmt.prompt == "edit-row":
            existing = self.table.get_row(cmd.row)
            values = self._require_prompter().row(self.table, existing)
            if values is None:
                return None
            cmd = cmd.model_copy(update={"values": tuple(values)})
        elif stmt.prompt == "limit":
            if self.table.raw:
                raise ModeError("Cannot set a limiter in raw mode")
            cmd = self._require_prompter().limiter(self.table)
            if cmd is None:
                return None

        if isinstance(cmd, Limit) and cmd.limiter is None and cmd.preset is not None:
            preset = self.ctx.presets.get(cmd.preset)
            cmd = cmd.model_copy(update={"limiter": preset.model_copy(update={"force": cmd.force})})
        elif isinstance(cmd, Schema) and not cmd.entries:
            from ced.io.schema import load_schema

            if self.table.raw:
                raise ModeError("Cannot apply a schema in raw mode")
            entries = tuple(
                Limit(column=ByName(name=column), limiter=limiter, force=limiter.force)
                for column, limiter in load_schema(cmd.path, force=cmd.force)
            )
            cmd = cmd.model_copy(update={"entries": entries})
        return cmd

    def _import(self, args: list[str], *, raw: bool) -> dict[str, Any]:
        has_header = parse_bool(args[1]) if len(args) > 1 else True
        cr = len(args) > 2
        table = self.ctx.load(args[0], has_header=has_header, raw=raw, cr=cr)
        self.history.clear()
        self.events.emit(
            EditorEvent.TABLE_IMPORTED,
            {
                "path": str(self.ctx.path),
                "mode": table.mode,
                "rows": table.row_count,
                "columns": table.column_count,
            },
        )
        return {
            "message": f"Imported {self.ctx.path}",
            "path": str(self.ctx.path),
            "fingerprint": self.ctx.fp,
            "rows": table.row_count,
            "columns": table.column_count,
        }

    def _schema_init(self, path: str) -> dict[str, Any]:
        from ced.io.csvfile import rows_to_text
        from ced.io.fileops import write_text_locked
        from ced.io.schema import SCHEMA_HEADER

        if Path(path).exists():
            raise TableIOError(f"{path} already exists", path=path)
        write_text_locked(path, rows_to_text([SCHEMA_HEADER]))
        return {"message": f"Schema file created at {path}", "path": path}

    def _execute_file(self, path: str) -> tuple[dict[str, Any], list[ChangeRecord]]:
        """Run a command file line by line; the first failure stops it."""
        from ced.io.fileops import read_text_safe

        if self._depth >= MAX_EXECUTE_DEPTH:
            raise ArgumentError(f"execute is nested more than {MAX_EXECUTE_DEPTH} levels deep")
        try:
            lines = read_text_safe(path).splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise TableIOError(f"Failed to read {path} for execution: {e}", path=path) from e

        changes: list[ChangeRecord] = []
        texts: list[str] = []
        executed = 0
        self._depth += 1
        try:
            for number, line in enumerate(lines, start=1):
                if line.lstrip().startswith("#"):
                    continue
                for text in self.ctx.tokenizer.split_statements(line):
                    try:
                        step_result, step_changes = self._run(parse_statement(text, self.ctx.tokenizer))
                    except CedError as e:
                        e.message = f"Line : {number} -> {e.message}"
                        e.details.setdefault("line", number)
                        e.details.setdefault("statement", text)
                        raise
                    executed += 1
                    changes.extend(step_changes)
                    if step_result.get("text"):
                        texts.append(step_result["text"])
                    if not self.running:
                        break
                if not self.running:
                    break
        finally:
            self._depth -= 1
        result = {"message": f"Executed {executed} command(s) from {path}", "executed": executed}
        if texts:
            result["text"] = "\n".join(texts)
        return result, changes
