"""Typer CLI: one-shot commands, script execution or the interactive shell."""

from __future__ import annotations

import sys
from typing import Annotated, Optional

import typer

import ced
from ced.contracts.common import ResponseEnvelope
from ced.contracts.errors import CedError
from ced.engine.dispatcher import envelope_for_error, error_envelope, exit_code_for, print_response

_MAIN_HELP = """\
Line-oriented editor for CSV tables with per-column limiters and undo/redo.

`ced data.csv`  opens an interactive shell on data.csv

`ced data.csv -c "add-row 0 1,alice; write"`  runs commands and exits

`ced script.ced`  runs every line of a command file

**Exit codes:** 0=success, 10=parse, 20=validation, 30=structure, 40=history, 50=io, 90=internal
"""

SCRIPT_SUFFIX = ".ced"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ced, {ced.__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="ced",
    help=_MAIN_HELP,
    add_completion=False,
    rich_markup_mode="markdown",
)


def _report(envelope: ResponseEnvelope, *, json_output: bool, log: bool) -> None:
    from ced.shell import report

    report(envelope, out=sys.stdout, err=sys.stderr, json_output=json_output, log=log)


def _emit(envelope: ResponseEnvelope, *, json_output: bool, log: bool = True) -> None:
    _report(envelope, json_output=json_output, log=log)
    raise typer.Exit(exit_code_for(envelope))


def _confirm_overwrite(prompt: str) -> bool:
    return typer.confirm(prompt.removesuffix(" (y/N) ").strip(), default=False)


@app.command()
def run(
    file: Annotated[Optional[str], typer.Argument(help="CSV file to open, or a .ced script to execute.")] = None,
    command: Annotated[
        Optional[str], typer.Option("--command", "-c", help="Commands to run, separated by ';'.")
    ] = None,
    schema: Annotated[Optional[str], typer.Option("--schema", "-s", help="Schema file to apply after loading.")] = None,
    confirm: Annotated[bool, typer.Option("--confirm", "-C", help="Ask before overwriting the file.")] = False,
    no_log: Annotated[bool, typer.Option("--no-log", help="Suppress informational messages.")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Print one JSON envelope per statement.")] = False,
    events: Annotated[bool, typer.Option("--events", help="Emit NDJSON lifecycle events to stderr.")] = False,
    config: Annotated[Optional[str], typer.Option("--config", help="Path to a ced.yaml file.")] = None,
    version: Annotated[
        bool,
        typer.Option("--version", "-V", help="Print version and exit.", callback=_version_callback, is_eager=True),
    ] = False,
) -> None:
    from ced.config import load_config
    from ced.engine.context import TableContext
    from ced.engine.executor import Executor

    try:
        cfg = load_config(config)
        cfg = cfg.model_copy(update={"log": cfg.log and not no_log, "events": cfg.events or events})
        ctx = TableContext(cfg)
    except CedError as e:
        _emit(envelope_for_error("startup", e), json_output=json_output)

    executor = Executor(ctx, confirm=_confirm_overwrite if confirm else None)
    quote = ctx.tokenizer.quote_value

    def step(text: str) -> None:
        envelope = executor.execute(text)
        if not envelope.ok:
            _emit(envelope, json_output=json_output, log=cfg.log)
        if json_output:
            _report(envelope, json_output=True, log=cfg.log)

    if file is not None and file.endswith(SCRIPT_SUFFIX):
        envelope = executor.execute(f"execute {quote(file)}")
        _emit(envelope, json_output=json_output, log=cfg.log)

    if file is not None:
        step(f"import {quote(file)}")
    if schema is not None:
        step(f"schema {quote(schema)}")

    if command is not None:
        for envelope in executor.run_line(command):
            _report(envelope, json_output=json_output, log=cfg.log)
            if not envelope.ok:
                raise typer.Exit(exit_code_for(envelope))
        raise typer.Exit(0)

    from ced.shell import Shell

    Shell(executor, json_output=json_output, log=cfg.log).run()


def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Anything that is not a CedError is a bug; still answer with an envelope.
        env = error_envelope("unknown", "ERR_INTERNAL", str(exc))
        print_response(env)
        raise SystemExit(90) from exc


if __name__ == "__main__":
    main()
