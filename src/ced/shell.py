"""Interactive shell: read lines, run them, report the envelopes."""

from __future__ import annotations

import sys
from typing import TextIO

from ced.contracts.commands import Limit
from ced.contracts.common import ResponseEnvelope
from ced.contracts.errors import ColumnNotFound, ValidationError
from ced.contracts.limiter import Limiter, parse_bool
from ced.contracts.table import ByIndex, parse_selector
from ced.engine.dispatcher import exit_code_for, print_response
from ced.engine.executor import Executor
from ced.engine.table import VirtualTable
from ced.validation.limiter import validate

PROMPT = ">> "
CANCEL_HINT = "Type comma(,) to exit input"


def report(
    envelope: ResponseEnvelope,
    *,
    out: TextIO,
    err: TextIO,
    json_output: bool = False,
    log: bool = True,
) -> None:
    """Write one envelope either as JSON or as human-readable lines."""
    if json_output:
        print_response(envelope, out)
        return
    if not envelope.ok:
        for error in envelope.errors:
            err.write(f"Error ({error.code}): {error.message}\n")
        if envelope.input:
            err.write(f"  input: {envelope.input}\n")
        return
    result = envelope.result if isinstance(envelope.result, dict) else {}
    if result.get("text"):
        out.write(result["text"] + "\n")
    if log and result.get("message"):
        out.write(result["message"] + "\n")


class ShellPrompter:
    """Field-by-field prompts that validate each answer before moving on.

    Accepted answers go into a private buffer; the table is only touched once
    the executor applies the finished command. A lone delimiter cancels.
    """

    def __init__(self, stdin: TextIO, stdout: TextIO, *, cancel: str = ",") -> None:
        self.stdin = stdin
        self.stdout = stdout
        self.cancel = cancel

    def _ask(self, prompt: str) -> str | None:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        answer = line.rstrip("\r\n")
        if answer.strip() == self.cancel:
            return None
        return answer

    def row(self, table: VirtualTable, existing: list[str] | None) -> list[str | None] | None:
        self.stdout.write(CANCEL_HINT + "\n")
        values: list[str | None] = []
        for index, column in enumerate(table.columns):
            limiter = None if table.raw else column.limiter
            if existing is not None:
                shown = existing[index] if index < len(existing) else ""
            else:
                shown = limiter.default if limiter is not None and limiter.default is not None else ""
            while True:
                answer = self._ask(f"{column.name}~{shown} = ")
                if answer is None:
                    return None
                if existing is not None and answer == "":
                    values.append(None)
                    break
                try:
                    values.append(validate(answer, limiter))
                    break
                except ValidationError as e:
                    self.stdout.write(f"Invalid value: {e.message}\n")
        return values

    def limiter(self, table: VirtualTable) -> Limit | None:
        self.stdout.write(CANCEL_HINT + "\n")
        while True:
            name = self._ask("Column = ")
            if name is None:
                return None
            try:
                position = table.resolve_column(parse_selector(name.strip()))
                break
            except ColumnNotFound as e:
                self.stdout.write(f"{e.message}\n")
        fields: list[str] = []
        for prompt in ("Type (Text|Number) = ", "Default = ", "Variants(a b c) = ", "Pattern = "):
            answer = self._ask(prompt)
            if answer is None:
                return None
            fields.append(answer.strip() if prompt != "Pattern = " else answer)
        while True:
            answer = self._ask("Force update(default=true) = ")
            if answer is None:
                return None
            try:
                force = True if answer.strip() == "" else parse_bool(answer)
                break
            except ValueError as e:
                self.stdout.write(f"{e}\n")
        limiter = Limiter.from_fields(fields, force=force)
        return Limit(column=ByIndex(index=position), limiter=limiter, force=force)


class Shell:
    """Line loop over ``stdin`` in the manner of a stdio server."""

    def __init__(
        self,
        executor: Executor,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        json_output: bool = False,
        log: bool = True,
        prompt: str = PROMPT,
    ) -> None:
        self.executor = executor
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.json_output = json_output
        self.log = log
        self.prompt = prompt
        if executor.prompter is None:
            executor.prompter = ShellPrompter(
                self.stdin, self.stdout, cancel=executor.ctx.config.delimiter
            )

    def run(self) -> int:
        """Run until ``exit`` or end of input; returns the last exit code."""
        code = 0
        while self.executor.running:
            if self.prompt and not self.json_output:
                self.stdout.write(self.prompt)
                self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            envelopes = self.executor.run_line(line)
            for envelope in envelopes:
                report(
                    envelope,
                    out=self.stdout,
                    err=self.stderr,
                    json_output=self.json_output,
                    log=self.log,
                )
                code = exit_code_for(envelope)
            self.stdout.flush()
        return code
