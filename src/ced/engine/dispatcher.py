"""Response envelope helpers and exit codes."""

from __future__ import annotations

import sys
from typing import Any, TextIO

import orjson

from ced.contracts.common import (
    ChangeRecord,
    ErrorDetail,
    HistoryInfo,
    Metrics,
    ResponseEnvelope,
    Target,
)
from ced.contracts.errors import CedError

# Exit code mapping, keyed by error family
EXIT_CODES = {
    "success": 0,
    "parse": 10,
    "validation": 20,
    "structure": 30,
    "history": 40,
    "io": 50,
    "internal": 90,
}

_FAMILY_BY_PREFIX = {
    "ERR_UNKNOWN_COMMAND": "parse",
    "ERR_ARGUMENT": "parse",
    "ERR_PARSE": "parse",
    "ERR_UNKNOWN_PRESET": "parse",
    "ERR_NOTHING_TO": "history",
    "ERR_HISTORY": "history",
    "ERR_IO": "io",
}


def success_envelope(
    command: str,
    result: Any,
    *,
    input: str = "",
    target: Target | None = None,
    changes: list[ChangeRecord] | None = None,
    history: HistoryInfo | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=True,
        command=command,
        input=input,
        target=target or Target(),
        result=result,
        changes=changes or [],
        metrics=Metrics(duration_ms=duration_ms),
        history=history or HistoryInfo(),
    )


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    input: str = "",
    target: Target | None = None,
    details: dict | None = None,
    history: HistoryInfo | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=False,
        command=command,
        input=input,
        target=target or Target(),
        errors=[ErrorDetail(code=code, message=message, details=details)],
        metrics=Metrics(duration_ms=duration_ms),
        history=history or HistoryInfo(),
    )


def envelope_for_error(
    command: str,
    error: CedError,
    **kwargs: Any,
) -> ResponseEnvelope:
    details = {"family": error.family, **error.details}
    return error_envelope(command, error.code, error.message, details=details, **kwargs)


def output_json(envelope: ResponseEnvelope, *, indent: bool = True) -> str:
    """Serialize envelope to JSON string using orjson."""
    data = envelope.model_dump(mode="json")
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(data, option=option).decode()


def print_response(envelope: ResponseEnvelope, stream: TextIO | None = None) -> None:
    """Print response as JSON (stdout by default)."""
    (stream or sys.stdout).write(output_json(envelope) + "\n")


def family_of(code: str) -> str:
    code = code.upper()
    for prefix, family in _FAMILY_BY_PREFIX.items():
        if code.startswith(prefix):
            return family
    if code in ("ERR_INTERNAL", ""):
        return "internal"
    if code in ("ERR_DUPLICATE_COLUMN", "ERR_INVALID_NAME", "ERR_COLUMN_NOT_FOUND",
                "ERR_INDEX_OUT_OF_RANGE", "ERR_ARITY_MISMATCH", "ERR_MODE", "ERR_STRUCTURE"):
        return "structure"
    return "validation"


def exit_code_for(envelope: ResponseEnvelope) -> int:
    """Determine exit code from envelope errors."""
    if envelope.ok:
        return EXIT_CODES["success"]
    if not envelope.errors:
        return EXIT_CODES["internal"]
    error = envelope.errors[0]
    family = (error.details or {}).get("family") or family_of(error.code)
    return EXIT_CODES.get(family, EXIT_CODES["internal"])
