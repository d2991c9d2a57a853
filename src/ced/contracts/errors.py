"""Error taxonomy shared by the tokenizer, table, executor and history."""

from __future__ import annotations

from typing import Any


class CedError(Exception):
    """Base class for every error reported back to the shell."""

    code = "ERR_INTERNAL"
    family = "internal"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = {k: v for k, v in details.items() if v is not None}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------
class ParseError(CedError):
    family = "parse"
    code = "ERR_PARSE"


class UnknownCommand(ParseError):
    code = "ERR_UNKNOWN_COMMAND"


class ArgumentError(ParseError):
    """Raised when a token does not fit the command signature."""

    code = "ERR_ARGUMENT"

    def __init__(self, message: str, *, position: int | None = None, **details: Any) -> None:
        super().__init__(message, position=position, **details)
        self.position = position


class UnknownPreset(ParseError):
    code = "ERR_UNKNOWN_PRESET"


# ---------------------------------------------------------------------------
# Limiter validation
# ---------------------------------------------------------------------------
class ValidationError(CedError):
    family = "validation"
    code = "ERR_VALIDATION"


class EmptyRejected(ValidationError):
    code = "ERR_EMPTY_REJECTED"


class TypeMismatch(ValidationError):
    code = "ERR_TYPE_MISMATCH"


class NotInVariants(ValidationError):
    code = "ERR_NOT_IN_VARIANTS"


class PatternMismatch(ValidationError):
    code = "ERR_PATTERN_MISMATCH"


class ForceWithoutDefault(ValidationError):
    code = "ERR_FORCE_WITHOUT_DEFAULT"


class InvalidLimiter(ValidationError):
    code = "ERR_INVALID_LIMITER"


# ---------------------------------------------------------------------------
# Table structure
# ---------------------------------------------------------------------------
class StructuralError(CedError):
    family = "structure"
    code = "ERR_STRUCTURE"


class DuplicateColumn(StructuralError):
    code = "ERR_DUPLICATE_COLUMN"


class InvalidName(StructuralError):
    code = "ERR_INVALID_NAME"


class ColumnNotFound(StructuralError):
    code = "ERR_COLUMN_NOT_FOUND"


class IndexOutOfRange(StructuralError):
    code = "ERR_INDEX_OUT_OF_RANGE"


class ArityMismatch(StructuralError):
    code = "ERR_ARITY_MISMATCH"


class ModeError(StructuralError):
    """Operation is not available in the table's current mode (raw vs tabular)."""

    code = "ERR_MODE"


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------
class HistoryError(CedError):
    family = "history"
    code = "ERR_HISTORY"


class NothingToUndo(HistoryError):
    code = "ERR_NOTHING_TO_UNDO"


class NothingToRedo(HistoryError):
    code = "ERR_NOTHING_TO_REDO"


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------
class TableIOError(CedError):
    """Raised when a table, schema or preset file cannot be read or written."""

    family = "io"
    code = "ERR_IO"
