"""Pydantic models for commands, limiters, columns and response envelopes."""

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
from ced.contracts.common import (
    ChangeRecord,
    ErrorDetail,
    HistoryInfo,
    Metrics,
    ResponseEnvelope,
    Target,
)
from ced.contracts.limiter import Limiter, ValueType
from ced.contracts.table import ByIndex, ByName, Column, ColumnSelector, parse_selector

__all__ = [
    "AddColumn",
    "AddRow",
    "ByIndex",
    "ByName",
    "ChangeRecord",
    "Column",
    "ColumnSelector",
    "Command",
    "Create",
    "DeleteColumn",
    "DeleteRow",
    "EditCell",
    "EditColumn",
    "EditRow",
    "ErrorDetail",
    "HistoryInfo",
    "Limit",
    "Limiter",
    "Metrics",
    "MoveColumn",
    "MoveRow",
    "RenameColumn",
    "ResponseEnvelope",
    "Schema",
    "Target",
    "ValueType",
    "parse_selector",
]
