"""Limiter model: the per-column constraint bundle."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ced.contracts.errors import InvalidLimiter

# type, default, variants, pattern
LIMITER_ATTRIBUTE_LEN = 4


class ValueType(str, Enum):
    """Declared cell type of a column."""

    TEXT = "text"
    NUMBER = "number"


def parse_value_type(value: str) -> ValueType:
    """Case-insensitive ``text``/``number`` (or ``t``/``n``); blank means text."""
    name = value.strip().lower()
    if name in ("", "text", "t"):
        return ValueType.TEXT
    if name in ("number", "n"):
        return ValueType.NUMBER
    raise ValueError(f"Unknown value type '{value}' (expected Text or Number)")


class Limiter(BaseModel):
    """Constraints governing which values a column accepts.

    ``force`` only changes *when* the rules run: a forced limiter is checked
    against every existing cell when it is installed, and failing cells are
    replaced by ``default``.
    """

    model_config = ConfigDict(frozen=True)

    type: ValueType = ValueType.TEXT
    default: str | None = None
    variants: tuple[str, ...] | None = None
    pattern: str | None = None
    placeholder: str | None = None
    force: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_value_type(value)
        return value

    @field_validator("default", "pattern", "placeholder", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and value == "":
            return None
        return value

    @field_validator("variants", mode="before")
    @classmethod
    def _parse_variants(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split()
        items = tuple(str(v) for v in value)
        return items or None

    @field_validator("pattern")
    @classmethod
    def _compile_pattern(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid pattern '{value}': {e}") from e
        return value

    @model_validator(mode="after")
    def _check_default(self) -> "Limiter":
        from ced.contracts.errors import ValidationError as LimiterViolation
        from ced.validation.limiter import check_rules

        for label, value in (("default", self.default), ("placeholder", self.placeholder)):
            if value is None:
                continue
            try:
                check_rules(value, self)
            except LimiterViolation as e:
                raise ValueError(f"{label} value '{value}' does not satisfy the limiter: {e.message}") from e
        return self

    # -- construction -------------------------------------------------------

    @classmethod
    def create(cls, **fields: Any) -> "Limiter":
        """Build a limiter, reporting bad fields as ``InvalidLimiter``."""
        try:
            return cls(**fields)
        except ValidationError as e:
            raise InvalidLimiter(_first_message(e), fields={k: str(v) for k, v in fields.items()}) from e

    @classmethod
    def from_fields(
        cls,
        fields: list[str] | tuple[str, ...],
        *,
        force: bool = False,
        placeholder: str | None = None,
    ) -> "Limiter":
        """Parse the positional ``type,default,variants,pattern`` form."""
        if len(fields) != LIMITER_ATTRIBUTE_LEN:
            raise InvalidLimiter(
                f"Limiter needs {LIMITER_ATTRIBUTE_LEN} fields (type, default, variants, pattern) "
                f"but {len(fields)} were given"
            )
        type_, default, variants, pattern = fields
        return cls.create(
            type=type_,
            default=default,
            variants=variants,
            pattern=pattern,
            placeholder=placeholder,
            force=force,
        )

    def to_fields(self) -> list[str]:
        return [
            self.type.value,
            self.default or "",
            " ".join(self.variants or ()),
            self.pattern or "",
        ]

    # -- queries ------------------------------------------------------------

    @property
    def unconstrained(self) -> bool:
        """True when any text, including empty text, is acceptable."""
        return self.type is ValueType.TEXT and not self.variants and self.pattern is None

    def fill_value(self) -> str:
        """Value given to cells created by structural edits."""
        if self.placeholder is not None:
            return self.placeholder
        if self.default is not None:
            return self.default
        if self.variants:
            return self.variants[0]
        if self.type is ValueType.NUMBER:
            return "0"
        return ""

    def describe(self) -> str:
        lines = [f"Type: {self.type.value.capitalize()}"]
        if self.default is not None:
            lines.append(f"Default: {self.default}")
        if self.variants:
            lines.append(f"Variants: {' '.join(self.variants)}")
        if self.pattern is not None:
            lines.append(f"Pattern: {self.pattern}")
        if self.placeholder is not None:
            lines.append(f"Placeholder: {self.placeholder}")
        lines.append(f"Force: {str(self.force).lower()}")
        return "\n".join(lines)


def _first_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    msg = str(errors[0].get("msg", exc))
    return msg.removeprefix("Value error, ")


_TRUE = ("true", "t", "yes", "y", "1")
_FALSE = ("false", "f", "no", "n", "0")


def parse_bool(value: str) -> bool:
    """Parse a textual flag such as ``true``/``false``; raises ValueError."""
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"'{value}' is not a boolean (expected true or false)")
