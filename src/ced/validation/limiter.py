"""Limiter rules: validate, default or reject candidate cell values.

The same rules serve single edits, interactive prompts, row inserts and bulk
column re-validation, so every entry point ends up in :func:`validate`.
"""

from __future__ import annotations

import re

from ced.contracts.errors import (
    EmptyRejected,
    ForceWithoutDefault,
    NotInVariants,
    PatternMismatch,
    TypeMismatch,
    ValidationError,
)
from ced.contracts.limiter import Limiter, ValueType

NUMBER_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)")


def is_number(value: str) -> bool:
    return NUMBER_PATTERN.fullmatch(value) is not None


def check_rules(value: str, limiter: Limiter) -> None:
    """Check a non-empty value against type, variants and pattern."""
    if limiter.type is ValueType.NUMBER and not is_number(value):
        raise TypeMismatch(f"'{value}' is not a number", value=value)
    if limiter.variants and value not in limiter.variants:
        raise NotInVariants(
            f"'{value}' is not one of: {', '.join(limiter.variants)}",
            value=value,
            variants=list(limiter.variants),
        )
    if limiter.pattern is not None and re.search(limiter.pattern, value) is None:
        raise PatternMismatch(
            f"'{value}' does not match pattern '{limiter.pattern}'",
            value=value,
            pattern=limiter.pattern,
        )


def validate(candidate: str, limiter: Limiter | None) -> str:
    """Return the value to store for ``candidate`` or raise a ValidationError."""
    if limiter is None:
        return candidate
    value = candidate
    if value == "":
        if limiter.default is not None:
            value = limiter.default
        elif limiter.unconstrained:
            return ""
        else:
            raise EmptyRejected("Empty value is not allowed for this column")
    check_rules(value, limiter)
    return value


def is_valid(candidate: str, limiter: Limiter | None) -> bool:
    try:
        validate(candidate, limiter)
    except ValidationError:
        return False
    return True


def revalidate(values: list[str], limiter: Limiter, *, force: bool | None = None) -> list[str]:
    """Compute the column contents after ``limiter`` is installed.

    Forced installs replace failing cells with the default and fail with
    ``ForceWithoutDefault`` when a replacement is needed but none exists.
    Non-forced installs leave existing values alone except for empty cells,
    which take the default when there is one.
    """
    if force is None:
        force = limiter.force
    result: list[str] = []
    failures: list[int] = []
    for row, value in enumerate(values):
        if force:
            try:
                result.append(validate(value, limiter))
            except ValidationError:
                if limiter.default is None:
                    failures.append(row)
                    result.append(value)
                else:
                    result.append(limiter.default)
        elif value == "" and limiter.default is not None:
            result.append(limiter.default)
        else:
            result.append(value)
    if failures:
        raise ForceWithoutDefault(
            f"{len(failures)} existing value(s) fail the limiter and no default is set",
            rows=failures,
        )
    return result
