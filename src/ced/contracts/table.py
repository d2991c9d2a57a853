"""Column and column-selector models."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ced.contracts.limiter import Limiter


class Column(BaseModel):
    """A named column with an optional limiter."""

    model_config = ConfigDict(frozen=True)

    name: str
    limiter: Limiter | None = None


class ByIndex(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["index"] = "index"
    index: int = Field(ge=0)

    def __str__(self) -> str:
        return str(self.index)


class ByName(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["name"] = "name"
    name: str

    def __str__(self) -> str:
        return self.name


ColumnSelector = Annotated[Union[ByIndex, ByName], Field(discriminator="kind")]


def parse_selector(token: str) -> ByIndex | ByName:
    """Bare non-negative integers select by index; anything else by name."""
    if token.isascii() and token.isdigit():
        return ByIndex(index=int(token))
    return ByName(name=token)
