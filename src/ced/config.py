"""Session configuration: ced.yaml plus CED_* environment overrides."""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ced.contracts.errors import CedError
from ced.io.fileops import read_text_safe

CONFIG_FILE_NAMES = ("ced.yaml", ".ced.yaml")
HISTORY_CAPACITY = 16


class ConfigError(CedError):
    family = "validation"
    code = "ERR_CONFIG"


class CedConfig(BaseModel):
    """Built once at startup and passed to the session; never read from env later."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    history_capacity: int = Field(default=HISTORY_CAPACITY, ge=0)
    viewer: list[str] = Field(default_factory=list)
    read_strict: bool = False
    quote: str = Field(default="'", min_length=1, max_length=1)
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    statement_separator: str = Field(default=";", min_length=1, max_length=1)
    preset_file: str | None = None
    events: bool = False
    log: bool = True

    @field_validator("viewer", mode="before")
    @classmethod
    def _split_viewer(cls, value: Any) -> Any:
        if isinstance(value, str):
            return shlex.split(value)
        return value


def find_config_file(directory: str | Path) -> Path | None:
    for name in CONFIG_FILE_NAMES:
        candidate = Path(directory) / name
        if candidate.is_file():
            return candidate
    return None


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if "CED_HISTORY_CAPACITY" in env:
        overrides["history_capacity"] = env["CED_HISTORY_CAPACITY"]
    if env.get("CED_VIEWER"):
        overrides["viewer"] = env["CED_VIEWER"]
    if "CED_READ_STRICT" in env:
        overrides["read_strict"] = env["CED_READ_STRICT"].strip().lower() == "true"
    return overrides


def load_config(
    path: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    cwd: str | Path | None = None,
) -> CedConfig:
    """Load configuration from ``path`` (or ced.yaml in ``cwd``), then the environment."""
    if path is None:
        path = find_config_file(cwd or Path.cwd())
    data: dict[str, Any] = {}
    if path is not None:
        try:
            loaded = yaml.safe_load(read_text_safe(path)) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}", path=str(path)) from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config {path} must be a mapping", path=str(path))
        data.update(loaded)
    data.update(_env_overrides(os.environ if env is None else env))
    try:
        return CedConfig(**data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ConfigError(f"Invalid config value for '{field}': {first.get('msg')}", field=field) from e
