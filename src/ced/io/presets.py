"""Named limiter presets: built-ins plus an optional user CSV file."""

from __future__ import annotations

from pathlib import Path

from ced.contracts.errors import CedError, InvalidLimiter, TableIOError, UnknownPreset
from ced.contracts.limiter import LIMITER_ATTRIBUTE_LEN, Limiter
from ced.io.csvfile import parse_rows
from ced.io.fileops import read_text_safe

PRESET_FILE_NAME = ".ced_preset.csv"

BUILTIN_PRESETS: dict[str, list[str]] = {
    "text": ["text", "", "", ""],
    "number": ["number", "", "", ""],
    "float": ["text", "0.0", "", r"[+-]?([0-9]*[.])?[0-9]+"],
    "email": [
        "text",
        "johndoe@mail.com",
        "",
        r"^([a-zA-Z0-9._%-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,6})*$",
    ],
    "date": ["text", "2000-01-01", "", r"([12]\d{3}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01]))"],
    "time": ["text", "00:00:00", "", r"^(?:(?:([01]?\d|2[0-3]):)?([0-5]?\d):)?([0-5]?\d)$"],
    "url": [
        "text",
        "http://john.doe",
        "",
        r"[(http(s)?)://(www\.)?a-zA-Z0-9@:%._\+~#=]{2,256}\.[a-z]{2,6}\b([-a-zA-Z0-9@:%_\+.~#?&//=]*)",
    ],
}


def default_preset_file() -> Path:
    return Path.home() / PRESET_FILE_NAME


class PresetStore:
    """Lookup from preset name to limiter template."""

    def __init__(self, presets: dict[str, Limiter] | None = None) -> None:
        self._presets: dict[str, Limiter] = dict(presets or {})

    @classmethod
    def builtin(cls) -> "PresetStore":
        return cls({name: Limiter.from_fields(fields) for name, fields in BUILTIN_PRESETS.items()})

    @classmethod
    def load(cls, path: str | Path | None = None, *, builtins: bool = True) -> "PresetStore":
        """Built-ins extended (and overridden) by the user preset file, if it exists."""
        store = cls.builtin() if builtins else cls()
        preset_path = Path(path).expanduser() if path is not None else default_preset_file()
        if preset_path.exists():
            store.extend_from_file(preset_path)
        return store

    def extend_from_file(self, path: str | Path) -> None:
        path = Path(path)
        try:
            text = read_text_safe(path)
        except (OSError, UnicodeDecodeError) as e:
            raise TableIOError(f"Failed to read preset file {path}: {e}", path=str(path)) from e
        for line, row in enumerate(parse_rows(text), start=1):
            if line == 1 and row and row[0].strip().lower() == "name":
                continue
            if len(row) != LIMITER_ATTRIBUTE_LEN + 1:
                raise InvalidLimiter(
                    f"Preset line {line} needs {LIMITER_ATTRIBUTE_LEN + 1} fields "
                    "(name, type, default, variants, pattern)",
                    path=str(path),
                    line=line,
                )
            try:
                self._presets[row[0]] = Limiter.from_fields(row[1:])
            except CedError as e:
                raise InvalidLimiter(f"Preset line {line}: {e.message}", path=str(path), line=line) from e

    def get(self, name: str) -> Limiter:
        try:
            return self._presets[name]
        except KeyError:
            raise UnknownPreset(
                f"Preset '{name}' does not exist (available: {', '.join(sorted(self._presets))})",
                preset=name,
            ) from None

    def names(self) -> list[str]:
        return sorted(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._presets
