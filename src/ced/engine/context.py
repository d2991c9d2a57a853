"""TableContext: the session's table plus where it came from."""

from __future__ import annotations

from pathlib import Path

from ced.config import CedConfig
from ced.contracts.common import Target
from ced.contracts.errors import TableIOError
from ced.engine.table import VirtualTable
from ced.engine.tokenizer import Tokenizer
from ced.io.csvfile import read_table, write_table
from ced.io.fileops import fingerprint
from ced.io.presets import PresetStore


class TableContext:
    """Owns the table, its source file, line-ending mode, presets and config."""

    def __init__(
        self,
        config: CedConfig | None = None,
        *,
        table: VirtualTable | None = None,
        presets: PresetStore | None = None,
    ) -> None:
        self.config = config or CedConfig()
        self.table = table if table is not None else VirtualTable()
        self.presets = presets if presets is not None else PresetStore.load(self.config.preset_file)
        self.tokenizer = Tokenizer(
            quote=self.config.quote,
            delimiter=self.config.delimiter,
            separator=self.config.statement_separator,
        )
        self.path: Path | None = None
        self.fp: str | None = None
        self.cr = False

    def load(
        self,
        path: str | Path,
        *,
        has_header: bool = True,
        raw: bool = False,
        cr: bool = False,
    ) -> VirtualTable:
        """Replace the session table with the contents of ``path``."""
        p = Path(path).resolve()
        if not p.is_file():
            raise TableIOError(f"File not found: {p}", path=str(p))
        self.table = read_table(
            p,
            has_header=has_header,
            raw=raw,
            delimiter=self.config.delimiter,
            strict=self.config.read_strict,
        )
        self.path = p
        self.fp = fingerprint(p)
        self.cr = cr
        return self.table

    def target(self) -> Target:
        return Target(file=str(self.path) if self.path else None, mode=self.table.mode)

    def save(self, path: str | Path | None = None, *, make_backup: bool = False) -> str | None:
        """Write the table to ``path`` (default: its source file).

        Returns the backup path when ``make_backup`` produced one.
        """
        if path is None:
            if self.path is None:
                raise TableIOError("No source file to write; use export FILE instead")
            path = self.path
        backup_path = write_table(
            self.table,
            path,
            delimiter=self.config.delimiter,
            cr=self.cr,
            make_backup=make_backup,
        )
        if Path(path).resolve() == self.path:
            self.fp = fingerprint(self.path)
        return backup_path
