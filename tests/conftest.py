"""Shared test fixtures."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from ced.config import CedConfig
from ced.contracts.limiter import Limiter
from ced.engine.context import TableContext
from ced.engine.executor import Executor
from ced.engine.table import VirtualTable
from ced.observe.events import EventEmitter


class FakeViewer:
    def __init__(self) -> None:
        self.calls: list[tuple[list[str], str]] = []

    def __call__(self, argv, text: str) -> int:
        self.calls.append((list(argv), text))
        return 0


@pytest.fixture()
def people_csv(tmp_path: Path) -> Path:
    """A small tabular CSV file with a header."""
    path = tmp_path / "people.csv"
    path.write_text("id,name,age\n1,alice,30\n2,bob,\n3,carol,41\n", encoding="utf-8")
    return path


@pytest.fixture()
def ragged_csv(tmp_path: Path) -> Path:
    path = tmp_path / "ragged.csv"
    path.write_text("1,2,3\na,b\nx,y,z,w\n", encoding="utf-8")
    return path


@pytest.fixture()
def people_table() -> VirtualTable:
    return VirtualTable(
        ["id", "name", "age"],
        [["1", "alice", "30"], ["2", "bob", ""], ["3", "carol", "41"]],
    )


@pytest.fixture()
def config(tmp_path: Path) -> CedConfig:
    # Point presets at a missing file so the user's home directory is never read.
    return CedConfig(preset_file=str(tmp_path / "no_presets.csv"))


@pytest.fixture()
def ctx(config: CedConfig) -> TableContext:
    return TableContext(config)


@pytest.fixture()
def viewer() -> FakeViewer:
    return FakeViewer()


@pytest.fixture()
def events_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture()
def executor(ctx: TableContext, viewer: FakeViewer, events_stream: io.StringIO) -> Executor:
    return Executor(ctx, viewer=viewer, events=EventEmitter(enabled=True, stream=events_stream))


@pytest.fixture()
def number_limiter() -> Limiter:
    return Limiter(type="number", default="0", force=True)
