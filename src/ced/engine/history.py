"""Bounded linear undo/redo history."""

from __future__ import annotations

from collections import deque
from typing import Protocol

from ced.contracts.commands import CommandModel
from ced.contracts.errors import NothingToRedo, NothingToUndo
from ced.engine.operations import apply_command, revert_command
from ced.engine.table import VirtualTable
from ced.observe.events import EditorEvent, EventEmitter


class History(Protocol):
    """What the executor needs from a history strategy."""

    @property
    def capacity(self) -> int: ...

    @property
    def past(self) -> tuple[CommandModel, ...]: ...

    @property
    def future(self) -> tuple[CommandModel, ...]: ...

    def record(self, cmd: CommandModel) -> None: ...

    def undo(self, table: VirtualTable) -> CommandModel: ...

    def redo(self, table: VirtualTable) -> CommandModel: ...

    def clear(self) -> None: ...


class LinearHistory:
    """Past/future stacks of bound commands, each at most ``capacity`` long.

    Recording clears the redo tail; once past is full the oldest entry is
    dropped. A capacity of 0 records nothing.
    """

    def __init__(self, capacity: int = 16, events: EventEmitter | None = None) -> None:
        if capacity < 0:
            raise ValueError("History capacity cannot be negative")
        self._capacity = capacity
        self._past: deque[CommandModel] = deque(maxlen=capacity)
        self._future: deque[CommandModel] = deque(maxlen=capacity)
        self._events = events or EventEmitter()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def past(self) -> tuple[CommandModel, ...]:
        return tuple(self._past)

    @property
    def future(self) -> tuple[CommandModel, ...]:
        return tuple(self._future)

    def record(self, cmd: CommandModel) -> None:
        if self._capacity == 0:
            return
        self._future.clear()
        if len(self._past) == self._capacity:
            evicted = self._past[0]
            self._events.emit(EditorEvent.HISTORY_EVICTED, {"kind": getattr(evicted, "kind", None)})
        self._past.append(cmd)

    def undo(self, table: VirtualTable) -> CommandModel:
        if not self._past:
            raise NothingToUndo("Nothing to undo")
        cmd = self._past[-1]
        revert_command(table, cmd)
        self._past.pop()
        self._future.append(cmd)
        self._events.emit(EditorEvent.HISTORY_UNDO, {"kind": getattr(cmd, "kind", None)})
        return cmd

    def redo(self, table: VirtualTable) -> CommandModel:
        if not self._future:
            raise NothingToRedo("Nothing to redo")
        cmd = apply_command(table, self._future[-1])
        self._future.pop()
        self._past.append(cmd)
        self._events.emit(EditorEvent.HISTORY_REDO, {"kind": getattr(cmd, "kind", None)})
        return cmd

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
