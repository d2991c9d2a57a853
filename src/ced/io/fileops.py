"""File operations: fingerprinting, backup, atomic write, locking."""

from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
import time
from datetime import datetime, timezone
from io import TextIOWrapper
from pathlib import Path

import portalocker

from ced.contracts.errors import TableIOError


def fingerprint(path: str | Path) -> str:
    """Compute SHA-256 fingerprint of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return f"sha256:{h.hexdigest()}"


def backup(path: str | Path) -> str:
    """Copy ``path`` to a timestamped sibling before it is overwritten."""
    path = Path(path)
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    backup_path = path.parent / f"{path.stem}.{ts}.bak{path.suffix}"
    shutil.copy2(path, backup_path)
    return str(backup_path)


def atomic_write(target: str | Path, data: bytes) -> None:
    """Write data to target atomically via temp file + rename."""
    target = Path(target)
    fd, tmp_path = tempfile.mkstemp(
        dir=target.parent, suffix=target.suffix, prefix=".ced_tmp_"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        shutil.move(tmp_path, target)
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class TableLock:
    """Exclusive ``<file>.ced.lock`` sidecar lock held while a table file is written.

    The OS releases the lock if the process dies; a leftover sidecar file is
    then stale and can be locked again.
    """

    def __init__(self, path: str | Path, *, timeout: float = 0) -> None:
        self.path = Path(path).resolve()
        self.timeout = timeout
        self._lock_path = self.path.parent / (self.path.name + ".ced.lock")
        self._lock_file: TextIOWrapper | None = None

    @property
    def lock_path(self) -> Path:
        return self._lock_path

    def _acquire(self) -> None:
        flags = portalocker.LOCK_EX | portalocker.LOCK_NB
        if self.timeout <= 0:
            portalocker.lock(self._lock_file, flags)
            return
        deadline = time.monotonic() + self.timeout
        interval = min(0.1, max(0.01, self.timeout / 20))
        while True:
            try:
                portalocker.lock(self._lock_file, flags)
                return
            except portalocker.LockException:
                if time.monotonic() >= deadline:
                    raise
                time.sleep(interval)

    def __enter__(self) -> "TableLock":
        self._lock_file = open(self._lock_path, "a+")  # noqa: SIM115
        try:
            self._acquire()
        except portalocker.LockException as e:
            self._lock_file.close()
            self._lock_file = None
            raise TableIOError(f"{self.path} is locked by another process", lock=str(self._lock_path)) from e
        self._lock_file.seek(0)
        self._lock_file.truncate()
        self._lock_file.write(f"pid={os.getpid()}\n")
        self._lock_file.flush()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if self._lock_file is not None:
            try:
                portalocker.unlock(self._lock_file)
            finally:
                self._lock_file.close()
                self._lock_file = None


def read_text_safe(path: str | Path) -> str:
    """Read a text file, silently dropping a leading UTF-8 BOM.

    ``newline=""`` keeps ``\\r`` line endings visible to the csv reader.
    """
    with open(path, encoding="utf-8-sig", newline="") as f:
        return f.read()


def write_text_locked(path: str | Path, text: str, *, make_backup: bool = False) -> str | None:
    """Atomically replace ``path`` under its sidecar lock.

    Returns the backup path when one was made.
    """
    path = Path(path)
    backup_path = None
    try:
        with TableLock(path):
            if make_backup and path.exists():
                backup_path = backup(path)
            atomic_write(path, text.encode("utf-8"))
    except OSError as e:
        raise TableIOError(f"Failed to write {path}: {e}", path=str(path)) from e
    return backup_path
