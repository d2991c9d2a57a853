"""Hand the table's CSV text to an external viewer program."""

from __future__ import annotations

import subprocess
from typing import Sequence

from ced.contracts.errors import TableIOError


def run_viewer(argv: Sequence[str], text: str) -> int:
    """Run ``argv`` with ``text`` on stdin and wait for it to exit."""
    if not argv:
        raise TableIOError("No viewer command given")
    try:
        proc = subprocess.run(list(argv), input=text, text=True, check=False)
    except OSError as e:
        raise TableIOError(f"Failed to start viewer '{argv[0]}': {e}", viewer=list(argv)) from e
    if proc.returncode != 0:
        raise TableIOError(
            f"Viewer '{argv[0]}' exited with status {proc.returncode}",
            viewer=list(argv),
            returncode=proc.returncode,
        )
    return proc.returncode
