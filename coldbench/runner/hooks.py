from __future__ import annotations
import shlex
import subprocess
from pathlib import Path
from typing import Optional

from .constants import FIXTURE_AXIS, RESTORE_ARGV, WIPE_CACHES
from .errors import RestoreError
from .utils import quote_cmd


def restore_command(fixture: Optional[str] = None) -> str:
    """Shell command reverting one fixture tree to its committed state.

    Without a fixture the engine placeholder is kept, quoted as ``'{fixture}'``.
    """
    target = shlex.quote(fixture if fixture is not None else "{" + FIXTURE_AXIS + "}")
    return " ".join(RESTORE_ARGV) + " " + target


def prepare_hook(fixture: Optional[str] = None, wipe: str = WIPE_CACHES) -> str:
    # The engine's cleanup only fires once per parameter combination, so every
    # repetition restores first and then drops the page cache.
    return f"{restore_command(fixture)} && ({wipe})"


def cleanup_hook(fixture: Optional[str] = None) -> str:
    return restore_command(fixture)


def restore(bench_dir: Path, fixture: str) -> None:
    """Restore a fixture tree right now; idempotent on a pristine tree."""
    argv = list(RESTORE_ARGV) + [fixture]
    print(f"Restore: {quote_cmd(argv)}")
    try:
        rc = subprocess.call(argv, cwd=str(bench_dir))
    except OSError as e:
        raise RestoreError(fixture, None, f"cannot execute {argv[0]}: {e}") from e
    if rc != 0:
        raise RestoreError(fixture, rc)
