from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from coldbench.runner import exec as runner_exec
from coldbench.runner.types import BenchPaths


class RecordingEngine:
    """Stands in for hyperfine and records what it would have executed.

    ``fail_at`` makes the n-th call (0-based) fail after its prepare hook, the
    way hyperfine aborts without running its cleanup.
    """

    def __init__(self, events: List[Tuple[str, str]], fail_at: Optional[int] = None,
                 interrupt_at: Optional[int] = None, fail_rc: int = 1):
        self.events = events
        self.fail_at = fail_at
        self.interrupt_at = interrupt_at
        self.fail_rc = fail_rc
        self.calls: List[dict] = []

    def run(self, command, prepare, cleanup, cwd, max_runs=3, parameters=(), command_name=None):
        idx = len(self.calls)
        self.calls.append({
            "command": command,
            "prepare": prepare,
            "cleanup": cleanup,
            "cwd": cwd,
            "max_runs": max_runs,
            "parameters": tuple(parameters),
            "command_name": command_name,
        })
        self.events.append(("prepare", prepare))
        if idx == self.interrupt_at:
            raise KeyboardInterrupt
        if idx == self.fail_at:
            return self.fail_rc
        self.events.append(("measure", command))
        self.events.append(("cleanup", cleanup))
        return 0


@pytest.fixture
def events() -> List[Tuple[str, str]]:
    return []


@pytest.fixture
def bench_paths(tmp_path: Path) -> BenchPaths:
    paths = BenchPaths.from_repo_root(tmp_path)
    paths.bench_dir.mkdir()
    return paths


@pytest.fixture
def recorded_restores(monkeypatch, events):
    """Replace the runner's explicit restore with a recorder."""
    def fake_restore(bench_dir, fixture):
        events.append(("restore", fixture))

    monkeypatch.setattr(runner_exec, "restore", fake_restore)
    return events


@pytest.fixture
def make_engine(events):
    def _make(**kw) -> RecordingEngine:
        return RecordingEngine(events, **kw)
    return _make
