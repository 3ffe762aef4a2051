from __future__ import annotations
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from .constants import ENGINE_BIN_NAME, MAX_RUNS
from .errors import EngineError
from .types import Axis
from .utils import quote_cmd


class Hyperfine:
    """Thin wrapper over the hyperfine CLI.

    Timing, warm-up, statistics and reporting all stay inside hyperfine; the
    only thing read back is its exit status.
    """

    def __init__(self, bin_path: str = ENGINE_BIN_NAME, dry_run: bool = False):
        self.bin_path = bin_path
        self.dry_run = dry_run

    def build_argv(self, command: str, prepare: str, cleanup: str, max_runs: int = MAX_RUNS,
                   parameters: Sequence[Axis] = (), command_name: Optional[str] = None) -> List[str]:
        argv: List[str] = [
            self.bin_path,
            "--max-runs", str(max_runs),
            "--prepare", prepare,
            "--cleanup", cleanup,
        ]
        for ax in parameters:
            argv += ["--parameter-list", ax.name, ",".join(ax.values)]
        if command_name:
            argv += ["--command-name", command_name]
        argv.append(command)
        return argv

    def run(self, command: str, prepare: str, cleanup: str, cwd: Path, max_runs: int = MAX_RUNS,
            parameters: Sequence[Axis] = (), command_name: Optional[str] = None) -> int:
        argv = self.build_argv(command, prepare, cleanup, max_runs, parameters, command_name)
        print(f"Benchmark: {quote_cmd(argv)}")
        if self.dry_run:
            return 0
        try:
            return subprocess.call(argv, cwd=str(cwd))
        except OSError as e:
            raise EngineError(self.bin_path, str(e)) from e
