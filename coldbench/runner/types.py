from __future__ import annotations
import dataclasses as dc
from pathlib import Path
from typing import Dict, Optional, Tuple

from .constants import (
    BENCH_DIR_NAME,
    ENGINE_BIN_NAME,
    FIND_AXIS,
    FIXTURE_AXIS,
    MAX_RUNS,
    RELEASE_DIR,
    REPLACE_AXIS,
    TOOL_BIN_NAME,
)


@dc.dataclass(frozen=True)
class Scenario:
    language: str
    query_type: str
    file_suffix: str
    # Fixture repositories (paths relative to the bench dir); order is kept
    fixture_set: Tuple[str, ...] = ()

    def __post_init__(self):
        if isinstance(self.fixture_set, str):
            raise TypeError(f"fixture_set must be a sequence of fixture names, not the string {self.fixture_set!r}")
        # Accept any sequence but store a tuple so the record stays immutable
        object.__setattr__(self, "fixture_set", tuple(self.fixture_set))

    @property
    def name(self) -> str:
        return f"{self.language}-{self.query_type}"


@dc.dataclass(frozen=True)
class Axis:
    name: str
    values: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))

    def __len__(self) -> int:
        return len(self.values)


@dc.dataclass(frozen=True)
class GridCell:
    fixture: str
    find: str
    replace: str

    def as_params(self) -> Dict[str, str]:
        return {FIXTURE_AXIS: self.fixture, FIND_AXIS: self.find, REPLACE_AXIS: self.replace}

    @property
    def label(self) -> str:
        return f"{FIXTURE_AXIS}={self.fixture} {FIND_AXIS}={self.find} {REPLACE_AXIS}={self.replace}"


@dc.dataclass
class BenchPaths:
    repo_root: Path
    # Working directory of every measured command; fixtures live below it
    bench_dir: Path
    tool: str = TOOL_BIN_NAME

    @classmethod
    def from_repo_root(cls, repo_root: Path, bench_dir: Optional[Path] = None, tool: str = TOOL_BIN_NAME) -> "BenchPaths":
        return cls(repo_root=repo_root, bench_dir=bench_dir or repo_root / BENCH_DIR_NAME, tool=tool)

    @property
    def build_artifact(self) -> Path:
        return self.repo_root / RELEASE_DIR / self.tool

    @property
    def staged_binary(self) -> Path:
        return self.bench_dir / self.tool


@dc.dataclass
class RunSettings:
    engine_bin: str = ENGINE_BIN_NAME
    max_runs: int = MAX_RUNS
    # 'engine': one engine call per scenario with parameter lists
    # 'cell': one engine call per grid cell with a fully bound command
    expand: str = "engine"
    dry_run: bool = False
