from __future__ import annotations
import dataclasses as dc
import json
import sys
from typing import Dict, List, Optional, Sequence

from .constants import FIND_VALUES, MAX_RUNS, REPLACE_VALUES
from .engine import Hyperfine
from .errors import BenchmarkError, ConfigError, RestoreError, SetupError
from .grid import CommandTemplate, build_axes, check_engine_values, expand, grid_size
from .hooks import cleanup_hook, prepare_hook, restore
from .prepare import prepare_environment
from .types import BenchPaths, RunSettings, Scenario
from .utils import apply_fixture_overrides

EXPAND_MODES = ("engine", "cell")


class Runner:
    def __init__(self,
                 paths: BenchPaths,
                 settings: Optional[RunSettings] = None,
                 engine: Optional[Hyperfine] = None,
                 find: Sequence[str] = FIND_VALUES,
                 replace: Sequence[str] = REPLACE_VALUES):
        self.paths = paths
        self.settings = settings or RunSettings()
        if not 1 <= self.settings.max_runs <= MAX_RUNS:
            raise ConfigError(f"max_runs must be between 1 and {MAX_RUNS}, got {self.settings.max_runs}")
        if self.settings.expand not in EXPAND_MODES:
            raise ConfigError(f"Unknown expand mode: {self.settings.expand}")
        self.engine = engine or Hyperfine(self.settings.engine_bin, dry_run=self.settings.dry_run)
        self.find = tuple(find)
        self.replace = tuple(replace)

    def _restore(self, fixtures: Sequence[str]) -> None:
        if self.settings.dry_run:
            return
        # Dedupe only here; restoring a tree twice changes nothing
        for fixture in dict.fromkeys(fixtures):
            restore(self.paths.bench_dir, fixture)

    def _restore_after_interrupt(self, fixtures: Sequence[str]) -> None:
        # The interrupt stays the reported outcome (exit 130); a failed restore is only logged
        try:
            self._restore(fixtures)
        except RestoreError as e:
            print(f"error: {e}", file=sys.stderr)

    def _run_whole_grid(self, sc: Scenario) -> int:
        axes = build_axes(sc, self.find, self.replace)
        check_engine_values(axes)
        tmpl = CommandTemplate.for_scenario(sc, self.paths.tool)
        rc = self.engine.run(
            tmpl.render_engine(),
            prepare=prepare_hook(),
            cleanup=cleanup_hook(),
            cwd=self.paths.bench_dir,
            max_runs=self.settings.max_runs,
            parameters=axes,
        )
        if rc != 0:
            # The engine skips its cleanup when it aborts
            self._restore(sc.fixture_set)
            raise BenchmarkError(sc.name, rc)
        return grid_size(axes)

    def _run_cells(self, sc: Scenario) -> int:
        done = 0
        for cell, command in expand(sc, self.find, self.replace, self.paths.tool):
            try:
                rc = self.engine.run(
                    command,
                    prepare=prepare_hook(cell.fixture),
                    cleanup=cleanup_hook(cell.fixture),
                    cwd=self.paths.bench_dir,
                    max_runs=self.settings.max_runs,
                    command_name=f"{sc.name} {cell.label}",
                )
            except KeyboardInterrupt:
                self._restore_after_interrupt([cell.fixture])
                raise
            if rc != 0:
                self._restore([cell.fixture])
                raise BenchmarkError(sc.name, rc, cell.label)
            done += 1
        return done

    def run_scenario(self, sc: Scenario) -> int:
        """Benchmark every grid cell of one scenario; returns the number of cells."""
        if self.settings.expand == "cell":
            n = self._run_cells(sc)
        else:
            try:
                n = self._run_whole_grid(sc)
            except KeyboardInterrupt:
                self._restore_after_interrupt(sc.fixture_set)
                raise
        print(f"Scenario '{sc.name}' finished: {n} grid cells")
        return n

    def run(self, scenarios: Sequence[Scenario]) -> int:
        total = 0
        for sc in scenarios:
            total += self.run_scenario(sc)
        return total


def _scenario_asdict_json(s: Scenario) -> Dict:
    d = dc.asdict(s)
    d["name"] = s.name
    d["fixture_set"] = list(s.fixture_set)
    return d


def print_plan(scenarios: Sequence[Scenario], find: Sequence[str], replace: Sequence[str], tool: str) -> int:
    print("Planned runs:")
    total = 0
    for s in scenarios:
        print(json.dumps(_scenario_asdict_json(s), indent=2, ensure_ascii=False))
        for _, command in expand(s, find, replace, tool):
            print(f"  {command}")
            total += 1
    print(f"Total grid cells: {total}")
    return total


def select_scenarios(scenarios: Sequence[Scenario], names: Optional[Sequence[str]]) -> List[Scenario]:
    scs = list(scenarios)
    if names:
        known = {s.name for s in scs}
        unknown = [n for n in names if n not in known]
        if unknown:
            raise ConfigError(f"Unknown scenario(s): {', '.join(unknown)}; known: {', '.join(sorted(known))}")
        scs = [s for s in scs if s.name in names]
    return scs


def run_from_args(args, scenarios: List[Scenario]) -> int:
    scs = select_scenarios(scenarios, getattr(args, 'scenario', None))
    scs = apply_fixture_overrides(scs, getattr(args, 'fixture', None))
    find = tuple(args.find) if getattr(args, 'find', None) else FIND_VALUES
    replace = tuple(args.replace) if getattr(args, 'replace', None) else REPLACE_VALUES

    paths = BenchPaths.from_repo_root(args.repo_root.resolve(),
                                      args.bench_dir.resolve() if args.bench_dir else None,
                                      tool=args.tool)
    settings = RunSettings(
        engine_bin=args.hyperfine,
        max_runs=args.max_runs,
        expand=args.expand,
        dry_run=getattr(args, 'dry_run', False),
    )
    runner = Runner(paths, settings, find=find, replace=replace)

    if settings.dry_run:
        print_plan(scs, find, replace, paths.tool)
        print("Runner:", json.dumps({
            "repo_root": str(paths.repo_root),
            "bench_dir": str(paths.bench_dir),
            "tool": paths.tool,
            "engine": settings.engine_bin,
            "max_runs": settings.max_runs,
            "expand": settings.expand,
        }, indent=2))

    if getattr(args, 'skip_setup', False):
        if not settings.dry_run and not paths.staged_binary.exists():
            raise SetupError("stage", f"{paths.staged_binary} does not exist; run without --skip-setup")
    else:
        prepare_environment(paths, settings.engine_bin, dry_run=settings.dry_run)

    total = runner.run(scs)
    print(f"All scenarios finished: {total} grid cells")
    return 0
