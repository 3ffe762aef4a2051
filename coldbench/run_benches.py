#!/usr/bin/env python3
"""
Cold-cache benchmark entrypoint for the srgn CLI.

This file only defines CLI arguments and the default scenarios; the
implementation lives under coldbench/runner/.
"""
from __future__ import annotations
import argparse
from pathlib import Path
from typing import List, Optional, Sequence
import sys

# Support running both as a module (`python -m coldbench.run_benches`) and as a script
if __package__ is None or __package__ == "":
    _REPO_ROOT = Path(__file__).resolve().parents[1]
    if str(_REPO_ROOT) not in sys.path:
        sys.path.insert(0, str(_REPO_ROOT))
    from coldbench.runner.constants import ENGINE_BIN_NAME, MAX_RUNS, TOOL_BIN_NAME
    from coldbench.runner.errors import ConfigError, HarnessError
    from coldbench.runner.types import Scenario
    from coldbench.runner.exec import EXPAND_MODES, run_from_args
else:
    from .runner.constants import ENGINE_BIN_NAME, MAX_RUNS, TOOL_BIN_NAME
    from .runner.errors import ConfigError, HarnessError
    from .runner.types import Scenario
    from .runner.exec import EXPAND_MODES, run_from_args


def default_scenarios() -> List[Scenario]:
    return [
        Scenario(language="python", query_type="comments", file_suffix="py",
                 fixture_set=("django", "pydantic")),
        Scenario(language="go", query_type="comments", file_suffix="go",
                 fixture_set=("kubernetes",)),
    ]


def _max_runs(value: str) -> int:
    n = int(value)
    if not 1 <= n <= MAX_RUNS:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_RUNS}")
    return n


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Cold-cache hyperfine benchmarks over fixture repositories")
    p.add_argument("--repo-root", type=Path, default=Path.cwd(),
                   help="Root of the tool's cargo workspace (holds target/ and the fixture submodules)")
    p.add_argument("--bench-dir", type=Path,
                   help="Directory the binary is staged into and commands run from (default: <repo-root>/benches)")
    p.add_argument("--tool", default=TOOL_BIN_NAME, help="Binary name produced by the release build")
    p.add_argument("--hyperfine", default=ENGINE_BIN_NAME, help="hyperfine executable")
    p.add_argument("--scenario", action="append",
                   help="Scenario(s) to run; filter by scenario name, e.g. go-comments")
    p.add_argument("--find", action="append",
                   help="Search pattern axis value (repeatable; replaces the default list)")
    p.add_argument("--replace", action="append",
                   help="Replacement axis value (repeatable; replaces the default list)")
    p.add_argument("--fixture", action="append", default=[],
                   help="Override a scenario's fixture set, format scenario:CSV (repeatable). "
                        "Example: --fixture python-comments:django")
    p.add_argument("--max-runs", type=_max_runs, default=MAX_RUNS,
                   help=f"Upper bound on repetitions per grid cell (1..{MAX_RUNS})")
    p.add_argument("--expand", choices=EXPAND_MODES, default="engine",
                   help="'engine': hyperfine expands the parameter grid; "
                        "'cell': one hyperfine call per grid cell (any axis value allowed)")
    p.add_argument("--skip-setup", action="store_true",
                   help="Do not validate sudo, install hyperfine, sync fixtures or rebuild")
    p.add_argument("--dry-run", action="store_true", help="Print the plan and commands; run nothing")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return run_from_args(args, default_scenarios())
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except HarnessError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted; no results are validated and nothing is resumable", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
