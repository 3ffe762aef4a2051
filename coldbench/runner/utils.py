from __future__ import annotations
import dataclasses as dc
import shlex
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .errors import ConfigError, SetupError
from .types import Scenario


def quote_cmd(argv: Iterable[str]) -> str:
    return " ".join(shlex.quote(c) for c in argv)


def run_step(step: str, argv: Sequence[str], cwd: Optional[Path] = None, dry_run: bool = False) -> None:
    """Run one blocking setup command; any non-zero exit aborts the run."""
    print(f"[{step}] {quote_cmd(argv)}")
    if dry_run:
        return
    try:
        rc = subprocess.call(list(argv), cwd=str(cwd) if cwd else None)
    except OSError as e:
        raise SetupError(step, f"cannot execute {argv[0]}: {e}") from e
    if rc != 0:
        raise SetupError(step, f"'{quote_cmd(argv)}' exited with {rc}")


# --- Scenario fixture overrides ---

def parse_list_spec(spec: str) -> List[str]:
    """Split a 'a,b,c' spec; blanks are dropped, order and duplicates kept."""
    return [x.strip() for x in spec.split(",") if x.strip()]


def apply_fixture_overrides(scenarios: Sequence[Scenario], items: Optional[Iterable[str]]) -> List[Scenario]:
    """Apply 'scenario:fixture1,fixture2' overrides, returning new scenarios."""
    overrides = {}
    for item in items or []:
        if ":" not in item:
            raise ConfigError(f"Invalid fixture override (want scenario:CSV): {item}")
        scen, spec = item.split(":", 1)
        fixtures = parse_list_spec(spec)
        if not fixtures:
            raise ConfigError(f"Empty fixture list in override: {item}")
        overrides[scen.strip()] = fixtures
    known = {sc.name for sc in scenarios}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigError(f"Unknown scenario(s) in fixture override: {', '.join(unknown)}")
    return [dc.replace(sc, fixture_set=tuple(overrides[sc.name])) if sc.name in overrides else sc
            for sc in scenarios]
