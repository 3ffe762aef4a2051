"""Environment preparation.

Every step blocks until its command exits and raises ``SetupError`` on
failure, so nothing is measured on a half-prepared machine.
"""
from __future__ import annotations
import shutil

from .constants import ENGINE_BIN_NAME
from .errors import SetupError
from .types import BenchPaths
from .utils import run_step


def validate_privileges(dry_run: bool = False) -> None:
    # Cache wiping later runs 'sudo tee' from inside the engine's prepare hook
    run_step("privileges", ["sudo", "--validate"], dry_run=dry_run)


def ensure_engine(engine_bin: str = ENGINE_BIN_NAME, dry_run: bool = False) -> None:
    if shutil.which(engine_bin):
        print(f"[engine] found {engine_bin}")
        return
    run_step("engine", ["cargo", "install", ENGINE_BIN_NAME], dry_run=dry_run)
    if not dry_run and not shutil.which(engine_bin):
        raise SetupError("engine", f"{engine_bin} still not on PATH after install")


def sync_fixtures(paths: BenchPaths, dry_run: bool = False) -> None:
    run_step("fixtures", ["git", "submodule", "init"], cwd=paths.repo_root, dry_run=dry_run)
    run_step("fixtures", ["git", "submodule", "update"], cwd=paths.repo_root, dry_run=dry_run)


def build_tool(paths: BenchPaths, dry_run: bool = False) -> None:
    run_step("build", ["cargo", "build", "--release"], cwd=paths.repo_root, dry_run=dry_run)


def stage_binary(paths: BenchPaths, dry_run: bool = False) -> None:
    """Copy the release artifact next to the fixtures; the artifact stays in place."""
    src, dst = paths.build_artifact, paths.staged_binary
    print(f"[stage] cp {src} {dst}")
    if dry_run:
        return
    if not src.is_file():
        raise SetupError("stage", f"missing build artifact {src}")
    try:
        paths.bench_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
    except OSError as e:
        raise SetupError("stage", str(e)) from e


def prepare_environment(paths: BenchPaths, engine_bin: str = ENGINE_BIN_NAME, dry_run: bool = False) -> None:
    validate_privileges(dry_run)
    ensure_engine(engine_bin, dry_run)
    sync_fixtures(paths, dry_run)
    build_tool(paths, dry_run)
    stage_binary(paths, dry_run)
