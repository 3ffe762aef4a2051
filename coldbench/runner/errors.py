from __future__ import annotations
from typing import Optional


class HarnessError(Exception):
    """Base for every condition that must stop the whole run."""


class SetupError(HarnessError):
    def __init__(self, step: str, detail: str):
        super().__init__(f"setup step '{step}' failed: {detail}")
        self.step = step
        self.detail = detail


class AxisValueError(HarnessError, ValueError):
    def __init__(self, axis: str, value: Optional[str], detail: str):
        if value is None:
            msg = f"axis '{axis}': {detail}"
        else:
            msg = f"axis '{axis}' value {value!r}: {detail}"
        super().__init__(msg)
        self.axis = axis
        self.value = value


class BenchmarkError(HarnessError):
    """The engine exited non-zero (measured command, prepare or cleanup hook)."""

    def __init__(self, scenario: str, returncode: int, cell: Optional[str] = None):
        where = f"scenario '{scenario}'"
        if cell is not None:
            where += f" cell {cell}"
        super().__init__(f"benchmark engine exited with {returncode} for {where}")
        self.scenario = scenario
        self.returncode = returncode
        self.cell = cell


class EngineError(HarnessError):
    """The engine could not be started at all."""

    def __init__(self, engine: str, detail: str):
        super().__init__(f"cannot execute benchmark engine '{engine}': {detail}")
        self.engine = engine


class ConfigError(HarnessError, ValueError):
    """Bad command-line configuration (unknown scenario, malformed override, ...)."""


class RestoreError(HarnessError):
    def __init__(self, fixture: str, returncode: Optional[int], detail: Optional[str] = None):
        if detail is None:
            detail = f"exited with {returncode}"
        super().__init__(f"restoring fixture '{fixture}' {detail}")
        self.fixture = fixture
        self.returncode = returncode
