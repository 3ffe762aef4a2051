from __future__ import annotations
import dataclasses as dc
import itertools
import re
import shlex
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .constants import (
    AXIS_NAMES,
    COMMAND_TEMPLATE,
    FIND_AXIS,
    FIND_VALUES,
    FIXTURE_AXIS,
    REPLACE_AXIS,
    REPLACE_VALUES,
    SCENARIO_FIELDS,
    TOOL_BIN_NAME,
)
from .errors import AxisValueError
from .types import Axis, GridCell, Scenario

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


def substitute(token: str, values: Mapping[str, str]) -> str:
    """Replace ``{name}`` placeholders found in ``values``; leave the rest untouched."""
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), token)


def placeholders(token: str) -> List[str]:
    return _PLACEHOLDER_RE.findall(token)


def build_axes(sc: Scenario, find: Sequence[str] = FIND_VALUES,
               replace: Sequence[str] = REPLACE_VALUES) -> Tuple[Axis, Axis, Axis]:
    axes = (
        Axis(FIXTURE_AXIS, sc.fixture_set),
        Axis(FIND_AXIS, find),
        Axis(REPLACE_AXIS, replace),
    )
    for ax in axes:
        if not ax.values:
            raise AxisValueError(ax.name, None, f"no values for scenario '{sc.name}'")
    return axes


def iter_cells(axes: Sequence[Axis]) -> Iterator[GridCell]:
    """Yield the cartesian product of the axes, first axis outermost.

    Every combination is produced exactly once per position; repeated axis
    values yield repeated cells.
    """
    by_name = {ax.name: ax for ax in axes}
    missing = [n for n in AXIS_NAMES if n not in by_name]
    if missing:
        raise AxisValueError(missing[0], None, "axis is not defined")
    ordered = [by_name[n].values for n in AXIS_NAMES]
    for fixture, find, replace in itertools.product(*ordered):
        yield GridCell(fixture=fixture, find=find, replace=replace)


def grid_size(axes: Sequence[Axis]) -> int:
    n = 1
    for ax in axes:
        n *= len(ax)
    return n


@dc.dataclass(frozen=True)
class CommandTemplate:
    tokens: Tuple[str, ...] = COMMAND_TEMPLATE

    @classmethod
    def for_scenario(cls, sc: Scenario, tool: str = TOOL_BIN_NAME,
                     tokens: Sequence[str] = COMMAND_TEMPLATE) -> "CommandTemplate":
        return cls(tuple(tokens)).bind_scenario(sc, tool)

    def bind_scenario(self, sc: Scenario, tool: str = TOOL_BIN_NAME) -> "CommandTemplate":
        values: Dict[str, str] = {f: str(getattr(sc, f)) for f in SCENARIO_FIELDS}
        values["tool"] = tool
        bound = tuple(substitute(t, values) for t in self.tokens)
        for tok in bound:
            for name in placeholders(tok):
                if name not in AXIS_NAMES:
                    raise AxisValueError(name, None, f"unknown placeholder in template token {tok!r}")
        return CommandTemplate(bound)

    def render_engine(self) -> str:
        """Shell command with axis placeholders left for the engine to fill.

        Tokens holding placeholders end up single-quoted, so the engine must
        only substitute values that contain no single quote.
        """
        return " ".join(shlex.quote(t) for t in self.tokens)

    def instantiate(self, cell: GridCell) -> str:
        params = cell.as_params()
        return " ".join(shlex.quote(substitute(t, params)) for t in self.tokens)


def expand(sc: Scenario, find: Sequence[str] = FIND_VALUES, replace: Sequence[str] = REPLACE_VALUES,
           tool: str = TOOL_BIN_NAME) -> List[Tuple[GridCell, str]]:
    """All (cell, concrete command) pairs for one scenario, in generation order."""
    tmpl = CommandTemplate.for_scenario(sc, tool)
    return [(cell, tmpl.instantiate(cell)) for cell in iter_cells(build_axes(sc, find, replace))]


def check_engine_values(axes: Sequence[Axis], forbidden: str = ",'") -> None:
    """Reject values the engine's comma-separated parameter lists cannot carry."""
    for ax in axes:
        for v in ax.values:
            bad: Optional[str] = next((c for c in forbidden if c in v), None)
            if bad is not None:
                raise AxisValueError(ax.name, v, f"contains {bad!r}; use --expand cell")
            if v == "":
                raise AxisValueError(ax.name, v, "empty value; use --expand cell")
