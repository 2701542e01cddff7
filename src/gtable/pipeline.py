# -------------------------------------
# YAML pipelines of grouping operations
# -------------------------------------
"""
Pipelines describe a sequence of grouping operations in YAML:

    steps:
      - group_by: [k]          # or a single column name
      - sort_by: v
      - filter_eq: {column: k, value: a}
      - ungroup
      - flatten

A step is either a bare operation name (ungroup, flatten) or a
single-key mapping from operation name to its argument.
"""
from pathlib import Path
from typing import Any

import yaml

from .errors import PipelineError
from .grouping import Grouping
from .ops import filter_eq, flatten, group_by, sort_by, ungroup
from .table import Table

# Operations that take no argument
_BARE_STEPS = ("ungroup", "flatten")

# Operations that take an argument
_ARG_STEPS = ("group_by", "sort_by", "filter_eq")


def _parse_step(i: int, step: Any) -> tuple[str, Any]:
    if isinstance(step, str):
        if step in _BARE_STEPS:
            return step, None
        if step in _ARG_STEPS:
            raise PipelineError(f"step {i}: '{step}' requires an argument")
        raise PipelineError(f"step {i}: unknown operation '{step}'")

    if not isinstance(step, dict) or len(step) != 1:
        raise PipelineError(f"step {i}: expected an operation name or a single-key mapping, got {step!r}")

    op, arg = next(iter(step.items()))
    if op in _BARE_STEPS:
        return op, None
    if op not in _ARG_STEPS:
        raise PipelineError(f"step {i}: unknown operation '{op}'")

    if op == "group_by":
        cols = [arg] if isinstance(arg, str) else arg
        if not isinstance(cols, list) or not all(isinstance(c, str) for c in cols):
            raise PipelineError(f"step {i}: group_by expects a column name or list of names")
        return op, cols
    if op == "sort_by":
        if not isinstance(arg, str):
            raise PipelineError(f"step {i}: sort_by expects a column name")
        return op, arg
    # filter_eq
    if not isinstance(arg, dict) or "column" not in arg or "value" not in arg:
        raise PipelineError(f"step {i}: filter_eq expects a mapping with 'column' and 'value'")
    return op, (arg["column"], arg["value"])


def parse_steps(steps: Any) -> list[tuple[str, Any]]:
    """
    Validate pipeline steps.

    Args:
        steps: List of steps, or a dict with a 'steps' list

    Returns:
        List of (operation, argument) tuples

    Raises:
        PipelineError: If a step is malformed or names an unknown operation
    """
    if isinstance(steps, dict):
        if "steps" not in steps:
            raise PipelineError("pipeline missing required key: 'steps'")
        steps = steps["steps"]
    if steps is None:
        return []
    if not isinstance(steps, list):
        raise PipelineError(f"pipeline steps must be a list, got {type(steps).__name__}")
    return [_parse_step(i, step) for i, step in enumerate(steps)]


def load_pipeline(path: str | Path) -> list[tuple[str, Any]]:
    """
    Load and validate a pipeline YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is not valid YAML
        PipelineError: If the steps are malformed
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return parse_steps(data)


def run_pipeline(g: Grouping | Table, steps: Any) -> Grouping | Table:
    """Apply steps (raw or already parsed) to g in order."""
    if not (isinstance(steps, list) and all(isinstance(s, tuple) for s in steps)):
        steps = parse_steps(steps)
    for op, arg in steps:
        if op == "group_by":
            g = group_by(g, *arg)
        elif op == "sort_by":
            g = sort_by(g, arg)
        elif op == "filter_eq":
            g = filter_eq(g, *arg)
        elif op == "ungroup":
            g = ungroup(g)
        elif op == "flatten":
            g = flatten(g)
        else:
            raise PipelineError(f"unknown operation '{op}'")
    return g
