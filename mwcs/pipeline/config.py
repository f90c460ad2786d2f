"""
Configuration for module enumeration.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Sequence

import pydantic

from mwcs.shared.types import SolverType

if TYPE_CHECKING:
    from mwcs.pipeline.basesolver import BaseSolver
    from mwcs.pipeline.contraction import ContractedGraph
    from mwcs.pipeline.rules import ReductionRule

__all__ = [
    "EnumerationConfig",
    "SolverOptions",
    "SolverType",
]


class SolverOptions(pydantic.BaseModel):
    """Options passed as-is to solvers."""

    time_limit: int = pydantic.Field(default=-1, ge=-1)
    """
    Time limit for a single solve, in seconds. -1 means unbounded.

    Solvers that stop on their time limit may still report the best
    solution found so far.
    """

    threads: int = pydantic.Field(default=1, ge=1)
    """
    A hint on the number of threads a solver may use. Solvers that do
    not support multithreading ignore it.
    """


@dataclass
class EnumerationConfig:
    """
    Configuration class for module enumeration.
    """

    solver: SolverType = SolverType.MILP
    """
    The solver used on each component.
    """

    solver_factory: Callable[[ContractedGraph, EnumerationConfig], BaseSolver] | None = None
    """
    If specified, use this to build solvers instead of `solver`.
    """

    solver_options: SolverOptions = field(default_factory=SolverOptions)

    module_size: int = -1
    """
    If strictly positive, every module has exactly this many nodes (in the
    graph handed to the solver) and is accepted even if its weight is not
    positive. -1 means unconstrained.

    Reduction rules merge nodes, so set `preprocess` (and `preprocess_input`)
    to False to count original nodes. `ModuleEnumerator` warns otherwise.
    """

    preprocess: bool = True
    """
    Reduce each component before handing it to the solver.
    """

    preprocess_input: bool = False
    """
    Reduce the whole graph once before enumerating. Modules are then searched
    in the reduced graph and mapped back to the original nodes.
    """

    rules: Callable[[], Sequence[ReductionRule]] | None = None
    """
    If specified, build the battery of reduction rules. Otherwise, use
    `mwcs.pipeline.preprocessing.default_rules`.
    """

    max_rounds: int | None = None
    """
    If specified, stop after this many rounds, even if the last round found
    modules. Checked between rounds only.
    """

    time_budget: float | None = None
    """
    If specified, do not start a new round after this many seconds.
    A round in progress is always completed.
    """

    cache_failures: bool = False
    """
    Remember components on which the solver failed, and skip them in later
    rounds if they come back unchanged. By default, such components are
    solved again at every round.
    """
