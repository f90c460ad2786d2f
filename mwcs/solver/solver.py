from __future__ import annotations

from mwcs.pipeline.basesolver import BaseSolver
from mwcs.pipeline.config import EnumerationConfig
from mwcs.pipeline.contraction import ContractedGraph
from mwcs.shared.types import SolverType
from mwcs.solver.milp import FlowMilpSolver
from mwcs.solver.treedp import TreeSolver


def make_solver(graph: ContractedGraph, config: EnumerationConfig) -> BaseSolver:
    """
    Instantiate the solver selected by `config` for a graph.

    If `config.solver_factory` is specified, it takes precedence over
    `config.solver`.
    """
    if config.solver_factory is not None:
        return config.solver_factory(graph, config)
    match config.solver:
        case SolverType.MILP:
            return FlowMilpSolver(graph, config.solver_options, config.module_size)
        case SolverType.TREE_DP:
            return TreeSolver(graph, config.solver_options, config.module_size)
        case _:
            raise ValueError(f"Unknown solver {config.solver!r}")
