"""
Shared definitions for solvers.

This module is useful mostly for users interested in writing
new solvers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mwcs.pipeline.config import SolverOptions
from mwcs.pipeline.contraction import ContractedGraph


class BaseSolver(ABC):
    """
    Abstract base class for all MWCS solvers.

    A solver is built for one (typically reduced) graph, solved once, then
    queried. Solutions are expressed in the nodes of that graph: mapping
    them back to original nodes is the caller's job.
    """

    def __init__(self, graph: ContractedGraph, options: SolverOptions, module_size: int = -1):
        """
        Initialize the solver with a graph and options.

        Args:
            graph (ContractedGraph): The graph to solve. Solvers read scores
                and labels from it and MUST NOT modify it.
            options (SolverOptions): Time limit and thread hint.
            module_size (int): If strictly positive, look for a connected
                subgraph with exactly this many nodes.
        """
        if module_size == 0 or module_size < -1:
            raise ValueError(f"Invalid module size {module_size}: expecting -1 or a positive size")
        self.graph = graph
        self.options = options
        self.module_size = module_size
        self._solution: frozenset[int] = frozenset()
        self._solution_weight: float = 0.0

    @abstractmethod
    def solve(self) -> bool:
        """
        Look for a maximum weight connected subgraph.

        Returns:
            True if a feasible (non-empty) solution was found.
        """
        pass

    def solution_weight(self) -> float:
        """
        The total score of the solution found by `solve`.
        """
        return self._solution_weight

    def solution_module(self) -> frozenset[int]:
        """
        The nodes of the solution found by `solve`.
        """
        return self._solution
