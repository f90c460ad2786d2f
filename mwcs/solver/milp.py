from __future__ import annotations

import logging

import numpy as np
from scipy.optimize import Bounds, LinearConstraint, milp
from scipy.sparse import dok_array

from mwcs.pipeline.basesolver import BaseSolver
from mwcs.pipeline.config import SolverOptions
from mwcs.pipeline.contraction import ContractedGraph
from mwcs.shared.graphs import subgraph_score

logger = logging.getLogger(__name__)


class FlowMilpSolver(BaseSolver):
    """
    Exact solver based on a single-commodity flow formulation.

    Variables:
    - x_i (binary): node i is part of the module;
    - y_i (binary): node i is the entry point of the flow, exactly one of them;
    - f_ij (continuous): flow on arc i -> j, for both directions of each edge;
    - r_i (continuous): flow from an artificial source into node i.

    The source sends one unit to each selected node, through its entry point
    and selected nodes only, which forces the module to be connected.
    """

    def __init__(self, graph: ContractedGraph, options: SolverOptions, module_size: int = -1):
        super().__init__(graph, options, module_size)
        self.nodes: list[int] = sorted(graph.graph.nodes)
        self.index: dict[int, int] = {node: i for i, node in enumerate(self.nodes)}
        self.arcs: list[tuple[int, int]] = []
        for u, v in graph.graph.edges():
            self.arcs.append((self.index[u], self.index[v]))
            self.arcs.append((self.index[v], self.index[u]))

    # Variable layout.
    def _x(self, i: int) -> int:
        return i

    def _y(self, i: int) -> int:
        return len(self.nodes) + i

    def _f(self, a: int) -> int:
        return 2 * len(self.nodes) + a

    def _r(self, i: int) -> int:
        return 2 * len(self.nodes) + len(self.arcs) + i

    def _constraints(self) -> list[LinearConstraint]:
        n = len(self.nodes)
        na = len(self.arcs)
        nv = 3 * n + na
        cons: list[LinearConstraint] = []

        # Exactly one entry point.
        A = dok_array((1, nv), dtype=np.int8)
        for i in range(n):
            A[0, self._y(i)] = 1
        cons.append(LinearConstraint(A, lb=1, ub=1))

        # The entry point is selected, and only the entry point receives
        # flow from the source.
        A = dok_array((2 * n, nv), dtype=np.int64)
        for i in range(n):
            A[i, self._y(i)] = 1
            A[i, self._x(i)] = -1
            A[n + i, self._r(i)] = 1
            A[n + i, self._y(i)] = -n
        cons.append(LinearConstraint(A, lb=-np.inf, ub=0))

        # Each selected node consumes one unit: inflow - outflow = x_i.
        A = dok_array((n, nv), dtype=np.int8)
        for i in range(n):
            A[i, self._r(i)] = 1
            A[i, self._x(i)] = -1
        for a, (i, j) in enumerate(self.arcs):
            A[j, self._f(a)] = 1
            A[i, self._f(a)] = -1
        cons.append(LinearConstraint(A, lb=0, ub=0))

        # Flow only travels between selected nodes.
        if na > 0:
            A = dok_array((2 * na, nv), dtype=np.int64)
            for a, (i, j) in enumerate(self.arcs):
                A[2 * a, self._f(a)] = 1
                A[2 * a, self._x(i)] = -n
                A[2 * a + 1, self._f(a)] = 1
                A[2 * a + 1, self._x(j)] = -n
            cons.append(LinearConstraint(A, lb=-np.inf, ub=0))

        if self.module_size > 0:
            A = dok_array((1, nv), dtype=np.int8)
            for i in range(n):
                A[0, self._x(i)] = 1
            cons.append(LinearConstraint(A, lb=self.module_size, ub=self.module_size))
        return cons

    def solve(self) -> bool:
        n = len(self.nodes)
        if n == 0 or self.module_size > n:
            return False
        na = len(self.arcs)
        nv = 3 * n + na

        # milp minimizes, we maximize the total score of selected nodes.
        objective = np.zeros(nv)
        for i, node in enumerate(self.nodes):
            objective[self._x(i)] = -self.graph.score(node)
        integrality = np.zeros(nv)
        integrality[: 2 * n] = 1
        upper = np.full(nv, float(n))
        upper[: 2 * n] = 1

        options: dict[str, object] = {"disp": False}
        if self.options.time_limit > 0:
            options["time_limit"] = self.options.time_limit
        if self.options.threads > 1:
            logger.debug("HiGHS through scipy does not expose threads, ignoring hint")

        res = milp(
            objective,
            integrality=integrality,
            bounds=Bounds(lb=0, ub=upper),
            constraints=self._constraints(),
            options=options,
        )
        if res.x is None:
            logger.info("no feasible solution: %s", res.message)
            return False
        if not res.success:
            logger.warning("solver stopped early, keeping incumbent: %s", res.message)

        self._solution = frozenset(
            node for i, node in enumerate(self.nodes) if res.x[self._x(i)] > 0.5
        )
        self._solution_weight = subgraph_score(self.graph.graph, self._solution)
        return len(self._solution) > 0
