from __future__ import annotations

import logging
from math import inf

import networkx as nx

from mwcs.pipeline.basesolver import BaseSolver
from mwcs.pipeline.config import SolverOptions
from mwcs.pipeline.contraction import ContractedGraph
from mwcs.shared.graphs import subgraph_score

logger = logging.getLogger(__name__)


class TreeSolver(BaseSolver):
    """
    Exact solver for graphs without cycles, by dynamic programming.

    Each tree of the forest is rooted arbitrarily (at its smallest node).
    For each node v, we compute the best connected subgraph whose topmost
    node is v: the score of v plus every child subtree that contributes a
    positive weight. With a fixed module size, the same table is indexed by
    the number of nodes, as a knapsack over children.

    Note:
        The traversal is iterative, so deep trees do not hit Python's
        recursion limit.
    """

    def __init__(self, graph: ContractedGraph, options: SolverOptions, module_size: int = -1):
        super().__init__(graph, options, module_size)
        if len(graph) > 0 and not nx.is_forest(graph.graph):
            raise ValueError("TreeSolver requires a graph without cycles")

    def _traversals(self) -> list[tuple[list[int], dict[int, int]]]:
        """
        For each tree, nodes in post-order and the parent of each non-top node.
        """
        result = []
        for component in nx.connected_components(self.graph.graph):
            top = min(component)
            parents = nx.dfs_predecessors(self.graph.graph, source=top)
            order = list(nx.dfs_postorder_nodes(self.graph.graph, source=top))
            result.append((order, parents))
        return result

    def _children(self, order: list[int], parents: dict[int, int]) -> dict[int, list[int]]:
        children: dict[int, list[int]] = {node: [] for node in order}
        for node in order:
            if node in parents:
                children[parents[node]].append(node)
        return children

    def solve(self) -> bool:
        if len(self.graph) == 0:
            return False
        if self.module_size > 0:
            return self._solve_sized()
        return self._solve_unconstrained()

    def _solve_unconstrained(self) -> bool:
        best_weight = -inf
        best_top: int | None = None
        best_children: dict[int, list[int]] = {}
        best_table: dict[int, float] = {}
        for order, parents in self._traversals():
            children = self._children(order, parents)
            table: dict[int, float] = {}
            for node in order:
                table[node] = self.graph.score(node) + sum(
                    max(0.0, table[child]) for child in children[node]
                )
                if table[node] > best_weight:
                    best_weight = table[node]
                    best_top = node
                    best_children = children
                    best_table = table
        assert best_top is not None

        module: set[int] = set()
        stack = [best_top]
        while stack:
            node = stack.pop()
            module.add(node)
            stack.extend(child for child in best_children[node] if best_table[child] > 0)
        self._solution = frozenset(module)
        self._solution_weight = subgraph_score(self.graph.graph, module)
        return True

    def _solve_sized(self) -> bool:
        k = self.module_size
        best_weight = -inf
        best: tuple[int, dict[int, list[dict[int, int]]], dict[int, list[int]]] | None = None
        for order, parents in self._traversals():
            children = self._children(order, parents)
            # table[v][j]: best weight of a connected subgraph of j nodes topped by v.
            table: dict[int, dict[int, float]] = {}
            # choices[v][c][j]: number of nodes taken from the c-th child
            # when v's table (restricted to its first c+1 children) has j nodes.
            choices: dict[int, list[dict[int, int]]] = {}
            for node in order:
                current: dict[int, float] = {1: self.graph.score(node)}
                steps: list[dict[int, int]] = []
                for child in children[node]:
                    merged = dict(current)
                    taken = {j: 0 for j in current}
                    for j, w in current.items():
                        for jc, wc in table[child].items():
                            if j + jc > k:
                                continue
                            if w + wc > merged.get(j + jc, -inf):
                                merged[j + jc] = w + wc
                                taken[j + jc] = jc
                    current = merged
                    steps.append(taken)
                table[node] = current
                choices[node] = steps
                if current.get(k, -inf) > best_weight:
                    best_weight = current[k]
                    best = (node, choices, children)
        if best is None:
            return False

        top, best_choices, best_children = best
        module: set[int] = set()
        stack = [(top, k)]
        while stack:
            node, size = stack.pop()
            module.add(node)
            # Unwind the knapsack, last child first.
            for c in reversed(range(len(best_children[node]))):
                taken = best_choices[node][c][size]
                if taken > 0:
                    stack.append((best_children[node][c], taken))
                    size -= taken
            assert size == 1
        self._solution = frozenset(module)
        self._solution_weight = subgraph_score(self.graph.graph, module)
        return True
