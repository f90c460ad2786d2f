"""
Enumeration of disjoint modules.

A single MWCS solution only tells us about the best module of a network.
To find several, we repeatedly remove the nodes of modules already found
and search again in what remains, one connected component at a time.
"""

from __future__ import annotations

import logging
import time
from typing import TextIO

import networkx as nx

from mwcs.pipeline.config import EnumerationConfig
from mwcs.pipeline.contraction import ContractedGraph, resolve
from mwcs.pipeline.preprocessing import ReductionEngine
from mwcs.shared.types import Module, MWCSInstance
from mwcs.solver.solver import make_solver

_logger = logging.getLogger(__name__)


class ModuleEnumerator:
    """
    Find disjoint modules of decreasing interest in an instance.

    Each round:
    1. take the subgraph induced by the nodes not yet part of any module;
    2. split it into connected components;
    3. for each component, copy it, optionally reduce it, and solve it;
       a solution with a positive weight (any weight, if a module size is
       configured) becomes a new module and its nodes are excluded from
       later rounds.

    Enumeration stops after a round in which no component produced a module.
    Since each other round excludes at least one more node, there are at
    most as many productive rounds as nodes.

    Components on which the solver fails are not excluded: they are solved
    again in later rounds (see `EnumerationConfig.cache_failures`).
    """

    def __init__(self, instance: MWCSInstance, config: EnumerationConfig | None = None):
        if config is None:
            config = EnumerationConfig()
        if config.module_size > 0 and (config.preprocess or config.preprocess_input):
            _logger.warning(
                "module size %s counts nodes of the reduced graph, as preprocessing is enabled",
                config.module_size,
            )
        self.instance = instance
        self.config = config
        self.modules: list[Module] = []
        self.rounds: int = 0
        self.engine = self._make_engine()
        self._module_index: list[int] = [-1] * len(instance)
        self._module_weight: list[float] = [0.0] * len(instance)

    def _make_engine(self) -> ReductionEngine:
        rules = self.config.rules() if self.config.rules is not None else None
        return ReductionEngine(rules=rules)

    # -----------------results---------------------------

    def module_index(self, node: int) -> int:
        """
        The index of the module containing an original node, -1 if none.
        """
        return self._module_index[node]

    def module_weight(self, node: int) -> float:
        """
        The weight of the module containing an original node, 0 if none.
        """
        return self._module_weight[node]

    def records(self) -> list[tuple[str, int, float]]:
        """
        One `(label, module index, module weight)` per original node, in
        the order of the original graph.
        """
        return [
            (self.instance.label(node), self._module_index[node], self._module_weight[node])
            for node in range(len(self.instance))
        ]

    def write_records(self, out: TextIO) -> None:
        """
        Write `records()` as tab-separated lines.
        """
        for label, index, weight in self.records():
            out.write(f"{label}\t{index}\t{weight}\n")

    # -----------------enumeration---------------------------

    def enumerate(self, logger: logging.Logger | None = None) -> list[Module]:
        """
        Run the enumeration.

        Arguments:
            logger: Where to report progress. Defaults to this module's logger.

        Returns:
            The modules, in order of discovery.
        """
        log = logger if logger is not None else _logger
        self.modules = []
        self.rounds = 0
        self._module_index = [-1] * len(self.instance)
        self._module_weight = [0.0] * len(self.instance)

        top = ContractedGraph.from_instance(self.instance)
        if self.config.preprocess_input:
            self.engine.reduce(top)

        # Nodes of `top` already part of a module. Only grows.
        picked: set[int] = set()
        failed: set[frozenset[int]] = set()
        start = time.monotonic()
        while True:
            if self.config.max_rounds is not None and self.rounds >= self.config.max_rounds:
                log.warning("stopping after %s rounds: round limit reached", self.rounds)
                break
            if (
                self.config.time_budget is not None
                and time.monotonic() - start >= self.config.time_budget
            ):
                log.warning("stopping after %s rounds: time budget exhausted", self.rounds)
                break
            self.rounds += 1

            allowed = top.graph.subgraph(node for node in top.graph.nodes if node not in picked)
            components = sorted(nx.connected_components(allowed), key=min)
            log.info("round %s - %s components", self.rounds, len(components))

            solve_count = 0
            for i, component in enumerate(components):
                log.info(
                    "considering component %s/%s: contains %s nodes",
                    i + 1,
                    len(components),
                    len(component),
                )
                key = frozenset(component)
                if key in failed:
                    log.info("component unchanged since last failure, skipping")
                    continue
                if self._solve_component(top, component, picked, log):
                    solve_count += 1
                elif self.config.cache_failures:
                    failed.add(key)

            if solve_count == 0:
                break
        log.info("enumeration complete: %s modules in %s rounds", len(self.modules), self.rounds)
        return self.modules

    def _solve_component(
        self,
        top: ContractedGraph,
        component: set[int],
        picked: set[int],
        log: logging.Logger,
    ) -> bool:
        """
        Copy, reduce and solve one component.

        Returns:
            True if a module was found. In this case, its nodes have been
            added to `picked` and the module recorded.
        """
        sub = ContractedGraph.induced(top, component)
        if self.config.preprocess:
            self.engine.reduce(sub)

        solver = make_solver(sub, self.config)
        if not solver.solve():
            log.info("no feasible solution found")
            return False
        weight = solver.solution_weight()
        if weight <= 0 and self.config.module_size <= 0:
            log.info("no solution with positive weight found")
            return False

        in_top = resolve(solver.solution_module(), sub)
        picked |= in_top
        module = self._process_module(resolve(in_top, top), weight)
        log.info("solution with weight %s and %s nodes found", weight, len(module))
        return True

    def _process_module(self, nodes: frozenset[int], weight: float) -> Module:
        """
        Record a module, given as original nodes.
        """
        assert len(nodes) > 0
        module = Module(self.instance, index=len(self.modules), nodes=nodes, weight=weight)
        for node in nodes:
            assert self._module_index[node] == -1, f"node {node} already belongs to a module"
            self._module_index[node] = module.index
            self._module_weight[node] = weight
        self.modules.append(module)
        return module
