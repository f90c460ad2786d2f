"""
Preprocessing: shrink an MWCS instance by applying reduction rules until
none of them applies.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from mwcs.pipeline.contraction import ContractedGraph
from mwcs.pipeline.rules import (
    NegativeDegreeZeroOrOne,
    NegativeEdge,
    NegativeMirroredHub,
    PositiveEdge,
    ReductionRule,
    RootedPositiveDegreeZeroOrOne,
)

logger = logging.getLogger(__name__)


def default_rules() -> list[ReductionRule]:
    """
    The default battery of unrooted rules, in the order they are applied.
    """
    return [NegativeDegreeZeroOrOne(), PositiveEdge(), NegativeEdge(), NegativeMirroredHub()]


def default_rooted_rules() -> list[ReductionRule]:
    """
    The default battery of rules when a root is designated.

    `RootedPositiveDegreeZeroOrOne` takes the place of `PositiveEdge`.
    """
    return [
        NegativeDegreeZeroOrOne(),
        NegativeEdge(),
        NegativeMirroredHub(),
        RootedPositiveDegreeZeroOrOne(),
    ]


class ReductionEngine:
    """
    Apply a fixed, ordered battery of rules to a graph, pass after pass,
    until a full pass does not change anything.

    Every change removes at least one node, so the number of passes is
    bounded by the size of the graph.
    """

    def __init__(
        self,
        rules: Sequence[ReductionRule] | None = None,
        rooted_rules: Sequence[ReductionRule] | None = None,
    ) -> None:
        self.rules: list[ReductionRule] = list(rules) if rules is not None else default_rules()
        self.rooted_rules: list[ReductionRule] = (
            list(rooted_rules) if rooted_rules is not None else default_rooted_rules()
        )
        self.statistics: Counter[str] = Counter()
        """
        Number of changes per rule name, accumulated over all calls to `reduce`.
        """

        self.passes: int = 0

    def reduce(self, graph: ContractedGraph, root: int | None = None) -> int:
        """
        Rewrite `graph` in place until fixpoint.

        Arguments:
            graph: The graph to reduce.
            root: If specified, run in rooted mode: use the rooted battery and
                never eliminate `root`.

        Returns:
            The total number of changes.
        """
        if root is not None:
            assert root in graph, f"root {root} is not part of the graph"
            rules = self.rooted_rules
        else:
            rules = self.rules

        total = 0
        initial_size = (len(graph), graph.number_of_edges())
        while True:
            self.passes += 1
            changes = 0
            for rule in rules:
                count = rule.apply(graph, root)
                if count > 0:
                    logger.debug("preprocessing - rule %s applied %s times", rule.name, count)
                    self.statistics[rule.name] += count
                changes += count
            total += changes
            if changes == 0:
                break
        if root is not None:
            assert root in graph
        logger.info(
            "preprocessing - reduced from %s nodes/%s edges to %s nodes/%s edges",
            initial_size[0],
            initial_size[1],
            len(graph),
            graph.number_of_edges(),
        )
        return total


def reduce_to_fixpoint(
    graph: ContractedGraph,
    rules: Sequence[ReductionRule] | None = None,
    root: int | None = None,
) -> int:
    """
    Shortcut for `ReductionEngine(rules).reduce(graph, root)`.

    If `root` is specified and `rules` is too, `rules` is used as the
    rooted battery.
    """
    if root is None:
        engine = ReductionEngine(rules=rules)
    else:
        engine = ReductionEngine(rooted_rules=rules)
    return engine.reduce(graph, root)
