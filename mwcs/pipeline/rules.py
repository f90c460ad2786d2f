"""
Reduction rules, i.e. local rewrites that shrink an MWCS instance without
changing the best weight a connected subgraph can achieve.

Each rule inspects a `ContractedGraph` (mostly through its `DegreeIndex`)
and removes nodes or merges adjacent nodes. `apply` returns the number of
changes, so that the `ReductionEngine` can tell when it has reached a fixpoint.

All rules accept an optional root: a node that the solver needs to find
in the graph afterwards. A rule never removes the root, and when it merges
the root with another node, the root is the survivor.
"""

from __future__ import annotations

import abc
import logging

import networkx as nx

from mwcs.pipeline.contraction import ContractedGraph

logger = logging.getLogger(__name__)


class ReductionRule(abc.ABC):
    """
    Shared base class for reduction rules.
    """

    name: str = "abstract"

    @abc.abstractmethod
    def apply(self, graph: ContractedGraph, root: int | None = None) -> int:
        """
        Apply the rule to the graph.

        Arguments:
            graph: The graph to rewrite in place.
            root: If specified, a node that MUST NOT be eliminated.

        Returns:
            The number of changes (removals or merges) performed.
        """
        ...

    def __repr__(self) -> str:
        return f"<{self.name}>"


class RootedReductionRule(ReductionRule):
    """
    A rule that only makes sense when a root is designated, typically
    because it removes nodes that cannot be connected to the root.
    """

    def apply(self, graph: ContractedGraph, root: int | None = None) -> int:
        assert root is not None, f"rule {self.name} requires a root"
        assert root in graph, f"root {root} is not part of the graph"
        return self.apply_rooted(graph, root)

    @abc.abstractmethod
    def apply_rooted(self, graph: ContractedGraph, root: int) -> int: ...


def _merge_keeping_root(graph: ContractedGraph, keep: int, other: int, root: int | None) -> None:
    """
    Merge `other` into `keep`, unless `other` is the root, in which case we
    merge `keep` into the root.
    """
    if other == root:
        graph.merge(other, keep)
    else:
        graph.merge(keep, other)


# -----------------negative degree 0 or 1---------------------------


class NegativeDegreeZeroOrOne(ReductionRule):
    """
    An isolated node or a leaf with a non-positive score never helps a
    connected solution: any solution containing it can drop it without
    losing weight or connectivity.
    """

    name = "NegDeg01"

    def apply(self, graph: ContractedGraph, root: int | None = None) -> int:
        removed = 0
        # Removing a leaf may turn its neighbor into a leaf or an isolated
        # node, so we keep going until both buckets are stable.
        candidates = list(graph.degrees.nodes_of_degree(0)) + list(
            graph.degrees.nodes_of_degree(1)
        )
        while candidates:
            node = candidates.pop()
            if node == root or node not in graph:
                continue
            if graph.degree(node) > 1 or graph.score(node) > 0:
                continue
            neighbors = graph.neighbors(node)
            graph.remove(node)
            removed += 1
            candidates.extend(n for n in neighbors if graph.degree(n) <= 1)
        return removed


# -----------------positive edge---------------------------


class PositiveEdge(ReductionRule):
    """
    A leaf with a non-negative score whose neighbor also has a non-negative
    score: whenever the neighbor is part of a solution, the leaf can join
    it, and a solution made of the leaf alone is never better than the pair.
    Merge them.
    """

    name = "PosEdge"

    def apply(self, graph: ContractedGraph, root: int | None = None) -> int:
        merged = 0
        for leaf in sorted(graph.degrees.nodes_of_degree(1)):
            # Earlier merges in this loop may have changed this node.
            if leaf not in graph or graph.degree(leaf) != 1:
                continue
            if graph.score(leaf) < 0:
                continue
            (neighbor,) = graph.neighbors(leaf)
            if graph.score(neighbor) < 0:
                continue
            _merge_keeping_root(graph, keep=neighbor, other=leaf, root=root)
            merged += 1
        return merged


# -----------------negative edge---------------------------


class NegativeEdge(ReductionRule):
    """
    Rewrites around edges between two nodes with non-positive scores.

    1. If such an edge is a bridge and the side of the bridge beyond one of
       its endpoints only contains nodes with non-positive scores, that side
       can never improve a solution: remove it entirely.
    2. If both endpoints have degree 2, any solution that contains exactly
       one of them has it as a leaf and can drop it. So there is always an
       optimal solution with both or neither: merge them.
    """

    name = "NegEdge"

    def apply(self, graph: ContractedGraph, root: int | None = None) -> int:
        return self.remove_negative_sides(graph, root) + self.merge_negative_chains(graph, root)

    def remove_negative_sides(self, graph: ContractedGraph, root: int | None) -> int:
        removed = 0
        # Removing nodes never turns a bridge into a non-bridge, so we can
        # compute bridges once.
        for u, v in list(nx.bridges(graph.graph)):
            if u not in graph or v not in graph:
                continue
            if graph.score(u) > 0 or graph.score(v) > 0:
                continue
            cut = nx.restricted_view(graph.graph, [], [(u, v)])
            for near, far in ((u, v), (v, u)):
                side = nx.node_connected_component(cut, far)
                if root in side:
                    continue
                if any(graph.score(node) > 0 for node in side):
                    continue
                logger.debug("%s: removing %s nodes beyond %s", self.name, len(side), near)
                for node in side:
                    graph.remove(node)
                removed += len(side)
                break
        return removed

    def merge_negative_chains(self, graph: ContractedGraph, root: int | None) -> int:
        merged = 0
        for u in sorted(graph.degrees.nodes_of_degree(2)):
            if u == root or u not in graph:
                continue
            if graph.degree(u) != 2 or graph.score(u) > 0:
                continue
            for v in sorted(graph.neighbors(u)):
                # A rooted solution may not leave the root out, so never merge it here.
                if v != root and graph.degree(v) == 2 and graph.score(v) <= 0:
                    graph.merge(u, v)
                    merged += 1
                    break
        return merged


# -----------------hubs---------------------------


class NegativeMirroredHub(ReductionRule):
    """
    Two nodes with non-positive scores, the same degree (at least 3) and
    exactly the same neighbors are interchangeable for any solution.
    Among a group of such mirrored hubs, keep the one with the highest score
    (lowest identity on ties) and remove the others.
    """

    name = "NegMirroredHubs"
    min_degree: int = 3

    def apply(self, graph: ContractedGraph, root: int | None = None) -> int:
        to_remove: list[int] = []
        for degree in graph.degrees.degrees():
            if degree < self.min_degree:
                continue
            groups: dict[frozenset[int], list[int]] = {}
            for node in graph.degrees.nodes_of_degree(degree):
                if graph.score(node) > 0:
                    continue
                groups.setdefault(frozenset(graph.graph.neighbors(node)), []).append(node)
            for group in groups.values():
                if len(group) < 2:
                    continue
                if root in group:
                    keep = root
                else:
                    keep = min(group, key=lambda node: (-graph.score(node), node))
                to_remove.extend(node for node in group if node != keep)
        for node in to_remove:
            graph.remove(node)
        return len(to_remove)


class NegativeHub(ReductionRule):
    """
    A generalization of `NegativeMirroredHub`.

    Consider a node U with non-positive score and degree at least 3, and
    another node V with non-positive score such that every neighbor of U
    is a neighbor of V, and V's score is at least U's. Then U and V are not
    adjacent, and any solution containing U can swap U for V (or simply
    drop U if V is already there) without losing weight. Remove U.
    """

    name = "NegHub"
    min_degree: int = 3

    def dominator(self, graph: ContractedGraph, u: int) -> int | None:
        """
        Find a node dominating `u`, if any.
        """
        neighbors_u = graph.neighbors(u)
        score_u = graph.score(u)
        # Any dominator is a neighbor of each neighbor of U, so we only
        # need to look around the neighbor with the smallest degree.
        pivot = min(neighbors_u, key=lambda node: (graph.degree(node), node))
        for v in sorted(graph.neighbors(pivot)):
            if v == u or graph.degree(v) < len(neighbors_u):
                continue
            score_v = graph.score(v)
            if score_v > 0 or score_v < score_u:
                continue
            neighbors_v = graph.neighbors(v)
            if not neighbors_u <= neighbors_v:
                continue
            if neighbors_u == neighbors_v and score_v == score_u and v > u:
                # Mirrored hubs with equal scores: the lowest identity survives.
                continue
            return v
        return None

    def apply(self, graph: ContractedGraph, root: int | None = None) -> int:
        removed = 0
        for degree in graph.degrees.degrees():
            if degree < self.min_degree:
                continue
            for u in sorted(graph.degrees.nodes_of_degree(degree)):
                if u == root or u not in graph or graph.degree(u) < self.min_degree:
                    continue
                if graph.score(u) > 0:
                    continue
                if self.dominator(graph, u) is not None:
                    graph.remove(u)
                    removed += 1
        return removed


# -----------------rooted rules---------------------------


class RootedPositiveDegreeZeroOrOne(RootedReductionRule):
    """
    Rooted variant: every node other than the root must be connected to
    the root in a solution.

    - An isolated node other than the root can never be connected: remove it.
    - A leaf other than the root, with a non-negative score, is merged into
      its only neighbor. We stop after the first merge, so that the engine
      re-evaluates buckets.

    Earlier rules of the same pass may create negative leaves, e.g. by
    merging a negative chain. These are skipped here and removed by
    `NegativeDegreeZeroOrOne` in the next pass.
    """

    name = "Root - PosDeg01"

    def apply_rooted(self, graph: ContractedGraph, root: int) -> int:
        changes = 0
        for node in list(graph.degrees.nodes_of_degree(0)):
            if node != root:
                graph.remove(node)
                changes += 1
        for leaf in sorted(graph.degrees.nodes_of_degree(1)):
            # Negative leaves are left to `NegativeDegreeZeroOrOne`.
            if leaf == root or graph.score(leaf) < 0:
                continue
            (neighbor,) = graph.neighbors(leaf)
            graph.merge(neighbor, leaf)
            return changes + 1
        return changes
