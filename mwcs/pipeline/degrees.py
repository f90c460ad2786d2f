"""
Bucketing of nodes by degree.

Reduction rules are triggered by nodes of a given degree (isolated nodes,
leaves, hubs). Rather than rescanning the graph at every pass, we maintain
the buckets incrementally: every structural change to a `ContractedGraph`
goes through one of the `on_*` hooks below.
"""

from __future__ import annotations

from typing import Iterable

import networkx as nx


_EMPTY: frozenset[int] = frozenset()


class DegreeIndex:
    """
    Map from degree to the set of nodes that currently have that degree.

    Invariant: every live node is in exactly one bucket, the one whose key
    is its current degree. Empty buckets are dropped.
    """

    def __init__(self, graph: nx.Graph | None = None) -> None:
        self._degree: dict[int, int] = {}
        self._buckets: dict[int, set[int]] = {}
        if graph is not None:
            for node, degree in graph.degree():
                self._insert(node, degree)

    def __contains__(self, node: int) -> bool:
        return node in self._degree

    def __len__(self) -> int:
        return len(self._degree)

    def degree(self, node: int) -> int:
        return self._degree[node]

    def nodes_of_degree(self, degree: int) -> frozenset[int] | set[int]:
        """
        The nodes with a given degree.

        This is the live bucket, not a copy. Callers that mutate the graph
        while iterating must iterate over a copy.
        """
        return self._buckets.get(degree, _EMPTY)

    def degrees(self) -> list[int]:
        """
        The degrees for which at least one node exists, in increasing order.
        """
        return sorted(self._buckets)

    def max_degree(self) -> int:
        if not self._buckets:
            return -1
        return max(self._buckets)

    # -----------------hooks---------------------------

    def on_node_added(self, node: int) -> None:
        assert node not in self._degree
        self._insert(node, 0)

    def on_edge_added(self, u: int, v: int) -> None:
        self._move(u, self._degree[u] + 1)
        self._move(v, self._degree[v] + 1)

    def on_edge_removed(self, u: int, v: int) -> None:
        self._move(u, self._degree[u] - 1)
        self._move(v, self._degree[v] - 1)

    def on_node_removed(self, node: int, neighbors: Iterable[int]) -> None:
        """
        Forget a node and decrement the degree of each of its former neighbors.

        Arguments:
            node: The node, already removed from the graph.
            neighbors: Its neighbors at the time of removal.
        """
        for neighbor in neighbors:
            self._move(neighbor, self._degree[neighbor] - 1)
        self._discard(node)
        del self._degree[node]

    # -----------------internals---------------------------

    def _insert(self, node: int, degree: int) -> None:
        self._degree[node] = degree
        self._buckets.setdefault(degree, set()).add(node)

    def _discard(self, node: int) -> None:
        degree = self._degree[node]
        bucket = self._buckets[degree]
        bucket.discard(node)
        if not bucket:
            del self._buckets[degree]

    def _move(self, node: int, degree: int) -> None:
        assert degree >= 0, f"negative degree for node {node}"
        self._discard(node)
        self._insert(node, degree)

    def is_consistent_with(self, graph: nx.Graph) -> bool:
        """
        Check the invariant against the actual degrees of `graph`.

        This is a full scan, meant for assertions and tests.
        """
        if set(self._degree) != set(graph.nodes):
            return False
        seen = 0
        for degree, bucket in self._buckets.items():
            if not bucket:
                return False
            for node in bucket:
                if graph.degree(node) != degree or self._degree[node] != degree:
                    return False
            seen += len(bucket)
        return seen == len(self._degree)
