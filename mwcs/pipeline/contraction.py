"""
The working graph manipulated by reduction rules and handed to solvers.
"""

from __future__ import annotations

from typing import Iterable

import networkx as nx

from mwcs.pipeline.degrees import DegreeIndex
from mwcs.shared.graphs import node_score, set_node_score
from mwcs.shared.types import MWCSInstance


class ContractedGraph:
    """
    A mutable MWCS graph, i.e. a networkx graph whose nodes carry a `score`
    and a `label`, along with:

    - a `DegreeIndex`, kept up to date by `remove` and `merge`;
    - a provenance map, associating each node to the set of nodes of the
      parent graph (the graph this one was copied from) it stands for.

    Nodes are always consecutive integers at construction time. Merging keeps
    the identity of the first node, so identities remain integers. The
    adjacency dictionaries of networkx double as our arc lookup.

    A `ContractedGraph` is one layer of provenance. Use `resolve` to map
    nodes back through several layers.
    """

    def __init__(self, graph: nx.Graph, origins: dict[int, frozenset[int]]) -> None:
        """
        Build a working graph.

        You probably want `from_instance` or `induced` instead.

        Arguments:
            graph: A graph whose nodes have attributes `score` and `label`.
                It is NOT copied.
            origins: For each node of `graph`, the nodes of the parent graph
                it stands for.
        """
        assert set(origins) == set(graph.nodes)
        self.graph = graph
        self._origins = origins

        # Get rid of self-loops, as we rely upon their absence in rule applications.
        graph.remove_edges_from(list(nx.selfloop_edges(graph)))
        self.degrees = DegreeIndex(graph)

    @classmethod
    def from_instance(cls, instance: MWCSInstance) -> ContractedGraph:
        """
        A working copy of an instance. Each node stands for itself.
        """
        graph = instance.graph.copy()
        return cls(graph, {node: frozenset([node]) for node in graph.nodes})

    @classmethod
    def induced(cls, parent: ContractedGraph, nodes: Iterable[int]) -> ContractedGraph:
        """
        Copy the subgraph of `parent` induced by `nodes` into a fresh instance,
        relabelling nodes to 0, 1, ...

        The provenance of each new node is the single `parent` node it copies.
        """
        to_index: dict[int, int] = {}
        graph = nx.Graph()
        for index, node in enumerate(sorted(nodes)):
            to_index[node] = index
            graph.add_node(index, score=parent.score(node), label=parent.label(node))
        for u, v in parent.graph.subgraph(to_index).edges():
            graph.add_edge(to_index[u], to_index[v])
        origins = {index: frozenset([node]) for node, index in to_index.items()}
        return cls(graph, origins)

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def __contains__(self, node: int) -> bool:
        return self.graph.has_node(node)

    def number_of_edges(self) -> int:
        return self.graph.number_of_edges()

    def score(self, node: int) -> float:
        return node_score(self.graph, node)

    def label(self, node: int) -> str:
        return str(self.graph.nodes[node].get("label", node))

    def degree(self, node: int) -> int:
        return self.degrees.degree(node)

    def neighbors(self, node: int) -> set[int]:
        return set(self.graph.neighbors(node))

    def origins(self, node: int) -> frozenset[int]:
        """
        The nodes of the parent graph that `node` stands for.
        """
        return self._origins[node]

    def map_to_parent(self, nodes: Iterable[int]) -> frozenset[int]:
        """
        The nodes of the parent graph that a set of nodes stands for.
        """
        result: set[int] = set()
        for node in nodes:
            result |= self._origins[node]
        return frozenset(result)

    # -----------------primitives---------------------------

    def remove(self, node: int) -> None:
        """
        Remove a node and all its incident edges.
        """
        neighbors = list(self.graph.neighbors(node))
        self.graph.remove_node(node)
        self.degrees.on_node_removed(node, neighbors)
        del self._origins[node]

    def merge(self, u: int, v: int) -> None:
        """
        Merge `v` into `u`.

        `u` survives, with the sum of both scores and the union of both
        provenance sets. Edges of `v` are rehomed onto `u`; parallel edges
        collapse and the edge between `u` and `v` disappears.

        Any connected subgraph containing both `u` and `v` corresponds to
        exactly one connected subgraph containing the merged node, with
        the same weight.
        """
        assert u != v
        assert self.graph.has_edge(u, v), f"cannot merge non-adjacent nodes {u} and {v}"
        for w in list(self.graph.neighbors(v)):
            if w == u or self.graph.has_edge(u, w):
                continue
            self.graph.add_edge(u, w)
            self.degrees.on_edge_added(u, w)
        set_node_score(self.graph, u, self.score(u) + self.score(v))
        self._origins[u] = self._origins[u] | self._origins[v]
        self.remove(v)

    def is_consistent(self) -> bool:
        """
        Full check of the internal invariants, for tests and assertions.
        """
        if set(self._origins) != set(self.graph.nodes):
            return False
        return self.degrees.is_consistent_with(self.graph)


def resolve(nodes: Iterable[int], *layers: ContractedGraph) -> frozenset[int]:
    """
    Map nodes of the innermost layer back to the outermost graph.

    Arguments:
        nodes: Nodes of `layers[0]`.
        layers: Contraction layers, innermost first, each one copied from
            the next one.
    """
    result = frozenset(nodes)
    for layer in layers:
        result = layer.map_to_parent(result)
    return result
