from __future__ import annotations
import typing

import networkx as nx


def node_score(graph: nx.Graph, node: int) -> float:
    """
    Get the score of a node, i.e. attribute `score`, or 0. if the node
    doesn't specify one.
    """
    # Convert to float, in case scores are integers or numpy-style floats.
    return float(graph.nodes[node].get("score", 0.0))


def set_node_score(graph: nx.Graph, node: int, score: float) -> None:
    graph.nodes[node]["score"] = score


def subgraph_score(graph: nx.Graph, nodes: typing.Iterable[int]) -> float:
    """
    Get the total score of a set of nodes.
    """
    return float(sum(node_score(graph, n) for n in nodes))


def is_connected_subset(graph: nx.Graph, nodes: typing.Iterable[int]) -> bool:
    """
    Checks if a non-empty set of nodes induces a connected subgraph.
    """
    nodes = list(nodes)
    if len(nodes) == 0:
        return False
    return bool(nx.is_connected(graph.subgraph(nodes)))
