import itertools
import random

import networkx as nx
import pytest

from mwcs import ContractedGraph, MWCSInstance


def weighted(graph: nx.Graph, scores: list[float]) -> nx.Graph:
    graph = graph.copy()
    for node, score in zip(list(graph.nodes), scores):
        graph.nodes[node]["weight"] = score
    return graph


def path_graph() -> nx.Graph:
    """
    a - b - c - d - e, with scores [3, -1, 4, -1, 3].
    """
    graph = nx.Graph()
    for node, score in zip("abcde", [3.0, -1.0, 4.0, -1.0, 3.0]):
        graph.add_node(node, weight=score)
    graph.add_edges_from([("a", "b"), ("b", "c"), ("c", "d"), ("d", "e")])
    return graph


def two_triangles() -> nx.Graph:
    """
    One triangle with positive scores, one with negative scores.
    """
    graph = nx.Graph()
    for node, score in [("p1", 1.0), ("p2", 2.0), ("p3", 3.0)]:
        graph.add_node(node, weight=score)
    for node, score in [("n1", -1.0), ("n2", -2.0), ("n3", -3.0)]:
        graph.add_node(node, weight=score)
    graph.add_edges_from([("p1", "p2"), ("p2", "p3"), ("p3", "p1")])
    graph.add_edges_from([("n1", "n2"), ("n2", "n3"), ("n3", "n1")])
    return graph


def star_graph() -> nx.Graph:
    """
    A hub with score 0 and five leaves with positive scores.
    """
    graph = nx.star_graph(5)
    graph.nodes[0]["weight"] = 0.0
    for leaf in range(1, 6):
        graph.nodes[leaf]["weight"] = float(leaf)
    return graph


def random_weighted_graph(n: int, p: float, seed: int) -> nx.Graph:
    graph = nx.gnp_random_graph(n, p, seed=seed)
    rng = random.Random(seed)
    for node in graph.nodes:
        graph.nodes[node]["weight"] = float(rng.randint(-5, 4))
    return graph


def random_weighted_tree(n: int, seed: int) -> nx.Graph:
    rng = random.Random(seed)
    graph = nx.Graph()
    graph.add_node(0)
    for node in range(1, n):
        graph.add_edge(node, rng.randrange(node))
    for node in graph.nodes:
        graph.nodes[node]["weight"] = float(rng.randint(-5, 4))
    return graph


def contracted(graph: nx.Graph) -> ContractedGraph:
    return ContractedGraph.from_instance(MWCSInstance(graph))


def best_connected_weight(
    graph: nx.Graph, size: int | None = None, root: int | None = None
) -> float:
    """
    The weight of a maximum weight connected subgraph of a graph with
    `score` attributes, by brute force. If `root` is specified, only
    subgraphs containing it are considered.

    Only suitable for small graphs. Returns -inf if there is no candidate.
    """
    best = float("-inf")
    nodes = list(graph.nodes)
    sizes = [size] if size is not None else range(1, len(nodes) + 1)
    for k in sizes:
        for subset in itertools.combinations(nodes, k):
            if root is not None and root not in subset:
                continue
            if not nx.is_connected(graph.subgraph(subset)):
                continue
            best = max(best, sum(graph.nodes[n].get("score", 0.0) for n in subset))
    return best


@pytest.fixture
def path_instance() -> MWCSInstance:
    return MWCSInstance(path_graph())


@pytest.fixture
def triangles_instance() -> MWCSInstance:
    return MWCSInstance(two_triangles())
