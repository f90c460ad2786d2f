from __future__ import annotations

from enum import Enum
from typing import Any, Iterable
import networkx
import matplotlib.pyplot as plt


class SolverType(str, Enum):
    """
    The solver used to extract a module from a reduced component.
    """

    MILP = "milp"
    """
    Single-commodity flow formulation solved as a mixed-integer linear
    program (HiGHS, through scipy). Exact, works on any graph.
    """

    TREE_DP = "tree-dp"
    """
    Dynamic programming over a forest. Exact and fast, but only accepts
    graphs without cycles.
    """


class MWCSInstance:
    """
    An instance of the Maximum Weight Connected Subgraph problem.

    Any node in the graph may have a property `weight` (float, defaulting to
    `0.0`) specifying its score, which may be negative, and a property `label`
    (defaulting to the string representation of the node).
    """

    def __init__(self, graph: networkx.Graph, weight_attribute: str = "weight"):
        self.original_graph = graph.copy()

        # Our algorithms depend on nodes being consecutive integers, starting
        # from 0, so we first need to rename nodes in the graph.
        self.index_to_node_label: dict[int, Any] = dict()
        self.node_label_to_index: dict[Any, int] = dict()
        for index, label in enumerate(graph.nodes()):
            self.index_to_node_label[index] = label
            self.node_label_to_index[label] = index

        # Copy nodes, scores and labels.
        self.graph = networkx.Graph()
        for index, node in enumerate(graph.nodes()):
            data = graph.nodes[node]
            try:
                score = float(data.get(weight_attribute, 0.0))
            except (TypeError, ValueError) as e:
                raise ValueError(f"node {node!r} has a non-numeric score") from e
            self.graph.add_node(index, score=score, label=str(data.get("label", node)))

        # Copy edges, dropping self-loops: they carry no information for MWCS.
        for u, v in graph.edges():
            if u == v:
                continue
            self.graph.add_edge(self.node_label_to_index[u], self.node_label_to_index[v])

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def score(self, index: int) -> float:
        return float(self.graph.nodes[index]["score"])

    def label(self, index: int) -> str:
        return str(self.graph.nodes[index]["label"])

    def node_index(self, node: Any) -> int:
        """
        Return the index for a node in the original graph.
        """
        return self.node_label_to_index[node]

    def node_indices(self, nodes: Iterable[Any]) -> list[int]:
        """
        Return the indices for nodes in the original graph.
        """
        return [self.node_index(node) for node in nodes]

    def draw(
        self,
        modules: list[Module] | None = None,
        node_size: int = 600,
        font_family: str = "serif",
    ) -> None:
        """
        Draw instance graph, one color per module.

        Parameters:

            modules (list[Module]): Modules to highlight. Nodes outside of any
                module are drawn in white.
            node_size (int): Size of drawn nodes in drawn graph. (default: 600)
        """
        node_positions = networkx.kamada_kawai_layout(self.original_graph)
        unhighlighted: set[Any] = set(self.original_graph.nodes)
        colors = plt.get_cmap("tab10")
        for module in modules or []:
            nodes = [self.index_to_node_label[i] for i in module.node_indices]
            unhighlighted -= set(nodes)
            networkx.draw_networkx_nodes(
                self.original_graph,
                node_positions,
                nodelist=nodes,
                node_color=[colors(module.index % 10)] * len(nodes),
                node_size=node_size,
            )
        networkx.draw_networkx_nodes(
            self.original_graph,
            node_positions,
            nodelist=list(unhighlighted),
            node_color="white",
            edgecolors="black",
            node_size=node_size,
        )
        networkx.draw_networkx_labels(self.original_graph, node_positions, font_family=font_family)
        networkx.draw_networkx_edges(self.original_graph, node_positions)
        plt.tight_layout()
        plt.axis("off")
        plt.show()


class Module:
    """
    A module, i.e. one connected subgraph discovered during enumeration.

    Attributes:
        instance (MWCSInstance): The instance in which this module was found.
        index (int): Discovery index, starting at 0.
        node_indices (frozenset[int]): The indices of the nodes of `instance` in this module.
        nodes (list[Any]): The nodes of `instance` in this module.
        weight (float): The weight reported by the solver for this module.
    """

    def __init__(self, instance: MWCSInstance, index: int, nodes: Iterable[int], weight: float):
        self.instance = instance
        self.index = index
        self.node_indices = frozenset(nodes)
        self.nodes = [self.instance.index_to_node_label[i] for i in sorted(self.node_indices)]
        self.weight = weight

    def __len__(self) -> int:
        return len(self.node_indices)

    def __repr__(self) -> str:
        return f"Module {self.index} ({self.weight}): {self.nodes}"
