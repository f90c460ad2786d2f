import networkx as nx
import pydantic
import pytest

from mwcs import ContractedGraph, EnumerationConfig, SolverOptions, SolverType
from mwcs.pipeline.basesolver import BaseSolver
from mwcs.shared.graphs import is_connected_subset
from mwcs.solver.milp import FlowMilpSolver
from mwcs.solver.solver import make_solver
from mwcs.solver.treedp import TreeSolver
from conftest import (
    best_connected_weight,
    contracted,
    path_graph,
    random_weighted_graph,
    random_weighted_tree,
    star_graph,
    weighted,
)


def check_solution(solver: BaseSolver, graph: ContractedGraph, size: int | None = None) -> None:
    expected = best_connected_weight(graph.graph, size=size)
    if expected == float("-inf"):
        assert not solver.solve()
        return
    assert solver.solve()
    module = solver.solution_module()
    assert len(module) > 0
    assert is_connected_subset(graph.graph, module)
    if size is not None:
        assert len(module) == size
    assert solver.solution_weight() == pytest.approx(expected)
    assert solver.solution_weight() == pytest.approx(sum(graph.score(node) for node in module))


def test_milp_path() -> None:
    graph = contracted(path_graph())
    solver = FlowMilpSolver(graph, SolverOptions())
    assert solver.solve()
    assert solver.solution_module() == frozenset(range(5))
    assert solver.solution_weight() == pytest.approx(8.0)


def test_milp_all_negative_picks_one_node() -> None:
    graph = contracted(weighted(nx.path_graph(3), [-3.0, -1.0, -2.0]))
    solver = FlowMilpSolver(graph, SolverOptions())
    assert solver.solve()
    assert solver.solution_module() == frozenset([1])
    assert solver.solution_weight() == pytest.approx(-1.0)


def test_milp_disconnected() -> None:
    """
    The best module never spans two components.
    """
    raw = nx.Graph()
    raw.add_nodes_from(range(4))
    raw.add_edges_from([(0, 1), (2, 3)])
    graph = contracted(weighted(raw, [2.0, 2.0, 3.0, -1.0]))
    solver = FlowMilpSolver(graph, SolverOptions())
    assert solver.solve()
    assert solver.solution_module() == frozenset([0, 1])
    assert solver.solution_weight() == pytest.approx(4.0)


@pytest.mark.parametrize("seed", range(10))
def test_milp_random(seed: int) -> None:
    graph = contracted(random_weighted_graph(8, 0.35, seed=seed))
    check_solution(FlowMilpSolver(graph, SolverOptions()), graph)


@pytest.mark.parametrize("seed", range(6))
def test_milp_module_size(seed: int) -> None:
    graph = contracted(random_weighted_graph(8, 0.3, seed=seed))
    check_solution(FlowMilpSolver(graph, SolverOptions(), module_size=3), graph, size=3)


def test_milp_module_size_larger_than_graph() -> None:
    graph = contracted(path_graph())
    assert not FlowMilpSolver(graph, SolverOptions(), module_size=6).solve()


def test_milp_module_size_infeasible() -> None:
    # Three isolated nodes have no connected subgraph of two nodes.
    raw = nx.Graph()
    raw.add_nodes_from(range(3))
    graph = contracted(weighted(raw, [1.0, 2.0, 3.0]))
    assert not FlowMilpSolver(graph, SolverOptions(), module_size=2).solve()


def test_milp_with_options() -> None:
    graph = contracted(star_graph())
    solver = FlowMilpSolver(graph, SolverOptions(time_limit=30, threads=4))
    assert solver.solve()
    assert solver.solution_weight() == pytest.approx(15.0)


def test_tree_dp_star() -> None:
    graph = contracted(star_graph())
    solver = TreeSolver(graph, SolverOptions())
    assert solver.solve()
    assert solver.solution_module() == frozenset(range(6))
    assert solver.solution_weight() == pytest.approx(15.0)


def test_tree_dp_star_module_size() -> None:
    graph = contracted(star_graph())
    solver = TreeSolver(graph, SolverOptions(), module_size=3)
    assert solver.solve()
    # The hub and the two best leaves.
    assert solver.solution_module() == frozenset([0, 4, 5])
    assert solver.solution_weight() == pytest.approx(9.0)


@pytest.mark.parametrize("seed", range(10))
def test_tree_dp_random(seed: int) -> None:
    graph = contracted(random_weighted_tree(12, seed=seed))
    check_solution(TreeSolver(graph, SolverOptions()), graph)


@pytest.mark.parametrize("size", [1, 2, 4])
@pytest.mark.parametrize("seed", range(6))
def test_tree_dp_module_size(seed: int, size: int) -> None:
    graph = contracted(random_weighted_tree(10, seed=seed))
    check_solution(TreeSolver(graph, SolverOptions(), module_size=size), graph, size=size)


def test_tree_dp_forest() -> None:
    raw = nx.Graph()
    raw.add_nodes_from(range(5))
    raw.add_edges_from([(0, 1), (2, 3), (3, 4)])
    graph = contracted(weighted(raw, [1.0, 1.0, 2.0, -1.0, 2.0]))
    check_solution(TreeSolver(graph, SolverOptions()), graph)
    check_solution(TreeSolver(graph, SolverOptions(), module_size=2), graph, size=2)
    assert not TreeSolver(graph, SolverOptions(), module_size=4).solve()


def test_tree_dp_rejects_cycles() -> None:
    graph = contracted(weighted(nx.cycle_graph(3), [1.0, 1.0, 1.0]))
    with pytest.raises(ValueError):
        TreeSolver(graph, SolverOptions())


@pytest.mark.parametrize("solver_type", [FlowMilpSolver, TreeSolver])
def test_empty_graph(solver_type: type[BaseSolver]) -> None:
    graph = contracted(nx.Graph())
    solver = solver_type(graph, SolverOptions())
    assert not solver.solve()


@pytest.mark.parametrize("module_size", [0, -2])
def test_invalid_module_size(module_size: int) -> None:
    graph = contracted(path_graph())
    with pytest.raises(ValueError):
        FlowMilpSolver(graph, SolverOptions(), module_size=module_size)


def test_make_solver_dispatch() -> None:
    graph = contracted(path_graph())
    assert isinstance(make_solver(graph, EnumerationConfig()), FlowMilpSolver)
    solver = make_solver(graph, EnumerationConfig(solver=SolverType.TREE_DP, module_size=2))
    assert isinstance(solver, TreeSolver)
    assert solver.module_size == 2


def test_make_solver_factory_takes_precedence() -> None:
    graph = contracted(path_graph())
    calls = []

    def factory(graph: ContractedGraph, config: EnumerationConfig) -> BaseSolver:
        calls.append(graph)
        return TreeSolver(graph, config.solver_options)

    config = EnumerationConfig(solver=SolverType.MILP, solver_factory=factory)
    assert isinstance(make_solver(graph, config), TreeSolver)
    assert calls == [graph]


def test_make_solver_unknown() -> None:
    graph = contracted(path_graph())
    config = EnumerationConfig(solver="quantum")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        make_solver(graph, config)


def test_solver_options_validation() -> None:
    assert SolverOptions().time_limit == -1
    assert SolverOptions().threads == 1
    with pytest.raises(pydantic.ValidationError):
        SolverOptions(threads=0)
    with pytest.raises(pydantic.ValidationError):
        SolverOptions(time_limit=-2)
