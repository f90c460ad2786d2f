"""
MWCS is a Python library that finds modules in networks by solving the Maximum Weight Connected Subgraph problem.

The Maximum Weight Connected Subgraph problem (or MWCS) is a graph optimization problem: each node of a graph carries a
score, possibly negative, and solving MWCS is finding a connected set of nodes whose total score is as large as
possible. In molecular interaction networks, where scores reflect e.g. differential expression, such a set is a
biologically meaningful "module". The problem is NP-hard, so we first shrink instances with reduction rules that
provably preserve the best achievable weight, then hand the reduced instances to an exact solver.

The core of the library is an enumerator that repeatedly extracts disjoint modules from a network, component by
component, and maps every module back to the nodes of the original network.
"""

from __future__ import annotations

from .pipeline.config import EnumerationConfig, SolverOptions
from .pipeline.contraction import ContractedGraph
from .pipeline.preprocessing import ReductionEngine
from .shared.types import Module, MWCSInstance, SolverType
from .solver.enumerate import ModuleEnumerator

__all__ = [
    "ContractedGraph",
    "EnumerationConfig",
    "Module",
    "ModuleEnumerator",
    "MWCSInstance",
    "ReductionEngine",
    "SolverOptions",
    "SolverType",
]
