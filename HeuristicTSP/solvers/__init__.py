from __future__ import annotations

from typing import Optional

from HeuristicTSP.solvers.base import BaseSolver, SearchStep, SolverSpec, run_search
from HeuristicTSP.solvers.meta import (
    AntColonySolver,
    GeneticAlgorithmSolver,
    ParticleSwarmSolver,
    SimulatedAnnealingSolver,
    SlimeMoldSolver,
    TabuSearchSolver,
)
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType

_SOLVER_CLASSES: tuple[type[BaseSolver], ...] = (
    SimulatedAnnealingSolver,
    AntColonySolver,
    GeneticAlgorithmSolver,
    ParticleSwarmSolver,
    SlimeMoldSolver,
    TabuSearchSolver,
)

SOLVER_SPECS: dict[AlgorithmType, SolverSpec] = {
    cls.algorithm_type: SolverSpec(
        name=cls.name,
        cls=cls,
        family=cls.family,
        algorithm_type=cls.algorithm_type,
    )
    for cls in _SOLVER_CLASSES
}

SOLVER_REGISTRY: dict[str, type[BaseSolver]] = {spec.name: spec.cls for spec in SOLVER_SPECS.values()}
SOLVER_FAMILIES: dict[str, AlgorithmFamily] = {spec.name: spec.family for spec in SOLVER_SPECS.values()}


def get_solver(algorithm_type: AlgorithmType | str, seed: Optional[int] = None) -> BaseSolver:
    """Return a fresh solver for an algorithm-type tag."""
    spec = SOLVER_SPECS.get(AlgorithmType.parse(algorithm_type))
    if spec is None:
        raise KeyError(f"Unknown solver: {algorithm_type}")
    return spec.cls(seed=seed)


__all__ = [
    "AlgorithmFamily",
    "AlgorithmType",
    "BaseSolver",
    "SOLVER_FAMILIES",
    "SOLVER_REGISTRY",
    "SOLVER_SPECS",
    "SearchStep",
    "SolverSpec",
    "get_solver",
    "run_search",
    "AntColonySolver",
    "GeneticAlgorithmSolver",
    "ParticleSwarmSolver",
    "SimulatedAnnealingSolver",
    "SlimeMoldSolver",
    "TabuSearchSolver",
]
