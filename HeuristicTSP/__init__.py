from HeuristicTSP.core import (
    City,
    IterationResult,
    OptimizationResult,
    compute_cycle_cost,
    compute_tour_distance,
    distance_matrix,
)
from HeuristicTSP.errors import (
    AlgorithmExecutionError,
    HeuristicTSPError,
    NotFoundError,
    RunNotInProgressError,
    ServiceClosedError,
    ValidationError,
)
from HeuristicTSP.runs import (
    AlgorithmConfiguration,
    BaseRepository,
    InMemoryRepository,
    OptimizationRun,
    OptimizationService,
    ProblemDefinition,
    RunProgressSnapshot,
    RunProgressStore,
)
from HeuristicTSP.solvers import SOLVER_REGISTRY, SOLVER_SPECS, BaseSolver, get_solver
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType, RunStatus

__version__ = "0.1.0"

__all__ = [
    "AlgorithmConfiguration",
    "AlgorithmExecutionError",
    "AlgorithmFamily",
    "AlgorithmType",
    "BaseRepository",
    "BaseSolver",
    "City",
    "HeuristicTSPError",
    "InMemoryRepository",
    "IterationResult",
    "NotFoundError",
    "OptimizationResult",
    "OptimizationRun",
    "OptimizationService",
    "ProblemDefinition",
    "RunNotInProgressError",
    "RunProgressSnapshot",
    "RunProgressStore",
    "RunStatus",
    "ServiceClosedError",
    "SOLVER_REGISTRY",
    "SOLVER_SPECS",
    "ValidationError",
    "compute_cycle_cost",
    "compute_tour_distance",
    "distance_matrix",
    "get_solver",
]
