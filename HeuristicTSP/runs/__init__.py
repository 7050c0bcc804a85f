from HeuristicTSP.runs.entities import AlgorithmConfiguration, OptimizationRun, ProblemDefinition
from HeuristicTSP.runs.progress import RunProgressSnapshot, RunProgressStore
from HeuristicTSP.runs.repository import BaseRepository, InMemoryRepository
from HeuristicTSP.runs.service import OptimizationService, snapshot_from_run

__all__ = [
    "AlgorithmConfiguration",
    "BaseRepository",
    "InMemoryRepository",
    "OptimizationRun",
    "OptimizationService",
    "ProblemDefinition",
    "RunProgressSnapshot",
    "RunProgressStore",
    "snapshot_from_run",
]
