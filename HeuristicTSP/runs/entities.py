from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from HeuristicTSP.core import City, IterationResult
from HeuristicTSP.parameters import coerce_parameters
from HeuristicTSP.utils.taxonomy import AlgorithmType, RunStatus


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> uuid.UUID:
    return uuid.uuid4()


@dataclass
class AlgorithmConfiguration:
    """Saved solver setup; parameters are normalised to floats on creation."""

    algorithm_type: AlgorithmType
    parameters: Dict[str, float] = field(default_factory=dict)
    max_iterations: int = 1000
    name: str = ""
    description: Optional[str] = None
    owner_id: Optional[uuid.UUID] = None
    id: uuid.UUID = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.algorithm_type = AlgorithmType.parse(self.algorithm_type)
        self.parameters = coerce_parameters(self.parameters)
        self.max_iterations = int(self.max_iterations)


@dataclass
class ProblemDefinition:
    cities: List[City]
    name: str = ""
    description: Optional[str] = None
    owner_id: Optional[uuid.UUID] = None
    id: uuid.UUID = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)

    @property
    def city_count(self) -> int:
        return len(self.cities)

    @classmethod
    def from_coordinates(cls, coordinates: Sequence[Sequence[float]], **kwargs: Any) -> "ProblemDefinition":
        cities = [City(id=i, x=float(x), y=float(y)) for i, (x, y) in enumerate(coordinates)]
        return cls(cities=cities, **kwargs)


@dataclass
class OptimizationRun:
    configuration_id: uuid.UUID
    problem_id: uuid.UUID
    owner_id: Optional[uuid.UUID] = None
    status: RunStatus = RunStatus.PENDING
    best_distance: Optional[float] = None
    best_route: Optional[List[int]] = None
    iteration_history: List[IterationResult] = field(default_factory=list)
    total_iterations: int = 0
    execution_time_ms: int = 0
    error_message: Optional[str] = None
    id: uuid.UUID = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "configurationId": str(self.configuration_id),
            "problemId": str(self.problem_id),
            "status": self.status.value,
            "bestDistance": self.best_distance,
            "bestRoute": self.best_route,
            "totalIterations": self.total_iterations,
            "executionTimeMs": self.execution_time_ms,
            "errorMessage": self.error_message,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


__all__ = ["AlgorithmConfiguration", "OptimizationRun", "ProblemDefinition", "new_id", "utc_now"]
