from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class City:
    """A point on the plane; cities are addressed by their index in a problem."""

    id: int
    x: float
    y: float
    name: Optional[str] = None

    def distance_to(self, other: "City") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "City":
        return cls(
            id=int(data.get("id", index)),
            x=float(data["x"]),
            y=float(data["y"]),
            name=data.get("name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "x": self.x, "y": self.y}
        if self.name is not None:
            payload["name"] = self.name
        return payload


Route = List[int]


def distance_matrix(cities: Sequence[City]) -> np.ndarray:
    """Pairwise Euclidean distances, shape (n, n)."""
    coords = np.asarray([(c.x, c.y) for c in cities], dtype=float).reshape(-1, 2)
    diff = coords[:, None, :] - coords[None, :, :]
    return np.linalg.norm(diff, axis=-1)


def compute_cycle_cost(dist_matrix: np.ndarray, cycle: Sequence[int]) -> float:
    """Compute tour cost (including return leg)."""
    if len(cycle) == 0:
        return float("inf")
    order = np.asarray(cycle, dtype=np.intp)
    return float(dist_matrix[order, np.roll(order, -1)].sum())


def compute_tour_distance(cities: Sequence[City], route: Sequence[int]) -> float:
    """Tour length computed straight from city coordinates."""
    if len(route) == 0:
        return 0.0
    total = 0.0
    for i in range(len(route) - 1):
        total += cities[route[i]].distance_to(cities[route[i + 1]])
    total += cities[route[-1]].distance_to(cities[route[0]])
    return total


def is_permutation(route: Sequence[int], n: int) -> bool:
    return len(route) == n and sorted(route) == list(range(n))


@dataclass(frozen=True)
class IterationResult:
    """Progress record emitted once per completed solver iteration."""

    iteration: int
    best_distance: float
    best_route: Tuple[int, ...]
    current_distance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iteration": self.iteration,
            "bestDistance": self.best_distance,
            "bestRoute": list(self.best_route),
            "currentDistance": self.current_distance,
        }


@dataclass(frozen=True)
class OptimizationResult:
    """Container capturing the outcome of one solver run."""

    best_distance: float
    best_route: Tuple[int, ...]
    iteration_history: Tuple[IterationResult, ...] = field(default_factory=tuple)
    total_iterations: int = 0
    execution_time_ms: int = 0
    algorithm: str = ""
    cancelled: bool = False

    def to_dict(self, include_history: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "algorithm": self.algorithm,
            "bestDistance": self.best_distance,
            "bestRoute": list(self.best_route),
            "totalIterations": self.total_iterations,
            "executionTimeMs": self.execution_time_ms,
            "cancelled": self.cancelled,
        }
        if include_history:
            payload["iterationHistory"] = [item.to_dict() for item in self.iteration_history]
        return payload


__all__ = [
    "City",
    "IterationResult",
    "OptimizationResult",
    "Route",
    "compute_cycle_cost",
    "compute_tour_distance",
    "distance_matrix",
    "is_permutation",
]
