from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Mapping, MutableSequence, Optional, Sequence, Type

import numpy as np

from HeuristicTSP.core import City, IterationResult, OptimizationResult, compute_cycle_cost, distance_matrix
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType

IterationCallback = Callable[[IterationResult], None]


@dataclass(frozen=True)
class SearchStep:
    """State a solver reports after initialisation and after every iteration."""

    best_route: Sequence[int]
    best_distance: float
    current_distance: float


def current_time() -> float:
    return time.perf_counter()


def elapsed_ms(start_time: float) -> int:
    return int((current_time() - start_time) * 1000)


def random_route(n: int, rng: np.random.Generator) -> List[int]:
    """Uniform random permutation of ``0..n-1`` (Fisher-Yates)."""
    route = list(range(n))
    for i in range(n - 1, 0, -1):
        j = int(rng.integers(i + 1))
        route[i], route[j] = route[j], route[i]
    return route


def reverse_segment(route: MutableSequence[int], i: int, j: int) -> None:
    """Reverse ``route[i..j]`` in place; applying it twice restores the route."""
    route[i : j + 1] = route[i : j + 1][::-1]


def swap(route: MutableSequence[int], i: int, j: int) -> None:
    route[i], route[j] = route[j], route[i]


def get_param(parameters: Mapping[str, float], key: str, default: float) -> float:
    value = parameters.get(key)
    if value is None:
        return float(default)
    return float(value)


def get_int_param(parameters: Mapping[str, float], key: str, default: int) -> int:
    value = parameters.get(key)
    if value is None:
        return int(default)
    return int(round(float(value)))


@dataclass(frozen=True)
class SolverSpec:
    """Metadata describing a solver implementation."""

    name: str
    cls: Type["BaseSolver"]
    family: AlgorithmFamily
    algorithm_type: AlgorithmType


class BaseSolver:
    """Common interface for the metaheuristic strategies.

    A strategy only implements :meth:`search`, a generator that first yields
    the initial state and then one :class:`SearchStep` per iteration. The loop
    bookkeeping (cancellation, history, callback, timing) lives in
    :func:`run_search`.
    """

    name: str
    family: AlgorithmFamily
    algorithm_type: AlgorithmType

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def search(
        self,
        dist_matrix: np.ndarray,
        max_iterations: int,
        parameters: Mapping[str, float],
    ) -> Iterator[SearchStep]:  # noqa: D401
        """Yield the initial state, then one step per iteration."""
        raise NotImplementedError

    def solve(
        self,
        cities: Sequence[City],
        max_iterations: int,
        parameters: Optional[Mapping[str, float]] = None,
        on_iteration: Optional[IterationCallback] = None,
        cancellation: Optional[threading.Event] = None,
    ) -> OptimizationResult:
        return run_search(
            self,
            cities,
            max_iterations,
            parameters=parameters,
            on_iteration=on_iteration,
            cancellation=cancellation,
        )

    def __call__(self, cities: Sequence[City], max_iterations: int, **kwargs) -> OptimizationResult:
        return self.solve(cities, max_iterations, **kwargs)


def run_search(
    solver: BaseSolver,
    cities: Sequence[City],
    max_iterations: int,
    parameters: Optional[Mapping[str, float]] = None,
    on_iteration: Optional[IterationCallback] = None,
    cancellation: Optional[threading.Event] = None,
) -> OptimizationResult:
    """Drive a solver's search loop and collect its iteration history."""
    start_time = current_time()
    dist_matrix = distance_matrix(cities)
    steps = solver.search(dist_matrix, max_iterations, dict(parameters or {}))

    history: List[IterationResult] = []
    cancelled = False
    try:
        initial = next(steps)
        best_route = tuple(initial.best_route)
        best_distance = initial.best_distance

        for iteration in range(max(0, max_iterations)):
            if cancellation is not None and cancellation.is_set():
                cancelled = True
                break
            step = next(steps, None)
            if step is None:
                break
            best_route = tuple(step.best_route)
            best_distance = step.best_distance
            record = IterationResult(
                iteration=iteration,
                best_distance=best_distance,
                best_route=best_route,
                current_distance=step.current_distance,
            )
            history.append(record)
            if on_iteration is not None:
                on_iteration(record)
    finally:
        steps.close()

    return OptimizationResult(
        best_distance=best_distance,
        best_route=best_route,
        iteration_history=tuple(history),
        total_iterations=len(history),
        execution_time_ms=elapsed_ms(start_time),
        algorithm=solver.name,
        cancelled=cancelled,
    )


__all__ = [
    "BaseSolver",
    "IterationCallback",
    "SearchStep",
    "SolverSpec",
    "compute_cycle_cost",
    "current_time",
    "elapsed_ms",
    "get_int_param",
    "get_param",
    "random_route",
    "reverse_segment",
    "run_search",
    "swap",
]
