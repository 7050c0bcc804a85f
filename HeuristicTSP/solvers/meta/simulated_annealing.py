from __future__ import annotations

import math
from typing import Iterator, Mapping

import numpy as np

from HeuristicTSP.solvers.base import (
    BaseSolver,
    SearchStep,
    compute_cycle_cost,
    get_param,
    random_route,
    reverse_segment,
)
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType


class SimulatedAnnealingSolver(BaseSolver):
    name = "simulated_annealing"
    family = AlgorithmFamily.TRAJECTORY
    algorithm_type = AlgorithmType.SIMULATED_ANNEALING

    def search(
        self,
        dist_matrix: np.ndarray,
        max_iterations: int,
        parameters: Mapping[str, float],
    ) -> Iterator[SearchStep]:
        initial_temp = get_param(parameters, "initialTemperature", 10000.0)
        cooling_rate = get_param(parameters, "coolingRate", 0.995)
        min_temp = get_param(parameters, "minTemperature", 0.01)

        rng = self.rng
        n = dist_matrix.shape[0]
        path = random_route(n, rng)
        current_cost = compute_cycle_cost(dist_matrix, path)
        best_path = path[:]
        best_cost = current_cost
        temperature = initial_temp

        yield SearchStep(best_path, best_cost, current_cost)

        while temperature > min_temp:
            i, j = sorted(int(k) for k in rng.integers(n, size=2))

            # 2-opt move applied in place, undone on rejection.
            reverse_segment(path, i, j)
            candidate_cost = compute_cycle_cost(dist_matrix, path)
            delta = candidate_cost - current_cost

            if delta < 0 or rng.random() < math.exp(-delta / max(temperature, 1e-9)):
                current_cost = candidate_cost
            else:
                reverse_segment(path, i, j)

            if current_cost < best_cost:
                best_cost = current_cost
                best_path = path[:]

            temperature *= cooling_rate
            yield SearchStep(best_path, best_cost, current_cost)


__all__ = ["SimulatedAnnealingSolver"]
