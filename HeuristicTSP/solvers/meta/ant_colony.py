from __future__ import annotations

from typing import Iterator, List, Mapping

import numpy as np

from HeuristicTSP.solvers.base import (
    BaseSolver,
    SearchStep,
    compute_cycle_cost,
    get_int_param,
    get_param,
    random_route,
)
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType

# Stand-in for zero-length edges in the visibility term.
MIN_EDGE = 0.0001


class AntColonySolver(BaseSolver):
    name = "ant_colony"
    family = AlgorithmFamily.SWARM
    algorithm_type = AlgorithmType.ANT_COLONY

    def search(
        self,
        dist_matrix: np.ndarray,
        max_iterations: int,
        parameters: Mapping[str, float],
    ) -> Iterator[SearchStep]:
        num_ants = max(1, get_int_param(parameters, "antCount", 20))
        alpha = get_param(parameters, "alpha", 1.0)
        beta = get_param(parameters, "beta", 5.0)
        evaporation = get_param(parameters, "evaporationRate", 0.5)
        deposit = get_param(parameters, "pheromoneDeposit", 100.0)

        n = dist_matrix.shape[0]
        pheromone = np.ones((n, n))
        visibility = 1.0 / np.where(dist_matrix == 0, MIN_EDGE, dist_matrix)
        heuristic = visibility ** beta

        best_path = random_route(n, self.rng)
        best_cost = compute_cycle_cost(dist_matrix, best_path)

        yield SearchStep(best_path, best_cost, best_cost)

        while True:
            iteration_path = best_path
            iteration_cost = float("inf")
            weights = (pheromone ** alpha) * heuristic

            for _ in range(num_ants):
                path = self._construct_tour(weights, n)
                cost = compute_cycle_cost(dist_matrix, path)
                if cost < iteration_cost:
                    iteration_path = path
                    iteration_cost = cost

            pheromone *= 1.0 - evaporation
            self._deposit(pheromone, iteration_path, deposit / max(iteration_cost, 1e-9))

            if iteration_cost < best_cost:
                best_cost = iteration_cost
                best_path = iteration_path

            yield SearchStep(best_path, best_cost, iteration_cost)

    def _construct_tour(self, weights: np.ndarray, n: int) -> List[int]:
        rng = self.rng
        start_city = int(rng.integers(n))
        unvisited = np.ones(n, dtype=bool)
        unvisited[start_city] = False
        path = [start_city]
        current = start_city

        for _ in range(n - 1):
            candidates = np.flatnonzero(unvisited)
            row = weights[current, candidates]
            total = float(row.sum())
            if not total > 0:
                next_city = int(candidates[0])
            else:
                threshold = rng.random() * total
                pick = int(np.searchsorted(np.cumsum(row), threshold))
                next_city = int(candidates[min(pick, len(candidates) - 1)])
            path.append(next_city)
            unvisited[next_city] = False
            current = next_city
        return path

    @staticmethod
    def _deposit(pheromone: np.ndarray, path: List[int], amount: float) -> None:
        # Undirected graph: reinforce both directions of every edge.
        for i in range(len(path)):
            a = path[i]
            b = path[(i + 1) % len(path)]
            pheromone[a, b] += amount
            pheromone[b, a] += amount


__all__ = ["AntColonySolver"]
