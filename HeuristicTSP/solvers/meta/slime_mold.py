from __future__ import annotations

import math
from typing import Iterator, List, Mapping, Sequence

import numpy as np

from HeuristicTSP.solvers.base import (
    BaseSolver,
    SearchStep,
    compute_cycle_cost,
    get_int_param,
    get_param,
    random_route,
    swap,
)
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType

# atanh(1) is infinite; the oscillation amplitude is clamped just below it.
MAX_ATANH_ARG = 0.999


def splice_segment(route: List[int], best_route: Sequence[int], start: int, length: int) -> None:
    """Move ``best_route[start:start + length]`` into ``route`` at ``start``.

    The remaining cities keep their relative order around the spliced block.
    """
    segment = list(best_route[start : start + length])
    in_segment = set(segment)
    remaining = [city for city in route if city not in in_segment]
    insert_at = min(start, len(remaining))
    route[:] = remaining[:insert_at] + segment + remaining[insert_at:]


class SlimeMoldSolver(BaseSolver):
    name = "slime_mold"
    family = AlgorithmFamily.POPULATION
    algorithm_type = AlgorithmType.SLIME_MOLD

    def search(
        self,
        dist_matrix: np.ndarray,
        max_iterations: int,
        parameters: Mapping[str, float],
    ) -> Iterator[SearchStep]:
        pop_size = max(1, get_int_param(parameters, "populationSize", 30))
        z = get_param(parameters, "z", 0.03)

        rng = self.rng
        n = dist_matrix.shape[0]
        population = [random_route(n, rng) for _ in range(pop_size)]
        fitness = [compute_cycle_cost(dist_matrix, route) for route in population]

        best_idx = int(np.argmin(fitness))
        best_path = population[best_idx][:]
        best_cost = fitness[best_idx]

        yield SearchStep(best_path, best_cost, best_cost)

        iteration = 0
        while True:
            order = np.argsort(fitness, kind="stable")
            best_fitness = fitness[int(order[0])]
            worst_fitness = fitness[int(order[-1])]
            ranks = np.empty(pop_size, dtype=int)
            ranks[order] = np.arange(pop_size)

            progress = (iteration + 1) / max(1, max_iterations)
            amplitude = math.atanh(min(max(1.0 - progress, 0.0), MAX_ATANH_ARG))

            for i in range(pop_size):
                weight = self._weight(fitness[i], best_fitness, worst_fitness, int(ranks[i]), pop_size)
                candidate = population[i][:]

                if rng.random() < z:
                    candidate = random_route(n, rng)
                else:
                    p = math.tanh(abs(fitness[i] - best_fitness))
                    vb = 2 * amplitude * (rng.random() - 0.5)
                    vc = 2 * amplitude * (rng.random() - 0.5)
                    if rng.random() < p:
                        self._random_swaps(candidate, _clamp(int(abs(weight * vb) * n / 4), 1, n))
                        segment_length = min(n, max(2, n // 5))
                        start = int(rng.integers(n - segment_length)) if n > segment_length else 0
                        splice_segment(candidate, best_path, start, segment_length)
                    else:
                        self._random_swaps(candidate, _clamp(int(abs(vc) * n / 4), 1, n))

                candidate_cost = compute_cycle_cost(dist_matrix, candidate)
                if candidate_cost <= fitness[i]:
                    population[i] = candidate
                    fitness[i] = candidate_cost

            leader = int(np.argmin(fitness))
            leader_cost = fitness[leader]
            if leader_cost < best_cost:
                best_cost = leader_cost
                best_path = population[leader][:]

            iteration += 1
            yield SearchStep(best_path, best_cost, leader_cost)

    def _weight(self, value: float, best: float, worst: float, rank: int, pop_size: int) -> float:
        spread = worst - best
        if spread == 0:
            return 1.0
        shift = self.rng.random() * math.log10((value - best) / spread + 1)
        if rank < pop_size // 2:
            return 1.0 + shift
        return 1.0 - shift

    def _random_swaps(self, route: List[int], count: int) -> None:
        n = len(route)
        for _ in range(count):
            swap(route, int(self.rng.integers(n)), int(self.rng.integers(n)))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


__all__ = ["SlimeMoldSolver", "splice_segment"]
