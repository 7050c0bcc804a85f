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
    swap,
)
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType


class GeneticAlgorithmSolver(BaseSolver):
    name = "genetic_algorithm"
    family = AlgorithmFamily.POPULATION
    algorithm_type = AlgorithmType.GENETIC_ALGORITHM

    def search(
        self,
        dist_matrix: np.ndarray,
        max_iterations: int,
        parameters: Mapping[str, float],
    ) -> Iterator[SearchStep]:
        pop_size = max(1, get_int_param(parameters, "populationSize", 50))
        mutation_rate = get_param(parameters, "mutationRate", 0.02)
        tournament_size = max(1, get_int_param(parameters, "tournamentSize", 5))
        elite = min(max(0, get_int_param(parameters, "eliteCount", 2)), pop_size)

        rng = self.rng
        n = dist_matrix.shape[0]
        population = [random_route(n, rng) for _ in range(pop_size)]
        fitness = np.array([compute_cycle_cost(dist_matrix, chromo) for chromo in population])

        best_idx = int(np.argmin(fitness))
        best_path = population[best_idx][:]
        best_cost = float(fitness[best_idx])

        yield SearchStep(best_path, best_cost, best_cost)

        while True:
            order = np.argsort(fitness, kind="stable")
            next_population = [population[int(i)][:] for i in order[:elite]]
            while len(next_population) < pop_size:
                parent1 = self._tournament(population, fitness, tournament_size)
                parent2 = self._tournament(population, fitness, tournament_size)
                child = self._order_crossover(parent1, parent2, n)
                if rng.random() < mutation_rate:
                    swap(child, int(rng.integers(n)), int(rng.integers(n)))
                next_population.append(child)

            population = next_population
            fitness = np.array([compute_cycle_cost(dist_matrix, chromo) for chromo in population])

            generation_idx = int(np.argmin(fitness))
            generation_cost = float(fitness[generation_idx])
            if generation_cost < best_cost:
                best_cost = generation_cost
                best_path = population[generation_idx][:]

            yield SearchStep(best_path, best_cost, generation_cost)

    def _tournament(self, population: List[List[int]], fitness: np.ndarray, size: int) -> List[int]:
        contenders = self.rng.integers(len(population), size=size)
        winner = int(contenders[int(np.argmin(fitness[contenders]))])
        return population[winner]

    def _order_crossover(self, parent1: List[int], parent2: List[int], n: int) -> List[int]:
        """OX: keep a slice of parent 1, fill the rest in parent-2 order."""
        rng = self.rng
        start = int(rng.integers(n))
        end = int(rng.integers(start, n))

        child = [-1] * n
        in_child = [False] * n
        for i in range(start, end + 1):
            child[i] = parent1[i]
            in_child[parent1[i]] = True

        pos = (end + 1) % n
        for i in range(n):
            gene = parent2[(end + 1 + i) % n]
            if not in_child[gene]:
                child[pos] = gene
                pos = (pos + 1) % n
        return child


__all__ = ["GeneticAlgorithmSolver"]
