from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, Mapping, Set, Tuple

import numpy as np

from HeuristicTSP.solvers.base import (
    BaseSolver,
    SearchStep,
    compute_cycle_cost,
    get_int_param,
    random_route,
    reverse_segment,
)
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType

Move = Tuple[int, int]


class TabuList:
    """FIFO of recent moves with O(1) membership, capped at ``tenure`` entries."""

    def __init__(self, tenure: int) -> None:
        self.tenure = max(0, tenure)
        self._queue: Deque[Move] = deque()
        self._members: Set[Move] = set()

    def __contains__(self, move: Move) -> bool:
        return move in self._members

    def __len__(self) -> int:
        return len(self._queue)

    def add(self, move: Move) -> None:
        self._queue.append(move)
        self._members.add(move)
        while len(self._queue) > self.tenure:
            evicted = self._queue.popleft()
            if evicted not in self._queue:
                self._members.discard(evicted)


class TabuSearchSolver(BaseSolver):
    name = "tabu_search"
    family = AlgorithmFamily.TRAJECTORY
    algorithm_type = AlgorithmType.TABU_SEARCH

    def search(
        self,
        dist_matrix: np.ndarray,
        max_iterations: int,
        parameters: Mapping[str, float],
    ) -> Iterator[SearchStep]:
        tenure = get_int_param(parameters, "tabuTenure", 10)
        neighborhood_size = get_int_param(parameters, "neighborhoodSize", 50)

        rng = self.rng
        n = dist_matrix.shape[0]
        path = random_route(n, rng)
        current_cost = compute_cycle_cost(dist_matrix, path)
        best_path = path[:]
        best_cost = current_cost
        tabu = TabuList(tenure)

        yield SearchStep(best_path, best_cost, current_cost)

        while True:
            chosen_path = None
            chosen_cost = float("inf")
            chosen_move: Move = (0, 0)

            for _ in range(neighborhood_size):
                i, j = (int(k) for k in rng.integers(n, size=2))
                if i == j:
                    continue
                if i > j:
                    i, j = j, i

                neighbor = path[:]
                reverse_segment(neighbor, i, j)
                neighbor_cost = compute_cycle_cost(dist_matrix, neighbor)

                # Aspiration: a tabu move is allowed if it beats the all-time best.
                admissible = (i, j) not in tabu or neighbor_cost < best_cost
                if admissible and neighbor_cost < chosen_cost:
                    chosen_path = neighbor
                    chosen_cost = neighbor_cost
                    chosen_move = (i, j)

            if chosen_path is not None:
                path = chosen_path
                current_cost = chosen_cost
                tabu.add(chosen_move)
                if current_cost < best_cost:
                    best_cost = current_cost
                    best_path = path[:]

            yield SearchStep(best_path, best_cost, current_cost)


__all__ = ["TabuList", "TabuSearchSolver"]
