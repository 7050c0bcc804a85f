from __future__ import annotations

from typing import Iterator, List, Mapping, Sequence, Tuple

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

Swap = Tuple[int, int]


def swap_sequence(current: Sequence[int], target: Sequence[int]) -> List[Swap]:
    """Index swaps that turn ``current`` into ``target`` when applied in order."""
    temp = list(current)
    position = [0] * len(temp)
    for i, city in enumerate(temp):
        position[city] = i

    swaps: List[Swap] = []
    for i, city in enumerate(target):
        if temp[i] != city:
            j = position[city]
            swaps.append((i, j))
            position[temp[i]] = j
            position[temp[j]] = i
            temp[i], temp[j] = temp[j], temp[i]
    return swaps


class ParticleSwarmSolver(BaseSolver):
    """Discrete PSO where a particle's velocity is a list of index swaps."""

    name = "particle_swarm"
    family = AlgorithmFamily.SWARM
    algorithm_type = AlgorithmType.PARTICLE_SWARM

    def search(
        self,
        dist_matrix: np.ndarray,
        max_iterations: int,
        parameters: Mapping[str, float],
    ) -> Iterator[SearchStep]:
        swarm_size = max(1, get_int_param(parameters, "swarmSize", 30))
        cognitive = get_param(parameters, "cognitiveWeight", 2.0)
        social = get_param(parameters, "socialWeight", 2.0)
        inertia_max = get_param(parameters, "inertiaMax", 0.9)
        inertia_min = get_param(parameters, "inertiaMin", 0.4)

        rng = self.rng
        n = dist_matrix.shape[0]
        weight_total = cognitive + social
        cognitive_share = cognitive / weight_total if weight_total > 0 else 0.5
        social_share = 1.0 - cognitive_share
        max_swaps = n // 2

        particles = [random_route(n, rng) for _ in range(swarm_size)]
        personal_best = [p[:] for p in particles]
        personal_cost = [compute_cycle_cost(dist_matrix, p) for p in particles]
        velocities: List[List[Swap]] = [[] for _ in range(swarm_size)]

        leader = int(np.argmin(personal_cost))
        global_best = personal_best[leader][:]
        global_cost = personal_cost[leader]

        yield SearchStep(global_best, global_cost, global_cost)

        iteration = 0
        while True:
            inertia = inertia_max - (inertia_max - inertia_min) * iteration / max(1, max_iterations)
            iteration_cost = float("inf")

            for i in range(swarm_size):
                toward_personal = swap_sequence(particles[i], personal_best[i])
                toward_global = swap_sequence(particles[i], global_best)

                velocity = [s for s in velocities[i] if rng.random() < inertia]
                velocity.extend(s for s in toward_personal if rng.random() < cognitive_share)
                velocity.extend(s for s in toward_global if rng.random() < social_share)
                velocity = velocity[:max_swaps]
                velocities[i] = velocity

                route = particles[i]
                for a, b in velocity:
                    swap(route, a, b)

                cost = compute_cycle_cost(dist_matrix, route)
                iteration_cost = min(iteration_cost, cost)
                if cost < personal_cost[i]:
                    personal_cost[i] = cost
                    personal_best[i] = route[:]
                if cost < global_cost:
                    global_cost = cost
                    global_best = route[:]

            iteration += 1
            yield SearchStep(global_best, global_cost, iteration_cost)


__all__ = ["ParticleSwarmSolver", "swap_sequence"]
