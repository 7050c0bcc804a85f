from __future__ import annotations

from enum import Enum


class AlgorithmFamily(str, Enum):
    TRAJECTORY = "trajectory"
    POPULATION = "population"
    SWARM = "swarm"


class AlgorithmType(str, Enum):
    SIMULATED_ANNEALING = "simulated_annealing"
    ANT_COLONY = "ant_colony"
    GENETIC_ALGORITHM = "genetic_algorithm"
    PARTICLE_SWARM = "particle_swarm"
    SLIME_MOLD = "slime_mold"
    TABU_SEARCH = "tabu_search"

    @classmethod
    def parse(cls, tag: "AlgorithmType | str") -> "AlgorithmType":
        """Resolve a tag given either as a value or as a CamelCase name."""
        if isinstance(tag, cls):
            return tag
        key = str(tag).strip()
        for member in cls:
            if key == member.value or key.lower() == _ALIASES[member].lower():
                return member
        raise KeyError(f"Unknown algorithm type: {tag}")


_ALIASES = {
    AlgorithmType.SIMULATED_ANNEALING: "SimulatedAnnealing",
    AlgorithmType.ANT_COLONY: "AntColonyOptimization",
    AlgorithmType.GENETIC_ALGORITHM: "GeneticAlgorithm",
    AlgorithmType.PARTICLE_SWARM: "ParticleSwarmOptimization",
    AlgorithmType.SLIME_MOLD: "SlimeMoldOptimization",
    AlgorithmType.TABU_SEARCH: "TabuSearch",
}


class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.FAILED)


__all__ = ["AlgorithmFamily", "AlgorithmType", "RunStatus"]
