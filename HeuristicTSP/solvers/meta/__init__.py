from HeuristicTSP.solvers.meta.ant_colony import AntColonySolver
from HeuristicTSP.solvers.meta.genetic_algorithm import GeneticAlgorithmSolver
from HeuristicTSP.solvers.meta.particle_swarm import ParticleSwarmSolver
from HeuristicTSP.solvers.meta.simulated_annealing import SimulatedAnnealingSolver
from HeuristicTSP.solvers.meta.slime_mold import SlimeMoldSolver
from HeuristicTSP.solvers.meta.tabu_search import TabuSearchSolver

__all__ = [
    "AntColonySolver",
    "GeneticAlgorithmSolver",
    "ParticleSwarmSolver",
    "SimulatedAnnealingSolver",
    "SlimeMoldSolver",
    "TabuSearchSolver",
]
