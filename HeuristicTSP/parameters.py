from __future__ import annotations

import math
from numbers import Real
from typing import Any, Dict, Mapping

from HeuristicTSP.errors import ValidationError
from HeuristicTSP.utils.taxonomy import AlgorithmType

PARAMETER_DEFAULTS: dict[AlgorithmType, dict[str, float]] = {
    AlgorithmType.SIMULATED_ANNEALING: {
        "initialTemperature": 10000.0,
        "coolingRate": 0.995,
        "minTemperature": 0.01,
    },
    AlgorithmType.ANT_COLONY: {
        "antCount": 20,
        "alpha": 1.0,
        "beta": 5.0,
        "evaporationRate": 0.5,
        "pheromoneDeposit": 100.0,
    },
    AlgorithmType.GENETIC_ALGORITHM: {
        "populationSize": 50,
        "mutationRate": 0.02,
        "tournamentSize": 5,
        "eliteCount": 2,
    },
    AlgorithmType.PARTICLE_SWARM: {
        "swarmSize": 30,
        "cognitiveWeight": 2.0,
        "socialWeight": 2.0,
        "inertiaMax": 0.9,
        "inertiaMin": 0.4,
    },
    AlgorithmType.SLIME_MOLD: {
        "populationSize": 30,
        "z": 0.03,
    },
    AlgorithmType.TABU_SEARCH: {
        "tabuTenure": 10,
        "neighborhoodSize": 50,
    },
}


def coerce_value(key: str, value: Any) -> float:
    """Convert one raw configuration value to a float."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(f"Parameter '{key}' is not numeric: {value!r}") from None
    else:
        raise ValidationError(f"Parameter '{key}' has unsupported type {type(value).__name__}")
    if not math.isfinite(number):
        raise ValidationError(f"Parameter '{key}' must be finite")
    return number


def coerce_parameters(raw: Mapping[str, Any] | None) -> Dict[str, float]:
    """Normalise a loosely typed parameter mapping into ``{name: float}``.

    Configuration arrives from JSON or user input where numbers may be ints,
    floats, numeric strings or booleans. Solvers only ever see floats.
    """
    if raw is None:
        return {}
    return {str(key): coerce_value(str(key), value) for key, value in raw.items()}


def parameter_defaults(algorithm_type: AlgorithmType | str) -> Dict[str, float]:
    return dict(PARAMETER_DEFAULTS[AlgorithmType.parse(algorithm_type)])


__all__ = ["PARAMETER_DEFAULTS", "coerce_parameters", "coerce_value", "parameter_defaults"]
