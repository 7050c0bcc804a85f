from __future__ import annotations

import time
from typing import Callable, List

import numpy as np

from HeuristicTSP.core import City
from HeuristicTSP.utils.taxonomy import AlgorithmType

ALL_ALGORITHMS = list(AlgorithmType)


def square_cities() -> List[City]:
    return [City(0, 0.0, 0.0), City(1, 1.0, 0.0), City(2, 1.0, 1.0), City(3, 0.0, 1.0)]


def random_cities(count: int, seed: int = 42) -> List[City]:
    rng = np.random.default_rng(seed)
    coords = rng.random((count, 2)) * 100.0
    return [City(i, float(x), float(y)) for i, (x, y) in enumerate(coords)]


def wait_for(predicate: Callable[[], bool], timeout: float = 10.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
