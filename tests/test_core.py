import math

import numpy as np
import pytest

from HeuristicTSP.core import (
    City,
    IterationResult,
    OptimizationResult,
    compute_cycle_cost,
    compute_tour_distance,
    distance_matrix,
    is_permutation,
)
from tests.helpers import random_cities


def test_city_distance_is_euclidean():
    assert City(0, 0.0, 0.0).distance_to(City(1, 3.0, 4.0)) == pytest.approx(5.0)


def test_city_is_immutable():
    city = City(0, 1.0, 2.0, name="A")
    with pytest.raises(AttributeError):
        city.x = 5.0  # type: ignore[misc]


def test_city_dict_round_trip_keeps_name():
    city = City.from_dict({"id": 7, "x": 1, "y": 2, "name": "Depot"})
    assert city == City(7, 1.0, 2.0, "Depot")
    assert city.to_dict() == {"id": 7, "x": 1.0, "y": 2.0, "name": "Depot"}


def test_city_from_dict_defaults_id_to_index():
    assert City.from_dict({"x": 0, "y": 0}, index=3).id == 3


def test_square_perimeter(square):
    assert compute_tour_distance(square, [0, 1, 2, 3]) == pytest.approx(4.0)
    assert compute_tour_distance(square, [0, 2, 1, 3]) == pytest.approx(2.0 + 2.0 * math.sqrt(2.0))


def test_tour_distance_includes_closing_edge():
    cities = [City(0, 0.0, 0.0), City(1, 10.0, 0.0)]
    assert compute_tour_distance(cities, [0, 1]) == pytest.approx(20.0)


def test_distance_matrix_is_symmetric_with_zero_diagonal():
    dist = distance_matrix(random_cities(6))
    assert dist.shape == (6, 6)
    assert np.allclose(dist, dist.T)
    assert np.allclose(np.diag(dist), 0.0)


def test_cycle_cost_matches_coordinate_distance():
    cities = random_cities(9, seed=3)
    route = [4, 2, 7, 0, 8, 1, 6, 3, 5]
    assert compute_cycle_cost(distance_matrix(cities), route) == pytest.approx(compute_tour_distance(cities, route))


def test_cycle_cost_of_empty_route_is_infinite():
    assert compute_cycle_cost(np.zeros((0, 0)), []) == float("inf")


def test_is_permutation():
    assert is_permutation([2, 0, 1], 3)
    assert not is_permutation([0, 0, 1], 3)
    assert not is_permutation([0, 1], 3)


def test_result_serialization():
    record = IterationResult(0, 4.0, (0, 1, 2, 3), 4.5)
    result = OptimizationResult(
        best_distance=4.0,
        best_route=(0, 1, 2, 3),
        iteration_history=(record,),
        total_iterations=1,
        execution_time_ms=3,
        algorithm="tabu_search",
    )
    payload = result.to_dict()
    assert payload["bestRoute"] == [0, 1, 2, 3]
    assert payload["iterationHistory"][0] == {
        "iteration": 0,
        "bestDistance": 4.0,
        "bestRoute": [0, 1, 2, 3],
        "currentDistance": 4.5,
    }
    assert "iterationHistory" not in result.to_dict(include_history=False)
