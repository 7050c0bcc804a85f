import threading

import numpy as np
import pytest

from HeuristicTSP.solvers.base import (
    BaseSolver,
    SearchStep,
    get_int_param,
    get_param,
    random_route,
    reverse_segment,
    run_search,
)
from HeuristicTSP.utils.taxonomy import AlgorithmFamily, AlgorithmType


class ScriptedSolver(BaseSolver):
    """Yields a fixed initial state and a fixed number of improving steps."""

    name = "scripted"
    family = AlgorithmFamily.TRAJECTORY
    algorithm_type = AlgorithmType.TABU_SEARCH

    def __init__(self, steps=None):
        super().__init__(seed=0)
        self.steps = steps
        self.closed = False

    def search(self, dist_matrix, max_iterations, parameters):
        n = dist_matrix.shape[0]
        route = list(range(n))
        best = 100.0
        try:
            yield SearchStep(route, best, best)
            count = 0
            while self.steps is None or count < self.steps:
                best -= 1.0
                yield SearchStep(route, best, best + 0.5)
                count += 1
        finally:
            self.closed = True


def test_random_route_is_permutation():
    rng = np.random.default_rng(0)
    for n in (2, 5, 40):
        route = random_route(n, rng)
        assert sorted(route) == list(range(n))
        assert all(isinstance(city, int) for city in route)


def test_random_route_is_seed_reproducible():
    assert random_route(10, np.random.default_rng(7)) == random_route(10, np.random.default_rng(7))


def test_reverse_segment_is_self_inverse():
    route = [0, 1, 2, 3, 4, 5]
    reverse_segment(route, 1, 4)
    assert route == [0, 4, 3, 2, 1, 5]
    reverse_segment(route, 1, 4)
    assert route == [0, 1, 2, 3, 4, 5]


def test_reverse_segment_single_position_is_noop():
    route = [3, 1, 2, 0]
    reverse_segment(route, 2, 2)
    assert route == [3, 1, 2, 0]


def test_param_lookup_with_defaults():
    params = {"rate": 0.5, "count": 9.6}
    assert get_param(params, "rate", 1.0) == 0.5
    assert get_param(params, "missing", 99.9) == 99.9
    assert get_int_param(params, "count", 1) == 10
    assert get_int_param(params, "missing", 4) == 4


def test_run_search_records_history_and_calls_back_in_order(square):
    seen = []
    result = run_search(ScriptedSolver(), square, 5, on_iteration=seen.append)

    assert [r.iteration for r in result.iteration_history] == [0, 1, 2, 3, 4]
    assert list(result.iteration_history) == seen
    assert result.total_iterations == 5
    assert result.best_distance == 95.0
    assert result.algorithm == "scripted"
    assert result.execution_time_ms >= 0
    assert not result.cancelled


def test_run_search_with_no_iterations_returns_initial_state(square):
    solver = ScriptedSolver()
    result = run_search(solver, square, 0)
    assert result.iteration_history == ()
    assert result.total_iterations == 0
    assert result.best_distance == 100.0
    assert solver.closed


def test_run_search_stops_when_search_is_exhausted(square):
    result = run_search(ScriptedSolver(steps=3), square, 50)
    assert result.total_iterations == 3


def test_run_search_honours_preset_cancellation(square):
    cancel = threading.Event()
    cancel.set()
    result = run_search(ScriptedSolver(), square, 100, cancellation=cancel)
    assert result.total_iterations == 0
    assert result.cancelled


def test_cancellation_lets_current_iteration_finish(square):
    cancel = threading.Event()

    def on_iteration(record):
        if record.iteration == 5:
            cancel.set()

    result = run_search(ScriptedSolver(), square, 1000, on_iteration=on_iteration, cancellation=cancel)
    assert result.total_iterations == 6
    assert result.cancelled


def test_callback_errors_propagate_and_close_the_search(square):
    solver = ScriptedSolver()

    def boom(record):
        raise RuntimeError("callback failed")

    with pytest.raises(RuntimeError):
        run_search(solver, square, 10, on_iteration=boom)
    assert solver.closed


def test_base_solver_search_is_abstract(square):
    with pytest.raises(NotImplementedError):
        BaseSolver().solve(square, 3)
