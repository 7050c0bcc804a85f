from __future__ import annotations

import copy
import threading
import uuid
from typing import Dict, List, Optional

from HeuristicTSP.config import DEFAULT_PAGE_SIZE
from HeuristicTSP.runs.entities import AlgorithmConfiguration, OptimizationRun, ProblemDefinition, utc_now


class BaseRepository:
    """Persistence collaborator used by the run orchestrator.

    Lookups are owner-scoped: an entity owned by someone else is reported as
    missing (``None``), exactly like one that does not exist.
    """

    def load_configuration(self, configuration_id: uuid.UUID, owner_id: uuid.UUID) -> Optional[AlgorithmConfiguration]:
        raise NotImplementedError

    def load_problem(self, problem_id: uuid.UUID, owner_id: uuid.UUID) -> Optional[ProblemDefinition]:
        raise NotImplementedError

    def add_run(self, run: OptimizationRun) -> None:
        raise NotImplementedError

    def update_run(self, run: OptimizationRun) -> bool:
        """Overwrite a stored run; returns ``False`` if it no longer exists."""
        raise NotImplementedError

    def load_run(self, run_id: uuid.UUID, owner_id: uuid.UUID) -> Optional[OptimizationRun]:
        raise NotImplementedError

    def delete_run(self, run_id: uuid.UUID, owner_id: uuid.UUID) -> bool:
        raise NotImplementedError

    def list_runs(self, owner_id: uuid.UUID, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> List[OptimizationRun]:
        raise NotImplementedError


def _copy_run(run: OptimizationRun) -> OptimizationRun:
    clone = copy.copy(run)
    clone.iteration_history = list(run.iteration_history)
    clone.best_route = list(run.best_route) if run.best_route is not None else None
    return clone


class InMemoryRepository(BaseRepository):
    """Thread-safe dictionary-backed repository.

    Runs are stored and returned as copies so a caller holding an entity never
    observes writes made by a background execution.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._configurations: Dict[uuid.UUID, AlgorithmConfiguration] = {}
        self._problems: Dict[uuid.UUID, ProblemDefinition] = {}
        self._runs: Dict[uuid.UUID, OptimizationRun] = {}

    def add_configuration(self, configuration: AlgorithmConfiguration) -> AlgorithmConfiguration:
        with self._lock:
            self._configurations[configuration.id] = configuration
        return configuration

    def add_problem(self, problem: ProblemDefinition) -> ProblemDefinition:
        with self._lock:
            self._problems[problem.id] = problem
        return problem

    def load_configuration(self, configuration_id, owner_id):
        with self._lock:
            configuration = self._configurations.get(configuration_id)
        if configuration is None or configuration.owner_id != owner_id:
            return None
        return configuration

    def load_problem(self, problem_id, owner_id):
        with self._lock:
            problem = self._problems.get(problem_id)
        if problem is None or problem.owner_id != owner_id:
            return None
        return problem

    def add_run(self, run):
        with self._lock:
            self._runs[run.id] = _copy_run(run)

    def update_run(self, run):
        with self._lock:
            if run.id not in self._runs:
                return False
            run.updated_at = utc_now()
            self._runs[run.id] = _copy_run(run)
            return True

    def load_run(self, run_id, owner_id):
        with self._lock:
            run = self._runs.get(run_id)
            if run is None or run.owner_id != owner_id:
                return None
            return _copy_run(run)

    def delete_run(self, run_id, owner_id):
        with self._lock:
            run = self._runs.get(run_id)
            if run is None or run.owner_id != owner_id:
                return False
            del self._runs[run_id]
            return True

    def list_runs(self, owner_id, page=1, page_size=DEFAULT_PAGE_SIZE):
        page = max(1, int(page))
        page_size = max(1, int(page_size))
        with self._lock:
            owned = [run for run in self._runs.values() if run.owner_id == owner_id]
        owned.sort(key=lambda run: run.created_at, reverse=True)
        offset = (page - 1) * page_size
        return [_copy_run(run) for run in owned[offset : offset + page_size]]


__all__ = ["BaseRepository", "InMemoryRepository"]
