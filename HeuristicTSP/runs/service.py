from __future__ import annotations

import atexit
import dataclasses
import functools
import logging
import threading
import uuid
import weakref
from typing import Dict, List, Mapping, Optional, Sequence

from HeuristicTSP.config import DEFAULT_PAGE_SIZE, GENERIC_FAILURE_MESSAGE, EngineSettings
from HeuristicTSP.core import City, OptimizationResult
from HeuristicTSP.errors import (
    AlgorithmExecutionError,
    NotFoundError,
    RunNotInProgressError,
    ServiceClosedError,
    ValidationError,
)
from HeuristicTSP.runs.entities import OptimizationRun
from HeuristicTSP.runs.progress import RunProgressSnapshot, RunProgressStore
from HeuristicTSP.runs.repository import BaseRepository
from HeuristicTSP.solvers import get_solver
from HeuristicTSP.solvers.base import current_time, elapsed_ms
from HeuristicTSP.utils.taxonomy import AlgorithmType, RunStatus

logger = logging.getLogger(__name__)

# Services that cancel their runs at interpreter exit. Weak references, so an
# abandoned service can still be garbage collected.
_live_services: "weakref.WeakSet[OptimizationService]" = weakref.WeakSet()


def _shutdown_live_services() -> None:
    for service in list(_live_services):
        service.shutdown()


atexit.register(_shutdown_live_services)


def snapshot_from_run(run: OptimizationRun) -> RunProgressSnapshot:
    """Progress view of a persisted run, used once its live entry is gone."""
    return RunProgressSnapshot(
        run_id=run.id,
        status=run.status,
        iteration_history=tuple(run.iteration_history),
        best_distance=run.best_distance,
        execution_time_ms=run.execution_time_ms,
        error_message=run.error_message,
    )


class OptimizationService:
    """Starts solver runs in the background and serves their progress.

    This is the only component that launches a solver for a run, and it does
    so exactly once per run id: :meth:`run` persists the run, registers it in
    the progress store and hands it to a dedicated thread before returning.

    With ``register_shutdown_hook`` enabled the service joins a weak set of
    services that are shut down at interpreter exit. Once :meth:`shutdown` has
    run, new runs are refused with :class:`ServiceClosedError`.
    """

    def __init__(
        self,
        repository: BaseRepository,
        progress_store: Optional[RunProgressStore] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.repository = repository
        self.progress_store = progress_store if progress_store is not None else RunProgressStore()
        self.settings = settings if settings is not None else EngineSettings()
        self._threads: Dict[uuid.UUID, threading.Thread] = {}
        self._threads_lock = threading.Lock()
        self._closed = False
        if self.settings.register_shutdown_hook:
            _live_services.add(self)

    # ------------------------------------------------------------------
    # Starting runs
    # ------------------------------------------------------------------
    def run(
        self,
        configuration_id: uuid.UUID,
        problem_id: uuid.UUID,
        owner_id: uuid.UUID,
        seed: Optional[int] = None,
    ) -> OptimizationRun:
        if self._closed:
            raise ServiceClosedError("Optimization service is shut down")
        configuration = self.repository.load_configuration(configuration_id, owner_id)
        if configuration is None:
            raise NotFoundError("Algorithm configuration not found")
        problem = self.repository.load_problem(problem_id, owner_id)
        if problem is None:
            raise NotFoundError("Problem definition not found")
        if problem.city_count < 2:
            raise ValidationError("A problem needs at least 2 cities")

        run = OptimizationRun(
            configuration_id=configuration_id,
            problem_id=problem_id,
            owner_id=owner_id,
            status=RunStatus.RUNNING,
        )
        self.repository.add_run(run)
        self.progress_store.init_run(run.id)
        cancellation = self.progress_store.get_cancellation_signal(run.id)

        worker = threading.Thread(
            target=self._execute,
            kwargs={
                "run": run,
                "algorithm_type": configuration.algorithm_type,
                "max_iterations": configuration.max_iterations,
                "parameters": dict(configuration.parameters),
                "cities": list(problem.cities),
                "cancellation": cancellation,
                "seed": seed,
            },
            name=f"{self.settings.thread_name_prefix}-{run.id.hex[:8]}",
            daemon=True,
        )
        created = dataclasses.replace(run)
        try:
            with self._threads_lock:
                # Re-checked under the lock so shutdown cannot miss this worker.
                if self._closed:
                    raise ServiceClosedError("Optimization service is shut down")
                self._threads[run.id] = worker
            worker.start()
        except Exception:
            self._abandon(run)
            raise

        logger.info(
            "Started run %s (%s, %d cities, max_iterations=%d)",
            run.id,
            configuration.algorithm_type.value,
            problem.city_count,
            configuration.max_iterations,
        )
        return created

    start_run = run

    def _abandon(self, run: OptimizationRun) -> None:
        """Finalize a run whose worker never started."""
        logger.exception("Could not start run %s", run.id)
        with self._threads_lock:
            self._threads.pop(run.id, None)
        self.progress_store.clean_up(run.id)
        run.status = RunStatus.FAILED
        run.error_message = GENERIC_FAILURE_MESSAGE
        self.repository.update_run(run)

    def _solve(
        self,
        run_id: uuid.UUID,
        algorithm_type: AlgorithmType,
        max_iterations: int,
        parameters: Mapping[str, float],
        cities: Sequence[City],
        cancellation: Optional[threading.Event],
        seed: Optional[int],
    ) -> OptimizationResult:
        try:
            solver = get_solver(algorithm_type, seed=seed)
            return solver.solve(
                cities,
                max_iterations,
                parameters=parameters,
                on_iteration=functools.partial(self.progress_store.add_iteration, run_id),
                cancellation=cancellation,
            )
        except Exception as exc:
            raise AlgorithmExecutionError(f"{type(exc).__name__}: {exc}") from exc

    def _execute(
        self,
        run: OptimizationRun,
        algorithm_type: AlgorithmType,
        max_iterations: int,
        parameters: Mapping[str, float],
        cities: Sequence[City],
        cancellation: Optional[threading.Event],
        seed: Optional[int],
    ) -> None:
        start_time = current_time()
        try:
            try:
                result = self._solve(run.id, algorithm_type, max_iterations, parameters, cities, cancellation, seed)
            except AlgorithmExecutionError:
                logger.exception("Optimization run %s failed", run.id)
                snapshot = self.progress_store.get_snapshot(run.id)
                run.status = RunStatus.FAILED
                run.error_message = GENERIC_FAILURE_MESSAGE
                run.execution_time_ms = elapsed_ms(start_time)
                if snapshot is not None and snapshot.iteration_history:
                    last = snapshot.iteration_history[-1]
                    run.best_distance = last.best_distance
                    run.best_route = list(last.best_route)
                    run.iteration_history = list(snapshot.iteration_history)
                    run.total_iterations = len(snapshot.iteration_history)
                self.progress_store.fail_run(run.id, GENERIC_FAILURE_MESSAGE)
            else:
                run.status = RunStatus.COMPLETED
                run.best_distance = result.best_distance
                run.best_route = list(result.best_route)
                run.iteration_history = list(result.iteration_history)
                run.total_iterations = result.total_iterations
                run.execution_time_ms = result.execution_time_ms
                self.progress_store.complete_run(run.id, result.best_distance, result.execution_time_ms)
                if result.cancelled:
                    logger.info("Run %s cancelled after %d iterations", run.id, result.total_iterations)
                else:
                    logger.info(
                        "Run %s completed: best_distance=%.4f iterations=%d time=%dms",
                        run.id,
                        result.best_distance,
                        result.total_iterations,
                        result.execution_time_ms,
                    )

            if not self.repository.update_run(run):
                logger.debug("Run %s was deleted while executing; final state discarded", run.id)
        except Exception:
            logger.exception("Could not finalize run %s", run.id)
        finally:
            self.progress_store.clean_up(run.id)
            with self._threads_lock:
                self._threads.pop(run.id, None)

    # ------------------------------------------------------------------
    # Reading runs
    # ------------------------------------------------------------------
    def _load_owned_run(self, run_id: uuid.UUID, owner_id: uuid.UUID) -> OptimizationRun:
        run = self.repository.load_run(run_id, owner_id)
        if run is None:
            raise NotFoundError("Optimization run not found")
        return run

    def get_progress(self, run_id: uuid.UUID, owner_id: uuid.UUID) -> RunProgressSnapshot:
        self._load_owned_run(run_id, owner_id)
        snapshot = self.progress_store.get_snapshot(run_id)
        if snapshot is None:
            raise RunNotInProgressError("Run not found in progress store")
        return snapshot

    def poll_progress(self, run_id: uuid.UUID, owner_id: uuid.UUID) -> RunProgressSnapshot:
        """Live snapshot, or the persisted record once the run was finalized."""
        try:
            return self.get_progress(run_id, owner_id)
        except RunNotInProgressError:
            return snapshot_from_run(self._load_owned_run(run_id, owner_id))

    def get_run(self, run_id: uuid.UUID, owner_id: uuid.UUID) -> OptimizationRun:
        return self._load_owned_run(run_id, owner_id)

    def list_runs(self, owner_id: uuid.UUID, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> List[OptimizationRun]:
        return self.repository.list_runs(owner_id, page=page, page_size=page_size)

    # ------------------------------------------------------------------
    # Cancellation and lifecycle
    # ------------------------------------------------------------------
    def delete(self, run_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        self._load_owned_run(run_id, owner_id)
        self.progress_store.cancel_run(run_id)
        self.repository.delete_run(run_id, owner_id)
        logger.debug("Deleted run %s", run_id)

    delete_run = delete

    def is_running(self, run_id: uuid.UUID) -> bool:
        with self._threads_lock:
            worker = self._threads.get(run_id)
        return worker is not None and worker.is_alive()

    def wait(self, run_id: uuid.UUID, timeout: Optional[float] = None) -> bool:
        """Block until the run's thread exits; ``False`` if the timeout elapsed."""
        with self._threads_lock:
            worker = self._threads.get(run_id)
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """Refuse new runs, cancel every in-flight run and optionally wait for the threads."""
        with self._threads_lock:
            self._closed = True
            workers = list(self._threads.values())
        self.progress_store.cancel_all()
        if workers:
            logger.info("Shutting down with %d run(s) in flight", len(workers))
        if wait:
            for worker in workers:
                worker.join(timeout)
        _live_services.discard(self)

    @property
    def closed(self) -> bool:
        return self._closed


__all__ = ["OptimizationService", "snapshot_from_run"]
