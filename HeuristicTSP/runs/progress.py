"""
Live per-run progress shared between a background solver thread and pollers.

Each run's state has its own lock; the run map has a separate lock that is
only held for dictionary lookups, so a busy run never stalls reads or writes
of another run.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from HeuristicTSP.core import IterationResult
from HeuristicTSP.utils.taxonomy import RunStatus


@dataclass(frozen=True)
class RunProgressSnapshot:
    run_id: uuid.UUID
    status: RunStatus
    iteration_history: Tuple[IterationResult, ...]
    best_distance: Optional[float]
    execution_time_ms: int
    error_message: Optional[str]

    @property
    def iterations_completed(self) -> int:
        return len(self.iteration_history)

    def to_dict(self) -> dict:
        return {
            "runId": str(self.run_id),
            "status": self.status.value,
            "iterationHistory": [item.to_dict() for item in self.iteration_history],
            "bestDistance": self.best_distance,
            "executionTimeMs": self.execution_time_ms,
            "errorMessage": self.error_message,
        }


@dataclass
class _RunState:
    status: RunStatus = RunStatus.RUNNING
    history: List[IterationResult] = field(default_factory=list)
    best_distance: Optional[float] = None
    execution_time_ms: int = 0
    error_message: Optional[str] = None
    cancellation: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)


class RunProgressStore:
    def __init__(self) -> None:
        self._runs: Dict[uuid.UUID, _RunState] = {}
        self._lock = threading.Lock()

    def _get(self, run_id: uuid.UUID) -> Optional[_RunState]:
        with self._lock:
            return self._runs.get(run_id)

    def __contains__(self, run_id: object) -> bool:
        with self._lock:
            return run_id in self._runs

    def active_runs(self) -> List[uuid.UUID]:
        with self._lock:
            return list(self._runs)

    def init_run(self, run_id: uuid.UUID) -> None:
        state = _RunState()
        with self._lock:
            self._runs[run_id] = state

    def add_iteration(self, run_id: uuid.UUID, result: IterationResult) -> None:
        state = self._get(run_id)
        if state is None:
            return
        with state.lock:
            state.history.append(result)

    def complete_run(self, run_id: uuid.UUID, best_distance: float, execution_time_ms: int) -> None:
        state = self._get(run_id)
        if state is None:
            return
        with state.lock:
            state.status = RunStatus.COMPLETED
            state.best_distance = best_distance
            state.execution_time_ms = execution_time_ms

    def fail_run(self, run_id: uuid.UUID, error_message: str) -> None:
        state = self._get(run_id)
        if state is None:
            return
        with state.lock:
            state.status = RunStatus.FAILED
            state.error_message = error_message

    def get_snapshot(self, run_id: uuid.UUID) -> Optional[RunProgressSnapshot]:
        """Copy of the run's state, or ``None`` if the run is unknown."""
        state = self._get(run_id)
        if state is None:
            return None
        with state.lock:
            return RunProgressSnapshot(
                run_id=run_id,
                status=state.status,
                iteration_history=tuple(state.history),
                best_distance=state.best_distance,
                execution_time_ms=state.execution_time_ms,
                error_message=state.error_message,
            )

    def get_cancellation_signal(self, run_id: uuid.UUID) -> Optional[threading.Event]:
        state = self._get(run_id)
        return state.cancellation if state is not None else None

    def cancel_run(self, run_id: uuid.UUID) -> None:
        state = self._get(run_id)
        if state is not None:
            state.cancellation.set()

    def cancel_all(self) -> None:
        with self._lock:
            states = list(self._runs.values())
        for state in states:
            state.cancellation.set()

    def clean_up(self, run_id: uuid.UUID) -> None:
        with self._lock:
            self._runs.pop(run_id, None)


__all__ = ["RunProgressSnapshot", "RunProgressStore"]
