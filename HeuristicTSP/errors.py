from __future__ import annotations


class HeuristicTSPError(Exception):
    """Base class for errors raised by the optimization engine."""


class NotFoundError(HeuristicTSPError):
    """Raised when an entity is missing or not owned by the requester."""


class RunNotInProgressError(NotFoundError):
    """Raised when a run has no live progress entry (already finalized)."""


class ValidationError(HeuristicTSPError):
    """Raised when input is rejected before reaching a solver."""


class AlgorithmExecutionError(HeuristicTSPError):
    """Raised when a solver fails while searching."""


class ServiceClosedError(HeuristicTSPError):
    """Raised when a run is requested from a service that was shut down."""


__all__ = [
    "AlgorithmExecutionError",
    "HeuristicTSPError",
    "NotFoundError",
    "RunNotInProgressError",
    "ServiceClosedError",
    "ValidationError",
]
