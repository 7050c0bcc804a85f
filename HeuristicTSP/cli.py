#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import pathlib
import sys
import time
import uuid
from typing import Iterable, List

import numpy as np

from HeuristicTSP.config import EngineSettings, configure_logging
from HeuristicTSP.core import City
from HeuristicTSP.errors import HeuristicTSPError
from HeuristicTSP.parameters import PARAMETER_DEFAULTS, coerce_value
from HeuristicTSP.reporting import plot_convergence, summarize_history, write_history_csv
from HeuristicTSP.runs import AlgorithmConfiguration, InMemoryRepository, OptimizationService, ProblemDefinition
from HeuristicTSP.solvers import SOLVER_SPECS
from HeuristicTSP.utils.taxonomy import AlgorithmType, RunStatus


def parse_args(raw_args: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="HeuristicTSP", description="Solve TSP instances with metaheuristics.")
    parser.add_argument("--log-level", default=None, help="Logging level (default: from environment or INFO).")
    sub = parser.add_subparsers(dest="command", required=True)

    solve = sub.add_parser("solve", help="Run one solver on a problem and report progress.")
    source = solve.add_mutually_exclusive_group(required=True)
    source.add_argument("--problem", type=pathlib.Path, help="JSON file with 'cities' or 'coordinates'.")
    source.add_argument("--random", type=int, metavar="N", help="Generate N random cities in [0, 100)^2.")
    solve.add_argument("--seed", type=int, default=None, help="Seed for instance generation and the solver.")
    solve.add_argument(
        "--algorithm",
        required=True,
        help="Algorithm tag, e.g. simulated_annealing or SimulatedAnnealing.",
    )
    solve.add_argument("--max-iterations", type=int, default=1000, help="Iteration budget (default: 1000).")
    solve.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Solver parameter override; may be repeated.",
    )
    solve.add_argument("--output", type=pathlib.Path, default=None, help="Write the final run as JSON.")
    solve.add_argument("--history-csv", type=pathlib.Path, default=None, help="Write the iteration history as CSV.")
    solve.add_argument("--plot", type=pathlib.Path, default=None, help="Render a convergence chart (PNG).")
    solve.add_argument("--quiet", action="store_true", help="Only print the final summary.")

    sub.add_parser("algorithms", help="List algorithm tags and their parameter defaults.")
    return parser.parse_args(raw_args)


def load_cities(path: pathlib.Path) -> List[City]:
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if isinstance(payload, dict) and payload.get("cities") is not None:
        return [City.from_dict(item, index=i) for i, item in enumerate(payload["cities"])]
    if isinstance(payload, dict) and payload.get("coordinates") is not None:
        return [City(id=i, x=float(x), y=float(y)) for i, (x, y) in enumerate(payload["coordinates"])]
    raise ValueError("Problem file must contain either 'cities' or 'coordinates'.")


def random_cities(n_cities: int, seed: int | None = None) -> List[City]:
    rng = np.random.default_rng(seed)
    coords = rng.random((n_cities, 2)) * 100.0
    return [City(id=i, x=float(x), y=float(y)) for i, (x, y) in enumerate(coords)]


def parse_param_overrides(items: Iterable[str]) -> dict[str, float]:
    overrides: dict[str, float] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        overrides[key.strip()] = coerce_value(key.strip(), value)
    return overrides


def format_progress(iteration: int, best: float, current: float) -> str:
    return f"  iteration {iteration:>6d}  best = {best:12.4f}  current = {current:12.4f}"


def list_algorithms() -> int:
    for algorithm_type, spec in SOLVER_SPECS.items():
        defaults = ", ".join(f"{k}={v:g}" for k, v in PARAMETER_DEFAULTS[algorithm_type].items())
        print(f"{algorithm_type.value:<20} [{spec.family.value}]  {defaults}")
    return 0


def solve(args: argparse.Namespace, settings: EngineSettings) -> int:
    cities = load_cities(args.problem) if args.problem is not None else random_cities(args.random, args.seed)
    owner_id = uuid.uuid4()
    repository = InMemoryRepository()
    configuration = repository.add_configuration(
        AlgorithmConfiguration(
            algorithm_type=AlgorithmType.parse(args.algorithm),
            parameters=parse_param_overrides(args.param),
            max_iterations=args.max_iterations,
            owner_id=owner_id,
        )
    )
    problem = repository.add_problem(ProblemDefinition(cities=cities, owner_id=owner_id))

    service = OptimizationService(repository, settings=settings)
    run = service.run(configuration.id, problem.id, owner_id, seed=args.seed)
    print(f"Run {run.id}: {configuration.algorithm_type.value} on {problem.city_count} cities")

    seen = 0
    try:
        while True:
            snapshot = service.poll_progress(run.id, owner_id)
            if not args.quiet:
                for record in snapshot.iteration_history[seen:]:
                    print(format_progress(record.iteration, record.best_distance, record.current_distance))
            seen = max(seen, len(snapshot.iteration_history))
            if snapshot.status.is_terminal and not service.is_running(run.id):
                break
            time.sleep(settings.poll_interval)
    except KeyboardInterrupt:
        print("Cancelling...", file=sys.stderr)
        service.shutdown(wait=True)

    service.wait(run.id)
    final = service.get_run(run.id, owner_id)
    if final.status == RunStatus.FAILED:
        print(f"Run failed: {final.error_message}", file=sys.stderr)
    else:
        print(
            f"Best distance {final.best_distance:.4f} after {final.total_iterations} iterations "
            f"({final.execution_time_ms} ms)"
        )
        print(f"Route: {final.best_route}")
        summary = summarize_history(final.iteration_history)
        if summary["last_improvement"] is not None:
            print(f"Last improvement at iteration {summary['last_improvement']} (gain {summary['improvement']:.4f})")

    if args.output is not None:
        payload = final.to_dict()
        payload["iterationHistory"] = [record.to_dict() for record in final.iteration_history]
        payload["cities"] = [city.to_dict() for city in cities]
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with args.output.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
        print(f"Result written to {args.output}")

    if args.history_csv is not None:
        write_history_csv(final.iteration_history, args.history_csv)
        print(f"History written to {args.history_csv}")
    if args.plot is not None and final.iteration_history:
        plot_convergence(final.iteration_history, args.plot, title=configuration.algorithm_type.value)
        print(f"Chart written to {args.plot}")

    service.shutdown(wait=False)
    return 1 if final.status == RunStatus.FAILED else 0


def main(raw_args: Iterable[str] | None = None) -> int:
    args = parse_args(raw_args)
    settings = EngineSettings.from_env()
    configure_logging(args.log_level or settings.log_level)

    if args.command == "algorithms":
        return list_algorithms()
    try:
        return solve(args, settings)
    except (HeuristicTSPError, KeyError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
