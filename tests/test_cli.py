import json

import pandas as pd
import pytest

from HeuristicTSP import cli
from HeuristicTSP.core import City
from HeuristicTSP.utils.taxonomy import AlgorithmType


@pytest.fixture(autouse=True)
def no_shutdown_hook(monkeypatch):
    monkeypatch.setenv("HEURISTIC_TSP_SHUTDOWN_HOOK", "0")
    monkeypatch.setenv("HEURISTIC_TSP_POLL_INTERVAL", "0.01")


def test_algorithms_lists_every_tag(capsys):
    assert cli.main(["algorithms"]) == 0
    out = capsys.readouterr().out
    for algorithm_type in AlgorithmType:
        assert algorithm_type.value in out
    assert "coolingRate=0.995" in out


def test_solve_random_instance_writes_outputs(tmp_path, capsys):
    output = tmp_path / "run.json"
    history_csv = tmp_path / "history.csv"
    code = cli.main(
        [
            "solve",
            "--random", "6",
            "--seed", "1",
            "--algorithm", "genetic_algorithm",
            "--max-iterations", "20",
            "--param", "populationSize=10",
            "--output", str(output),
            "--history-csv", str(history_csv),
        ]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Best distance" in out
    assert "iteration" in out

    payload = json.loads(output.read_text())
    assert payload["status"] == "completed"
    assert payload["totalIterations"] == 20
    assert len(payload["iterationHistory"]) == 20
    assert len(payload["cities"]) == 6
    assert sorted(payload["bestRoute"]) == list(range(6))

    frame = pd.read_csv(history_csv)
    assert list(frame.columns) == ["iteration", "best_distance", "current_distance"]
    assert len(frame) == 20


def test_solve_problem_file_with_alias(tmp_path, capsys):
    problem = tmp_path / "square.json"
    problem.write_text(json.dumps({"coordinates": [[0, 0], [1, 0], [1, 1], [0, 1]]}))
    code = cli.main(
        ["solve", "--problem", str(problem), "--algorithm", "TabuSearch", "--max-iterations", "30", "--seed", "2", "--quiet"]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Best distance 4.0000" in out
    assert "best =" not in out


@pytest.mark.parametrize(
    "extra",
    [
        ["--algorithm", "hill_climbing"],
        ["--algorithm", "ant_colony", "--param", "alpha=high"],
        ["--algorithm", "ant_colony", "--param", "alpha"],
    ],
)
def test_bad_input_exits_with_usage_error(extra, capsys):
    assert cli.main(["solve", "--random", "5", *extra]) == 2
    assert "error:" in capsys.readouterr().err


def test_missing_problem_file(tmp_path):
    assert cli.main(["solve", "--problem", str(tmp_path / "nope.json"), "--algorithm", "slime_mold"]) == 2


def test_single_city_problem_is_rejected(tmp_path):
    problem = tmp_path / "one.json"
    problem.write_text(json.dumps({"cities": [{"x": 1, "y": 2}]}))
    assert cli.main(["solve", "--problem", str(problem), "--algorithm", "slime_mold"]) == 2


def test_load_cities_accepts_city_objects(tmp_path):
    problem = tmp_path / "cities.json"
    problem.write_text(json.dumps({"cities": [{"id": 7, "x": 0, "y": 0, "name": "A"}, {"x": 3, "y": 4}]}))
    cities = cli.load_cities(problem)
    assert cities[0] == City(7, 0.0, 0.0, "A")
    assert cities[0].distance_to(cities[1]) == 5.0


def test_load_cities_rejects_unknown_layout(tmp_path):
    problem = tmp_path / "bad.json"
    problem.write_text(json.dumps({"points": []}))
    with pytest.raises(ValueError):
        cli.load_cities(problem)


def test_parse_param_overrides():
    assert cli.parse_param_overrides(["antCount=12", " alpha = 0.5"]) == {"antCount": 12.0, "alpha": 0.5}
