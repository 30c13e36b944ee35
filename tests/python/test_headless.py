import csv
import json

import pytest

from rpsls.headless import parse_counts, run_headless
from rpsls.sim.core.config import InitialCounts, SimulationConfig
from rpsls.sim.core.rules import EntityType


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_log_header_and_conservation(tmp_path):
    log_path = tmp_path / "run.csv"
    config = SimulationConfig(initial_counts=InitialCounts.uniform(4))
    run_headless(steps=30, seed=1, log_path=log_path, deterministic_log=True, config=config)
    rows = _read_csv(log_path)
    header = rows[0]
    assert header == [
        "frame",
        "population",
        "rock",
        "paper",
        "scissors",
        "lizard",
        "spock",
        "pair_checks",
        "collisions",
        "conversions",
        "cooldown_skips",
        "tick_ms",
    ]
    assert 2 <= len(rows) <= 31
    idx = {name: i for i, name in enumerate(header)}
    for row in rows[1:]:
        per_type = sum(int(row[idx[name]]) for name in ["rock", "paper", "scissors", "lizard", "spock"])
        assert per_type == int(row[idx["population"]]) == 20
        assert int(row[idx["pair_checks"]]) == 20 * 19 // 2
        assert row[idx["tick_ms"]] == "0.000"


def test_headless_deterministic_logs_match(tmp_path):
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"
    run_headless(steps=60, seed=8, log_path=first, deterministic_log=True)
    run_headless(steps=60, seed=8, log_path=second, deterministic_log=True)
    assert first.read_text() == second.read_text()


def test_headless_stops_at_winner_and_writes_summary(tmp_path):
    summary_path = tmp_path / "summary.json"
    world = run_headless(
        steps=500,
        seed=3,
        log_path=None,
        deterministic_log=True,
        summary_path=summary_path,
        counts={EntityType.PAPER: 3},
    )
    payload = json.loads(summary_path.read_text())
    assert world.frame_count == 1
    assert payload["frames"] == 1
    assert payload["state"] == "ended"
    assert payload["winner"] == "paper"
    assert payload["final_counts"]["paper"] == 3
    assert payload["seed"] == 3
    assert set(payload["series"]["datasets"]) == {"rock", "paper", "scissors", "lizard", "spock"}


def test_parse_counts():
    counts = parse_counts("rock=5, Spock=2")
    assert counts[EntityType.ROCK] == 5
    assert counts[EntityType.SPOCK] == 2
    assert counts[EntityType.PAPER] == 0
    with pytest.raises(ValueError):
        parse_counts("rock")
    with pytest.raises(ValueError):
        parse_counts("rock=-1")
    with pytest.raises(ValueError):
        parse_counts("dynamite=1")
