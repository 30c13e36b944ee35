import pytest

from rpsls.sim.core.config import AppConfig, InitialCounts, SimulationConfig, dump_config, load_config
from rpsls.sim.core.rules import EntityType


def test_defaults_keep_bounce_margin_inside_spawn_inset():
    config = SimulationConfig()
    assert config.edge_margin <= config.spawn_inset
    assert config.spawn_inset > config.radius
    assert config.collision_cooldown_ms == 250.0
    assert sum(config.initial_counts.as_dict().values()) == 50


def test_load_config_reads_nested_counts():
    config = load_config({"width": 640, "speed": 3.5, "initial_counts": {"rock": 1, "spock": 4}})
    assert config.width == 640
    assert config.speed == 3.5
    counts = config.initial_counts.as_dict()
    assert counts[EntityType.ROCK] == 1
    assert counts[EntityType.SPOCK] == 4
    assert counts[EntityType.PAPER] == 10


def test_load_config_rejects_unknown_keys():
    with pytest.raises(TypeError):
        load_config({"gravity": 9.8})
    with pytest.raises(ValueError):
        InitialCounts.from_mapping({"dynamite": 3})


def test_yaml_round_trip(tmp_path):
    import yaml

    path = tmp_path / "arena.yaml"
    written = SimulationConfig(seed=11, height=320.0, initial_counts=InitialCounts.uniform(3))
    path.write_text(yaml.safe_dump(dump_config(written)))

    loaded = SimulationConfig.from_yaml(path)

    assert loaded == written


def test_app_config_from_yaml(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("broadcast_interval: 5\nsimulation:\n  seed: 99\n  initial_counts:\n    lizard: 2\n")

    config = AppConfig.from_yaml(path)

    assert config.broadcast_interval == 5
    assert config.simulation.seed == 99
    assert config.simulation.initial_counts.lizard == 2
