from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Mapping

import yaml

from .rules import ENTITY_TYPES, EntityType, as_entity_type


@dataclass
class InitialCounts:
    rock: int = 10
    paper: int = 10
    scissors: int = 10
    lizard: int = 10
    spock: int = 10

    def as_dict(self) -> Dict[EntityType, int]:
        return {entity_type: int(getattr(self, entity_type.value)) for entity_type in ENTITY_TYPES}

    @classmethod
    def from_mapping(cls, raw: Mapping[EntityType | str, int]) -> "InitialCounts":
        values = {as_entity_type(key).value: int(value) for key, value in raw.items()}
        return cls(**values)

    @classmethod
    def uniform(cls, count: int) -> "InitialCounts":
        return cls(**{entity_type.value: count for entity_type in ENTITY_TYPES})


@dataclass
class SimulationConfig:
    width: float = 800.0
    height: float = 500.0
    radius: float = 12.0
    # Bounce margin; keep it at or below spawn_inset.
    edge_margin: float = 10.0
    spawn_inset: float = 20.0
    collision_cooldown_ms: float = 250.0
    sample_interval: int = 20
    speed: float = 2.0
    frame_ms: float = 1000.0 / 60.0
    seed: int = 42
    config_version: str = "v1"
    initial_counts: InitialCounts = field(default_factory=InitialCounts)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 2
    frame_interval: float = 1.0 / 60.0
    # Undelivered snapshots kept for slow or reconnecting clients.
    snapshot_backlog: int = 32
    max_entities: int = 1000

    @staticmethod
    def from_yaml(path: Path) -> "AppConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        app_values = {k: v for k, v in data.items() if k != "simulation"}
        return AppConfig(simulation=load_config(data.get("simulation", {})), **app_values)


def load_config(raw: dict) -> SimulationConfig:
    counts = InitialCounts.from_mapping(raw.get("initial_counts", {}))
    sim_values = {k: v for k, v in raw.items() if k != "initial_counts"}
    return SimulationConfig(initial_counts=counts, **sim_values)


def dump_config(config: SimulationConfig) -> dict:
    values = {f.name: getattr(config, f.name) for f in fields(config) if f.name != "initial_counts"}
    values["initial_counts"] = {key.value: value for key, value in config.initial_counts.as_dict().items()}
    return values
