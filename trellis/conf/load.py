"""
Engine configuration files.

    # trellis.yaml
    options:            # global options, offered to every stage
      to_text: str
    stages:             # per-stage overrides by stage name
      control_flow:
        strict: true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .typed import OptionsError, build_typed
from ..errors import ConfigurationError

_yaml = YAML(typ="safe")


@dataclass(frozen=True)
class EngineConfig:
    options: Dict[str, Any] = field(default_factory=dict)
    stages: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def merged(self, other: EngineConfig) -> EngineConfig:
        """Returns a config where the keys of `other` win."""
        stages = {name: dict(opts) for name, opts in self.stages.items()}
        for name, opts in other.stages.items():
            stages.setdefault(name, {}).update(opts)
        return EngineConfig(options={**self.options, **other.options}, stages=stages)


def _read_yaml_map(path: Path) -> dict:
    """Reads a YAML file that must contain a mapping; an empty file is an empty mapping."""
    if not path.is_file():
        raise ConfigurationError(f"config file not found: {path}")
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"YAML must be a mapping: {path}")
    return raw


def load_engine_config(path: Path) -> EngineConfig:
    raw = _read_yaml_map(path)
    try:
        return build_typed(EngineConfig, raw)
    except OptionsError as e:
        raise ConfigurationError(f"{path}: {e}") from e


def parse_assignments(items: Iterable[str]) -> EngineConfig:
    """
    Parses command line assignments into a config.

    'key=value' sets a global option, 'stage.key=value' a per-stage one.
    Values are read as YAML scalars: 'true', '3', '[a, b]' keep their types.
    """
    options: Dict[str, Any] = {}
    stages: Dict[str, Dict[str, Any]] = {}
    for item in items:
        key, sep, text = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigurationError(f"invalid assignment '{item}', expected key=value")
        try:
            value = _yaml.load(text) if text.strip() else ""
        except YAMLError as e:
            raise ConfigurationError(f"invalid value in '{item}': {e}") from e
        stage, dot, option = key.rpartition(".")
        if dot:
            stages.setdefault(stage, {})[option] = value
        else:
            options[key] = value
    return EngineConfig(options=options, stages=stages)


__all__ = ["EngineConfig", "load_engine_config", "parse_assignments"]
