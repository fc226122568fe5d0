"""
Option typing and engine configuration loading.
"""

from __future__ import annotations

from .load import EngineConfig, load_engine_config, parse_assignments
from .typed import OptionsError, build_typed, coerce, option_names

__all__ = [
    "EngineConfig",
    "load_engine_config",
    "parse_assignments",
    "OptionsError",
    "build_typed",
    "coerce",
    "option_names",
]
