"""
Pipeline composition: chain declarations, option binding and the engine.
"""

from __future__ import annotations

from .binder import BoundStage, bind_chain, resolve_options, shared_values
from .chain import Chain, StageSpec
from .engine import Engine

__all__ = ["BoundStage", "bind_chain", "resolve_options", "shared_values", "Chain", "StageSpec", "Engine"]
