"""
Trellis: compiler infrastructure shared by template languages.

A canonical tagged-tree IR, a single-method stage contract satisfied by
parsers, filters and generators, and an engine that composes stages into a
pipeline while binding per-stage options.
"""

from __future__ import annotations

from .engine import Chain, Engine, StageSpec
from .errors import (
    CompilationError,
    ConfigurationError,
    GenerationError,
    SerializationError,
    ShapeError,
    TrellisUserError,
)
from .filters import Filter, handles
from .generators import Generator
from .ir import CORE_TAGS, CoreTag, Node, block, dynamic, sequence, static
from .stage import Compiler, NoOptions, Parser, Stage

__all__ = [
    "Chain",
    "Engine",
    "StageSpec",
    "CompilationError",
    "ConfigurationError",
    "GenerationError",
    "SerializationError",
    "ShapeError",
    "TrellisUserError",
    "Filter",
    "handles",
    "Generator",
    "CORE_TAGS",
    "CoreTag",
    "Node",
    "block",
    "dynamic",
    "sequence",
    "static",
    "Compiler",
    "NoOptions",
    "Parser",
    "Stage",
]
