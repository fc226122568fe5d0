"""
Engines importable by name, for CLI tests.
"""

from __future__ import annotations

from trellis import Chain, Engine
from trellis.filters import ControlFlowLowering, DynamicInliner, Eraser, MultiFlattener, StaticMerger
from trellis.generators import ListBufferGenerator

from .tinyparse import TinyParser


class LoweringEngine(Engine):
    """Node -> core vocabulary Node."""
    chain = Chain([Eraser, ControlFlowLowering, MultiFlattener, DynamicInliner, StaticMerger])


class CodegenEngine(Engine):
    """Node -> Python source."""
    chain = Chain([LoweringEngine, ListBufferGenerator])


class TemplateEngine(Engine):
    """Template text -> Python source."""
    chain = CodegenEngine.chain.before("lowering_engine", TinyParser)


NOT_AN_ENGINE = object()

__all__ = ["LoweringEngine", "CodegenEngine", "TemplateEngine", "NOT_AN_ENGINE"]
