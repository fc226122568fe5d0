"""
Node -> Node stages: the filter base class and the stock filters.
"""

from __future__ import annotations

from .base import Filter, handles
from .control_flow import ControlFlowLowering, ControlFlowOptions
from .dynamic_inliner import DynamicInliner, InlinerOptions
from .eraser import Eraser, EraserOptions
from .multi_flattener import MultiFlattener
from .static_merger import StaticMerger

__all__ = [
    "Filter",
    "handles",
    "ControlFlowLowering",
    "ControlFlowOptions",
    "DynamicInliner",
    "InlinerOptions",
    "Eraser",
    "EraserOptions",
    "MultiFlattener",
    "StaticMerger",
]
