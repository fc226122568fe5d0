"""
Shared test infrastructure for Trellis.

Modules:
- tinyparse: reference template parser used by end-to-end tests
- stages: small stages with observable behaviour for engine tests
- engines: engines importable by name (CLI tests)
- trees: sample trees
- rendering_utils: executing generated programs
"""

from .rendering_utils import execute, render
from .stages import (
    Explode,
    Mark,
    Recorder,
    Reject,
    RequiredOptions,
    Suffix,
    SuffixOptions,
    Wrap,
    WrapOptions,
)
from .tinyparse import TinyParser
from .trees import core_samples, hello_tree

__all__ = [
    # Rendering
    "execute", "render",

    # Stages
    "Explode", "Mark", "Recorder", "Reject", "RequiredOptions",
    "Suffix", "SuffixOptions", "Wrap", "WrapOptions",

    # Parsing and trees
    "TinyParser", "core_samples", "hello_tree",
]
