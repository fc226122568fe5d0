"""
Node -> text stages.
"""

from __future__ import annotations

from .base import Generator
from .python import ListBufferGenerator, PythonGenerator, PythonOptions, StringBufferGenerator
from .writer import CodeWriter

__all__ = [
    "Generator",
    "PythonGenerator",
    "PythonOptions",
    "ListBufferGenerator",
    "StringBufferGenerator",
    "CodeWriter",
]
