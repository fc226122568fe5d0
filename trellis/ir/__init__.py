"""
Intermediate representation: nodes and their serialization.
"""

from __future__ import annotations

from .nodes import CORE_TAGS, CoreTag, Node, block, dynamic, is_core, sequence, static, walk
from .serialize import dumps, fingerprint, from_bytes, from_data, loads, to_bytes, to_data

__all__ = [
    "CORE_TAGS",
    "CoreTag",
    "Node",
    "block",
    "dynamic",
    "is_core",
    "sequence",
    "static",
    "walk",
    "dumps",
    "loads",
    "to_bytes",
    "from_bytes",
    "to_data",
    "from_data",
    "fingerprint",
]
