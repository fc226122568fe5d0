"""
Helpers for executing generated programs in tests.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from trellis import Node
from trellis.generators import ListBufferGenerator, PythonGenerator


def execute(program: str, bindings: Optional[Mapping[str, Any]] = None, buffer: str = "_buf") -> str:
    """Runs a generated program with the bindings as globals and returns the buffer."""
    namespace = dict(bindings or {})
    exec(compile(program, "<generated>", "exec"), namespace)
    return namespace[buffer]


def render(
    tree: Node,
    bindings: Optional[Mapping[str, Any]] = None,
    generator: Optional[PythonGenerator] = None,
) -> str:
    """Generates code for a core-vocabulary tree and executes it."""
    generator = generator or ListBufferGenerator()
    return execute(generator.run(tree), bindings, buffer=generator.options.buffer)


__all__ = ["execute", "render"]
