from __future__ import annotations

import ast
import logging
from dataclasses import dataclass

from .base import Filter, handles
from ..ir.nodes import CoreTag, Node, static

logger = logging.getLogger(__name__)

# Scalars whose str() is the same in every process
_INLINABLE = (str, int, float, complex, bool, type(None))


@dataclass(frozen=True)
class InlinerOptions:
    # Shared with the generators (engines reject a mismatch); inlining is only exact for str()
    to_text: str = "str"


class DynamicInliner(Filter[InlinerOptions]):
    """
    Rewrites dynamic nodes whose expression is a compile-time literal into
    static text carrying exactly what the generated code would have emitted.

    [dynamic, "'World'"] -> [static, "World"]
    [dynamic, "42"]      -> [static, "42"]
    [dynamic, "name"]    -> unchanged
    """
    name = "dynamic_inliner"
    passthrough = None  # runs at any abstraction level
    shared_options = frozenset({"to_text"})

    @handles(CoreTag.DYNAMIC)
    def on_dynamic(self, node: Node) -> Node:
        self.expect(node, str)
        if self.options.to_text != "str":
            return node
        try:
            value = ast.literal_eval(node.args[0].strip())
        except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
            return node
        if not isinstance(value, _INLINABLE):
            return node
        logger.debug("Inlining literal expression %r", node.args[0])
        return static(str(value))


__all__ = ["InlinerOptions", "DynamicInliner"]
