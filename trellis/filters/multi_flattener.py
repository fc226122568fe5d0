from __future__ import annotations

from typing import List

from .base import Filter, handles
from ..errors import ShapeError
from ..ir.nodes import CoreTag, Node
from ..stage import NoOptions


class MultiFlattener(Filter[NoOptions]):
    """Splices nested sequences into their parent sequence."""
    name = "multi_flattener"
    passthrough = None  # runs at any abstraction level

    @handles(CoreTag.SEQUENCE)
    def on_sequence(self, node: Node) -> Node:
        flat: List[Node] = []
        changed = False
        for arg in node.args:
            if not isinstance(arg, Node):
                raise ShapeError("sequence children must be nodes", node=node, stage=self.name)
            child = self.dispatch(arg)
            if child.tag == CoreTag.SEQUENCE:
                # already flattened by the dispatch above
                flat.extend(child.args)  # type: ignore[arg-type]
                changed = True
            else:
                flat.append(child)
                changed = changed or child is not arg
        return node.with_args(*flat) if changed else node


__all__ = ["MultiFlattener"]
