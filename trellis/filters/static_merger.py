from __future__ import annotations

from typing import List

from .base import Filter, handles
from ..errors import ShapeError
from ..ir.nodes import CoreTag, Node, static
from ..stage import NoOptions


class StaticMerger(Filter[NoOptions]):
    """
    Merges consecutive static children of every sequence into one.

    [sequence, [static, "A"], [static, "B"], [dynamic, "x"]]
      -> [sequence, [static, "AB"], [dynamic, "x"]]

    Relative order is kept and non-static children are left alone, so
    applying the filter to its own output changes nothing.
    """
    name = "static_merger"
    passthrough = None  # runs at any abstraction level

    @handles(CoreTag.SEQUENCE)
    def on_sequence(self, node: Node) -> Node:
        merged: List[Node] = []
        run: List[Node] = []

        def flush() -> None:
            if len(run) == 1:
                merged.append(run[0])
            elif run:
                merged.append(static("".join(n.args[0] for n in run)))
            run.clear()

        for arg in node.args:
            if not isinstance(arg, Node):
                raise ShapeError("sequence children must be nodes", node=node, stage=self.name)
            child = self.dispatch(arg)
            if child.tag == CoreTag.STATIC:
                self.expect(child, str)
                run.append(child)
            else:
                flush()
                merged.append(child)
        flush()

        if len(merged) == len(node.args) and all(new is old for new, old in zip(merged, node.args)):
            return node
        return node.with_args(*merged)


__all__ = ["StaticMerger"]
