"""
Lowering of structured control flow into block fragments.

    [if, "user", body]            -> [sequence, [block, "if user:"], body, [block, "end"]]
    [if, "user", body, other]     -> ... [block, "else:"], other, [block, "end"]
    [for, "item", "items", body]  -> [sequence, [block, "for item in items:"], body, [block, "end"]]
"""

from __future__ import annotations

from dataclasses import dataclass

from .base import Filter, handles
from ..errors import ShapeError
from ..ir.nodes import CORE_TAGS, Node, block, sequence


@dataclass(frozen=True)
class ControlFlowOptions:
    # reject any tag that is neither core vocabulary nor handled here
    strict: bool = False


class ControlFlowLowering(Filter[ControlFlowOptions]):
    name = "control_flow"

    def passes(self, tag: str) -> bool:
        if self.options.strict:
            return tag in CORE_TAGS
        return super().passes(tag)

    @handles("if")
    def on_if(self, node: Node) -> Node:
        self.expect(node, str, Node, Node, min_args=2)
        condition = self._fragment(node, node.args[0], "condition")
        parts = [block(f"if {condition}:"), self.dispatch(node.args[1])]
        if len(node.args) == 3:
            parts += [block("else:"), self.dispatch(node.args[2])]
        parts.append(block("end"))
        return sequence(*parts)

    @handles("for")
    def on_for(self, node: Node) -> Node:
        self.expect(node, str, str, Node)
        target = self._fragment(node, node.args[0], "loop target")
        iterable = self._fragment(node, node.args[1], "iterable")
        return sequence(
            block(f"for {target} in {iterable}:"),
            self.dispatch(node.args[2]),
            block("end"),
        )

    def _fragment(self, node: Node, text: str, what: str) -> str:
        text = text.strip()
        if not text:
            raise ShapeError(f"empty {what}", node=node, stage=self.name)
        if "\n" in text:
            raise ShapeError(f"{what} must fit on one line", node=node, stage=self.name)
        return text


__all__ = ["ControlFlowOptions", "ControlFlowLowering"]
