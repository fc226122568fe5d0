"""
Base class for Node -> text stages.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from ..errors import ShapeError
from ..ir.nodes import CORE_TAGS, CoreTag, Node
from ..stage import C, Stage


class Generator(Stage[C]):
    """
    Maps a core vocabulary tree to a program in some target environment.

    Executing the produced program with the expression bindings available
    must yield every static literal and every dynamic result in tree order,
    interleaved with the control flow of the block fragments. Tags outside
    the core vocabulary are rejected with ShapeError.

    Subclasses implement the emission hooks; the state object returned by
    begin() lives for a single run() call only.
    """

    def run(self, node: Node) -> str:
        if not isinstance(node, Node):
            raise ShapeError(f"expected a Node, got {type(node).__name__}", node=node, stage=self.name)
        state = self.begin()
        self._emit(node, state)
        return self.finish(state, node)

    def _emit(self, root: Node, state: Any) -> None:
        # explicit stack: sequences may nest deeper than the recursion limit
        stack = [root]
        while stack:
            node = stack.pop()
            if node.tag not in CORE_TAGS:
                raise ShapeError(
                    f"tag '{node.tag}' is not core vocabulary and must be lowered before generation",
                    node=node,
                    stage=self.name,
                )

            if node.tag == CoreTag.SEQUENCE:
                if not all(isinstance(child, Node) for child in node.args):
                    raise ShapeError("sequence children must be nodes", node=node, stage=self.name)
                stack.extend(reversed(node.args))  # type: ignore[arg-type]
                continue

            if len(node.args) != 1 or not isinstance(node.args[0], str):
                raise ShapeError(f"'{node.tag}' takes exactly one string argument", node=node, stage=self.name)
            text = node.args[0]
            if node.tag == CoreTag.STATIC:
                self.on_static(state, text, node)
            elif node.tag == CoreTag.DYNAMIC:
                self.on_dynamic(state, text, node)
            else:
                self.on_block(state, text, node)

    @abstractmethod
    def begin(self) -> Any:
        """Creates the per-run emission state."""
        pass

    @abstractmethod
    def on_static(self, state: Any, text: str, node: Node) -> None:
        pass

    @abstractmethod
    def on_dynamic(self, state: Any, expression: str, node: Node) -> None:
        pass

    @abstractmethod
    def on_block(self, state: Any, code: str, node: Node) -> None:
        pass

    @abstractmethod
    def finish(self, state: Any, root: Node) -> str:
        """Completes the program and returns its text."""
        pass


__all__ = ["Generator"]
