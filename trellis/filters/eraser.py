from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .base import Filter
from ..ir.nodes import Node, sequence


@dataclass(frozen=True)
class EraserOptions:
    erase: Tuple[str, ...] = ("comment",)


class Eraser(Filter[EraserOptions]):
    """
    Drops every node whose tag is listed in the `erase` option, replacing it
    with an empty sequence. The handled tags come from the options instead
    of @handles declarations.
    """
    name = "eraser"

    def dispatch(self, node: Node) -> Node:
        if node.tag in self.options.erase:
            return sequence()
        return super().dispatch(node)


__all__ = ["EraserOptions", "Eraser"]
