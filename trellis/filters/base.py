"""
Base class for Node -> Node stages.

A filter declares the closed set of tags it handles with @handles. Every
other tag either passes through (its Node children are still filtered) or is
rejected with ShapeError, depending on the filter's passthrough policy.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, FrozenSet, Optional, TypeVar

from ..errors import ShapeError
from ..ir.nodes import Node
from ..stage import C, Stage

F = TypeVar("F", bound=Callable[..., Node])


def handles(*tags: str) -> Callable[[F], F]:
    """Marks a filter method as the handler for the given tags."""
    if not tags:
        raise ValueError("handles() needs at least one tag")

    def decorator(func: F) -> F:
        func.__handled_tags__ = tuple(str(getattr(t, "value", t)) for t in tags)  # type: ignore[attr-defined]
        return func

    return decorator


class Filter(Stage[C]):
    """
    Node -> Node transformation.

    Lowering filters rewrite higher-level tags into lower-level ones;
    optimization filters rewrite within one level into a cheaper equivalent
    tree. Both return new trees and never mutate their input; subtrees left
    unchanged are returned as the very same objects.

    Passthrough is open by default: the handled tags are checked and
    rewritten, every other tag is kept and its children are still filtered.
    The stock optimization filters rely on this to run at any abstraction
    level of a pipeline. A filter that must see only known tags sets
    `passthrough` to the allowed set (or overrides passes(), as
    ControlFlowLowering does in strict mode).
    """

    #: None: unknown tags pass through; a set: only these tags may pass through
    passthrough: ClassVar[Optional[FrozenSet[str]]] = None

    # tag -> handler method name, collected per subclass
    _handlers: ClassVar[Dict[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        handlers: Dict[str, str] = {}
        for base in reversed(cls.__mro__):
            for attr, value in vars(base).items():
                for tag in getattr(value, "__handled_tags__", ()):
                    handlers[tag] = attr
        cls._handlers = handlers

    @classmethod
    def handled_tags(cls) -> FrozenSet[str]:
        return frozenset(cls._handlers)

    def run(self, node: Node) -> Node:
        if not isinstance(node, Node):
            raise ShapeError(f"expected a Node, got {type(node).__name__}", node=node, stage=self.name)
        try:
            return self.dispatch(node)
        except RecursionError as e:
            raise ShapeError("tree is nested too deeply to filter", node=Node(node.tag), stage=self.name) from e

    def dispatch(self, node: Node) -> Node:
        """Routes a node to its handler, or through the passthrough policy."""
        handler = self._handlers.get(node.tag)
        if handler is not None:
            return getattr(self, handler)(node)
        if self.passes(node.tag):
            return self.descend(node)
        raise ShapeError(f"unhandled tag '{node.tag}'", node=node, stage=self.name)

    def passes(self, tag: str) -> bool:
        """True if a node with this tag may pass through unchanged."""
        return self.passthrough is None or tag in self.passthrough

    def descend(self, node: Node) -> Node:
        """Filters the Node arguments of a node, keeping literals and order."""
        args = tuple(self.dispatch(a) if isinstance(a, Node) else a for a in node.args)
        if all(new is old for new, old in zip(args, node.args)):
            return node
        return node.with_args(*args)

    def expect(self, node: Node, *types: type, min_args: Optional[int] = None) -> None:
        """
        Checks the argument shape of a handled node.

        `types` gives the expected type of each positional argument; with
        min_args the trailing ones are optional.

        Raises:
            ShapeError: on wrong arity or argument types
        """
        lower = len(types) if min_args is None else min_args
        if not lower <= len(node.args) <= len(types):
            expected = str(len(types)) if lower == len(types) else f"{lower} to {len(types)}"
            raise ShapeError(
                f"'{node.tag}' takes {expected} arguments, got {len(node.args)}",
                node=node,
                stage=self.name,
            )
        for i, (arg, tp) in enumerate(zip(node.args, types)):
            if not isinstance(arg, tp) or (tp is int and isinstance(arg, bool)):
                raise ShapeError(
                    f"'{node.tag}' argument {i} must be {tp.__name__}, got {type(arg).__name__}",
                    node=node,
                    stage=self.name,
                )


__all__ = ["Filter", "handles"]
