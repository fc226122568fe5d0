"""
Tagged-tree intermediate representation.

A Node is an immutable (tag, args...) tuple. Tags come from an open
identifier space: the core vocabulary below anchors the lowest level, every
other tag is a higher-level abstraction that some filter lowers before
generation.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Any, Iterator, Tuple, Union

Literal = Union[str, int, float, bool]
Arg = Union[Literal, "Node"]

_LITERAL_TYPES = (str, int, float, bool)


class CoreTag(str, enum.Enum):
    """Core vocabulary accepted by generator stages."""
    SEQUENCE = "sequence"   # ordered children, flattened at emission
    STATIC = "static"       # literal text, emitted verbatim
    DYNAMIC = "dynamic"     # expression, its evaluated result is emitted
    BLOCK = "block"         # control-flow code, evaluated but not emitted

    def __str__(self) -> str:
        return self.value


CORE_TAGS = frozenset(tag.value for tag in CoreTag)


@dataclass(frozen=True, init=False, eq=False, repr=False)
class Node:
    """
    Immutable IR node.

    Args are literals (str, int, float, bool) or nested nodes. Equality is
    structural: same tag and pairwise equal args, literal types included,
    so Node("x", 1) and Node("x", True) differ.
    """
    tag: str
    args: Tuple[Arg, ...]

    def __init__(self, tag: str, *args: Arg):
        if isinstance(tag, enum.Enum):
            tag = tag.value
        if not isinstance(tag, str) or not tag:
            raise TypeError(f"Node tag must be a non-empty string, got {tag!r}")
        for i, arg in enumerate(args):
            if not isinstance(arg, (Node, *_LITERAL_TYPES)):
                raise TypeError(
                    f"Node '{tag}' argument {i} must be a literal or a Node, "
                    f"got {type(arg).__name__}"
                )
            if isinstance(arg, float) and not math.isfinite(arg):
                raise ValueError(f"Node '{tag}' argument {i} must be a finite float, got {arg!r}")
        object.__setattr__(self, "tag", str(tag))
        object.__setattr__(self, "args", tuple(args))

    @property
    def children(self) -> Tuple[Node, ...]:
        """Node arguments in order, literals skipped."""
        return tuple(a for a in self.args if isinstance(a, Node))

    def with_args(self, *args: Arg) -> Node:
        """Returns a node with the same tag and new arguments."""
        return Node(self.tag, *args)

    # Equality, hashing and repr use explicit stacks: trees may be nested
    # deeper than the interpreter's recursion limit.

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        pending = [(self, other)]
        while pending:
            a, b = pending.pop()
            if a is b:
                continue
            if a.tag != b.tag or len(a.args) != len(b.args):
                return False
            for x, y in zip(a.args, b.args):
                if isinstance(x, Node) and isinstance(y, Node):
                    pending.append((x, y))
                elif isinstance(x, Node) or isinstance(y, Node) or type(x) is not type(y) or x != y:
                    return False
        return True

    def __hash__(self) -> int:
        cached = self.__dict__.get("_hash")
        return cached if cached is not None else _hash_tree(self)

    def __repr__(self) -> str:
        parts = []
        stack: list = [self]
        while stack:
            item = stack.pop()
            if not isinstance(item, Node):
                parts.append(item)
                continue
            parts.append(f"Node({item.tag!r}")
            stack.append(")")
            for arg in reversed(item.args):
                stack.append(arg if isinstance(arg, Node) else repr(arg))
                stack.append(", ")
        return "".join(parts)


def _hash_tree(root: Node) -> int:
    """Computes and caches the hash of every node below root, children first."""
    stack = [(root, False)]
    while stack:
        node, ready = stack.pop()
        if "_hash" in node.__dict__:
            continue
        if ready:
            parts = tuple(a.__dict__["_hash"] if isinstance(a, Node) else hash((type(a), a)) for a in node.args)
            object.__setattr__(node, "_hash", hash((node.tag, parts)))
        else:
            stack.append((node, True))
            stack.extend((child, False) for child in node.children)
    return root.__dict__["_hash"]


def sequence(*children: Node) -> Node:
    return Node(CoreTag.SEQUENCE, *children)


def static(text: str) -> Node:
    return Node(CoreTag.STATIC, text)


def dynamic(expression: str) -> Node:
    return Node(CoreTag.DYNAMIC, expression)


def block(code: str) -> Node:
    return Node(CoreTag.BLOCK, code)


def is_core(node: Node) -> bool:
    """True if the node's tag belongs to the core vocabulary."""
    return node.tag in CORE_TAGS


def walk(node: Node) -> Iterator[Node]:
    """Yields the node and all its descendants depth-first, in tree order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


__all__ = [
    "Literal",
    "Arg",
    "CoreTag",
    "CORE_TAGS",
    "Node",
    "sequence",
    "static",
    "dynamic",
    "block",
    "is_core",
    "walk",
]
