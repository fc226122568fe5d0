"""
Stable encoding of IR trees.

A node is encoded as a list whose first element is the tag and whose
remaining elements are its arguments: nested lists are nodes, scalars are
literals. The encoding does not depend on the in-memory representation and
can be exchanged between processes or implementations.
"""

from __future__ import annotations

import hashlib
import json
import math
from typing import Any, List, Optional

from .nodes import Node
from ..errors import SerializationError

_SCALARS = (str, int, float, bool)
_WHITESPACE = " \t\n\r"


def _reject_constant(name: str) -> Any:
    raise SerializationError(f"non-finite number {name} is not valid in an encoded tree")


# Scalars only: lists are walked by hand so that nesting depth is unbounded
_scalar_decoder = json.JSONDecoder(parse_constant=_reject_constant)


def to_data(node: Node) -> List[Any]:
    """Encodes a tree as nested lists of JSON-compatible values."""
    root: List[Any] = []
    stack = [(node, root)]
    while stack:
        current, out = stack.pop()
        out.append(current.tag)
        for arg in current.args:
            if isinstance(arg, Node):
                child: List[Any] = []
                out.append(child)
                stack.append((arg, child))
            else:
                out.append(arg)
    return root


def from_data(data: Any, *, path: str = "$") -> Node:
    """
    Decodes nested lists produced by to_data().

    Raises:
        SerializationError: if the data is not a valid encoded tree
    """
    _check_node(data, path)
    # frames: [encoded items, path, decoded args so far]
    frames = [[data, path, []]]
    while True:
        items, here, args = frames[-1]
        if len(args) < len(items) - 1:
            i = len(args) + 1
            item = items[i]
            if isinstance(item, (list, tuple)):
                _check_node(item, f"{here}[{i}]")
                frames.append([item, f"{here}[{i}]", []])
            else:
                args.append(_literal(item, f"{here}[{i}]"))
            continue
        frames.pop()
        node = Node(items[0], *args)
        if not frames:
            return node
        frames[-1][2].append(node)


def _check_node(data: Any, path: str) -> None:
    if not isinstance(data, (list, tuple)):
        raise SerializationError(f"{path}: expected a list, got {type(data).__name__}")
    if not data:
        raise SerializationError(f"{path}: empty node")
    tag = data[0]
    if not isinstance(tag, str) or not tag:
        raise SerializationError(f"{path}[0]: tag must be a non-empty string, got {tag!r}")


def _literal(item: Any, path: str) -> Any:
    if not isinstance(item, _SCALARS):
        raise SerializationError(f"{path}: unsupported value of type {type(item).__name__}")
    if isinstance(item, float) and not math.isfinite(item):
        raise SerializationError(f"{path}: non-finite float {item!r}")
    return item


def _write(node: Node, separator: str, indent: Optional[int]) -> str:
    """JSON text of the encoded tree, laid out like json.dumps would."""
    parts: List[str] = []
    stack: List[Any] = [(node, 0)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        current, depth = item
        if indent is None:
            opening, between, closing = "[", separator, "]"
        else:
            pad = "\n" + " " * (indent * (depth + 1))
            opening, between, closing = "[" + pad, "," + pad, "\n" + " " * (indent * depth) + "]"
        parts.append(opening)
        stack.append(closing)
        values = (current.tag, *current.args)
        for k in range(len(values) - 1, -1, -1):
            value = values[k]
            stack.append((value, depth + 1) if isinstance(value, Node) else _scalar(value))
            if k:
                stack.append(between)
    return "".join(parts)


def _scalar(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, allow_nan=False)


def _parse(text: str) -> Any:
    """Parses JSON text whose containers are lists, without recursion."""
    stack: List[List[Any]] = []
    pos = _skip(text, 0)
    while True:
        if text.startswith("[", pos):
            current: List[Any] = []
            if stack:
                stack[-1].append(current)
            stack.append(current)
            pos = _skip(text, pos + 1)
            if not text.startswith("]", pos):
                continue
        else:
            value, pos = _scalar_at(text, pos)
            if not stack:
                return _finish(text, pos, value)
            stack[-1].append(value)
            pos = _skip(text, pos)

        # after a value: close finished lists, then move on to the next item
        while True:
            if text.startswith("]", pos):
                done = stack.pop()
                pos = _skip(text, pos + 1)
                if not stack:
                    return _finish(text, pos, done)
            elif text.startswith(",", pos):
                pos = _skip(text, pos + 1)
                break
            else:
                raise SerializationError(f"invalid JSON: expected ',' or ']' at position {pos}")


def _skip(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in _WHITESPACE:
        pos += 1
    return pos


def _scalar_at(text: str, pos: int) -> tuple[Any, int]:
    try:
        return _scalar_decoder.raw_decode(text, pos)
    except json.JSONDecodeError as e:
        raise SerializationError(f"invalid JSON: {e}") from e


def _finish(text: str, pos: int, value: Any) -> Any:
    pos = _skip(text, pos)
    if pos != len(text):
        raise SerializationError(f"invalid JSON: extra data at position {pos}")
    return value


def dumps(node: Node, indent: int | None = None) -> str:
    """Encodes a tree as JSON text."""
    return _write(node, ", ", indent)


def loads(text: str) -> Node:
    """Decodes JSON text produced by dumps()."""
    return from_data(_parse(text))


def to_bytes(node: Node) -> bytes:
    """Compact binary form: UTF-8 encoded JSON without insignificant whitespace."""
    return _write(node, ",", None).encode("utf-8")


def from_bytes(data: bytes) -> Node:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SerializationError(f"invalid UTF-8 payload: {e}") from e
    return loads(text)


def fingerprint(node: Node) -> str:
    """Stable SHA-1 digest of the canonical encoding, usable as a cache key."""
    return hashlib.sha1(to_bytes(node)).hexdigest()


__all__ = ["to_data", "from_data", "dumps", "loads", "to_bytes", "from_bytes", "fingerprint"]
