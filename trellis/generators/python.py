"""
Reference generators producing Python source.

Block fragments carry Python statements. Nesting is expressed by the
fragments themselves, indentation inside them is not significant:

- a line ending with ':' opens a suite;
- a line starting with else/elif/except/finally continues the enclosing
  suite (closes it and opens the next one);
- a line reading 'end' closes the innermost suite.
- comment lines are dropped.

Executing the produced program with the expression bindings as globals
leaves the rendered text in the buffer variable.
"""

from __future__ import annotations

import ast
import keyword
import re
import textwrap
from abc import abstractmethod
from dataclasses import dataclass

from .base import Generator
from .writer import CodeWriter
from ..errors import GenerationError
from ..ir.nodes import Node

_CONTINUATIONS = ("else", "elif", "except", "finally")
_DOTTED_NAME = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")
_FIRST_WORD = re.compile(r"^[A-Za-z_]\w*")


@dataclass(frozen=True)
class PythonOptions:
    buffer: str = "_buf"     # variable holding the output
    to_text: str = "str"     # callable applied to every dynamic value

    def __post_init__(self):
        if not self.buffer.isidentifier() or keyword.iskeyword(self.buffer):
            raise ValueError(f"buffer must be a Python identifier, got {self.buffer!r}")
        if not _DOTTED_NAME.match(self.to_text):
            raise ValueError(f"to_text must be a dotted name, got {self.to_text!r}")


class PythonGenerator(Generator[PythonOptions]):
    """
    Common part of the Python generators: block structure, expression
    checks and final validation. Subclasses decide how output is buffered.
    """
    shared_options = frozenset({"to_text"})

    def begin(self) -> CodeWriter:
        writer = CodeWriter()
        self.preamble(writer)
        return writer

    def on_static(self, writer: CodeWriter, text: str, node: Node) -> None:
        if text:
            self.append(writer, repr(text))

    def on_dynamic(self, writer: CodeWriter, expression: str, node: Node) -> None:
        try:
            tree = ast.parse(expression.strip(), mode="eval")
        except SyntaxError as e:
            raise GenerationError(f"invalid expression: {e.msg}", node=node, stage=self.name) from e
        source = ast.unparse(tree.body)
        if isinstance(tree.body, ast.Tuple):
            source = f"({source})"
        self.append(writer, f"{self.options.to_text}({source})")

    def on_block(self, writer: CodeWriter, code: str, node: Node) -> None:
        for raw in textwrap.dedent(code).splitlines():
            statement = raw.strip()
            if not statement or statement.startswith("#"):
                continue
            match = _FIRST_WORD.match(statement)
            word = match.group(0) if match else ""

            if statement == "end":
                self._close(writer, node)
            elif word in _CONTINUATIONS and statement.endswith(":"):
                self._close(writer, node)
                writer.line(statement)
                writer.open()
            elif statement.endswith(":"):
                writer.line(statement)
                writer.open()
            else:
                writer.line(statement)

    def finish(self, writer: CodeWriter, root: Node) -> str:
        if writer.depth:
            raise GenerationError(f"{writer.depth} block(s) left open", node=root, stage=self.name)
        self.postamble(writer)
        source = writer.getvalue()
        try:
            compile(source, f"<{self.name}>", "exec")
        except SyntaxError as e:
            raise GenerationError(f"generated code does not compile: {e.msg} (line {e.lineno})",
                                  node=root, stage=self.name) from e
        return source

    def _close(self, writer: CodeWriter, node: Node) -> None:
        if not writer.depth:
            raise GenerationError("block closes a suite that was never opened", node=node, stage=self.name)
        writer.close()

    @abstractmethod
    def preamble(self, writer: CodeWriter) -> None:
        pass

    @abstractmethod
    def append(self, writer: CodeWriter, value: str) -> None:
        """Emits a statement adding the string-valued expression to the output."""
        pass

    def postamble(self, writer: CodeWriter) -> None:
        pass


class ListBufferGenerator(PythonGenerator):
    """Collects output pieces in a list and joins them once at the end."""
    name = "list_buffer"

    def preamble(self, writer: CodeWriter) -> None:
        writer.line(f"{self.options.buffer} = []")

    def append(self, writer: CodeWriter, value: str) -> None:
        writer.line(f"{self.options.buffer}.append({value})")

    def postamble(self, writer: CodeWriter) -> None:
        buf = self.options.buffer
        writer.line(f"{buf} = ''.join({buf})")


class StringBufferGenerator(PythonGenerator):
    """Concatenates output pieces onto a string."""
    name = "string_buffer"

    def preamble(self, writer: CodeWriter) -> None:
        writer.line(f"{self.options.buffer} = ''")

    def append(self, writer: CodeWriter, value: str) -> None:
        writer.line(f"{self.options.buffer} += {value}")


__all__ = ["PythonOptions", "PythonGenerator", "ListBufferGenerator", "StringBufferGenerator"]
