from __future__ import annotations

from typing import List


class CodeWriter:
    """
    Line buffer for indentation-structured target code.

    Opened suites that receive no statement get a 'pass' when closed, so the
    output stays syntactically valid for empty bodies.
    """

    def __init__(self, indent: str = "    "):
        self.indent = indent
        self.lines: List[str] = []
        self.depth = 0
        # one flag per open suite: True while the suite is still empty
        self._empty: List[bool] = []

    def line(self, text: str) -> None:
        self.lines.append(self.indent * self.depth + text)
        if self._empty:
            self._empty[-1] = False

    def open(self) -> None:
        self.depth += 1
        self._empty.append(True)

    def close(self) -> None:
        if not self.depth:
            raise RuntimeError("no open suite to close")
        if self._empty[-1]:
            self.line("pass")
        self._empty.pop()
        self.depth -= 1

    def getvalue(self) -> str:
        return "\n".join(self.lines) + "\n"


__all__ = ["CodeWriter"]
