"""
Exception hierarchy for Trellis.

All expected errors that should be shown to the user as clean messages
(without stack traces) inherit from TrellisUserError.

Programming errors and bugs must NOT inherit from TrellisUserError:
they propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple


class TrellisUserError(Exception):
    """
    Base class for all user-facing errors.

    These errors indicate problems the user can fix: malformed trees,
    invalid stage options, broken pipeline declarations.
    """
    pass


class CompilationError(TrellisUserError):
    """
    A stage rejected its input.

    Carries the offending node (or fragment) and the name of the stage that
    rejected it. Engines record where the failing stage sits via annotate();
    the error object itself is re-raised unchanged.
    """

    def __init__(self, message: str, node: Any = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.node = node
        self.stage = stage
        # (index, stage name) pairs, outermost engine first
        self.pipeline: List[Tuple[int, str]] = []

    def annotate(self, index: int, name: str) -> None:
        """Records the position of the failing stage inside an enclosing engine."""
        self.pipeline.insert(0, (index, name))
        if self.stage is None:
            self.stage = name

    @property
    def location(self) -> str:
        """Pipeline path such as 'outer#2 > lowering#0', empty outside an engine."""
        return " > ".join(f"{name}#{index}" for index, name in self.pipeline)

    def __str__(self) -> str:
        parts = []
        if self.location:
            parts.append(f"[{self.location}]")
        if self.stage:
            parts.append(f"{self.stage}:")
        parts.append(self.message)
        if self.node is not None:
            parts.append(f"(at {self.node!r})")
        return " ".join(parts)


class ShapeError(CompilationError):
    """A stage received a tag or node shape it does not handle."""
    pass


class GenerationError(CompilationError):
    """A core vocabulary node could not be mapped to valid output text."""
    pass


class ConfigurationError(TrellisUserError):
    """Invalid stage options or pipeline declaration, raised before any run."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(f"{stage}: {message}" if stage else message)
        self.stage = stage


class SerializationError(TrellisUserError, ValueError):
    """Encoded tree data could not be decoded back into nodes."""
    pass


__all__ = [
    "TrellisUserError",
    "CompilationError",
    "ShapeError",
    "GenerationError",
    "ConfigurationError",
    "SerializationError",
]
