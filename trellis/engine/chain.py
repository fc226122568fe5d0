"""
Declaration of an engine's ordered stage list.

A Chain is immutable: the editing methods return a new chain, so engine
subclasses can derive their pipeline from a parent's without touching it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Mapping, Tuple, Union

from ..errors import ConfigurationError
from ..stage import Compiler, snake_name


@dataclass(frozen=True)
class StageSpec:
    """
    One declared stage: a stage type bound at engine construction, or a
    ready-made Compiler instance used as-is.
    """
    name: str
    stage: Any
    options: Dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def of(cls, entry: Any) -> StageSpec:
        """
        Normalizes a declaration entry:
          • StageSpec                      → as is
          • StageType / Compiler instance  → default name, no options
          • (stage, options)               → default name
          • (name, stage, options)         → explicit name
        """
        if isinstance(entry, StageSpec):
            return entry
        if isinstance(entry, tuple):
            if len(entry) == 2:
                stage, options = entry
                return cls(name=_default_name(stage), stage=_check_stage(stage), options=_check_options(entry, options))
            if len(entry) == 3:
                name, stage, options = entry
                if not isinstance(name, str) or not name:
                    raise ConfigurationError(f"stage name must be a non-empty string, got {name!r}")
                return cls(name=name, stage=_check_stage(stage), options=_check_options(entry, options))
            raise ConfigurationError(f"stage declaration must have 2 or 3 items, got {entry!r}")
        return cls(name=_default_name(entry), stage=_check_stage(entry))

    @property
    def is_type(self) -> bool:
        return isinstance(self.stage, type)

    def recognized_options(self) -> frozenset[str]:
        """Option names the declared stage type accepts; none for instances."""
        if not self.is_type:
            return frozenset()
        names = getattr(self.stage, "option_names", None)
        return frozenset(names()) if callable(names) else frozenset()


def _default_name(stage: Any) -> str:
    declared = getattr(stage, "name", None)
    if isinstance(declared, str) and declared:
        return declared
    cls = stage if isinstance(stage, type) else type(stage)
    return snake_name(cls.__name__)


def _check_stage(stage: Any) -> Any:
    if isinstance(stage, type):
        if not callable(getattr(stage, "run", None)):
            raise ConfigurationError(f"{stage.__name__} has no run() method and cannot be a stage")
        return stage
    if not isinstance(stage, Compiler):
        raise ConfigurationError(f"{stage!r} is neither a stage type nor a Compiler instance")
    return stage


def _check_options(entry: Any, options: Any) -> Dict[str, Any]:
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"stage options must be a mapping in {entry!r}")
    return dict(options)


ChainEntry = Union[StageSpec, type, Compiler, Tuple[Any, ...]]


class Chain:
    """Ordered, uniquely named stage declarations."""

    def __init__(self, entries: Iterable[ChainEntry] = ()):
        specs = tuple(StageSpec.of(e) for e in entries)
        seen = set()
        for spec in specs:
            if spec.name in seen:
                raise ConfigurationError(f"duplicate stage name '{spec.name}'; pass an explicit name")
            seen.add(spec.name)
        self._specs: Tuple[StageSpec, ...] = specs

    def names(self) -> Tuple[str, ...]:
        return tuple(s.name for s in self._specs)

    def index(self, name: str) -> int:
        for i, spec in enumerate(self._specs):
            if spec.name == name:
                return i
        raise ConfigurationError(f"no stage named '{name}' in chain {list(self.names())}")

    def append(self, *entries: ChainEntry) -> Chain:
        return Chain((*self._specs, *entries))

    def before(self, name: str, *entries: ChainEntry) -> Chain:
        i = self.index(name)
        return Chain((*self._specs[:i], *entries, *self._specs[i:]))

    def after(self, name: str, *entries: ChainEntry) -> Chain:
        i = self.index(name) + 1
        return Chain((*self._specs[:i], *entries, *self._specs[i:]))

    def replace(self, name: str, entry: ChainEntry) -> Chain:
        i = self.index(name)
        return Chain((*self._specs[:i], entry, *self._specs[i + 1:]))

    def remove(self, name: str) -> Chain:
        i = self.index(name)
        return Chain((*self._specs[:i], *self._specs[i + 1:]))

    def __iter__(self) -> Iterator[StageSpec]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __getitem__(self, name: str) -> StageSpec:
        return self._specs[self.index(name)]

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Chain) and self._specs == other._specs

    def __repr__(self) -> str:
        return f"Chain({list(self.names())})"


__all__ = ["StageSpec", "Chain", "ChainEntry"]
