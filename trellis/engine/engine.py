"""
Pipeline engine.

An Engine threads a value through its stages in declaration order and is
itself a Compiler, so engines nest inside other engines.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple

from .binder import BoundStage, bind_chain, shared_values
from .chain import Chain, ChainEntry
from ..errors import CompilationError, ConfigurationError
from ..stage import snake_name

logger = logging.getLogger(__name__)


class Engine:
    """
    Ordered composition of stages.

    Stages come either from the `chain` class attribute of a subclass:

        class HtmlEngine(Engine):
            chain = Chain([HtmlParser, ControlFlowLowering, StaticMerger, ListBufferGenerator])

    or from the constructor:

        Engine([(HtmlParser, {"strict": True}), StaticMerger, ListBufferGenerator])

    `options` is the global option map: each stage receives the global
    options it recognizes, overridden by its own declared options and then by
    `overrides[stage_name]`. All validation happens here; run() never fails
    because of configuration.
    """

    name: ClassVar[str] = "engine"
    chain: ClassVar[Chain] = Chain()

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if "name" not in cls.__dict__:
            cls.name = snake_name(cls.__name__)
        if "chain" in cls.__dict__ and not isinstance(cls.chain, Chain):
            cls.chain = Chain(cls.chain)

    def __init__(
        self,
        stages: Optional[Iterable[ChainEntry]] = None,
        options: Optional[Mapping[str, Any]] = None,
        *,
        overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
        name: Optional[str] = None,
    ):
        if name is not None:
            self.name = name
        chain = type(self).chain if stages is None else (stages if isinstance(stages, Chain) else Chain(stages))
        if not len(chain):
            raise ConfigurationError("engine declares no stages", stage=self.name)
        self._chain = chain
        self._options: Dict[str, Any] = dict(options or {})
        self._stages = bind_chain(chain, self._options, overrides or {}, owner=self.name)
        self._shared = shared_values(self._stages, owner=self.name)

    # --- Stage-like protocol used when an engine type is nested ---
    @classmethod
    def option_names(cls) -> frozenset[str]:
        """Union of the options recognized by the stages of the class chain."""
        names: frozenset[str] = frozenset()
        for spec in cls.chain:
            names |= spec.recognized_options()
        return names

    @classmethod
    def bind(cls, raw: Optional[Mapping[str, Any]] = None) -> Engine:
        return cls(options=raw or {})

    # --- Public API ---
    @property
    def stages(self) -> Tuple[BoundStage, ...]:
        return self._stages

    @property
    def options(self) -> Mapping[str, Any]:
        return dict(self._options)

    def shared_values(self) -> Dict[str, Any]:
        """Shared option values of the bound stages, checked for agreement."""
        return dict(self._shared)

    def run(self, value: Any) -> Any:
        """
        Passes the value through every stage in order and returns the last
        stage's output.

        The first failure aborts the run and propagates as is: a
        CompilationError gets the stage position recorded via annotate(),
        any other exception gets a note naming the stage.
        """
        for bound in self._stages:
            logger.debug("%s: running stage #%d '%s'", self.name, bound.index, bound.name)
            try:
                value = bound.stage.run(value)
            except CompilationError as e:
                e.annotate(bound.index, bound.name)
                raise
            except Exception as e:
                e.add_note(f"raised by stage '{bound.name}' (#{bound.index}) of engine '{self.name}'")
                raise
        return value

    def describe(self) -> List[Dict[str, Any]]:
        """Bound stages with their resolved options, in run order."""
        return [
            {
                "index": b.index,
                "name": b.name,
                "type": type(b.stage).__name__,
                "options": dict(b.options),
            }
            for b in self._stages
        ]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._chain.names())})"


__all__ = ["Engine"]
