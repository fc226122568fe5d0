"""
Stage contract.

Every parser, filter, generator and engine satisfies the same single-method
contract: run(value) -> value, a pure function of its argument and of the
options fixed when the stage was built.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, FrozenSet, Generic, Mapping, Optional, Protocol, Type, TypeVar, get_args, runtime_checkable

from .conf.typed import OptionsError, build_typed, option_names
from .errors import ConfigurationError
from .ir.nodes import Node

C = TypeVar("C")  # options type of a concrete stage
S = TypeVar("S", bound="Stage[Any]")


@runtime_checkable
class Compiler(Protocol):
    """
    Anything that transforms one value into another.

    run() must not mutate its argument and must return equal outputs for
    equal inputs. Instances need not be safe for concurrent calls.
    """

    def run(self, value: Any) -> Any:
        ...


@dataclass(frozen=True)
class NoOptions:
    """Option set of stages that take no options."""
    pass


def snake_name(class_name: str) -> str:
    """'StaticMerger' -> 'static_merger'."""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", class_name).lower()


class Stage(Generic[C], ABC):
    """
    Base class for configurable stages.

    The options type is taken from the generic parameter of the subclass
    declaration (class MyFilter(Filter[MyOptions])); stages declared without
    one take NoOptions. Options are bound once and never change afterwards,
    so an instance can be shared between engines and reused for any number
    of sequential runs.
    """

    #: Stage identity used in errors and engine declarations
    name: ClassVar[str] = "stage"

    #: Options whose value must be the same in every stage of an engine that
    #: declares them (e.g. a filter that predicts what a generator emits)
    shared_options: ClassVar[FrozenSet[str]] = frozenset()

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if "name" not in cls.__dict__:
            cls.name = snake_name(cls.__name__)

    def __init__(self, options: Optional[C] = None):
        if options is None:
            options = self._load_options({})
        elif not isinstance(options, self.options_type()):
            raise ConfigurationError(
                f"expected options of type {self.options_type().__name__}, got {type(options).__name__}",
                stage=self.name,
            )
        self._options: C = options

    # --- Generic introspection of C ---
    @classmethod
    def options_type(cls) -> Type[Any]:
        """Concrete options type from the nearest parametrized base, NoOptions if none."""
        for kls in cls.__mro__:
            for base in getattr(kls, "__orig_bases__", ()) or ():
                args = get_args(base) or ()
                if args and not isinstance(args[0], TypeVar):
                    return args[0]
        return NoOptions

    @classmethod
    def option_names(cls) -> frozenset[str]:
        return option_names(cls.options_type())

    # --- Binding ---
    @classmethod
    def bind(cls: Type[S], raw: Optional[Mapping[str, Any]] = None) -> S:
        """
        Builds a configured instance from a raw option mapping.

        Raises:
            ConfigurationError: on unknown options, missing required ones
                or values of the wrong type
        """
        return cls(cls._load_options(raw or {}))

    @classmethod
    def _load_options(cls, raw: Mapping[str, Any]) -> Any:
        try:
            return build_typed(cls.options_type(), dict(raw))
        except OptionsError as e:
            raise ConfigurationError(str(e), stage=cls.name) from e

    @property
    def options(self) -> C:
        return self._options

    def shared_values(self) -> Dict[str, Any]:
        return {name: getattr(self._options, name) for name in self.shared_options}

    @abstractmethod
    def run(self, value: Any) -> Any:
        """Transforms a value; must not mutate it."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._options!r})"


class Parser(Stage[C]):
    """
    Source text -> Node.

    Parsers must be dumb: the tree they produce mirrors the source as
    closely as possible, with no optimization and no speculative
    abstraction. Building abstractions is the job of filters; a parser that
    does it breaks reuse of those filters across template languages.
    """

    @abstractmethod
    def run(self, source: str) -> Node:
        pass


__all__ = ["Compiler", "NoOptions", "Stage", "Parser", "snake_name"]
