"""
Per-stage option resolution for engines.

For every declared stage type the resolved options are the global options
whose names the stage recognizes, overridden by the stage's own declared
options and then by per-name overrides. Every problem is reported here, at
engine construction, before anything runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Set, Tuple

from .chain import Chain, StageSpec
from ..errors import ConfigurationError
from ..stage import Compiler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundStage:
    """A built stage together with its position and resolved options."""
    index: int
    name: str
    stage: Compiler
    options: Dict[str, Any] = field(default_factory=dict, hash=False)


def bind_chain(
    chain: Chain,
    global_options: Mapping[str, Any],
    overrides: Mapping[str, Mapping[str, Any]],
    *,
    owner: str,
) -> Tuple[BoundStage, ...]:
    """
    Builds every stage of a chain.

    Raises:
        ConfigurationError: on unknown stage names in overrides, unknown
            stage-specific options, options for a ready-made instance, global
            options no stage recognizes, or option values a stage rejects
    """
    unknown_names = set(overrides) - set(chain.names())
    if unknown_names:
        raise ConfigurationError(
            f"overrides for unknown stage(s) {sorted(unknown_names)}; stages are {list(chain.names())}",
            stage=owner,
        )

    own_options = {spec.name: _own_options(spec, overrides) for spec in chain}

    recognized_any: Set[str] = set()
    for spec in chain:
        recognized = spec.recognized_options()
        recognized_any |= recognized
        own = own_options[spec.name]
        if not spec.is_type:
            if own:
                raise ConfigurationError(
                    f"ready-made stage instance takes no options, got {sorted(own)}",
                    stage=spec.name,
                )
            continue
        unknown = set(own) - recognized
        if unknown:
            raise ConfigurationError(
                f"unknown option(s) {sorted(unknown)}; recognized: {sorted(recognized)}",
                stage=spec.name,
            )

    unused = set(global_options) - recognized_any
    if unused:
        raise ConfigurationError(f"option(s) {sorted(unused)} not recognized by any stage", stage=owner)

    bound = []
    for index, spec in enumerate(chain):
        if not spec.is_type:
            bound.append(BoundStage(index=index, name=spec.name, stage=spec.stage))
            logger.debug("%s: stage #%d '%s' uses instance %r", owner, index, spec.name, spec.stage)
            continue
        resolved = resolve_options(spec, global_options, own_options[spec.name])
        bound.append(BoundStage(index=index, name=spec.name, stage=_build(spec, resolved), options=resolved))
        logger.debug("%s: stage #%d '%s' bound with %s", owner, index, spec.name, resolved)
    return tuple(bound)


def shared_values(stages: Tuple[BoundStage, ...], *, owner: str) -> Dict[str, Any]:
    """
    Collects the shared option values of bound stages (see Stage.shared_options).

    Raises:
        ConfigurationError: if two stages disagree on a shared option
    """
    seen: Dict[str, Tuple[str, Any]] = {}
    for bound in stages:
        getter = getattr(bound.stage, "shared_values", None)
        if not callable(getter):
            continue
        for key, value in getter().items():
            if key not in seen:
                seen[key] = (bound.name, value)
                continue
            first, expected = seen[key]
            if expected != value:
                raise ConfigurationError(
                    f"stages '{first}' and '{bound.name}' disagree on option '{key}' "
                    f"({expected!r} != {value!r}); set it once as a global option",
                    stage=owner,
                )
    return {key: value for key, (_, value) in seen.items()}


def resolve_options(spec: StageSpec, global_options: Mapping[str, Any], own: Mapping[str, Any]) -> Dict[str, Any]:
    """Global options the stage recognizes, overridden by its own."""
    recognized = spec.recognized_options()
    resolved = {k: v for k, v in global_options.items() if k in recognized}
    resolved.update(own)
    return resolved


def _own_options(spec: StageSpec, overrides: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
    own = dict(spec.options)
    own.update(overrides.get(spec.name, {}))
    return own


def _build(spec: StageSpec, resolved: Dict[str, Any]) -> Compiler:
    factory = getattr(spec.stage, "bind", None)
    if callable(factory):
        return factory(resolved)
    # plain Compiler class without option support; `resolved` is empty here
    return spec.stage()


__all__ = ["BoundStage", "bind_chain", "resolve_options", "shared_values"]
