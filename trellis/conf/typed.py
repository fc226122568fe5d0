from __future__ import annotations

import dataclasses
import enum
import logging
import types
import typing as t
from collections import abc
from dataclasses import fields, is_dataclass

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class OptionsError(ValueError):
    """Raw options could not be coerced to the declared type; carries the field path."""

    def __init__(self, message: str, path: tuple[str, ...] = ()):
        self.path = path
        self.message = message
        prefix = f"{'.'.join(path)}: " if path else ""
        super().__init__(prefix + message)


_T = t.TypeVar("_T")


def build_typed(cls: type[_T], data: t.Any) -> _T:
    """
    Builds an options object of type `cls` (dataclass or pydantic model)
    from a raw mapping, coercing nested values by their type hints.

    Unknown keys and missing required fields are errors.
    """
    try:
        return t.cast(_T, _coerce_to_class(cls, data, path=()))
    except OptionsError:
        raise
    except Exception as e:
        raise OptionsError(f"failed to build {getattr(cls, '__name__', str(cls))}: {e}") from e


def option_names(cls: type) -> frozenset[str]:
    """Names of the fields an options type accepts."""
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return frozenset(cls.model_fields)
    if is_dataclass(cls):
        return frozenset(f.name for f in fields(cls))
    return frozenset()


def _coerce_to_class(cls: type, data: t.Any, path: tuple[str, ...]):
    if isinstance(data, cls) and (is_dataclass(cls) or issubclass(cls, BaseModel)):
        return data

    if isinstance(cls, type) and issubclass(cls, BaseModel):
        if not isinstance(data, t.Mapping):
            raise OptionsError(f"expected mapping for {cls.__name__}, got {type(data).__name__}", path)
        extras = set(data) - set(cls.model_fields)
        if extras:
            raise OptionsError(f"unknown keys: {sorted(extras)!r}", path)
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise OptionsError(str(e), path) from e

    if is_dataclass(cls):
        if not isinstance(data, t.Mapping):
            raise OptionsError(f"expected mapping for {cls.__name__}, got {type(data).__name__}", path)
        allowed = {f.name for f in fields(cls)}
        extras = set(data) - allowed
        if extras:
            raise OptionsError(f"unknown keys: {sorted(extras)!r}", path)

        hints = t.get_type_hints(cls)
        kwargs = {}
        for f in fields(cls):
            f_path = (*path, f.name)
            if f.name in data:
                kwargs[f.name] = coerce(data[f.name], hints.get(f.name, f.type), f_path)
            elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                raise OptionsError("required option missing", f_path)
        logger.debug("Built %s at %s from keys %s", cls.__name__, ".".join(path) or "$", sorted(data))
        return cls(**kwargs)

    if isinstance(data, cls):
        return data
    raise OptionsError(f"cannot coerce {type(data).__name__} to {getattr(cls, '__name__', str(cls))}", path)


def coerce(value: t.Any, hint: t.Any, path: tuple[str, ...]) -> t.Any:
    """Recursively normalizes a raw value according to a type hint."""
    origin = t.get_origin(hint)
    args = t.get_args(hint)

    if hint is t.Any:
        return value

    if origin is t.Annotated:
        return coerce(value, args[0], path)

    # Optional[T] / Union[...] in both spellings
    if origin is t.Union or origin is types.UnionType:
        if value is None and type(None) in args:
            return None
        errors = []
        for option in args:
            if option is type(None):
                continue
            try:
                return coerce(value, option, path)
            except OptionsError as e:
                errors.append(e.message)
        raise OptionsError(" | ".join(errors) or "no union alternative matched", path)

    if origin is t.Literal:
        if value not in args:
            raise OptionsError(f"expected one of {args!r}, got {value!r}", path)
        return value

    # bool is an int subclass; keep the two apart
    if hint is bool:
        if isinstance(value, bool):
            return value
        raise OptionsError(f"expected bool, got {type(value).__name__}", path)
    if hint in (int, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise OptionsError(f"expected {hint.__name__}, got {type(value).__name__}", path)
        if hint is int and isinstance(value, float):
            raise OptionsError("expected int, got float", path)
        return hint(value)
    if hint is str:
        if isinstance(value, str):
            return value
        raise OptionsError(f"expected str, got {type(value).__name__}", path)

    if isinstance(hint, type) and issubclass(hint, enum.Enum):
        if isinstance(value, hint):
            return value
        try:
            return hint(value)
        except ValueError:
            try:
                return hint[value]
            except (KeyError, TypeError):
                raise OptionsError(f"expected {hint.__name__} (by value or name), got {value!r}", path)

    if origin in (dict, abc.Mapping) or hint is dict:
        k_t, v_t = args or (t.Any, t.Any)
        if not isinstance(value, t.Mapping):
            raise OptionsError(f"expected mapping, got {type(value).__name__}", path)
        return {coerce(k, k_t, (*path, "<key>")): coerce(v, v_t, (*path, str(k))) for k, v in value.items()}

    if origin in (list, tuple, frozenset, set) or hint in (list, tuple):
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
            raise OptionsError(f"expected sequence, got {type(value).__name__}", path)
        if origin is tuple and args and not (len(args) == 2 and args[1] is Ellipsis):
            if len(args) != len(value):
                raise OptionsError(f"expected tuple of length {len(args)}, got {len(value)}", path)
            return tuple(coerce(v, a, (*path, str(i))) for i, (v, a) in enumerate(zip(value, args)))
        elem_t = args[0] if args else t.Any
        items = [coerce(v, elem_t, (*path, str(i))) for i, v in enumerate(value)]
        if origin is tuple or hint is tuple:
            return tuple(items)
        if origin is frozenset:
            return frozenset(items)
        if origin is set:
            return set(items)
        return items

    if isinstance(hint, type):
        return _coerce_to_class(hint, value, path)

    return value


__all__ = ["OptionsError", "build_typed", "option_names", "coerce"]
