import enum
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

import pytest
from pydantic import BaseModel

from trellis.conf import OptionsError, build_typed, option_names


class Quote(enum.Enum):
    SINGLE = "'"
    DOUBLE = '"'


@dataclass(frozen=True)
class Inner:
    width: int = 80


@dataclass(frozen=True)
class Sample:
    name: str
    strict: bool = False
    ratio: float = 1.0
    quote: Quote = Quote.SINGLE
    mode: Literal["fast", "safe"] = "safe"
    tags: Tuple[str, ...] = ()
    aliases: Dict[str, str] = field(default_factory=dict)
    inner: Inner = field(default_factory=Inner)
    limit: Optional[int] = None
    order: List[int] = field(default_factory=list)


class ModelOptions(BaseModel):
    indent: int = 2
    label: str = "x"


def test_build_nested_dataclass():
    cfg = build_typed(Sample, {
        "name": "n",
        "strict": True,
        "ratio": 2,
        "quote": "DOUBLE",
        "mode": "fast",
        "tags": ["a", "b"],
        "aliases": {"k": "v"},
        "inner": {"width": 100},
        "limit": 3,
        "order": (3, 1),
    })

    assert cfg.strict is True
    assert cfg.ratio == 2.0 and isinstance(cfg.ratio, float)
    assert cfg.quote is Quote.DOUBLE
    assert cfg.tags == ("a", "b")
    assert cfg.aliases == {"k": "v"}
    assert cfg.inner == Inner(width=100)
    assert cfg.limit == 3
    assert cfg.order == [3, 1]


def test_defaults_fill_missing_optional_fields():
    cfg = build_typed(Sample, {"name": "n"})

    assert cfg == Sample(name="n")


def test_enum_by_value():
    assert build_typed(Sample, {"name": "n", "quote": '"'}).quote is Quote.DOUBLE


def test_unknown_keys_rejected():
    with pytest.raises(OptionsError, match="unknown keys"):
        build_typed(Sample, {"name": "n", "colour": "red"})


def test_nested_unknown_keys_carry_path():
    with pytest.raises(OptionsError) as ei:
        build_typed(Sample, {"name": "n", "inner": {"height": 1}})
    assert ei.value.path == ("inner",)


def test_required_option_missing():
    with pytest.raises(OptionsError, match="name: required option missing"):
        build_typed(Sample, {})


@pytest.mark.parametrize(
    "raw",
    [
        {"name": 1},
        {"name": "n", "strict": "yes"},
        {"name": "n", "strict": 1},
        {"name": "n", "limit": True},
        {"name": "n", "limit": 1.5},
        {"name": "n", "mode": "slow"},
        {"name": "n", "quote": "BACKTICK"},
        {"name": "n", "tags": "ab"},
    ],
)
def test_wrong_types_rejected(raw):
    with pytest.raises(OptionsError):
        build_typed(Sample, raw)


def test_post_init_errors_become_options_errors():
    from trellis.generators import PythonOptions

    with pytest.raises(OptionsError, match="buffer must be a Python identifier"):
        build_typed(PythonOptions, {"buffer": "not valid"})


def test_pydantic_model():
    cfg = build_typed(ModelOptions, {"indent": 4})

    assert cfg == ModelOptions(indent=4, label="x")
    assert option_names(ModelOptions) == {"indent", "label"}


def test_pydantic_unknown_keys_rejected():
    with pytest.raises(OptionsError, match="unknown keys"):
        build_typed(ModelOptions, {"indnet": 4})


def test_pydantic_validation_error_converted():
    with pytest.raises(OptionsError):
        build_typed(ModelOptions, {"indent": "wide"})


def test_option_names():
    assert option_names(Inner) == {"width"}
    assert option_names(int) == frozenset()
