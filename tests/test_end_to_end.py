"""
Template text through parser, lowering filters and generators.
"""

import pytest

from trellis import Engine, Node, block, dynamic, sequence, static
from trellis.generators import StringBufferGenerator
from trellis.ir import is_core, walk

from tests.infrastructure import TinyParser, execute
from tests.infrastructure.engines import LoweringEngine, TemplateEngine

TEMPLATE = "Dear ${name},{# greeting #}{% for item in items: %} ${item}{% end %}{% if vip: %} (VIP){% end %}"


def test_parser_mirrors_source(parser):
    tree = parser.run("a${x}{% if y: %}b{% end %}{# c #}")

    assert tree == sequence(
        static("a"), dynamic("x"), block("if y:"), static("b"), block("end"), Node("comment", "c"),
    )


def test_parser_does_not_merge(parser):
    assert parser.run("a${'b'}c") == sequence(static("a"), dynamic("'b'"), static("c"))


@pytest.mark.parametrize(
    "bindings, expected",
    [
        ({"name": "Ann", "items": ["x", "y"], "vip": True}, "Dear Ann, x y (VIP)"),
        ({"name": "Bob", "items": [], "vip": False}, "Dear Bob,"),
    ],
)
def test_template_renders(bindings, expected):
    assert execute(TemplateEngine().run(TEMPLATE), bindings) == expected


def test_generators_are_interchangeable_in_an_engine():
    chain = TemplateEngine.chain.replace("list_buffer", StringBufferGenerator)
    bindings = {"name": "Ann", "items": ["x"], "vip": False}

    assert execute(Engine(chain).run(TEMPLATE), bindings) == execute(TemplateEngine().run(TEMPLATE), bindings)


def test_lowering_output_is_core_vocabulary():
    tree = LoweringEngine().run(TinyParser().run(TEMPLATE))

    assert all(is_core(n) for n in walk(tree))
    assert tree.args[0] == static("Dear ")


def test_lowering_is_idempotent():
    engine = LoweringEngine()
    once = engine.run(TinyParser().run(TEMPLATE))

    assert engine.run(once) == once
