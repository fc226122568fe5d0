"""
Tests for the single-method stage contract and option binding.
"""

import pytest

from trellis import Compiler, ConfigurationError, NoOptions, Stage, sequence, static
from trellis.filters import ControlFlowLowering, ControlFlowOptions, DynamicInliner, Eraser, StaticMerger
from trellis.generators import ListBufferGenerator, PythonOptions, StringBufferGenerator
from trellis.stage import snake_name

from tests.infrastructure import Mark, Recorder, Suffix, SuffixOptions, TinyParser


class TestNaming:

    @pytest.mark.parametrize(
        "class_name, expected",
        [
            ("StaticMerger", "static_merger"),
            ("HTMLParser", "html_parser"),
            ("Suffix", "suffix"),
            ("Pass2Lowering", "pass2_lowering"),
        ],
    )
    def test_snake_name(self, class_name, expected):
        assert snake_name(class_name) == expected

    def test_default_and_explicit_names(self):
        assert Suffix.name == "suffix"
        assert StaticMerger.name == "static_merger"
        assert ListBufferGenerator.name == "list_buffer"


class TestOptionsBinding:

    def test_options_type_from_generic_parameter(self):
        assert Suffix.options_type() is SuffixOptions
        assert StaticMerger.options_type() is NoOptions
        assert ListBufferGenerator.options_type() is PythonOptions
        assert TinyParser.options_type() is NoOptions

    def test_option_names(self):
        assert Suffix.option_names() == {"suffix", "upper"}
        assert StaticMerger.option_names() == frozenset()

    def test_defaults_when_built_without_options(self):
        assert Suffix().options == SuffixOptions()
        assert Suffix().run("hi") == "hi!"

    def test_bind_from_raw_mapping(self):
        stage = Suffix.bind({"suffix": "?", "upper": True})

        assert stage.options == SuffixOptions(suffix="?", upper=True)
        assert stage.run("hi") == "HI?"

    def test_bind_unknown_option(self):
        with pytest.raises(ConfigurationError, match="suffix: unknown keys") as ei:
            Suffix.bind({"sufix": "?"})
        assert ei.value.stage == "suffix"

    def test_bind_wrong_type(self):
        with pytest.raises(ConfigurationError, match="upper"):
            Suffix.bind({"upper": "yes"})

    def test_required_option(self):
        with pytest.raises(ConfigurationError, match="marker: required option missing"):
            Mark()
        assert Mark.bind({"marker": "m"}).run("x") == "x<m>"

    def test_wrong_options_object(self):
        with pytest.raises(ConfigurationError, match="expected options of type SuffixOptions"):
            Suffix(ControlFlowOptions())  # type: ignore[arg-type]

    def test_generator_option_validation(self):
        with pytest.raises(ConfigurationError, match="list_buffer"):
            ListBufferGenerator.bind({"to_text": "not a name"})

    def test_repr_shows_options(self):
        assert repr(Suffix()) == "Suffix(SuffixOptions(suffix='!', upper=False))"


class TestContract:

    @pytest.mark.parametrize(
        "stage",
        [TinyParser(), StaticMerger(), DynamicInliner(), Eraser(), ControlFlowLowering(),
         ListBufferGenerator(), StringBufferGenerator(), Suffix(), Recorder()],
        ids=lambda s: type(s).__name__,
    )
    def test_every_stage_is_a_compiler(self, stage):
        assert isinstance(stage, Compiler)

    def test_stage_is_abstract(self):
        with pytest.raises(TypeError):
            Stage()  # type: ignore[abstract]

    def test_equal_inputs_give_equal_outputs(self):
        merger = StaticMerger()
        a = sequence(static("A"), static("B"))
        b = sequence(static("A"), static("B"))

        assert merger.run(a) == merger.run(b)

    def test_input_is_not_mutated(self):
        tree = sequence(static("A"), static("B"), sequence(static("C"), static("D")))
        snapshot = repr(tree)

        StaticMerger().run(tree)
        ListBufferGenerator().run(tree)

        assert repr(tree) == snapshot

    def test_instance_reusable_across_runs(self):
        gen = ListBufferGenerator()
        tree = sequence(static("A"))

        assert gen.run(tree) == gen.run(tree)
