"""
Tests for the renderer.

Token sequences are built by hand so that the renderer is exercised
independently of the lexer.
"""
from unittest.mock import Mock

import pytest

from stache import Stache
from stache.errors import (
    InvalidEscaperError,
    InvalidPartialsError,
    InvalidTokensError,
    RenderDepthError,
    UnregisteredPragmaError,
)
from stache.template.renderer import Renderer
from stache.template.tokens import (
    CommentToken,
    ContentToken,
    DelimiterSetToken,
    InvertedSectionToken,
    PartialToken,
    PlaceholderToken,
    PragmaToken,
    SectionToken,
    VariableRawToken,
    VariableToken,
)

IMPLICIT = PragmaToken("IMPLICIT-ITERATOR")


class Item:
    def __init__(self, label):
        self.label = label


class Wrapper:
    def __init__(self, text):
        self.text = text

    def bold(self, template, render):
        return "<b>" + render(template) + "</b>"


@pytest.fixture
def renderer(manager):
    return manager.renderer


class TestVariables:

    def test_content_and_escaped_variable(self, renderer):
        tokens = (ContentToken("a"), VariableToken("x"))
        assert renderer.render(tokens, {"x": "<b>"}) == "a&lt;b&gt;"

    def test_raw_variable(self, renderer):
        assert renderer.render((VariableRawToken("x"),), {"x": "<b>"}) == "<b>"

    def test_quotes_escaped(self, renderer):
        assert renderer.render((VariableToken("x"),), {"x": "\"a\" & 'b'"}) == "&quot;a&quot; &amp; 'b'"

    def test_missing_variable_is_empty(self, renderer):
        tokens = (ContentToken("["), VariableToken("missing"), ContentToken("]"))
        assert renderer.render(tokens, {}) == "[]"

    def test_numbers_are_stringified(self, renderer):
        assert renderer.render((VariableToken("n"),), {"n": 0}) == "0"
        assert renderer.render((VariableToken("n"),), {"n": 1.5}) == "1.5"

    def test_dotted_variable(self, renderer):
        assert renderer.render((VariableToken("a.b"),), {"a": {"b": 5}}) == "5"
        assert renderer.render((VariableToken("a.b"),), {"a": 5}) == ""

    def test_false_renders_empty(self, renderer):
        tokens = (VariableToken("a"), VariableRawToken("a"), VariableToken("b"))
        assert renderer.render(tokens, {"a": False, "b": True}) == "True"

    def test_non_scalar_value_is_coerced(self, renderer):
        assert renderer.render((VariableToken("items"),), {"items": [1, 2]}) == "[1, 2]"

    def test_render_without_manager(self):
        renderer = Renderer()
        assert renderer.render((ContentToken("hi "), VariableToken("x")), {"x": "&"}) == "hi &amp;"

    def test_comments_and_delimiters_render_nothing(self, renderer):
        tokens = (CommentToken("note"), DelimiterSetToken("<%", "%>"), ContentToken("x"))
        assert renderer.render(tokens, {}) == "x"

    def test_rejects_text_instead_of_tokens(self, renderer):
        with pytest.raises(InvalidTokensError):
            renderer.render("{{x}}", {})


class TestEscaper:

    def test_custom_escaper(self, renderer):
        renderer.set_escaper(lambda value: str(value).upper())
        assert renderer.render((VariableToken("x"),), {"x": "abc"}) == "ABC"

    def test_non_callable_escaper_rejected(self, renderer):
        with pytest.raises(InvalidEscaperError):
            renderer.set_escaper("htmlspecialchars")

    def test_constructor_escaper(self):
        renderer = Renderer(escaper=str)
        assert renderer.render((VariableToken("x"),), {"x": "<"}) == "<"


class TestSections:

    def test_list_iteration_with_implicit_iterator(self, renderer):
        tokens = (IMPLICIT, SectionToken("items", (VariableToken("."),)))
        assert renderer.render(tokens, {"items": [1, 2, 3]}) == "123"
        assert renderer.render(tokens, {"items": []}) == ""

    def test_true_renders_against_enclosing_context(self, renderer):
        tokens = (SectionToken("flag", (VariableToken("name"),)),)
        assert renderer.render(tokens, {"flag": True, "name": "Ada"}) == "Ada"

    def test_boolean_section_does_not_open_scope(self, renderer):
        tokens = (IMPLICIT, SectionToken("items", (VariableToken("."),)))
        assert renderer.render(tokens, {"items": True}) == ""

    @pytest.mark.parametrize("value", [False, None, 0, "", [], {}])
    def test_falsy_values_render_nothing(self, renderer, value):
        tokens = (SectionToken("s", (ContentToken("shown"),)),)
        assert renderer.render(tokens, {"s": value}) == ""

    def test_list_of_maps(self, renderer):
        tokens = (SectionToken("people", (VariableToken("name"), ContentToken(";"))),)
        view = {"people": [{"name": "a"}, {"name": "b"}]}
        assert renderer.render(tokens, view) == "a;b;"

    def test_mapping_becomes_context(self, renderer):
        tokens = (SectionToken("person", (VariableToken("name"),)),)
        assert renderer.render(tokens, {"person": {"name": "Ada"}}) == "Ada"

    def test_index_mapping_is_iterated(self, renderer):
        tokens = (IMPLICIT, SectionToken("items", (VariableToken("."),)))
        assert renderer.render(tokens, {"items": {1: "b", 0: "a"}}) == "ab"

    def test_object_becomes_context(self, renderer):
        tokens = (SectionToken("item", (VariableToken("label"),)),)
        assert renderer.render(tokens, {"item": Item("x")}) == "x"

    def test_iterable_object_is_a_context(self, renderer):
        class Crew:
            name = "Ada"

            def __iter__(self):
                return iter(["x", "y"])

        tokens = (VariableToken("name"), SectionToken("crew", (VariableToken("name"),)))
        assert renderer.render(tokens, {"name": "outer", "crew": Crew()}) == "outerAda"

    def test_truthy_scalar_keeps_enclosing_context(self, renderer):
        tokens = (SectionToken("s", (VariableToken("name"),)),)
        assert renderer.render(tokens, {"s": "yes", "name": "Ada"}) == "Ada"

    def test_generator_is_iterated(self, renderer):
        tokens = (SectionToken("items", (VariableToken("label"),)),)
        view = {"items": (Item(c) for c in "xy")}
        assert renderer.render(tokens, view) == "xy"

    def test_scalar_context_skips_nested_scopes(self, renderer):
        tokens = (
            SectionToken("items", (
                ContentToken("["),
                SectionToken("s", (ContentToken("section"),)),
                InvertedSectionToken("s", (ContentToken("inverted"),)),
                PlaceholderToken("p", (ContentToken("placeholder"),)),
                PartialToken(name="p"),
                ContentToken("]"),
            )),
        )
        assert renderer.render(tokens, {"items": ["a", "b"]}) == "[][]"


class TestInvertedSections:

    def test_renders_for_falsy(self, renderer):
        tokens = (InvertedSectionToken("items", (ContentToken("none"),)),)
        assert renderer.render(tokens, {"items": []}) == "none"
        assert renderer.render(tokens, {}) == "none"

    def test_skips_for_truthy(self, renderer):
        tokens = (InvertedSectionToken("items", (ContentToken("none"),)),)
        assert renderer.render(tokens, {"items": [1]}) == ""

    def test_uses_enclosing_context(self, renderer):
        tokens = (InvertedSectionToken("missing", (VariableToken("name"),)),)
        assert renderer.render(tokens, {"name": "Ada"}) == "Ada"


class TestHigherOrderSections:

    def test_lambda_receives_raw_template_and_render_helper(self, renderer):
        calls = []

        def wrap(text, render):
            calls.append(text)
            return "<b>" + render(text) + "</b>"

        tokens = (SectionToken("wrap", (VariableToken("name"),), "{{name}}"),)
        assert renderer.render(tokens, {"wrap": wrap, "name": "Ada"}) == "<b>Ada</b>"
        assert calls == ["{{name}}"]

    def test_content_tokens_not_rendered_separately(self, renderer):
        tokens = (SectionToken("lam", (ContentToken("ignored"),), "ignored"),)
        assert renderer.render(tokens, {"lam": lambda text, render: "replaced"}) == "replaced"

    def test_render_helper_compiles_plain_text(self, renderer):
        tokens = (SectionToken("lam", (), "plain text"),)
        view = {"lam": lambda text, render: render(text)}
        assert renderer.render(tokens, view) == "plain text"

    def test_bound_method_from_object(self, renderer):
        tokens = (SectionToken("bold", (), "{{text}}"),)
        w = Wrapper("hi")
        assert renderer.render(tokens, {"bold": w.bold, "text": "x"}) == "<b>x</b>"

    def test_method_pair_is_invoked_on_lookup(self, renderer):
        # A (target, name) pair is called on lookup; its result is the section value
        class Provider:
            def wrapper(self):
                return lambda text, render: f"[{text}]"

        tokens = (SectionToken("w", (), "body"),)
        assert renderer.render(tokens, {"w": (Provider(), "wrapper")}) == "[body]"

    def test_unsafe_callable_is_not_invoked(self, renderer):
        tokens = (SectionToken("cls", (VariableToken("name"),), "{{name}}"),)
        assert renderer.render(tokens, {"cls": Item, "name": "Ada"}) == "Ada"

    def test_render_helper_without_manager_returns_text(self):
        renderer = Renderer()
        tokens = (SectionToken("lam", (), "{{x}}"),)
        assert renderer.render(tokens, {"lam": lambda text, render: render(text)}) == "{{x}}"

    def test_none_result_renders_nothing(self, renderer):
        tokens = (SectionToken("lam", (), "x"),)
        assert renderer.render(tokens, {"lam": lambda text, render: None}) == ""

    def test_method_with_arguments_on_context_object(self, renderer):
        tokens = (SectionToken("bold", (VariableToken("text"),), "{{text}}"),)
        assert renderer.render(tokens, Wrapper("hi")) == "<b>hi</b>"

    def test_zero_argument_method_is_called(self, renderer):
        class Row:
            def visible(self):
                return ["a"]

        tokens = (IMPLICIT, SectionToken("visible", (VariableToken("."),)))
        assert renderer.render(tokens, Row()) == "a"


class TestPlaceholders:

    def test_renders_against_current_context(self, renderer):
        tokens = (PlaceholderToken("title", (VariableToken("name"),)),)
        assert renderer.render(tokens, {"name": "Ada"}) == "Ada"


class TestPartials:

    def test_embedded_tokens(self, renderer):
        tokens = (PartialToken(tokens=(VariableToken("name"),)),)
        assert renderer.render(tokens, {"name": "Ada"}) == "Ada"

    def test_alias_overrides_manager(self):
        manager = Mock(spec=Stache)
        manager.pragmas = Stache().pragmas
        renderer = Renderer(manager)

        partials = {"foo": (ContentToken("aliased "), VariableToken("x"))}
        tokens = (PartialToken(name="foo"),)

        assert renderer.render(tokens, {"x": 1}, partials) == "aliased 1"
        manager.tokenize.assert_not_called()

    def test_aliases_reach_nested_sections(self, renderer):
        partials = {"row": (VariableToken("name"),)}
        tokens = (SectionToken("people", (PartialToken(name="row"),)),)
        view = {"people": [{"name": "a"}, {"name": "b"}]}
        assert renderer.render(tokens, view, partials) == "ab"

    def test_manager_resolves_by_name(self, manager, templates):
        templates.set_template("greeting", "Hello {{name}}")
        tokens = (PartialToken(name="greeting"),)
        assert manager.renderer.render(tokens, {"name": "Ada"}) == "Hello Ada"

    def test_missing_manager_is_fatal(self):
        with pytest.raises(InvalidPartialsError):
            Renderer().render((PartialToken(name="p"),), {})

    def test_max_depth_guards_recursion(self, manager, templates):
        templates.set_template("loop", "x{{>loop}}")
        manager.renderer.max_depth = 5
        with pytest.raises(RenderDepthError):
            manager.render("loop", {})


class TestPragmas:

    def test_unregistered_pragma_is_fatal(self, renderer):
        with pytest.raises(UnregisteredPragmaError):
            renderer.render((PragmaToken("NOPE"),), {})

    def test_pragma_without_manager_is_fatal(self):
        with pytest.raises(UnregisteredPragmaError):
            Renderer().render((IMPLICIT,), {})

    def test_custom_iterator_name(self, renderer):
        tokens = (
            PragmaToken("IMPLICIT-ITERATOR", {"iterator": "item"}),
            SectionToken("items", (VariableToken("item"),)),
        )
        assert renderer.render(tokens, {"items": ["a", "b"]}) == "ab"


class TestIdempotence:

    def test_same_input_same_output(self, renderer):
        tokens = (
            SectionToken("wrap", (IMPLICIT,)),
            SectionToken("items", (VariableToken("."),)),
            PartialToken(name="p"),
        )
        partials = {"p": (VariableToken("name"),)}
        view = {"wrap": True, "items": ["a", "b"], "name": "<n>"}

        first = renderer.render(tokens, view, partials)
        second = renderer.render(tokens, {"wrap": True, "items": ["a", "b"], "name": "<n>"}, dict(partials))

        assert first == second == "&lt;n&gt;"

    def test_pragmas_do_not_survive_between_calls(self, renderer):
        renderer.render((IMPLICIT,), {})
        tokens = (SectionToken("items", (VariableToken("."),)),)
        assert renderer.render(tokens, {"items": [1, 2]}) == ""
