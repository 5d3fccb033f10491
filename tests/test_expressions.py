"""Tests for list splitting and the Expression variant."""

from __future__ import annotations

import pytest

from syntaxmatch.expressions import EvalContext, Expression, ExprKind, split_list
from syntaxmatch.library import STONE, Block, ExprEventBlock, ExprEventPlayer
from syntaxmatch.types import INTEGER, NUMBER, OBJECT, STRING, ParseContext


class TestSplitList:
    @pytest.mark.parametrize("text, parts, and_list", [
        ("a", ["a"], True),
        ("a, b and c", ["a", "b", "c"], True),
        ("a or b", ["a", "b"], False),
        ("a, b, or c", ["a", "b", "c"], False),
        ("a nor b", ["a", "b"], False),
        ("a,b", ["a", "b"], True),
    ])
    def test_split(self, text, parts, and_list):
        assert split_list(text) == (parts, and_list)

    def test_separators_inside_quotes_are_ignored(self):
        assert split_list('"x, y" and "z"') == (['"x, y"', '"z"'], True)

    def test_words_containing_and_are_not_split(self):
        assert split_list("sand or candy") == (["sand", "candy"], False)

    def test_leading_separator_is_kept(self):
        assert split_list(", a") == ([", a"], True)


class TestConvert:
    def test_unparsed_single(self, registry):
        expr = Expression.unparsed("5").convert(NUMBER, registry)
        assert expr.kind is ExprKind.LITERAL
        assert expr.values == (5,)

    def test_unparsed_list(self, registry):
        expr = Expression.unparsed("1 or 2").convert(NUMBER, registry)
        assert expr.values == (1, 2)
        assert not expr.and_list
        assert not expr.is_single()

    def test_unparsed_list_with_bad_item(self, registry):
        assert Expression.unparsed("1, x and 2").convert(NUMBER, registry) is None

    def test_unparsed_to_universal_stays_unparsed(self, registry):
        expr = Expression.unparsed("anything")
        assert expr.convert(OBJECT, registry) is expr

    def test_unparsed_uses_context(self, registry):
        expr = Expression.unparsed("hi there")
        assert expr.convert(STRING, registry) is None
        assert expr.convert(STRING, registry, ParseContext.COMMAND).values == ("hi there",)

    def test_literal_to_supertype(self, registry):
        expr = Expression.literal([3], INTEGER).convert(NUMBER, registry)
        assert expr.return_type == NUMBER
        assert expr.values == (3,)

    def test_literal_to_unrelated_type(self, registry):
        assert Expression.literal([3], NUMBER).convert(STRING, registry) is None

    def test_variable_adopts_target(self, registry):
        expr = Expression.variable("x").convert(NUMBER, registry)
        assert expr.kind is ExprKind.VARIABLE
        assert expr.return_type == NUMBER

    def test_computed_with_converter(self, registry, world):
        block = Expression.computed(ExprEventBlock(), registry.get_class("block"))
        item = block.convert(registry.get_class("itemtype"), registry)
        assert item.converter is not None
        assert item.get_array(world) == [STONE]


class TestCapabilities:
    def test_variable_list_is_plural(self):
        assert Expression.variable("x").is_single()
        assert not Expression.variable("xs::*").is_single()

    def test_unparsed_single_depends_on_text(self):
        assert Expression.unparsed("a").is_single()
        assert not Expression.unparsed("a and b").is_single()

    def test_computed_delegates(self, registry):
        expr = Expression.computed(ExprEventPlayer(), registry.get_class("player"))
        assert expr.is_single()

    def test_set_time(self, registry):
        player = Expression.computed(ExprEventPlayer(), registry.get_class("player"))
        assert player.set_time(1)
        assert player.element.time == 1
        assert Expression.literal([1], NUMBER).set_time(0)
        assert not Expression.literal([1], NUMBER).set_time(-1)
        assert not Expression.variable("x").set_time(1)


class TestEvaluation:
    def test_literal(self):
        assert Expression.literal([1, 2], NUMBER).get_array(EvalContext()) == [1, 2]

    def test_unparsed(self):
        assert Expression.unparsed("raw").get_array(EvalContext()) == ["raw"]

    def test_variable_filters_by_type(self):
        context = EvalContext(variables={"xs::*": [1, "a", 2.5]})
        expr = Expression.variable("xs::*", NUMBER)
        assert expr.get_array(context) == [1, 2.5]

    def test_universal_variable_keeps_everything(self):
        context = EvalContext(variables={"x": "a"})
        assert Expression.variable("x").get_array(context) == ["a"]

    def test_missing_variable(self):
        assert Expression.variable("nope").get_array(EvalContext()) == []
        assert Expression.variable("nope").get_single(EvalContext()) is None

    def test_computed(self, registry, world):
        expr = Expression.computed(ExprEventBlock(), registry.get_class("block"))
        assert expr.get_single(world) == Block(STONE, temperature=0.5)

    def test_event_value_falls_back_to_present(self, steve):
        context = EvalContext(values={("player", 0): steve})
        assert context.value("player", -1) is steve
        assert context.value("block") is None


class TestStr:
    def test_variable(self):
        assert str(Expression.variable("score")) == "{score}"

    def test_unparsed(self):
        assert str(Expression.unparsed("a thing")) == "a thing"

    def test_literal_list(self):
        assert str(Expression.literal([1, 2, 3], NUMBER)) == "1, 2 and 3"
        assert str(Expression.literal([1, 2], NUMBER, and_list=False)) == "1 or 2"

    def test_string_and_boolean_literals(self):
        assert str(Expression.literal(['say "hi"'], STRING)) == '"say ""hi"""'
        assert str(Expression.literal([True], OBJECT)) == "true"

    def test_computed(self, registry):
        expr = Expression.computed(ExprEventPlayer(), registry.get_class("player"))
        assert str(expr) == "the event-player"
