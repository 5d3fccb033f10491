"""Tests for the type and syntax registry."""

from __future__ import annotations

import pytest

from syntaxmatch.errors import MalformedPatternError, SyntaxAPIError
from syntaxmatch.library import Block, ExprEventPlayer, ItemType
from syntaxmatch.registry import (
    CONDITIONS,
    EFFECTS,
    EVENTS,
    EXPRESSIONS,
    ExpressionInfo,
    Registry,
)
from syntaxmatch.syntax import ExpressionElement
from syntaxmatch.types import INTEGER, NUMBER, OBJECT, STRING, ClassInfo
from tests.helpers import Recorder


class TestTypes:
    def test_builtins(self):
        names = [info.name for info in Registry().types()]
        assert names == ["object", "number", "integer", "string", "boolean"]

    def test_without_builtins(self):
        assert Registry(builtins=False).types() == []

    def test_duplicate_type(self):
        registry = Registry()
        with pytest.raises(SyntaxAPIError, match="already registered"):
            registry.register_type(ClassInfo("number"))

    def test_unknown_type(self):
        registry = Registry()
        assert registry.find_class("widget") is None
        with pytest.raises(SyntaxAPIError, match="no type named 'widget'"):
            registry.get_class("widget")

    def test_normalize(self, registry):
        assert registry.normalize("player") == ("player", False)
        assert registry.normalize("players") == ("player", True)
        assert registry.normalize("entitydatas") == ("entitydata", True)
        assert registry.normalize("widgets") == ("widget", True)

    def test_exact_type_name(self, registry):
        assert registry.exact_type_name(registry.get_class("itemtype")) == "item type"
        assert registry.exact_type_name(STRING) == "text"

    def test_default_expression_is_fresh(self, registry):
        first = registry.get_default_expression("player")
        second = registry.get_default_expression("player")
        assert isinstance(first, ExprEventPlayer)
        assert first is not second
        assert registry.get_default_expression("number") is None
        assert registry.get_default_expression("widget") is None

    def test_is_subtype(self):
        registry = Registry()
        assert registry.is_subtype(INTEGER, NUMBER)
        assert registry.is_subtype(NUMBER, NUMBER)
        assert registry.is_subtype(STRING, OBJECT)
        assert not registry.is_subtype(NUMBER, INTEGER)

    def test_deep_subtype(self):
        registry = Registry()
        registry.register_type(ClassInfo("byte", int, supertypes=("integer",)))
        assert registry.is_subtype(registry.get_class("byte"), NUMBER)


class TestConverters:
    def test_direct(self, registry):
        convert = registry.get_converter(registry.get_class("block"), registry.get_class("itemtype"))
        stone = ItemType("stone")
        assert convert(Block(stone)) == stone

    def test_through_subtype(self):
        registry = Registry()
        registry.register_converter("number", "string", str)
        assert registry.get_converter(INTEGER, STRING) is str
        assert registry.get_converter(STRING, NUMBER) is None

    def test_unknown_types(self):
        with pytest.raises(SyntaxAPIError):
            Registry().register_converter("number", "widget", str)


class TestSyntax:
    def test_registration_order(self):
        registry = Registry()
        registry.register_effect(Recorder, "a")
        registry.register_condition(Recorder, "b")
        registry.register_effect(Recorder, "c")
        assert [info.patterns for info in registry.effects] == [("a",), ("c",)]
        assert [info.patterns for info in registry.statements()] == [("b",), ("a",), ("c",)]

    def test_metadata_and_name(self):
        info = Registry().register_effect(Recorder, "a", since="1.0")
        assert info.name == "Recorder"
        assert info.metadata == {"since": "1.0"}
        assert isinstance(info.create(), Recorder)

    def test_expression_info(self):
        class Answer(ExpressionElement):
            return_type = "number"

        info = Registry().register_expression(Answer, "the answer")
        assert isinstance(info, ExpressionInfo)
        assert info.return_type == "number"

    def test_expression_with_unknown_return_type(self):
        class Gadget(ExpressionElement):
            return_type = "gadget"

        with pytest.raises(SyntaxAPIError, match="gadget"):
            Registry().register_expression(Gadget, "a gadget")

    def test_event_name(self, registry):
        assert [info.event_name for info in registry.events] == [
            "death", "respawn", "click", "spawn",
        ]

    def test_custom_kind(self, registry):
        assert [info.name for info in registry.syntaxes("entitydata")] == ["ThrownPotionData"]
        assert registry.syntaxes("nothing") == []
        assert registry.kinds() == [CONDITIONS, EFFECTS, EXPRESSIONS, EVENTS, "entitydata"]

    def test_no_patterns(self):
        with pytest.raises(SyntaxAPIError, match="at least one pattern"):
            Registry().register_effect(Recorder)

    def test_malformed_pattern(self):
        with pytest.raises(MalformedPatternError):
            Registry().register_effect(Recorder, "go [now")

    def test_unknown_placeholder_type(self):
        with pytest.raises(SyntaxAPIError, match="widget"):
            Registry().register_effect(Recorder, "use %widgets%")

    def test_unknown_type_ending_in_ss_keeps_its_name(self):
        with pytest.raises(SyntaxAPIError, match="no type named 'class'"):
            Registry().register_effect(Recorder, "use %class%")

    def test_bad_time_state(self):
        with pytest.raises(MalformedPatternError, match="invalid time state"):
            Registry().register_effect(Recorder, "use %number@x%")


class TestFreeze:
    def test_frozen_registry_rejects_registration(self, registry):
        assert registry.frozen
        with pytest.raises(SyntaxAPIError, match="frozen"):
            registry.register_effect(Recorder, "a")
        with pytest.raises(SyntaxAPIError, match="frozen"):
            registry.register_type(ClassInfo("widget"))
        with pytest.raises(SyntaxAPIError, match="frozen"):
            registry.register_converter("number", "string", str)

    def test_queries_return_copies(self, registry):
        registry.effects.clear()
        assert registry.effects
