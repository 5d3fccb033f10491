"""Reference syntax library over a small world model.

The world is deliberately tiny: players, blocks and item types. It exists
so that scripts, the CLI and the language server have something real to
parse against. Call ``register`` on a fresh registry to install it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from syntaxmatch.expressions import EvalContext
from syntaxmatch.log import ParseLog
from syntaxmatch.noun import get_plural
from syntaxmatch.registry import Registry
from syntaxmatch.syntax import (
    Effect,
    Event,
    EventValueExpression,
    PropertyCondition,
    PropertyExpression,
    SyntaxElement,
)
from syntaxmatch.types import ClassInfo, ParseContext

ENTITY_DATA = "entitydata"


# ── World model ─────────────────────────────────────────────────


@dataclass(frozen=True)
class ItemType:
    name: str
    solid: bool = False

    def __str__(self) -> str:
        return self.name


@dataclass
class Block:
    type: ItemType
    temperature: float = 0.8


@dataclass
class Player:
    name: str
    blocking: bool = False
    dead: bool = False
    messages: list[str] = field(default_factory=list)

    def respawn(self) -> None:
        self.dead = False


@dataclass
class ThrownPotion:
    item: ItemType


STONE = ItemType("stone", solid=True)
GRASS_BLOCK = ItemType("grass block", solid=True)
WATER = ItemType("water")
TORCH = ItemType("torch")
POTION = ItemType("potion")
SPLASH_POTION = ItemType("splash potion")
LINGERING_POTION = ItemType("lingering potion")

ALIASES: dict[str, ItemType] = {
    t.name: t for t in (STONE, GRASS_BLOCK, WATER, TORCH, POTION, SPLASH_POTION, LINGERING_POTION)
}


def parse_item_type(text: str, context: ParseContext) -> ItemType | None:
    name = text.strip().lower()
    for article in ("a ", "an "):
        if name.startswith(article):
            name = name[len(article):]
            break
    if name in ALIASES:
        return ALIASES[name]
    singular, is_plural = get_plural(name)
    return ALIASES.get(singular) if is_plural else None


def parse_player(text: str, context: ParseContext) -> Player | None:
    """Players can only be named literally in command arguments."""
    if context is ParseContext.COMMAND and text and " " not in text:
        return Player(text)
    return None


# ── Event values (also the default expressions) ─────────────────


class ExprEventPlayer(EventValueExpression):
    return_type = "player"
    time_states = True


class ExprEventBlock(EventValueExpression):
    return_type = "block"


# ── Conditions ──────────────────────────────────────────────────


class CondIsBlocking(PropertyCondition):
    """Checks whether a player is blocking with their shield."""

    property_name = "blocking"

    def check_value(self, value: Player) -> bool:
        return value.blocking


class CondIsSolid(PropertyCondition):
    property_name = "solid"

    def check_value(self, value: ItemType) -> bool:
        return value.solid


# ── Effects ─────────────────────────────────────────────────────


class EffRespawn(Effect):
    """Forces players to respawn if they are dead."""

    def init(self, exprs, matched_pattern, result) -> bool:
        self.players = exprs[0]
        return True

    def execute(self, context: EvalContext) -> None:
        for player in self.players.get_array(context):
            player.respawn()

    def __str__(self) -> str:
        return f"respawn {self.players}"


class EffMessage(Effect):
    def init(self, exprs, matched_pattern, result) -> bool:
        self.messages, self.recipients = exprs
        return True

    def execute(self, context: EvalContext) -> None:
        messages = [str(m) for m in self.messages.get_array(context)]
        for player in self.recipients.get_array(context):
            player.messages.extend(messages)

    def __str__(self) -> str:
        return f"send {self.messages} to {self.recipients}"


# ── Expressions ─────────────────────────────────────────────────


class ExprTemperature(PropertyExpression):
    """Temperature at the given blocks."""

    return_type = "number"
    property_name = "temperature"

    def convert(self, value: Block) -> float:
        return value.temperature


class ExprName(PropertyExpression):
    return_type = "string"
    property_name = "name"

    def convert(self, value: Player) -> str:
        return value.name


# ── Entity data ─────────────────────────────────────────────────


class EntityData(SyntaxElement):
    """Describes a kind of entity, e.g. ``thrown potion of water``."""

    def matches(self, entity: object) -> bool:
        raise NotImplementedError


class ThrownPotionData(EntityData):
    def init(self, exprs, matched_pattern, result) -> bool:
        if exprs and exprs[0] is not None:
            thrown = (self._thrown_type(t) for t in exprs[0].get_array(EvalContext()))
            self.types = tuple(t for t in thrown if t is not None)
            # other things can be thrown too, so no error here
            return len(self.types) != 0
        self.types = (SPLASH_POTION,)
        return True

    @staticmethod
    def _thrown_type(item: ItemType) -> ItemType | None:
        if item == POTION:
            return SPLASH_POTION
        if item in (SPLASH_POTION, LINGERING_POTION):
            return item
        return None

    def matches(self, entity: object) -> bool:
        return isinstance(entity, ThrownPotion) and entity.item in self.types

    def __str__(self) -> str:
        return "thrown potion of " + " or ".join(t.name for t in self.types)


# ── Events ──────────────────────────────────────────────────────


class EvtSimple(Event):
    def init(self, exprs, matched_pattern, result) -> bool:
        return True


class EvtClick(Event):
    def init(self, exprs, matched_pattern, result) -> bool:
        self.button = "left" if result.choices == (1,) else "right"
        self.items = exprs[0]
        return True

    def check(self, context: EvalContext) -> bool:
        if self.items is None:
            return True
        block = context.value("block")
        return block is not None and block.type in self.items.get_array(context)


class EvtSpawn(Event):
    def init(self, exprs, matched_pattern, result) -> bool:
        self.datas = exprs[0]
        return True

    def check(self, context: EvalContext) -> bool:
        if self.datas is None:
            return True
        entity = context.value("entity")
        return any(data.matches(entity) for data in self.datas.get_array(context))


# ── Registration ────────────────────────────────────────────────


def _entity_data_parser(registry: Registry):
    def parse(text: str, context: ParseContext) -> EntityData | None:
        from syntaxmatch.parser import Parser

        log = ParseLog()
        with log.capture():
            return Parser(registry, log=log).parse_static(text, registry.syntaxes(ENTITY_DATA))

    return parse


def register(registry: Registry) -> None:
    """Install the reference types and syntax elements into *registry*."""
    registry.register_type(ClassInfo(
        "itemtype", ItemType, parser=parse_item_type, display_name="item type",
    ))
    registry.register_type(ClassInfo("block", Block, default_expression=ExprEventBlock))
    registry.register_type(ClassInfo(
        "player", Player, parser=parse_player, default_expression=ExprEventPlayer,
    ))
    registry.register_type(ClassInfo(
        ENTITY_DATA, EntityData, plural="entitydatas",
        parser=_entity_data_parser(registry), display_name="entity type",
    ))
    registry.register_converter("block", "itemtype", lambda block: block.type)

    registry.register_syntax(
        ENTITY_DATA, ThrownPotionData, "thrown potion[s] [of %-itemtypes%]",
    )

    registry.register_condition(
        CondIsBlocking, *PropertyCondition.patterns("(blocking|defending) [with [a] shield]", "players"),
    )
    registry.register_condition(CondIsSolid, *PropertyCondition.patterns("solid", "itemtypes"))

    registry.register_effect(EffRespawn, "force %players% to respawn")
    registry.register_effect(EffMessage, "(message|send [message]) %strings% [to %players%]")

    registry.register_expression(
        ExprTemperature, *PropertyExpression.patterns("temperature[s]", "blocks"),
    )
    registry.register_expression(ExprName, *PropertyExpression.patterns("name[s]", "players"))
    registry.register_expression(ExprEventPlayer, "[the] [event-]player")
    registry.register_expression(ExprEventBlock, "[the] [event-]block")

    registry.register_event("death", EvtSimple, "death")
    registry.register_event("respawn", EvtSimple, "respawn[ing]")
    registry.register_event("click", EvtClick, "[(right|left)[ ]]click[ing] [on %-itemtypes%]")
    registry.register_event("spawn", EvtSpawn, "spawn[ing] [of %-entitydatas%]")
