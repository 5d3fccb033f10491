"""Shared pytest fixtures for the syntaxmatch test suite."""

from __future__ import annotations

import pytest

from syntaxmatch.expressions import EvalContext
from syntaxmatch.library import STONE, Block, Player
from syntaxmatch.parser import Parser
from tests.helpers import library_registry


@pytest.fixture
def registry():
    """A frozen registry with the reference library."""
    return library_registry()


@pytest.fixture
def parser(registry):
    return Parser(registry)


@pytest.fixture
def steve():
    return Player("Steve")


@pytest.fixture
def world(steve):
    """An event context with a player and a stone block."""
    return EvalContext(values={
        ("player", 0): steve,
        ("block", 0): Block(STONE, temperature=0.5),
    })
