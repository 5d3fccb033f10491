"""Builds registries from the bundled library and provider modules.

A provider module is any importable module exposing a
``register(registry)`` function.
"""

from __future__ import annotations

import importlib
import logging
from types import ModuleType

from syntaxmatch import library
from syntaxmatch.config import Config
from syntaxmatch.errors import SyntaxAPIError
from syntaxmatch.registry import Registry

logger = logging.getLogger(__name__)


def load_module(name: str, registry: Registry) -> ModuleType:
    """Import provider module *name* and let it register into *registry*."""
    module = importlib.import_module(name)
    register = getattr(module, "register", None)
    if not callable(register):
        raise SyntaxAPIError(f"provider module '{name}' has no register(registry) function")
    register(registry)
    logger.debug("loaded provider module %s", name)
    return module


def build_registry(config: Config | None = None) -> Registry:
    """Create, populate and freeze a registry as *config* describes."""
    config = config or Config()
    registry = Registry()
    if config.providers.library:
        library.register(registry)
    for name in config.providers.modules:
        load_module(name, registry)
    registry.freeze()
    logger.debug(
        "registry ready: %d types, %d kinds",
        len(registry.types()), len(registry.kinds()),
    )
    return registry
