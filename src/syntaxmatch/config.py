"""TOML config loading for syntaxmatch.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "syntaxmatch.toml"


@dataclass
class ParserOptions:
    min_error_chars: int = 5
    default_error: str = "can't understand this line"


@dataclass
class ProvidersConfig:
    library: bool = True
    modules: list[str] = field(default_factory=list)


@dataclass
class Config:
    parser: ParserOptions = field(default_factory=ParserOptions)
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find syntaxmatch.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> Config:
    """Parse a syntaxmatch.toml file into a Config."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = Config()

    if "parser" in data:
        prs = data["parser"]
        config.parser = ParserOptions(
            min_error_chars=prs.get("min_error_chars", 5),
            default_error=prs.get("default_error", "can't understand this line"),
        )

    if "providers" in data:
        prv = data["providers"]
        config.providers = ProvidersConfig(
            library=prv.get("library", True),
            modules=prv.get("modules", []),
        )

    return config
