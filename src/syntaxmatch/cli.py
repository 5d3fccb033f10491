"""syntaxmatch CLI."""

from __future__ import annotations

from pathlib import Path

import click

from syntaxmatch import __version__
from syntaxmatch.config import Config, find_config, load_config
from syntaxmatch.errors import DiagnosticRenderer, SyntaxAPIError
from syntaxmatch.loader import build_registry
from syntaxmatch.parser import Parser
from syntaxmatch.registry import CONDITIONS, EFFECTS, EVENTS, EXPRESSIONS, Registry
from syntaxmatch.script import analyze_file

_KINDS = (CONDITIONS, EFFECTS, EXPRESSIONS, EVENTS)


def _setup(start: Path) -> tuple[Config, Registry]:
    """Load the nearest syntaxmatch.toml (if any) and build its registry."""
    try:
        config = load_config(find_config(start))
    except FileNotFoundError:
        config = Config()
    try:
        registry = build_registry(config)
    except (SyntaxAPIError, ImportError) as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)
    return config, registry


def _echo_diagnostics(parser: Parser) -> None:
    renderer = DiagnosticRenderer(color=True)
    for diag in parser.log.take_diagnostics():
        click.echo(renderer.render(diag), err=True)


@click.group()
@click.version_option(__version__, prog_name="syntaxmatch")
def main() -> None:
    """Match script lines against registered syntax patterns."""


@main.command()
@click.argument("pattern")
@click.argument("text")
@click.option("--literal-only", is_flag=True, help="Bind placeholders to literals only.")
def match(pattern: str, text: str, literal_only: bool) -> None:
    """Match TEXT against a single PATTERN."""
    config, registry = _setup(Path.cwd())
    parser = Parser(registry, options=config.parser)
    try:
        res = parser.match(pattern, text, literal_only=literal_only)
    except SyntaxAPIError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)
    if res is None:
        _echo_diagnostics(parser)
        click.echo("no match", err=True)
        raise SystemExit(1)

    click.echo("matched")
    for slot, expr in enumerate(res.exprs):
        value = "<unbound>" if expr is None else f"{expr} ({expr.return_type.name})"
        click.echo(f"  %{slot}: {value}")
    for index, capture in enumerate(res.captures):
        click.echo(f"  <{index}>: {capture}")
    if res.choices:
        click.echo(f"  choices: {', '.join(str(c) for c in res.choices)}")
    click.echo(f"  matched chars: {res.matched_chars}")


@main.command()
@click.argument("text")
@click.option(
    "--kind",
    type=click.Choice(["statement", "expression", "event", "static"]),
    default="statement",
    help="What to parse TEXT as.",
)
@click.option("--type", "type_name", default="object", help="Expected type for --kind expression.")
def parse(text: str, kind: str, type_name: str) -> None:
    """Parse TEXT against the registered syntax."""
    config, registry = _setup(Path.cwd())
    parser = Parser(registry, options=config.parser)
    default_error = config.parser.default_error

    try:
        if kind == "statement":
            found = parser.parse_statement(text)
        elif kind == "expression":
            found = parser.parse_expression(text, type_name, default_error)
        elif kind == "event":
            event = parser.parse_event(text, default_error)
            found = event[1] if event is not None else None
        else:
            found = parser.parse_static(text, registry.statements(), default_error)
    except SyntaxAPIError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)

    if found is None:
        _echo_diagnostics(parser)
        raise SystemExit(1)
    click.echo(f"{type(found).__name__}: {found}")


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def check(files: tuple[str, ...]) -> None:
    """Check script FILES for lines that don't parse."""
    config, registry = _setup(Path(files[0]))
    renderer = DiagnosticRenderer(color=True)
    had_errors = False

    for file in files:
        report = analyze_file(Path(file), registry, options=config.parser)
        for diag in report.diagnostics:
            click.echo(renderer.render(diag), err=True)
        if not report.ok:
            had_errors = True

    if had_errors:
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s), no errors")


@main.command()
@click.option("--kind", type=click.Choice([*_KINDS, "all"]), default="all")
@click.option("--color/--no-color", default=True, help="Highlight patterns.")
def patterns(kind: str, color: bool) -> None:
    """List the registered syntax patterns."""
    from pygments import highlight
    from pygments.formatters import TerminalFormatter

    from syntaxmatch.highlight import PatternLexer

    _, registry = _setup(Path.cwd())
    lexer, formatter = PatternLexer(), TerminalFormatter()
    kinds = _KINDS if kind == "all" else (kind,)
    for k in kinds:
        click.echo(f"{k}s:")
        for info in registry.syntaxes(k):
            click.echo(f"  {info.name}")
            for pattern in info.patterns:
                text = highlight(pattern, lexer, formatter).rstrip("\n") if color else pattern
                click.echo(f"    {text}", color=color or None)


@main.command()
def lsp() -> None:
    """Start the syntaxmatch language server."""
    from syntaxmatch.lsp import main as lsp_main

    lsp_main()
