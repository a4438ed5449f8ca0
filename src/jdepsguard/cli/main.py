"""CLI entry point - Click commands for jdepsguard."""

from __future__ import annotations

import dataclasses
import logging
import sys

import click

from jdepsguard import __version__
from jdepsguard.cli._loader import LoadError, load_facts
from jdepsguard.cli._output import (
    RULE_FORMATTERS,
    format_json,
    format_rules_json,
    format_rules_text,
    format_text,
)
from jdepsguard.cli._runner import run_check
from jdepsguard.core._types import Severity
from jdepsguard.core.aggregate import rules_for_violations
from jdepsguard.core.config import JdepsGuardConfig, load_config
from jdepsguard.core.errors import ConfigError

_SEVERITY_CHOICE = click.Choice([str(s) for s in Severity], case_sensitive=False)


def _load_config_or_exit(config_path: str | None) -> JdepsGuardConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: invalid config: {exc}", err=True)
        sys.exit(2)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", message="jdepsguard %(version)s")
def cli() -> None:
    """jdepsguard - judge dependencies on JDK-internal APIs."""


@cli.command()
@click.argument("facts_path", metavar="FACTS")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to .jdepsguard.toml or pyproject.toml config file.",
)
@click.option(
    "--default-severity",
    type=_SEVERITY_CHOICE,
    default=None,
    help="Severity for dependencies no rule applies to (overrides config).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option(
    "--output-rules",
    type=click.Choice(list(RULE_FORMATTERS)),
    default=None,
    help="Also print rules matching the reported dependencies, ready to paste into the config.",
)
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
@click.option("-v", "--verbose", is_flag=True, help="Log rule matching details to stderr.")
def check(
    facts_path: str,
    config_path: str | None,
    default_severity: str | None,
    fmt: str,
    output_rules: str | None,
    no_color: bool,
    verbose: bool,
) -> None:
    """Check dependency facts (a JSON file, or - for stdin) against the rules.

    Exits with 1 if any dependency is configured to fail.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    config = _load_config_or_exit(config_path)
    if default_severity is not None:
        config = dataclasses.replace(config, default_severity=Severity.parse(default_severity))

    try:
        facts = load_facts(facts_path)
    except LoadError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    try:
        report = run_check(facts, source=facts_path, config=config)
    except ConfigError as exc:
        click.echo(f"Error: invalid config: {exc}", err=True)
        sys.exit(2)

    if fmt == "json":
        click.echo(format_json(report))
    else:
        click.echo(format_text(report, no_color=no_color))

    if output_rules is not None:
        rules = rules_for_violations(report.result)
        if rules:
            click.echo("")
            click.echo(RULE_FORMATTERS[output_rules](rules))

    if report.failed:
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to .jdepsguard.toml or pyproject.toml config file.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json", *RULE_FORMATTERS]),
    default="text",
    help="Output format.",
)
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
@click.option(
    "--severity",
    "sev",
    default=None,
    type=_SEVERITY_CHOICE,
    help="Filter by severity.",
)
def rules(config_path: str | None, fmt: str, no_color: bool, sev: str | None) -> None:
    """List the configured dependency rules."""
    config = _load_config_or_exit(config_path)

    filtered = list(config.rules)
    if sev is not None:
        severity = Severity.parse(sev)
        filtered = [r for r in filtered if r.severity == severity]

    total = len(config.rules) if sev is not None else None

    if fmt == "json":
        click.echo(format_rules_json(filtered))
    elif fmt in RULE_FORMATTERS:
        click.echo(RULE_FORMATTERS[fmt](filtered))
    else:
        click.echo(format_rules_text(filtered, no_color=no_color, total=total))
