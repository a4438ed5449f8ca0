from __future__ import annotations

import dataclasses
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jdepsguard.core._types import Severity
from jdepsguard.core.errors import ConfigError
from jdepsguard.core.judge import HierarchicalJudgeBuilder, HierarchicalMapJudge
from jdepsguard.core.rule import DependencyRule, parse_arrow_rule

CONFIG_FILE_NAME = ".jdepsguard.toml"


@dataclass(frozen=True)
class JdepsGuardConfig:
    """Rule configuration for jdepsguard.

    Can be loaded from ``.jdepsguard.toml`` or ``pyproject.toml
    [tool.jdepsguard]`` via :func:`load_config`.

    Example ``pyproject.toml``::

        [tool.jdepsguard]
        default_severity = "warn"
        arrow_rules = ["* -> sun.misc.BASE64Encoder: IGNORE"]

        [[tool.jdepsguard.rules]]
        dependent = "com.example.io"
        dependencies = ["sun.misc.Unsafe", "sun.misc.Cleaner"]
        severity = "inform"

    """

    default_severity: Severity = Severity.FAIL
    """Severity of dependencies that no rule applies to."""

    rules: tuple[DependencyRule, ...] = field(default_factory=tuple)
    """Rules in configuration order: table rules first, then arrow rules."""

    def build_judge(self) -> HierarchicalMapJudge:
        """Build the judge for :attr:`rules`.

        Raises:
            :class:`RuleConflictError`: If two rules share the same
                dependent and dependency.

        """
        return HierarchicalJudgeBuilder().add_all(self.rules).build()


def load_config(path: Path | str | None = None) -> JdepsGuardConfig:
    """Load :class:`JdepsGuardConfig` from a TOML file.

    When ``path`` is ``None``, walks up from the current directory looking for
    ``.jdepsguard.toml`` first, then ``pyproject.toml [tool.jdepsguard]``.  A
    ``pyproject.toml`` without a ``[tool.jdepsguard]`` section acts as a
    project root marker and stops the search.

    Raises:
        :class:`ConfigError`: If the file is not valid TOML or contains an
            invalid value (unknown severity, malformed rule, bad identifier).

    """
    if path is not None:
        resolved = Path(path)
        data = _read_file(resolved) if resolved.exists() else {}
    else:
        data = _find_config()

    return _parse_config(data)


def _find_config() -> dict[str, Any]:
    """Walk up from CWD looking for a config file."""
    current = Path.cwd()
    while True:
        own = current / CONFIG_FILE_NAME
        if own.exists():
            return _read_file(own)

        pyproject = current / "pyproject.toml"
        if pyproject.exists():
            return _read_file(pyproject)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return {}


def _read_file(path: Path) -> dict[str, Any]:
    """Read a TOML file and return the jdepsguard section."""
    try:
        with path.open("rb") as f:
            raw: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    if path.name == "pyproject.toml":
        tool: dict[str, Any] = raw.get("tool", {})
        section: dict[str, Any] = tool.get("jdepsguard", {})
        return section
    return raw


def _parse_severity(value: Any, where: str) -> Severity:
    try:
        return Severity.parse(value)
    except ValueError:
        known = ", ".join(f'"{s}"' for s in Severity)
        raise ConfigError(f"Unknown severity {value!r} in {where}. Known: {known}") from None


def _parse_table_rule(index: int, table: Any) -> list[DependencyRule]:
    where = f"rules[{index}]"
    if not isinstance(table, dict):
        raise ConfigError(f"{where} must be a table, got {type(table).__name__}")

    if "dependencies" in table:
        dependencies = table["dependencies"]
        if not isinstance(dependencies, list) or not all(isinstance(d, str) for d in dependencies):
            raise ConfigError(f"{where}.dependencies must be a list of strings")
    elif isinstance(table.get("dependency"), str):
        dependencies = [table["dependency"]]
    else:
        raise ConfigError(f"{where} defines no 'dependency' string or 'dependencies' list")

    if "severity" not in table:
        raise ConfigError(f"{where} defines no severity")
    severity = _parse_severity(table["severity"], where)

    dependent = table.get("dependent")
    if dependent is not None and not isinstance(dependent, str):
        raise ConfigError(f"{where}.dependent must be a string")
    return [DependencyRule(dependent, dependency, severity) for dependency in dependencies]


def _parse_config(data: dict[str, Any]) -> JdepsGuardConfig:
    """Parse raw key/value dict into :class:`JdepsGuardConfig`.

    Raises:
        :class:`ConfigError`: On unknown severities or malformed rules.

    """
    kwargs: dict[str, Any] = {}
    if (v := data.get("default_severity")) is not None:
        kwargs["default_severity"] = _parse_severity(v, "default_severity")

    rules: list[DependencyRule] = []

    tables = data.get("rules", [])
    if not isinstance(tables, list):
        raise ConfigError("'rules' must be an array of tables")
    for i, table in enumerate(tables):
        rules.extend(_parse_table_rule(i, table))

    arrows = data.get("arrow_rules", [])
    if isinstance(arrows, str):
        arrows = [line for line in arrows.splitlines() if line.strip()]
    if not isinstance(arrows, list):
        raise ConfigError("'arrow_rules' must be a string or an array of strings")
    for line in arrows:
        rules.extend(parse_arrow_rule(str(line)))

    kwargs["rules"] = tuple(rules)
    return dataclasses.replace(JdepsGuardConfig(), **kwargs)
