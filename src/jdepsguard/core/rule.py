from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

from jdepsguard.core._types import WILDCARD, Severity
from jdepsguard.core.errors import ConfigError, InvalidIdentifierError

_SEPARATOR = "."

_ARROW_RULE = re.compile(
    r"""
    ^\s*\(?\s*
    (?P<dependent>[^\s]+?)\s*->\s*
    (?P<dependencies>[^:]+?)\s*:\s*
    (?P<severity>[A-Za-z]+)
    \s*\)?\s*$
    """,
    re.VERBOSE,
)


# Java also allows currency symbols ($, £, €) and connector punctuation (_, ‿).
_EXTRA_IDENTIFIER_CATEGORIES = frozenset({"Sc", "Pc"})


def _is_identifier_start(ch: str) -> bool:
    return ch.isidentifier() or unicodedata.category(ch) in _EXTRA_IDENTIFIER_CATEGORIES


def _is_identifier_part(ch: str) -> bool:
    return f"a{ch}".isidentifier() or unicodedata.category(ch) in _EXTRA_IDENTIFIER_CATEGORIES


def describe_rule(dependent: object, dependency: object, severity: object) -> str:
    """Render the canonical form ``(dependent -> dependency: SEVERITY)``."""
    name = severity.name if isinstance(severity, Severity) else severity
    return f"({dependent} -> {dependency}: {name})"


def check_name(name: str | None, rule_description: str, role: str) -> None:
    """Check that *name* is a valid dependent or dependency identifier.

    Args:
        name: The identifier to check (``"com.example.Foo"``, ``"sun.misc"``,
              or the wildcard ``"*"``).
        rule_description: Canonical form of the rule *name* belongs to;
              embedded in every error message.
        role: ``"dependent"`` or ``"dependency"``.

    Raises:
        :class:`InvalidIdentifierError`: On an undefined name, an empty
            segment, or an invalid character.

    """
    if not name:
        msg = f"The rule {rule_description} defines no {role}."
        raise InvalidIdentifierError(msg)

    if name == WILDCARD:
        return

    for segment in name.split(_SEPARATOR):
        if not segment:
            msg = (
                f"In the rule {rule_description} the name '{name}' contains one empty part."
            )
            raise InvalidIdentifierError(msg)
        if not _is_identifier_start(segment[0]):
            msg = (
                f"In the rule {rule_description} a part of the name '{name}' "
                f"starts with the invalid character '{segment[0]}'."
            )
            raise InvalidIdentifierError(msg)
        for ch in segment[1:]:
            if not _is_identifier_part(ch):
                msg = (
                    f"In the rule {rule_description} the name '{name}' "
                    f"contains the invalid character '{ch}'."
                )
                raise InvalidIdentifierError(msg)


@dataclass(frozen=True, slots=True)
class DependencyRule:
    """A single constraint on dependencies of *dependent* on *dependency*.

    Both identifiers are either dot-separated type/package names or the
    wildcard ``"*"``.  Construction validates them and raises
    :class:`InvalidIdentifierError` instead of storing a broken rule.

    Example::

        DependencyRule("com.example.io", "sun.misc.Unsafe", Severity.WARN)

    """

    dependent: str
    dependency: str
    severity: Severity

    def __post_init__(self) -> None:
        description = describe_rule(self.dependent, self.dependency, self.severity)
        if not isinstance(self.severity, Severity):
            msg = f"The rule {description} defines no valid severity."
            raise ConfigError(msg)
        check_name(self.dependent, description, "dependent")
        check_name(self.dependency, description, "dependency")

    @property
    def is_wildcard(self) -> bool:
        """Whether the rule applies to every dependent."""
        return self.dependent == WILDCARD

    def __str__(self) -> str:
        return describe_rule(self.dependent, self.dependency, self.severity)


def parse_arrow_rule(text: str) -> list[DependencyRule]:
    """Parse ``"dependent -> dep[, dep...]: SEVERITY"`` into rules.

    Surrounding parentheses are allowed, so ``str(rule)`` parses back to
    an equal rule.
    """
    match = _ARROW_RULE.match(text)
    if match is None:
        msg = (
            f"Invalid rule {text.strip()!r} - expected "
            "'dependent -> dependency[, dependency...]: SEVERITY'"
        )
        raise ConfigError(msg)

    try:
        severity = Severity.parse(match["severity"])
    except ValueError:
        msg = f"Unknown severity {match['severity']!r} in rule {text.strip()!r}"
        raise ConfigError(msg) from None

    dependencies = [d.strip() for d in match["dependencies"].split(",")]
    return [DependencyRule(match["dependent"], d, severity) for d in dependencies]


def format_arrow_rule(rule: DependencyRule) -> str:
    return f"{rule.dependent} -> {rule.dependency}: {rule.severity.name}"
