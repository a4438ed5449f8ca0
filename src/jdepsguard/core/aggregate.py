"""Turn dependency facts into a severity-partitioned :class:`Result`."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING

from jdepsguard.core._types import Facts, Severity
from jdepsguard.core.rule import DependencyRule
from jdepsguard.core.violation import Result, Violation

if TYPE_CHECKING:
    from jdepsguard.core.judge import DependencyJudge

logger = logging.getLogger("jdepsguard")


def _iter_facts(facts: Facts) -> Iterator[tuple[str, Iterable[str]]]:
    if isinstance(facts, Mapping):
        yield from facts.items()
    else:
        yield from facts


def aggregate(
    facts: Facts,
    judge: DependencyJudge,
    *,
    default_severity: Severity = Severity.FAIL,
) -> Result:
    """Judge every ``(type, internal dependency)`` fact and group the outcome.

    Args:
        facts: Either a mapping ``type -> dependencies`` or an iterable of
               ``(type, dependencies)`` pairs.  Consumed exactly once.
        judge: Decides the severity of each fact.
        default_severity: Used for facts no rule applies to.

    Returns:
        A :class:`Result` holding one :class:`Violation` per type and
        severity, with the dependencies of that type which resolved to
        that severity.

    """
    grouped: dict[tuple[str, Severity], set[str]] = {}
    for type_name, dependencies in _iter_facts(facts):
        for dependency in dependencies:
            severity = judge.judge(type_name, dependency)
            if severity is None:
                logger.debug(
                    "No rule for %s -> %s, using default severity %s",
                    type_name,
                    dependency,
                    default_severity.name,
                )
                severity = default_severity
            grouped.setdefault((type_name, severity), set()).add(dependency)

    return Result.from_violations(
        Violation(type_name, frozenset(deps), severity)
        for (type_name, severity), deps in grouped.items()
    )


def rules_for_violations(result: Result) -> list[DependencyRule]:
    """Create one rule per reported dependency, keeping its current severity.

    Ignored violations are skipped.  The rules can be pasted into the
    configuration and then loosened or tightened one by one.
    """
    rules: list[DependencyRule] = []
    for severity in (Severity.INFORM, Severity.WARN, Severity.FAIL):
        for v in result.violations(severity):
            rules.extend(
                DependencyRule(v.type_name, dep, severity)
                for dep in sorted(v.internal_dependencies)
            )
    return rules
