"""Report a :class:`Result` through logging and failure signaling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from jdepsguard.core._types import Severity
from jdepsguard.core.violation import InternalDependencyError, Result

logger = logging.getLogger("jdepsguard")


class Action(StrEnum):
    """What the reporter does with the violations of one severity."""

    COUNT = "count"
    INFO = "info"
    WARN = "warn"
    FAIL = "fail"


SEVERITY_ACTIONS: dict[Severity, Action] = {
    Severity.IGNORE: Action.COUNT,
    Severity.INFORM: Action.INFO,
    Severity.WARN: Action.WARN,
    Severity.FAIL: Action.FAIL,
}

_MESSAGES: dict[Severity, str] = {
    Severity.IGNORE: (
        "JDeps reported {count} dependencies on JDK-internal APIs "
        "that are configured to be ignored."
    ),
    Severity.INFORM: (
        "JDeps reported {count} dependencies on JDK-internal APIs "
        "that are configured to be logged:\n{violations}"
    ),
    Severity.WARN: (
        "JDeps reported {count} dependencies on JDK-internal APIs "
        "that are configured to be warned about:\n{violations}"
    ),
    Severity.FAIL: (
        "JDeps reported {count} dependencies on JDK-internal APIs "
        "that are configured to fail the build:\n{violations}"
    ),
}

NO_DEPENDENCIES_MESSAGE = "JDeps reported no dependencies on JDK-internal APIs."


@dataclass(frozen=True, slots=True)
class Section:
    """Rendered report for the violations of one severity."""

    severity: Severity
    action: Action
    count: int
    message: str


def render_sections(result: Result) -> list[Section]:
    """Render one :class:`Section` per non-empty severity, lowest first."""
    sections: list[Section] = []
    for severity in sorted(Severity):
        violations = result.violations(severity)
        count = sum(len(v.internal_dependencies) for v in violations)
        if count == 0:
            continue
        rendered = "\n".join(v.to_multiline_string() for v in violations)
        message = _MESSAGES[severity].format(count=count, violations=rendered)
        sections.append(Section(severity, SEVERITY_ACTIONS[severity], count, message))
    return sections


def report_result(result: Result, *, log: logging.Logger | None = None) -> int:
    """Log *result* and raise if any dependency is configured to fail.

    Returns:
        The number of reported dependencies (all severities).

    Raises:
        :class:`InternalDependencyError`: If ``result.violations_to_fail``
            is non-empty.  Lower severities are logged first.

    """
    log = log or logger
    sections = render_sections(result)

    failure: Section | None = None
    for section in sections:
        match section.action:
            case Action.COUNT | Action.INFO:
                log.info(section.message)
            case Action.WARN:
                log.warning(section.message)
            case Action.FAIL:
                failure = section

    if failure is not None:
        raise InternalDependencyError(result.violations_to_fail, failure.message)

    total = sum(s.count for s in sections)
    if total == 0:
        log.info(NO_DEPENDENCIES_MESSAGE)
    return total
