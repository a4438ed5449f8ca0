from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

from jdepsguard import __version__
from jdepsguard.core._types import Severity
from jdepsguard.core.report import NO_DEPENDENCIES_MESSAGE, render_sections
from jdepsguard.core.rule import format_arrow_rule

if TYPE_CHECKING:
    from jdepsguard.cli._runner import CheckReport
    from jdepsguard.core.rule import DependencyRule

_SEVERITY_COLORS: dict[Severity, str] = {
    Severity.FAIL: "\033[31m",  # red
    Severity.WARN: "\033[33m",  # yellow
    Severity.INFORM: "\033[36m",  # cyan
    Severity.IGNORE: "\033[2m",  # dim
}
_GREEN = "\033[32m"
_BOLD = "\033[1m"
_RESET = "\033[0m"

_LINE_WIDTH = 66

# Highest first, for summaries.
_SEVERITY_ORDER = tuple(sorted(Severity, reverse=True))


def _use_color(no_color_flag: bool) -> bool:
    if no_color_flag:
        return False
    return not os.environ.get("NO_COLOR", "")


def _c(text: str, code: str, *, color: bool) -> str:
    if not color:
        return text
    return f"{code}{text}{_RESET}"


def _header(title: str, *, color: bool) -> str:
    header = f"── {title} "
    fill = "─" * max(0, _LINE_WIDTH - len(header))
    return _c(header + fill, _BOLD, color=color)


def format_text(report: CheckReport, *, no_color: bool = False) -> str:
    color = _use_color(no_color)
    lines: list[str] = []
    w = lines.append

    w(f"jdepsguard {__version__}")
    w("")
    w(
        f"Checking {report.source} ({report.types_checked} types, "
        f"{report.rules_evaluated} rules) ..."
    )

    sections = render_sections(report.result)
    for section in sections:
        w("")
        w(_header(section.severity.name, color=color))
        head, _, body = section.message.partition("\n")
        w(_c(head, _SEVERITY_COLORS[section.severity], color=color))
        if body:
            w(body)

    w("")
    if not sections:
        w(_c(NO_DEPENDENCIES_MESSAGE, _GREEN, color=color))
    else:
        w(_summary_line(report, color=color))
    w(f"Checked in {report.elapsed_ms:.1f} ms")
    return "\n".join(lines)


def _summary_line(report: CheckReport, *, color: bool) -> str:
    result = report.result
    total = result.dependency_count()
    parts = [
        _c(f"{result.dependency_count(s)} {s}", _SEVERITY_COLORS[s], color=color)
        for s in _SEVERITY_ORDER
        if result.dependency_count(s)
    ]
    noun = "dependency" if total == 1 else "dependencies"
    return f"{total} internal {noun} ({', '.join(parts)})"


def format_json(report: CheckReport) -> str:
    result = report.result
    data = {
        "version": __version__,
        "source": report.source,
        "violations": [
            {
                "type": v.type_name,
                "severity": str(v.severity),
                "dependencies": sorted(v.internal_dependencies),
            }
            for v in result.all_violations
        ],
        "summary": {
            "total": result.dependency_count(),
            "types": report.types_checked,
            "rules": report.rules_evaluated,
            "elapsed_ms": round(report.elapsed_ms, 1),
            **{str(s): result.dependency_count(s) for s in Severity},
        },
    }
    return json.dumps(data, indent=2)


def format_rules_text(
    rules: list[DependencyRule],
    *,
    no_color: bool = False,
    total: int | None = None,
) -> str:
    color = _use_color(no_color)
    lines: list[str] = []
    w = lines.append

    count = len(rules)
    header = f"jdepsguard {__version__} - {count} rules"
    if total is not None and total != count:
        header += f" (filtered from {total})"
    w(header)

    dep_w = max((len(r.dependent) for r in rules), default=0)
    for severity in _SEVERITY_ORDER:
        group = [r for r in rules if r.severity == severity]
        if not group:
            continue
        w("")
        w(_header(f"{severity.name} ({len(group)})", color=color))
        w("")
        for r in group:
            dependent = _c(r.dependent.ljust(dep_w), _BOLD, color=color)
            arrow = _c("->", _SEVERITY_COLORS[severity], color=color)
            w(f"  {dependent}  {arrow} {r.dependency}")

    return "\n".join(lines)


def format_rules_json(rules: list[DependencyRule]) -> str:
    data = {
        "version": __version__,
        "rules": [
            {
                "dependent": r.dependent,
                "dependency": r.dependency,
                "severity": str(r.severity),
            }
            for r in rules
        ],
        "total": len(rules),
    }
    return json.dumps(data, indent=2)


def format_rules_arrow(rules: list[DependencyRule]) -> str:
    """Render rules as an ``arrow_rules`` TOML array."""
    lines = ["arrow_rules = ["]
    lines.extend(f"    {json.dumps(format_arrow_rule(r))}," for r in rules)
    lines.append("]")
    return "\n".join(lines)


def format_rules_toml(rules: list[DependencyRule]) -> str:
    """Render rules as ``[[rules]]`` TOML tables, one per rule."""
    blocks = [
        "\n".join(
            [
                "[[rules]]",
                f"dependent = {json.dumps(r.dependent)}",
                f"dependency = {json.dumps(r.dependency)}",
                f'severity = "{r.severity}"',
            ]
        )
        for r in rules
    ]
    return "\n\n".join(blocks)


RULE_FORMATTERS = {
    "arrow": format_rules_arrow,
    "toml": format_rules_toml,
}
