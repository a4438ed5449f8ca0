from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from jdepsguard.core._types import Severity


@dataclass(frozen=True, slots=True)
class Violation:
    """An analyzed type and its internal dependencies at one severity."""

    type_name: str
    internal_dependencies: frozenset[str]
    severity: Severity

    def to_multiline_string(self) -> str:
        """Render the violation as ``type`` followed by one ``-> dependency`` line each."""
        lines = [f"  {self.type_name}"]
        lines.extend(f"    -> {dep}" for dep in sorted(self.internal_dependencies))
        return "\n".join(lines)

    def __str__(self) -> str:
        deps = ", ".join(sorted(self.internal_dependencies))
        return f"{self.type_name} -> {deps}: {self.severity.name}"


@dataclass(frozen=True, slots=True)
class Result:
    """Violations of one analysis run, partitioned by severity.

    Each stream is sorted by type name, so two runs over the same facts and
    rules produce equal results.
    """

    violations_to_ignore: tuple[Violation, ...] = ()
    violations_to_inform: tuple[Violation, ...] = ()
    violations_to_warn: tuple[Violation, ...] = ()
    violations_to_fail: tuple[Violation, ...] = ()

    @classmethod
    def from_violations(cls, violations: Iterable[Violation]) -> Result:
        buckets: dict[Severity, list[Violation]] = {s: [] for s in Severity}
        for v in violations:
            buckets[v.severity].append(v)

        def _sorted(severity: Severity) -> tuple[Violation, ...]:
            return tuple(sorted(buckets[severity], key=lambda v: v.type_name))

        return cls(
            violations_to_ignore=_sorted(Severity.IGNORE),
            violations_to_inform=_sorted(Severity.INFORM),
            violations_to_warn=_sorted(Severity.WARN),
            violations_to_fail=_sorted(Severity.FAIL),
        )

    def violations(self, severity: Severity) -> tuple[Violation, ...]:
        """Return the stream for *severity*."""
        match severity:
            case Severity.IGNORE:
                return self.violations_to_ignore
            case Severity.INFORM:
                return self.violations_to_inform
            case Severity.WARN:
                return self.violations_to_warn
            case Severity.FAIL:
                return self.violations_to_fail
        msg = f"Unknown severity {severity!r}"
        raise ValueError(msg)

    @property
    def all_violations(self) -> list[Violation]:
        vv: list[Violation] = []
        for severity in Severity:
            vv.extend(self.violations(severity))
        return vv

    def dependency_count(self, severity: Severity | None = None) -> int:
        """Count internal dependencies in one stream, or in all of them."""
        violations = self.all_violations if severity is None else self.violations(severity)
        return sum(len(v.internal_dependencies) for v in violations)

    @property
    def has_failures(self) -> bool:
        return bool(self.violations_to_fail)


class InternalDependencyError(Exception):
    """Raised by the reporter when dependencies are configured to fail the build."""

    def __init__(self, violations: Iterable[Violation], message: str = "") -> None:
        self.violations = list(violations)
        count = sum(len(v.internal_dependencies) for v in self.violations)
        super().__init__(
            message or f"{count} dependencies on JDK-internal APIs are configured to fail"
        )
