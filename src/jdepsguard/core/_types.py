from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import TypeAlias

Facts: TypeAlias = Mapping[str, Iterable[str]] | Iterable[tuple[str, Iterable[str]]]

WILDCARD = "*"
"""Rule identifier matching every type and package."""


class Severity(StrEnum):
    """Consequence of a matched dependency rule (ordered lowest → highest).

    Comparisons follow :data:`SEVERITY_LEVEL`, not the string values, so
    ``Severity.FAIL > Severity.WARN`` and ``max(Severity) is Severity.FAIL``.
    """

    IGNORE = "ignore"
    INFORM = "inform"
    WARN = "warn"
    FAIL = "fail"

    @classmethod
    def parse(cls, value: str) -> "Severity":
        """Parse a severity name case-insensitively (``"WARN"``, ``"warn"``)."""
        return cls(str(value).strip().lower())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return SEVERITY_LEVEL[self] < SEVERITY_LEVEL[other]

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return SEVERITY_LEVEL[self] <= SEVERITY_LEVEL[other]

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return SEVERITY_LEVEL[self] > SEVERITY_LEVEL[other]

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return SEVERITY_LEVEL[self] >= SEVERITY_LEVEL[other]


SEVERITY_LEVEL: dict[Severity, int] = {
    Severity.IGNORE: 0,
    Severity.INFORM: 1,
    Severity.WARN: 2,
    Severity.FAIL: 3,
}
