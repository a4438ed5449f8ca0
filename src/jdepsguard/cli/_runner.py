from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from jdepsguard.core.aggregate import aggregate

if TYPE_CHECKING:
    from jdepsguard.core._types import Facts
    from jdepsguard.core.config import JdepsGuardConfig
    from jdepsguard.core.violation import Result


@dataclass
class CheckReport:
    source: str
    result: Result
    rules_evaluated: int = 0
    types_checked: int = 0
    elapsed_ms: float = 0.0

    @property
    def failed(self) -> bool:
        return self.result.has_failures


def run_check(facts: Facts, *, source: str, config: JdepsGuardConfig) -> CheckReport:
    """Judge *facts* against the rules in *config* and return a report.

    Raises:
        :class:`RuleConflictError`: If the configured rules conflict; raised
            before any fact is judged.

    """
    start = time.monotonic()
    judge = config.build_judge()

    types: set[str] = set()

    def _counted() -> Iterator[tuple[str, Iterable[str]]]:
        items = facts.items() if isinstance(facts, Mapping) else facts
        for type_name, deps in items:
            types.add(type_name)
            yield type_name, deps

    result = aggregate(_counted(), judge, default_severity=config.default_severity)
    return CheckReport(
        source=source,
        result=result,
        rules_evaluated=len(judge.rules),
        types_checked=len(types),
        elapsed_ms=(time.monotonic() - start) * 1000,
    )
