from jdepsguard.core._types import Severity
from jdepsguard.core.judge import HierarchicalJudgeBuilder, HierarchicalMapJudge
from jdepsguard.core.rule import DependencyRule, parse_arrow_rule
from jdepsguard.core.violation import Violation

UNSAFE = "sun.misc.Unsafe"
BASE64 = "sun.misc.BASE64Encoder"


def make_rules(*arrows: str) -> list[DependencyRule]:
    rules: list[DependencyRule] = []
    for arrow in arrows:
        rules.extend(parse_arrow_rule(arrow))
    return rules


def make_judge(*arrows: str) -> HierarchicalMapJudge:
    return HierarchicalJudgeBuilder().add_all(make_rules(*arrows)).build()


def make_violation(type_name: str, *deps: str, severity: Severity = Severity.FAIL) -> Violation:
    return Violation(type_name, frozenset(deps), severity)
