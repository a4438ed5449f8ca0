import dataclasses

import pytest

from jdepsguard.core._types import Severity
from jdepsguard.core.aggregate import aggregate, rules_for_violations
from jdepsguard.core.rule import DependencyRule
from jdepsguard.core.violation import Result, Violation
from tests.conftest import BASE64, UNSAFE, make_judge, make_violation

_FACTS: dict[str, list[str]] = {
    "com.foo.Reader": [UNSAFE, BASE64],
    "com.foo.legacy.Writer": [UNSAFE, BASE64, "sun.reflect.Reflection"],
    "org.other.Main": [UNSAFE],
    "org.other.Util": ["sun.security.x509.X500Name"],
}

_RULES = (
    "com.foo -> sun.misc.Unsafe: WARN",
    "com.foo.legacy -> sun.misc.Unsafe: INFORM",
    "* -> sun.misc.BASE64Encoder: IGNORE",
    "org.other -> sun.misc.Unsafe: FAIL",
)


def _fact_count(facts: dict[str, list[str]]) -> int:
    return sum(len(deps) for deps in facts.values())


def test_single_failing_dependency() -> None:
    judge = make_judge("TypeA -> sun.misc.Unsafe: FAIL")
    result = aggregate({"TypeA": [UNSAFE]}, judge)

    assert result.violations_to_fail == (Violation("TypeA", frozenset({UNSAFE}), Severity.FAIL),)
    assert result.violations_to_warn == ()
    assert result.violations_to_inform == ()
    assert result.violations_to_ignore == ()


def test_no_facts_gives_empty_result() -> None:
    result = aggregate({}, make_judge(*_RULES))
    assert result == Result()
    assert result.dependency_count() == 0


def test_dependencies_grouped_by_type_and_severity() -> None:
    result = aggregate(_FACTS, make_judge(*_RULES))

    assert result.violations_to_warn == (
        make_violation("com.foo.Reader", UNSAFE, severity=Severity.WARN),
    )
    assert set(result.violations_to_ignore) == {
        make_violation("com.foo.Reader", BASE64, severity=Severity.IGNORE),
        make_violation("com.foo.legacy.Writer", BASE64, severity=Severity.IGNORE),
    }
    assert result.violations_to_inform == (
        make_violation("com.foo.legacy.Writer", UNSAFE, severity=Severity.INFORM),
    )
    # unmatched facts fall back to the default (FAIL) and merge with matched FAIL facts
    assert set(result.violations_to_fail) == {
        make_violation("com.foo.legacy.Writer", "sun.reflect.Reflection"),
        make_violation("org.other.Main", UNSAFE),
        make_violation("org.other.Util", "sun.security.x509.X500Name"),
    }


def test_same_severity_dependencies_collapse_into_one_violation() -> None:
    judge = make_judge("com.foo -> sun.misc.Unsafe, sun.misc.BASE64Encoder: WARN")
    result = aggregate({"com.foo.Bar": [UNSAFE, BASE64]}, judge)
    assert result.violations_to_warn == (
        make_violation("com.foo.Bar", UNSAFE, BASE64, severity=Severity.WARN),
    )


@pytest.mark.parametrize("default", list(Severity))
def test_default_severity_for_unmatched_facts(default: Severity) -> None:
    result = aggregate({"com.foo.Bar": [UNSAFE]}, make_judge(), default_severity=default)
    assert result.violations(default) == (make_violation("com.foo.Bar", UNSAFE, severity=default),)
    assert result.dependency_count() == 1


def test_default_severity_is_fail() -> None:
    result = aggregate({"com.foo.Bar": [UNSAFE]}, make_judge())
    assert result.has_failures is True


def test_result_is_a_partition() -> None:
    result = aggregate(_FACTS, make_judge(*_RULES))

    pairs_by_severity = [
        {(v.type_name, dep) for v in result.violations(s) for dep in v.internal_dependencies}
        for s in Severity
    ]
    for i, a in enumerate(pairs_by_severity):
        for b in pairs_by_severity[i + 1 :]:
            assert a.isdisjoint(b)
    assert result.dependency_count() == _fact_count(_FACTS)
    assert sum(result.dependency_count(s) for s in Severity) == _fact_count(_FACTS)


def test_each_violation_has_its_bucket_severity() -> None:
    result = aggregate(_FACTS, make_judge(*_RULES))
    for severity in Severity:
        assert all(v.severity == severity for v in result.violations(severity))


def test_aggregation_is_idempotent() -> None:
    judge = make_judge(*_RULES)
    first = aggregate(_FACTS, judge)
    second = aggregate(_FACTS, judge)
    assert first == second


def test_aggregation_ignores_fact_order() -> None:
    judge = make_judge(*_RULES)
    forward = aggregate(list(_FACTS.items()), judge)
    backward = aggregate(list(reversed(_FACTS.items())), judge)
    assert forward == backward


def test_accepts_lazy_pairs() -> None:
    judge = make_judge(*_RULES)
    facts = ((t, iter(deps)) for t, deps in _FACTS.items())
    assert aggregate(facts, judge) == aggregate(_FACTS, judge)


def test_streams_sorted_by_type_name() -> None:
    result = aggregate({"b.B": [UNSAFE], "a.A": [UNSAFE], "c.C": [UNSAFE]}, make_judge())
    assert [v.type_name for v in result.violations_to_fail] == ["a.A", "b.B", "c.C"]


# Result / Violation


def test_result_is_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        Result().violations_to_fail = ()  # type: ignore[misc]


def test_result_from_violations_partitions() -> None:
    v_fail = make_violation("a.A", UNSAFE)
    v_warn = make_violation("a.A", BASE64, severity=Severity.WARN)
    result = Result.from_violations([v_warn, v_fail])
    assert result.violations_to_fail == (v_fail,)
    assert result.violations_to_warn == (v_warn,)
    assert result.all_violations == [v_warn, v_fail]


def test_violation_multiline_string_is_sorted() -> None:
    v = make_violation("com.foo.Bar", UNSAFE, BASE64)
    assert v.to_multiline_string() == (
        "  com.foo.Bar\n    -> sun.misc.BASE64Encoder\n    -> sun.misc.Unsafe"
    )


def test_violation_str() -> None:
    v = make_violation("com.foo.Bar", UNSAFE, severity=Severity.INFORM)
    assert str(v) == "com.foo.Bar -> sun.misc.Unsafe: INFORM"


# rules_for_violations()


def test_rules_for_violations_skip_ignored() -> None:
    result = aggregate(_FACTS, make_judge(*_RULES))
    rules = rules_for_violations(result)

    assert DependencyRule("com.foo.Reader", UNSAFE, Severity.WARN) in rules
    assert DependencyRule("org.other.Main", UNSAFE, Severity.FAIL) in rules
    assert all(r.severity != Severity.IGNORE for r in rules)
    assert len(rules) == _fact_count(_FACTS) - result.dependency_count(Severity.IGNORE)


def test_rules_for_violations_reproduce_result() -> None:
    result = aggregate(_FACTS, make_judge(*_RULES))
    judge = make_judge(*map(str, rules_for_violations(result)))
    again = aggregate(_FACTS, judge, default_severity=Severity.IGNORE)
    for severity in (Severity.INFORM, Severity.WARN, Severity.FAIL):
        assert again.violations(severity) == result.violations(severity)
