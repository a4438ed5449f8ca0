import logging

import pytest

from jdepsguard.core._types import Severity
from jdepsguard.core.report import (
    NO_DEPENDENCIES_MESSAGE,
    SEVERITY_ACTIONS,
    Action,
    render_sections,
    report_result,
)
from jdepsguard.core.violation import InternalDependencyError, Result
from tests.conftest import BASE64, UNSAFE, make_violation


def _result(*severities: Severity) -> Result:
    return Result.from_violations(
        make_violation(f"com.foo.T{i}", UNSAFE, BASE64, severity=s)
        for i, s in enumerate(severities)
    )


def test_every_severity_has_an_action() -> None:
    assert set(SEVERITY_ACTIONS) == set(Severity)
    assert SEVERITY_ACTIONS[Severity.FAIL] == Action.FAIL
    assert SEVERITY_ACTIONS[Severity.WARN] == Action.WARN


def test_render_sections_skip_empty_streams() -> None:
    sections = render_sections(_result(Severity.WARN, Severity.WARN))
    assert [s.severity for s in sections] == [Severity.WARN]
    assert sections[0].count == 4


def test_render_sections_lowest_severity_first() -> None:
    sections = render_sections(_result(Severity.FAIL, Severity.IGNORE, Severity.INFORM))
    assert [s.severity for s in sections] == [Severity.IGNORE, Severity.INFORM, Severity.FAIL]


def test_ignore_section_only_counts() -> None:
    (section,) = render_sections(_result(Severity.IGNORE))
    assert section.message == (
        "JDeps reported 2 dependencies on JDK-internal APIs that are configured to be ignored."
    )


def test_warn_section_lists_violations() -> None:
    (section,) = render_sections(_result(Severity.WARN))
    assert section.message == (
        "JDeps reported 2 dependencies on JDK-internal APIs "
        "that are configured to be warned about:\n"
        "  com.foo.T0\n"
        "    -> sun.misc.BASE64Encoder\n"
        "    -> sun.misc.Unsafe"
    )


def test_report_empty_result(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="jdepsguard"):
        assert report_result(Result()) == 0
    assert caplog.messages == [NO_DEPENDENCIES_MESSAGE]


def test_report_logs_by_severity(caplog: pytest.LogCaptureFixture) -> None:
    result = _result(Severity.IGNORE, Severity.INFORM, Severity.WARN)
    with caplog.at_level(logging.INFO, logger="jdepsguard"):
        assert report_result(result) == 6

    levels = [(r.levelno, r.getMessage().split(":")[0]) for r in caplog.records]
    assert [lvl for lvl, _ in levels] == [logging.INFO, logging.INFO, logging.WARNING]
    assert "configured to be ignored" in levels[0][1]
    assert "configured to be logged" in levels[1][1]
    assert "configured to be warned about" in levels[2][1]


def test_report_raises_for_failures(caplog: pytest.LogCaptureFixture) -> None:
    result = _result(Severity.WARN, Severity.FAIL)
    with (
        caplog.at_level(logging.INFO, logger="jdepsguard"),
        pytest.raises(InternalDependencyError, match="configured to fail the build") as exc_info,
    ):
        report_result(result)

    assert exc_info.value.violations == list(result.violations_to_fail)
    # lower severities are still logged before failing
    assert [r.levelno for r in caplog.records] == [logging.WARNING]


def test_report_uses_given_logger(caplog: pytest.LogCaptureFixture) -> None:
    log = logging.getLogger("build.host")
    with caplog.at_level(logging.INFO, logger="build.host"):
        report_result(_result(Severity.INFORM), log=log)
    assert [r.name for r in caplog.records] == ["build.host"]


def test_internal_dependency_error_default_message() -> None:
    exc = InternalDependencyError([make_violation("a.A", UNSAFE, BASE64)])
    assert str(exc) == "2 dependencies on JDK-internal APIs are configured to fail"
