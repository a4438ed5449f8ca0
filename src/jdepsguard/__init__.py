from importlib.metadata import version

from jdepsguard.core._types import WILDCARD, Severity
from jdepsguard.core.aggregate import aggregate, rules_for_violations
from jdepsguard.core.config import JdepsGuardConfig, load_config
from jdepsguard.core.errors import ConfigError, InvalidIdentifierError, RuleConflictError
from jdepsguard.core.judge import DependencyJudge, HierarchicalJudgeBuilder, HierarchicalMapJudge
from jdepsguard.core.report import report_result
from jdepsguard.core.rule import DependencyRule, check_name, parse_arrow_rule
from jdepsguard.core.violation import InternalDependencyError, Result, Violation

__version__ = version("jdepsguard")


__all__ = [
    "WILDCARD",
    "ConfigError",
    "DependencyJudge",
    "DependencyRule",
    "HierarchicalJudgeBuilder",
    "HierarchicalMapJudge",
    "InternalDependencyError",
    "InvalidIdentifierError",
    "JdepsGuardConfig",
    "Result",
    "RuleConflictError",
    "Severity",
    "Violation",
    "__version__",
    "aggregate",
    "check_name",
    "load_config",
    "parse_arrow_rule",
    "report_result",
    "rules_for_violations",
]
