"""Dependency judges: decide which severity applies to a dependency."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Self

from jdepsguard.core._types import Severity
from jdepsguard.core.errors import RuleConflictError
from jdepsguard.core.rule import DependencyRule

logger = logging.getLogger("jdepsguard")

_SEPARATOR = "."


class DependencyJudge:
    """Base class for judges.

    A judge answers one question: given an analyzed type (the *dependent*)
    and one of its internal dependencies, which severity applies?
    """

    def judge(self, dependent: str, dependency: str) -> Severity | None:
        """Return the severity for the pair, or ``None`` if no rule applies."""
        raise NotImplementedError

    @property
    def rules(self) -> tuple[DependencyRule, ...]:
        """The rules this judge was built from, in registration order."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class _Node:
    severity: Severity | None = None
    children: Mapping[str, _Node] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class _DependentIndex:
    """Dependents of a single dependency, indexed by name segment."""

    root: _Node
    wildcard: Severity | None = None


@dataclass
class _MutableNode:
    severity: Severity | None = None
    children: dict[str, _MutableNode] = field(default_factory=dict)

    def freeze(self) -> _Node:
        children = {segment: child.freeze() for segment, child in self.children.items()}
        return _Node(self.severity, MappingProxyType(children))


class HierarchicalMapJudge(DependencyJudge):
    """Judge that finds the most specific rule by walking the dependent's segments.

    For each dependency named by a rule, dependents are stored as a tree
    keyed by their dot-separated segments.  Looking up
    ``("com.example.io.Reader", "sun.misc.Unsafe")`` descends
    ``com → example → io → Reader`` in the ``sun.misc.Unsafe`` tree and
    keeps the deepest severity seen on the way, so ``com.example.io``
    outranks ``com.example``.  A wildcard dependent only applies when no
    segment matched.

    Instances are immutable; create them with :class:`HierarchicalJudgeBuilder`.
    """

    def __init__(
        self,
        indexes: Mapping[str, _DependentIndex],
        rules: tuple[DependencyRule, ...],
    ) -> None:
        self._indexes = MappingProxyType(dict(indexes))
        self._rules = rules

    def judge(self, dependent: str, dependency: str) -> Severity | None:
        index = self._indexes.get(dependency)
        if index is None:
            return None

        severity: Severity | None = None
        node = index.root
        for segment in dependent.split(_SEPARATOR):
            child = node.children.get(segment)
            if child is None:
                break
            node = child
            if node.severity is not None:
                severity = node.severity

        if severity is not None:
            return severity
        return index.wildcard

    @property
    def rules(self) -> tuple[DependencyRule, ...]:
        return self._rules

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(rules={len(self._rules)}, "
            f"dependencies={len(self._indexes)})"
        )


class HierarchicalJudgeBuilder:
    """Collects rules and builds a :class:`HierarchicalMapJudge`.

    Two rules with the same dependent and dependency are a conflict and are
    rejected with :class:`RuleConflictError`, whatever their severities.
    The builder is single-use: after :meth:`build` it refuses new rules.

    Example::

        judge = (
            HierarchicalJudgeBuilder()
            .add(DependencyRule("com.example", "sun.misc.Unsafe", Severity.WARN))
            .add(DependencyRule("*", "sun.misc.Unsafe", Severity.INFORM))
            .build()
        )

    """

    def __init__(self) -> None:
        self._rules: dict[tuple[str, str], DependencyRule] = {}
        self._built = False

    def add(self, rule: DependencyRule) -> Self:
        if self._built:
            msg = "Cannot add rules after build() was called"
            raise RuntimeError(msg)

        key = (rule.dependent, rule.dependency)
        if (existing := self._rules.get(key)) is not None:
            msg = (
                f"The rules {existing} and {rule} both apply to "
                f"'{rule.dependent}' depending on '{rule.dependency}'"
            )
            raise RuleConflictError(msg)

        self._rules[key] = rule
        return self

    def add_all(self, rules: Iterable[DependencyRule]) -> Self:
        for rule in rules:
            self.add(rule)
        return self

    def build(self) -> HierarchicalMapJudge:
        self._built = True

        roots: dict[str, _MutableNode] = {}
        wildcards: dict[str, Severity] = {}
        for rule in self._rules.values():
            if rule.is_wildcard:
                wildcards[rule.dependency] = rule.severity
                continue
            node = roots.setdefault(rule.dependency, _MutableNode())
            for segment in rule.dependent.split(_SEPARATOR):
                node = node.children.setdefault(segment, _MutableNode())
            node.severity = rule.severity

        indexes = {
            dependency: _DependentIndex(
                root=roots[dependency].freeze() if dependency in roots else _Node(),
                wildcard=wildcards.get(dependency),
            )
            for dependency in roots.keys() | wildcards.keys()
        }
        logger.debug(
            "Built judge from %d rules covering %d dependencies",
            len(self._rules),
            len(indexes),
        )
        return HierarchicalMapJudge(indexes, tuple(self._rules.values()))
