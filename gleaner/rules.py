"""Filtering and compat-version rules.

Both tables are read from property keys sharing a prefix. Keys are sorted
before the values are compiled, so rule order is reproducible regardless of
where the properties came from.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping

from gleaner.dependency import Dependency
from gleaner.model import SYSTEM_VERSION
from gleaner.utils import ConfigurationError, prefixed_keys

logger = logging.getLogger(__name__)

FILTER_PREFIX = "gleaner.filter."
VERSION_PREFIX = "gleaner.version."


def _compile(key: str, pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid pattern in property {key}: {pattern} ({exc})") from exc


def _dependency_key(dep: Dependency) -> str:
    return f"{dep.group_id}:{dep.artifact_id}"


class DependencyFilter:
    """Excludes dependencies whose ``group:artifact`` fully matches any pattern."""

    def __init__(self, patterns: list[re.Pattern[str]] | None = None) -> None:
        self._patterns = tuple(patterns or ())

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> DependencyFilter:
        patterns = [
            _compile(key, properties[key])
            for key in prefixed_keys(properties, FILTER_PREFIX)
        ]
        logger.debug("Loaded %d dependency filter(s)", len(patterns))
        return cls(patterns)

    @property
    def patterns(self) -> tuple[re.Pattern[str], ...]:
        return self._patterns

    def is_filtered(self, dep: Dependency) -> bool:
        dep_key = _dependency_key(dep)
        return any(pattern.fullmatch(dep_key) for pattern in self._patterns)


class CompatVersionResolver:
    """Maps ``group:artifact`` patterns to the version to declare in output."""

    def __init__(self, rules: list[tuple[re.Pattern[str], str]] | None = None) -> None:
        self._rules = tuple(rules or ())

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> CompatVersionResolver:
        rules: list[tuple[re.Pattern[str], str]] = []
        for key in prefixed_keys(properties, VERSION_PREFIX):
            value = properties[key]
            parts = value.split("=", 2)
            if len(parts) != 2:
                raise ConfigurationError(f"Invalid property value of {key}: {value}")
            matcher, version = parts
            rules.append((_compile(key, matcher), version))
        logger.debug("Loaded %d compat version rule(s)", len(rules))
        return cls(rules)

    @property
    def rules(self) -> tuple[tuple[re.Pattern[str], str], ...]:
        return self._rules

    def resolve_version_for(self, dep: Dependency) -> str:
        dep_key = _dependency_key(dep)
        for pattern, version in self._rules:
            if pattern.fullmatch(dep_key):
                return version
        return SYSTEM_VERSION
