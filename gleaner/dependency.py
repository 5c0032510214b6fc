"""Dependency records and capability-string formatting.

A record is the single interned entity for one canonical coordinate id. It
accumulates the declaration sites it was found at, carries the outcome of
its one resolution attempt, and renders itself as an ``mvn(...)`` capability
string that native packaging tools match against generated provides.
"""

from __future__ import annotations

import logging
from enum import Enum

from gleaner.model import SYSTEM_VERSION, Coordinate, Location

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "UNKNOWN-location"
UNKNOWN_SOURCE = "UNKNOWN"


class ResolutionState(str, Enum):
    unknown = "unknown"
    resolved = "resolved"
    unresolved = "unresolved"


def format_capability(
    group_id: str,
    artifact_id: str,
    extension: str,
    classifier: str,
    version: str,
    package_version: str | None = None,
    namespace: str | None = None,
) -> str:
    """Render the canonical capability token for an artifact.

    Separator placement must match the provides generator exactly:

    >>> format_capability("x", "y", "jar", "", "SYSTEM")
    'mvn(x:y)'
    >>> format_capability("x", "y", "pom", "", "SYSTEM")
    'mvn(x:y:pom:)'
    >>> format_capability("x", "y", "jar", "tests", "1.0")
    'mvn(x:y::tests:1.0)'
    """
    custom_extension = extension != "jar"
    custom_classifier = classifier != ""
    custom_version = version != SYSTEM_VERSION

    parts: list[str] = []
    if namespace and namespace.strip():
        parts.append(namespace)
        parts.append("-")
    parts.append("mvn(")
    parts.append(group_id)
    parts.append(":")
    parts.append(artifact_id)
    if custom_classifier or custom_extension:
        parts.append(":")
    if custom_extension:
        parts.append(extension)
    if custom_classifier:
        parts.append(":")
        parts.append(classifier)
    if custom_classifier or custom_extension or custom_version:
        parts.append(":")
    if custom_version:
        parts.append(version)
    parts.append(")")
    if package_version is not None:
        parts.append(" = ")
        parts.append(package_version)
    return "".join(parts)


def describe_location(location: Location | None) -> str:
    """Format a declaration site as ``<source> line <n>``."""
    if location is None:
        return UNKNOWN_LOCATION
    source = location.source
    if source is None:
        source = UNKNOWN_SOURCE
    if source.startswith("file://"):
        source = source[len("file://"):]
    return f"{source} line {location.line}"


class Dependency:
    """Interned record for one canonical coordinate id."""

    def __init__(self, coordinate: Coordinate) -> None:
        self.id = coordinate.canonical_id
        self.group_id = coordinate.group_id
        self.artifact_id = coordinate.artifact_id
        self.extension = coordinate.extension
        self.classifier = coordinate.classifier
        self.version = coordinate.version
        # overwritten by every registry lookup
        self.coordinate = coordinate
        self.found_locations: set[str] = set()
        self.state = ResolutionState.unknown
        self.resolved_version = SYSTEM_VERSION

    def __repr__(self) -> str:
        return f"Dependency({self.id!r}, {self.state.value})"

    @property
    def is_strong(self) -> bool:
        return bool(self.found_locations)

    @property
    def is_resolved(self) -> bool:
        return self.state is ResolutionState.resolved

    @property
    def is_unresolved(self) -> bool:
        return self.state is ResolutionState.unresolved

    @property
    def locations(self) -> list[str]:
        return sorted(self.found_locations)

    def found_at(self, location: Location | None) -> None:
        self.found_locations.add(describe_location(location))

    def mark(self, resolved: bool) -> None:
        """Record the outcome of the first resolution attempt; later calls are ignored."""
        if self.state is not ResolutionState.unknown:
            logger.debug("Resolution state of %s already settled as %s", self.id, self.state.value)
            return
        self.state = ResolutionState.resolved if resolved else ResolutionState.unresolved

    def capability(self, namespace: str | None = None) -> str:
        return format_capability(
            self.group_id,
            self.artifact_id,
            self.extension,
            self.classifier,
            self.resolved_version,
            None,
            namespace,
        )
