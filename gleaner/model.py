"""Build-graph value objects.

Coordinates identify artifacts; the remaining types describe what the host
build engine hands to the driver: modules with their parents and declared
dependencies, plugins, and the executions of a computed plan.
"""

from __future__ import annotations

from dataclasses import dataclass, field

SYSTEM_VERSION = "SYSTEM"

# type -> (extension, classifier)
ARTIFACT_TYPES: dict[str, tuple[str, str]] = {
    "jar": ("jar", ""),
    "pom": ("pom", ""),
    "maven-plugin": ("jar", ""),
    "ejb": ("jar", ""),
    "ejb-client": ("jar", "client"),
    "test-jar": ("jar", "tests"),
    "javadoc": ("jar", "javadoc"),
    "java-source": ("jar", "sources"),
    "war": ("war", ""),
    "ear": ("ear", ""),
    "rar": ("rar", ""),
    "par": ("par", ""),
}


def artifact_type(type_name: str | None) -> tuple[str, str]:
    """Map a dependency type to its (extension, classifier) pair."""
    if not type_name:
        return ARTIFACT_TYPES["jar"]
    return ARTIFACT_TYPES.get(type_name, (type_name, ""))


@dataclass(frozen=True)
class Coordinate:
    """Artifact identity: group, artifact, extension, classifier, version request."""

    group_id: str
    artifact_id: str
    extension: str = "jar"
    classifier: str = ""
    version: str = ""

    @classmethod
    def of(
        cls,
        group_id: str,
        artifact_id: str,
        version: str | None,
        type_name: str | None = None,
        classifier: str | None = None,
    ) -> Coordinate:
        """Build a coordinate from a declaration's type; an explicit classifier wins."""
        extension, default_classifier = artifact_type(type_name)
        return cls(
            group_id=group_id,
            artifact_id=artifact_id,
            extension=extension,
            classifier=classifier or default_classifier,
            version=version or "",
        )

    @property
    def canonical_id(self) -> str:
        # classifier is not part of the id
        return f"{self.group_id}:{self.artifact_id}:{self.extension}:{self.version}"

    @property
    def is_version_range(self) -> bool:
        return self.version.startswith(("[", "("))

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


@dataclass(frozen=True)
class Location:
    """Declaration site of a model element."""

    source: str | None = None
    line: int = -1


@dataclass
class Parent:
    group_id: str
    artifact_id: str
    version: str
    location: Location | None = None

    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id, self.artifact_id, "pom", "", self.version)


@dataclass
class DependencyDecl:
    """A ``<dependency>`` element of a module or plugin."""

    group_id: str
    artifact_id: str
    version: str | None = None
    type: str = "jar"
    classifier: str = ""
    scope: str | None = "compile"
    location: Location | None = None

    def coordinate(self) -> Coordinate:
        return Coordinate.of(
            self.group_id, self.artifact_id, self.version, self.type, self.classifier
        )


@dataclass
class Plugin:
    group_id: str
    artifact_id: str
    version: str | None = None
    dependencies: list[DependencyDecl] = field(default_factory=list)
    location: Location | None = None

    def coordinate(self) -> Coordinate:
        return Coordinate.of(self.group_id, self.artifact_id, self.version, "maven-plugin")


@dataclass
class MojoDescriptor:
    """What a plugin says about one of its goals."""

    goal: str
    group_id: str
    artifact_id: str
    version: str | None = None
    phase: str | None = None
    dependency_resolution_required: str | None = None
    placeholder: bool = False


@dataclass
class MojoExecution:
    plugin: Plugin
    goal: str
    execution_id: str
    lifecycle_phase: str | None
    mojo_descriptor: MojoDescriptor

    @property
    def artifact_id(self) -> str:
        return self.plugin.artifact_id


@dataclass
class ExecutionPlan:
    executions: list[MojoExecution] = field(default_factory=list)


@dataclass
class Module:
    """A module of the in-progress build."""

    group_id: str
    artifact_id: str
    version: str
    packaging: str = "jar"
    parent: Parent | None = None
    dependencies: list[DependencyDecl] = field(default_factory=list)
    managed_imports: list[DependencyDecl] = field(default_factory=list)
    plugins: list[Plugin] = field(default_factory=list)
    location: Location | None = None
