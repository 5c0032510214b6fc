"""
Utility functions for gleaner

Provides logging setup, property-table helpers and the exception hierarchy
"""

import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional


# ═══════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging for gleaner"""
    level = getattr(logging, log_level.upper())

    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def get_logger(name: str) -> logging.Logger:
    """Get logger instance for module"""
    return logging.getLogger(name)


# ═══════════════════════════════════════════════════════════════════
# PROPERTY TABLES
# ═══════════════════════════════════════════════════════════════════

def prefixed_keys(properties: Mapping[str, str], prefix: str) -> list[str]:
    """Return the keys starting with *prefix*, sorted lexicographically."""
    return sorted(str(key) for key in properties if str(key).startswith(prefix))


def parse_assignments(assignments: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings (as given to ``-D``) into a dict.

    Only the first ``=`` separates key from value. A bare ``KEY`` maps to "".
    """
    result: dict[str, str] = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not key:
            raise ConfigurationError(f"Invalid property assignment: {item}")
        result[key] = value if sep else ""
    return result


# ═══════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════

class GleanerError(Exception):
    """Base exception for gleaner"""
    pass


class ConfigurationError(GleanerError):
    """Malformed filter or version-override configuration"""
    pass


class ResolutionFailure(GleanerError):
    """An artifact could not be resolved"""
    pass


class ArtifactNotFound(ResolutionFailure):
    """Repository has no file for the requested coordinate"""
    pass


class VersionRangeUnsupported(ResolutionFailure):
    """Version ranges are never resolved"""

    def __init__(self, coordinate) -> None:
        super().__init__(f"Version ranges are not supported: {coordinate}")
        self.coordinate = coordinate


class PlanComputationError(GleanerError):
    """The host failed while computing an execution plan"""
    pass


class BuildDescriptionError(GleanerError):
    """Malformed build description file"""
    pass
