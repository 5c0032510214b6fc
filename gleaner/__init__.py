"""
gleaner - build requirement harvesting

Walks a multi-module build through its host engine, collects every artifact
the build touches and emits them as mvn(...) capability strings.
"""

__version__ = "0.1.0"

from gleaner.dependency import Dependency, ResolutionState, format_capability
from gleaner.driver import Gleaner, GleanerResult
from gleaner.model import Coordinate
from gleaner.registry import CoordinateRegistry
from gleaner.rules import CompatVersionResolver, DependencyFilter
from gleaner.shim import ModelLoadingShim

__all__ = [
    "Coordinate",
    "CompatVersionResolver",
    "CoordinateRegistry",
    "Dependency",
    "DependencyFilter",
    "Gleaner",
    "GleanerResult",
    "ModelLoadingShim",
    "ResolutionState",
    "format_capability",
]
