"""Thread-safe coordinate registry.

The driver and the loading shim share one registry. The shim is called back
by the host engine while the driver is waiting on plan computation, so every
mutation goes through a single lock.
"""

from __future__ import annotations

import logging
import threading

from gleaner.dependency import Dependency
from gleaner.model import Coordinate, Location

logger = logging.getLogger(__name__)


class CoordinateRegistry:
    """Interns coordinates into one :class:`Dependency` per canonical id.

    Records are never removed. A lookup always replaces the record's
    coordinate snapshot with the coordinate passed in, even when the record
    already existed.
    """

    def __init__(self) -> None:
        self._deps: dict[str, Dependency] = {}
        self._lock = threading.Lock()

    def lookup(self, coordinate: Coordinate) -> Dependency:
        with self._lock:
            dep = self._deps.get(coordinate.canonical_id)
            if dep is None:
                dep = Dependency(coordinate)
                self._deps[dep.id] = dep
            dep.coordinate = coordinate
            return dep

    def record_location(self, dep: Dependency, location: Location | None) -> None:
        with self._lock:
            dep.found_at(location)

    def mark(self, dep: Dependency, resolved: bool) -> None:
        with self._lock:
            dep.mark(resolved)

    def get(self, canonical_id: str) -> Dependency | None:
        with self._lock:
            return self._deps.get(canonical_id)

    def records(self) -> list[Dependency]:
        """Snapshot of all records ordered by canonical id."""
        with self._lock:
            return [self._deps[key] for key in sorted(self._deps)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._deps)

    def __contains__(self, canonical_id: object) -> bool:
        with self._lock:
            return canonical_id in self._deps

    def summarize(self) -> None:
        for dep in self.records():
            logger.debug("Found dependency: %s", dep.id)
            for location in dep.locations:
                logger.debug("  at %s", location)
