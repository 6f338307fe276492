"""
Calculation versions and their registry.

A version is a named, dated, immutable bundle of calculation functions.
Registration is append-only per version id so any persisted result can be
reproduced later from its recorded version.
"""

import logging
import re
import threading
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from .errors import DuplicateVersion, UnknownVersion

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"\d+\.\d+\.\d+(-[0-9A-Za-z.]+)?")


@dataclass(frozen=True)
class Calculation:
    """A calculation function together with its audit formula."""
    fn: Callable
    formula: str
    takes_sequence: bool = False  # fn receives one sequence of values


@dataclass(frozen=True)
class CalculationVersion:
    """Immutable bundle of calculations effective from a given date."""
    version_id: str
    effective_date: date
    description: str
    calculations: Mapping[str, Calculation]
    deprecated: Optional[date] = None

    def __post_init__(self):
        """Validate the version id and freeze the calculation map."""
        if not isinstance(self.version_id, str) or not _VERSION_PATTERN.fullmatch(self.version_id):
            raise ValueError(f"version_id must look like MAJOR.MINOR.PATCH, got {self.version_id!r}")
        if not self.calculations:
            raise ValueError(f"Version {self.version_id} defines no calculations")
        object.__setattr__(self, "calculations", MappingProxyType(dict(self.calculations)))

    def get_calculation(self, name: str) -> Optional[Calculation]:
        return self.calculations.get(name)


class CalculationVersionRegistry:
    """Ordered, append-only collection of calculation versions.

    Writes are serialized by a lock and publish a fresh snapshot, so reads
    never block and never observe a half-applied registration.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._versions: Mapping[str, CalculationVersion] = MappingProxyType({})
        self._current: Optional[str] = None

    def register(self, version: CalculationVersion, make_current: bool = False) -> None:
        """Register a new version.

        The first registered version becomes current when none is set.

        Args:
            version: Version to add
            make_current: Point "current" at this version

        Raises:
            DuplicateVersion: If the version id already exists (registry unchanged)
        """
        with self._lock:
            if version.version_id in self._versions:
                raise DuplicateVersion(version.version_id)
            versions: Dict[str, CalculationVersion] = dict(self._versions)
            versions[version.version_id] = version
            self._versions = MappingProxyType(versions)
            if make_current or self._current is None:
                self._current = version.version_id
        logger.info(
            "Registered calculation version %s (effective %s, %d calculations)",
            version.version_id,
            version.effective_date.isoformat(),
            len(version.calculations),
        )

    def get(self, version_id: Optional[str] = None) -> CalculationVersion:
        """Return the named version, or the current one when no id is given.

        Raises:
            UnknownVersion: If the id is not registered or no version is current
        """
        versions = self._versions
        key = version_id if version_id is not None else self._current
        if key is None or key not in versions:
            raise UnknownVersion(key)
        return versions[key]

    def set_current(self, version_id: str) -> None:
        """Point "current" at a registered version.

        Raises:
            UnknownVersion: If the id is not registered
        """
        with self._lock:
            if version_id not in self._versions:
                raise UnknownVersion(version_id)
            previous = self._current
            self._current = version_id
        logger.info("Current calculation version changed from %s to %s", previous, version_id)

    @property
    def current_version_id(self) -> Optional[str]:
        return self._current

    def versions(self) -> List[CalculationVersion]:
        """Registered versions in registration order."""
        return list(self._versions.values())

    def __contains__(self, version_id: str) -> bool:
        return version_id in self._versions

    def __len__(self) -> int:
        return len(self._versions)
