"""Run-wide exclusion table."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from constants import Constants, ExclusionKeyMode
from .coordinates import Coordinate
from .pom import ExclusionRule


def _unversion(key: str) -> str:
    """Drop the version component from a canonical ``group:artifact:version`` key."""
    parts = key.split(":")
    return ":".join(parts[:2]) if len(parts) >= 3 else key


def _matches(rule: ExclusionRule, coord: Coordinate) -> bool:
    group, artifact = rule
    return (
        (group == Constants.WILDCARD or group == coord.group)
        and (artifact == Constants.WILDCARD or artifact == coord.artifact)
    )


class ExclusionTable:
    """Exclusion rules aggregated from every document visited in a run.

    Rules are indexed by the dependency that declared them. How the index key
    is formed depends on ``mode``:

    - ``versioned``: recorded and looked up as ``group:artifact:version``.
    - ``unversioned``: recorded and looked up as ``group:artifact``.
    - ``legacy``: recorded as ``group:artifact:version`` but looked up as
      ``group:artifact``, so lookups never find a rule.
    """

    def __init__(self, mode: ExclusionKeyMode = ExclusionKeyMode.VERSIONED):
        self.mode = mode
        self._rules: Dict[str, List[ExclusionRule]] = {}

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, key: str) -> bool:
        return key in self._rules

    def _record_key(self, declaring_key: str) -> str:
        if self.mode == ExclusionKeyMode.UNVERSIONED:
            return _unversion(declaring_key)
        return declaring_key

    def _lookup_key(self, parent: Coordinate) -> str:
        if self.mode == ExclusionKeyMode.VERSIONED:
            return parent.canonical
        return parent.unversioned

    def merge(self, table: Mapping[str, Sequence[ExclusionRule]]) -> None:
        """Merge a per-document table keyed by declaring canonical coordinate."""
        for declaring_key, rules in table.items():
            bucket = self._rules.setdefault(self._record_key(declaring_key), [])
            for rule in rules:
                if rule not in bucket:
                    bucket.append(rule)

    def rules_for(self, parent: Coordinate) -> List[ExclusionRule]:
        """Rules that apply to the children of ``parent``."""
        return list(self._rules.get(self._lookup_key(parent), []))

    def matching_rule(self, parent: Coordinate, child: Coordinate) -> Optional[ExclusionRule]:
        """Return the first rule under ``parent`` that excludes ``child``, if any."""
        for rule in self._rules.get(self._lookup_key(parent), ()):
            if _matches(rule, child):
                return rule
        return None

    def is_excluded(self, parent: Coordinate, child: Coordinate) -> bool:
        return self.matching_rule(parent, child) is not None
