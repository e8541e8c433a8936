"""Transitive artifact resolution over POM metadata.

The traversal is depth-first and single-threaded. It runs on an explicit
work stack rather than recursion, visiting coordinates in the same order a
recursive walk would: a node's children are dispatched in document order and
each child's subtree completes before its next sibling starts.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Set, Tuple

from constants import Constants, ExclusionKeyMode
from common.artifact_fetcher import ArtifactFetcher, DownloadOutcome, file_name_from_url
from common.http_client import FetchError
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from .coordinates import Coordinate, to_artifact_url, to_metadata_url
from .exclusions import ExclusionTable
from .pom import TOTAL_EXCLUSION, MetadataParseError, parse_pom

logger = logging.getLogger(__name__)


@dataclass
class ResolverConfig:
    """Configuration for a resolution run."""

    base_url: str = Constants.MAVEN_BASE_URL
    output_dir: str = Constants.DEFAULT_LIB_DIR
    pom_dir: str = Constants.DEFAULT_POM_DIR
    artifact_extension: str = Constants.ARTIFACT_EXTENSION
    metadata_extension: str = Constants.METADATA_EXTENSION
    skipped_scopes: Tuple[str, ...] = Constants.SKIPPED_SCOPES
    parent_version_placeholder: str = Constants.PARENT_VERSION_PLACEHOLDER
    exclusion_key_mode: ExclusionKeyMode = Constants.DEFAULT_EXCLUSION_KEY_MODE
    max_depth: Optional[int] = None
    timeout: float = Constants.REQUEST_TIMEOUT


@dataclass
class ResolutionStats:
    """Counters collected over a run."""

    visited: int = 0
    artifacts_downloaded: int = 0
    artifacts_existing: int = 0
    artifact_failures: int = 0
    metadata_failures: int = 0
    excluded: int = 0
    dropped: int = 0
    depth_limited: int = 0

    @property
    def failures(self) -> int:
        return self.artifact_failures + self.metadata_failures


@dataclass
class ResolutionContext:
    """State shared by every step of one resolution run."""

    exclusions: ExclusionTable = field(default_factory=ExclusionTable)
    visited: Set[str] = field(default_factory=set)
    stats: ResolutionStats = field(default_factory=ResolutionStats)

    def is_visited(self, coord: Coordinate) -> bool:
        return coord.canonical in self.visited

    def mark_visited(self, coord: Coordinate) -> bool:
        """Record ``coord`` as visited; False if it already was."""
        if coord.canonical in self.visited:
            return False
        self.visited.add(coord.canonical)
        self.stats.visited += 1
        return True


# (coordinate, parent it was declared by, depth below the seed)
_WorkItem = Tuple[Coordinate, Optional[Coordinate], int]


class Resolver:
    """Fetches a coordinate's artifact and walks its POM dependencies.

    Args:
        config: Run configuration.
        fetcher: Object providing ``download(url, directory)``,
            ``fetch(url, context=...)`` and ``materialize(data, path)``.
            Defaults to an ``ArtifactFetcher`` using ``config.timeout``.
        context: Shared traversal state; a fresh one is created when omitted.
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        fetcher: Optional[Any] = None,
        context: Optional[ResolutionContext] = None,
    ):
        self.config = config or ResolverConfig()
        self.fetcher = fetcher or ArtifactFetcher(timeout=self.config.timeout)
        self.context = context or ResolutionContext(
            exclusions=ExclusionTable(self.config.exclusion_key_mode)
        )

    @property
    def stats(self) -> ResolutionStats:
        return self.context.stats

    def resolve_all(self, seeds: Iterable[Coordinate]) -> ResolutionStats:
        """Resolve each seed in order, sharing one context across all of them."""
        for seed in seeds:
            self.resolve(seed)
        return self.stats

    def resolve(self, coord: Coordinate) -> None:
        """Fetch ``coord`` and everything reachable from it.

        Coordinates already visited in this run are skipped without error.
        """
        stack: List[_WorkItem] = [(coord, None, 0)]
        while stack:
            current, parent, depth = stack.pop()
            if parent is not None and self._excluded(parent, current):
                continue
            if self.context.is_visited(current):
                logger.debug("Dependency already processed: %s", current)
                continue
            if self.config.max_depth is not None and depth > self.config.max_depth:
                logger.warning(
                    "Not descending into %s: depth %d exceeds limit %d",
                    current, depth, self.config.max_depth,
                )
                self.stats.depth_limited += 1
                continue
            self.context.mark_visited(current)
            children = self._process(current)
            for child in reversed(children):
                stack.append((child, current, depth + 1))

    def _excluded(self, parent: Coordinate, child: Coordinate) -> bool:
        rule = self.context.exclusions.matching_rule(parent, child)
        if rule is None:
            return False
        logger.info(
            "Excluding %s (declared by %s, rule %s:%s)", child, parent, rule[0], rule[1]
        )
        self.stats.excluded += 1
        return True

    def _process(self, coord: Coordinate) -> List[Coordinate]:
        """Download one coordinate's artifact and return its child coordinates."""
        self._download_artifact(coord)

        pom_url = to_metadata_url(coord, self.config.base_url, self.config.metadata_extension)
        logger.info("Downloading: %s", safe_url(pom_url))
        try:
            content = self.fetcher.fetch(pom_url, context="pom")
        except FetchError as exc:
            logger.warning("Failed to download POM file for %s: %s", coord, exc)
            self.stats.metadata_failures += 1
            return []

        self._persist_metadata(pom_url, content)

        try:
            result = parse_pom(
                content,
                skipped_scopes=self.config.skipped_scopes,
                placeholder=self.config.parent_version_placeholder,
            )
        except MetadataParseError as exc:
            logger.warning("Failed to parse POM file for %s: %s", coord, exc)
            self.stats.metadata_failures += 1
            return []

        for warning in result.warnings:
            logger.warning("%s: %s [%s]", coord, warning.message, warning.kind)
            if warning.kind != TOTAL_EXCLUSION:
                self.stats.dropped += 1

        self.context.exclusions.merge(result.exclusions)

        children = [decl.coordinate for decl in result.declarations]
        if is_debug_enabled(logger):
            for decl in result.declarations:
                logger.debug(
                    "Declared dependency",
                    extra=extra_context(
                        event="decision",
                        component="resolver",
                        action="declare",
                        target=decl.coordinate.canonical,
                        parent=coord.canonical,
                        scope=decl.scope or "compile",
                        exclusions=[f"{g}:{a}" for g, a in decl.exclusions] or None,
                    )
                )
            logger.debug(
                "POM expanded",
                extra=extra_context(
                    event="function_exit",
                    component="resolver",
                    action="expand",
                    target=coord.canonical,
                    children=len(children),
                    dropped=len(result.warnings),
                )
            )
        return children

    def _download_artifact(self, coord: Coordinate) -> None:
        url = to_artifact_url(coord, self.config.base_url, self.config.artifact_extension)
        try:
            outcome = self.fetcher.download(url, self.config.output_dir)
        except FetchError as exc:
            logger.warning("Failed to download file: %s", exc)
            self.stats.artifact_failures += 1
            return
        except OSError as exc:
            logger.error("Failed to write %s: %s", file_name_from_url(url), exc)
            self.stats.artifact_failures += 1
            return
        if outcome == DownloadOutcome.EXISTS:
            self.stats.artifacts_existing += 1
        else:
            self.stats.artifacts_downloaded += 1

    def _persist_metadata(self, pom_url: str, content: bytes) -> None:
        """Keep a copy of the raw POM in the audit directory."""
        destination = os.path.join(self.config.pom_dir, file_name_from_url(pom_url))
        try:
            self.fetcher.materialize(content, destination)
        except OSError as exc:
            logger.warning("Could not save POM copy to %s: %s", destination, exc)
