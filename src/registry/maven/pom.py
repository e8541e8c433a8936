"""POM parsing into a typed model and extraction of child dependencies.

A document is parsed once into ``PomDocument``; the traversal only ever
looks at ``PomDocument.dependencies`` (direct declarations) and never at the
declarations held under ``dependencyManagement``.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from .coordinates import Coordinate

logger = logging.getLogger(__name__)

ExclusionRule = Tuple[str, str]

MISSING_COORDINATE = "missing-coordinate"
MISSING_VERSION = "missing-version"
BLANK_VERSION = "blank-version"
UNRESOLVED_VERSION = "unresolved-version"
TOTAL_EXCLUSION = "total-exclusion"


class MetadataParseError(ValueError):
    """Raised when a metadata document is not well-formed XML."""


@dataclass(frozen=True)
class PomExclusion:
    group: Optional[str]
    artifact: Optional[str]


@dataclass
class PomDependency:
    """A ``<dependency>`` element as written, before any resolution."""
    group: Optional[str]
    artifact: Optional[str]
    version: Optional[str]  # None when the element is absent, "" when blank
    scope: Optional[str] = None
    exclusions: List[PomExclusion] = field(default_factory=list)


@dataclass
class PomParent:
    group: Optional[str]
    artifact: Optional[str]
    version: Optional[str]


@dataclass
class PomDocument:
    """Typed view of the parts of a POM that drive resolution."""
    parents: List[PomParent] = field(default_factory=list)
    dependencies: List[PomDependency] = field(default_factory=list)
    managed_dependencies: List[PomDependency] = field(default_factory=list)

    @property
    def inherited_version(self) -> Optional[str]:
        """Version of the single declared parent, if exactly one exists."""
        if len(self.parents) != 1:
            return None
        version = self.parents[0].version
        return version if version else None


@dataclass(frozen=True)
class VersionResolutionWarning:
    """A declaration dropped from the candidate list, with the reason."""
    kind: str
    group: Optional[str]
    artifact: Optional[str]
    message: str


@dataclass
class DependencyDeclaration:
    """A resolved child reference emitted by the parser."""
    coordinate: Coordinate
    scope: Optional[str] = None
    exclusions: List[ExclusionRule] = field(default_factory=list)


@dataclass
class PomParseResult:
    declarations: List[DependencyDeclaration] = field(default_factory=list)
    exclusions: Dict[str, List[ExclusionRule]] = field(default_factory=dict)
    warnings: List[VersionResolutionWarning] = field(default_factory=list)


def _local_name(tag: str) -> str:
    """Strip any ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _children(elem: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in elem if _local_name(child.tag) == name]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    found = _children(elem, name)
    return found[0] if found else None


def _child_text(elem: ET.Element, name: str) -> Optional[str]:
    """Return stripped text of a direct child, "" when empty, None when absent."""
    node = _child(elem, name)
    if node is None:
        return None
    return (node.text or "").strip()


def _read_dependency(elem: ET.Element) -> PomDependency:
    exclusions: List[PomExclusion] = []
    exclusions_elem = _child(elem, "exclusions")
    if exclusions_elem is not None:
        for excl in _children(exclusions_elem, "exclusion"):
            exclusions.append(
                PomExclusion(_child_text(excl, "groupId"), _child_text(excl, "artifactId"))
            )
    return PomDependency(
        group=_child_text(elem, "groupId"),
        artifact=_child_text(elem, "artifactId"),
        version=_child_text(elem, "version"),
        scope=_child_text(elem, "scope"),
        exclusions=exclusions,
    )


def _read_dependency_list(container: Optional[ET.Element]) -> List[PomDependency]:
    if container is None:
        return []
    deps: List[PomDependency] = []
    for dependencies in _children(container, "dependencies"):
        for dep in _children(dependencies, "dependency"):
            deps.append(_read_dependency(dep))
    return deps


def load_pom_document(content: bytes) -> PomDocument:
    """Parse raw POM bytes into a ``PomDocument``.

    Only ``project/parent``, ``project/dependencies`` and
    ``project/dependencyManagement/dependencies`` are read. Dependencies
    declared inside profiles or plugin configuration are not part of the
    model.

    Raises:
        MetadataParseError: If the content is not well-formed XML.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise MetadataParseError(f"Malformed POM: {exc}") from exc

    parents = [
        PomParent(
            group=_child_text(p, "groupId"),
            artifact=_child_text(p, "artifactId"),
            version=_child_text(p, "version"),
        )
        for p in _children(root, "parent")
    ]
    return PomDocument(
        parents=parents,
        dependencies=_read_dependency_list(root),
        managed_dependencies=_read_dependency_list(_child(root, "dependencyManagement")),
    )


def _resolve_version(
    dep: PomDependency,
    inherited_version: Optional[str],
    placeholder: str,
) -> Tuple[Optional[str], Optional[VersionResolutionWarning]]:
    """Return (version, None) or (None, warning) for one declaration."""
    label = f"{dep.group}:{dep.artifact}"
    if dep.version is None:
        return None, VersionResolutionWarning(
            MISSING_VERSION, dep.group, dep.artifact, f"No version specified for {label}"
        )
    if dep.version == "":
        return None, VersionResolutionWarning(
            BLANK_VERSION, dep.group, dep.artifact, f"Blank version for {label}"
        )
    if dep.version == placeholder:
        if inherited_version is None:
            return None, VersionResolutionWarning(
                UNRESOLVED_VERSION,
                dep.group,
                dep.artifact,
                f"Cannot resolve {placeholder} for {label}: no parent version",
            )
        return inherited_version, None
    return dep.version, None


def _rules_from(dep: PomDependency) -> List[ExclusionRule]:
    rules: List[ExclusionRule] = []
    for excl in dep.exclusions:
        if not excl.group or not excl.artifact:
            logger.warning(
                "Ignoring incomplete exclusion under %s:%s", dep.group, dep.artifact
            )
            continue
        rules.append((excl.group, excl.artifact))
    return rules


def extract_dependencies(
    document: PomDocument,
    *,
    skipped_scopes: Iterable[str] = Constants.SKIPPED_SCOPES,
    placeholder: str = Constants.PARENT_VERSION_PLACEHOLDER,
) -> PomParseResult:
    """Turn the direct dependencies of a document into child declarations.

    Declarations whose scope is skipped are discarded silently. Declarations
    without a usable version are discarded with a recorded warning.
    Exclusions are indexed by the declaring dependency's own canonical
    coordinate (``group:artifact:resolved-version``).
    """
    skipped = {scope.lower() for scope in skipped_scopes}
    inherited = document.inherited_version
    result = PomParseResult()

    for dep in document.dependencies:
        if not dep.group or not dep.artifact:
            result.warnings.append(VersionResolutionWarning(
                MISSING_COORDINATE,
                dep.group,
                dep.artifact,
                "Dependency without groupId or artifactId",
            ))
            continue
        if dep.scope and dep.scope.lower() in skipped:
            if is_debug_enabled(logger):
                logger.debug(
                    "Skipping scoped dependency",
                    extra=extra_context(
                        event="decision", component="pom", action="scope_filter",
                        outcome="skipped", target=f"{dep.group}:{dep.artifact}", scope=dep.scope
                    )
                )
            continue

        version, warning = _resolve_version(dep, inherited, placeholder)
        if warning is not None:
            result.warnings.append(warning)
            continue

        coord = Coordinate(dep.group, dep.artifact, version)
        rules = _rules_from(dep)
        if rules:
            result.exclusions.setdefault(coord.canonical, []).extend(rules)
            if (Constants.WILDCARD, Constants.WILDCARD) in rules:
                result.warnings.append(VersionResolutionWarning(
                    TOTAL_EXCLUSION,
                    dep.group,
                    dep.artifact,
                    f"{coord.canonical} excludes all of its transitive dependencies",
                ))
        result.declarations.append(DependencyDeclaration(coord, dep.scope, rules))

    return result


def parse_pom(
    content: bytes,
    *,
    skipped_scopes: Iterable[str] = Constants.SKIPPED_SCOPES,
    placeholder: str = Constants.PARENT_VERSION_PLACEHOLDER,
) -> PomParseResult:
    """Parse POM bytes into child declarations and an exclusion table.

    Raises:
        MetadataParseError: If the content is not well-formed XML.
    """
    document = load_pom_document(content)
    return extract_dependencies(document, skipped_scopes=skipped_scopes, placeholder=placeholder)
