"""Maven repository package.

This package provides transitive artifact resolution against a Maven-layout
repository:
- coordinates.py: coordinate value type and artifact/POM URL mapping
- pom.py: typed POM model, dependency extraction, version placeholder handling
- exclusions.py: run-wide exclusion table
- resolver.py: memoized depth-first traversal that downloads artifacts
"""

from .coordinates import Coordinate, InputError, to_artifact_url, to_metadata_url  # noqa: F401
from .pom import (  # noqa: F401
    DependencyDeclaration,
    MetadataParseError,
    PomDocument,
    PomParseResult,
    VersionResolutionWarning,
    load_pom_document,
    parse_pom,
)
from .exclusions import ExclusionTable  # noqa: F401
from .resolver import ResolutionContext, ResolutionStats, Resolver, ResolverConfig  # noqa: F401

__all__ = [
    "Coordinate",
    "InputError",
    "to_artifact_url",
    "to_metadata_url",
    "DependencyDeclaration",
    "MetadataParseError",
    "PomDocument",
    "PomParseResult",
    "VersionResolutionWarning",
    "load_pom_document",
    "parse_pom",
    "ExclusionTable",
    "ResolutionContext",
    "ResolutionStats",
    "Resolver",
    "ResolverConfig",
]
