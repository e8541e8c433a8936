"""Maven coordinates and repository URL mapping."""
from __future__ import annotations

from dataclasses import dataclass

from constants import Constants


class InputError(ValueError):
    """Raised for malformed or unreadable seed input."""


@dataclass(frozen=True)
class Coordinate:
    """A single artifact version, identified by group, artifact and version."""
    group: str
    artifact: str
    version: str

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        """Parse ``group:artifact:version``.

        Raises:
            InputError: Unless the text splits into exactly three non-empty fields.
        """
        fields = [field.strip() for field in text.strip().split(":")]
        if len(fields) != 3 or not all(fields):
            raise InputError(
                f"Invalid coordinate '{text.strip()}'. Expected 'groupId:artifactId:version'."
            )
        return cls(*fields)

    @property
    def canonical(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"

    @property
    def unversioned(self) -> str:
        return f"{self.group}:{self.artifact}"

    def __str__(self) -> str:
        return self.canonical


def _artifact_base_url(coord: Coordinate, base_url: str) -> str:
    """Construct the repository URL of a coordinate without extension."""
    group_path = coord.group.replace(".", "/")
    base = base_url.rstrip("/")
    return f"{base}/{group_path}/{coord.artifact}/{coord.version}/{coord.artifact}-{coord.version}"


def to_artifact_url(
    coord: Coordinate,
    base_url: str = Constants.MAVEN_BASE_URL,
    extension: str = Constants.ARTIFACT_EXTENSION,
) -> str:
    """Construct the binary artifact URL for given Maven coordinates.

    Args:
        coord: Coordinate to map
        base_url: Repository root
        extension: Artifact file extension

    Returns:
        Full artifact URL string, e.g.
        https://repo1.maven.org/maven2/org/slf4j/slf4j-api/2.0.9/slf4j-api-2.0.9.jar
    """
    return f"{_artifact_base_url(coord, base_url)}.{extension}"


def to_metadata_url(
    coord: Coordinate,
    base_url: str = Constants.MAVEN_BASE_URL,
    extension: str = Constants.METADATA_EXTENSION,
) -> str:
    """Construct the metadata document (POM) URL for given Maven coordinates."""
    return f"{_artifact_base_url(coord, base_url)}.{extension}"
