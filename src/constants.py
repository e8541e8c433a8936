"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    EXIT_WARNINGS = 3


class ExclusionKeyMode(Enum):
    """How exclusion rules are keyed when recorded and looked up.

    Args:
        Enum (string): Exclusion key modes supported by the resolver.
    """

    VERSIONED = "versioned"
    UNVERSIONED = "unversioned"
    LEGACY = "legacy"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    MAVEN_BASE_URL = "https://repo1.maven.org/maven2"
    DEFAULT_LIB_DIR = "lib"
    DEFAULT_POM_DIR = "pom"
    ARTIFACT_EXTENSION = "jar"
    METADATA_EXTENSION = "pom"
    SKIPPED_SCOPES = ("test", "import", "provided")
    PARENT_VERSION_PLACEHOLDER = "${project.parent.version}"
    WILDCARD = "*"
    EXCLUSION_KEY_MODES = [mode.value for mode in ExclusionKeyMode]
    DEFAULT_EXCLUSION_KEY_MODE = ExclusionKeyMode.VERSIONED
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "DEPFETCH_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "depfetch/0.1"
    COMMENT_PREFIX = "#"
