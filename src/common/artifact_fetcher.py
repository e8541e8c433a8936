"""Idempotent URL-to-file materialization for repository artifacts."""
from __future__ import annotations

import logging
import os
import tempfile
from enum import Enum
from typing import Optional

from common import http_client
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class DownloadOutcome(Enum):
    """Result of a download request that did not fail."""
    DOWNLOADED = "downloaded"
    EXISTS = "exists"


def file_name_from_url(url: str) -> str:
    """Return the last path component of a URL."""
    return url.rstrip("/").rsplit("/", 1)[-1]


class ArtifactFetcher:
    """Fetches repository files over HTTP and writes them to disk.

    A destination that already exists is treated as a completed download;
    there is no staleness check.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._timeout = timeout

    def fetch(self, url: str, *, context: str = "artifact") -> bytes:
        """Return the body at ``url``.

        Raises:
            FetchError: When the transfer fails or the status is not 200.
        """
        return http_client.get_bytes(url, context=context, timeout=self._timeout)

    @staticmethod
    def materialize(data: bytes, destination: str) -> None:
        """Write ``data`` to ``destination`` atomically.

        The bytes land in a temporary sibling first and are renamed into
        place, so a crash never leaves a truncated file at ``destination``.
        """
        directory = os.path.dirname(destination) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".part-")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, destination)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def download(self, url: str, directory: str) -> DownloadOutcome:
        """Download ``url`` into ``directory`` unless the file is already there.

        Raises:
            FetchError: When the remote file cannot be retrieved.
            OSError: When the local file cannot be written.
        """
        file_name = file_name_from_url(url)
        destination = os.path.join(directory, file_name)
        logger.info("Downloading: %s", safe_url(url))
        if os.path.exists(destination):
            logger.info("File already exists: %s", file_name)
            return DownloadOutcome.EXISTS
        with Timer() as timer:
            data = self.fetch(url)
            self.materialize(data, destination)
        if is_debug_enabled(logger):
            logger.debug(
                "Artifact written",
                extra=extra_context(
                    event="download",
                    component="artifact_fetcher",
                    action="materialize",
                    outcome="success",
                    target=destination,
                    size_bytes=len(data),
                    duration_ms=timer.duration_ms(),
                )
            )
        logger.info("Download completed: %s", file_name)
        return DownloadOutcome.DOWNLOADED
