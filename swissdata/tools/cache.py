"""On-disk download cache with a freshness window.

Each URL maps to one file under the cache directory, named after the
percent-encoded URL. A cached file is served while it is younger than the
validity window; otherwise it is downloaded again. Downloads are streamed
to a ``.part`` sibling and renamed into place only once complete, so a
failed transfer never leaves a truncated file at the cache path.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from urllib.parse import quote

import httpx

from swissdata.config.settings import Settings
from swissdata.errors import CacheError, DownloadError

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY = timedelta(hours=24)
_PART_SUFFIX = ".part"


class CacheStore:
    """Fetch-and-persist cache keyed by resource URL.

    The HTTP client is owned by the caller; the store never closes it.
    """

    def __init__(
        self,
        client: httpx.Client,
        *,
        cache_dir: str | Path,
        validity: timedelta = DEFAULT_VALIDITY,
        now: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._cache_dir = Path(cache_dir).expanduser()
        self._validity = validity
        self._now = now

    @classmethod
    def from_settings(cls, client: httpx.Client, settings: Settings) -> CacheStore:
        """Build a store rooted at ``settings.cache_root``."""
        return cls(
            client,
            cache_dir=settings.cache_root,
            validity=settings.cache_validity,
        )

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def validity(self) -> timedelta:
        return self._validity

    # -- Paths & freshness ---------------------------------------------------

    def cache_path(self, url: str) -> Path:
        """Cache file for *url*; creates the cache directory if needed."""
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheError(self._cache_dir, f"cannot create cache directory: {exc}") from exc
        return self._cache_dir / quote(url, safe="")

    def is_valid(self, path: str | Path) -> bool:
        """True iff *path* is a regular file modified less than ``validity`` ago."""
        path = Path(path)
        try:
            if not path.is_file():
                return False
            modified = path.stat().st_mtime
        except OSError as exc:
            raise CacheError(path, f"cannot stat cache file: {exc}") from exc
        return modified + self._validity.total_seconds() > self._now()

    # -- Network -------------------------------------------------------------

    def http_get(self, url: str) -> bytes:
        """Uncached GET returning the response body.

        Raises:
            DownloadError: On transport failure or a non-success status.
        """
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DownloadError(url, str(exc)) from exc
        return response.content

    def fetch_or_use_cache(self, url: str) -> Path:
        """Return a fresh local copy of *url*, downloading it when stale or absent.

        Raises:
            DownloadError: On transport failure or a non-success status.
            CacheError: If the file cannot be written.
        """
        path = self.cache_path(url)
        if self.is_valid(path):
            logger.debug("Cache hit for %s at %s", url, path)
            return path

        logger.info("Downloading %s", url)
        part = path.with_name(path.name + _PART_SUFFIX)
        digest = hashlib.sha256()
        size = 0
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with part.open("wb") as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
                        digest.update(chunk)
                        size += len(chunk)
            part.replace(path)
        except httpx.HTTPError as exc:
            raise DownloadError(url, str(exc)) from exc
        except OSError as exc:
            raise CacheError(path, f"cannot write cache file: {exc}") from exc
        finally:
            # No-op once the rename has happened.
            part.unlink(missing_ok=True)

        logger.info(
            "Cached %s (%d bytes, sha256:%s) at %s",
            url,
            size,
            digest.hexdigest(),
            path,
        )
        return path
