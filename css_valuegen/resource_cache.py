"""
Disk-backed memoized fetch for remote resources.

Benefits:
- Speed: drafts are large and the generator is run once per family
- Reproducibility: a cached draft is trusted until someone deletes it, so
  reruns see exactly the same input
- Manual override: edit or delete a cached file to pin or refresh a resource

There is no expiry and no revalidation. Fetches happen one at a time.
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

import requests

from .exceptions import FetchError
from .logger import get_module_logger

logger = get_module_logger("resource_cache")

DEFAULT_TIMEOUT = 60


class ResourceCache:
    """
    Two-level cache: process memory, then files in a cache directory.

    Files are named by a caller-chosen key (e.g. "align-3.txt", "index.json").
    Keys ending in .json are parsed; everything else is returned as text.
    """

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]] = None,
        session: Optional[requests.Session] = None,
        github_token: Optional[str] = None
    ):
        """
        Initialize the resource cache.

        Args:
            cache_dir: Directory to store cache files. Defaults to ./.caches/
            session: HTTP session (injectable for tests)
            github_token: Sent as a bearer token to api.github.com only
        """
        if cache_dir is None:
            cache_dir = Path.cwd() / ".caches"

        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.session = session or requests.Session()
        self.github_token = github_token
        self._memory: dict[str, str] = {}

        logger.debug(f"Resource cache initialized at: {self.cache_dir}")

    def _path(self, key: str) -> Path:
        # Keys are flat file names; keep anything path-like out of them
        safe_key = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return self.cache_dir / safe_key

    def _download(self, url: str) -> str:
        headers = {}
        if self.github_token and url.startswith("https://api.github.com/"):
            headers["Authorization"] = f"Bearer {self.github_token}"

        logger.info(f"Fetching {url}...")
        try:
            response = self.session.get(url, headers=headers, timeout=DEFAULT_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(
                f"Failed to fetch {url}: {e}",
                url=url,
                details={"error": str(e)}
            ) from e
        return response.text

    def fetch_text(self, url: str, key: str) -> str:
        """
        Return the raw text for `key`, fetching `url` on a full miss.

        Order: memory → cache file → network. The cache file is rewritten on
        every non-memory hit so the stored form is always the normalized text.
        """
        text = self._memory.get(key)
        if text is not None:
            return text

        cache_file = self._path(key)
        try:
            text = cache_file.read_text(encoding="utf-8")
            logger.debug(f"Cache hit for key: {key}")
        except OSError:
            logger.debug(f"Cache miss for key: {key}")
            text = self._download(url)

        cache_file.write_text(text, encoding="utf-8")
        self._memory[key] = text
        return text

    def fetch(self, url: str, key: str) -> Any:
        """Like fetch_text, but parses JSON when the key ends in .json."""
        text = self.fetch_text(url, key)
        if not key.endswith(".json"):
            return text
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FetchError(
                f"Cached resource {key} from {url} is not valid JSON: {e}. "
                f"Delete {self._path(key)} to fetch it again",
                url=url,
                details={"key": key}
            ) from e

    def exists(self, key: str) -> bool:
        """Check if a resource is cached (in memory or on disk)."""
        return key in self._memory or self._path(key).exists()

    def delete(self, key: str) -> bool:
        """Invalidate one cached resource."""
        self._memory.pop(key, None)
        cache_file = self._path(key)
        if cache_file.exists():
            cache_file.unlink()
            logger.info(f"Deleted cache for key: {key}")
            return True
        return False

    def clear(self) -> int:
        """Clear all cached resources. Returns count of deleted files."""
        self._memory.clear()
        count = 0
        for cache_file in self.cache_dir.iterdir():
            if cache_file.is_file():
                cache_file.unlink()
                count += 1
        logger.info(f"Cleared {count} cached resources")
        return count

    def list_cached(self) -> list[dict]:
        """List all cached resources on disk."""
        return [
            {"key": cache_file.name, "bytes": cache_file.stat().st_size, "file": str(cache_file)}
            for cache_file in sorted(self.cache_dir.iterdir())
            if cache_file.is_file()
        ]
