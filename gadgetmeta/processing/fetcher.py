"""
SpecFetcher — Retrieves gadget spec documents

Supports:
- http:// and https:// via urllib (timeout and size limit from config)
- file:// URLs and plain filesystem paths, only when fetch.allow_files
  is set (request URLs come from clients)

Fetched documents are cached in memory, keyed by an xxhash digest of
the URL, for fetch.cache_ttl seconds. Expired entries are dropped on
each insert and the cache holds at most fetch.cache_max_entries
documents, evicting the oldest. A context with ignore_cache set
bypasses the cache and refreshes the entry.
"""

import threading
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse, unquote

import structlog
import xxhash

from ..config import FetchConfig
from ..errors import SpecFetchError


logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    """One cached spec document."""
    url: str
    text: str
    fetched_at: float

    def expired(self, ttl: float, now: float) -> bool:
        return now - self.fetched_at >= ttl


class SpecFetcher:
    """
    Fetches spec documents with an in-memory TTL cache.

    Thread-safe. Concurrent misses for the same URL may fetch twice;
    the last writer wins.
    """

    def __init__(self, config: Optional[FetchConfig] = None):
        self._config = config or FetchConfig()
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def fetch(self, url: str, ignore_cache: bool = False) -> str:
        """
        Get the document at url.

        Args:
            url: http(s) URL, file URL or filesystem path
            ignore_cache: Skip the cache and refetch

        Returns:
            Document text

        Raises:
            SpecFetchError: If the document cannot be retrieved
        """
        key = _cache_key(url)
        ttl = self._config.cache_ttl

        if ttl > 0 and not ignore_cache:
            with self._lock:
                entry = self._cache.get(key)
            if entry is not None and not entry.expired(ttl, time.monotonic()):
                return entry.text

        text = self._retrieve(url)

        if ttl > 0:
            self._store(key, CacheEntry(url=url, text=text, fetched_at=time.monotonic()))

        return text

    def _store(self, key: str, entry: CacheEntry) -> None:
        ttl = self._config.cache_ttl
        with self._lock:
            expired = [k for k, e in self._cache.items() if e.expired(ttl, entry.fetched_at)]
            for k in expired:
                del self._cache[k]

            # Re-insert so dict order stays oldest-first
            self._cache.pop(key, None)
            while len(self._cache) >= self._config.cache_max_entries:
                del self._cache[next(iter(self._cache))]
            self._cache[key] = entry

    def _retrieve(self, url: str) -> str:
        scheme = urlparse(url).scheme.lower()

        if scheme in ("http", "https"):
            return self._retrieve_http(url)
        if scheme == "file" or scheme == "" or len(scheme) == 1:
            # Single-letter schemes are Windows drive letters
            if not self._config.allow_files:
                raise SpecFetchError(url, "unsupported scheme 'file'")
            return self._retrieve_file(url)

        raise SpecFetchError(url, f"unsupported scheme '{scheme}'")

    def _retrieve_http(self, url: str) -> str:
        logger.debug("spec_fetch", url=url)
        request = urllib.request.Request(url, headers={"Accept": "application/xml, text/xml, */*"})

        try:
            with urllib.request.urlopen(request, timeout=self._config.timeout) as response:
                data = response.read(self._config.max_bytes + 1)
                charset = response.headers.get_content_charset() or "utf-8"
        except urllib.error.HTTPError as e:
            raise SpecFetchError(url, f"HTTP {e.code} {e.reason}", status=e.code) from e
        except urllib.error.URLError as e:
            raise SpecFetchError(url, str(e.reason)) from e
        except OSError as e:
            # Socket timeouts surface as OSError subclasses
            raise SpecFetchError(url, str(e) or type(e).__name__) from e

        return self._decode(url, data, charset)

    def _retrieve_file(self, url: str) -> str:
        parsed = urlparse(url)
        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)

        try:
            with open(path, "rb") as f:
                data = f.read(self._config.max_bytes + 1)
        except OSError as e:
            raise SpecFetchError(url, e.strerror or str(e)) from e

        return self._decode(url, data, "utf-8")

    def _decode(self, url: str, data: bytes, charset: str) -> str:
        if len(data) > self._config.max_bytes:
            raise SpecFetchError(url, f"spec exceeds {self._config.max_bytes} bytes")
        try:
            return data.decode(charset)
        except (UnicodeDecodeError, LookupError) as e:
            raise SpecFetchError(url, f"cannot decode spec as {charset}") from e

    def invalidate(self, url: Optional[str] = None) -> int:
        """
        Drop cached documents.

        Args:
            url: Drop only this URL. If None, drop everything.

        Returns:
            Number of entries removed
        """
        with self._lock:
            if url is None:
                count = len(self._cache)
                self._cache.clear()
                return count
            return 1 if self._cache.pop(_cache_key(url), None) is not None else 0

    def cached_count(self) -> int:
        """Number of documents currently cached (expired ones included)."""
        with self._lock:
            return len(self._cache)


def _cache_key(url: str) -> str:
    """Cache key for a URL using xxhash (fast, non-cryptographic)."""
    return xxhash.xxh64(url.encode()).hexdigest()
