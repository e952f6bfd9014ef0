"""File-backed TTL cache for dispatcher results.

Each entry lives in its own file named after the md5 digest of the method
name::

    <location>/<md5(method_name)>.cache

The file holds ``{"method": ..., "payload": ...}`` as JSON and its mtime is the
write time.  Reads are lock-free.  Writes take an exclusive ``filelock`` on
``<md5>.cache.lock`` (bounded by ``lock_timeout``), write a temp file and
atomically replace the entry, so readers never observe a partial file.
"""

from __future__ import annotations

import hashlib
import json
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from filelock import FileLock, Timeout

from core.errors import CacheLockTimeout, CacheReadError, CacheWriteError
from core.logging import get_logger

__all__ = [
    "CacheEntry",
    "FileCache",
    "DEFAULT_TTL",
    "DEFAULT_LOCK_TIMEOUT",
]

logger = get_logger("cache")

DEFAULT_TTL = 300  # seconds
DEFAULT_LOCK_TIMEOUT = 10.0  # seconds
CACHE_SUFFIX = ".cache"


@dataclass
class CacheEntry:
    """A live cache entry."""
    key: str
    method: str
    payload: Any
    written_at: float


class FileCache:
    """TTL cache keyed by method name, one file per entry."""

    def __init__(
        self,
        location: Optional[Union[str, Path]] = None,
        ttl: int = DEFAULT_TTL,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        self._location: Optional[Path] = None
        self._ttl = DEFAULT_TTL
        self.lock_timeout = lock_timeout
        self.configure(location, ttl)

    # ------------------------------------------------------------------
    def configure(self, location: Optional[Union[str, Path]], ttl: int) -> None:
        """Set the storage directory and validity window.

        The directory is not checked here; a missing or unwritable directory
        shows up as a CacheWriteError on the first put().
        """
        self.location = location
        self.ttl = ttl

    @property
    def location(self) -> Optional[Path]:
        return self._location

    @location.setter
    def location(self, value: Optional[Union[str, Path]]) -> None:
        self._location = Path(value) if value else None

    @property
    def ttl(self) -> int:
        return self._ttl

    @ttl.setter
    def ttl(self, value: int) -> None:
        self._ttl = int(value)

    @property
    def enabled(self) -> bool:
        return self._location is not None

    # ------------------------------------------------------------------
    @staticmethod
    def key_for(method_name: str) -> str:
        return hashlib.md5(method_name.encode("utf-8")).hexdigest()

    def path_for(self, method_name: str) -> Path:
        if self._location is None:
            raise CacheWriteError("Cache location is not configured")
        return self._location / f"{self.key_for(method_name)}{CACHE_SUFFIX}"

    def _is_fresh(self, mtime: float, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return mtime + self._ttl > now

    # ------------------------------------------------------------------
    def lookup(self, method_name: str) -> Optional[CacheEntry]:
        """Return the live entry for *method_name*, or None if absent/stale.

        Raises:
            CacheReadError: the entry is live but cannot be deserialized.
        """
        if not self.enabled:
            return None
        path = self.path_for(method_name)
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None
        if not self._is_fresh(mtime):
            logger.debug(f"Stale cache entry for '{method_name}' ({path.name})")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                record = json.load(f)
            payload = record["payload"]
        except FileNotFoundError:
            # replaced or removed between stat() and open()
            return None
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise CacheReadError(
                f"Corrupt cache entry for '{method_name}' at {path}: {exc}",
                {"method": method_name, "path": str(path)},
            ) from exc

        return CacheEntry(
            key=path.stem,
            method=record.get("method", method_name),
            payload=payload,
            written_at=mtime,
        )

    def get(self, method_name: str) -> Optional[Any]:
        """Return the cached payload for *method_name*, or None."""
        entry = self.lookup(method_name)
        return entry.payload if entry is not None else None

    def put(self, method_name: str, payload: Any) -> Path:
        """Persist *payload* as the entry for *method_name*.

        Raises:
            CacheLockTimeout: the write lock was not acquired within lock_timeout.
            CacheWriteError: the payload is not serializable or the write failed.
        """
        path = self.path_for(method_name)
        # filelock would create the directory on its own.
        if not path.parent.is_dir():
            raise CacheWriteError(
                f"Cache directory {path.parent} does not exist",
                {"method": method_name, "path": str(path)},
            )
        try:
            serialized = json.dumps({"method": method_name, "payload": payload})
        except (TypeError, ValueError) as exc:
            raise CacheWriteError(
                f"Result of '{method_name}' is not serializable: {exc}",
                {"method": method_name},
            ) from exc
        # Tuples and non-string dict keys serialize but come back changed.
        if json.loads(serialized)["payload"] != payload:
            raise CacheWriteError(
                f"Result of '{method_name}' does not survive a JSON round trip",
                {"method": method_name},
            )

        lock_path = path.with_name(path.name + ".lock")
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            with FileLock(str(lock_path), timeout=self.lock_timeout):
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(serialized)
                    f.flush()
                    os.fsync(f.fileno())
                # Atomic replace on same FS.
                os.replace(tmp_path, path)
        except Timeout as exc:
            raise CacheLockTimeout(
                f"Timed out after {self.lock_timeout}s waiting for cache lock {lock_path}",
                {"method": method_name, "path": str(path)},
            ) from exc
        except OSError as exc:
            raise CacheWriteError(
                f"Could not write cache entry for '{method_name}' at {path}: {exc}",
                {"method": method_name, "path": str(path)},
            ) from exc

        logger.debug(f"Cached '{method_name}' at {path.name}")
        return path

    # ------------------------------------------------------------------
    def info(self) -> Dict[str, Any]:
        """Summarize the entries currently stored in the cache directory."""
        files: List[Dict[str, Any]] = []
        info: Dict[str, Any] = {
            "location": str(self._location) if self._location else None,
            "ttl": self._ttl,
            "files": files,
        }
        if self._location is None or not self._location.is_dir():
            return info

        now = time.time()
        for path in sorted(self._location.glob(f"*{CACHE_SUFFIX}")):
            try:
                mtime = path.stat().st_mtime
                with open(path, "r", encoding="utf-8") as f:
                    record = json.load(f)
                files.append({
                    "name": path.name,
                    "method": record.get("method"),
                    "age_seconds": round(now - mtime, 1),
                    "expired": not self._is_fresh(mtime, now),
                })
            except (OSError, ValueError, AttributeError) as exc:
                logger.debug(f"Failed to parse cache file {path.name}: {exc}")
                files.append({"name": path.name, "error": True})
        return info
