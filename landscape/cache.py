"""Content cache shared by the logo resolver and the external data collectors.

The cache is a directory of files addressed by key. It only offers ``get``
and ``put``; freshness policies belong to the callers, which store their own
timestamps inside the cached payloads. A single ``Cache`` instance is shared
by reference across all the concurrent tasks of a build: writes go through a
temporary file and an atomic ``os.replace`` so readers never observe a
partially written entry.

Examples
--------
>>> from pathlib import Path
>>> from landscape.cache import Cache
>>> cache = Cache(Path("/tmp/landscape-cache"))
>>> cache.put("github.json", b"{}")
>>> cache.get("github.json")
b'{}'
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class Cache:
    """Directory-backed key/value store for raw bytes.

    Parameters
    ----------
    cache_dir : Path
        Directory holding the cache entries. Created (with parents) when
        missing.

    Raises
    ------
    OSError
        If the cache directory cannot be created.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("Using cache directory %s", self.cache_dir)

    def _path_for(self, key: str) -> Path:
        """Map a cache key to a path inside the cache directory.

        Keys may contain ``/`` to group entries in subdirectories; any other
        unsafe key is stored under its SHA-256 hex digest.
        """
        parts = key.split("/")
        if not key or any(part in ("", ".", "..") for part in parts):
            return self.cache_dir / hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.cache_dir.joinpath(*parts)

    def get(self, key: str) -> bytes | None:
        """Return the bytes stored under ``key`` or ``None`` when absent.

        Parameters
        ----------
        key : str
            Cache key.

        Returns
        -------
        bytes | None
            Stored payload, or ``None`` if nothing has been stored yet.

        Raises
        ------
        OSError
            If the entry exists but cannot be read.
        """
        path = self._path_for(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def put(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``, replacing any previous entry.

        Parameters
        ----------
        key : str
            Cache key.
        data : bytes
            Payload to store.

        Raises
        ------
        OSError
            If the entry cannot be written.
        """
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        write_atomic(path, data)


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` through a temporary file in the same directory.

    Raises
    ------
    OSError
        If the file cannot be written.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


__all__ = ["Cache", "write_atomic"]
