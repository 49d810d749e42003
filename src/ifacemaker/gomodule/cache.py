"""MessagePack cache for package scans."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import msgpack

from ..errors import ScanError
from .fingerprint import fingerprint_source_files
from .symbols import PackageScan

CACHE_VERSION = 1


def scan_cache_key(files: list[Path], *, scanner_source: str) -> str:
    try:
        return fingerprint_source_files(files, extra=f"v{CACHE_VERSION}\x00{scanner_source}")
    except OSError as e:
        raise ScanError(f"failed to read Go source file: {e}") from e


def _entry_path(cache_dir: Path, key: str) -> Path:
    return Path(cache_dir) / "scans" / key[:2] / f"{key}.msgpack"


def load_cached_scan(cache_dir: Path, key: str) -> PackageScan | None:
    """Return the cached scan for `key`, or None if absent or unreadable."""
    path = _entry_path(cache_dir, key)
    if not path.is_file():
        return None
    try:
        obj = msgpack.unpackb(path.read_bytes(), raw=False)
    except Exception:  # noqa: BLE001 - a corrupt entry is a cache miss
        return None

    if not isinstance(obj, dict) or obj.get("version") != CACHE_VERSION or obj.get("key") != key:
        return None
    scan = obj.get("scan")
    if not isinstance(scan, dict):
        return None
    return PackageScan.from_obj(scan)


def store_scan(cache_dir: Path, key: str, scan: PackageScan) -> Path:
    payload = {
        "version": CACHE_VERSION,
        "key": key,
        "scan": scan.to_obj(),
    }
    data = msgpack.packb(payload, use_bin_type=True)

    path = _entry_path(cache_dir, key)
    path.parent.mkdir(parents=True, exist_ok=True)
    # Write to a sibling temp file and rename so readers never see a partial entry.
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return path
