from __future__ import annotations

import hashlib
from pathlib import Path


def fingerprint_source_files(files: list[Path], *, extra: str = "") -> str:
    """Compute a content fingerprint for a set of Go source files.

    Includes each file's absolute path and content, in sorted path order, plus
    `extra` (the scanner source, so scanner changes invalidate old entries).
    """
    h = hashlib.sha256()
    h.update(extra.encode("utf-8"))
    h.update(b"\x00")

    def add_file(p: Path) -> None:
        h.update(p.as_posix().encode("utf-8"))
        h.update(b"\x00")
        with p.open("rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                h.update(chunk)
        h.update(b"\x00")

    for p in sorted((Path(f).resolve() for f in files), key=lambda p: p.as_posix()):
        add_file(p)

    return h.hexdigest()
