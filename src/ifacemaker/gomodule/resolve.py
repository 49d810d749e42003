from __future__ import annotations

import json
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from ..errors import ResolveError


@dataclass(frozen=True)
class ResolvedModule:
    module_path: str
    version: str
    module_dir: Path
    # Directory of the requested package (module_dir or a subdirectory of it).
    package_dir: Path

    def directory(self, sub_path: str | None = None) -> Path:
        if not sub_path:
            return self.package_dir
        return self.package_dir / sub_path


def resolve_module(*, source: str, version: str | None = None) -> ResolvedModule:
    """Resolve a source package reference to a directory on disk.

    - If `source` is a local directory, locate the nearest parent containing go.mod
      (allows passing a package directory inside a module) and return version "local".
    - Otherwise treat `source` as a Go import path (module or package path), optionally
      pinned inline as `path@version` or `module@version/sub/pkg`, and use
      `go mod download -json` to resolve the module root (defaults to @latest).
    """
    p = Path(source)
    if p.exists() and p.is_dir():
        if version:
            raise ResolveError(f"a version ({version}) cannot be used with a local directory: {source}")
        package_dir = p.resolve()
        module_dir = _find_module_root(package_dir)
        return ResolvedModule(
            module_path=_read_module_path(module_dir),
            version="local",
            module_dir=module_dir,
            package_dir=package_dir,
        )

    import_path, inline_version, sub_path = split_versioned_path(source)
    if inline_version and version and inline_version.lstrip("@") != version.lstrip("@"):
        raise ResolveError(
            f"conflicting versions for {import_path}: {inline_version} (inline) and {version}"
        )
    wanted = inline_version or version or "latest"

    mod_path, mod_version, mod_dir, rest = _resolve_remote_module(import_path=import_path, wanted=wanted)
    package_dir = mod_dir
    for part in [rest, sub_path]:
        if part:
            package_dir = package_dir / part
    return ResolvedModule(
        module_path=mod_path,
        version=mod_version,
        module_dir=mod_dir,
        package_dir=package_dir,
    )


def split_versioned_path(source: str) -> tuple[str, str | None, str]:
    """Split `module@version/sub/pkg` into (module, version, "sub/pkg")."""
    import_path, at, rest = source.partition("@")
    if not at:
        return source.strip("/"), None, ""
    version, _, sub_path = rest.partition("/")
    if not version:
        raise ResolveError(f"empty version in {source}")
    return import_path.strip("/"), version, sub_path.strip("/")


def find_source_files(directory: Path) -> list[Path]:
    """Return the non-test .go files directly inside `directory`, sorted by name."""
    directory = Path(directory)
    try:
        entries = sorted(directory.iterdir(), key=lambda e: e.name)
    except OSError as e:
        raise ResolveError(f"cannot read package directory {directory}: {e}") from e

    files: list[Path] = []
    for e in entries:
        if e.is_dir():
            continue
        if e.name.endswith("_test.go") or not e.name.endswith(".go"):
            continue
        files.append(e)
    return files


def _read_module_path(module_dir: Path) -> str:
    go_mod = module_dir / "go.mod"
    if not go_mod.exists():
        raise ResolveError(f"go.mod not found in {module_dir}")
    for line in go_mod.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("module "):
            return line.split()[1].strip('"')
    raise ResolveError("failed to parse module path from go.mod")


def _find_module_root(start: Path) -> Path:
    p = start
    while True:
        if (p / "go.mod").exists():
            return p
        if p.parent == p:
            break
        p = p.parent
    raise ResolveError(f"go.mod not found in {start} or any parent directory")


def _resolve_remote_module(*, import_path: str, wanted: str) -> tuple[str, str, Path, str]:
    # For package paths below a module root, trim segments until download succeeds.
    candidate = import_path
    wanted = wanted.lstrip("@")
    while True:
        try:
            info = _go_mod_download_json(f"{candidate}@{wanted}")
            mod_path = str(info["Path"])
            mod_version = str(info["Version"])
            mod_dir = Path(str(info["Dir"])).resolve()
        except ResolveError:
            if "/" not in candidate:
                raise
            candidate = candidate.rsplit("/", 1)[0]
            continue
        except KeyError as e:
            raise ResolveError(f"go mod download output for {candidate}@{wanted} lacks {e}") from e
        rest = import_path[len(candidate) :].strip("/")
        return mod_path, mod_version, mod_dir, rest


def _go_mod_download_json(arg: str) -> dict:
    # `go mod download` does not require being inside a module, but to be robust
    # across environments, run in a temp directory.
    with tempfile.TemporaryDirectory(prefix="ifacemaker-moddl-") as td:
        try:
            proc = subprocess.run(
                ["go", "mod", "download", "-json", arg],
                cwd=td,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            raise ResolveError(
                "Go toolchain not found (`go` is missing from PATH). "
                "Install Go and ensure `go` is available on PATH."
            ) from e
        if proc.returncode != 0:
            raise ResolveError(f"go mod download failed for {arg}\n{proc.stdout}")
        out = proc.stdout
        try:
            return json.loads(out)
        except Exception:
            # Go may print non-JSON lines (e.g. toolchain switching messages) to stderr,
            # which we merge into stdout. Extract the first JSON object.
            start = out.find("{")
            if start == -1:
                raise ResolveError(f"failed to parse go mod download output for {arg}") from None
            depth = 0
            end = -1
            for i, ch in enumerate(out[start:], start=start):
                if ch == "{":
                    depth += 1
                elif ch == "}":
                    depth -= 1
                    if depth == 0:
                        end = i + 1
                        break
            if end == -1:
                raise ResolveError(f"failed to parse go mod download output for {arg}") from None
            try:
                return json.loads(out[start:end])
            except Exception as e:  # noqa: BLE001
                raise ResolveError(f"failed to parse go mod download output for {arg}: {e}") from e
