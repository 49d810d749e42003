from __future__ import annotations

import argparse
import importlib.metadata
import sys
from pathlib import Path

from .errors import IfaceMakerError


def _version() -> str:
    try:
        return importlib.metadata.version("ifacemaker")
    except importlib.metadata.PackageNotFoundError:
        # Source checkout without installed metadata.
        return "0.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ifacemaker",
        description="Generate a Go interface from the exported methods of a struct.",
    )
    parser.add_argument(
        "-s",
        "--source-pkg",
        required=True,
        help="Go import path of the package declaring the struct, OR a local package directory.",
    )
    parser.add_argument(
        "-v",
        "--source-version",
        default=None,
        help="Semantic version of the source package (example: v1.9.0; default: @latest).",
    )
    parser.add_argument("-m", "--module-path", default=None, help="Submodule path from the package root.")
    parser.add_argument("-p", "--result-pkg", required=True, help="Result package name.")
    parser.add_argument("-t", "--struct-name", required=True, help="A struct name to generate the interface for.")
    parser.add_argument("-i", "--interface-name", required=True, help="Name of the generated interface.")
    parser.add_argument("-o", "--output", required=True, help="Output file name.")
    parser.add_argument(
        "--cache-dir",
        default=None,
        help="Scan cache directory (default: IFACEMAKER_CACHE_DIR or OS cache).",
    )
    parser.add_argument("--no-cache", action="store_true", help="Do not read or write the scan cache.")
    parser.add_argument("--verbose", action="store_true", help="Print progress to stderr.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except IfaceMakerError as e:
        raise SystemExit(f"ifacemaker: {e}") from None


def run(args: argparse.Namespace) -> Path:
    from .generator.generate import Options, generate
    from .gomodule.resolve import find_source_files, resolve_module
    from .paths import default_cache_root

    def note(msg: str) -> None:
        if args.verbose:
            print(f"ifacemaker: {msg}", file=sys.stderr)

    module = resolve_module(source=args.source_pkg, version=args.source_version)
    note(f"resolved {module.module_path}@{module.version} at {module.module_dir}")

    directory = module.directory(args.module_path)
    files = find_source_files(directory)
    note(f"found {len(files)} source file(s) in {directory}")

    cache_dir = None
    if not args.no_cache:
        cache_dir = Path(args.cache_dir) if args.cache_dir else default_cache_root()

    code = generate(
        Options(
            files=files,
            struct_name=args.struct_name,
            output_package=args.result_pkg,
            interface_name=args.interface_name,
            cache_dir=cache_dir,
        )
    )

    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(code)
    note(f"wrote {args.interface_name} to {out}")
    return out
