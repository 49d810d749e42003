from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..errors import GenerateError, UnsupportedConstructError
from ..gomodule.scan import scan_package
from ..gomodule.symbols import PackageScan, SourceImport, SourceMethod
from .parse import parse_type
from .types import Func, Param, Selector, iter_types, render

HEADER = "// Code generated by ifacemaker. DO NOT EDIT."

_MAJOR_VERSION_RE = re.compile(r"^v[0-9]+$")
_IDENT_PREFIX_RE = re.compile(r"\w*")


@dataclass(frozen=True)
class Options:
    files: list[Path]
    struct_name: str
    output_package: str
    interface_name: str
    cache_dir: Path | None = None


@dataclass(frozen=True)
class Method:
    name: str
    type: Func
    doc: str | None = None


@dataclass(frozen=True)
class Interface:
    name: str
    package: str
    source_package: str
    struct_name: str
    imports: list[SourceImport]
    methods: list[Method]


def generate(opts: Options) -> bytes:
    """Generate Go source declaring an interface for a struct's exported methods."""
    scan = scan_package(files=opts.files, cache_dir=opts.cache_dir)
    iface = build_interface(
        scan,
        struct_name=opts.struct_name,
        interface_name=opts.interface_name,
        output_package=opts.output_package,
    )
    return render_interface(iface).encode("utf-8")


def build_interface(
    scan: PackageScan,
    *,
    struct_name: str,
    interface_name: str,
    output_package: str,
) -> Interface:
    packages = sorted({f.package for f in scan.files})
    if len(packages) != 1:
        raise GenerateError(
            f"source files must belong to exactly one package, found: {', '.join(packages) or 'none'}"
        )
    if struct_name not in scan.types:
        raise GenerateError(f"type {struct_name} is not declared in package {packages[0]}")

    parsed: list[tuple[SourceMethod, Func]] = []
    for sm in scan.methods:
        if sm.recv != struct_name:
            continue
        if sm.recv_generic:
            raise UnsupportedConstructError(f"generic receiver type {struct_name}", sm.pos)
        ft = parse_type(sm.type, scan.types, output_package)
        if not isinstance(ft, Func):
            raise UnsupportedConstructError(f"method {sm.name} without a func type", sm.pos)
        parsed.append((sm, ft))
    if not parsed:
        raise GenerateError(f"type {struct_name} has no exported methods")

    return Interface(
        name=interface_name,
        package=output_package,
        source_package=packages[0],
        struct_name=struct_name,
        imports=_resolve_imports(parsed, scan),
        methods=[Method(name=sm.name, type=ft, doc=sm.doc) for sm, ft in parsed],
    )


def assumed_import_name(path: str) -> str:
    """Guess the package name of an import path the way goimports does."""
    parts = path.split("/")
    base = parts[-1]
    if len(parts) > 1 and _MAJOR_VERSION_RE.match(base):
        base = parts[-2]
    base = base.removeprefix("go-")
    m = _IDENT_PREFIX_RE.match(base)
    return m.group(0) if m else base


def _match_import(qualifier: str, imports: list[SourceImport]) -> SourceImport | None:
    for imp in imports:
        if imp.name == qualifier:
            return imp
    for imp in imports:
        if imp.name is None and assumed_import_name(imp.path) == qualifier:
            return imp
    return None


def _resolve_imports(parsed: list[tuple[SourceMethod, Func]], scan: PackageScan) -> list[SourceImport]:
    by_qualifier: dict[str, SourceImport] = {}
    for sm, ft in parsed:
        file_imports = scan.imports_for(sm.file)
        for t in iter_types(ft):
            if not isinstance(t, Selector):
                continue
            imp = _match_import(t.package, file_imports)
            if imp is None:
                raise GenerateError(f"{sm.pos}: no import found for package qualifier {t.package!r}")
            existing = by_qualifier.get(t.package)
            if existing is not None and existing.path != imp.path:
                raise GenerateError(
                    f"package qualifier {t.package!r} refers to both {existing.path} and {imp.path}"
                )
            by_qualifier[t.package] = imp
    return sorted(by_qualifier.values(), key=lambda i: i.path)


def _import_spec(imp: SourceImport) -> str:
    if imp.name:
        return f'{imp.name} "{imp.path}"'
    return f'"{imp.path}"'


def _render_imports(imports: list[SourceImport]) -> list[str]:
    if len(imports) == 1:
        return [f"import {_import_spec(imports[0])}"]

    std = [i for i in imports if "." not in i.path.split("/")[0]]
    other = [i for i in imports if "." in i.path.split("/")[0]]
    lines = ["import ("]
    for group in (std, other):
        if not group:
            continue
        if len(lines) > 1:
            lines.append("")
        lines.extend(f"\t{_import_spec(i)}" for i in group)
    lines.append(")")
    return lines


def _render_param(p: Param) -> str:
    if p.name:
        return f"{p.name} {render(p.type)}"
    return render(p.type)


def render_method(m: Method) -> str:
    """Render an interface method line, keeping parameter and result names."""
    params = ", ".join(_render_param(p) for p in m.type.params)
    results = m.type.results
    if not results:
        out = ""
    elif len(results) == 1 and not results[0].name:
        out = " " + render(results[0].type)
    else:
        out = " (" + ", ".join(_render_param(r) for r in results) + ")"
    return f"{m.name}({params}){out}"


def render_interface(iface: Interface) -> str:
    lines = [HEADER, "", f"package {iface.package}", ""]
    if iface.imports:
        lines.extend(_render_imports(iface.imports))
        lines.append("")

    lines.append(
        f"// {iface.name} is generated from the exported methods of "
        f"{iface.source_package}.{iface.struct_name}."
    )
    lines.append(f"type {iface.name} interface {{")
    for m in iface.methods:
        if m.doc:
            for dl in m.doc.rstrip("\n").split("\n"):
                lines.append(f"\t// {dl}".rstrip())
        lines.append(f"\t{render_method(m)}")
    lines.append("}")
    return "\n".join(lines) + "\n"
