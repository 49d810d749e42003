"""Conversion of Go syntax-tree nodes (as emitted by the scanner) into the type model."""

from __future__ import annotations

from typing import Any, Collection

from ..errors import UnsupportedConstructError
from .types import (
    AnyInterface,
    Array,
    Chan,
    ChanDir,
    Func,
    Ident,
    Map,
    Param,
    Pointer,
    Selector,
    Type,
    Variadic,
)

_CHAN_DIRS = {
    "both": ChanDir.BOTH,
    "send": ChanDir.SEND,
    "recv": ChanDir.RECV,
}


def qualify(pkg: str, name: str, *, local_types: Collection[str], dest_package: str) -> str:
    """Return the package qualifier to use for identifier `name`.

    An explicit qualifier is kept. A type declared in the scanned package is
    referenced through the destination package. Anything else (predeclared
    types, dot-imported names) stays unqualified.
    """
    if pkg:
        return pkg
    if name in local_types:
        return dest_package
    return ""


def parse_type(node: dict[str, Any], local_types: Collection[str], dest_package: str) -> Type:
    """Convert one type-expression node into a `Type` tree.

    Raises `UnsupportedConstructError` for any node outside the supported
    grammar (non-empty interfaces, struct types, generic instantiations, ...).
    """
    if not isinstance(node, dict):
        raise UnsupportedConstructError(type(node).__name__)

    kind = node.get("node")
    pos = node.get("pos")

    def child(key: str) -> Type:
        sub = node.get(key)
        if sub is None:
            raise UnsupportedConstructError(f"{kind} without {key}", pos)
        return parse_type(sub, local_types, dest_package)

    if kind == "SelectorExpr":
        x = node.get("x")
        if not isinstance(x, dict) or x.get("node") != "Ident":
            raise UnsupportedConstructError(f"{kind} on non-identifier", pos)
        return Selector(name=str(node["sel"]), package=str(x["name"]))
    if kind == "Ident":
        name = str(node["name"])
        pkg = qualify(
            str(node.get("pkg") or ""),
            name,
            local_types=local_types,
            dest_package=dest_package,
        )
        return Ident(name=name, package=pkg)
    if kind == "Ellipsis":
        return Variadic(child=child("elt"))
    if kind == "StarExpr":
        return Pointer(child=child("x"))
    if kind == "FuncType":
        return Func(
            params=parse_fields(node.get("params"), local_types, dest_package),
            results=parse_fields(node.get("results"), local_types, dest_package),
        )
    if kind == "ArrayType":
        length = node.get("len")
        return Array(child=child("elt"), length=str(length) if length is not None else None)
    if kind == "MapType":
        return Map(key=child("key"), value=child("value"))
    if kind == "InterfaceType":
        if node.get("methods"):
            raise UnsupportedConstructError("non-empty InterfaceType", pos)
        return AnyInterface()
    if kind == "ChanType":
        direction = _CHAN_DIRS.get(str(node.get("dir", "both")))
        if direction is None:
            raise UnsupportedConstructError(f"{kind} with direction {node.get('dir')!r}", pos)
        return Chan(child=child("value"), dir=direction)

    text = node.get("text")
    if text:
        raise UnsupportedConstructError(f"{kind} ({text})", pos)
    raise UnsupportedConstructError(str(kind), pos)


def parse_fields(
    fields: list[dict[str, Any]] | None,
    local_types: Collection[str],
    dest_package: str,
) -> tuple[Param, ...]:
    """Flatten a parameter or result list into one `Param` per declared slot.

    `a, b T` yields two params, each with its own parse of `T`; an unnamed
    field yields a single param with an empty name.
    """
    out: list[Param] = []
    for field in fields or []:
        names = field.get("names") or [""]
        for name in names:
            out.append(Param(name=str(name), type=parse_type(field.get("type"), local_types, dest_package)))
    return tuple(out)
