"""Type model for Go type expressions and its canonical rendering."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Iterator, Union

from ..errors import UnsupportedConstructError


class ChanDir(enum.Enum):
    BOTH = "both"
    SEND = "send"
    RECV = "recv"


@dataclass(frozen=True)
class Ident:
    kind: ClassVar[str] = "ident"

    name: str
    # Empty unless qualified in source or declared locally (see parse.qualify).
    package: str = ""

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Selector:
    kind: ClassVar[str] = "selector"

    name: str
    package: str

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Pointer:
    kind: ClassVar[str] = "star"

    child: "Type"

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Array:
    kind: ClassVar[str] = "array"

    child: "Type"
    # Source text of the length expression for fixed-size arrays; None for slices.
    length: str | None = None

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Variadic:
    """Variadic element type; only valid as the last parameter of a func."""

    kind: ClassVar[str] = "ellipsis"

    child: "Type"

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Map:
    kind: ClassVar[str] = "map"

    key: "Type"
    value: "Type"

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Chan:
    kind: ClassVar[str] = "chan"

    child: "Type"
    dir: ChanDir = ChanDir.BOTH

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Param:
    name: str
    type: "Type"


@dataclass(frozen=True)
class Func:
    kind: ClassVar[str] = "func"

    params: tuple[Param, ...] = ()
    results: tuple[Param, ...] = ()

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class AnyInterface:
    """The empty interface. Interfaces with methods have no model counterpart."""

    kind: ClassVar[str] = "interface"

    def __str__(self) -> str:
        return render(self)


Type = Union[Ident, Selector, Pointer, Array, Variadic, Map, Chan, Func, AnyInterface]


def render(t: Type) -> str:
    """Render a type as Go type syntax.

    Parameter names are not part of the output: a func renders as its
    signature type, e.g. `func(int, string) (bool, error)`.
    """
    if isinstance(t, Ident):
        if not t.package:
            return t.name
        return f"{t.package}.{t.name}"
    if isinstance(t, Selector):
        return f"{t.package}.{t.name}"
    if isinstance(t, Pointer):
        return "*" + render(t.child)
    if isinstance(t, Array):
        if t.length is not None:
            return f"[{t.length}]{render(t.child)}"
        return "[]" + render(t.child)
    if isinstance(t, Variadic):
        return "..." + render(t.child)
    if isinstance(t, Map):
        return f"map[{render(t.key)}]{render(t.value)}"
    if isinstance(t, AnyInterface):
        return "interface{}"
    if isinstance(t, Chan):
        if t.dir is ChanDir.RECV:
            return "<-chan " + render(t.child)
        if t.dir is ChanDir.SEND:
            return "chan<- " + render(t.child)
        return "chan " + render(t.child)
    if isinstance(t, Func):
        params = ", ".join(render(p.type) for p in t.params)
        return f"func({params}) {render_results(t.results)}"
    raise UnsupportedConstructError(type(t).__name__)


def render_results(results: tuple[Param, ...]) -> str:
    """Render a result list: empty, a single bare type, or a parenthesized list."""
    parts = [render(r.type) for r in results]
    if len(parts) > 1:
        return "(" + ", ".join(parts) + ")"
    return "".join(parts)


def iter_types(t: Type) -> Iterator[Type]:
    """Yield `t` and every type nested in it, depth-first in source order."""
    yield t
    if isinstance(t, (Pointer, Array, Variadic, Chan)):
        yield from iter_types(t.child)
    elif isinstance(t, Map):
        yield from iter_types(t.key)
        yield from iter_types(t.value)
    elif isinstance(t, Func):
        for p in (*t.params, *t.results):
            yield from iter_types(p.type)
