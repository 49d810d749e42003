"""ifacemaker: generate Go interfaces from the exported methods of a struct."""

from __future__ import annotations

from . import errors
from .generator.generate import Options, generate
from .generator.parse import parse_type
from .generator.types import render

__all__ = [
    "Options",
    "errors",
    "generate",
    "parse_type",
    "render",
]
