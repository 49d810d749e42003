from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SourceImport:
    path: str
    name: str | None = None  # explicit import name, if any


@dataclass(frozen=True)
class SourceFile:
    path: str
    package: str
    imports: list[SourceImport]


@dataclass(frozen=True)
class SourceMethod:
    recv: str  # receiver type name (no leading '*', no type arguments)
    name: str
    type: dict[str, Any]  # FuncType node
    file: str
    pos: str
    doc: str | None = None
    recv_pointer: bool = False
    recv_generic: bool = False


@dataclass(frozen=True)
class PackageScan:
    files: list[SourceFile]
    types: list[str]
    methods: list[SourceMethod]

    @classmethod
    def from_obj(cls, obj: dict[str, Any]) -> "PackageScan":
        files: list[SourceFile] = []
        for item in obj.get("files") or []:
            if not isinstance(item, dict):
                continue
            path = item.get("path")
            package = item.get("package")
            if not isinstance(path, str) or not isinstance(package, str):
                continue
            imports: list[SourceImport] = []
            for imp in item.get("imports") or []:
                if not isinstance(imp, dict) or not isinstance(imp.get("path"), str):
                    continue
                name = imp.get("name")
                imports.append(SourceImport(path=imp["path"], name=name if isinstance(name, str) and name else None))
            files.append(SourceFile(path=path, package=package, imports=imports))

        types = [t for t in obj.get("types") or [] if isinstance(t, str)]

        methods: list[SourceMethod] = []
        for item in obj.get("methods") or []:
            if not isinstance(item, dict):
                continue
            recv = item.get("recv")
            name = item.get("name")
            ftype = item.get("type")
            if not isinstance(recv, str) or not isinstance(name, str) or not isinstance(ftype, dict):
                continue
            doc = item.get("doc")
            methods.append(
                SourceMethod(
                    recv=recv,
                    name=name,
                    type=ftype,
                    file=str(item.get("file", "")),
                    pos=str(item.get("pos", "")),
                    doc=doc if isinstance(doc, str) and doc else None,
                    recv_pointer=bool(item.get("recv_pointer", False)),
                    recv_generic=bool(item.get("recv_generic", False)),
                )
            )

        return cls(files=files, types=types, methods=methods)

    def to_obj(self) -> dict[str, Any]:
        return {
            "files": [
                {
                    "path": f.path,
                    "package": f.package,
                    "imports": [{"path": i.path, "name": i.name} for i in f.imports],
                }
                for f in self.files
            ],
            "types": list(self.types),
            "methods": [
                {
                    "recv": m.recv,
                    "name": m.name,
                    "type": m.type,
                    "file": m.file,
                    "pos": m.pos,
                    "doc": m.doc,
                    "recv_pointer": m.recv_pointer,
                    "recv_generic": m.recv_generic,
                }
                for m in self.methods
            ],
        }

    def imports_for(self, path: str) -> list[SourceImport]:
        for f in self.files:
            if f.path == path:
                return f.imports
        return []
