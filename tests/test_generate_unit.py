from __future__ import annotations

import pytest


def _ident(name: str) -> dict:
    return {"node": "Ident", "name": name, "pos": "client.go:1:1"}


def _sel(pkg: str, name: str) -> dict:
    return {"node": "SelectorExpr", "x": _ident(pkg), "sel": name, "pos": "client.go:1:1"}


def _func(params: list, results: list) -> dict:
    return {"node": "FuncType", "params": params, "results": results, "pos": "client.go:1:1"}


def _method(name: str, ftype: dict, *, recv: str = "Client", doc: str | None = None, file: str = "/src/api/client.go") -> dict:
    return {
        "recv": recv,
        "recv_pointer": True,
        "recv_generic": False,
        "name": name,
        "doc": doc,
        "file": file,
        "pos": f"{file}:10:1",
        "type": ftype,
    }


def _scan(methods: list, *, imports: list | None = None, types: list | None = None):
    from ifacemaker.gomodule.symbols import PackageScan

    return PackageScan.from_obj(
        {
            "files": [
                {
                    "path": "/src/api/client.go",
                    "package": "api",
                    "imports": imports if imports is not None else [],
                }
            ],
            "types": types if types is not None else ["Client", "Request", "Response"],
            "methods": methods,
        }
    )


def test_build_interface_collects_methods_in_source_order():
    from ifacemaker.generator.generate import build_interface

    scan = _scan(
        [
            _method("Close", _func([], [{"names": [], "type": _ident("error")}])),
            _method("Other", _func([], []), recv="Request"),
            _method("Do", _func([{"names": ["req"], "type": {"node": "StarExpr", "x": _ident("Request")}}], [])),
        ]
    )
    iface = build_interface(scan, struct_name="Client", interface_name="Client", output_package="vault")
    assert [m.name for m in iface.methods] == ["Close", "Do"]
    assert iface.source_package == "api"
    assert str(iface.methods[1].type) == "func(*vault.Request) "


def test_render_interface_full_output():
    from ifacemaker.generator.generate import build_interface, render_interface

    scan = _scan(
        [
            _method(
                "Do",
                _func(
                    [
                        {"names": ["ctx"], "type": _sel("context", "Context")},
                        {"names": ["req"], "type": {"node": "StarExpr", "x": _ident("Request")}},
                    ],
                    [
                        {"names": [], "type": {"node": "StarExpr", "x": _ident("Response")}},
                        {"names": [], "type": _ident("error")},
                    ],
                ),
                doc="Do sends a request.\n\nIt retries on 5xx.\n",
            ),
            _method(
                "Headers",
                _func([], [{"names": [], "type": _sel("http", "Header")}]),
            ),
            _method(
                "Watch",
                _func(
                    [{"names": ["keys"], "type": {"node": "Ellipsis", "elt": _ident("string")}}],
                    [{"names": [], "type": {"node": "ChanType", "dir": "recv", "value": _sel("yaml", "Node")}}],
                ),
            ),
            _method("Close", _func([], [])),
        ],
        imports=[
            {"path": "context"},
            {"path": "net/http"},
            {"path": "gopkg.in/yaml.v3"},
            {"path": "strings"},
        ],
    )
    iface = build_interface(scan, struct_name="Client", interface_name="VaultClient", output_package="vault")
    assert render_interface(iface) == "\n".join(
        [
            "// Code generated by ifacemaker. DO NOT EDIT.",
            "",
            "package vault",
            "",
            "import (",
            '\t"context"',
            '\t"net/http"',
            "",
            '\t"gopkg.in/yaml.v3"',
            ")",
            "",
            "// VaultClient is generated from the exported methods of api.Client.",
            "type VaultClient interface {",
            "\t// Do sends a request.",
            "\t//",
            "\t// It retries on 5xx.",
            "\tDo(ctx context.Context, req *vault.Request) (*vault.Response, error)",
            "\tHeaders() http.Header",
            "\tWatch(keys ...string) <-chan yaml.Node",
            "\tClose()",
            "}",
            "",
        ]
    )


def test_render_interface_single_import_and_named_results():
    from ifacemaker.generator.generate import build_interface, render_interface

    scan = _scan(
        [
            _method(
                "Now",
                _func([], [{"names": ["t"], "type": _sel("time", "Time")}]),
            ),
        ],
        imports=[{"path": "time"}],
    )
    out = render_interface(build_interface(scan, struct_name="Client", interface_name="Clock", output_package="clock"))
    assert 'import "time"\n' in out
    assert "\tNow() (t time.Time)\n" in out


def test_render_interface_without_imports():
    from ifacemaker.generator.generate import build_interface, render_interface

    scan = _scan([_method("Len", _func([], [{"names": [], "type": _ident("int")}]))])
    out = render_interface(build_interface(scan, struct_name="Client", interface_name="Sized", output_package="x"))
    assert "import" not in out
    assert "\tLen() int\n" in out


def test_aliased_import_is_kept():
    from ifacemaker.generator.generate import build_interface

    scan = _scan(
        [_method("Log", _func([{"names": ["l"], "type": {"node": "StarExpr", "x": _sel("zlog", "Logger")}}], []))],
        imports=[{"path": "go.uber.org/zap", "name": "zlog"}],
    )
    iface = build_interface(scan, struct_name="Client", interface_name="C", output_package="x")
    assert [(i.name, i.path) for i in iface.imports] == [("zlog", "go.uber.org/zap")]


def test_assumed_import_name():
    from ifacemaker.generator.generate import assumed_import_name

    assert assumed_import_name("net/http") == "http"
    assert assumed_import_name("github.com/hashicorp/vault/api") == "api"
    assert assumed_import_name("github.com/jackc/pgx/v5") == "pgx"
    assert assumed_import_name("gopkg.in/yaml.v3") == "yaml"
    assert assumed_import_name("github.com/mattn/go-sqlite3") == "sqlite3"
    assert assumed_import_name("context") == "context"


def test_unknown_qualifier_raises():
    from ifacemaker.errors import GenerateError
    from ifacemaker.generator.generate import build_interface

    scan = _scan([_method("Do", _func([{"names": [], "type": _sel("missing", "Thing")}], []))])
    with pytest.raises(GenerateError, match="missing"):
        build_interface(scan, struct_name="Client", interface_name="C", output_package="x")


def test_conflicting_qualifiers_across_files_raise():
    from ifacemaker.errors import GenerateError
    from ifacemaker.generator.generate import build_interface
    from ifacemaker.gomodule.symbols import PackageScan

    scan = PackageScan.from_obj(
        {
            "files": [
                {"path": "/src/a.go", "package": "api", "imports": [{"path": "example.com/one/log"}]},
                {"path": "/src/b.go", "package": "api", "imports": [{"path": "example.com/two/log"}]},
            ],
            "types": ["Client"],
            "methods": [
                _method("A", _func([{"names": [], "type": _sel("log", "Logger")}], []), file="/src/a.go"),
                _method("B", _func([{"names": [], "type": _sel("log", "Logger")}], []), file="/src/b.go"),
            ],
        }
    )
    with pytest.raises(GenerateError, match="refers to both"):
        build_interface(scan, struct_name="Client", interface_name="C", output_package="x")


def test_missing_struct_and_empty_method_set_raise():
    from ifacemaker.errors import GenerateError
    from ifacemaker.generator.generate import build_interface

    scan = _scan([_method("Do", _func([], []))])
    with pytest.raises(GenerateError, match="not declared"):
        build_interface(scan, struct_name="Nope", interface_name="C", output_package="x")

    with pytest.raises(GenerateError, match="no exported methods"):
        build_interface(scan, struct_name="Request", interface_name="C", output_package="x")


def test_mixed_packages_raise():
    from ifacemaker.errors import GenerateError
    from ifacemaker.generator.generate import build_interface
    from ifacemaker.gomodule.symbols import PackageScan

    scan = PackageScan.from_obj(
        {
            "files": [
                {"path": "/src/a.go", "package": "api", "imports": []},
                {"path": "/src/b.go", "package": "main", "imports": []},
            ],
            "types": ["Client"],
            "methods": [],
        }
    )
    with pytest.raises(GenerateError, match="api, main"):
        build_interface(scan, struct_name="Client", interface_name="C", output_package="x")


def test_generic_receiver_is_rejected():
    from ifacemaker.errors import UnsupportedConstructError
    from ifacemaker.generator.generate import build_interface

    m = _method("Get", _func([], []), recv="Cache")
    m["recv_generic"] = True
    scan = _scan([m], types=["Cache"])
    with pytest.raises(UnsupportedConstructError, match="generic receiver"):
        build_interface(scan, struct_name="Cache", interface_name="C", output_package="x")


def test_unsupported_parameter_type_aborts_generation():
    from ifacemaker.errors import UnsupportedConstructError
    from ifacemaker.generator.generate import build_interface

    scan = _scan(
        [
            _method(
                "Visit",
                _func([{"names": ["v"], "type": {"node": "InterfaceType", "methods": 1, "pos": "client.go:20:15"}}], []),
            )
        ]
    )
    with pytest.raises(UnsupportedConstructError) as ei:
        build_interface(scan, struct_name="Client", interface_name="C", output_package="x")
    assert ei.value.location == "client.go:20:15"


def test_generate_scans_then_renders(monkeypatch, tmp_path):
    from ifacemaker.generator import generate as gmod

    seen: dict = {}

    def fake_scan(*, files, cache_dir=None):
        seen["files"] = files
        seen["cache_dir"] = cache_dir
        return _scan([_method("Close", _func([], [{"names": [], "type": _ident("error")}]))])

    monkeypatch.setattr(gmod, "scan_package", fake_scan)
    code = gmod.generate(
        gmod.Options(
            files=[tmp_path / "client.go"],
            struct_name="Client",
            output_package="out",
            interface_name="Closer",
            cache_dir=tmp_path / "cache",
        )
    )
    assert isinstance(code, bytes)
    assert b"type Closer interface {\n\tClose() error\n}\n" in code
    assert seen == {"files": [tmp_path / "client.go"], "cache_dir": tmp_path / "cache"}
