from __future__ import annotations

import json
import subprocess
import tempfile
from pathlib import Path

from ..errors import ScanError
from .cache import load_cached_scan, scan_cache_key, store_scan
from .symbols import PackageScan


def scan_package(*, files: list[Path], cache_dir: Path | None = None) -> PackageScan:
    """Parse Go source files and report their imports, exported types and methods.

    Parsing is done by the Go toolchain (`go/parser`), run through a small
    generated program. When `cache_dir` is set, results are reused for
    unchanged inputs.
    """
    files = [Path(f).resolve() for f in files]
    if not files:
        raise ScanError("no Go source files to scan")

    key: str | None = None
    if cache_dir is not None:
        key = scan_cache_key(files, scanner_source=_scanner_go_source())
        cached = load_cached_scan(cache_dir, key)
        if cached is not None:
            return cached

    scan = PackageScan.from_obj(_run_scanner(files))

    if cache_dir is not None and key is not None:
        store_scan(cache_dir, key, scan)
    return scan


def _run_scanner(files: list[Path]) -> dict:
    with tempfile.TemporaryDirectory(prefix="ifacemaker-goscan-") as td:
        scan_dir = Path(td)
        (scan_dir / "go.mod").write_text(
            "\n".join(
                [
                    "module ifacemaker.goscan",
                    "",
                    "go 1.22",
                    "",
                ]
            ),
            encoding="utf-8",
        )
        (scan_dir / "main.go").write_text(_scanner_go_source(), encoding="utf-8")

        try:
            proc = subprocess.run(
                ["go", "run", ".", *[str(f) for f in files]],
                cwd=str(scan_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            raise ScanError(
                "Go toolchain not found (`go` is missing from PATH). "
                "Install Go and ensure `go` is available on PATH."
            ) from e
        if proc.returncode != 0:
            raise ScanError(f"go scan failed\n{proc.stderr}{proc.stdout}")

        try:
            obj = json.loads(proc.stdout)
        except Exception as e:  # noqa: BLE001 - boundary parse
            raise ScanError(f"failed to parse go scan output: {e}\n{proc.stdout}") from e
        if not isinstance(obj, dict):
            raise ScanError(f"unexpected go scan output\n{proc.stdout}")
        return obj


def _scanner_go_source() -> str:
    # Keep this file stdlib-only so `go run` doesn't need network access.
    return r'''
package main

import (
	"encoding/json"
	"flag"
	"fmt"
	"go/ast"
	"go/parser"
	"go/token"
	"go/types"
	"os"
	"strings"
)

type outImport struct {
	Name string `json:"name,omitempty"`
	Path string `json:"path"`
}

type outFile struct {
	Path    string      `json:"path"`
	Package string      `json:"package"`
	Imports []outImport `json:"imports"`
}

type outMethod struct {
	Recv        string         `json:"recv"`
	RecvPointer bool           `json:"recv_pointer"`
	RecvGeneric bool           `json:"recv_generic"`
	Name        string         `json:"name"`
	Doc         string         `json:"doc,omitempty"`
	File        string         `json:"file"`
	Pos         string         `json:"pos"`
	Type        map[string]any `json:"type"`
}

type outObj struct {
	Files   []outFile   `json:"files"`
	Types   []string    `json:"types"`
	Methods []outMethod `json:"methods"`
}

func main() {
	flag.Parse()
	files := flag.Args()
	if len(files) == 0 {
		fmt.Fprintln(os.Stderr, "no source files given")
		os.Exit(2)
	}

	fset := token.NewFileSet()
	out := outObj{
		Files:   []outFile{},
		Types:   []string{},
		Methods: []outMethod{},
	}
	seenTypes := map[string]bool{}
	for _, path := range files {
		af, err := parser.ParseFile(fset, path, nil, parser.ParseComments)
		if err != nil {
			fmt.Fprintln(os.Stderr, err.Error())
			os.Exit(1)
		}

		f := outFile{Path: path, Package: af.Name.Name, Imports: []outImport{}}
		for _, imp := range af.Imports {
			item := outImport{Path: strings.Trim(imp.Path.Value, "\"`")}
			if imp.Name != nil {
				item.Name = imp.Name.Name
			}
			f.Imports = append(f.Imports, item)
		}
		out.Files = append(out.Files, f)

		ast.Inspect(af, func(n ast.Node) bool {
			ts, ok := n.(*ast.TypeSpec)
			if !ok || !ts.Name.IsExported() || seenTypes[ts.Name.Name] {
				return true
			}
			seenTypes[ts.Name.Name] = true
			out.Types = append(out.Types, ts.Name.Name)
			return true
		})

		for _, decl := range af.Decls {
			fd, ok := decl.(*ast.FuncDecl)
			if !ok || fd.Recv == nil || len(fd.Recv.List) == 0 {
				continue
			}
			if fd.Name == nil || !fd.Name.IsExported() {
				continue
			}
			recv, ptr, generic := receiverName(fd.Recv.List[0].Type)
			if recv == "" {
				continue
			}
			doc := ""
			if fd.Doc != nil {
				doc = fd.Doc.Text()
			}
			out.Methods = append(out.Methods, outMethod{
				Recv:        recv,
				RecvPointer: ptr,
				RecvGeneric: generic,
				Name:        fd.Name.Name,
				Doc:         doc,
				File:        path,
				Pos:         fset.Position(fd.Pos()).String(),
				Type:        encodeExpr(fset, fd.Type),
			})
		}
	}

	enc := json.NewEncoder(os.Stdout)
	enc.SetEscapeHTML(false)
	if err := enc.Encode(out); err != nil {
		fmt.Fprintln(os.Stderr, err.Error())
		os.Exit(1)
	}
}

func receiverName(e ast.Expr) (string, bool, bool) {
	ptr := false
	if st, ok := e.(*ast.StarExpr); ok {
		ptr = true
		e = st.X
	}
	switch t := e.(type) {
	case *ast.Ident:
		return t.Name, ptr, false
	case *ast.IndexExpr:
		if id, ok := t.X.(*ast.Ident); ok {
			return id.Name, ptr, true
		}
	case *ast.IndexListExpr:
		if id, ok := t.X.(*ast.Ident); ok {
			return id.Name, ptr, true
		}
	}
	return "", ptr, false
}

func encodeExpr(fset *token.FileSet, e ast.Expr) map[string]any {
	if e == nil {
		return nil
	}
	node := map[string]any{"pos": fset.Position(e.Pos()).String()}
	switch t := e.(type) {
	case *ast.Ident:
		node["node"] = "Ident"
		node["name"] = t.Name
	case *ast.SelectorExpr:
		node["node"] = "SelectorExpr"
		node["x"] = encodeExpr(fset, t.X)
		node["sel"] = t.Sel.Name
	case *ast.StarExpr:
		node["node"] = "StarExpr"
		node["x"] = encodeExpr(fset, t.X)
	case *ast.Ellipsis:
		node["node"] = "Ellipsis"
		node["elt"] = encodeExpr(fset, t.Elt)
	case *ast.ArrayType:
		node["node"] = "ArrayType"
		if t.Len != nil {
			node["len"] = types.ExprString(t.Len)
		}
		node["elt"] = encodeExpr(fset, t.Elt)
	case *ast.MapType:
		node["node"] = "MapType"
		node["key"] = encodeExpr(fset, t.Key)
		node["value"] = encodeExpr(fset, t.Value)
	case *ast.ChanType:
		node["node"] = "ChanType"
		node["dir"] = chanDir(t.Dir)
		node["value"] = encodeExpr(fset, t.Value)
	case *ast.FuncType:
		node["node"] = "FuncType"
		node["params"] = encodeFields(fset, t.Params)
		node["results"] = encodeFields(fset, t.Results)
	case *ast.InterfaceType:
		node["node"] = "InterfaceType"
		n := 0
		if t.Methods != nil {
			n = len(t.Methods.List)
		}
		node["methods"] = n
	default:
		node["node"] = strings.TrimPrefix(fmt.Sprintf("%T", e), "*ast.")
		node["text"] = types.ExprString(e)
	}
	return node
}

func encodeFields(fset *token.FileSet, fl *ast.FieldList) []map[string]any {
	out := []map[string]any{}
	if fl == nil {
		return out
	}
	for _, f := range fl.List {
		names := []string{}
		for _, n := range f.Names {
			names = append(names, n.Name)
		}
		out = append(out, map[string]any{
			"names": names,
			"type":  encodeExpr(fset, f.Type),
		})
	}
	return out
}

func chanDir(d ast.ChanDir) string {
	switch d {
	case ast.SEND:
		return "send"
	case ast.RECV:
		return "recv"
	}
	return "both"
}
'''
