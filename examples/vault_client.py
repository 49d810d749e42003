from __future__ import annotations

from pathlib import Path

from ifacemaker import Options, generate
from ifacemaker.gomodule.resolve import find_source_files, resolve_module
from ifacemaker.paths import default_cache_root


def main() -> None:
    # Requirements:
    # - Go toolchain installed
    # - Network access (module download)
    #
    # Same as:
    #   ifacemaker -s github.com/hashicorp/vault@v1.8.2/api -p vault -t Client -i Client -o result/vault/client.go
    module = resolve_module(source="github.com/hashicorp/vault/api", version="v1.8.2")
    files = find_source_files(module.directory())

    code = generate(
        Options(
            files=files,
            struct_name="Client",
            output_package="vault",
            interface_name="Client",
            cache_dir=default_cache_root(),
        )
    )
    out = Path("result/vault/client.go")
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(code)
    print(f"wrote {out}")


if __name__ == "__main__":
    main()
