from __future__ import annotations

import json
import re
import subprocess
import tempfile
from pathlib import Path

from static_builder.core.minify import minify_js
from static_builder.errors import CompileError, ConfigError, NotFoundError, OutputCountError
from static_builder.io.fs import read_text_utf8
from static_builder.logging import get_logger

log = get_logger()

OUT_DIR = "out"
METAFILE = "meta.json"

# `export { a, b as c }`, `export { a } from "m"`, `export * from "m"`,
# `export * as ns from "m"`, only as the last statement of the bundle
# (esbuild emits its exports there).
_TRAILING_EXPORT = re.compile(
    r"(^|[;}])[ \t]*export[ \t]*"
    r"(?:\*(?:[ \t]+as[ \t]+[\w$]+)?|\{[^}]*\})"
    r"(?:[ \t]*from[ \t]*(['\"])[^'\"\n]*\2)?"
    r"[ \t]*;?\s*\Z",
    flags=re.MULTILINE,
)

def strip_exports(text: str) -> str:
    """Remove trailing export declarations so the bundle runs as a classic <script>."""
    m = _TRAILING_EXPORT.search(text)
    while m is not None:
        text = text[:m.start()] + m.group(1)
        m = _TRAILING_EXPORT.search(text)
    return text

def bundle_script(entry: Path, *, root: Path, minify: bool, esbuild: str = "esbuild") -> str:
    """
    Bundle `entry` with esbuild into a single ESM file and return its text.
    The bundle must consist of exactly one entry-point output.
    """
    entry = Path(entry).resolve()
    with tempfile.TemporaryDirectory(prefix="static_builder_") as td:
        cmd = [
            esbuild,
            str(entry),
            "--bundle",
            "--format=esm",
            "--platform=browser",
            f"--outdir={OUT_DIR}",
            f"--outbase={Path(root).resolve()}",
            f"--metafile={METAFILE}",
            "--log-level=warning",
        ]
        if minify:
            cmd.append("--minify")

        log.debug("running %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, cwd=td, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ConfigError(f"script bundler not found: {esbuild}", path=str(entry)) from e

        for line in (proc.stderr or "").splitlines():
            if line.strip():
                (log.error if proc.returncode else log.warning)(line)
        if proc.returncode != 0:
            raise CompileError(f"Failed to transpile: {entry}", path=str(entry))

        meta = json.loads((Path(td) / METAFILE).read_text(encoding="utf-8"))
        outputs = meta.get("outputs") or {}
        if len(outputs) != 1:
            raise OutputCountError(
                f"Expected one output while transpiling, got {len(outputs)}", path=str(entry)
            )
        name, info = next(iter(outputs.items()))
        if not info.get("entryPoint"):
            raise OutputCountError(f"Expected output to be an entry-point, got {name}", path=str(entry))
        return read_text_utf8(Path(td) / name)

def compile_script_file(path: Path, *, root: Path, minify: bool, esbuild: str = "esbuild") -> str:
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"{path} not found", path=str(path))

    text = strip_exports(bundle_script(path, root=root, minify=minify, esbuild=esbuild))
    return minify_js(text) if minify else text
