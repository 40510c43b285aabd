from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import sass

from static_builder.errors import CompileError, NotFoundError
from static_builder.io.fs import read_text_utf8
from static_builder.logging import get_logger

log = get_logger()

STYLE_EXTENSIONS = (".scss", ".sass", ".css")
INDEX_FILES = ("_index.scss", "_index.sass")
ROOT_ALIAS = "~/"

# libsass reports this as the previous file for imports in the top-level source
_TOP_LEVEL = {"", "stdin"}

Importer = Callable[[str, str], List[Tuple[str, str]]]

def _normalize(p: Path) -> Path:
    return Path(os.path.normpath(str(p)))

def _with_extensions(p: Path) -> List[Path]:
    if p.suffix in STYLE_EXTENSIONS:
        return [p]
    return [p] + [p.with_name(p.name + ext) for ext in STYLE_EXTENSIONS]

class StyleImportResolver:
    """
    Resolves @import targets the way Sass module loading does:

    - "~/x" (or "a/b/~/x") is looked up under `package_root`;
    - anything else is relative to the importing file, or to `entry` for
      imports in the top-level stylesheet;
    - the exact path wins, then "_index" inside a directory, then the
      "_name" partial next to it. Extension-less paths also try each
      style extension.
    """

    def __init__(self, entry: Path, package_root: Path) -> None:
        self.entry = Path(entry)
        self.package_root = Path(package_root)

    def canonicalize(self, url: str, containing: Optional[str] = None) -> Path:
        if "/~/" in url:
            url = url[url.index("/~/") + 1:]
        if url.startswith(ROOT_ALIAS):
            return _normalize(self.package_root / url[len(ROOT_ALIAS):])
        base = Path(containing).parent if containing else self.entry.parent
        return _normalize(base / url)

    def candidates(self, canonical: Path) -> List[Path]:
        out = _with_extensions(canonical)
        if canonical.is_dir():
            out += [canonical / name for name in INDEX_FILES]
        else:
            out += _with_extensions(canonical.parent / f"_{canonical.name}")
        return out

    def resolve(self, url: str, containing: Optional[str] = None) -> Path:
        canonical = self.canonicalize(url, containing)
        for candidate in self.candidates(canonical):
            if candidate.is_file():
                return candidate
        raise NotFoundError(f"{canonical} not found", path=str(canonical))

    def load(self, url: str, prev: str) -> List[Tuple[str, str]]:
        containing = None if prev in _TOP_LEVEL else prev
        found = self.resolve(url, containing)
        log.debug("resolved import %s -> %s", url, found)
        return [(str(found), read_text_utf8(found))]

def transpile_style(source_text: str, importer: Importer, *, minify: bool, indented: bool = False) -> str:
    return sass.compile(
        string=source_text,
        importers=[(0, importer)],
        output_style="compressed" if minify else "expanded",
        indented=indented,
    )

def compile_style_file(path: Path, *, minify: bool, package_root: Path) -> str:
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"{path} not found", path=str(path))

    resolver = StyleImportResolver(path, package_root)
    try:
        return transpile_style(
            read_text_utf8(path),
            resolver.load,
            minify=minify,
            indented=path.suffix == ".sass",
        )
    except sass.CompileError as e:
        raise CompileError(str(e), path=str(path)) from e
