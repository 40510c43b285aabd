from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup

from static_builder.config import BuildConfig
from static_builder.core.html import load_document, serialize_document
from static_builder.core.minify import minify_html
from static_builder.core.paths import (
    DOCUMENT_SUFFIX,
    built_script_path,
    built_style_path,
    demap_reference,
    is_source_only,
    source_key,
)
from static_builder.errors import FileSystemError, NotFoundError, StaticBuilderError
from static_builder.io.fs import iter_files, relpath_under
from static_builder.logging import get_logger
from static_builder.stages.cache import BuildCache
from static_builder.stages.extract import STYLE, AssetReference, find_script_references, find_style_references
from static_builder.stages.output import write_outputs
from static_builder.stages.rewrite import convert_blocking_styles_to_preload, rewrite_reference
from static_builder.stages.scripts import compile_script_file
from static_builder.stages.styles import compile_style_file

log = get_logger()

Compiler = Callable[..., str]

@dataclass(frozen=True)
class BuildStats:
    documents: int
    styles: int
    scripts: int
    cache_hits: int
    copied: int

@dataclass
class _Run:
    cfg: BuildConfig
    cache: BuildCache
    compile_style: Compiler
    compile_script: Compiler
    current: Optional[str] = None  # path under compilation, for error reports
    styles: int = 0
    scripts: int = 0
    documents: Dict[str, str] = field(default_factory=dict)
    completed_assets: List[str] = field(default_factory=list)

    def built_files(self, *, completed_only: bool = False) -> Dict[str, str]:
        if completed_only:
            out = {k: self.cache.get(k) for k in self.completed_assets}
        else:
            out = dict(self.cache.items())
        out.update(self.documents)
        return out

def _compile(run: _Run, ref: AssetReference, source_file: Path) -> str:
    cfg = run.cfg
    if ref.kind == STYLE:
        run.styles += 1
        return run.compile_style(source_file, minify=cfg.css.minify, package_root=cfg.css.package_root)
    run.scripts += 1
    return run.compile_script(source_file, root=cfg.source, minify=cfg.js.minify, esbuild=cfg.js.esbuild)

def _build_asset(run: _Run, doc: BeautifulSoup, ref: AssetReference) -> str:
    resolved = ref.resolved
    built = built_style_path(resolved) if ref.kind == STYLE else built_script_path(resolved)
    key = source_key(built)
    source_file = run.cfg.source / source_key(resolved)

    run.current = str(source_file)
    if key in run.cache:
        log.debug("using cached %s", key)
    else:
        log.debug("compiling %s", source_file)
    run.cache.get_or_compute(key, lambda: _compile(run, ref, source_file), source=source_key(resolved))

    original = ref.raw_path
    replaced = demap_reference(ref.owner_dir, built)
    log.debug("replacing %s with %s", original, replaced)
    rewrite_reference(doc, ref.kind, original, replaced)
    return key

def _build_document(run: _Run, rel: str) -> str:
    cfg = run.cfg
    html_path = cfg.source / rel
    run.current = str(html_path)
    log.info("compiling %s", rel)

    doc = load_document(html_path)
    owner_dir = posixpath.dirname(rel)

    log.debug("getting style and script references from %s", rel)
    refs = find_style_references(doc, owner_dir) + find_script_references(doc, owner_dir)
    assets = [_build_asset(run, doc, ref) for ref in refs]

    run.current = str(html_path)
    if cfg.html.reduce_blocking:
        log.debug("converting blocking styles in %s", rel)
        convert_blocking_styles_to_preload(doc)

    log.debug("serializing %s", rel)
    text = serialize_document(doc)
    if cfg.html.minify:
        log.debug("minifying %s", rel)
        text = minify_html(text)

    run.completed_assets.extend(a for a in assets if a not in run.completed_assets)
    return text

def _write(cfg: BuildConfig, built: Dict[str, str], passthrough: List[Path]) -> int:
    try:
        return write_outputs(cfg, built, passthrough)
    except OSError as e:
        raise FileSystemError(str(e), path=str(e.filename) if e.filename else str(cfg.destination)) from e

def build(
    cfg: BuildConfig,
    *,
    compile_style: Compiler = compile_style_file,
    compile_script: Compiler = compile_script_file,
) -> BuildStats:
    """
    Build every HTML document under cfg.source and materialize the result in
    cfg.destination.

    Documents are processed one at a time. The first failure aborts the build:
    documents finished before it (and the assets they reference) are still
    written, later documents are never processed, and the error is re-raised
    with `path` set to the file that was being compiled.
    """
    run = _Run(cfg=cfg, cache=BuildCache(), compile_style=compile_style, compile_script=compile_script)
    if not cfg.source.is_dir():
        raise NotFoundError(f"{cfg.source} not found", path=str(cfg.source))

    html_files = list(iter_files(cfg.source, DOCUMENT_SUFFIX, exclude=cfg.destination))
    log.debug("found %d document(s) under %s", len(html_files), cfg.source)

    try:
        for html_path in html_files:
            rel = relpath_under(cfg.source, html_path).as_posix()
            try:
                run.documents[rel] = _build_document(run, rel)
            except OSError as e:
                raise FileSystemError(str(e), path=run.current) from e
    except StaticBuilderError as e:
        if e.path is None:
            e.path = run.current
        done = run.built_files(completed_only=True)
        log.error("build aborted; writing %d completed file(s)", len(done))
        _write(cfg, done, [])
        raise

    built = run.built_files()
    passthrough = [
        p for p in iter_files(cfg.source, exclude=cfg.destination)
        if not is_source_only(p.name) and relpath_under(cfg.source, p).as_posix() not in built
    ]
    copied = _write(cfg, built, passthrough)

    return BuildStats(
        documents=len(run.documents),
        styles=run.styles,
        scripts=run.scripts,
        cache_hits=run.cache.hits,
        copied=copied,
    )
