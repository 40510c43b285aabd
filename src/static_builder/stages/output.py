from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable

from static_builder.config import BuildConfig
from static_builder.io.fs import copy_file, ensure_dir, iter_files, relpath_under, write_text_utf8
from static_builder.logging import get_logger

log = get_logger()

def clear_destination(dest: Path) -> None:
    if not dest.exists():
        ensure_dir(dest)
        return
    for p in list(iter_files(dest)):
        p.unlink()

def write_outputs(cfg: BuildConfig, built: Dict[str, str], passthrough: Iterable[Path]) -> int:
    """
    Write built files (keyed by source-root relative path) under the
    destination, then copy pass-through files to their mirrored location.
    Returns the number of copied files.
    """
    if cfg.clean:
        log.debug("clearing %s", cfg.destination)
        clear_destination(cfg.destination)

    for key, content in sorted(built.items()):
        log.debug("writing %s", key)
        write_text_utf8(cfg.destination / key, content)

    copied = 0
    for src in passthrough:
        rel = relpath_under(cfg.source, src)
        copy_file(src, cfg.destination / rel)
        copied += 1
    return copied
