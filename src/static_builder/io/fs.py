from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, Optional

from static_builder.errors import ParseError

def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def iter_files(root: Path, suffix: Optional[str] = None, *, exclude: Optional[Path] = None) -> Iterable[Path]:
    """
    Files under `root` in sorted order. `suffix` matches case-insensitively;
    anything inside `exclude` (e.g. a destination nested in the source) is skipped.
    """
    skip = exclude.resolve() if exclude is not None else None
    for p in sorted(root.rglob("*")):
        if not p.is_file():
            continue
        if suffix is not None and p.suffix.lower() != suffix:
            continue
        if skip is not None and skip in p.resolve().parents:
            continue
        yield p

def relpath_under(root: Path, p: Path) -> Path:
    return p.resolve().relative_to(root.resolve())

def read_text_utf8(p: Path) -> str:
    try:
        return p.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Non-UTF8 input: {e}", path=str(p)) from e

def write_text_utf8(p: Path, s: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(s, encoding="utf-8", newline="\n")

def copy_file(src: Path, dst: Path) -> None:
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
