from __future__ import annotations

import posixpath
import re

# Source extensions and the extension their built output carries.
_STYLE_SOURCE = re.compile(r"\.(s[ac]|c)ss$", flags=re.IGNORECASE)
_SCRIPT_SOURCE = re.compile(r"\.(tsx?|jsx)$", flags=re.IGNORECASE)

# Files consumed by the build and never copied through as-is.
_SOURCE_ONLY = re.compile(r"\.(html|s[ac]ss|tsx?|jsx)$", flags=re.IGNORECASE)

DOCUMENT_SUFFIX = ".html"

_EXTERNAL = re.compile(r"^(?:[a-z][a-z0-9+.\-]*:|//)", flags=re.IGNORECASE)

def is_external(ref: str) -> bool:
    return bool(_EXTERNAL.match((ref or "").strip()))

def normalize_reference(ref: str) -> str:
    ref = (ref or "").strip()
    if not ref:
        return ""
    return posixpath.normpath(ref)

def map_reference(owner_dir: str, ref: str) -> str:
    """
    Map a reference found in a document living in `owner_dir` to a path
    relative to the source root. References starting with "/" are already
    anchored at the source root and are returned unchanged.
    """
    if ref.startswith("/"):
        return ref
    return posixpath.normpath(posixpath.join(owner_dir, ref))

def demap_reference(owner_dir: str, resolved: str) -> str:
    """Inverse of map_reference: the path to write back into a document in `owner_dir`."""
    if resolved.startswith("/"):
        return resolved
    return posixpath.relpath(resolved, owner_dir or ".")

def source_key(path: str) -> str:
    return path.lstrip("/")

def built_style_path(path: str) -> str:
    return _STYLE_SOURCE.sub(".css", path)

def built_script_path(path: str) -> str:
    return _SCRIPT_SOURCE.sub(".js", path)

def is_source_only(path: str) -> bool:
    return bool(_SOURCE_ONLY.search(path))
