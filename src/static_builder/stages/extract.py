from __future__ import annotations

from dataclasses import dataclass
from typing import List

from bs4 import BeautifulSoup, Tag

from static_builder.core.paths import is_external, map_reference, normalize_reference

STYLE = "style"
SCRIPT = "script"

@dataclass(frozen=True)
class AssetReference:
    kind: str        # STYLE | SCRIPT
    raw_path: str    # normalized attribute value, relative to owner_dir
    owner_dir: str   # document directory, relative to the source root

    @property
    def resolved(self) -> str:
        return map_reference(self.owner_dir, self.raw_path)

def _rel_tokens(tag: Tag) -> List[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [r.lower() for r in rel]

def _is_stylesheet(tag: Tag) -> bool:
    return tag.name == "link" and "stylesheet" in _rel_tokens(tag) and tag.has_attr("href")

def _is_script(tag: Tag) -> bool:
    return tag.name == "script" and tag.has_attr("src")

def style_elements(doc: BeautifulSoup) -> List[Tag]:
    return doc.find_all(_is_stylesheet)

def script_elements(doc: BeautifulSoup) -> List[Tag]:
    return doc.find_all(_is_script)

def _references(elements: List[Tag], attr: str, kind: str, owner_dir: str) -> List[AssetReference]:
    out: List[AssetReference] = []
    for el in elements:
        raw = normalize_reference(el[attr])
        if not raw or is_external(raw):
            continue
        out.append(AssetReference(kind=kind, raw_path=raw, owner_dir=owner_dir))
    return out

def find_style_references(doc: BeautifulSoup, owner_dir: str = "") -> List[AssetReference]:
    return _references(style_elements(doc), "href", STYLE, owner_dir)

def find_script_references(doc: BeautifulSoup, owner_dir: str = "") -> List[AssetReference]:
    return _references(script_elements(doc), "src", SCRIPT, owner_dir)
