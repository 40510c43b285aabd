from __future__ import annotations

from bs4 import BeautifulSoup

from static_builder.core.paths import normalize_reference
from static_builder.stages.extract import STYLE, script_elements, style_elements

# Quotes inside attribute values get entity-escaped on output; backticks do not.
PRELOAD_ONLOAD = "this.onload=null;this.rel=`stylesheet`"

def rewrite_reference(doc: BeautifulSoup, kind: str, original: str, replaced: str) -> int:
    """
    Point every reference of `kind` equal to `original` (after normalization)
    at `replaced`. Returns the number of rewritten elements; zero is fine.
    """
    if kind == STYLE:
        attr, elements = "href", style_elements(doc)
    else:
        attr, elements = "src", script_elements(doc)

    n = 0
    for el in elements:
        if normalize_reference(el[attr]) == original:
            el[attr] = replaced
            n += 1
    return n

def convert_blocking_styles_to_preload(doc: BeautifulSoup) -> int:
    """
    Replace each <link rel="stylesheet"> with a preload link that promotes
    itself to a stylesheet on load, followed by a <noscript> fallback.
    """
    n = 0
    for el in style_elements(doc):
        if el.find_parent("noscript") is not None:
            continue
        href = el["href"]
        preload = doc.new_tag("link", attrs={
            "rel": "preload",
            "href": href,
            "as": "style",
            "onload": PRELOAD_ONLOAD,
        })
        noscript = doc.new_tag("noscript")
        noscript.append(doc.new_tag("link", attrs={"rel": "stylesheet", "href": href}))
        el.replace_with(preload)
        preload.insert_after(noscript)
        n += 1
    return n
