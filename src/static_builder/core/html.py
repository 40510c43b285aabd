from __future__ import annotations

from pathlib import Path

from bs4 import BeautifulSoup

from static_builder.errors import ParseError, SerializeError
from static_builder.io.fs import read_text_utf8

# html.parser is lenient: malformed markup is kept as best it can be, not rejected.
PARSER = "html.parser"

def parse_document(text: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(text, PARSER)
    except Exception as e:
        raise ParseError(f"Malformed HTML: {e}") from e

def serialize_document(doc: BeautifulSoup) -> str:
    try:
        return doc.decode(formatter="html5")
    except Exception as e:
        raise SerializeError(f"Could not serialize HTML: {e}") from e

def normalize_class_attributes(doc: BeautifulSoup) -> None:
    """Drop repeated class tokens, keeping the first occurrence of each."""
    for tag in doc.find_all(class_=True):
        classes = tag["class"]
        if isinstance(classes, str):
            classes = classes.split()
        tag["class"] = list(dict.fromkeys(c for c in classes if c))

def load_document(path: Path) -> BeautifulSoup:
    doc = parse_document(read_text_utf8(path))
    normalize_class_attributes(doc)
    return doc
