from __future__ import annotations

import htmlmin
import jsmin

def minify_html(text: str) -> str:
    return htmlmin.minify(
        text,
        remove_comments=True,
        remove_empty_space=True,
        reduce_boolean_attributes=True,
        # preload onload handlers carry backticks; keep quoting intact
        remove_optional_attribute_quotes=False,
    )

def minify_js(text: str) -> str:
    return jsmin.jsmin(text, quote_chars="'\"`")
