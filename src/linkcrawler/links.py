"""
Pattern-based anchor link extraction.
"""
from __future__ import annotations

import re
from typing import Set

# <a ...href="..."> or <a ...href='...'>; other attributes may precede href.
# Quoted values before href are skipped whole, so they may contain '>'.
# The closing quote must match the opening one.
ANCHOR_HREF_RE = re.compile(
    r"""<a\s(?:[^>"']|"[^"]*"|'[^']*')*?(?<![\w-])href\s*=\s*(["'])(.*?)\1""",
    re.IGNORECASE,
)


def extract_links(html: str) -> Set[str]:
    """
    Extract the distinct href values of anchor tags.

    Values are returned verbatim: no entity decoding and no resolution of
    relative references. Empty values are dropped.
    """
    return {m.group(2) for m in ANCHOR_HREF_RE.finditer(html) if m.group(2)}


def is_candidate(link: str) -> bool:
    """Check if a link is eligible for recursion (starts with http, any case)."""
    return link[:4].lower() == "http"
