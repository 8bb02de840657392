"""SPDX-License-Identifier: GPL-3.0-only

Render HTML-family results to readable text.
"""

from __future__ import annotations

import re

try:
    from bs4 import BeautifulSoup  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    BeautifulSoup = None  # type: ignore

MARKUP_SUFFIXES = frozenset({".html", ".htm", ".xhtml", ".shtml"})


def available() -> bool:
    return BeautifulSoup is not None


def render_html(html_text: str) -> str:
    """Strip scripts, styles and tags, keeping one block of text per line.

    Raises:
        RuntimeError: If BeautifulSoup is not installed.
    """
    if BeautifulSoup is None:
        raise RuntimeError("beautifulsoup4 not installed for HTML rendering")
    soup = BeautifulSoup(html_text, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text("\n", strip=True)
    return re.sub(r"\n{3,}", "\n\n", text)
