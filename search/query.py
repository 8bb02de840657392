"""SPDX-License-Identifier: GPL-3.0-only

Query text transforms.

``sanitize_query`` prepares text for a single-quoted shell argument;
``reduce_query`` strips Recoll query-language syntax so the remainder can be
used as a literal in-document search term.
"""

from __future__ import annotations

import re

# token:value followed by whitespace (author:smith, ext:pdf, dir:/tmp ...).
# Also eats free text shaped like "word:rest "; accepted limitation.
_FIELD_CLAUSE_RE = re.compile(r"\S+:\S*\s+")


def sanitize_query(text: str) -> str:
    """Escape text for embedding inside a single-quoted shell argument.

    Each ``'`` closes the quote, adds an escaped quote and reopens it.

    Args:
        text: Raw user query.

    Returns:
        str: Escaped text.
    """
    return text.replace("'", "'\\''")


def reduce_query(text: str) -> str:
    """Reduce a Recoll query to a plain search term.

    Removes double quotes and ``field:value`` clauses, then collapses
    whitespace.

    Args:
        text: Original query as typed.

    Returns:
        str: Fallback term for a literal substring search (may be empty).
    """
    reduced = text.replace('"', "")
    reduced = _FIELD_CLAUSE_RE.sub("", reduced)
    return " ".join(reduced.split())
