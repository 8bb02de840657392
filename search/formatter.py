"""SPDX-License-Identifier: GPL-3.0-only

Turn Recoll's text report into a linked org-style outline.

The ``recoll -t -A`` listing prints one record per match::

    text/plain	[file:///home/me/notes/plan.txt]	[plan.txt]	2048	bytes
    ABSTRACT
    ... snippet ...
    /ABSTRACT

Records are parsed in one pass, then rendered as headings carrying a single
``[[file:<path>][<filename>]]`` link, grouped under coarse MIME categories.
"""

from __future__ import annotations

import posixpath
import re
import textwrap
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

_MIME_RE = re.compile(r"^[A-Za-z0-9][\w.+-]*/[\w.+-]+$")
_ABSTRACT_OPEN = "ABSTRACT"
_ABSTRACT_CLOSE = "/ABSTRACT"
# Backslash runs before a bracket (or at the end) are doubled, brackets escaped.
_ORG_ESCAPE_RE = re.compile(r"(\\*)([\[\]]|\Z)")

# Prefix -> heading label; first match wins.
CATEGORY_LABELS: Tuple[Tuple[str, str], ...] = (
    ("message/rfc822", "e-mail"),
    ("text/", "text"),
    ("inode/", "inode"),
    ("image/", "image"),
    ("application/", "application"),
)


def category_for(mime: str) -> str:
    """Return the outline category heading for a MIME type."""
    lowered = mime.lower()
    for prefix, label in CATEGORY_LABELS:
        if lowered.startswith(prefix):
            return label
    return mime


def org_escape(text: str) -> str:
    """Escape ``text`` for use inside an org link target or description."""

    def repl(m: re.Match) -> str:
        slashes, bracket = m.group(1), m.group(2)
        return slashes * 2 + ("\\" + bracket if bracket else "")

    return _ORG_ESCAPE_RE.sub(repl, text)


def url_to_path(url: str) -> str:
    if url.startswith("file://"):
        return url[len("file://"):]
    return url


@dataclass
class ResultRecord:
    """One match from the engine listing.

    Attributes:
        mime: MIME type reported by the engine.
        url: Document URL (``file://`` for local files).
        title: Engine-provided title (often the file name).
        size: Size in bytes when reported.
        abstract: Snippet text, possibly multi-line.
    """

    mime: str
    url: str
    title: str = ""
    size: Optional[int] = None
    abstract: str = ""

    @property
    def path(self) -> str:
        return url_to_path(self.url)

    @property
    def filename(self) -> str:
        trimmed = self.path.rstrip("/") or self.path
        return posixpath.basename(trimmed) or trimmed

    @property
    def category(self) -> str:
        return category_for(self.mime)


@dataclass(frozen=True)
class Link:
    target: str
    label: str

    def to_org(self) -> str:
        return f"[[file:{org_escape(self.target)}][{org_escape(self.label)}]]"


@dataclass
class FormattedDocument:
    """Rendered outline for one result window.

    Attributes:
        text: Org-style outline text.
        links: Links in document order (one per record).
        emphasis: ``(start, end)`` character spans of the highlighted term.
        term: The reduced query term that was highlighted.
        records: Parsed records the document was built from.
    """

    text: str
    links: List[Link] = field(default_factory=list)
    emphasis: List[Tuple[int, int]] = field(default_factory=list)
    term: str = ""
    records: List[ResultRecord] = field(default_factory=list)

    def to_org(self) -> str:
        return self.text


def _bracketed(value: str) -> Optional[str]:
    if len(value) >= 2 and value.startswith("[") and value.endswith("]"):
        return value[1:-1]
    return None


def parse_record_line(line: str) -> Optional[ResultRecord]:
    """Parse one tab-separated record line, or return None.

    Fields are ``mime``, ``[url]``, ``[title]`` and optionally ``size``
    followed by ``bytes``. Only the outer brackets are removed, so paths and
    titles may themselves contain brackets.
    """
    fields = line.strip("\r\n").split("\t")
    while fields and not fields[-1].strip():
        fields.pop()
    if len(fields) < 3 or not _MIME_RE.match(fields[0].strip()):
        return None
    url = _bracketed(fields[1].strip())
    title = _bracketed(fields[2].strip())
    if url is None or title is None:
        return None
    size: Optional[int] = None
    rest = [f.strip() for f in fields[3:]]
    if rest:
        if len(rest) != 2 or not rest[0].isdigit() or rest[1] != "bytes":
            return None
        size = int(rest[0])
    return ResultRecord(mime=fields[0].strip(), url=url, title=title, size=size)


def parse_report(text: str) -> Tuple[List[ResultRecord], List[str]]:
    """Parse a results listing into records.

    Args:
        text: Raw listing with banner lines already removed.

    Returns:
        tuple[list[ResultRecord], list[str]]: Records in engine order and any
        non-blank lines that belong to no record (kept for display).
    """
    records: List[ResultRecord] = []
    stray: List[str] = []
    current: Optional[ResultRecord] = None
    abstract: Optional[List[str]] = None
    for line in text.splitlines():
        stripped = line.strip()
        if abstract is not None:
            if stripped == _ABSTRACT_CLOSE:
                if current is not None:
                    current.abstract = "\n".join(abstract).strip()
                abstract = None
            else:
                abstract.append(line)
            continue
        rec = parse_record_line(line)
        if rec is not None:
            current = rec
            records.append(current)
            continue
        if stripped == _ABSTRACT_OPEN:
            abstract = []
            continue
        if stripped in ("", _ABSTRACT_CLOSE):
            continue
        stray.append(line.rstrip())
    if abstract is not None and current is not None:
        # listing truncated mid-abstract
        current.abstract = "\n".join(abstract).strip()
    return records, stray


def fill_paragraphs(text: str, width: int) -> str:
    """Reflow each blank-line separated paragraph to ``width`` columns."""
    paragraphs = re.split(r"\n\s*\n", text.strip())
    filled = [
        textwrap.fill(" ".join(p.split()), width=width, break_long_words=False, break_on_hyphens=False)
        for p in paragraphs
        if p.strip()
    ]
    return "\n\n".join(filled)


def window_label(start: int, end: int) -> str:
    return f"Results: {start} - {end}"


def term_pattern(term: str) -> Optional[re.Pattern]:
    words = term.split()
    if not words:
        return None
    # reflow may have moved a line break between the words
    return re.compile(r"\s+".join(re.escape(w) for w in words), re.IGNORECASE)


def emphasis_spans(text: str, term: str) -> List[Tuple[int, int]]:
    """Character spans of every case-insensitive occurrence of ``term``."""
    pattern = term_pattern(term)
    if pattern is None:
        return []
    return [m.span() for m in pattern.finditer(text)]


def format_results(
    header: str,
    results: str,
    start: int,
    end: int,
    term: str = "",
    wrap_width: int = 70,
) -> FormattedDocument:
    """Build the linked outline for one result window.

    Structure is rendered first, paragraphs are filled next, and emphasis
    spans for ``term`` are computed last over the final text.

    Args:
        header: Raw query-info output (count and timing).
        results: Raw results listing, banner removed.
        start: Window start shown in the label.
        end: Window end shown in the label.
        term: Reduced query term to emphasise.
        wrap_width: Fill column for paragraphs.

    Returns:
        FormattedDocument: The outline plus its links and emphasis spans.
    """
    records, stray = parse_report(results)
    blocks: List[str] = []
    if header.strip():
        blocks.append(fill_paragraphs(header, wrap_width))
    blocks.append(window_label(start, end))

    links: List[Link] = []
    entries: List[str] = []
    last_category: Optional[str] = None
    for rec in records:
        if rec.category != last_category:
            entries.append(f"* {rec.category}")
            last_category = rec.category
        link = Link(target=rec.path, label=rec.filename)
        links.append(link)
        entry = f"** {link.to_org()}"
        if rec.abstract:
            entry += "\n" + fill_paragraphs(rec.abstract, wrap_width)
        entries.append(entry)
    if entries:
        blocks.append("\n".join(entries))
    if stray:
        blocks.append("\n".join(stray))

    text = "\n\n".join(blocks) + "\n"
    return FormattedDocument(
        text=text,
        links=links,
        emphasis=emphasis_spans(text, term),
        term=term,
        records=records,
    )
