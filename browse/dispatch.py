"""SPDX-License-Identifier: GPL-3.0-only

Post-open handling for a followed result link.

Once a result file is opened, ``run_post_open`` runs the configured steps in
order: render markup, fit paged documents to the window, search the file
for the reduced query, and protect the document from edits. A missing
capability is reported on the returned ``DispatchReport`` and the step is
skipped; nothing is retried and nothing is raised to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from search.config import Settings
from search.formatter import term_pattern

from . import extract, markup, ocr

LOGGER = logging.getLogger("recoll_outline.dispatch")

KIND_MARKUP = "markup"
KIND_PAGED = "paged"
KIND_TEXT = "text"
KIND_OTHER = "other"

PAGED_SUFFIXES = frozenset({".pdf", ".djvu", ".ps", ".eps", ".dvi"}) | extract.PDF_SUFFIXES | ocr.IMAGE_SUFFIXES
MARKUP_MIME_TYPES = frozenset({"text/html", "application/xhtml+xml"})
TEXT_MIME_PREFIXES = ("text/", "message/")
TEXT_MIME_TYPES = frozenset({
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-sh",
    "application/x-shellscript",
    "application/x-perl",
    "application/x-awk",
})


# Receives the default term, returns the (possibly edited) term or None to cancel.
Prompt = Callable[[str], Optional[str]]


class ReadOnlyDocumentError(Exception):
    """Raised on an attempt to modify a read-only opened document."""


@dataclass
class SearchHit:
    """A match inside the opened document.

    Attributes:
        page: 1-based page for paged documents, else None.
        line: 1-based line within the page (or document).
        column: 0-based column of the match start.
        context: The matching line, trimmed.
    """

    page: Optional[int]
    line: int
    column: int
    context: str


@dataclass
class OpenedDocument:
    """A result file as held by the viewer.

    Attributes:
        path: File on disk.
        kind: ``markup``, ``paged``, ``text`` or ``other``.
        text: Displayed text (rendered text for markup once rendered).
        pages: Extracted page text for paged documents.
        rendered: True once markup has been rendered.
        fit_to_window: True once a paged document was fitted.
        read_only: Edits raise ReadOnlyDocumentError when set.
        mime: MIME type reported by the engine, if known.
    """

    path: Path
    kind: str
    text: str = ""
    pages: List[str] = field(default_factory=list)
    rendered: bool = False
    fit_to_window: bool = False
    read_only: bool = False
    mime: str = ""

    @property
    def is_paged(self) -> bool:
        return self.kind == KIND_PAGED

    def replace_text(self, text: str) -> None:
        if self.read_only:
            raise ReadOnlyDocumentError(f"{self.path.name} is read-only")
        self.text = text


@dataclass
class DispatchReport:
    """What ``run_post_open`` did for one opened document."""

    term: Optional[str] = None
    searched: bool = False
    backend: Optional[str] = None
    hits: List[SearchHit] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    def note(self, message: str) -> None:
        LOGGER.info("%s", message)
        self.messages.append(message)


def viewer_kind(path: Path, mime: Optional[str] = None) -> str:
    """Pick the viewer for ``path``.

    Markup and paged documents are recognised by suffix. Anything else is a
    text viewer when its MIME type (as reported by the engine) is textual;
    without a MIME type the file is assumed to be text.
    """
    suffix = path.suffix.lower()
    mime = (mime or "").lower()
    if suffix in markup.MARKUP_SUFFIXES or mime in MARKUP_MIME_TYPES:
        return KIND_MARKUP
    if suffix in PAGED_SUFFIXES:
        return KIND_PAGED
    if not mime or mime.startswith(TEXT_MIME_PREFIXES) or mime in TEXT_MIME_TYPES:
        return KIND_TEXT
    return KIND_OTHER


def open_document(path: Path, mime: Optional[str] = None) -> OpenedDocument:
    """Load a result file for viewing.

    Text and markup files are read (undecodable bytes replaced); paged and
    other binary documents are not read here.

    Raises:
        OSError: If the file cannot be read.
    """
    kind = viewer_kind(path, mime)
    text = ""
    if kind in (KIND_MARKUP, KIND_TEXT):
        text = path.read_text(encoding="utf-8", errors="replace")
    elif not path.exists():
        raise FileNotFoundError(f"No such file: {path}")
    LOGGER.debug("Opened %s as %s (%s)", path, kind, mime or "no mime")
    return OpenedDocument(path=path, kind=kind, text=text, mime=mime or "")


def find_hits(text: str, term: str, page: Optional[int] = None) -> List[SearchHit]:
    """Case-insensitive literal search; words may be split across lines."""
    pattern = term_pattern(term)
    if pattern is None:
        return []
    hits: List[SearchHit] = []
    for m in pattern.finditer(text):
        line_start = text.rfind("\n", 0, m.start()) + 1
        line_end = text.find("\n", m.start())
        if line_end == -1:
            line_end = len(text)
        hits.append(
            SearchHit(
                page=page,
                line=text.count("\n", 0, m.start()) + 1,
                column=m.start() - line_start,
                context=text[line_start:line_end].strip()[:160],
            )
        )
    return hits


def _render(doc: OpenedDocument, report: DispatchReport) -> None:
    if not markup.available():
        report.note("HTML rendering unavailable (beautifulsoup4 not installed); showing source")
        return
    doc.text = markup.render_html(doc.text)
    doc.rendered = True


def _search_paged(doc: OpenedDocument, term: str, report: DispatchReport, cache: Optional[extract.TextCache]) -> None:
    backend = extract.backend_for(doc.path)
    if backend is None:
        report.note(f"Text search unavailable for {doc.path.suffix or doc.path.name} documents")
        return
    try:
        doc.pages = cache.pages(doc.path) if cache is not None else extract.extract_pages(doc.path)
    except (RuntimeError, OSError) as exc:
        report.note(f"Text extraction failed for {doc.path.name}: {exc}")
        return
    report.backend = backend
    report.searched = True
    for number, page_text in enumerate(doc.pages, start=1):
        report.hits.extend(find_hits(page_text, term, page=number))


def _search_text(doc: OpenedDocument, term: str, report: DispatchReport) -> None:
    report.backend = "isearch"
    report.searched = True
    report.hits.extend(find_hits(doc.text, term))


def run_post_open(
    doc: OpenedDocument,
    term: str,
    settings: Settings,
    prompt: Optional[Prompt] = None,
    cache: Optional[extract.TextCache] = None,
) -> DispatchReport:
    """Run the post-open steps for ``doc``.

    Args:
        doc: The opened document; updated in place.
        term: Reduced query term to look for.
        settings: Supplies the render/search/prompt/read-only switches.
        prompt: Called with the default term when ``prompt_before_search`` is set.
        cache: Extracted-text cache for paged documents.

    Returns:
        DispatchReport: Hits, the backend used and any informational messages.
    """
    report = DispatchReport()
    if doc.kind == KIND_MARKUP and settings.render_markup:
        _render(doc, report)
    if doc.is_paged:
        doc.fit_to_window = True
    if settings.auto_file_search:
        chosen: Optional[str] = term
        if settings.prompt_before_search and prompt is not None:
            chosen = prompt(term)
        if chosen is None:
            report.note("Search cancelled")
        elif not chosen.strip():
            report.note("Nothing to search for")
        else:
            report.term = chosen
            if doc.is_paged:
                _search_paged(doc, chosen, report, cache)
            elif doc.kind == KIND_OTHER:
                report.note(f"Text search unavailable for {doc.mime or doc.path.suffix or doc.path.name} documents")
            else:
                _search_text(doc, chosen, report)
            if report.searched and not report.hits:
                report.note(f"No match for {chosen!r} in {doc.path.name}")
    if settings.result_read_only:
        doc.read_only = True
    return report
