"""SPDX-License-Identifier: GPL-3.0-only

Search session: one active query, its page window and the rendered page.

Replaces process-wide pagination and history globals with an explicit object
so several sessions can coexist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from .config import Settings
from .engine import EngineOutput, RecollEngine
from .formatter import FormattedDocument, ResultRecord, format_results
from .pagination import InvalidNavigation, PageWindow
from .query import reduce_query

if TYPE_CHECKING:  # pragma: no cover
    from browse.dispatch import DispatchReport, OpenedDocument

LOGGER = logging.getLogger("recoll_outline.session")


@dataclass
class ResultPage:
    """One rendered result window.

    Attributes:
        query: Query as typed.
        reduced: Reduced query used for emphasis and in-file search.
        start: Window start.
        end: Window end.
        header: Captured query-info invocation.
        results: Captured results invocation.
        document: Formatted outline.
        paging: True when produced by next/previous rather than a new search.
    """

    query: str
    reduced: str
    start: int
    end: int
    header: EngineOutput
    results: EngineOutput
    document: FormattedDocument
    paging: bool = False

    @property
    def records(self) -> List[ResultRecord]:
        return self.document.records

    @property
    def error(self) -> str:
        for out in (self.header, self.results):
            if not out.ok:
                return out.describe_error()
        return ""


class QueryHistory:
    """In-memory query history, most recent first.

    Lives for the process lifetime only; nothing is written to disk.
    """

    def __init__(self, limit: int = 100) -> None:
        self.limit = limit
        self._items: List[str] = []

    def add(self, query: str) -> None:
        if not query.strip():
            return
        if self._items and self._items[0] == query:
            return
        self._items.insert(0, query)
        del self._items[self.limit:]

    def latest(self) -> Optional[str]:
        return self._items[0] if self._items else None

    def items(self) -> List[str]:
        return list(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


class SearchSession:
    """Drives the engine for one query at a time.

    Args:
        settings: Front-end settings (page size, engine commands, wrap width).
        engine: Engine client; built from ``settings`` when omitted.
        history: Shared history; a private one is created when omitted.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine: Optional[RecollEngine] = None,
        history: Optional[QueryHistory] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.engine = engine or RecollEngine(self.settings.engine_command, self.settings.index_command)
        self.history = history if history is not None else QueryHistory()
        self.window = PageWindow(page_size=self.settings.results_per_page)
        self.query: Optional[str] = None
        self.page: Optional[ResultPage] = None
        self.view_open = False

    @property
    def reduced(self) -> str:
        return reduce_query(self.query) if self.query is not None else ""

    def search(self, query: str, paging: bool = False, start: int = 0) -> ResultPage:
        """Run the engine for ``query`` over the current window.

        A new (non-paging) search records history and resets the window to
        ``(0, page_size)``; paging keeps the window and the open view.

        Args:
            query: Query text as typed.
            paging: True when called for a page move.
            start: Initial offset for a new search (one-shot listings).

        Returns:
            ResultPage: The rendered window.
        """
        if not paging:
            self.query = query
            self.history.add(query)
            self.window.reset()
            if start > 0:
                self.window.start = start
                self.window.end = start + self.window.page_size
        start, end = self.window.start, self.window.end
        LOGGER.info("Searching %r window %s-%s (paging=%s)", query, start, end, paging)
        header = self.engine.header(query)
        results = self.engine.results(query, start, self.window.count)
        reduced = reduce_query(query)
        # Failed invocations still show whatever the engine printed.
        results_text = results.stdout if results.ok else results.stdout + results.stderr
        document = format_results(
            header.stdout,
            results_text,
            start,
            end,
            term=reduced,
            wrap_width=self.settings.wrap_width,
        )
        self.page = ResultPage(
            query=query,
            reduced=reduced,
            start=start,
            end=end,
            header=header,
            results=results,
            document=document,
            paging=paging,
        )
        if self.page.error:
            LOGGER.warning("%s", self.page.error)
        self.view_open = True
        return self.page

    def _require_query(self) -> str:
        if self.query is None:
            raise InvalidNavigation("No search in progress")
        return self.query

    def next_page(self) -> ResultPage:
        query = self._require_query()
        self.window.next()
        return self.search(query, paging=True)

    def previous_page(self) -> ResultPage:
        query = self._require_query()
        self.window.previous()
        return self.search(query, paging=True)

    def record(self, index: int) -> ResultRecord:
        """Return the ``index``-th (1-based) record on the current page.

        Raises:
            IndexError: If there is no such record.
        """
        if self.page is None or not 1 <= index <= len(self.page.records):
            raise IndexError(f"No result #{index} on this page")
        return self.page.records[index - 1]

    def open_result(self, index: int, prompt=None, cache=None) -> Tuple["OpenedDocument", "DispatchReport"]:
        """Open the ``index``-th (1-based) result and run the post-open steps.

        The reduced query is the default in-file search term.

        Args:
            index: Result number on the current page.
            prompt: Asked to confirm or edit the term before searching.
            cache: Extracted-text cache for paged documents.

        Returns:
            tuple[OpenedDocument, DispatchReport]: The document and what was done to it.

        Raises:
            IndexError: If there is no such result.
            OSError: If the file cannot be opened.
        """
        from browse.dispatch import open_document, run_post_open

        rec = self.record(index)
        doc = open_document(Path(rec.path), rec.mime)
        LOGGER.info("Opening result %d: %s", index, doc.path)
        report = run_post_open(doc, self.reduced, self.settings, prompt=prompt, cache=cache)
        return doc, report

    def refresh_index(self) -> Optional[int]:
        return self.engine.refresh_index()

    def close(self) -> None:
        """Close the result view; the query and window are forgotten."""
        self.page = None
        self.query = None
        self.window.reset()
        self.view_open = False
