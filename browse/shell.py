"""SPDX-License-Identifier: GPL-3.0-only

Interactive result browser.

Commands:
    search QUERY | s QUERY   new search (window reset to the first page)
    next | n                 next page
    prev | p                 previous page
    open N | o N             open result N of the page and search it
    refresh | r              launch an index refresh in the background
    history | h              list this session's queries
    close | c                close the result view
    quit | q                 leave the browser

Any other line is a search. So is a command word followed by text the
command does not take, e.g. "next steps" or "open source".
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from search.pagination import InvalidNavigation
from search.session import ResultPage, SearchSession

from .dispatch import DispatchReport, OpenedDocument
from .extract import TextCache

LOGGER = logging.getLogger("recoll_outline.shell")

LINK_STYLE = "underline cyan"
HEADING_STYLE = "bold magenta"
EMPHASIS_STYLE = "bold italic"
MAX_HITS_SHOWN = 20


def render_page(page: ResultPage) -> Text:
    """Rich text for a result page with the query term emphasised."""
    doc = page.document
    text = Text(doc.text)
    text.highlight_regex(r"(?m)^\* .*$", HEADING_STYLE)
    text.highlight_regex(r"\[\[file:(?:\\.|[^\]\\])*\]\[(?:\\.|[^\]\\])*\]\]", LINK_STYLE)
    for start, end in doc.emphasis:
        text.stylize(EMPHASIS_STYLE, start, end)
    return text


class ResultShell:
    """Read-eval loop over a :class:`SearchSession`.

    Args:
        session: Session to drive.
        console: Output console (a recording console in tests).
        read_line: Line reader; defaults to ``console.input``.
    """

    def __init__(
        self,
        session: SearchSession,
        console: Optional[Console] = None,
        read_line: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.session = session
        self.console = console or Console()
        self._read = read_line or self.console.input
        self.cache = TextCache(session.settings.cache_dir)
        self.last_opened: Optional[OpenedDocument] = None
        self._commands: Dict[str, Callable[[str], bool]] = {
            "search": self.cmd_search, "s": self.cmd_search,
            "next": self.cmd_next, "n": self.cmd_next,
            "prev": self.cmd_prev, "p": self.cmd_prev,
            "open": self.cmd_open, "o": self.cmd_open,
            "refresh": self.cmd_refresh, "r": self.cmd_refresh,
            "history": self.cmd_history, "h": self.cmd_history,
            "close": self.cmd_close, "c": self.cmd_close,
            "quit": self.cmd_quit, "q": self.cmd_quit,
            "help": self.cmd_help, "?": self.cmd_help,
        }

    # --- display ---
    def show_page(self, page: ResultPage) -> None:
        if not page.paging:
            self.console.rule(escape(f"recoll: {page.query}"))
        if page.error:
            self.console.print(f"[red]{escape(page.error)}[/red]")
        self.console.print(render_page(page))
        if page.records:
            self.console.print(f"[dim]open 1-{len(page.records)} to view a result; next/prev to page[/dim]")
        else:
            self.console.print("[dim]No results in this window[/dim]")

    def show_report(self, doc: OpenedDocument, report: DispatchReport) -> None:
        flags = [doc.kind]
        if doc.rendered:
            flags.append("rendered")
        if doc.fit_to_window:
            flags.append("fit")
        if doc.read_only:
            flags.append("read-only")
        self.console.print(escape(f"Opened {doc.path} ({', '.join(flags)})"))
        for message in report.messages:
            self.console.print(f"[yellow]{escape(message)}[/yellow]")
        for hit in report.hits[:MAX_HITS_SHOWN]:
            where = f"p{hit.page}:" if hit.page is not None else ""
            line = Text(f"  {where}{hit.line}:{hit.column}  ")
            line.append(hit.context)
            if report.term:
                line.highlight_words(report.term.split(), EMPHASIS_STYLE, case_sensitive=False)
            self.console.print(line)
        if len(report.hits) > MAX_HITS_SHOWN:
            self.console.print(f"[dim]... {len(report.hits) - MAX_HITS_SHOWN} more[/dim]")

    def prompt_term(self, default: str) -> Optional[str]:
        try:
            answer = self._read(escape(f"Search file for [{default}]: "))
        except EOFError:
            return None
        return answer.strip() or default

    # --- commands (return False to stop the loop) ---
    def cmd_search(self, arg: str) -> bool:
        if not arg.strip():
            latest = self.session.history.latest()
            if latest is None:
                self.console.print("Usage: search QUERY")
                return True
            arg = latest
        self.show_page(self.session.search(arg.strip()))
        return True

    def cmd_next(self, arg: str) -> bool:
        try:
            self.show_page(self.session.next_page())
        except InvalidNavigation as exc:
            self.console.print(f"[yellow]{escape(str(exc))}[/yellow]")
        return True

    def cmd_prev(self, arg: str) -> bool:
        try:
            self.show_page(self.session.previous_page())
        except InvalidNavigation as exc:
            self.console.print(f"[yellow]{escape(str(exc))}[/yellow]")
        return True

    def cmd_open(self, arg: str) -> bool:
        try:
            index = int(arg)
        except ValueError:
            self.console.print("Usage: open N")
            return True
        try:
            doc, report = self.session.open_result(index, prompt=self.prompt_term, cache=self.cache)
        except IndexError as exc:
            self.console.print(f"[yellow]{escape(str(exc))}[/yellow]")
            return True
        except OSError as exc:
            self.console.print(f"[red]{escape(f'Cannot open: {exc}')}[/red]")
            return True
        self.last_opened = doc
        self.show_report(doc, report)
        return True

    def cmd_refresh(self, arg: str) -> bool:
        pid = self.session.refresh_index()
        if pid is None:
            self.console.print("[red]Index refresh could not be started[/red]")
        else:
            self.console.print(f"Index refresh started (pid {pid})")
        return True

    def cmd_history(self, arg: str) -> bool:
        items = self.session.history.items()
        if not items:
            self.console.print("No searches yet")
        for n, query in enumerate(items, start=1):
            self.console.print(f"{n:>3}  {query}", markup=False, highlight=False)
        return True

    def cmd_close(self, arg: str) -> bool:
        self.session.close()
        self.last_opened = None
        self.console.print("Results closed")
        return True

    def cmd_quit(self, arg: str) -> bool:
        return False

    def cmd_help(self, arg: str) -> bool:
        self.console.print(__doc__.split("Commands:", 1)[1].rstrip(), markup=False, highlight=False)
        return True

    @staticmethod
    def _takes(handler: Callable[[str], bool], arg: str) -> bool:
        """True when ``arg`` is a valid argument for ``handler``."""
        if handler.__name__ == "cmd_search":
            return True
        if handler.__name__ == "cmd_open":
            return not arg or arg.isdigit()
        return not arg

    def execute(self, line: str) -> bool:
        """Run one command line; returns False when the loop should stop."""
        line = line.strip()
        if not line:
            return True
        name, _, arg = line.partition(" ")
        arg = arg.strip()
        handler = self._commands.get(name.lower())
        if handler is None or not self._takes(handler, arg):
            # bare text, or a command word followed by text it does not take
            return self.cmd_search(line)
        LOGGER.debug("Command %s %r", name, arg)
        return handler(arg)

    def run(self, initial_query: Optional[str] = None) -> int:
        if initial_query:
            self.cmd_search(initial_query)
        while True:
            try:
                line = self._read("recoll> ")
            except (EOFError, KeyboardInterrupt):
                self.console.print()
                return 0
            if not self.execute(line):
                return 0
