"""SPDX-License-Identifier: GPL-3.0-only

Command-line entry point: one-shot result listing or the interactive browser.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from search.config import load_settings
from search.session import SearchSession

from .logging_config import configure_logging
from .shell import ResultShell, render_page

LOGGER = logging.getLogger("recoll_outline.cli")


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Browse Recoll search results as a linked outline")
    p.add_argument("query", nargs="*", help="Recoll query (omit to start the interactive browser)")
    p.add_argument("-i", "--interactive", action="store_true", help="Stay in the interactive browser after the first query")
    p.add_argument("--start", type=int, default=0, help="First result offset for a one-shot listing (default: 0)")
    p.add_argument("--page-size", dest="results_per_page", type=int, help="Results per page (default: 10)")
    p.add_argument("--engine-command", help="Engine invocation prefix (default: 'recoll -t -A')")
    p.add_argument("--index-command", help="Index refresh command (default: recollindex)")
    p.add_argument("--wrap-width", type=int, help="Fill column for abstracts (default: 70)")
    p.add_argument("--dir", dest="base_dir", type=Path, help="Base directory for logs and text cache (default: data)")
    p.add_argument("--no-file-search", dest="auto_file_search", action="store_const", const=False, help="Do not search opened files for the query")
    p.add_argument("--no-prompt", dest="prompt_before_search", action="store_const", const=False, help="Search opened files without asking for the term")
    p.add_argument("--writable", dest="result_read_only", action="store_const", const=False, help="Do not mark opened files read-only")
    p.add_argument("--no-render", dest="render_markup", action="store_const", const=False, help="Show HTML results as source")
    p.add_argument("--org", dest="org_file", type=Path, help="Also write the outline to this .org file")
    p.add_argument("--refresh-index", action="store_true", help="Launch an index refresh in the background first")
    p.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    p.add_argument("--log-json", action="store_true", help="Write JSON log lines")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        settings = load_settings(
            results_per_page=args.results_per_page,
            engine_command=args.engine_command,
            index_command=args.index_command,
            wrap_width=args.wrap_width,
            base_dir=args.base_dir,
            auto_file_search=args.auto_file_search,
            prompt_before_search=args.prompt_before_search,
            result_read_only=args.result_read_only,
            render_markup=args.render_markup,
        )
    except ValueError as exc:
        print(f"recoll-outline: {exc}", file=sys.stderr)
        return 2
    configure_logging(args.log_level, json_mode=args.log_json, log_path=settings.log_path)
    console = Console()
    session = SearchSession(settings)

    pid = None
    if args.refresh_index:
        pid = session.refresh_index()
        console.print("Index refresh started" if pid is not None else "[red]Index refresh could not be started[/red]")

    query = " ".join(args.query).strip()
    if not query and args.refresh_index and not args.interactive:
        return 0 if pid is not None else 1
    if not query or args.interactive:
        return ResultShell(session, console=console).run(initial_query=query or None)

    if args.start < 0:
        print("recoll-outline: --start must not be negative", file=sys.stderr)
        return 2
    page = session.search(query, start=args.start)
    if page.error:
        console.print(f"[red]{escape(page.error)}[/red]")
    console.print(render_page(page))
    if args.org_file:
        args.org_file.parent.mkdir(parents=True, exist_ok=True)
        args.org_file.write_text(page.document.to_org(), encoding="utf-8")
        LOGGER.info("Wrote outline to %s", args.org_file)
    return 1 if page.error else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
