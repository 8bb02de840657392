"""SPDX-License-Identifier: GPL-3.0-only

Recoll command-line integration layer.

Runs the ``recoll`` text-mode client for a query summary and for a window
of results, and launches ``recollindex`` to refresh the index. Output is
captured as text; exit status is checked so an absent or failing engine is
not mistaken for an empty result set.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Optional

from .query import sanitize_query

LOGGER = logging.getLogger("recoll_outline.engine")

STATUS_MATCHES = "matches"
STATUS_EMPTY = "empty"
STATUS_ERROR = "error"

# Banner lines printed before the first record of a results listing.
RESULTS_BANNER_LINES = 2

# POSIX shells use 127 for "command not found".
_NOT_FOUND_CODES = {126, 127}


@dataclass
class EngineOutput:
    """Captured result of one engine invocation.

    Attributes:
        command: Shell command line that was run.
        stdout: Captured standard output.
        stderr: Captured standard error.
        returncode: Process exit status.
        status: One of ``matches``, ``empty`` or ``error``.
    """

    command: str
    stdout: str
    stderr: str
    returncode: int
    status: str

    @property
    def ok(self) -> bool:
        return self.status != STATUS_ERROR

    @property
    def engine_missing(self) -> bool:
        return self.status == STATUS_ERROR and self.returncode in _NOT_FOUND_CODES

    def describe_error(self) -> str:
        """Human-readable one-line description of a failed invocation."""
        if self.ok:
            return ""
        detail = self.stderr.strip().splitlines()
        tail = f": {detail[-1]}" if detail else ""
        if self.engine_missing:
            return f"Search engine unavailable (exit {self.returncode}){tail}"
        return f"Search engine failed (exit {self.returncode}){tail}"


def strip_banner(text: str, lines: int = RESULTS_BANNER_LINES) -> str:
    """Drop the leading banner lines from a results listing."""
    parts = text.splitlines(keepends=True)
    return "".join(parts[lines:])


class RecollEngine:
    """Shell-level client for the Recoll query tool.

    Args:
        command: Invocation prefix, e.g. ``recoll -t -A``.
        index_command: Command used by :meth:`refresh_index`.
    """

    def __init__(self, command: str = "recoll -t -A", index_command: str = "recollindex") -> None:
        self.command = command
        self.index_command = index_command

    def header_command(self, query: str) -> str:
        return f"{self.command} -Q '{sanitize_query(query)}'"

    def results_command(self, query: str, start: int, count: int) -> str:
        return f"{self.command} -n '{start}-{count}' -q '{sanitize_query(query)}'"

    def _run(self, command: str) -> subprocess.CompletedProcess:
        return subprocess.run(command, shell=True, capture_output=True, text=True, errors="replace")

    def _invoke(self, command: str, banner_lines: int = 0) -> EngineOutput:
        LOGGER.debug("Running engine command: %s", command)
        try:
            proc = self._run(command)
        except OSError as exc:
            LOGGER.warning("Engine invocation failed: %s", exc)
            return EngineOutput(command=command, stdout="", stderr=str(exc), returncode=127, status=STATUS_ERROR)
        stdout = proc.stdout or ""
        stderr = proc.stderr or ""
        if proc.returncode != 0:
            LOGGER.warning("Engine exited with status %s: %s", proc.returncode, stderr.strip()[:200])
            return EngineOutput(command=command, stdout=stdout, stderr=stderr, returncode=proc.returncode, status=STATUS_ERROR)
        if banner_lines:
            stdout = strip_banner(stdout, banner_lines)
        status = STATUS_MATCHES if stdout.strip() else STATUS_EMPTY
        return EngineOutput(command=command, stdout=stdout, stderr=stderr, returncode=0, status=status)

    def header(self, query: str) -> EngineOutput:
        """Run the query-info invocation (result count and timing summary).

        Args:
            query: Query text as typed (sanitized here).

        Returns:
            EngineOutput: Captured summary.
        """
        return self._invoke(self.header_command(query))

    def results(self, query: str, start: int, count: int) -> EngineOutput:
        """Run the windowed results listing.

        Args:
            query: Query text as typed (sanitized here).
            start: Zero-based offset of the first result.
            count: Number of results requested.

        Returns:
            EngineOutput: Captured records with the banner lines removed.
        """
        return self._invoke(self.results_command(query, start, count), banner_lines=RESULTS_BANNER_LINES)

    def refresh_index(self) -> Optional[int]:
        """Launch the indexer detached; does not wait or report on completion.

        Returns:
            Optional[int]: PID of the launched process, or None if it could not start.
        """
        with open(os.devnull, "wb") as devnull:
            try:
                proc = subprocess.Popen(
                    self.index_command,
                    shell=True,
                    stdout=devnull,
                    stderr=devnull,
                    stdin=devnull,
                    preexec_fn=os.setsid,
                )
            except OSError as exc:
                LOGGER.warning("Could not launch index refresh %r: %s", self.index_command, exc)
                return None
        LOGGER.info("Index refresh launched (pid=%s): %s", proc.pid, self.index_command)
        return proc.pid
