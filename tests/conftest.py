"""SPDX-License-Identifier: GPL-3.0-only

Test configuration: add project root to sys.path for package imports.
"""

from __future__ import annotations

import re
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from search.engine import RecollEngine


def recoll_record(path: str, mime: str = "text/plain", abstract: str = "", size: int = 1024) -> str:
    """One record as printed by ``recoll -t -A``."""
    name = path.rstrip("/").rsplit("/", 1)[-1]
    block = f"{mime}\t[file://{path}]\t[{name}]\t{size}\tbytes\t\n"
    if abstract:
        block += f"ABSTRACT\n{abstract}\n/ABSTRACT\n"
    return block


class FakeRecoll:
    """Stands in for the recoll binary behind ``RecollEngine._run``.

    ``docs`` is a list of ``(path, mime, abstract)`` tuples in rank order.
    """

    def __init__(self) -> None:
        self.docs: list = []
        self.commands: list = []
        self.returncode = 0
        self.stderr = ""

    def __call__(self, engine, command: str) -> subprocess.CompletedProcess:
        self.commands.append(command)
        if self.returncode:
            return subprocess.CompletedProcess(command, self.returncode, "", self.stderr)
        banner = f"Recoll query: ({command.rsplit(' ', 1)[-1]})\n{len(self.docs)} results\n"
        m = re.search(r"-n '(\d+)-(\d+)'", command)
        if not m:
            return subprocess.CompletedProcess(command, 0, banner, "")
        start, count = int(m.group(1)), int(m.group(2))
        body = "".join(recoll_record(p, mime, abstract) for p, mime, abstract in self.docs[start:start + count])
        return subprocess.CompletedProcess(command, 0, banner + body, "")


@pytest.fixture
def fake_recoll(monkeypatch):
    fake = FakeRecoll()
    monkeypatch.setattr(RecollEngine, "_run", lambda self, command: fake(self, command))
    yield fake


@pytest.fixture
def reset_logging():
    from browse import logging_config

    yield
    logging_config._reset_for_tests()
