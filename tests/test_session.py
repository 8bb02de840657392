"""SPDX-License-Identifier: GPL-3.0-only

Tests for SearchSession paging, history and error surfacing.
"""

from __future__ import annotations

import pytest

from search.config import Settings
from search.pagination import InvalidNavigation
from search.session import QueryHistory, SearchSession


def five_matches():
    return [(f"/docs/plan{n}.txt", "text/plain", f"project plan number {n}") for n in range(1, 6)]


def labels(page):
    return [link.label for link in page.document.links]


def test_end_to_end_paging(fake_recoll):
    fake_recoll.docs = five_matches()
    session = SearchSession(Settings(results_per_page=2))

    page = session.search("project plan")
    assert "Results: 0 - 2" in page.document.text
    assert labels(page) == ["plan1.txt", "plan2.txt"]
    assert not page.paging

    page = session.next_page()
    assert "Results: 2 - 4" in page.document.text
    assert labels(page) == ["plan3.txt", "plan4.txt"]
    assert page.paging

    page = session.next_page()
    assert "Results: 4 - 6" in page.document.text
    assert labels(page) == ["plan5.txt"]
    assert page.error == ""


def test_paging_requeries_same_query(fake_recoll):
    fake_recoll.docs = five_matches()
    session = SearchSession(Settings(results_per_page=2))
    session.search("it's a plan")
    session.next_page()
    assert fake_recoll.commands[-1] == "recoll -t -A -n '2-2' -q 'it'\\''s a plan'"
    assert fake_recoll.commands[-2] == "recoll -t -A -Q 'it'\\''s a plan'"


def test_previous_at_start_rejected(fake_recoll):
    session = SearchSession(Settings(results_per_page=2))
    session.search("x")
    calls = len(fake_recoll.commands)
    with pytest.raises(InvalidNavigation):
        session.previous_page()
    assert (session.window.start, session.window.end) == (0, 2)
    assert len(fake_recoll.commands) == calls


def test_previous_after_next(fake_recoll):
    fake_recoll.docs = five_matches()
    session = SearchSession(Settings(results_per_page=2))
    session.search("plan")
    session.next_page()
    page = session.previous_page()
    assert (page.start, page.end) == (0, 2)


def test_new_search_resets_window(fake_recoll):
    session = SearchSession(Settings(results_per_page=2))
    session.search("first")
    session.next_page()
    page = session.search("second")
    assert (page.start, page.end) == (0, 2)
    assert session.history.items() == ["second", "first"]


def test_navigation_without_search():
    session = SearchSession()
    with pytest.raises(InvalidNavigation):
        session.next_page()


def test_search_with_start_offset(fake_recoll):
    fake_recoll.docs = five_matches()
    session = SearchSession(Settings(results_per_page=2))
    page = session.search("plan", start=3)
    assert (page.start, page.end) == (3, 5)
    assert labels(page) == ["plan4.txt", "plan5.txt"]


def test_engine_failure_surfaces_error(fake_recoll):
    fake_recoll.returncode = 127
    fake_recoll.stderr = "recoll: not found"
    session = SearchSession()
    page = session.search("x")
    assert page.error.startswith("Search engine unavailable")
    assert "recoll: not found" in page.document.text
    assert page.records == []


def test_record_lookup_and_close(fake_recoll):
    fake_recoll.docs = five_matches()
    session = SearchSession(Settings(results_per_page=2))
    session.search("plan")
    assert session.record(2).path == "/docs/plan2.txt"
    with pytest.raises(IndexError):
        session.record(3)
    session.close()
    assert session.page is None and session.query is None and not session.view_open
    with pytest.raises(IndexError):
        session.record(1)


def test_reduced_query_used_for_emphasis(fake_recoll):
    fake_recoll.docs = five_matches()[:1]
    session = SearchSession()
    page = session.search('"project plan" dir:/docs ')
    assert session.reduced == "project plan"
    assert page.reduced == "project plan"
    assert [page.document.text[s:e] for s, e in page.document.emphasis] == ["project plan"]


def test_history_skips_immediate_repeat_and_caps():
    h = QueryHistory(limit=2)
    h.add("a")
    h.add("a")
    h.add("b")
    h.add("c")
    h.add("  ")
    assert h.items() == ["c", "b"]
    assert h.latest() == "c"
    assert len(h) == 2


def test_open_result_searches_for_reduced_query(fake_recoll, tmp_path):
    target = tmp_path / "plan.txt"
    target.write_text("intro\nthe project plan\n", encoding="utf-8")
    fake_recoll.docs = [(str(target), "text/plain", "")]
    session = SearchSession(Settings(base_dir=tmp_path))
    session.search('author:me "project plan"')
    asked = []

    def prompt(default):
        asked.append(default)
        return default

    doc, report = session.open_result(1, prompt=prompt)
    assert asked == ["project plan"]
    assert doc.path == target and doc.read_only
    assert [(h.line, h.column) for h in report.hits] == [(2, 4)]


def test_open_result_binary_mime_reports_unavailable(fake_recoll, tmp_path):
    target = tmp_path / "plan.docx"
    target.write_bytes(b"PK\x03\x04" + b"the project plan " * 50)
    fake_recoll.docs = [(str(target), "application/vnd.oasis.opendocument.text", "")]
    session = SearchSession(Settings(base_dir=tmp_path, prompt_before_search=False))
    session.search("project plan")
    doc, report = session.open_result(1)
    assert doc.kind == "other"
    assert not report.searched
    assert report.messages == ["Text search unavailable for application/vnd.oasis.opendocument.text documents"]


def test_open_result_bad_index(fake_recoll):
    session = SearchSession()
    session.search("nothing")
    with pytest.raises(IndexError):
        session.open_result(3)
