"""SPDX-License-Identifier: GPL-3.0-only

Tests for query sanitizing and reduction.
"""

from __future__ import annotations

import shlex

import pytest

from search.query import reduce_query, sanitize_query


@pytest.mark.parametrize("raw", ["", "plain words", "it's", "''", "a'b'c", "'leading", "trailing'", "back\\slash 'q'"])
def test_sanitize_round_trips_through_shell_quoting(raw):
    assert shlex.split(f"'{sanitize_query(raw)}'") == [raw]


def test_sanitize_only_touches_single_quotes():
    assert sanitize_query('say "hi" $HOME `x`') == 'say "hi" $HOME `x`'
    assert sanitize_query("don't") == "don'\\''t"


def test_reduce_strips_quotes_and_field_filter():
    assert reduce_query('"deep learning" author:smith notes') == "deep learning notes"


def test_reduce_is_idempotent():
    once = reduce_query('"deep learning" author:smith ext:pdf notes')
    assert reduce_query(once) == once


def test_reduce_keeps_trailing_filter_without_whitespace():
    # only token:value followed by whitespace is removed
    assert reduce_query("notes author:smith") == "notes author:smith"


def test_reduce_over_strips_free_text_colon():
    assert reduce_query("agenda: budget review") == "budget review"


def test_reduce_empty():
    assert reduce_query('""') == ""
