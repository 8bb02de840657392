"""Tests for cached text extraction, OCR and HTML rendering helpers."""

from pathlib import Path

import pytest

import browse.extract as extract
import browse.markup as markup
import browse.ocr as ocr


def test_cache_extracts_once(tmp_path, monkeypatch):
    doc = tmp_path / "report.pdf"
    doc.write_bytes(b"%PDF")
    calls = []

    def fake_extract(path):
        calls.append(path)
        return ["page one", "page two"]

    monkeypatch.setattr(extract, "extract_pages", fake_extract)
    cache = extract.TextCache(tmp_path / "cache")
    assert cache.pages(doc) == ["page one", "page two"]
    assert cache.pages(doc) == ["page one", "page two"]
    assert len(calls) == 1
    assert len(list((tmp_path / "cache").glob("*.txt"))) == 1


def test_cache_invalidated_by_change(tmp_path, monkeypatch):
    doc = tmp_path / "report.pdf"
    doc.write_bytes(b"%PDF")
    monkeypatch.setattr(extract, "extract_pages", lambda path: [path.read_bytes().decode()])
    cache = extract.TextCache(tmp_path / "cache")
    assert cache.pages(doc) == ["%PDF"]
    doc.write_bytes(b"%PDF-changed")
    assert cache.pages(doc) == ["%PDF-changed"]


def test_page_separator_in_text_does_not_split_pages(tmp_path):
    doc = tmp_path / "a.pdf"
    doc.write_bytes(b"x")
    cache = extract.TextCache(tmp_path / "cache")
    cache.put(doc, ["one\ftwo", "three"])
    assert cache.get(doc) == ["one\ntwo", "three"]


def test_backend_selection(monkeypatch):
    monkeypatch.setattr(extract, "fitz", object())
    monkeypatch.setattr(ocr, "available", lambda: True)
    assert extract.backend_for(Path("a.PDF")) == "pymupdf"
    assert extract.backend_for(Path("a.jpg")) == "ocr"
    assert extract.backend_for(Path("a.djvu")) is None
    monkeypatch.setattr(extract, "fitz", None)
    assert extract.backend_for(Path("a.pdf")) is None


def test_extract_pages_without_backend(tmp_path):
    with pytest.raises(RuntimeError):
        extract.extract_pages(tmp_path / "a.djvu")


def test_extract_pages_with_fitz(monkeypatch, tmp_path):
    class FakePage:
        def __init__(self, n):
            self.n = n

        def get_text(self):
            return f"text {self.n}"

    class FakeDoc:
        page_count = 2
        closed = False

        def load_page(self, i):
            return FakePage(i)

        def close(self):
            FakeDoc.closed = True

    class FakeFitz:
        @staticmethod
        def open(path):
            return FakeDoc()

    monkeypatch.setattr(extract, "fitz", FakeFitz)
    assert extract.extract_pages(tmp_path / "x.pdf") == ["text 0", "text 1"]
    assert FakeDoc.closed


def test_ocr_missing_raises(monkeypatch, tmp_path):
    monkeypatch.setattr(ocr, "pytesseract", None)
    with pytest.raises(RuntimeError):
        ocr.extract_text(tmp_path / "img.png")


def test_ocr_with_deps(monkeypatch, tmp_path):
    class FakeImg:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    class FakeImage:
        @staticmethod
        def open(path):
            return FakeImg()

    class FakeTess:
        @staticmethod
        def image_to_string(img, lang=None):
            return "detected text"

    monkeypatch.setattr(ocr, "Image", FakeImage)
    monkeypatch.setattr(ocr, "pytesseract", FakeTess)
    assert ocr.extract_text(tmp_path / "img.png") == "detected text"
    assert extract.backend_for(Path("scan.tiff")) == "ocr"


def test_render_html_drops_scripts():
    pytest.importorskip("bs4")
    out = markup.render_html("<html><script>var x;</script><h1>Title</h1><p>Body <b>text</b></p></html>")
    assert "var x" not in out
    assert out.splitlines()[0] == "Title"
    assert "Body" in out


def test_render_html_missing(monkeypatch):
    monkeypatch.setattr(markup, "BeautifulSoup", None)
    with pytest.raises(RuntimeError):
        markup.render_html("<p>x</p>")
