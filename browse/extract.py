"""SPDX-License-Identifier: GPL-3.0-only

Cached text extraction for paged documents.

PDF-family files are read with PyMuPDF, raster images go through OCR. The
per-page text is cached on disk keyed by path, size and mtime, so reopening
an unchanged result skips extraction.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import List, Optional

from . import ocr

try:
    import fitz  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    fitz = None  # type: ignore

LOGGER = logging.getLogger("recoll_outline.extract")

PDF_SUFFIXES = frozenset({".pdf", ".xps", ".oxps", ".epub", ".cbz", ".fb2"})
PAGE_SEPARATOR = "\f"


def backend_for(path: Path) -> Optional[str]:
    """Name the extraction backend usable for ``path``, or None."""
    suffix = path.suffix.lower()
    if suffix in PDF_SUFFIXES and fitz is not None:
        return "pymupdf"
    if suffix in ocr.IMAGE_SUFFIXES and ocr.available():
        return "ocr"
    return None


def _read_with_fitz(path: Path) -> List[str]:
    doc = fitz.open(str(path))
    try:
        return [doc.load_page(i).get_text() for i in range(doc.page_count)]
    finally:
        doc.close()


def extract_pages(path: Path) -> List[str]:
    """Extract per-page text from a paged document.

    Args:
        path: PDF-family document or raster image.

    Returns:
        list[str]: One string per page (images are a single page).

    Raises:
        RuntimeError: If no extraction backend is available for the file type.
    """
    backend = backend_for(path)
    if backend == "pymupdf":
        return _read_with_fitz(path)
    if backend == "ocr":
        return [ocr.extract_text(path)]
    raise RuntimeError(f"No text extraction backend for {path.suffix or path.name}")


class TextCache:
    """On-disk cache of extracted page text.

    Args:
        cache_dir: Directory holding ``<digest>.txt`` files.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = cache_dir

    def _entry(self, path: Path) -> Path:
        st = path.stat()
        key = f"{path.resolve()}:{st.st_size}:{st.st_mtime_ns}"
        return self.cache_dir / (hashlib.sha256(key.encode("utf-8")).hexdigest() + ".txt")

    def get(self, path: Path) -> Optional[List[str]]:
        entry = self._entry(path)
        if not entry.exists():
            return None
        return entry.read_text(encoding="utf-8").split(PAGE_SEPARATOR)

    def put(self, path: Path, pages: List[str]) -> None:
        entry = self._entry(path)
        try:
            entry.parent.mkdir(parents=True, exist_ok=True)
            tmp = entry.with_suffix(".txt.tmp")
            tmp.write_text(PAGE_SEPARATOR.join(p.replace(PAGE_SEPARATOR, "\n") for p in pages), encoding="utf-8")
            tmp.replace(entry)
        except OSError as exc:  # pragma: no cover - best effort
            LOGGER.debug("Failed writing text cache %s: %s", entry, exc)

    def pages(self, path: Path) -> List[str]:
        """Return cached page text, extracting and storing it on a miss."""
        cached = self.get(path)
        if cached is not None:
            LOGGER.debug("Text cache hit for %s", path)
            return cached
        pages = extract_pages(path)
        self.put(path, pages)
        return pages
