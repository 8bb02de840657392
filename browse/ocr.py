"""SPDX-License-Identifier: GPL-3.0-only

OCR text extraction for image results using Tesseract.

Image viewers have no text layer to search, so opened images are OCR'd and
the text is matched instead.
"""

from __future__ import annotations

from pathlib import Path

try:
    import pytesseract  # type: ignore
    from PIL import Image  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    pytesseract = None  # type: ignore
    Image = None  # type: ignore

IMAGE_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".tif", ".tiff", ".gif", ".bmp", ".webp", ".pnm"})


def available() -> bool:
    return pytesseract is not None and Image is not None


def extract_text(image_path: Path, lang: str = "eng") -> str:
    """Run OCR on the provided image file.

    Args:
        image_path: Path to the image to process.
        lang: Tesseract language(s) to use.

    Returns:
        str: Extracted text.

    Raises:
        RuntimeError: If pytesseract or Pillow is not installed.
    """
    if not available():
        raise RuntimeError("pytesseract/Pillow not installed for OCR")
    with Image.open(image_path) as image:
        return pytesseract.image_to_string(image, lang=lang)
