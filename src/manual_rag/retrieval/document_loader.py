"""manual_rag.retrieval.document_loader

Document loading utilities for the retrieval layer.

Manuals arrive as PDFs and are read one page at a time so every chunk can be
stored with the page it came from.

Functions
---------
clean_page_text
    Normalise the raw text extracted from a PDF page.
pdf_to_pages
    Extract the text of every page of a PDF file.
"""

from __future__ import annotations

import re
from pathlib import Path

from manual_rag.common import PageText

_HORIZONTAL_WS_RE = re.compile(r"[ \t]+")
_BLANK_LINES_RE = re.compile(r"\n{2,}")


def clean_page_text(text: str) -> str:
    """Normalise raw page text.

    Carriage returns become spaces, runs of spaces/tabs collapse to one space,
    runs of newlines collapse to one newline, and the result is trimmed.
    """
    text = (text or "").replace("\r", " ")
    text = _HORIZONTAL_WS_RE.sub(" ", text)
    text = _BLANK_LINES_RE.sub("\n", text)
    return text.strip()


def pdf_to_pages(path: str | Path) -> list[PageText]:
    """Extract the text of every page of a PDF.

    Parameters
    ----------
    path : str or Path
        PDF file path. Relative paths are resolved against the working directory.

    Returns
    -------
    list[PageText]
        One entry per page with a 1-based page number. Pages without
        extractable text are kept with empty text.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ImportError
        If PyMuPDF is not installed.
    """
    pdf_path = Path(path).expanduser().resolve()
    if not pdf_path.is_file():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")

    try:
        import fitz  # PyMuPDF
    except ImportError:
        raise ImportError("PyMuPDF (pymupdf) is required to read PDF files.")

    pages: list[PageText] = []
    with fitz.open(str(pdf_path)) as doc:
        for index, page in enumerate(doc, start=1):
            pages.append(PageText(page=index, text=clean_page_text(page.get_text("text"))))
    return pages


__all__ = ["clean_page_text", "pdf_to_pages"]
