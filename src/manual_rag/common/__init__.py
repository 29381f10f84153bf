"""
Common building blocks shared across the manual RAG stack.

This package provides the small value types passed between ingestion,
retrieval and generation, plus the whitespace helper every layer uses.

Classes
-------
PageText
    Text extracted from one page of a manual.
Chunk
    Overlapping word window produced by the segmenter.
ChunkRecord
    Chunk with page/manual metadata, as persisted by ingestion.
RawMatch
    Unprocessed similarity-search result.
Candidate
    Ranked match ready for answer generation.

Functions
---------
clean_whitespace
    Collapse whitespace runs (including non-breaking spaces) and trim.

See Also
--------
manual_rag.common.schemas
    Defines the dataclasses listed above.
"""
from __future__ import annotations

import re
from typing import Any, TypeAlias

from .schemas import (
    UNKNOWN_PAGE_LABEL,
    Candidate,
    Chunk,
    ChunkRecord,
    PageText,
    RawMatch,
)

ManualId: TypeAlias = str

_WHITESPACE_RE = re.compile(r"[\s\u00a0]+")


def clean_whitespace(text: Any = "") -> str:
    """Collapse every whitespace run to a single ASCII space and trim.

    ``None`` becomes the empty string; other non-string values are converted
    with ``str``.
    """
    if text is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(text)).strip()


__all__ = [
    "Candidate",
    "Chunk",
    "ChunkRecord",
    "ManualId",
    "PageText",
    "RawMatch",
    "UNKNOWN_PAGE_LABEL",
    "clean_whitespace",
]
