"""manual_rag.common.schemas

Core data schemas shared across the manual RAG pipeline.

These lightweight frozen dataclasses describe the canonical shapes passed
between ingestion, segmentation, vector search, ranking and answer
generation. They carry no behaviour beyond small conveniences and are never
mutated after creation.

Classes
-------
PageText
    Text extracted from a single (1-based) page of a manual.
Chunk
    An overlapping, word-bounded slice of a page's text.
ChunkRecord
    A chunk paired with the page/manual metadata it is stored under.
RawMatch
    One unprocessed nearest-neighbour result from the vector store.
Candidate
    A normalised, deduplicated, ranked match ready for answer generation.

Notes
-----
``RawMatch.metadata`` is an untyped ``Mapping[str, Any]``. Its keys vary
across ingestion runs; the ranker reads it through ordered field rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

UNKNOWN_PAGE_LABEL = "unknown"


@dataclass(frozen=True)
class PageText:
    """Text of a single manual page.

    Attributes
    ----------
    page : int
        1-based page number.
    text : str
        Extracted page text.
    """

    page: int
    text: str


@dataclass(frozen=True)
class Chunk:
    """A contiguous, overlapping slice of a page's text.

    Attributes
    ----------
    text : str
        Whitespace-normalised chunk text (words joined by single spaces).
    """

    text: str


@dataclass(frozen=True)
class ChunkRecord:
    """A chunk with the metadata it is persisted under.

    Attributes
    ----------
    manual_id : str
        Identifier of the manual the chunk belongs to.
    title : str
        Human readable manual title.
    page : int
        1-based page the chunk was cut from.
    text : str
        Chunk text.
    """

    manual_id: str
    title: str
    page: int
    text: str


@dataclass(frozen=True)
class RawMatch:
    """One nearest-neighbour result as returned by the vector store.

    Attributes
    ----------
    score : float or None
        Similarity score, if the backend reported one.
    metadata : Mapping[str, Any]
        Payload stored alongside the vector.
    id : str or None
        Backend point identifier.
    """

    score: float | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    id: str | None = None


@dataclass(frozen=True)
class Candidate:
    """A cleaned match ready for answer generation.

    Attributes
    ----------
    score : float or None
        Similarity score. ``None`` is kept as-is; rankers treat it as ``0``
        only when comparing.
    page : int or None
        Non-negative page number, or ``None`` when unknown.
    title : str
        Manual title (a placeholder when the source had none).
    text : str
        Whitespace-normalised excerpt text.
    document_id : str or None
        Identifier of the source manual, if known.
    """

    score: float | None
    page: int | None
    title: str
    text: str
    document_id: str | None = None

    @property
    def page_label(self) -> str:
        """Return the page as display text, ``"unknown"`` when missing."""
        if self.page is None:
            return UNKNOWN_PAGE_LABEL
        return str(self.page)

    @property
    def effective_score(self) -> float:
        return self.score if self.score is not None else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "page": self.page,
            "title": self.title,
            "text": self.text,
            "manual_id": self.document_id,
        }
