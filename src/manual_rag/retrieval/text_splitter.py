"""manual_rag.retrieval.text_splitter

Word-window segmentation for the retrieval layer.

This module splits the extracted text of a manual page into overlapping,
word-bounded chunks suitable for embedding. Words are runs of non-whitespace
characters; no punctuation stripping or locale-aware tokenisation is done.

Window geometry is derived from :class:`SegmenterConfig`:

- ``target = (min_words + max_words) // 2`` words per chunk
- ``step = max(1, floor(target * (1 - overlap)))`` words between chunk starts

Windows start at ``0, step, 2 * step, ...`` and emission stops after the first
window that reaches the end of the page, so the last chunk may be shorter than
``target``. For ``n > 0`` words this yields
``ceil(max(0, n - target) / step) + 1`` chunks.

Classes
-------
SegmenterConfig
    Chunk sizing options.

Functions
---------
iter_segments
    Lazily yield chunks for one page of text.
segment
    Split one page of text into a list of chunks.
get_chunk_records_from_pages
    Segment every page of a manual and attach page/manual metadata.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

from manual_rag.common import Chunk, ChunkRecord, PageText

logger = logging.getLogger(__name__)

DEFAULT_MIN_WORDS = 250
DEFAULT_MAX_WORDS = 500
DEFAULT_OVERLAP = 0.12


@dataclass(frozen=True)
class SegmenterConfig:
    """Chunk sizing options.

    Attributes
    ----------
    min_words : int
        Lower bound of the desired chunk length, in words. Defaults to ``250``.
    max_words : int
        Upper bound of the desired chunk length, in words. Defaults to ``500``.
    overlap : float
        Fraction of a chunk shared with the next chunk, expected in ``(0, 1)``.
        Defaults to ``0.12``. Out-of-range values are not rejected; the step
        between chunks is clamped to at least one word instead.
    """

    min_words: int = DEFAULT_MIN_WORDS
    max_words: int = DEFAULT_MAX_WORDS
    overlap: float = DEFAULT_OVERLAP

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any] | None) -> "SegmenterConfig":
        """Build a config from a mapping such as the ``segmenter`` YAML section.

        Both snake_case keys and the short ``min``/``max`` aliases are accepted.
        """
        cfg = dict(config or {})
        return cls(
            min_words=int(cfg.get("min_words", cfg.get("min", DEFAULT_MIN_WORDS))),
            max_words=int(cfg.get("max_words", cfg.get("max", DEFAULT_MAX_WORDS))),
            overlap=float(cfg.get("overlap", cfg.get("overlap_fraction", DEFAULT_OVERLAP))),
        )

    @property
    def target(self) -> int:
        """Number of words per full chunk (never below one)."""
        return max(1, (self.min_words + self.max_words) // 2)

    @property
    def step(self) -> int:
        """Number of words between consecutive chunk starts (never below one)."""
        return max(1, math.floor(self.target * (1 - self.overlap)))


def iter_segments(
        source_text: Any,
        config: SegmenterConfig | None = None,
    ) -> Iterator[Chunk]:
    """Yield overlapping word-window chunks for one page of text.

    Parameters
    ----------
    source_text : Any
        Page text. Non-string values yield nothing.
    config : SegmenterConfig or None, optional
        Sizing options. Defaults to :class:`SegmenterConfig` defaults.

    Yields
    ------
    Chunk
        Chunks in page order.
    """
    if not isinstance(source_text, str):
        logger.debug("Skipping non-string source text of type %s", type(source_text).__name__)
        return

    cfg = config or SegmenterConfig()
    words = source_text.split()
    target = cfg.target
    step = cfg.step

    for start in range(0, len(words), step):
        end = start + target
        yield Chunk(text=" ".join(words[start:end]))
        if end >= len(words):
            break


def segment(
        source_text: Any,
        config: SegmenterConfig | None = None,
    ) -> list[Chunk]:
    """Split one page of text into overlapping word-window chunks.

    Parameters
    ----------
    source_text : Any
        Page text. Empty, whitespace-only or non-string input gives ``[]``.
    config : SegmenterConfig or None, optional
        Sizing options. Defaults to :class:`SegmenterConfig` defaults.

    Returns
    -------
    list[Chunk]
        Chunks in page order. Every call returns a fresh list.

    Examples
    --------
    >>> text = " ".join(f"w{i}" for i in range(1, 601))
    >>> [len(c.text.split()) for c in segment(text)]
    [375, 270]
    """
    return list(iter_segments(source_text, config))


def get_chunk_records_from_pages(
        pages: Iterable[PageText],
        *,
        manual_id: str,
        title: str,
        config: SegmenterConfig | None = None,
    ) -> list[ChunkRecord]:
    """Segment every page of a manual and attach storage metadata.

    Parameters
    ----------
    pages : Iterable[PageText]
        Extracted pages, in page order.
    manual_id : str
        Identifier stored with every record.
    title : str
        Manual title stored with every record.
    config : SegmenterConfig or None, optional
        Sizing options shared by all pages.

    Returns
    -------
    list[ChunkRecord]
        One record per chunk, ordered by page then by position in the page.
    """
    records: list[ChunkRecord] = []
    for page in pages:
        for chunk in iter_segments(page.text, config):
            records.append(
                ChunkRecord(manual_id=manual_id, title=title, page=page.page, text=chunk.text)
            )
    return records


__all__ = [
    "SegmenterConfig",
    "get_chunk_records_from_pages",
    "iter_segments",
    "segment",
]
