"""manual_rag.retrieval.ranker

Turn raw nearest-neighbour matches into a clean, ranked candidate list.

The ranker runs five stages, strictly in this order:

1. normalise each match into a :class:`~manual_rag.common.schemas.Candidate`
2. drop candidates below ``min_score`` (only when ``min_score > 0``)
3. deduplicate on ``(title, page, first 80 characters of text)``
4. cap the number of candidates per title (first seen wins)
5. stable sort by descending score, absent scores counted as ``0``

The order matters: the per-title cap runs before the sort, so it keeps the
earliest matches of each title rather than the best-scoring ones.

Classes
-------
MetadataError
    Raised in strict mode when a match carries unusable metadata.
FieldRule
    One metadata lookup with an optional coercion.
RankOptions
    Filtering and diversity options.
CandidateRanker
    Configured ranker applying the five stages.

Functions
---------
rank
    Rank raw matches with the given options.
create_ranker
    Create a ranker from configuration.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from manual_rag.common import Candidate, RawMatch, clean_whitespace

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown manual"
DEDUP_TEXT_PREFIX = 80


class MetadataError(ValueError):
    """A raw match carries metadata the strict ranker cannot use."""


def _to_page(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer() or number < 0:
        return None
    return int(number)


def _to_id(value: Any) -> str | None:
    return None if value is None else str(value)


def _to_score(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    return score if math.isfinite(score) else None


@dataclass(frozen=True)
class FieldRule:
    """Look up ``key`` in match metadata and coerce the value.

    A rule succeeds when the key is present and the coercion returns a
    non-``None`` value.
    """

    key: str
    coerce: Callable[[Any], Any] | None = None

    def extract(self, metadata: Mapping[str, Any]) -> Any:
        if self.key not in metadata:
            return None
        value = metadata[self.key]
        if self.coerce is None:
            return value
        return self.coerce(value)


PAGE_RULES: tuple[FieldRule, ...] = (
    FieldRule("page", _to_page),
    FieldRule("page_number", _to_page),
    FieldRule("pageNum", _to_page),
    FieldRule("pageIndex", _to_page),
)
TITLE_RULES: tuple[FieldRule, ...] = (FieldRule("title", clean_whitespace),)
TEXT_RULES: tuple[FieldRule, ...] = (
    FieldRule("chunk_text", clean_whitespace),
    FieldRule("text", clean_whitespace),
)
DOCUMENT_ID_RULES: tuple[FieldRule, ...] = (
    FieldRule("manual_id", _to_id),
    FieldRule("document_id", _to_id),
)


def _first_match(rules: Iterable[FieldRule], metadata: Mapping[str, Any], *, allow_empty: bool = False) -> Any:
    """Return the value of the first rule that produces a usable value."""
    for rule in rules:
        value = rule.extract(metadata)
        if value is None:
            continue
        if value == "" and not allow_empty:
            continue
        return value
    return None


@dataclass(frozen=True)
class RankOptions:
    """Filtering and diversity options.

    Attributes
    ----------
    min_score : float
        Drop candidates whose score (absent counted as ``0``) is strictly below
        this value. Only applied when greater than ``0``. Defaults to ``0.0``.
    max_per_title : int
        Maximum number of candidates kept per title. ``0`` or negative
        disables the cap. Defaults to ``3``.
    strict : bool
        Raise :class:`MetadataError` for unusable metadata instead of falling
        back to defaults. Defaults to ``False``.
    """

    min_score: float = 0.0
    max_per_title: int = 3
    strict: bool = False

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any] | None) -> "RankOptions":
        cfg = dict(config or {})
        max_per_title = cfg.get("max_per_title")
        return cls(
            min_score=float(cfg.get("min_score", 0.0) or 0.0),
            max_per_title=3 if max_per_title is None else int(max_per_title),
            strict=bool(cfg.get("strict", False)),
        )


class CandidateRanker:
    """Normalise, filter, deduplicate, diversify and sort raw matches.

    Parameters
    ----------
    options : RankOptions or None, optional
        Ranking options. Defaults to :class:`RankOptions` defaults.
    page_rules : Sequence[FieldRule] or None, optional
        Ordered page lookups. Defaults to :data:`PAGE_RULES`.
    """

    def __init__(
            self,
            options: RankOptions | None = None,
            *,
            page_rules: Sequence[FieldRule] | None = None,
        ):
        self.options = options or RankOptions()
        self.page_rules = tuple(page_rules) if page_rules is not None else PAGE_RULES

    def rank(
            self,
            raw_matches: Iterable[Any] | None,
            *,
            min_score: float | None = None,
            max_per_title: int | None = None,
        ) -> list[Candidate]:
        """Rank raw matches.

        Parameters
        ----------
        raw_matches : Iterable[Any] or None
            :class:`~manual_rag.common.schemas.RawMatch` items, mappings with
            ``score``/``metadata`` keys, or objects exposing ``score`` and
            ``metadata`` (or ``payload``) attributes.
        min_score : float or None, optional
            Per-call override of ``options.min_score``.
        max_per_title : int or None, optional
            Per-call override of ``options.max_per_title``.

        Returns
        -------
        list[Candidate]
            A new list, sorted by descending effective score.
        """
        if not raw_matches:
            return []

        floor = self.options.min_score if min_score is None else float(min_score)
        cap = self.options.max_per_title if max_per_title is None else int(max_per_title)

        candidates = [self.normalize(m) for m in raw_matches]
        received = len(candidates)

        if floor > 0:
            candidates = [c for c in candidates if c.effective_score >= floor]

        candidates = self.deduplicate(candidates)

        if cap > 0:
            candidates = self.cap_per_title(candidates, cap)

        ranked = sorted(candidates, key=lambda c: c.effective_score, reverse=True)
        logger.debug("Ranked %d raw matches into %d candidates", received, len(ranked))
        return ranked

    def normalize(self, raw: Any) -> Candidate:
        """Convert one raw match into a :class:`Candidate`."""
        score, metadata = self._unpack(raw)

        if not isinstance(metadata, Mapping):
            if self.options.strict and metadata is not None:
                raise MetadataError(f"Match metadata must be a mapping, got {type(metadata).__name__}.")
            metadata = {}

        page = _first_match(self.page_rules, metadata)
        if page is None and self.options.strict:
            present = [r.key for r in self.page_rules if metadata.get(r.key) is not None]
            if present:
                raise MetadataError(f"Unparseable page value under {present[0]!r}: {metadata[present[0]]!r}")

        title = _first_match(TITLE_RULES, metadata) or UNKNOWN_TITLE
        text = _first_match(TEXT_RULES, metadata) or ""
        document_id = _first_match(DOCUMENT_ID_RULES, metadata, allow_empty=True)

        return Candidate(
            score=_to_score(score),
            page=page,
            title=title,
            text=text,
            document_id=document_id,
        )

    @staticmethod
    def dedup_key(candidate: Candidate) -> tuple[str, int | None, str]:
        # A missing page stays None so it never equals page 0.
        return (candidate.title, candidate.page, candidate.text[:DEDUP_TEXT_PREFIX])

    def deduplicate(self, candidates: Sequence[Candidate]) -> list[Candidate]:
        """Keep the first candidate for each dedup key, preserving order."""
        seen: set[tuple[str, int | None, str]] = set()
        unique: list[Candidate] = []
        for candidate in candidates:
            key = self.dedup_key(candidate)
            if key in seen:
                continue
            seen.add(key)
            unique.append(candidate)
        return unique

    @staticmethod
    def cap_per_title(candidates: Sequence[Candidate], cap: int) -> list[Candidate]:
        """Keep at most ``cap`` candidates per title, in iteration order."""
        counts: dict[str, int] = {}
        kept: list[Candidate] = []
        for candidate in candidates:
            count = counts.get(candidate.title, 0)
            if count >= cap:
                continue
            counts[candidate.title] = count + 1
            kept.append(candidate)
        return kept

    @staticmethod
    def _unpack(raw: Any) -> tuple[Any, Any]:
        if isinstance(raw, RawMatch):
            return raw.score, raw.metadata
        if isinstance(raw, Mapping):
            return raw.get("score"), raw.get("metadata", raw.get("payload"))
        metadata = getattr(raw, "metadata", None)
        if metadata is None:
            metadata = getattr(raw, "payload", None)
        return getattr(raw, "score", None), metadata


def rank(
        raw_matches: Iterable[Any] | None,
        options: RankOptions | None = None,
    ) -> list[Candidate]:
    """Rank raw matches with ``options`` (defaults when ``None``)."""
    return CandidateRanker(options).rank(raw_matches)


def create_ranker(config: Mapping[str, Any] | None = None) -> CandidateRanker:
    """Create a ranker from the ``ranker`` configuration section."""
    return CandidateRanker(RankOptions.from_mapping(config))


__all__ = [
    "CandidateRanker",
    "FieldRule",
    "MetadataError",
    "PAGE_RULES",
    "RankOptions",
    "UNKNOWN_TITLE",
    "create_ranker",
    "rank",
]
