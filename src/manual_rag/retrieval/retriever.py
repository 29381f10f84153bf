"""manual_rag.retrieval.retriever

Question-time retrieval for the manual assistant.

The retriever embeds the question, fetches nearest neighbours from the
tenant-scoped vector store and hands them to the
:class:`~manual_rag.retrieval.ranker.CandidateRanker`.

Classes
-------
ManualRetriever
    Embed, search and rank for one question.
"""

from __future__ import annotations

import logging
from typing import Optional

from manual_rag.common import Candidate
from manual_rag.retrieval.ranker import CandidateRanker
from manual_rag.retrieval.types import QueryEmbedder, VectorSearch

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 8


class ManualRetriever:
    """Retrieve ranked candidates for a question.

    Parameters
    ----------
    embedder : QueryEmbedder
        Embeds the question.
    vector_store : VectorSearch
        Tenant-scoped nearest-neighbour search.
    ranker : CandidateRanker or None, optional
        Ranker applied to the raw matches. Defaults to a ranker with default
        options.
    top_k : int, optional
        Default number of raw matches requested. Defaults to ``8``.
    """

    def __init__(
            self,
            *,
            embedder: QueryEmbedder,
            vector_store: VectorSearch,
            ranker: Optional[CandidateRanker] = None,
            top_k: int = DEFAULT_TOP_K,
        ):
        self.embedder = embedder
        self.vector_store = vector_store
        self.ranker = ranker or CandidateRanker()
        self.top_k = int(top_k) if top_k else DEFAULT_TOP_K

    def retrieve(
            self,
            question: Optional[str],
            *,
            top_k: Optional[int] = None,
            manual_id: Optional[str] = None,
            min_score: Optional[float] = None,
            max_per_title: Optional[int] = None,
        ) -> list[Candidate]:
        """Retrieve ranked candidates for a question.

        Parameters
        ----------
        question : str or None
            Natural-language question. Blank or missing questions return
            ``[]`` without calling the embedder or the store.
        top_k : int or None, optional
            Number of raw matches requested from the store.
        manual_id : str or None, optional
            Restrict the search to one manual.
        min_score : float or None, optional
            Per-call override of the ranker's ``min_score``.
        max_per_title : int or None, optional
            Per-call override of the ranker's ``max_per_title``.

        Returns
        -------
        list[Candidate]
            Ranked candidates, best first.
        """
        if not question or not question.strip():
            return []

        vector = self.embedder.embed_query(question)
        matches = self.vector_store.query(
            vector,
            top_k=int(top_k or self.top_k),
            manual_id=manual_id,
        )
        logger.debug("Vector search returned %d matches (manual_id=%s)", len(matches), manual_id)

        return self.ranker.rank(matches, min_score=min_score, max_per_title=max_per_title)

    def __call__(self, question: Optional[str], **kwargs) -> list[Candidate]:
        return self.retrieve(question, **kwargs)


__all__ = ["ManualRetriever"]
