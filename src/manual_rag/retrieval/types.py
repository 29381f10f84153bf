"""manual_rag.retrieval.types

Shared type definitions for the retrieval layer.

These protocols decouple the retriever and the pipelines from concrete
backends, so tests and alternative deployments can supply their own
collaborators.

Classes
-------
QueryEmbedder
    Anything that can embed a question and a batch of texts.
VectorSearch
    Tenant-scoped nearest-neighbour search returning raw matches.
Retriever
    Question in, ranked candidates out.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from manual_rag.common import Candidate, RawMatch


class QueryEmbedder(Protocol):
    def embed_query(self, query: str) -> list[float]:
        ...

    def embed_documents(self, documents: Sequence[str]) -> list[list[float]]:
        ...


class VectorSearch(Protocol):
    def query(
            self,
            vector: Sequence[float],
            top_k: int = 8,
            *,
            manual_id: Optional[str] = None,
        ) -> list[RawMatch]:
        """Return raw matches ordered by decreasing similarity."""
        ...


class Retriever(Protocol):
    """Protocol defining the retriever interface.

    A retriever takes a natural-language question and returns cleaned,
    ranked candidates ready for answer generation.
    """

    def retrieve(self, question: str, **kwargs) -> list[Candidate]:
        ...
