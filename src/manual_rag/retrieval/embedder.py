"""manual_rag.retrieval.embedder

Embedding interfaces and factories for the retrieval layer.

This module defines a small provider-agnostic interface for producing vector
embeddings from manual chunks and questions, with a concrete implementation
backed by LlamaIndex's OpenAI-compatible embedding wrapper. A factory
function constructs an embedder from the ``embedder`` configuration section.

Classes
-------
BaseEmbedder
    Abstract interface used by ingestion and retrieval.
OpenAILikeEmbedder
    Embedder backed by an OpenAI-compatible HTTP API via LlamaIndex.

Functions
---------
create_embedder
    Create an embedder implementation from a configuration mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Sequence

from llama_index.core.base.embeddings.base import BaseEmbedding as LlamaIndexBaseEmbedding

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_EMBEDDING_DIMENSION = 1536
DEFAULT_API_BASE = "https://api.openai.com/v1"


class BaseEmbedder(ABC):
    """Abstract interface for text embedding.

    Implementations return one fixed-length vector per input text.
    """

    @abstractmethod
    def get_embedder(self) -> LlamaIndexBaseEmbedding:
        """Return the underlying LlamaIndex embedding instance."""

    @classmethod
    @abstractmethod
    def from_config_dict(cls, config: Mapping[str, Any]) -> "BaseEmbedder":
        """Create an embedder from a configuration mapping."""

    def embed_query(self, query: str) -> list[float]:
        """Embed a single question.

        Parameters
        ----------
        query : str
            Question text.

        Returns
        -------
        list[float]
            Embedding vector.
        """
        return list(self.get_embedder().get_query_embedding(query))

    def embed_documents(self, documents: Sequence[str]) -> list[list[float]]:
        """Embed a batch of chunk texts in one call.

        Parameters
        ----------
        documents : Sequence[str]
            Texts to embed.

        Returns
        -------
        list[list[float]]
            One vector per input, in input order.
        """
        if not documents:
            return []
        vectors = self.get_embedder().get_text_embedding_batch(list(documents))
        return [list(v) for v in vectors]


class OpenAILikeEmbedder(BaseEmbedder):
    """Embedder backed by an OpenAI-compatible embedding API via LlamaIndex.

    This implementation wraps :class:`llama_index.embeddings.openai_like.OpenAILikeEmbedding`.

    Parameters
    ----------
    model_name : str
        Model identifier for the embedding endpoint.
    api_base : str
        Base URL of the OpenAI-compatible API.
    api_key : str or None, optional
        API key sent with every request.
    timeout : float, optional
        Request timeout in seconds. Defaults to ``60.0``.
    max_retries : int, optional
        Retries performed by the client on transient errors. Defaults to ``10``.
    embed_batch_size : int, optional
        Maximum number of texts sent per request. Defaults to ``64``.
    dimension : int, optional
        Expected vector length, used when creating the vector collection.
    """

    def __init__(
            self,
            model_name: str = DEFAULT_EMBEDDING_MODEL,
            *,
            api_base: str = DEFAULT_API_BASE,
            api_key: Optional[str] = None,
            timeout: float = 60.0,
            max_retries: int = 10,
            embed_batch_size: int = 64,
            dimension: int = DEFAULT_EMBEDDING_DIMENSION,
            model_kwargs: Optional[dict[str, Any]] = None,
        ):
        from llama_index.embeddings.openai_like import OpenAILikeEmbedding

        self.model_name = model_name
        self.dimension = int(dimension)
        self.embedder = OpenAILikeEmbedding(
            model_name=model_name,
            api_base=api_base,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            embed_batch_size=embed_batch_size,
            additional_kwargs=model_kwargs or {},
        )

    def get_embedder(self) -> LlamaIndexBaseEmbedding:
        return self.embedder

    @classmethod
    def from_config_dict(cls, config: Mapping[str, Any]) -> "OpenAILikeEmbedder":
        """Create an embedder from the ``embedder`` configuration section.

        Parameters
        ----------
        config : Mapping[str, Any]
            Recognised keys: ``model_name``, ``api_base``, ``api_key``,
            ``timeout``, ``max_retries``, ``embed_batch_size``, ``dimension``
            and ``model_kwargs``. All are optional.

        Returns
        -------
        OpenAILikeEmbedder
            An initialised embedder.
        """
        return cls(
            model_name=config.get("model_name") or DEFAULT_EMBEDDING_MODEL,
            api_base=config.get("api_base") or DEFAULT_API_BASE,
            api_key=config.get("api_key"),
            timeout=float(config.get("timeout", 60.0)),
            max_retries=int(config.get("max_retries", 10)),
            embed_batch_size=int(config.get("embed_batch_size", 64)),
            dimension=int(config.get("dimension", DEFAULT_EMBEDDING_DIMENSION)),
            model_kwargs=config.get("model_kwargs"),
        )


_REGISTRY: dict[str, type[BaseEmbedder]] = {
    "openai_like": OpenAILikeEmbedder,
    "openailike": OpenAILikeEmbedder,
    "openai": OpenAILikeEmbedder,
}


def _normalize_kind(kind: Any) -> str:
    return str(kind or "").strip().lower().replace("-", "_").replace(" ", "_")


def create_embedder(config: Mapping[str, Any]) -> BaseEmbedder:
    """Create an embedder implementation from a configuration mapping.

    The implementation is selected by the ``type`` (or ``kind``/``provider``)
    key; when absent the OpenAI-compatible embedder is used.

    Raises
    ------
    TypeError
        If ``config`` is not a mapping.
    ValueError
        If the discriminator names an unsupported implementation.
    """
    if not isinstance(config, Mapping):
        raise TypeError(f"create_embedder expected a mapping/dict, got {type(config)}")

    kind_raw = config.get("type") or config.get("kind") or config.get("provider")
    kind = _normalize_kind(kind_raw) or "openai_like"

    cls = _REGISTRY.get(kind)
    if cls is None:
        raise ValueError(
            f"Unknown embedder kind '{kind_raw}' (normalized to '{kind}'). "
            f"Supported kinds: {sorted(_REGISTRY)}."
        )
    return cls.from_config_dict(dict(config))


__all__ = [
    "BaseEmbedder",
    "DEFAULT_EMBEDDING_DIMENSION",
    "OpenAILikeEmbedder",
    "create_embedder",
]
