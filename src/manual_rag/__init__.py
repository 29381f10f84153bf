"""manual_rag

Manual assistant RAG package.

This package contains the building blocks of a retrieval-augmented assistant
that answers questions about product manuals: configuration, PDF loading,
word-window segmentation, embedding, a tenant-scoped vector store, candidate
ranking, prompt/generation utilities and the end-to-end pipelines.

Attributes
----------
__version__ : str
    Package version string. Defaults to ``"0.0.0-dev"`` when package metadata is
    unavailable.

Modules
-------
config
    Global configuration loader, cached accessors and logging set-up.
app
    Composition root and HTTP API.
pipelines
    Ingestion (PDF -> chunks -> vectors) and answering (retrieve -> prompt -> generate).
retrieval
    PDF loading, segmentation, embedding, vector store, ranking and retrieval.
generation
    LLM and prompt-building interfaces and factories.
common
    Shared schemas and text utilities.

Exports
-------
GlobalConfig
    Global configuration loader and accessor.
ManualRagContainer
    Cached runtime component container for applications.
build_container
    Factory function to construct a configured :class:`~manual_rag.app.container.ManualRagContainer`.
RAGPipeline
    End-to-end question-answering pipeline.
IngestPipeline
    Manual ingestion pipeline.
Candidate
    Normalised, ranked retrieval result.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("manual-rag")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from .config import GlobalConfig
from .app.container import ManualRagContainer, build_container
from .pipelines.rag_pipeline import RAGPipeline
from .pipelines.ingest_pipeline import IngestPipeline
from .common import Candidate

__all__ = [
    "__version__",
    "GlobalConfig",
    "ManualRagContainer",
    "build_container",
    "RAGPipeline",
    "IngestPipeline",
    "Candidate",
]
