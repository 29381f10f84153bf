"""manual_rag.pipelines.ingest_pipeline

Ingestion of a manual into the vector store.

PDF -> pages -> word-window chunks per page -> batched embeddings -> upsert.
Every stored point carries ``tenant_id``, ``manual_id``, ``page``, ``title``
and ``chunk_text`` in its payload; the retrieval ranker reads these keys
back.

Classes
-------
IngestReport
    Summary of one ingestion run.
IngestPipeline
    Segment, embed and upsert the pages of a manual.

Functions
---------
truncate
    Cap a string's length for storage in metadata.
safe_metadata
    Sanitise a metadata mapping before it is stored.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from manual_rag.common import ChunkRecord, PageText
from manual_rag.retrieval.document_loader import pdf_to_pages
from manual_rag.retrieval.text_splitter import SegmenterConfig, get_chunk_records_from_pages
from manual_rag.retrieval.types import QueryEmbedder
from manual_rag.retrieval.vector_store import QdrantManualStore, VectorRecord, safe_payload

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 64
DEFAULT_MAX_METADATA_CHARS = 8000
DEFAULT_MANUAL_ID = "unknown"
DEFAULT_TITLE = "Manual"


def truncate(value: Any, max_chars: int = DEFAULT_MAX_METADATA_CHARS) -> str:
    """Return ``value`` as a string capped at ``max_chars`` characters."""
    if not isinstance(value, str):
        return str(value)
    return value[:max_chars] if len(value) > max_chars else value


def safe_metadata(metadata: Mapping[str, Any], max_chars: int = DEFAULT_MAX_METADATA_CHARS) -> dict[str, Any]:
    """Truncate string values and drop or stringify anything the store cannot hold."""
    capped = {
        key: truncate(value, max_chars) if isinstance(value, str) else value
        for key, value in metadata.items()
    }
    return safe_payload(capped)


@dataclass(frozen=True)
class IngestReport:
    """Summary of one ingestion run.

    Attributes
    ----------
    manual_id : str
        Identifier the chunks were stored under.
    title : str
        Manual title.
    pages : int
        Number of pages read.
    chunks : int
        Number of chunks embedded and upserted.
    """

    manual_id: str
    title: str
    pages: int
    chunks: int


class IngestPipeline:
    """Segment, embed and upsert the pages of a manual.

    Parameters
    ----------
    embedder : QueryEmbedder
        Embeds chunk texts in batches.
    vector_store : QdrantManualStore
        Tenant-scoped store receiving the points.
    segmenter_config : SegmenterConfig or None, optional
        Chunk sizing. Defaults to 250-500 words with 12% overlap.
    batch_size : int, optional
        Chunks per embedding/upsert batch. Defaults to ``64``.
    max_metadata_chars : int, optional
        Cap applied to ``chunk_text`` in the payload. Defaults to ``8000``.
    page_loader : Callable or None, optional
        Function turning a path into pages. Defaults to :func:`pdf_to_pages`.
    """

    def __init__(
            self,
            *,
            embedder: QueryEmbedder,
            vector_store: QdrantManualStore,
            segmenter_config: Optional[SegmenterConfig] = None,
            batch_size: int = DEFAULT_BATCH_SIZE,
            max_metadata_chars: int = DEFAULT_MAX_METADATA_CHARS,
            page_loader: Optional[Callable[[Path], list[PageText]]] = None,
        ):
        self.embedder = embedder
        self.vector_store = vector_store
        self.segmenter_config = segmenter_config or SegmenterConfig()
        self.batch_size = max(1, int(batch_size))
        self.max_metadata_chars = int(max_metadata_chars)
        self.page_loader = page_loader or pdf_to_pages

    def ingest_manual(
            self,
            pdf_path: str | Path,
            manual_id: Optional[str] = None,
            title: Optional[str] = None,
        ) -> IngestReport:
        """Ingest one PDF manual.

        Parameters
        ----------
        pdf_path : str or Path
            Manual to read.
        manual_id : str or None, optional
            Identifier to store the chunks under. A random UUID when omitted.
        title : str or None, optional
            Manual title. Defaults to ``"Manual"``.

        Returns
        -------
        IngestReport
            Summary of the run.
        """
        logger.info("Reading PDF %s", pdf_path)
        pages = self.page_loader(Path(pdf_path))
        logger.info("Pages in PDF: %d", len(pages))
        return self.ingest_pages(pages, manual_id=manual_id or str(uuid.uuid4()), title=title)

    def ingest_pages(
            self,
            pages: Sequence[PageText],
            *,
            manual_id: Optional[str] = None,
            title: Optional[str] = None,
        ) -> IngestReport:
        """Ingest already extracted pages.

        Returns
        -------
        IngestReport
            Summary of the run.
        """
        manual_id = str(manual_id or DEFAULT_MANUAL_ID)
        title = str(title or DEFAULT_TITLE)

        records = get_chunk_records_from_pages(
            pages,
            manual_id=manual_id,
            title=title,
            config=self.segmenter_config,
        )
        logger.info("Chunked %d pages into %d chunks", len(pages), len(records))

        total = len(records)
        for start in range(0, total, self.batch_size):
            batch = records[start:start + self.batch_size]
            vectors = self.embedder.embed_documents([r.text for r in batch])
            self.vector_store.upsert(self._to_vector_records(batch, vectors))
            logger.info("Upserted %d/%d", min(start + self.batch_size, total), total)

        logger.info("Done: %s (%d chunks)", title, total)
        return IngestReport(manual_id=manual_id, title=title, pages=len(pages), chunks=total)

    def _to_vector_records(
            self,
            batch: Sequence[ChunkRecord],
            vectors: Iterable[Sequence[float]],
        ) -> list[VectorRecord]:
        tenant = self.vector_store.tenant_id
        out: list[VectorRecord] = []
        for record, vector in zip(batch, vectors):
            out.append(
                VectorRecord(
                    key=f"{tenant}:{record.manual_id}:{record.page}:{uuid.uuid4()}",
                    vector=vector,
                    metadata=safe_metadata(
                        {
                            "manual_id": record.manual_id,
                            "page": int(record.page),
                            "title": record.title,
                            "chunk_text": record.text,
                        },
                        self.max_metadata_chars,
                    ),
                )
            )
        return out


__all__ = [
    "IngestPipeline",
    "IngestReport",
    "safe_metadata",
    "truncate",
]
