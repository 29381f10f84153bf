"""manual_rag.retrieval.vector_store

Vector store wrapper for the retrieval layer.

This module wraps a Qdrant collection and exposes the handful of operations
the manual assistant needs: creating the collection, upserting embedded
chunks, querying nearest neighbours and a few maintenance helpers.

Every point carries a ``tenant_id`` payload field. All reads and deletes are
scoped to the store's tenant, so one collection can hold several isolated
tenants.

Classes
-------
QdrantManualStore
    Qdrant-backed, tenant-scoped store for embedded manual chunks.

Functions
---------
point_id
    Derive a deterministic Qdrant point id from a record key.
safe_payload
    Drop ``None`` values and stringify unsupported payload values.
create_vector_store
    Create a store from a configuration mapping.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from qdrant_client import QdrantClient
from qdrant_client.http import models as qmodels

from manual_rag.common import RawMatch

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "manuals"
TENANT_FIELD = "tenant_id"
INDEXED_FIELDS = ("tenant_id", "manual_id", "title")


def point_id(key: str, tenant_id: Optional[str] = None) -> str:
    """Return a UUID string derived from ``key``.

    Qdrant only accepts unsigned integers or UUIDs as point ids, so readable
    record keys (``tenant:manual:page:n``) are mapped through UUIDv5. When
    ``tenant_id`` is given it is part of the hashed name, so equal keys
    written by different tenants never share a point.
    """
    name = key if tenant_id is None else f"{tenant_id}:{key}"
    return str(uuid.uuid5(uuid.NAMESPACE_URL, name))


def safe_payload(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Return a payload containing only storable values.

    ``None`` values are dropped, strings, numbers, booleans and lists of
    strings are kept, everything else is converted with ``str``.
    """
    out: dict[str, Any] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            out[key] = value
        elif isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            out[key] = list(value)
        else:
            out[key] = str(value)
    return out


@dataclass(frozen=True)
class VectorRecord:
    """One embedded item ready for upsert.

    Attributes
    ----------
    key : str
        Readable record key; the point id is derived from it.
    vector : Sequence[float]
        Embedding vector.
    metadata : Mapping[str, Any]
        Payload stored with the vector (the tenant is added by the store).
    """

    key: str
    vector: Sequence[float]
    metadata: Mapping[str, Any]


class QdrantManualStore:
    """Qdrant-backed, tenant-scoped store for embedded manual chunks.

    Parameters
    ----------
    client : QdrantClient
        Connected Qdrant client.
    tenant_id : str
        Tenant every read, write and delete is scoped to.
    collection_name : str, optional
        Collection name. Defaults to ``"manuals"``.
    dimension : int, optional
        Vector size used when creating the collection. Defaults to ``1536``.
    """

    def __init__(
            self,
            client: QdrantClient,
            *,
            tenant_id: str,
            collection_name: str = DEFAULT_COLLECTION_NAME,
            dimension: int = 1536,
        ):
        if not tenant_id:
            raise ValueError("QdrantManualStore requires a non-empty tenant_id.")
        self.client = client
        self.tenant_id = str(tenant_id)
        self.collection_name = collection_name
        self.dimension = int(dimension)

    @classmethod
    def from_config_dict(cls, config: Mapping[str, Any], *, tenant_id: str) -> "QdrantManualStore":
        """Create a store from the ``vector_store`` configuration section.

        Parameters
        ----------
        config : Mapping[str, Any]
            Recognised keys:
            - ``location`` (str, optional): e.g. ``":memory:"`` for an embedded store
            - ``url`` (str, optional): full Qdrant URL; takes precedence over host/port
            - ``host`` (str, optional): defaults to ``"localhost"``
            - ``port`` (int, optional): defaults to ``6333``
            - ``api_key`` (str, optional)
            - ``collection_name`` (str, optional): defaults to ``"manuals"``
            - ``dimension`` (int, optional): defaults to ``1536``
        tenant_id : str
            Tenant the store is scoped to.

        Returns
        -------
        QdrantManualStore
            Initialised store. No network call is made here.
        """
        api_key = config.get("api_key") or None
        if config.get("location"):
            client = QdrantClient(location=config["location"])
        elif config.get("url"):
            client = QdrantClient(url=config["url"], api_key=api_key)
        else:
            client = QdrantClient(
                host=config.get("host", "localhost"),
                port=int(config.get("port", 6333)),
                api_key=api_key,
            )
        return cls(
            client,
            tenant_id=tenant_id,
            collection_name=config.get("collection_name", DEFAULT_COLLECTION_NAME),
            dimension=int(config.get("dimension", 1536)),
        )

    def ensure_collection(self) -> bool:
        """Create the collection and its payload indexes if missing.

        Returns
        -------
        bool
            ``True`` if the collection was created, ``False`` if it already existed.
        """
        if self.client.collection_exists(self.collection_name):
            logger.info("Collection already exists: %s", self.collection_name)
            return False

        self.client.create_collection(
            collection_name=self.collection_name,
            vectors_config=qmodels.VectorParams(size=self.dimension, distance=qmodels.Distance.COSINE),
        )
        for field_name in INDEXED_FIELDS:
            self.client.create_payload_index(
                collection_name=self.collection_name,
                field_name=field_name,
                field_schema=qmodels.PayloadSchemaType.KEYWORD,
            )
        logger.info("Created collection %s (dim=%d, cosine)", self.collection_name, self.dimension)
        return True

    def upsert(self, records: Iterable[VectorRecord]) -> int:
        """Insert or replace records in the tenant.

        Returns
        -------
        int
            Number of points written.
        """
        points = [
            qmodels.PointStruct(
                id=point_id(record.key, self.tenant_id),
                vector=list(record.vector),
                payload=safe_payload({**record.metadata, TENANT_FIELD: self.tenant_id}),
            )
            for record in records
        ]
        if not points:
            return 0
        self.client.upsert(collection_name=self.collection_name, points=points)
        return len(points)

    def query(
            self,
            vector: Sequence[float],
            top_k: int = 8,
            *,
            manual_id: Optional[str] = None,
        ) -> list[RawMatch]:
        """Return the ``top_k`` nearest neighbours within the tenant.

        Parameters
        ----------
        vector : Sequence[float]
            Query embedding.
        top_k : int, optional
            Maximum number of matches. Defaults to ``8``.
        manual_id : str or None, optional
            Restrict matches to one manual.

        Returns
        -------
        list[RawMatch]
            Matches ordered by decreasing similarity.
        """
        conditions = {"manual_id": str(manual_id)} if manual_id else {}
        response = self.client.query_points(
            collection_name=self.collection_name,
            query=list(vector),
            query_filter=self._tenant_filter(**conditions),
            limit=max(1, int(top_k)),
            with_payload=True,
        )
        return [
            RawMatch(score=point.score, metadata=dict(point.payload or {}), id=str(point.id))
            for point in response.points
        ]

    def delete_where(self, **equals: Any) -> None:
        """Delete every point in the tenant whose payload matches ``equals``."""
        self.client.delete(
            collection_name=self.collection_name,
            points_selector=qmodels.FilterSelector(filter=self._tenant_filter(**equals)),
        )

    def delete_keys(self, keys: Iterable[str]) -> None:
        """Delete the tenant's points by record key, ignoring unknown keys."""
        ids = [point_id(k, self.tenant_id) for k in keys]
        if not ids:
            return
        self.client.delete(
            collection_name=self.collection_name,
            points_selector=qmodels.FilterSelector(
                filter=self._tenant_filter(qmodels.HasIdCondition(has_id=ids))
            ),
        )

    def count(self) -> int:
        """Return the number of points stored for the tenant."""
        result = self.client.count(
            collection_name=self.collection_name,
            count_filter=self._tenant_filter(),
            exact=True,
        )
        return int(result.count)

    def stats(self) -> dict[str, Any]:
        """Return collection statistics plus the tenant's point count."""
        info = self.client.get_collection(self.collection_name)
        return {
            "collection": self.collection_name,
            "status": str(info.status),
            "points_count": info.points_count,
            "dimension": self.dimension,
            "tenant_id": self.tenant_id,
            "tenant_points_count": self.count(),
        }

    def _tenant_filter(self, *extra: Any, **equals: Any) -> qmodels.Filter:
        conditions = [
            qmodels.FieldCondition(key=TENANT_FIELD, match=qmodels.MatchValue(value=self.tenant_id)),
            *extra,
        ]
        for key, value in equals.items():
            conditions.append(qmodels.FieldCondition(key=key, match=qmodels.MatchValue(value=value)))
        return qmodels.Filter(must=conditions)


def create_vector_store(config: Mapping[str, Any], *, tenant_id: str) -> QdrantManualStore:
    """Create a vector store from configuration.

    Raises
    ------
    ValueError
        If the configured ``type`` is not ``qdrant``.
    """
    kind = str(config.get("type") or "qdrant").strip().lower()
    if kind != "qdrant":
        raise ValueError(f"Unknown vector store kind: {kind!r}")
    return QdrantManualStore.from_config_dict(config, tenant_id=tenant_id)


__all__ = [
    "QdrantManualStore",
    "VectorRecord",
    "create_vector_store",
    "point_id",
    "safe_payload",
]
