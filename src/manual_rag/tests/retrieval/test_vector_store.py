import uuid

import pytest

from manual_rag.retrieval.vector_store import (
    QdrantManualStore,
    VectorRecord,
    create_vector_store,
    point_id,
    safe_payload,
)

DIM = 4


@pytest.fixture
def store():
    """A tenant-scoped store over an in-memory Qdrant collection."""
    s = QdrantManualStore.from_config_dict(
        {"location": ":memory:", "collection_name": "test_manuals", "dimension": DIM},
        tenant_id="tenant-a",
    )
    s.ensure_collection()
    return s


def _record(key, vector, **metadata):
    base = {"manual_id": "m-1", "page": 1, "title": "Oven", "chunk_text": key}
    base.update(metadata)
    return VectorRecord(key=key, vector=vector, metadata=base)


def test_point_id_is_deterministic_uuid():
    assert point_id("t:m:1:x") == point_id("t:m:1:x")
    assert point_id("t:m:1:x") != point_id("t:m:1:y")
    uuid.UUID(point_id("anything"))


def test_point_id_depends_on_tenant():
    assert point_id("k", "tenant-a") != point_id("k", "tenant-b")
    assert point_id("k", "tenant-a") == point_id("tenant-a:k")


def test_safe_payload_drops_none_and_stringifies_non_scalars():
    payload = safe_payload({
        "title": "Oven",
        "page": 3,
        "score": 0.5,
        "flag": True,
        "tags": ["a", "b"],
        "missing": None,
        "nested": {"k": 1},
    })

    assert payload == {
        "title": "Oven",
        "page": 3,
        "score": 0.5,
        "flag": True,
        "tags": ["a", "b"],
        "nested": "{'k': 1}",
    }


def test_ensure_collection_is_idempotent(store):
    assert store.ensure_collection() is False
    assert store.client.collection_exists("test_manuals")


def test_upsert_and_query_returns_payload_with_tenant(store):
    written = store.upsert([
        _record("door", [1.0, 0.0, 0.0, 0.0], page=5),
        _record("lock", [0.0, 1.0, 0.0, 0.0], page=3),
    ])

    matches = store.query([1.0, 0.0, 0.0, 0.0], top_k=1)

    assert written == 2
    assert len(matches) == 1
    assert matches[0].metadata["chunk_text"] == "door"
    assert matches[0].metadata["tenant_id"] == "tenant-a"
    assert matches[0].metadata["page"] == 5
    assert matches[0].score == pytest.approx(1.0)
    assert matches[0].id == point_id("door", "tenant-a")


def test_upsert_with_same_key_overwrites(store):
    store.upsert([_record("fixed", [1.0, 0.0, 0.0, 0.0], title="First")])
    store.upsert([_record("fixed", [1.0, 0.0, 0.0, 0.0], title="Second")])

    assert store.count() == 1
    assert store.query([1.0, 0.0, 0.0, 0.0])[0].metadata["title"] == "Second"


def test_query_filters_by_manual_id(store):
    store.upsert([
        _record("oven", [1.0, 0.0, 0.0, 0.0], manual_id="oven-1"),
        _record("hob", [0.9, 0.1, 0.0, 0.0], manual_id="hob-1"),
    ])

    matches = store.query([1.0, 0.0, 0.0, 0.0], top_k=5, manual_id="hob-1")

    assert [m.metadata["manual_id"] for m in matches] == ["hob-1"]


def test_tenants_are_isolated(store):
    other = QdrantManualStore(
        store.client,
        tenant_id="tenant-b",
        collection_name=store.collection_name,
        dimension=DIM,
    )
    store.upsert([_record("mine", [1.0, 0.0, 0.0, 0.0])])
    other.upsert([_record("theirs", [1.0, 0.0, 0.0, 0.0])])

    assert [m.metadata["chunk_text"] for m in store.query([1.0, 0.0, 0.0, 0.0], top_k=10)] == ["mine"]
    assert store.count() == 1
    assert other.count() == 1


def test_same_key_in_two_tenants_keeps_both_points(store):
    other = QdrantManualStore(
        store.client,
        tenant_id="tenant-b",
        collection_name=store.collection_name,
        dimension=DIM,
    )
    store.upsert([_record("k", [1.0, 0.0, 0.0, 0.0], title="Mine")])
    other.upsert([_record("k", [1.0, 0.0, 0.0, 0.0], title="Theirs")])

    assert store.count() == 1
    assert other.count() == 1
    assert store.query([1.0, 0.0, 0.0, 0.0])[0].metadata["title"] == "Mine"


def test_delete_keys_cannot_reach_another_tenant(store):
    """
    Deleting a key from one tenant leaves the point another tenant wrote
    under the same key untouched.
    """
    other = QdrantManualStore(
        store.client,
        tenant_id="tenant-b",
        collection_name=store.collection_name,
        dimension=DIM,
    )
    store.upsert([_record("k", [1.0, 0.0, 0.0, 0.0])])
    other.upsert([_record("k", [1.0, 0.0, 0.0, 0.0])])

    other.delete_keys(["k"])

    assert other.count() == 0
    assert store.count() == 1


def test_delete_where_only_touches_matching_points_in_tenant(store):
    other = QdrantManualStore(
        store.client,
        tenant_id="tenant-b",
        collection_name=store.collection_name,
        dimension=DIM,
    )
    store.upsert([
        _record("smoke", [1.0, 0.0, 0.0, 0.0], title="Smoke Test"),
        _record("real", [0.0, 1.0, 0.0, 0.0], title="Oven"),
    ])
    other.upsert([_record("other-smoke", [1.0, 0.0, 0.0, 0.0], title="Smoke Test")])

    store.delete_where(title="Smoke Test")

    assert [m.metadata["title"] for m in store.query([1.0, 0.0, 0.0, 0.0], top_k=10)] == ["Oven"]
    assert other.count() == 1


def test_delete_keys_removes_points_and_ignores_unknown_keys(store):
    store.upsert([_record("a", [1.0, 0.0, 0.0, 0.0]), _record("b", [0.0, 1.0, 0.0, 0.0])])

    store.delete_keys(["a", "never-written"])
    store.delete_keys([])

    assert [m.metadata["chunk_text"] for m in store.query([1.0, 0.0, 0.0, 0.0], top_k=10)] == ["b"]


def test_stats_reports_tenant_count(store):
    store.upsert([_record("a", [1.0, 0.0, 0.0, 0.0])])

    stats = store.stats()

    assert stats["collection"] == "test_manuals"
    assert stats["tenant_id"] == "tenant-a"
    assert stats["tenant_points_count"] == 1
    assert stats["dimension"] == DIM


def test_create_vector_store_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_vector_store({"type": "pinecone"}, tenant_id="t")


def test_create_vector_store_defaults_to_qdrant():
    s = create_vector_store({"location": ":memory:"}, tenant_id="t")
    assert isinstance(s, QdrantManualStore)
    assert s.collection_name == "manuals"
    assert s.dimension == 1536
