import pytest

from manual_rag.common import RawMatch
from manual_rag.retrieval.ranker import CandidateRanker, RankOptions
from manual_rag.retrieval.retriever import ManualRetriever


class DummyEmbedder:
    """Records the questions it embeds and returns a fixed vector."""

    def __init__(self):
        self.queries = []

    def embed_query(self, query):
        self.queries.append(query)
        return [0.1, 0.2, 0.3]

    def embed_documents(self, documents):
        return [[0.1, 0.2, 0.3] for _ in documents]


class DummyStore:
    """Returns canned matches and records the search arguments."""

    def __init__(self, matches):
        self.matches = matches
        self.calls = []

    def query(self, vector, top_k=8, *, manual_id=None):
        self.calls.append({"vector": vector, "top_k": top_k, "manual_id": manual_id})
        return list(self.matches)


def _matches():
    return [
        RawMatch(score=0.4, metadata={"title": "Oven", "page": 2, "chunk_text": "Preheat"}),
        RawMatch(score=0.9, metadata={"title": "Oven", "page": 5, "chunk_text": "Clean the door"}),
        RawMatch(score=0.7, metadata={"title": "Hob", "page": "3", "chunk_text": "Child lock"}),
    ]


@pytest.mark.parametrize("question", [None, "", "   \n"])
def test_blank_question_returns_empty_without_io(question):
    embedder = DummyEmbedder()
    store = DummyStore(_matches())
    retriever = ManualRetriever(embedder=embedder, vector_store=store)

    assert retriever.retrieve(question) == []
    assert embedder.queries == []
    assert store.calls == []


def test_retrieve_embeds_searches_and_ranks():
    embedder = DummyEmbedder()
    store = DummyStore(_matches())
    retriever = ManualRetriever(embedder=embedder, vector_store=store, top_k=5)

    results = retriever.retrieve("How do I clean the oven door?", manual_id="oven-1")

    assert embedder.queries == ["How do I clean the oven door?"]
    assert store.calls == [{"vector": [0.1, 0.2, 0.3], "top_k": 5, "manual_id": "oven-1"}]
    assert [(c.title, c.page, c.score) for c in results] == [
        ("Oven", 5, 0.9),
        ("Hob", 3, 0.7),
        ("Oven", 2, 0.4),
    ]


def test_per_call_options_reach_store_and_ranker():
    store = DummyStore(_matches())
    retriever = ManualRetriever(
        embedder=DummyEmbedder(),
        vector_store=store,
        ranker=CandidateRanker(RankOptions(max_per_title=3)),
    )

    results = retriever("door", top_k=2, min_score=0.5, max_per_title=1)

    assert store.calls[0]["top_k"] == 2
    assert store.calls[0]["manual_id"] is None
    assert [c.score for c in results] == [0.9, 0.7]


def test_default_top_k_is_eight():
    store = DummyStore([])
    ManualRetriever(embedder=DummyEmbedder(), vector_store=store).retrieve("anything")
    assert store.calls[0]["top_k"] == 8
