from manual_rag.common import Candidate
from manual_rag.generation.prompt_builder import default_prompt_builder
from manual_rag.pipelines.rag_pipeline import NOT_FOUND_MESSAGE, RAGPipeline


class DummyRetriever:
    """Returns fixed candidates and records the retrieval arguments."""

    def __init__(self, candidates):
        self.candidates = candidates
        self.calls = []

    def retrieve(self, question, **kwargs):
        self.calls.append((question, kwargs))
        return list(self.candidates)


class DummyLLM:
    """Echoes a canned answer and records the prompt it was given."""

    def __init__(self, answer="Remove the filter (Dishwasher X1, page 12)."):
        self.answer = answer
        self.calls = []

    def generate(self, prompt, *, system=None, **kwargs):
        self.calls.append({"prompt": prompt, "system": system, "kwargs": kwargs})
        return self.answer


def _candidates():
    return [Candidate(score=0.9, page=12, title="Dishwasher X1", text="Remove the lower filter.", document_id="dw-1")]


def test_run_returns_answer_sources_and_prompt():
    retriever = DummyRetriever(_candidates())
    llm = DummyLLM()
    pipeline = RAGPipeline(retriever=retriever, prompt_builder=default_prompt_builder(), llm=llm)

    result = pipeline.run("How do I clean the filter?", manual_id="dw-1")

    assert set(result) == {"answer", "sources", "prompt"}
    assert result["answer"] == "Remove the filter (Dishwasher X1, page 12)."
    assert result["sources"] == _candidates()
    assert retriever.calls == [("How do I clean the filter?", {"manual_id": "dw-1", "top_k": 8})]

    call = llm.calls[0]
    assert call["prompt"] == result["prompt"].user
    assert call["system"] == result["prompt"].system
    assert "Manual: Dishwasher X1 | Page: 12" in call["prompt"]
    assert NOT_FOUND_MESSAGE in call["system"]


def test_run_with_no_sources_still_asks_the_model():
    llm = DummyLLM(answer=NOT_FOUND_MESSAGE)
    pipeline = RAGPipeline(retriever=DummyRetriever([]), prompt_builder=default_prompt_builder(), llm=llm)

    result = pipeline("Unrelated question")

    assert result["answer"] == NOT_FOUND_MESSAGE
    assert result["sources"] == []
    assert "### Excerpt" not in llm.calls[0]["prompt"]


def test_generation_overrides_are_merged_per_call():
    llm = DummyLLM()
    pipeline = RAGPipeline(
        retriever=DummyRetriever(_candidates()),
        prompt_builder=default_prompt_builder(),
        llm=llm,
        top_k=3,
        not_found_message="Not in the manual.",
        llm_generate_defaults={"max_tokens": 100, "stop": ["END"]},
    )

    pipeline.run("q", llm_generate={"max_tokens": 20}, min_score=0.3)

    assert llm.calls[0]["kwargs"] == {"max_tokens": 20, "stop": ["END"]}
    assert "Not in the manual." in llm.calls[0]["system"]
    assert pipeline.retriever.calls[0][1] == {"manual_id": None, "top_k": 3, "min_score": 0.3}
