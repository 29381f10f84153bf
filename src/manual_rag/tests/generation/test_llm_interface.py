from types import SimpleNamespace

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from manual_rag.generation import llm_interface
from manual_rag.generation.llm_interface import OpenAIChatLikeLLM, create_llm


class DummyChatOpenAI:
    """Stands in for ChatOpenAI; records constructor arguments and messages."""

    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.invocations = []
        DummyChatOpenAI.instances.append(self)

    def invoke(self, messages, **kwargs):
        self.invocations.append((messages, kwargs))
        return SimpleNamespace(content="Remove the filter (Dishwasher X1, page 12).")


@pytest.fixture(autouse=True)
def patch_chat_model(monkeypatch):
    DummyChatOpenAI.instances = []
    monkeypatch.setattr(llm_interface, "ChatOpenAI", DummyChatOpenAI)
    yield


def test_create_llm_defaults_to_openai_chat():
    llm = create_llm({"api_key": "sk-test"})

    assert isinstance(llm, OpenAIChatLikeLLM)
    kwargs = DummyChatOpenAI.instances[0].kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["temperature"] == 0.2
    assert kwargs["api_key"] == "sk-test"
    assert "base_url" not in kwargs


def test_temperature_and_extra_kwargs_come_from_model_kwargs():
    create_llm({
        "type": "openai-chat",
        "model_name": "local-model",
        "api_base": "http://localhost:8000/v1",
        "model_kwargs": {"temperature": 0.0, "max_tokens": 256},
    })

    kwargs = DummyChatOpenAI.instances[0].kwargs
    assert kwargs["model"] == "local-model"
    assert kwargs["temperature"] == 0.0
    assert kwargs["max_tokens"] == 256
    assert kwargs["base_url"] == "http://localhost:8000/v1"


def test_generate_sends_system_then_user_message():
    llm = OpenAIChatLikeLLM(api_key="sk-test")

    answer = llm.generate("How do I clean the filter?", system="Use only the excerpts.")

    messages, _ = llm.get_llm().invocations[0]
    assert answer == "Remove the filter (Dishwasher X1, page 12)."
    assert isinstance(messages[0], SystemMessage)
    assert messages[0].content == "Use only the excerpts."
    assert isinstance(messages[1], HumanMessage)
    assert messages[1].content == "How do I clean the filter?"


def test_generate_without_system_sends_only_user_message():
    llm = OpenAIChatLikeLLM(api_key="sk-test")
    llm.generate("Hello")

    messages, _ = llm.get_llm().invocations[0]
    assert len(messages) == 1


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError, match="Unknown LLM kind"):
        create_llm({"type": "carrier-pigeon"})


def test_non_mapping_config_is_rejected():
    with pytest.raises(TypeError):
        create_llm(["not", "a", "mapping"])
