"""manual_rag.generation.llm_interface

Unified interface and factory for the answer-generation LLM.

This module defines a small, provider-agnostic abstraction for chat-style
generation and a concrete implementation backed by LangChain's OpenAI chat
wrapper, which also covers OpenAI-compatible servers. A factory function
builds the configured implementation from the ``generator_llm`` section.

Classes
-------
BaseLLM
    Abstract interface used by the RAG pipeline.
OpenAIChatLikeLLM
    Chat completions using an OpenAI-compatible HTTP API via LangChain.

Functions
---------
create_llm
    Construct an LLM implementation from a configuration mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.2


class BaseLLM(ABC):
    """Abstract interface for LLM text generation."""

    @classmethod
    @abstractmethod
    def from_config_dict(cls, config: Mapping[str, Any]) -> "BaseLLM":
        """Create an LLM from a configuration mapping."""

    @abstractmethod
    def get_llm(self) -> Any:
        """Return the underlying LangChain model object."""

    @abstractmethod
    def generate(self, prompt: str, *, system: Optional[str] = None, **kwargs) -> str:
        """Generate a reply to ``prompt``.

        Parameters
        ----------
        prompt : str
            User message.
        system : str or None, optional
            System message sent before the user message.
        **kwargs : Any
            Provider-specific generation parameters.

        Returns
        -------
        str
            Generated text.
        """


class OpenAIChatLikeLLM(BaseLLM):
    """LLM interface using an OpenAI-compatible Chat Completions API via LangChain.

    This implementation wraps :class:`langchain_openai.ChatOpenAI`.

    Parameters
    ----------
    model_name : str, optional
        Model identifier. Defaults to ``"gpt-4o-mini"``.
    api_base : str or None, optional
        Base URL of an OpenAI-compatible API. ``None`` uses the OpenAI default.
    api_key : str or None, optional
        API key value.
    temperature : float, optional
        Sampling temperature. Defaults to ``0.2``.
    **model_kwargs : Any
        Additional keyword arguments forwarded to ``ChatOpenAI``
        (e.g. ``max_tokens``, ``timeout``).
    """

    def __init__(
        self,
        model_name: str = DEFAULT_CHAT_MODEL,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        **model_kwargs: Any,
    ):
        self.model_name = model_name
        self.api_base = api_base

        init_kwargs: dict[str, Any] = dict(model_kwargs)
        init_kwargs["model"] = model_name
        init_kwargs["temperature"] = float(temperature)
        if api_base:
            init_kwargs["base_url"] = api_base
        if api_key is not None:
            init_kwargs["api_key"] = api_key

        self.llm = ChatOpenAI(**init_kwargs)

    @classmethod
    def from_config_dict(cls, config: Mapping[str, Any]) -> "OpenAIChatLikeLLM":
        """Create a chat LLM from the ``generator_llm`` configuration section.

        Recognised keys are ``model_name``, ``api_base``, ``api_key`` and
        ``model_kwargs`` (which may include ``temperature``).
        """
        model_kwargs = dict(config.get("model_kwargs") or {})
        temperature = model_kwargs.pop("temperature", config.get("temperature", DEFAULT_TEMPERATURE))
        return cls(
            model_name=config.get("model_name") or DEFAULT_CHAT_MODEL,
            api_base=config.get("api_base"),
            api_key=config.get("api_key"),
            temperature=temperature,
            **model_kwargs,
        )

    def get_llm(self) -> Any:
        return self.llm

    @staticmethod
    def build_messages(prompt: str, system: Optional[str] = None) -> list[BaseMessage]:
        messages: list[BaseMessage] = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=prompt))
        return messages

    def generate(self, prompt: str, *, system: Optional[str] = None, **kwargs) -> str:
        if not isinstance(prompt, str):
            prompt = prompt.to_string() if hasattr(prompt, "to_string") else str(prompt)

        response = self.llm.invoke(self.build_messages(prompt, system), **kwargs)
        content = response.content if hasattr(response, "content") else response
        return content if isinstance(content, str) else str(content)


_REGISTRY: dict[str, type[BaseLLM]] = {
    "openai_chat": OpenAIChatLikeLLM,
    "openai_chat_like": OpenAIChatLikeLLM,
    "chat_openai": OpenAIChatLikeLLM,
    "openai": OpenAIChatLikeLLM,
    "openai_like": OpenAIChatLikeLLM,
}


def _get_llm_kind(cfg: Mapping[str, Any]) -> str:
    for key in ("type", "kind", "provider"):
        val = cfg.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return ""


def create_llm(config: Mapping[str, Any]) -> BaseLLM:
    """Create an LLM implementation from a configuration mapping.

    The implementation is selected by the ``type`` (or ``kind``/``provider``)
    key; when absent the OpenAI chat implementation is used.

    Raises
    ------
    TypeError
        If ``config`` is not a mapping.
    ValueError
        If the discriminator selects an unsupported implementation.
    """
    if not isinstance(config, Mapping):
        raise TypeError(f"create_llm expected a mapping/dict, got {type(config)}")

    kind_raw = _get_llm_kind(config)
    kind = kind_raw.lower().replace("-", "_").replace(" ", "_") or "openai_chat"

    cls = _REGISTRY.get(kind)
    if cls is None:
        raise ValueError(
            f"Unknown LLM kind '{kind_raw}' (normalized to '{kind}'). Supported kinds: {sorted(_REGISTRY)}."
        )
    return cls.from_config_dict(dict(config))


__all__ = [
    "BaseLLM",
    "OpenAIChatLikeLLM",
    "create_llm",
]
