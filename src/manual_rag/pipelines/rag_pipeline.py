"""manual_rag.pipelines.rag_pipeline

End-to-end question answering over ingested manuals.

This module defines the :class:`RAGPipeline`, which coordinates query-time
retrieval, prompt construction and LLM invocation.

Classes
-------
RAGPipeline
    Orchestrates retrieval -> prompt building -> generation.
"""

from __future__ import annotations

from typing import Any, Optional

from manual_rag.generation.llm_interface import BaseLLM
from manual_rag.generation.prompt_builder import DEFAULT_PROMPT_NAME, PromptBuilder
from manual_rag.retrieval.types import Retriever

NOT_FOUND_MESSAGE = "I can't find this in the manual."


class RAGPipeline:
    """Retrieval-Augmented Generation orchestrator.

    This class wires together:
    - a retriever returning ranked candidates
    - a prompt builder rendering system and user messages
    - an LLM interface for generation

    The pipeline holds no per-request state and is safe to reuse across
    requests.

    Parameters
    ----------
    retriever : Retriever
        Embeds the question and returns ranked candidates.
    prompt_builder : PromptBuilder
        Renders the prompt from the question and candidates.
    llm : BaseLLM
        Language model used for generation.
    prompt_name : str, optional
        Template to render. Defaults to ``"manual_assistant"``.
    top_k : int, optional
        Number of raw matches requested per question. Defaults to ``8``.
    not_found_message : str, optional
        Sentence the model must reply with when the excerpts do not contain
        the answer.
    llm_generate_defaults : dict or None, optional
        Default keyword arguments forwarded to ``llm.generate``.
    """

    def __init__(self,
                 retriever: Retriever,
                 prompt_builder: PromptBuilder,
                 llm: BaseLLM,
                 prompt_name: str = DEFAULT_PROMPT_NAME,
                 top_k: int = 8,
                 not_found_message: str = NOT_FOUND_MESSAGE,
                 llm_generate_defaults: dict | None = None,
        ):
        self.retriever = retriever
        self.prompt_builder = prompt_builder
        self.llm = llm
        self.prompt_name = prompt_name
        self.top_k = top_k
        self.not_found_message = not_found_message
        self.llm_generate_defaults = dict(llm_generate_defaults or {})

    def run(self, question: str, manual_id: Optional[str] = None, **kwargs) -> dict[str, Any]:
        """Answer a single question.

        The execution order is:
        1. Retrieve ranked candidates for the question (optionally one manual).
        2. Render the system and user messages.
        3. Generate the answer.

        Parameters
        ----------
        question : str
            User's natural-language question.
        manual_id : str or None, optional
            Restrict retrieval to one manual.
        **kwargs : Any
            Forwarded to the retriever. The special key ``llm_generate`` may be
            used to override generation parameters for this call only.

        Returns
        -------
        dict
            Dictionary containing:
            - ``"answer"``: generated text
            - ``"sources"``: the ranked candidates used as context
            - ``"prompt"``: the rendered :class:`PromptMessages`
        """
        call_overrides = kwargs.pop("llm_generate", None) or {}
        kwargs.setdefault("top_k", self.top_k)

        sources = self.retriever.retrieve(question, manual_id=manual_id, **kwargs)

        messages = self.prompt_builder.build_messages(
            self.prompt_name,
            question=question,
            docs=sources,
            not_found_message=self.not_found_message,
        )

        gen_kwargs = {**self.llm_generate_defaults, **call_overrides}
        answer = self.llm.generate(messages.user, system=messages.system, **gen_kwargs)

        return {"answer": answer, "sources": sources, "prompt": messages}

    def __call__(self, question: str, **kwargs) -> dict[str, Any]:
        return self.run(question, **kwargs)


__all__ = ["NOT_FOUND_MESSAGE", "RAGPipeline"]
