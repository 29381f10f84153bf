"""manual_rag.app.container

Composition root for the manual RAG service.

This module is the single place where concrete implementations are wired
together from configuration (embedder, vector store, ranker, retriever, LLM,
prompt builder and the two pipelines). Components are constructed lazily and
cached on first access to avoid repeated expensive initialisation.

Notes
-----
- Keep this module importable with minimal side effects:
  - do not perform network calls at import time
  - do not read files at import time
  - construct expensive objects lazily (cached on first access)

- Entry points (API, scripts, tests) own the container and share it; request
  handlers never create clients of their own.

Examples
--------
>>> from manual_rag.config import GlobalConfig
>>> from manual_rag.app.container import build_container
>>> cfg = GlobalConfig.load("config/config.yaml")
>>> c = build_container(cfg)
>>> result = c.pipeline.run("How do I reset the filter?", manual_id="dishwasher-x1")
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Any, Mapping


@dataclass(frozen=True)
class ManualRagContainer:
    """Holds the configured, cached runtime components for the application.

    Parameters
    ----------
    config : Any
        Loaded global configuration object (typically :class:`manual_rag.config.GlobalConfig`).
    """

    config: Any

    @cached_property
    def embedder(self) -> Any:
        """Return the embedding client used for chunks and questions."""
        from manual_rag.retrieval.embedder import create_embedder

        return create_embedder(_as_mapping(self.config.embedder))

    @cached_property
    def vector_store(self) -> Any:
        """Return the tenant-scoped Qdrant store.

        Returns
        -------
        Any
            A :class:`manual_rag.retrieval.vector_store.QdrantManualStore`.
        """
        from manual_rag.retrieval.vector_store import create_vector_store

        section = dict(_as_mapping(self.config.vector_store))
        embedder_cfg = _as_mapping(self.config.embedder)
        if "dimension" not in section and embedder_cfg.get("dimension"):
            section["dimension"] = embedder_cfg["dimension"]
        return create_vector_store(section, tenant_id=self.config.tenant_id)

    @cached_property
    def ranker(self) -> Any:
        """Return the candidate ranker configured from the ``ranker`` section."""
        from manual_rag.retrieval.ranker import create_ranker

        return create_ranker(_as_mapping(self.config.ranker))

    @cached_property
    def retriever(self) -> Any:
        """Return the retriever wired over the embedder, store and ranker."""
        from manual_rag.retrieval.retriever import DEFAULT_TOP_K, ManualRetriever

        section = _as_mapping(self.config.retriever)
        return ManualRetriever(
            embedder=self.embedder,
            vector_store=self.vector_store,
            ranker=self.ranker,
            top_k=section.get("top_k") or DEFAULT_TOP_K,
        )

    @cached_property
    def generator_llm(self) -> Any:
        """Return the LLM used to generate final answers."""
        from manual_rag.generation.llm_interface import create_llm

        return create_llm(dict(_as_mapping(self.config.generator_llm)))

    @cached_property
    def prompt_builder(self) -> Any:
        """Return the prompt builder.

        The bundled ``manual_assistant`` template is always registered; sources
        listed under ``config.prompts`` are registered afterwards and may
        override it. Relative sources are resolved against the directory of
        the loaded config file, not the current working directory.

        Raises
        ------
        TypeError
            If ``config.prompts`` is neither a string nor a list.
        """
        from manual_rag.generation.prompt_builder import default_prompt_builder

        builder = default_prompt_builder()
        prompts = getattr(self.config, "prompts", None)
        if prompts is None:
            return builder

        if isinstance(prompts, str):
            sources = [prompts]
        elif isinstance(prompts, (list, tuple)):
            sources = [str(p) for p in prompts]
        else:
            raise TypeError(f"config.prompts must be a str or list[str], got {type(prompts)!r}")

        cfg_path = getattr(self.config, "config_path", None)
        base_dir = Path(cfg_path).expanduser().resolve().parent if cfg_path else None
        for src in sources:
            builder.register_from_source(src, base_dir=base_dir)
        return builder

    @cached_property
    def prompt_name(self) -> str:
        """Return the prompt to render.

        Raises
        ------
        ValueError
            If the configured prompt name is not registered.
        """
        from manual_rag.generation.prompt_builder import DEFAULT_PROMPT_NAME

        prompt_name = getattr(self.config, "prompt_name", None) or DEFAULT_PROMPT_NAME
        if not self.prompt_builder.has_prompt(prompt_name):
            available = ", ".join(self.prompt_builder.list_prompts())
            raise ValueError(
                f"Configured prompt_name {prompt_name!r} was not found in loaded prompts. "
                f"Available: [{available}]"
            )
        return str(prompt_name)

    @cached_property
    def pipeline(self) -> Any:
        """Return the fully wired question-answering pipeline.

        Returns
        -------
        Any
            A :class:`manual_rag.pipelines.rag_pipeline.RAGPipeline` instance.
        """
        from manual_rag.pipelines.rag_pipeline import NOT_FOUND_MESSAGE, RAGPipeline

        section = _as_mapping(self.config.retriever)
        return RAGPipeline(
            retriever=self.retriever,
            prompt_builder=self.prompt_builder,
            llm=self.generator_llm,
            prompt_name=self.prompt_name,
            top_k=section.get("top_k") or self.retriever.top_k,
            not_found_message=_as_mapping(self.config.generator_llm).get(
                "not_found_message", NOT_FOUND_MESSAGE
            ),
        )

    @cached_property
    def ingest_pipeline(self) -> Any:
        """Return the pipeline that segments, embeds and stores manuals."""
        from manual_rag.pipelines.ingest_pipeline import (
            DEFAULT_BATCH_SIZE,
            DEFAULT_MAX_METADATA_CHARS,
            IngestPipeline,
        )
        from manual_rag.retrieval.text_splitter import SegmenterConfig

        section = _as_mapping(self.config.ingest)
        return IngestPipeline(
            embedder=self.embedder,
            vector_store=self.vector_store,
            segmenter_config=SegmenterConfig.from_mapping(_as_mapping(self.config.segmenter)),
            batch_size=section.get("batch_size", DEFAULT_BATCH_SIZE),
            max_metadata_chars=section.get("max_metadata_chars", DEFAULT_MAX_METADATA_CHARS),
        )


def build_container(config: Any) -> ManualRagContainer:
    """Create a :class:`~manual_rag.app.container.ManualRagContainer`.

    Single entry point for the FastAPI start-up hook, CLI scripts and tests.

    Parameters
    ----------
    config : Any
        Loaded global configuration object (typically :class:`manual_rag.config.GlobalConfig`).

    Returns
    -------
    ManualRagContainer
        Container instance with cached component accessors.
    """
    return ManualRagContainer(config=config)


def _as_mapping(obj: Any) -> Mapping[str, Any]:
    """Coerce an object into a mapping.

    Parameters
    ----------
    obj : Any
        Object to interpret as a mapping. ``None`` becomes an empty dict, a
        mapping is returned as-is and an object with ``__dict__`` yields that
        dictionary.

    Returns
    -------
    Mapping[str, Any]
        A dictionary-like view of ``obj``.

    Raises
    ------
    TypeError
        If ``obj`` cannot be interpreted as a mapping.
    """
    if obj is None:
        return {}

    if isinstance(obj, Mapping):
        return obj

    if hasattr(obj, "__dict__"):
        return dict(vars(obj))

    raise TypeError(f"Expected mapping type but got {type(obj)}")


__all__ = ["ManualRagContainer", "build_container"]
