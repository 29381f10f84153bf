# manual_rag/app/api.py
from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from manual_rag.app.container import build_container
from manual_rag.config import GlobalConfig, configure_logging

logger = logging.getLogger("manual_rag.api")

CONFIG_ENV_VAR = "MANUAL_RAG_CONFIG"
DEFAULT_CONFIG_PATH = "config/config.yaml"


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str | None = None
    manual_id: str | None = Field(default=None, alias="manualId")


class ChatSource(BaseModel):
    manual_id: str | None = None
    title: str
    page: int | None = None
    score: float | None = None


class ChatResponse(BaseModel):
    answer: str
    sources: list[ChatSource] = Field(default_factory=list)


def _serialize_sources(sources: list[Any]) -> list[ChatSource]:
    out: list[ChatSource] = []
    for c in sources:
        manual_id = getattr(c, "document_id", None)
        out.append(
            ChatSource(
                manual_id=None if manual_id is None else str(manual_id),
                title=c.title,
                page=c.page,
                score=c.score,
            )
        )
    return out


def _cors_origins(config: Any) -> list[str]:
    section = getattr(config, "api", None) or {}
    origins = section.get("cors_origins", ["*"])
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    return list(origins)


def _load_env_config() -> GlobalConfig | None:
    """Load the configuration named by ``MANUAL_RAG_CONFIG`` if the file exists."""
    cfg_path = os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    if not os.path.isfile(cfg_path):
        return None
    return GlobalConfig.load(cfg_path)


def create_app(config: GlobalConfig | None = None, container: Any = None) -> FastAPI:
    """Build the HTTP application.

    Parameters
    ----------
    config : GlobalConfig or None, optional
        Configuration used to build the container and CORS policy.
    container : Any, optional
        Pre-built container. When neither argument is given the configuration
        is read from the path in ``MANUAL_RAG_CONFIG`` so the CORS policy
        follows it, and the container is built at start-up.

    Returns
    -------
    FastAPI
        Application exposing ``/``, ``/health`` and ``/api/chat``.
    """
    app = FastAPI(title="Manual RAG API", version="0.1.0")

    if container is None and config is not None:
        container = build_container(config)
    if config is None and container is None:
        config = _load_env_config()
    cfg = config if config is not None else getattr(container, "config", None)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(cfg),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.state.container = container

    @app.on_event("startup")
    def startup():
        if app.state.container is not None:
            return
        loaded = cfg
        if loaded is None:
            # Use env var so deployments can pass config location
            loaded = GlobalConfig.load(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
        configure_logging(loaded)
        app.state.container = build_container(loaded)
        logger.info("Loaded configuration from %s", loaded.config_path)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "OK"

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.post("/api/chat", response_model=ChatResponse)
    def chat(req: ChatRequest):
        question = (req.question or "").strip()
        if not question:
            return JSONResponse(status_code=400, content={"error": "question is required"})

        try:
            result = app.state.container.pipeline.run(question, manual_id=req.manual_id or None)
            return ChatResponse(
                answer=str(result.get("answer", "")),
                sources=_serialize_sources(result.get("sources", [])),
            )
        except Exception:
            logger.exception("Error while handling /api/chat")
            return JSONResponse(status_code=500, content={"error": "internal_error"})

    return app


app = create_app()
