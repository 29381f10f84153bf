"""manual_rag.pipelines

Pipeline orchestration components for the manual assistant.

Pipelines are lightweight and stateless beyond their configured components,
making them safe to reuse across requests and execution contexts.

Modules
-------
rag_pipeline
    Question answering: retrieve -> prompt -> generate.
ingest_pipeline
    Manual ingestion: PDF -> pages -> chunks -> embeddings -> vector store.
"""
