"""
Retrieval layer of the manual assistant.

This package covers everything needed to turn PDF manuals into searchable
vectors and to fetch the most relevant chunks for a question.

Submodules
----------
document_loader
    Reads PDF manuals page by page.
text_splitter
    Splits page text into overlapping word windows.
embedder
    Embedding model wrappers and batching helpers.
vector_store
    Tenant-scoped Qdrant store.
ranker
    Normalises, filters, deduplicates, diversifies and sorts raw matches.
retriever
    High-level retrieval API orchestrating embedding, search and ranking.
types
    Structural interfaces shared by the retrieval components.
"""
