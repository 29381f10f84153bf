"""Manual ingestion entrypoint.

Loads configuration, reads a PDF manual page by page, chunks each page and
upserts the embedded chunks into the tenant's collection.

Usage
-----
python scripts/ingest_manual.py path/to/manual.pdf [manual_id] [title]
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Make `src/manual_rag` importable when running from a repo checkout.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from manual_rag.app.container import build_container
from manual_rag.config import GlobalConfig, configure_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest a PDF manual into the vector store")

    parser.add_argument("pdf", type=str, help="Path to the PDF manual")
    parser.add_argument(
        "manual_id",
        nargs="?",
        default=None,
        help="Identifier to store the chunks under (default: a random UUID)",
    )
    parser.add_argument(
        "title",
        nargs="?",
        default=None,
        help="Manual title shown in citations (default: 'Manual')",
    )
    parser.add_argument(
        "--config-file",
        "-c",
        type=str,
        default=os.environ.get("MANUAL_RAG_CONFIG", str(REPO_ROOT / "config" / "config.yaml")),
        help="Path to the YAML configuration file (default: $MANUAL_RAG_CONFIG or config/config.yaml)",
    )

    return parser.parse_args()


def main() -> None:
    args = parse_args()

    cfg = GlobalConfig.load(args.config_file)
    configure_logging(cfg)
    container = build_container(cfg)

    container.vector_store.ensure_collection()
    report = container.ingest_pipeline.ingest_manual(args.pdf, manual_id=args.manual_id, title=args.title)

    print(f"Ingested '{report.title}' (manual_id={report.manual_id}): {report.pages} pages, {report.chunks} chunks")


if __name__ == "__main__":
    main()
