"""Create (or confirm) the Qdrant collection used for manual chunks.

Safe to run multiple times. The vector size comes from the configured
embedding dimension and must match the embedding model.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from manual_rag.app.container import build_container
from manual_rag.config import GlobalConfig, configure_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the vector-store collection if it does not exist")
    parser.add_argument(
        "--config-file",
        "-c",
        type=str,
        default=os.environ.get("MANUAL_RAG_CONFIG", str(REPO_ROOT / "config" / "config.yaml")),
        help="Path to the YAML configuration file",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    cfg = GlobalConfig.load(args.config_file)
    configure_logging(cfg)
    store = build_container(cfg).vector_store

    if store.ensure_collection():
        print(f"Created collection: {store.collection_name}")
    else:
        print(f"Collection already exists: {store.collection_name}")


if __name__ == "__main__":
    main()
