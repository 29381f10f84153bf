"""Remove smoke-test data from the tenant.

Deletes every point titled "Smoke Test" and the fixed smoke point written by
``smoke_test.py``.
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
from smoke_test import SMOKE_TITLE, smoke_key


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete smoke-test points from the vector store")
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

    print(f"Collection: {store.collection_name}")
    print(f"Tenant    : {store.tenant_id}")

    store.delete_where(title=SMOKE_TITLE)
    store.delete_keys([smoke_key(store.tenant_id)])

    print("Cleanup done.")


if __name__ == "__main__":
    main()
