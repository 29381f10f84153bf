"""Print collection statistics as JSON."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from manual_rag.app.container import build_container
from manual_rag.config import GlobalConfig


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show vector-store statistics")
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
    print(json.dumps(build_container(cfg).vector_store.stats(), indent=2, default=str))


if __name__ == "__main__":
    main()
