"""Serve the HTTP API with uvicorn.

The configuration path is handed to the app through ``MANUAL_RAG_CONFIG``;
host and port default to the ``api`` section, then to 0.0.0.0:8787.
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

import uvicorn

from manual_rag.config import GlobalConfig, configure_logging

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8787


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the manual assistant API")
    parser.add_argument(
        "--config-file",
        "-c",
        type=str,
        default=os.environ.get("MANUAL_RAG_CONFIG", str(REPO_ROOT / "config" / "config.yaml")),
        help="Path to the YAML configuration file",
    )
    parser.add_argument("--host", type=str, default=None, help="Bind address (overrides api.host)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port (overrides api.port, default 8787)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    cfg = GlobalConfig.load(args.config_file)
    configure_logging(cfg)
    os.environ["MANUAL_RAG_CONFIG"] = str(cfg.config_path)

    host = args.host or cfg.api.get("host", DEFAULT_HOST)
    port = args.port or int(cfg.api.get("port", os.environ.get("PORT", DEFAULT_PORT)))

    uvicorn.run("manual_rag.app.api:app", host=host, port=port)


if __name__ == "__main__":
    main()
