"""Command line entry for RAGOps."""

from __future__ import annotations

import logging

import uvicorn

from ragops.api.main import app
from ragops.core.config import settings


def run_server() -> None:
    logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8080)


def main() -> None:
    run_server()


if __name__ == "__main__":
    main()
