"""
ASGI Entry Point for the translines API.

This module exposes the `app` object required by ASGI servers (Uvicorn/Gunicorn).
It loads environment variables from `.env` before the application factory
runs so that settings see the credential.

Usage
-----
    $ python -m translines.api.server

Or via uvicorn directly:
    $ uvicorn translines.api.server:app --reload
"""

from __future__ import annotations

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from translines.api.app import create_app
from translines.core.settings import get_logger, load_settings

load_dotenv(dotenv_path=Path(".env"))

app = create_app()

logger = get_logger(__name__)


def main() -> None:
    """Run the API server locally for development."""
    settings = load_settings()
    if settings.google_api_key:
        logger.info("GOOGLE_API_KEY loaded (%s...)", settings.google_api_key[:8])
    else:
        logger.warning("GOOGLE_API_KEY missing; translation jobs will fail")

    uvicorn.run(
        "translines.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_dev,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
