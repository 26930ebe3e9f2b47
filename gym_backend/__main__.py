"""
Run the API server: ``python -m gym_backend``.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from gym_backend.app import create_app
from gym_backend.config import get_settings
from gym_backend.firebase import CredentialsNotFoundError

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Gym admin backend API server")
    parser.add_argument("--host", default=settings.host, help="Interface to bind.")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind.")
    parser.add_argument(
        "--in-memory",
        action="store_true",
        help="Use in-memory store and identity backends instead of Firebase.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
    )

    if args.in_memory:
        settings = settings.model_copy(update={"use_in_memory_backends": True})

    try:
        app = create_app(settings)
    except CredentialsNotFoundError as e:
        logger.error("%s", e)
        return 1

    logger.info("Server running on %s:%d (env: %s)", args.host, args.port, settings.app_env)
    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
