# src/bizboard/cli/main.py

"""
CLI entrypoints.

`bizboard`      initializes logging, builds AppState and runs the console dashboard.
`bizboard-api`  serves the task-generation endpoint with uvicorn.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, create_session
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _setup(settings) -> int:
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=getattr(settings, "data_dir", ".local/bizboard"), console_level=console_level)

    # keep noisy libs readable
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    return console_level


def main() -> None:
    settings = get_settings()
    _setup(settings)

    logger.info("Starting %s...", getattr(settings, "app_name", "bizboard"))

    state = create_initial_state(settings=settings)
    session = create_session(state)

    try:
        asyncio.run(run_console_loop(session, app_name=settings.app_name))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        session.close()
        logger.info("Bye.")


def serve() -> None:
    import uvicorn

    from ..api.server import create_app

    settings = get_settings()
    console_level = _setup(settings)

    state = create_initial_state(settings=settings)
    app = create_app(state)

    logger.info("Serving generation endpoint on %s:%s", settings.api_host, settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=logging.getLevelName(console_level).lower())


if __name__ == "__main__":
    main()
