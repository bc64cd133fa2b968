# src/memtask/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console connector
on an asyncio event loop until /exit, EOF or Ctrl+C.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    settings = get_settings(sys.argv[1:] if argv is None else argv)

    log_file = setup_logging(
        log_dir=settings.data_dir,
        console_level=level_from_name(settings.log_level),
    )

    logger.info("Starting %s data_dir=%s log=%s", settings.app_name, settings.data_dir, log_file)

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(run_console_loop(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        for label, mgr in (("memory", state.memories), ("task", state.tasks), ("context", state.contexts)):
            stats = mgr.cache_stats()
            logger.info("Cache %s hits=%s misses=%s", label, stats.hits, stats.misses)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
