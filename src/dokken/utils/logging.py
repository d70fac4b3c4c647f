"""Logging setup for the CLI."""

import logging
import sys


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that log every HTTP request to the engine
NOISY_LOGGERS = ("docker", "urllib3")


def setup_logging(level: str = "WARNING"):
    """Send log records to stdout at ``level``.

    Unknown level names fall back to WARNING. Calling it again replaces
    the previous configuration.
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
