"""Logging configuration for the repo unifier CLI."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_EXTERNAL_LOGGERS = ("httpx", "httpcore", "anthropic", "openai")


def setup_logging(log_level: str | None = None) -> None:
    """Configure the root logger to write to stderr.

    Args:
        log_level: Level name; falls back to the LOG_LEVEL env var, then WARNING.
            Stdout is left for command output.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "WARNING")

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    configure_external_loggers()


def configure_external_loggers() -> None:
    """Keep SDK transport chatter out of the user's terminal."""
    for name in _EXTERNAL_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
