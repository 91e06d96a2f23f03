"""Logging configuration for the ROI analyzer.

structlog renders events on top of stdlib logging, so third-party loggers
(requests/urllib3, streamlit) share the same handlers. Console output by
default, JSON lines when ``ROI_LOG_JSON`` is set.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

from src.core.settings import get_settings

LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
LOG_FILE = LOG_DIR / "roi_analyzer.log"

# Chatty libraries kept at WARNING unless the app runs at DEBUG
NOISY_LOGGERS: tuple[str, ...] = ("urllib3", "charset_normalizer", "watchdog")

_configured: bool = False


def _build_handlers() -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    # No log file while pytest is running
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return handlers

    try:
        LOG_DIR.mkdir(exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                str(LOG_FILE), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
        )
    except OSError:
        # Read-only deployments log to stdout only
        pass
    return handlers


def _event_processors(json_output: bool) -> list[Any]:
    """Processor chain ending in the console or JSON renderer."""
    chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    chain.append(renderer)
    return chain


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> structlog.stdlib.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Safe to call more than once; only the first call has an effect.

    Args:
        level: Log level name. Defaults to ``ROI_LOG_LEVEL`` (INFO).
        json_output: Render JSON lines instead of console output.
            Defaults to ``ROI_LOG_JSON``.

    Returns:
        Root structlog logger.
    """
    global _configured

    if not _configured:
        settings = get_settings()
        numeric_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
        if json_output is None:
            json_output = settings.log_json

        logging.basicConfig(
            format="%(message)s",
            level=numeric_level,
            handlers=_build_handlers(),
            force=True,
        )
        if numeric_level > logging.DEBUG:
            for name in NOISY_LOGGERS:
                logging.getLogger(name).setLevel(logging.WARNING)

        structlog.configure(
            processors=_event_processors(json_output),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _configured = True

    return structlog.get_logger()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger backed by the stdlib logger ``name`` (module path by convention).

    Logging is configured lazily on first use.
    """
    configure_logging()
    return structlog.get_logger(name) if name else structlog.get_logger()
