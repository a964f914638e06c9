"""Logging setup for SwitchBot Bridge."""

from __future__ import annotations

import logging

import structlog

from switchbot_bridge.config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging.

    Args:
        settings: Settings to read env and log level from. Defaults to the
            cached application settings.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
            if settings.env == "development"
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Standard logging carries the client/registry modules and httpx
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
