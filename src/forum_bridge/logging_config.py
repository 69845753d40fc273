"""Structured logging configuration."""

import logging
import sys

import structlog

SERVICE_NAME = "github-discord-bridge"


def parse_log_level(level: str) -> int:
    """Map a level name ("info") or number ("20") to a logging level."""
    if level.strip().isdigit():
        return int(level)
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(environment: str = "development", log_level: str | None = None) -> None:
    """Configure structlog: JSON lines in production, console rendering elsewhere."""
    production = environment == "production"
    level = log_level or ("INFO" if production else "DEBUG")
    processors = [
        structlog.contextvars.merge_contextvars,
        add_service,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if production:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(parse_log_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


__all__ = ["configure_logging", "parse_log_level", "SERVICE_NAME"]
