"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from automation_dashboard.resolver.resolver import TierEvent


def setup_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog with console (or JSON) output on stderr."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger instance."""
    return structlog.get_logger(name)


_tier_logger = get_logger("automation_dashboard.tiers")


def log_tier_event(event: TierEvent) -> None:
    """Resolver listener that writes each tier attempt to the log."""
    fields = {
        "query": event.query,
        "tier": event.tier.value,
        "elapsed": round(event.elapsed_seconds, 3),
    }
    if event.outcome == "failed":
        _tier_logger.warning("tier_failed", error=event.error, **fields)
    elif event.outcome == "skipped":
        _tier_logger.debug("tier_skipped", reason=event.error, **fields)
    else:
        _tier_logger.debug("tier_answered", **fields)
