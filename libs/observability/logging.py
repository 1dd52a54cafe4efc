# libs/observability/logging.py
from __future__ import annotations

import logging
import structlog

_CONFIGURED = False


def _level_to_int(level: str | int) -> int:
    """Accept 'INFO' / 'info' / 20 / logging.INFO and return an int level."""
    if isinstance(level, int):
        return level
    lvl = getattr(logging, str(level).upper(), None)
    return lvl if isinstance(lvl, int) else logging.INFO


def setup_logging(level: str | int | None = None, *, json: bool | None = None) -> None:
    """
    Configure stdlib logging + structlog once (later calls are no-ops).

    level / json default to MARKET_LOG_LEVEL / MARKET_LOG_JSON. The console
    renderer is meant for the CLI; services keep JSON lines.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    from libs.connectors.config import get_settings

    cfg = get_settings()
    lvl = _level_to_int(level if level is not None else cfg.LOG_LEVEL)
    as_json = cfg.LOG_JSON if json is None else json

    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)-7s %(name)s - %(message)s",
    )

    renderer = structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(lvl),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
