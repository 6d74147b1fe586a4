"""structlog configuration for SetlistScout.

Every component logs snake_case events with keyword context, for example
``channel_event_queued`` with ``client_id``/``stage``/``progress`` or
``upstream_rate_limited`` with ``provider``/``attempt``.  In development the
events print through the coloured console renderer; with ``APP_ENV=production``
(or ``json_output=True``) each event is one JSON object per line so a
pipeline run can be followed by ``client_id``.

uvicorn and httpx log through the stdlib, which is routed into the same
processors.  The fetcher already logs every throttled or failed upstream
call, so httpx's own per-request lines are held back to WARNING unless the
service runs at DEBUG.
"""

import logging
import os
import sys

import structlog

_CHATTY_CLIENT_LOGGERS = ("httpx", "httpcore")


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        json_output: Render JSON even outside production.

    Returns:
        A configured structlog BoundLogger.
    """
    level = log_level.upper()
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    # merge_contextvars must run before the level and timestamp stamps.
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    client_level = level if level == "DEBUG" else "WARNING"
    for name in _CHATTY_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound with ``logger_name=name``.

    Configures logging with the defaults on first use, so modules imported
    outside ``main.py`` (tests, scripts) still log.
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
