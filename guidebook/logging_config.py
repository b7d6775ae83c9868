"""
Logging configuration for the guidebook storage engine.

Routes structlog through the standard library so that repository logs
(structlog) and engine logs (logging) share one handler and level.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import Settings, get_settings


def configure_logging(
    log_level: Optional[str] = None, use_json: Optional[bool] = None
) -> None:
    """
    Configure structlog and the root logger.

    Args:
        log_level: Logging level, defaults to ``Settings.LOG_LEVEL``
        use_json: JSON output instead of console output, defaults to
            ``Settings.LOG_JSON``
    """
    settings: Settings = get_settings()
    level_name = (log_level or settings.LOG_LEVEL).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    if use_json is None:
        use_json = settings.LOG_JSON

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
