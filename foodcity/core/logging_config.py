import logging

import structlog

from foodcity.core.config import settings


def _add_service_context(logger, method_name, event_dict):
    event_dict.setdefault("service", "foodcity-api")
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    return event_dict


def configure_logging():
    """structlog on top of stdlib logging: console output when DEBUG, JSON lines otherwise."""
    level = logging.DEBUG if settings.DEBUG else logging.INFO
    renderer = structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=level)
    # request_context already logs every request.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
