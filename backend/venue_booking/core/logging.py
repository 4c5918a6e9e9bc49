"""
Structured logging configuration using structlog.

JSON lines in production, coloured console output elsewhere. Service code
logs snake_case events (booking_created, booking_conflict, email_skipped)
with keyword fields; the request middleware binds request_id, method and
path as contextvars so every line of a request carries them.

Requester and admin email addresses are masked before rendering, and
password or token fields are dropped outright.
"""

import logging
import sys

import structlog
from venue_booking.core.config import get_settings

# Fields that may carry an email address
EMAIL_FIELDS = frozenset({"email", "to", "requester_email"})
SECRET_FIELDS = frozenset({"password", "token", "session"})

_HANDLER_NAME = "venue_booking"


def mask_email(value: str) -> str:
    """jordan@example.com -> j***@example.com"""
    local, sep, domain = value.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def redact_personal_data(logger, method_name: str, event_dict: dict) -> dict:
    for key in SECRET_FIELDS & event_dict.keys():
        event_dict[key] = "[redacted]"
    for key in EMAIL_FIELDS & event_dict.keys():
        if isinstance(event_dict[key], str):
            event_dict[key] = mask_email(event_dict[key])
    return event_dict


def _renderer(production: bool):
    if production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging() -> None:
    """Configure structlog and the root logger. Safe to call more than once."""
    settings = get_settings()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_personal_data,
    ]
    if settings.is_production:
        processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.is_production),
            ]
        )
    )

    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if h.get_name() == _HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Request lines come from our middleware
    noisy = ["uvicorn.access", "httpx"]
    if not settings.DEBUG:
        noisy.append("sqlalchemy.engine")
    for name in noisy:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
