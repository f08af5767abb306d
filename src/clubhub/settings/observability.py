"""Logging settings for ClubHub.

structlog renders every event, including those from Django and Celery loggers,
through one processor chain. ``LOG_FORMAT=console`` switches to the coloured
developer renderer; anything else emits one JSON object per line.
"""

import re
import typing as t

import structlog
from decouple import config

from .base import DEBUG, VERSION

SERVICE_NAME = config("SERVICE_NAME", default="clubhub")
DEPLOYMENT_ENVIRONMENT = config("DEPLOYMENT_ENVIRONMENT", default="development" if DEBUG else "production")
LOG_LEVEL = config("LOG_LEVEL", default="INFO")
LOG_FORMAT = config("LOG_FORMAT", default="console" if DEBUG else "json")

# Substring match on lower-cased keys.
SENSITIVE_LOG_KEYS = ("password", "secret", "signature", "api_key", "token", "authorization", "cookie", "qr_data")
EMAIL_RE = re.compile(r"\b[\w.+-]+@[\w-]+\.[\w.-]+\b")


def _redact(key: str, value: t.Any) -> t.Any:
    lowered = key.lower()
    if any(sensitive in lowered for sensitive in SENSITIVE_LOG_KEYS):
        return "[REDACTED]"
    if isinstance(value, dict):
        return {k: _redact(str(k), v) for k, v in value.items()}
    if isinstance(value, str) and "email" not in lowered:
        return EMAIL_RE.sub("[EMAIL]", value)
    return value


def scrub_pii(logger: t.Any, method_name: str, event_dict: dict[str, t.Any]) -> dict[str, t.Any]:
    """Mask secrets by key and e-mail addresses inside free text.

    Keys that themselves name an e-mail field are left readable.
    """
    return {key: _redact(key, value) for key, value in event_dict.items()}


def add_app_context(logger: t.Any, method_name: str, event_dict: dict[str, t.Any]) -> dict[str, t.Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", VERSION)
    event_dict.setdefault("environment", DEPLOYMENT_ENVIRONMENT)
    return event_dict


RENDERER: t.Any = (
    structlog.dev.ConsoleRenderer() if LOG_FORMAT == "console" else structlog.processors.JSONRenderer()
)

SHARED_PROCESSORS: list[t.Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    add_app_context,
    scrub_pii,
]

structlog.configure(
    processors=[
        *SHARED_PROCESSORS,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)


def _logger(level: str) -> dict[str, t.Any]:
    return {"handlers": ["console"], "level": level, "propagate": False}


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "structlog": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processors": [structlog.stdlib.ProcessorFormatter.remove_processors_meta, RENDERER],
            "foreign_pre_chain": SHARED_PROCESSORS,
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "structlog"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": _logger("INFO"),
        "django.db.backends": _logger("WARNING"),
        "celery": _logger(LOG_LEVEL),
        "common": _logger(LOG_LEVEL),
        "accounts": _logger(LOG_LEVEL),
        "clubs": _logger(LOG_LEVEL),
        "events": _logger(LOG_LEVEL),
    },
}
