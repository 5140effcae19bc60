"""
EVA Logging Configuration

structlog setup shared by every module. Events are key/value pairs;
development renders them for the console, every other environment
emits one JSON object per line.

PRIVACY: Conversation text must never reach a log sink. Modules log
lengths, labels and counts only, and the redaction processor below
masks any field that still carries secrets or conversation text.
"""

import logging
import sys
from typing import Any, Iterable

import structlog

from eva.config.settings import Settings

SERVICE_NAME = "eva-core"

# Masked wherever they appear inside a key ("openai_api_key", "auth_token")
SECRET_KEY_FRAGMENTS: frozenset[str] = frozenset({
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "bearer",
    "credential",
})

# Masked only on an exact key match, so "message_length" stays visible
CONVERSATION_TEXT_KEYS: frozenset[str] = frozenset({
    "content",
    "answer",
    "message",
    "user_message",
    "statement",
    "text",
})

NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "openai", "google", "urllib3")

REDACTED = "[REDACTED]"


def _is_sensitive(key: str) -> bool:
    key_lower = key.lower()
    if key_lower in CONVERSATION_TEXT_KEYS:
        return True
    return any(fragment in key_lower for fragment in SECRET_KEY_FRAGMENTS)


def _redact(key: str, value: Any) -> Any:
    if _is_sensitive(key):
        return REDACTED
    if isinstance(value, dict):
        return {k: _redact(k, v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact(key, item) for item in value]
    return value


def redact_sensitive_fields(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Mask secrets and conversation text in an event, nested values included."""
    return {
        key: value if key == "event" else _redact(key, value)
        for key, value in event_dict.items()
    }


def add_service_name(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def build_processors(json_output: bool) -> list[Any]:
    """
    Processor chain for structlog.

    Redaction runs after context merging so correlation-bound values
    are masked too, and before rendering.

    Args:
        json_output: Render JSON lines instead of console output

    Returns:
        Ordered processors
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        add_service_name,
    ]

    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    return processors


def configure_logging(
    settings: Settings,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Call once at process start, before the orchestrator is built.

    Args:
        settings: Application settings (env and log level)
        quiet_loggers: Third-party loggers limited to WARNING
    """
    level = logging.getLevelName(settings.log_level.upper())

    structlog.configure(
        processors=build_processors(json_output=settings.env != "development"),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Module logger; call as `logger = get_logger(__name__)`."""
    return structlog.get_logger(name)


def correlation_context(correlation_id: str):
    """
    Bind a correlation ID for the duration of a `with` block.

    All log entries inside the block include the correlation ID for
    message tracing. Previously bound context is restored on exit.
    """
    return structlog.contextvars.bound_contextvars(correlation_id=correlation_id)
