"""Structured JSON logging for FanPulse.

JSON lines go to stderr; stdout belongs to the MCP stdio transport.  Each
tool call or HTTP request runs under its own correlation ID, bound through
``structlog.contextvars`` so every line it emits carries the same ID.

Fan records carry names and email addresses, and free-text fields (event
details, promotion descriptions) can contain contact details typed by staff.
``redact_pii`` masks both before rendering.
"""

from __future__ import annotations

import logging
import re
import sys
import uuid
from typing import Any

import structlog

from fanpulse.common import settings

# --------------------------------------------------------------------------- #
# Correlation IDs                                                              #
# --------------------------------------------------------------------------- #
_CORRELATION_KEY = "correlation_id"


def set_correlation_id(cid: str) -> None:
    """Bind *cid* for the rest of the current context (request or tool call)."""
    structlog.contextvars.bind_contextvars(**{_CORRELATION_KEY: cid})


def new_correlation_id() -> str:
    cid = uuid.uuid4().hex
    set_correlation_id(cid)
    return cid


def get_correlation_id() -> str:
    """Return the bound correlation ID, binding a new one if none is set."""
    cid = structlog.contextvars.get_contextvars().get(_CORRELATION_KEY)
    return cid if cid is not None else new_correlation_id()


# --------------------------------------------------------------------------- #
# PII redaction                                                                #
# --------------------------------------------------------------------------- #
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE_RE = re.compile(r"\+?\d[\d\-\s()]{7,}\d")
# Event, purchase and promotion dates are ISO strings, never phone numbers.
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

# Fan identity fields as they appear on Fan / FanSegmentRow, plus the lookup
# keys a not-found log line carries (which may be an email).
_PII_KEYS = frozenset(
    {
        "email",
        "phone",
        "first_name",
        "last_name",
        "name",
        "fan_name",
        "identifier",
        "fan_identifier",
    }
)
_PASSTHROUGH_KEYS = frozenset(
    {"timestamp", "level", "logger", _CORRELATION_KEY, "service", "environment"}
)
_REDACTED = "[REDACTED]"


def _mask_phones(text: str) -> str:
    parts = _ISO_DATE_RE.split(text)
    dates = _ISO_DATE_RE.findall(text)
    masked = [_PHONE_RE.sub(_REDACTED, part) for part in parts]
    out = masked[0]
    for found, rest in zip(dates, masked[1:]):
        out += found + rest
    return out


def redact_pii(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Replace identity keys outright; mask emails and phones inside free text."""
    for key, value in list(event_dict.items()):
        if not isinstance(value, str) or key in _PASSTHROUGH_KEYS:
            continue
        if key.lower() in _PII_KEYS:
            event_dict[key] = _REDACTED
            continue
        event_dict[key] = _mask_phones(_EMAIL_RE.sub(_REDACTED, value))
    return event_dict


# --------------------------------------------------------------------------- #
# Setup                                                                        #
# --------------------------------------------------------------------------- #


def _service_tagger(service_name: str) -> structlog.types.Processor:
    def tag(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault(_CORRELATION_KEY, get_correlation_id())
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("environment", settings.ENVIRONMENT)
        return event_dict

    return tag


def setup_logging(
    service_name: str = settings.SERVICE_NAME,
    log_level: str = settings.LOG_LEVEL,
) -> structlog.stdlib.BoundLogger:
    """Route structlog through stdlib logging to stderr as redacted JSON.

    ``service_name`` distinguishes the stdio server, the HTTP server and the
    CLI (``fanpulse-mcp``, ``fanpulse-http``, ``fanpulse-cli``).
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _service_tagger(service_name),
            redact_pii,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
        stream=sys.stderr,
        force=True,
    )

    logger: structlog.stdlib.BoundLogger = structlog.get_logger(service_name)
    logger.info("logging_initialised", log_level=log_level)
    return logger
