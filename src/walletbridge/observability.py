"""Structured logging for walletbridge.

The library only emits structlog events; it never configures logging on
import. Applications that have no structlog setup of their own can call
:func:`configure_logging`, whose processor chain redacts credentials before
anything is rendered.
"""

import logging
import re
import typing as t

import structlog

# Keys whose values are always replaced, matched as substrings.
SENSITIVE_KEYS = (
    "private_key",
    "assertion",
    "access_token",
    "refresh_token",
    "authorization",
    "jwt",
    "secret",
    "password",
)
# "token" only as a whole key or suffix, so e.g. ``token_uri`` stays readable.
SENSITIVE_EXACT_KEYS = ("token",)
SENSITIVE_SUFFIXES = ("_token",)

# Compact JWS: three base64url segments, header starting with '{"' (eyJ).
_JWT_PATTERN = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")
_PEM_PATTERN = re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----", re.DOTALL)


def _scrub_value(value: t.Any) -> t.Any:
    if isinstance(value, str):
        value = _PEM_PATTERN.sub("[PRIVATE KEY]", value)
        return _JWT_PATTERN.sub("[JWT]", value)
    if isinstance(value, dict):
        return _scrub_dict(value)
    if isinstance(value, list | tuple):
        return type(value)(_scrub_value(v) for v in value)
    return value


def _scrub_dict(d: dict[str, t.Any]) -> dict[str, t.Any]:
    for key in list(d.keys()):
        if key == "event":
            continue
        lowered = key.lower()
        if (
            lowered in SENSITIVE_EXACT_KEYS
            or lowered.endswith(SENSITIVE_SUFFIXES)
            or any(sensitive in lowered for sensitive in SENSITIVE_KEYS)
        ):
            d[key] = "[REDACTED]"
        else:
            d[key] = _scrub_value(d[key])
    return d


def scrub_secrets(logger: t.Any, method_name: str, event_dict: dict[str, t.Any]) -> dict[str, t.Any]:
    """Redact credentials from log events.

    Values under sensitive keys are replaced entirely; JWTs and PEM private
    keys embedded in other string values (e.g. error bodies) are masked.
    """
    return _scrub_dict(event_dict)


def configure_logging(json_logs: bool = False, level: str = "INFO") -> None:
    """Configure structlog for applications without their own setup.

    Args:
        json_logs: Render JSON lines instead of human-readable console output.
        level: Minimum log level name.
    """
    renderer: t.Any = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,  # Merge context variables
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            scrub_secrets,  # Scrub before rendering
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelNamesMapping()[level.upper()]),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
