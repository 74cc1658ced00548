"""
Logging utilities for the FastAPI application.

Provides a consistent logging format and keeps SSO tokens and session
secrets that arrive in query strings out of the access log.
"""

import logging
import re
import sys

_NOISY_LOGGERS = ("httpx", "httpcore")
_SENSITIVE_QUERY = re.compile(r"([?&](?:token|secret)=)[^&\s\"]*")


def redact_query(text: str) -> str:
    """Mask the values of ``token`` and ``secret`` query parameters."""
    return _SENSITIVE_QUERY.sub(r"\1****", text)


class QuerySecretFilter(logging.Filter):
    """Rewrite string arguments of a record through ``redact_query``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(
                redact_query(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # httpx logs full request URLs at INFO.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    access_logger = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, QuerySecretFilter) for f in access_logger.filters):
        access_logger.addFilter(QuerySecretFilter())


__all__ = ["QuerySecretFilter", "configure_logging", "redact_query"]
