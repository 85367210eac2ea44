"""
Logging infrastructure for the TrackReview platform.

- RequestIDFilter: injects the current request id and user into every record
- SensitiveDataFilter: redacts provider secrets that end up in log messages
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Any, ClassVar

# Thread-local storage for request context
_request_context = threading.local()

_CONTEXT_ATTRS = ("request_id", "user_id", "user_email", "ip_address")


# =============================================================================
# REQUEST CONTEXT FUNCTIONS
# =============================================================================


def set_request_context(**kwargs: Any) -> None:
    """Set request context for the current thread"""
    for key, value in kwargs.items():
        setattr(_request_context, key, value)


def clear_request_context() -> None:
    """Clear request context for the current thread"""
    for attr in _CONTEXT_ATTRS:
        if hasattr(_request_context, attr):
            delattr(_request_context, attr)


# =============================================================================
# REQUEST ID FILTER - Structured Logging with Request Correlation
# =============================================================================


class RequestIDFilter(logging.Filter):
    """
    Add request ID and context to log records.

    This filter injects the request ID from thread-local storage
    into every log record, enabling request tracing across logs.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for attr in _CONTEXT_ATTRS:
            if not hasattr(record, attr):
                default = "-" if attr == "request_id" else None
                setattr(record, attr, getattr(_request_context, attr, default))
        return True


class SensitiveDataFilter(logging.Filter):
    """
    Redact provider credentials from log records.

    Stripe secret keys, webhook secrets and embedded checkout client secrets
    must never appear in log output.
    """

    SENSITIVE_PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(r"sk_(live|test)_[A-Za-z0-9]+"),
        re.compile(r"whsec_[A-Za-z0-9]+"),
        re.compile(r"cs_(live|test)_[A-Za-z0-9]+_secret_[A-Za-z0-9]+"),
    ]

    REDACTION_TEXT = "[REDACTED]"

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            for pattern in self.SENSITIVE_PATTERNS:
                record.msg = pattern.sub(self.REDACTION_TEXT, record.msg)
        return True
