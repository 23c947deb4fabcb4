"""Redaction of credential material inside free-form JSON."""

import re

REDACTED = '[REDACTED]'

SENSITIVE_KEY_PATTERN = re.compile(
    r'(password|passwd|secret|token|api[_-]?key|authorization|credential)',
    re.IGNORECASE,
)


def redact(value):
    """Return a copy of value with sensitive keys masked at any depth."""
    if isinstance(value, dict):
        return {
            key: REDACTED if SENSITIVE_KEY_PATTERN.search(str(key)) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value
