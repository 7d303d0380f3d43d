"""Redaction of credentials and registrant personal data for debug logs.

Search payloads carry the agent credential and responses carry personal
details of registrants. Anything passed to a DEBUG log line goes through
:func:`redact_for_log` first.
"""

from __future__ import annotations

import functools
import itertools
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

_REDACTED = "<redacted>"
_MAX_DEPTH = 20

# Compared after lowercasing and removing underscores.
_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "credential",
        "agentcode",
        "authorization",
        "cookie",
        "token",
        "dob",
        "streetaddress",
        "aliases",
    }
)


def _is_sensitive(key: object) -> bool:
    return str(key).replace("_", "").lower() in _SENSITIVE_KEYS


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}…<truncated>"


def redact_for_log(value: Any, *, max_string: int = 512, max_items: int = 20, _depth: int = 0) -> Any:
    """Return a copy of *value* that is safe to emit at DEBUG level.

    Sensitive mapping keys are replaced by ``"<redacted>"``, long strings
    are clipped to *max_string* characters and sequences are cut after
    *max_items* entries. Pydantic models are dumped by alias first.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _clip(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    nested = functools.partial(redact_for_log, max_string=max_string, max_items=max_items, _depth=_depth + 1)

    if isinstance(value, BaseModel):
        return nested(value.model_dump(mode="json", by_alias=True, exclude={"raw"}))
    if isinstance(value, Mapping):
        return {str(key): _REDACTED if _is_sensitive(key) else nested(item) for key, item in value.items()}
    if isinstance(value, Sequence):
        items = [nested(item) for item in itertools.islice(value, max_items)]
        hidden = len(value) - max_items
        if hidden > 0:
            items.append(f"<+{hidden} more>")
        return items
    return repr(value)
