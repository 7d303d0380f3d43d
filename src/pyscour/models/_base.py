"""Shared base for models decoded from registry responses.

The registry marks missing values inconsistently: ``null``, an empty
string, ``"--"``, ``"N/A"`` or a NaN number all show up. Such entries are
dropped before validation so that field defaults apply, and the untouched
payload is kept on ``raw`` for debugging.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_PLACEHOLDER_STRINGS = frozenset({"", "--", "N/A", "NaN", "nan"})


def _is_placeholder(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in _PLACEHOLDER_STRINGS
    return isinstance(value, float) and math.isnan(value)


class ScourBaseModel(BaseModel):
    """Frozen, camelCase-aliased model that tolerates registry placeholders."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _drop_placeholders(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        present = {key: value for key, value in data.items() if not _is_placeholder(value)}
        # Keyword construction may pass raw= explicitly.
        present.setdefault("raw", dict(data))
        return present
