"""Recent search model."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field


class RecentSearchEntry(BaseModel):
    """A previously resolved address search.

    Serialized with camelCase keys to stay compatible with stored lists.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    main_text: str = Field(alias="mainText")
    sub_text: str = Field(default="", alias="subText")
    jurisdiction: str | None = None
    postal_code: str | None = Field(default=None, alias="postalCode")

    @property
    def key(self) -> tuple[str, str]:
        return (self.main_text, self.sub_text)

    @property
    def text(self) -> str:
        return self.sub_text or self.main_text
