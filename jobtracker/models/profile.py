"""
Portfolio profile record.

List-valued sections are stored as JSON and parsed leniently: older rows
may hold a JSON string, ``NULL`` or garbage, all of which become lists.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from jobtracker.models.status import ProfileStatus

LIST_FIELDS = (
    "experience",
    "education",
    "certifications",
    "skills",
    "interests",
    "social_links",
)

# Sections holding plain labels; anything else in them is dropped
TEXT_LIST_FIELDS = ("skills", "interests")


def parse_list_field(value: Any) -> list:
    """Return ``value`` as a list, decoding JSON strings and dropping anything else."""
    if not value:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return []
        return parsed if isinstance(parsed, list) else []
    return []


class Profile(BaseModel):
    """Public portfolio profile of one user."""

    model_config = ConfigDict(extra="ignore")

    id: str
    username: Optional[str] = None
    full_name: str = ""
    headline: str = ""
    about: str = ""
    location: str = ""
    avatar_url: Optional[str] = None
    cover_url: Optional[str] = None
    status: ProfileStatus = ProfileStatus.ACTIVE
    experience: list[Any] = Field(default_factory=list)
    education: list[Any] = Field(default_factory=list)
    certifications: list[Any] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    social_links: list[Any] = Field(default_factory=list)
    updated_at: Optional[str] = None

    @field_validator(*LIST_FIELDS, mode="before")
    @classmethod
    def lenient_list(cls, value: Any, info: ValidationInfo) -> list:
        items = parse_list_field(value)
        if info.field_name in TEXT_LIST_FIELDS:
            return [item for item in items if isinstance(item, str)]
        return items

    @field_validator("full_name", "headline", "about", "location", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_public(self) -> bool:
        return self.status == ProfileStatus.ACTIVE and bool(self.username)
