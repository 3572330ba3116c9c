"""
Application and timeline record types.

An application embeds its own timeline (most recent event first), so a
record and its history are always written and deleted together.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from jobtracker.models.status import ApplicationStatus, RoundType
from jobtracker.utils.validation import is_iso_date


def _blank_to_none(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: (None if v == "" else v) for k, v in data.items()}
    return data


class TimelineEvent(BaseModel):
    """One round in an application's history."""

    model_config = ConfigDict(extra="ignore")

    id: str
    type: RoundType
    custom_name: Optional[str] = None
    date: Optional[str] = None
    notes: Optional[str] = None
    completed: bool = False

    @model_validator(mode="before")
    @classmethod
    def empty_strings_to_none(cls, data: Any) -> Any:
        return _blank_to_none(data)

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_iso_date(value):
            raise ValueError(f"Invalid date: '{value}' is not an ISO 8601 date")
        return value

    @model_validator(mode="after")
    def check_custom_name(self) -> "TimelineEvent":
        if self.type == RoundType.CUSTOM:
            if self.custom_name is None or not self.custom_name.strip():
                raise ValueError("Custom rounds require a non-empty custom_name")
        elif self.custom_name is not None:
            raise ValueError(f"custom_name is only allowed for Custom rounds, not '{self.type.value}'")
        return self

    @property
    def label(self) -> str:
        """Display label: the custom name for Custom rounds, else the round type."""
        if self.type == RoundType.CUSTOM and self.custom_name:
            return self.custom_name
        return self.type.value


class Application(BaseModel):
    """A tracked job application owned by one user.

    ``current_round`` is derived from the newest timeline event and is the
    only place the round type is read from; the bracketed tag in ``notes``
    is a display annotation.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    company: str
    position: str
    status: ApplicationStatus = ApplicationStatus.APPLIED
    date_applied: str
    salary: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    interview_date: Optional[str] = None
    resume_url: Optional[str] = None
    resume_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    timeline: list[TimelineEvent] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def empty_strings_to_none(cls, data: Any) -> Any:
        return _blank_to_none(data)

    @field_validator("company", "position")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("cannot be empty")
        return value.strip()

    @field_validator("date_applied", "interview_date")
    @classmethod
    def validate_dates(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_iso_date(value):
            raise ValueError(f"'{value}' is not an ISO 8601 date")
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def current_round(self) -> Optional[RoundType]:
        if not self.timeline:
            return None
        return self.timeline[0].type
