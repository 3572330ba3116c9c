"""Shared schema primitives for tool request/response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


def validate_optional_non_empty_str(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate optional string fields that cannot be empty/whitespace."""
    if value is None:
        return None
    if not value.strip():
        raise ValueError(f"Invalid {field_name}: cannot be empty")
    return value


class StrictIgnoreRequest(BaseModel):
    """Request base with strict typing and ignored unknown fields."""

    model_config = ConfigDict(extra="ignore", strict=True)


class StrictResponse(BaseModel):
    """Response/result base with strict typing and forbidden unknown fields."""

    model_config = ConfigDict(extra="forbid")


class ApplicationIdMixin(BaseModel):
    """Reusable application_id field validation."""

    application_id: str

    @field_validator("application_id")
    @classmethod
    def validate_application_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Invalid application_id: cannot be empty")
        return value


class ResumePathMixin(BaseModel):
    """Optional local file to upload as the application's resume."""

    resume_path: Optional[str] = None

    @field_validator("resume_path")
    @classmethod
    def validate_resume_path(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "resume_path")
