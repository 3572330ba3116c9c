"""Pydantic schemas for the profile and account tools."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import field_validator

from jobtracker.schemas.common import (
    StrictIgnoreRequest,
    StrictResponse,
    validate_optional_non_empty_str,
)
from jobtracker.utils.validation import MIN_PASSWORD_LENGTH

DELETE_CONFIRMATION = "DELETE"


class GetPublicProfileRequest(StrictIgnoreRequest):
    """Request schema for get_public_profile."""

    username: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Invalid username: cannot be empty")
        return value


class CheckUsernameRequest(StrictIgnoreRequest):
    """Request schema for check_username."""

    username: str


class UpdateProfileRequest(StrictIgnoreRequest):
    """Request schema for update_profile. Only fields that are sent are changed."""

    username: Optional[str] = None
    full_name: Optional[str] = None
    headline: Optional[str] = None
    about: Optional[str] = None
    location: Optional[str] = None
    experience: Optional[list[Any]] = None
    education: Optional[list[Any]] = None
    certifications: Optional[list[Any]] = None
    skills: Optional[list[str]] = None
    interests: Optional[list[str]] = None
    social_links: Optional[list[Any]] = None
    avatar_path: Optional[str] = None
    cover_path: Optional[str] = None

    @field_validator("avatar_path", "cover_path")
    @classmethod
    def validate_media_path(cls, value: Optional[str], info) -> Optional[str]:
        return validate_optional_non_empty_str(value, info.field_name)

    def changes(self) -> dict[str, Any]:
        """Profile fields explicitly present in the request (uploads excluded)."""
        fields = self.model_fields_set - {"avatar_path", "cover_path"}
        return {field: getattr(self, field) for field in sorted(fields)}


class SetProfileVisibilityRequest(StrictIgnoreRequest):
    """Request schema for set_profile_visibility."""

    hibernate: bool


class DeleteAccountRequest(StrictIgnoreRequest):
    """Request schema for delete_account; ``confirm`` must be the literal DELETE."""

    confirm: str

    @field_validator("confirm")
    @classmethod
    def validate_confirm(cls, value: str) -> str:
        if value != DELETE_CONFIRMATION:
            raise ValueError(f"Invalid confirm: type '{DELETE_CONFIRMATION}' to delete the account")
        return value


class ChangePasswordRequest(StrictIgnoreRequest):
    """Request schema for change_password."""

    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Invalid new_password: must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        return value


class UsernameCheckResponse(StrictResponse):
    """Response schema for check_username."""

    username: str
    available: Optional[bool] = None
    suggestions: list[str] = []


class PublicProfileResponse(StrictResponse):
    """Response schema for get_public_profile; ``found=False`` is not an error."""

    found: bool
    profile: Optional[dict[str, Any]] = None
    url: Optional[str] = None


class ProfileResultResponse(StrictResponse):
    """Response schema for update_profile."""

    profile: dict[str, Any]
    url: Optional[str] = None
    action: str


class VisibilityResponse(StrictResponse):
    status: str
    email_sent: bool
    signed_out: bool


class DeleteAccountResponse(StrictResponse):
    deleted_applications: int
    removed_files: int
    profile_deleted: bool
    email_sent: bool
    signed_out: bool


class ChangePasswordResponse(StrictResponse):
    updated: bool
    email_sent: bool
