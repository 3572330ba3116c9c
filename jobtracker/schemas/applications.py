"""Pydantic schemas for the application tools."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import field_validator

from jobtracker.models.application import Application
from jobtracker.schemas.common import (
    ApplicationIdMixin,
    ResumePathMixin,
    StrictIgnoreRequest,
    StrictResponse,
)


class CreateApplicationRequest(ResumePathMixin, StrictIgnoreRequest):
    """Request schema for create_application."""

    company: str
    position: str
    date_applied: Optional[str] = None
    salary: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    interview_date: Optional[str] = None

    @field_validator("company", "position")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("cannot be empty")
        return value


class ListApplicationsRequest(StrictIgnoreRequest):
    """Request schema for list_applications."""

    query: str = ""
    status: Optional[str] = None
    sort_by: Optional[str] = None


class ApplyStageTransitionRequest(ApplicationIdMixin, StrictIgnoreRequest):
    """Request schema for apply_stage_transition."""

    round_type: str
    date: Optional[str] = None
    custom_name: Optional[str] = None
    manual_status: Optional[str] = None


class UpdateApplicationRequest(ApplicationIdMixin, ResumePathMixin, StrictIgnoreRequest):
    """Request schema for update_application. Only fields that are sent are changed."""

    company: Optional[str] = None
    position: Optional[str] = None
    date_applied: Optional[str] = None
    salary: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    interview_date: Optional[str] = None

    def changes(self) -> dict[str, Any]:
        """Editable fields explicitly present in the request."""
        editable = self.model_fields_set - {"application_id", "resume_path"}
        return {field: getattr(self, field) for field in sorted(editable)}


class UpdateApplicationStatusRequest(ApplicationIdMixin, StrictIgnoreRequest):
    """Request schema for update_application_status."""

    status: str


class DeleteApplicationRequest(ApplicationIdMixin, StrictIgnoreRequest):
    """Request schema for delete_application."""


class DashboardSummaryRequest(StrictIgnoreRequest):
    """Request schema for get_dashboard_summary."""

    today: Optional[str] = None


class ApplicationStats(StrictResponse):
    total: int
    interviews: int
    offers: int
    response_rate: int


class ListApplicationsResponse(StrictResponse):
    """Success response schema for list_applications."""

    applications: list[dict[str, Any]]
    count: int
    stats: ApplicationStats
    demo: bool


class ApplicationResultResponse(StrictResponse):
    """Success response for tools returning one application."""

    application: dict[str, Any]
    action: str
    demo: bool
    warnings: list[str] = []


class DashboardSummaryResponse(StrictResponse):
    """Success response schema for get_dashboard_summary."""

    today: str
    stats: ApplicationStats
    upcoming: list[dict[str, Any]]
    board: dict[str, list[dict[str, Any]]]
    demo: bool


class DeleteApplicationResponse(StrictResponse):
    application_id: str
    action: str
    demo: bool


def application_payload(application: Application) -> dict[str, Any]:
    """JSON-ready dict of an application, including ``current_round``."""
    return application.model_dump(mode="json")
