"""
MCP tool handler for create_application.

Creates a new application for the signed-in user (or the demo user) with
status Applied and a single open Applied event on its timeline.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from jobtracker.models.errors import ToolError, create_internal_error
from jobtracker.schemas.applications import (
    ApplicationResultResponse,
    CreateApplicationRequest,
    application_payload,
)
from jobtracker.tools.attachments import upload_resume
from jobtracker.tools.context import ToolContext
from jobtracker.utils.pydantic_error_mapper import map_pydantic_validation_error
from jobtracker.utils.stage_engine import new_application
from jobtracker.utils.validation import validate_optional_date


def create_application(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Create an application.

    The resume (if any) is uploaded before the record is written. A failed
    upload does not block creation: the record is saved without a resume
    reference and a warning is returned.

    Args:
        args: Dictionary containing:
            - company (str, required)
            - position (str, required)
            - date_applied (str, optional): ISO date, defaults to today
            - salary, location, notes (str, optional)
            - interview_date (str, optional): ISO date of the first round
            - resume_path (str, optional): Local file to attach
        ctx: Tool context with the session and stores

    Returns:
        ``{"application": {...}, "action": "created", "demo": bool, "warnings": [...]}``
        or ``{"error": {"code", "message", "retryable"}}``
    """
    try:
        request = CreateApplicationRequest.model_validate(args)
        session = ctx.require_session()

        date_applied = validate_optional_date(request.date_applied, "date_applied")
        interview_date = validate_optional_date(request.interview_date, "interview_date")

        warnings: List[str] = []
        resume: Dict[str, Any] = {}
        if request.resume_path:
            resume = upload_resume(ctx, session, request.resume_path, warnings) or {}

        application = new_application(
            user_id=session.user_id,
            company=request.company,
            position=request.position,
            date_applied=date_applied or ctx.today().isoformat(),
            salary=request.salary,
            location=request.location,
            notes=request.notes,
            interview_date=interview_date,
            resume_url=resume.get("resume_url"),
            resume_name=resume.get("resume_name"),
        )
        stored = ctx.applications.insert_record(application)

        return ApplicationResultResponse(
            application=application_payload(stored),
            action="created",
            demo=session.is_demo,
            warnings=warnings,
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
