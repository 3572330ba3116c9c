"""
MCP tool handlers for update_application and update_application_status.

Plain edits never touch the timeline except to keep the newest event's date
in step with ``interview_date``. Status overrides leave the timeline alone.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from jobtracker.models.application import Application
from jobtracker.models.errors import ToolError, create_internal_error, create_not_found_error
from jobtracker.models.session import Session
from jobtracker.schemas.applications import (
    ApplicationResultResponse,
    UpdateApplicationRequest,
    UpdateApplicationStatusRequest,
    application_payload,
)
from jobtracker.tools.attachments import upload_resume
from jobtracker.tools.context import ToolContext
from jobtracker.utils.pydantic_error_mapper import map_pydantic_validation_error
from jobtracker.utils.stage_engine import edit_application, override_status


def _load(ctx: ToolContext, session: Session, application_id: str) -> Application:
    current = ctx.applications.get_record(session.user_id, application_id)
    if current is None:
        raise create_not_found_error("Application", application_id)
    return current


def _result(ctx: ToolContext, session: Session, updated: Application, action: str,
            warnings: List[str]) -> Dict[str, Any]:
    stored = ctx.applications.get_record(session.user_id, updated.id) or updated
    return ApplicationResultResponse(
        application=application_payload(stored),
        action=action,
        demo=session.is_demo,
        warnings=warnings,
    ).model_dump()


def update_application(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Edit the plain fields of an application.

    Only fields present in ``args`` change. Edited notes get the current
    round tag re-applied. A new ``resume_path`` is uploaded first; if that
    fails the previous resume reference is kept and a warning is returned.

    Args:
        args: ``application_id`` plus any of company, position, date_applied,
            salary, location, notes, interview_date, resume_path
        ctx: Tool context with the session and stores

    Returns:
        ``{"application": {...}, "action": "updated", "demo": bool, "warnings": [...]}``
        or ``{"error": {...}}``
    """
    try:
        request = UpdateApplicationRequest.model_validate(args)
        session = ctx.require_session()
        current = _load(ctx, session, request.application_id)

        changes = request.changes()
        warnings: List[str] = []
        if request.resume_path:
            resume = upload_resume(ctx, session, request.resume_path, warnings)
            if resume:
                changes.update(resume)

        updated = edit_application(current, changes)
        ctx.applications.save(updated)
        return _result(ctx, session, updated, "updated", warnings)

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def update_application_status(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Set an application's status directly, e.g. when dragging it across the board.

    Args:
        args: ``application_id`` and ``status`` (Saved, Applied, Assessment,
            Interview, Offer or Rejected)
        ctx: Tool context with the session and stores
    """
    try:
        request = UpdateApplicationStatusRequest.model_validate(args)
        session = ctx.require_session()
        current = _load(ctx, session, request.application_id)

        updated = override_status(current, request.status)
        ctx.applications.update_record(session.user_id, current.id, {"status": updated.status})
        return _result(ctx, session, updated, "status_updated", [])

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
