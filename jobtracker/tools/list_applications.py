"""MCP tool handler for list_applications."""

from typing import Any, Dict

from pydantic import ValidationError

from jobtracker.models.errors import ToolError, create_internal_error
from jobtracker.schemas.applications import (
    ApplicationStats,
    ListApplicationsRequest,
    ListApplicationsResponse,
    application_payload,
)
from jobtracker.tools.context import ToolContext
from jobtracker.utils.application_filters import filter_applications, sort_applications
from jobtracker.utils.dashboard_stats import compute_stats
from jobtracker.utils.pydantic_error_mapper import map_pydantic_validation_error
from jobtracker.utils.validation import validate_sort_key, validate_status_filter


def list_applications(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    List the user's applications, filtered and sorted.

    Args:
        args: Dictionary containing:
            - query (str, optional): Substring matched against company and position
            - status (str, optional): A status name or "All" (default)
            - sort_by (str, optional): date_applied (default), interview_date or salary
        ctx: Tool context with the session and stores

    Returns:
        ``{"applications": [...], "count": int, "stats": {...}, "demo": bool}``.
        Stats cover every application of the user, not just the filtered ones.
    """
    try:
        request = ListApplicationsRequest.model_validate(args)
        status = validate_status_filter(request.status)
        sort_key = validate_sort_key(request.sort_by)
        session = ctx.require_session()

        records = ctx.applications.list_records(session.user_id)
        visible = sort_applications(
            filter_applications(records, query=request.query, status=status), sort_key
        )

        return ListApplicationsResponse(
            applications=[application_payload(app) for app in visible],
            count=len(visible),
            stats=ApplicationStats(**compute_stats(records)),
            demo=session.is_demo,
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
