"""
MCP tool handler for get_dashboard_summary.

Combines the headline numbers, the agenda for the coming week and the
board columns into one payload.
"""

from datetime import date
from typing import Any, Dict

from pydantic import ValidationError

from jobtracker.models.errors import ToolError, create_internal_error
from jobtracker.schemas.applications import (
    ApplicationStats,
    DashboardSummaryRequest,
    DashboardSummaryResponse,
    application_payload,
)
from jobtracker.tools.context import ToolContext
from jobtracker.utils.application_filters import group_by_status
from jobtracker.utils.dashboard_stats import compute_stats, upcoming_events
from jobtracker.utils.pydantic_error_mapper import map_pydantic_validation_error
from jobtracker.utils.validation import validate_optional_date


def get_dashboard_summary(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Summarize the user's applications.

    Args:
        args: Dictionary containing:
            - today (str, optional): ISO date used as "today"; defaults to the clock
        ctx: Tool context with the session and stores

    Returns:
        ``{"today", "stats", "upcoming", "board", "demo"}`` where ``upcoming``
        lists applications with a round in the next seven days and ``board``
        maps Applied/Interview/Offer/Rejected to their applications
    """
    try:
        request = DashboardSummaryRequest.model_validate(args)
        today_text = validate_optional_date(request.today, "today")
        today = date.fromisoformat(today_text[:10]) if today_text else ctx.today()
        session = ctx.require_session()

        records = ctx.applications.list_records(session.user_id)
        board = group_by_status(records)

        return DashboardSummaryResponse(
            today=today.isoformat(),
            stats=ApplicationStats(**compute_stats(records)),
            upcoming=[application_payload(app) for app in upcoming_events(records, today)],
            board={
                status: [application_payload(app) for app in column]
                for status, column in board.items()
            },
            demo=session.is_demo,
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
