"""
MCP tool handler for apply_stage_transition.

Moves an application to a new round: the engine computes the next state and
the handler persists it in one write. If the write fails the stored record
is left as it was and the error is returned.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from jobtracker.models.errors import ToolError, create_internal_error, create_not_found_error
from jobtracker.schemas.applications import (
    ApplicationResultResponse,
    ApplyStageTransitionRequest,
    application_payload,
)
from jobtracker.tools.context import ToolContext
from jobtracker.utils.pydantic_error_mapper import map_pydantic_validation_error
from jobtracker.utils.stage_engine import apply_transition

logger = logging.getLogger(__name__)


def apply_stage_transition(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Record a new round (or outcome) for an application.

    Args:
        args: Dictionary containing:
            - application_id (str, required)
            - round_type (str, required): One of the round types except "Applied"
            - date (str, optional): ISO date of the round, omitted when unknown
            - custom_name (str, optional): Required for "Custom" rounds only
            - manual_status (str, optional): Status that overrides the derived one
        ctx: Tool context with the session and stores

    Returns:
        ``{"application": {...}, "action": "transitioned", "demo": bool, "warnings": []}``
        or ``{"error": {...}}``. VALIDATION_ERROR means nothing was computed
        or written.
    """
    try:
        request = ApplyStageTransitionRequest.model_validate(args)
        session = ctx.require_session()

        current = ctx.applications.get_record(session.user_id, request.application_id)
        if current is None:
            raise create_not_found_error("Application", request.application_id)

        updated = apply_transition(
            current,
            request.round_type,
            date=request.date,
            custom_name=request.custom_name,
            manual_status=request.manual_status,
        )

        try:
            ctx.applications.save(updated)
        except ToolError as e:
            logger.error(
                "Failed to persist transition of application %s to %s: %s",
                current.id,
                request.round_type,
                e.message,
            )
            raise

        stored = ctx.applications.get_record(session.user_id, current.id) or updated
        return ApplicationResultResponse(
            application=application_payload(stored),
            action="transitioned",
            demo=session.is_demo,
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
