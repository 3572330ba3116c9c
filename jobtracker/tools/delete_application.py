"""MCP tool handler for delete_application."""

from typing import Any, Dict

from pydantic import ValidationError

from jobtracker.models.errors import ToolError, create_internal_error
from jobtracker.schemas.applications import DeleteApplicationRequest, DeleteApplicationResponse
from jobtracker.tools.context import ToolContext
from jobtracker.utils.pydantic_error_mapper import map_pydantic_validation_error


def delete_application(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Delete one application; its timeline goes with it.

    Returns:
        ``{"application_id": str, "action": "deleted", "demo": bool}``, or
        NOT_FOUND when the user owns no such application
    """
    try:
        request = DeleteApplicationRequest.model_validate(args)
        session = ctx.require_session()

        ctx.applications.delete_record(session.user_id, request.application_id)

        return DeleteApplicationResponse(
            application_id=request.application_id,
            action="deleted",
            demo=session.is_demo,
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
