"""
MCP tool handlers for account security: password change, hibernate/reactivate
and delete.

All three notify the user by email. The notifier is fire-and-forget: a failed
send is logged and reported as ``email_sent=False`` but never blocks the
operation.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from jobtracker.models.errors import ToolError, create_internal_error
from jobtracker.models.profile import Profile
from jobtracker.models.status import NotificationKind, ProfileStatus
from jobtracker.schemas.profiles import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    DeleteAccountRequest,
    DeleteAccountResponse,
    SetProfileVisibilityRequest,
    VisibilityResponse,
)
from jobtracker.tools.context import ToolContext
from jobtracker.utils.blob_store import BUCKETS
from jobtracker.utils.pydantic_error_mapper import map_pydantic_validation_error

logger = logging.getLogger(__name__)


def set_profile_visibility(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Hibernate or reactivate the caller's public profile.

    Hibernating hides the profile, emails the user and signs them out.
    Reactivating only flips the status back.

    Args:
        args: ``{"hibernate": bool}``
        ctx: Tool context with the session and stores
    """
    try:
        request = SetProfileVisibilityRequest.model_validate(args)
        session = ctx.require_account()

        status = ProfileStatus.HIBERNATED if request.hibernate else ProfileStatus.ACTIVE
        if ctx.profiles.get_by_id(session.user_id) is None:
            ctx.profiles.upsert(Profile(id=session.user_id, status=status))
        else:
            ctx.profiles.set_status(session.user_id, status)
        logger.info("Profile of user %s set to %s", session.user_id, status.value)

        email_sent = False
        signed_out = False
        if request.hibernate:
            email_sent = ctx.notifier.send(session.email, NotificationKind.HIBERNATE)
            ctx.sign_out()
            signed_out = True

        return VisibilityResponse(
            status=status.value, email_sent=email_sent, signed_out=signed_out
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def delete_account(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Permanently delete the caller's data and sign them out.

    Order: confirmation email, stored files in every bucket, applications,
    profile, then sign-out. A storage failure stops before any record is
    deleted.

    Args:
        args: ``{"confirm": "DELETE"}``
        ctx: Tool context with the session and stores
    """
    try:
        DeleteAccountRequest.model_validate(args)
        session = ctx.require_account()
        user_id = session.user_id

        email_sent = ctx.notifier.send(session.email, NotificationKind.DELETE_ACCOUNT)

        removed_files = sum(ctx.blobs.remove_prefix(bucket, user_id) for bucket in BUCKETS)
        deleted_applications = ctx.applications.delete_all_for_user(user_id)
        profile_deleted = ctx.profiles.delete(user_id)
        logger.info(
            "Deleted account data of user %s: %d applications, %d files",
            user_id,
            deleted_applications,
            removed_files,
        )

        ctx.sign_out()

        return DeleteAccountResponse(
            deleted_applications=deleted_applications,
            removed_files=removed_files,
            profile_deleted=profile_deleted,
            email_sent=email_sent,
            signed_out=True,
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def change_password(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Change the caller's password and send the security alert email.

    The password must be at least six characters. It is handed to the
    identity provider and never stored or logged here.

    Args:
        args: ``{"new_password": str}``
        ctx: Tool context with the session and identity provider

    Returns:
        ``{"updated": true, "email_sent": bool}`` or ``{"error": {...}}``
    """
    try:
        request = ChangePasswordRequest.model_validate(args)
        session = ctx.require_account()

        ctx.update_password(session, request.new_password)
        email_sent = ctx.notifier.send(session.email, NotificationKind.PASSWORD_CHANGE)

        return ChangePasswordResponse(updated=True, email_sent=email_sent).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
