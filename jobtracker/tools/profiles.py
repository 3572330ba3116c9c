"""
MCP tool handlers for the public portfolio profile.

get_public_profile is readable without a session; update_profile needs a
real (non-demo) account. check_username works either way and ignores the
caller's own current username when checking availability.
"""

import random
from typing import Any, Dict, Optional

from pydantic import ValidationError

from jobtracker.models.errors import ToolError, create_internal_error, create_validation_error
from jobtracker.models.profile import Profile
from jobtracker.schemas.profiles import (
    CheckUsernameRequest,
    GetPublicProfileRequest,
    ProfileResultResponse,
    PublicProfileResponse,
    UpdateProfileRequest,
    UsernameCheckResponse,
)
from jobtracker.tools.attachments import upload_profile_media
from jobtracker.tools.context import ToolContext
from jobtracker.utils.pydantic_error_mapper import map_pydantic_validation_error
from jobtracker.utils.username import normalize_username, profile_url, suggest_usernames
from jobtracker.utils.validation import MIN_USERNAME_LENGTH


def _public_payload(profile: Profile) -> Dict[str, Any]:
    return profile.model_dump(mode="json", exclude={"id", "status", "updated_at"})


def get_public_profile(args: Dict[str, Any], ctx: ToolContext) -> Dict[str, Any]:
    """
    Look up a public profile by username.

    Unknown usernames and hibernated profiles both answer ``{"found": false}``.
    """
    try:
        request = GetPublicProfileRequest.model_validate(args)
        username = normalize_username(request.username)

        profile = ctx.profiles.get_by_username(username) if username else None
        if profile is None or not profile.is_public:
            return PublicProfileResponse(found=False).model_dump()

        return PublicProfileResponse(
            found=True,
            profile=_public_payload(profile),
            url=profile_url(ctx.public_base_url, profile.username),
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def check_username(
    args: Dict[str, Any], ctx: ToolContext, rng: Optional[random.Random] = None
) -> Dict[str, Any]:
    """
    Normalize a wanted username and report whether it is free.

    ``available`` is None while the normalized name is shorter than three
    characters. When it is taken, free variations are suggested.
    """
    try:
        request = CheckUsernameRequest.model_validate(args)
        username = normalize_username(request.username)
        if len(username) < MIN_USERNAME_LENGTH:
            return UsernameCheckResponse(username=username, available=None).model_dump()

        owner_id = ctx.session.user_id if ctx.session and not ctx.session.is_demo else None

        def is_taken(name: str) -> bool:
            return ctx.profiles.username_taken(name, exclude_id=owner_id)

        if not is_taken(username):
            return UsernameCheckResponse(username=username, available=True).model_dump()

        return UsernameCheckResponse(
            username=username,
            available=False,
            suggestions=suggest_usernames(username, is_taken, rng),
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def update_profile(
    args: Dict[str, Any], ctx: ToolContext, rng: Optional[random.Random] = None
) -> Dict[str, Any]:
    """
    Create or edit the caller's profile.

    Only fields present in ``args`` change. A new username is normalized and
    must be at least three characters and not held by anyone else; on a
    conflict the error message lists free alternatives. Avatar and cover
    files are uploaded before the profile is written.

    Returns:
        ``{"profile": {...}, "url": str | None, "action": "updated"}``
    """
    try:
        request = UpdateProfileRequest.model_validate(args)
        session = ctx.require_account()

        current = ctx.profiles.get_by_id(session.user_id) or Profile(id=session.user_id)
        changes = request.changes()

        if "username" in changes:
            username = normalize_username(changes["username"])
            if len(username) < MIN_USERNAME_LENGTH:
                raise create_validation_error(
                    f"Invalid username: must be at least {MIN_USERNAME_LENGTH} characters "
                    "of a-z, 0-9, '-' or '_'"
                )

            def is_taken(name: str) -> bool:
                return ctx.profiles.username_taken(name, exclude_id=session.user_id)

            if is_taken(username):
                suggestions = suggest_usernames(username, is_taken, rng)
                hint = f" Try: {', '.join(suggestions)}" if suggestions else ""
                raise create_validation_error(f"Username '{username}' is already taken.{hint}")
            changes["username"] = username

        if request.avatar_path:
            changes["avatar_url"] = upload_profile_media(ctx, session, "avatar", request.avatar_path)
        if request.cover_path:
            changes["cover_url"] = upload_profile_media(ctx, session, "cover", request.cover_path)

        updated = Profile.model_validate({**current.model_dump(), **changes})
        stored = ctx.profiles.upsert(updated)

        return ProfileResultResponse(
            profile=stored.model_dump(mode="json"),
            url=profile_url(ctx.public_base_url, stored.username) if stored.username else None,
            action="updated",
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
