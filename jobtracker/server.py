#!/usr/bin/env python3
"""
MCP server entry point for JobTracker.

Exposes the job application tracker to LLM agents over the Model Context
Protocol: creating and listing applications, moving them through interview
rounds, the dashboard summary, and the public portfolio profile.

Usage:
    jobtracker-server
    python -m jobtracker.server

The server runs in stdio mode, the standard transport for MCP servers
invoked by LLM agents.
"""

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from jobtracker.config import get_config
from jobtracker.db.applications_store import ApplicationStore
from jobtracker.db.demo_store import DemoApplicationStore
from jobtracker.db.profiles_store import ProfileStore
from jobtracker.models.session import demo_session
from jobtracker.tools.account import change_password, delete_account, set_profile_visibility
from jobtracker.tools.apply_stage_transition import apply_stage_transition
from jobtracker.tools.context import ToolContext
from jobtracker.tools.create_application import create_application
from jobtracker.tools.delete_application import delete_application
from jobtracker.tools.get_dashboard_summary import get_dashboard_summary
from jobtracker.tools.list_applications import list_applications
from jobtracker.tools.profiles import check_username, get_public_profile, update_profile
from jobtracker.tools.update_application import update_application, update_application_status
from jobtracker.utils.blob_store import LocalBlobStore
from jobtracker.utils.notifier import EmailNotifier
from jobtracker.utils.session_manager import ConfigIdentityProvider, SessionManager

config = get_config()
mcp = FastMCP(
    name=config.server_name,
    instructions=(
        "This server tracks job applications for one user. "
        "\n\n"
        "APPLICATIONS:\n"
        "Use create_application to record a new application (status Applied). "
        "Use list_applications to search, filter by status and sort. "
        "Use apply_stage_transition when the user is invited to a new round or receives an outcome; "
        "it appends to the timeline and derives the status. "
        "Use update_application for plain field edits and update_application_status for a manual status override. "
        "Use get_dashboard_summary for headline numbers, this week's rounds and the board columns."
        "\n\n"
        "PROFILE AND ACCOUNT:\n"
        "Use get_public_profile to view a shared portfolio by username, check_username and update_profile "
        "to manage the caller's profile, set_profile_visibility to hibernate or reactivate it, "
        "change_password to set a new password, "
        "and delete_account to permanently remove all of the caller's data."
    ),
)

_sessions = SessionManager(
    ConfigIdentityProvider(
        user_id=config.user_id,
        email=config.user_email,
        email_verified=config.user_email_verified,
        provider=config.auth_provider,
    )
)
_demo_store: Optional[DemoApplicationStore] = None


def _get_demo_store() -> DemoApplicationStore:
    global _demo_store
    if _demo_store is None:
        _demo_store = DemoApplicationStore()
    return _demo_store


def build_context() -> ToolContext:
    """
    Build the tool context for one call from the current session.

    In demo mode without a signed-in user, application tools run against the
    in-memory demo dataset.
    """
    session = _sessions.get_current_session()
    applications = ApplicationStore(config.db_path)
    if session is None and config.demo_mode:
        session = demo_session()
        applications = _get_demo_store()

    return ToolContext(
        session=session,
        applications=applications,
        profiles=ProfileStore(config.db_path),
        blobs=LocalBlobStore(config.blob_dir, config.public_base_url),
        notifier=EmailNotifier(
            config.resend_api_key,
            sender=config.email_from,
            api_url=config.email_api_url,
            timeout=config.email_timeout_seconds,
        ),
        sessions=_sessions,
        public_base_url=config.public_base_url,
    )


def _args(**kwargs: Any) -> Dict[str, Any]:
    """Keep only the parameters the caller actually provided."""
    return {key: value for key, value in kwargs.items() if value is not None}


@mcp.tool(
    name="create_application",
    description=(
        "Record a new job application with status Applied and a one-event timeline. "
        "Optionally attaches a local resume file; a failed upload is reported as a warning."
    ),
)
def create_application_tool(
    company: str,
    position: str,
    date_applied: str | None = None,
    salary: str | None = None,
    location: str | None = None,
    notes: str | None = None,
    interview_date: str | None = None,
    resume_path: str | None = None,
) -> dict:
    """
    Create an application.

    Args:
        company: Company name (required, non-empty).
        position: Role title (required, non-empty).
        date_applied: ISO date; defaults to today.
        salary: Free-text salary, e.g. "$120k".
        location: Free-text location.
        notes: Free-text notes.
        interview_date: ISO date of the first scheduled round, if known.
        resume_path: Local path of a resume file to attach.

    Returns:
        {"application": {...}, "action": "created", "demo": bool, "warnings": [...]}
        or {"error": {"code", "message", "retryable"}}
    """
    args = _args(
        company=company,
        position=position,
        date_applied=date_applied,
        salary=salary,
        location=location,
        notes=notes,
        interview_date=interview_date,
        resume_path=resume_path,
    )
    return create_application(args, build_context())


@mcp.tool(
    name="list_applications",
    description=(
        "List the user's applications. Filter by a case-insensitive text query on company/position "
        "and by status (All, Saved, Applied, Assessment, Interview, Offer, Rejected); "
        "sort by date_applied, interview_date or salary (descending)."
    ),
)
def list_applications_tool(
    query: str | None = None,
    status: str | None = None,
    sort_by: str | None = None,
) -> dict:
    """
    List applications.

    Returns:
        {"applications": [...], "count": int, "stats": {...}, "demo": bool}
    """
    return list_applications(_args(query=query, status=status, sort_by=sort_by), build_context())


@mcp.tool(
    name="apply_stage_transition",
    description=(
        "Move an application to a new interview round or outcome. Prepends a timeline event, "
        "marks earlier events completed, derives the status from the round type (unless "
        "manual_status is given) and mirrors the round date into interview_date. "
        "Round types: None, OA, Aptitude, Phone Screen, Technical, System Design, Managerial, "
        "HR, Offer, Rejected, Custom (requires custom_name)."
    ),
)
def apply_stage_transition_tool(
    application_id: str,
    round_type: str,
    date: str | None = None,
    custom_name: str | None = None,
    manual_status: str | None = None,
) -> dict:
    """
    Record a new round for an application.

    Args:
        application_id: Application to move (required).
        round_type: New round type (required).
        date: ISO date of the round; omit when not yet scheduled.
        custom_name: Label for Custom rounds only.
        manual_status: Status overriding the derived one.

    Returns:
        {"application": {...}, "action": "transitioned", "demo": bool, "warnings": []}
        or {"error": {...}}
    """
    args = _args(
        application_id=application_id,
        round_type=round_type,
        date=date,
        custom_name=custom_name,
        manual_status=manual_status,
    )
    return apply_stage_transition(args, build_context())


@mcp.tool(
    name="update_application",
    description=(
        "Edit fields of an application (company, position, dates, salary, location, notes) "
        "and optionally replace its resume. The timeline is not changed."
    ),
)
def update_application_tool(
    application_id: str,
    company: str | None = None,
    position: str | None = None,
    date_applied: str | None = None,
    salary: str | None = None,
    location: str | None = None,
    notes: str | None = None,
    interview_date: str | None = None,
    resume_path: str | None = None,
) -> dict:
    """Edit an application; only the provided fields change."""
    args = _args(
        application_id=application_id,
        company=company,
        position=position,
        date_applied=date_applied,
        salary=salary,
        location=location,
        notes=notes,
        interview_date=interview_date,
        resume_path=resume_path,
    )
    return update_application(args, build_context())


@mcp.tool(
    name="update_application_status",
    description="Set an application's status directly without recording a new round.",
)
def update_application_status_tool(application_id: str, status: str) -> dict:
    return update_application_status(
        {"application_id": application_id, "status": status}, build_context()
    )


@mcp.tool(
    name="delete_application",
    description="Permanently delete an application and its timeline.",
)
def delete_application_tool(application_id: str) -> dict:
    return delete_application({"application_id": application_id}, build_context())


@mcp.tool(
    name="get_dashboard_summary",
    description=(
        "Headline stats (total, interviews, offers, response rate), rounds scheduled in the "
        "next seven days and applications grouped into board columns."
    ),
)
def get_dashboard_summary_tool(today: str | None = None) -> dict:
    return get_dashboard_summary(_args(today=today), build_context())


@mcp.tool(
    name="get_public_profile",
    description=(
        "Look up a public portfolio profile by username. "
        "Returns found=false for unknown or hibernated profiles."
    ),
)
def get_public_profile_tool(username: str) -> dict:
    return get_public_profile({"username": username}, build_context())


@mcp.tool(
    name="check_username",
    description=(
        "Normalize a wanted profile username and report whether it is available, "
        "with suggestions when it is taken."
    ),
)
def check_username_tool(username: str) -> dict:
    return check_username({"username": username}, build_context())


@mcp.tool(
    name="update_profile",
    description=(
        "Create or edit the caller's public profile: username, name, headline, about, location, "
        "experience, education, certifications, skills, interests, social links, and avatar/cover "
        "images from local files."
    ),
)
def update_profile_tool(
    username: str | None = None,
    full_name: str | None = None,
    headline: str | None = None,
    about: str | None = None,
    location: str | None = None,
    experience: list[dict] | None = None,
    education: list[dict] | None = None,
    certifications: list[dict] | None = None,
    skills: list[str] | None = None,
    interests: list[str] | None = None,
    social_links: list[dict] | None = None,
    avatar_path: str | None = None,
    cover_path: str | None = None,
) -> dict:
    """Edit the caller's profile; only the provided fields change."""
    args = _args(
        username=username,
        full_name=full_name,
        headline=headline,
        about=about,
        location=location,
        experience=experience,
        education=education,
        certifications=certifications,
        skills=skills,
        interests=interests,
        social_links=social_links,
        avatar_path=avatar_path,
        cover_path=cover_path,
    )
    return update_profile(args, build_context())


@mcp.tool(
    name="set_profile_visibility",
    description=(
        "Hibernate (hide, email the user and sign out) or reactivate the caller's public profile."
    ),
)
def set_profile_visibility_tool(hibernate: bool) -> dict:
    return set_profile_visibility({"hibernate": hibernate}, build_context())


@mcp.tool(
    name="change_password",
    description=(
        "Change the caller's password (at least 6 characters) and email a security alert."
    ),
)
def change_password_tool(new_password: str) -> dict:
    return change_password({"new_password": new_password}, build_context())


@mcp.tool(
    name="delete_account",
    description=(
        "Permanently delete the caller's applications, profile and stored files, then sign out. "
        "Requires confirm='DELETE'."
    ),
)
def delete_account_tool(confirm: str) -> dict:
    return delete_account({"confirm": confirm}, build_context())


def main():
    """
    Main entry point for the MCP server.

    Runs the server in stdio mode, which is the standard transport
    for MCP servers that are invoked by LLM agents.
    """
    config.setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("Starting JobTracker MCP Server")
    logger.info(f"Server name: {config.server_name}")
    logger.info(f"Database path: {config.db_path}")
    logger.info(f"Blob directory: {config.blob_dir}")
    if config.demo_mode:
        logger.info("Demo mode enabled")

    for warning in config.validate():
        logger.warning(warning)

    logger.info("Server starting in stdio mode")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
