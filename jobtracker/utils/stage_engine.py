"""
Stage transition engine for job applications.

Given the round a user has just been invited to (or the outcome they
received), computes the next state of an application:

1. a new, incomplete timeline event is prepended (most recent first)
2. every earlier event is marked completed
3. the status is derived from the round type, unless manually overridden
4. ``interview_date`` mirrors the new event's date
5. the notes get a ``[<round>] `` display tag

All functions here are pure: they validate first, never mutate their input
and return new ``Application`` objects. Persisting the result (and undoing
local state when that fails) is the caller's job.
"""

import re
import uuid
from typing import Any, Callable, Dict, Optional

from jobtracker.models.application import Application, TimelineEvent
from jobtracker.models.errors import create_validation_error
from jobtracker.models.status import ApplicationStatus, RoundType
from jobtracker.utils.validation import (
    get_current_utc_timestamp,
    validate_application_status,
    validate_optional_date,
    validate_round_type,
)

# Round type -> derived status. Rounds missing here keep the previous status.
ROUND_STATUS_MAP = {
    RoundType.OA: ApplicationStatus.ASSESSMENT,
    RoundType.APTITUDE: ApplicationStatus.ASSESSMENT,
    RoundType.PHONE_SCREEN: ApplicationStatus.INTERVIEW,
    RoundType.TECHNICAL: ApplicationStatus.INTERVIEW,
    RoundType.SYSTEM_DESIGN: ApplicationStatus.INTERVIEW,
    RoundType.MANAGERIAL: ApplicationStatus.INTERVIEW,
    RoundType.HR: ApplicationStatus.INTERVIEW,
    RoundType.OFFER: ApplicationStatus.OFFER,
    RoundType.REJECTED: ApplicationStatus.REJECTED,
}

# Rounds that never produce a notes tag
UNTAGGED_ROUNDS = {RoundType.APPLIED, RoundType.CUSTOM, RoundType.NONE}

# Fields a user may edit directly on an existing application
EDITABLE_FIELDS = (
    "company",
    "position",
    "date_applied",
    "salary",
    "location",
    "notes",
    "interview_date",
    "resume_url",
    "resume_name",
)

_ROUND_TAG_PATTERN = re.compile(r"^\s*(?:\[[^\]\n]*\]\s*)+")

IdFactory = Callable[[], str]


def new_id() -> str:
    """Generate a fresh opaque identifier."""
    return uuid.uuid4().hex


def derive_status(round_type: RoundType, previous_status: ApplicationStatus) -> ApplicationStatus:
    """
    Map a round type to the coarse-grained application status.

    Examples:
        >>> derive_status(RoundType.TECHNICAL, ApplicationStatus.APPLIED).value
        'Interview'
        >>> derive_status(RoundType.CUSTOM, ApplicationStatus.ASSESSMENT).value
        'Assessment'
    """
    return ROUND_STATUS_MAP.get(RoundType(round_type), ApplicationStatus(previous_status))


def strip_round_tag(notes: Optional[str]) -> str:
    """
    Remove the leading bracketed round tag(s) from notes.

    Examples:
        >>> strip_round_tag("[Technical]   bring laptop")
        'bring laptop'
        >>> strip_round_tag("no tag [here]")
        'no tag [here]'
    """
    if not notes:
        return ""
    return _ROUND_TAG_PATTERN.sub("", notes, count=1)


def apply_round_tag(notes: Optional[str], round_type: Optional[RoundType]) -> str:
    """
    Replace any existing round tag with one for ``round_type``.

    Custom, None and the initial Applied marker leave the notes untagged.

    Examples:
        >>> apply_round_tag("[OA] prep", RoundType.HR)
        '[HR] prep'
        >>> apply_round_tag(None, RoundType.TECHNICAL)
        '[Technical] '
        >>> apply_round_tag("[OA] prep", RoundType.CUSTOM)
        'prep'
    """
    body = strip_round_tag(notes)
    if round_type is None or RoundType(round_type) in UNTAGGED_ROUNDS:
        return body
    return f"[{RoundType(round_type).value}] {body}"


def editable_notes(application: Application) -> str:
    """Notes as shown to the user for editing, without the machine-written tag."""
    return strip_round_tag(application.notes)


def _validate_custom_name(round_type: RoundType, custom_name: Optional[str]) -> Optional[str]:
    if round_type == RoundType.CUSTOM:
        if custom_name is None or not isinstance(custom_name, str) or not custom_name.strip():
            raise create_validation_error(
                "Invalid custom_name: a label is required for Custom rounds"
            )
        return custom_name.strip()

    if custom_name is not None and custom_name != "":
        raise create_validation_error(
            f"Invalid custom_name: only allowed for Custom rounds, not '{round_type.value}'"
        )
    return None


def apply_transition(
    application: Application,
    round_type: Any,
    date: Optional[str] = None,
    custom_name: Optional[str] = None,
    manual_status: Optional[str] = None,
    id_factory: IdFactory = new_id,
) -> Application:
    """
    Compute the application state after the user reports a new round.

    Args:
        application: Current record (its timeline may be empty)
        round_type: Round the application moves to; ``Applied`` is rejected
        date: When the round takes place; ``None`` means "to be determined"
        custom_name: Label for ``Custom`` rounds (required there, forbidden elsewhere)
        manual_status: Explicit status that overrides the derived one
        id_factory: Generator for the new event id

    Returns:
        A new Application; ``application`` is left untouched

    Raises:
        ToolError: VALIDATION_ERROR for an invalid round, label, date or status.
            Nothing is computed when validation fails.

    Examples:
        >>> app = new_application("u1", "Acme", "Engineer", "2024-05-01")
        >>> moved = apply_transition(app, "Technical", date="2024-06-01")
        >>> moved.status.value, moved.interview_date, moved.notes
        ('Interview', '2024-06-01', '[Technical] ')
        >>> [e.completed for e in moved.timeline]
        [False, True]
    """
    parsed_round = validate_round_type(round_type)
    parsed_date = validate_optional_date(date, "date")
    label = _validate_custom_name(parsed_round, custom_name)

    if manual_status is not None and manual_status != "":
        status = validate_application_status(manual_status)
    else:
        status = derive_status(parsed_round, application.status)

    event = TimelineEvent(
        id=id_factory(),
        type=parsed_round,
        custom_name=label,
        date=parsed_date,
        completed=False,
    )
    history = [past.model_copy(update={"completed": True}) for past in application.timeline]
    notes = apply_round_tag(application.notes, parsed_round)

    return application.model_copy(
        update={
            "timeline": [event, *history],
            "status": status,
            "interview_date": parsed_date,
            "notes": notes or None,
        }
    )


def new_application(
    user_id: str,
    company: str,
    position: str,
    date_applied: str,
    salary: Optional[str] = None,
    location: Optional[str] = None,
    notes: Optional[str] = None,
    interview_date: Optional[str] = None,
    resume_url: Optional[str] = None,
    resume_name: Optional[str] = None,
    id_factory: IdFactory = new_id,
    timestamp: Optional[str] = None,
) -> Application:
    """
    Build a brand-new application: status Applied with one open Applied event.

    The initial event carries the first interview date, if one is already
    known, so that ``interview_date`` mirrors the newest event from the start.
    """
    created_at = timestamp or get_current_utc_timestamp()
    first_event = TimelineEvent(
        id=id_factory(),
        type=RoundType.APPLIED,
        date=interview_date or None,
        completed=False,
    )
    return Application(
        id=id_factory(),
        user_id=user_id,
        company=company,
        position=position,
        status=ApplicationStatus.APPLIED,
        date_applied=date_applied,
        salary=salary,
        location=location,
        notes=notes,
        interview_date=interview_date or None,
        resume_url=resume_url,
        resume_name=resume_name,
        created_at=created_at,
        updated_at=created_at,
        timeline=[first_event],
    )


def edit_application(application: Application, changes: Dict[str, Any]) -> Application:
    """
    Apply user edits to the plain fields of an application.

    Edited notes get the current round tag re-applied. An edited
    ``interview_date`` is copied onto the newest timeline event as well.

    Raises:
        ToolError: VALIDATION_ERROR for unknown fields
        pydantic.ValidationError: If an edited value is invalid
    """
    unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
    if unknown:
        raise create_validation_error(f"Cannot edit fields: {', '.join(unknown)}")

    data = application.model_dump()
    data.update(changes)

    if "notes" in changes:
        data["notes"] = apply_round_tag(changes["notes"], application.current_round) or None

    if "interview_date" in changes and data["timeline"]:
        data["timeline"][0]["date"] = changes["interview_date"] or None

    return Application.model_validate(data)


def override_status(application: Application, status: Any) -> Application:
    """Set the status explicitly, without recording a new round."""
    return application.model_copy(update={"status": validate_application_status(status)})
