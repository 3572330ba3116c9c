"""
Input validation utilities shared by JobTracker tools.

Validators raise ``ToolError`` with ``VALIDATION_ERROR`` so that handlers can
reject a request before touching any store.
"""

from datetime import datetime, timezone
from typing import Optional

from jobtracker.models.errors import create_validation_error
from jobtracker.models.status import ApplicationStatus, RoundType

# Status filter value that disables filtering
ALL_STATUSES = "All"

# Sort keys accepted by list views, all descending
SORT_KEYS = ("date_applied", "interview_date", "salary")
DEFAULT_SORT_KEY = "date_applied"

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def is_iso_date(value: str) -> bool:
    """
    Check whether ``value`` is an ISO 8601 date or date-time string.

    Accepts ``2024-06-01``, ``2024-06-01T10:30`` and ``2024-06-01T10:30:00.000Z``.
    """
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def validate_optional_date(value, field_name: str) -> Optional[str]:
    """
    Validate an optional ISO date parameter.

    ``None`` and the empty string both mean "to be determined".

    Raises:
        ToolError: If the value is present but not an ISO 8601 date
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise create_validation_error(
            f"Invalid {field_name} type: expected string, got {type(value).__name__}"
        )
    if not is_iso_date(value):
        raise create_validation_error(f"Invalid {field_name}: '{value}' is not an ISO 8601 date")
    return value.strip()


def validate_application_id(application_id) -> str:
    """
    Validate an application identifier.

    Args:
        application_id: Opaque identifier assigned at creation

    Returns:
        The identifier

    Raises:
        ToolError: If the identifier is missing, not a string or blank
    """
    if application_id is None:
        raise create_validation_error("Invalid application id: cannot be null")

    if not isinstance(application_id, str):
        raise create_validation_error(
            f"Invalid application id type: expected string, got {type(application_id).__name__}"
        )

    if not application_id.strip():
        raise create_validation_error("Invalid application id: cannot be empty")

    return application_id


def validate_application_status(status) -> ApplicationStatus:
    """
    Validate a status value used as a manual override.

    Raises:
        ToolError: If status is not one of the ApplicationStatus values
    """
    if status is None:
        raise create_validation_error("Invalid status: cannot be null")

    if not isinstance(status, str):
        raise create_validation_error(
            f"Invalid status type: expected string, got {type(status).__name__}"
        )

    try:
        return ApplicationStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise create_validation_error(
            f"Invalid status value: '{status}'. Allowed values are: {allowed}"
        )


def validate_status_filter(status: Optional[str]) -> str:
    """Validate a list filter status; ``None`` means ``All``."""
    if status is None or status == ALL_STATUSES:
        return ALL_STATUSES
    return validate_application_status(status).value


def validate_round_type(round_type) -> RoundType:
    """
    Validate the round type chosen for a stage transition.

    ``Applied`` is reserved for the first event of a new application.
    """
    if round_type is None:
        raise create_validation_error("Invalid round type: cannot be null")

    try:
        parsed = RoundType(round_type)
    except ValueError:
        allowed = ", ".join(r.value for r in RoundType if r != RoundType.APPLIED)
        raise create_validation_error(
            f"Invalid round type: '{round_type}'. Allowed values are: {allowed}"
        )

    if parsed == RoundType.APPLIED:
        raise create_validation_error(
            "Invalid round type: 'Applied' is reserved for the initial timeline event"
        )
    return parsed


def validate_sort_key(sort_by: Optional[str]) -> str:
    """Validate a list sort key; ``None`` selects ``date_applied``."""
    if sort_by is None:
        return DEFAULT_SORT_KEY
    if sort_by not in SORT_KEYS:
        allowed = ", ".join(SORT_KEYS)
        raise create_validation_error(
            f"Invalid sort_by: '{sort_by}'. Allowed values are: {allowed}"
        )
    return sort_by


def get_current_utc_timestamp() -> str:
    """
    Generate a UTC timestamp in ISO 8601 format with millisecond precision.

    Example: 2026-02-04T03:47:36.966Z
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or date-time into an aware UTC datetime.

    Date-only and naive values are taken as UTC. Returns None for empty or
    unparseable input.

    Examples:
        >>> parse_iso_datetime("2024-06-01T23:00:00-05:00").isoformat()
        '2024-06-02T04:00:00+00:00'
        >>> parse_iso_datetime("2024-06-01").isoformat()
        '2024-06-01T00:00:00+00:00'
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
