"""
Centralized, type-safe status definitions for JobTracker.

This module is the single source of truth for the enumerations shared by
the stage engine, the stores and the tools:

- ``ApplicationStatus``: the coarse-grained bucket stored on each application.
- ``RoundType``: the type of one interview round recorded in the timeline.
- ``ProfileStatus``: public visibility of a portfolio profile.
- ``NotificationKind``: transactional email templates.

All Enums inherit from ``(str, Enum)`` so that members compare equal to plain
strings and serialize naturally to JSON at tool boundaries.
"""

from enum import Enum


class ApplicationStatus(str, Enum):
    """Coarse-grained application status.

    Normally derived from the most recent round (see ``utils.stage_engine``);
    set directly only by an explicit manual override.
    """

    SAVED = "Saved"
    APPLIED = "Applied"
    ASSESSMENT = "Assessment"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    REJECTED = "Rejected"


class RoundType(str, Enum):
    """Type of a timeline event.

    ``APPLIED`` marks the first event of a new application and is never
    chosen as a transition. ``NONE`` clears the round annotation without
    changing status.
    """

    APPLIED = "Applied"
    NONE = "None"
    OA = "OA"
    APTITUDE = "Aptitude"
    PHONE_SCREEN = "Phone Screen"
    TECHNICAL = "Technical"
    SYSTEM_DESIGN = "System Design"
    MANAGERIAL = "Managerial"
    HR = "HR"
    OFFER = "Offer"
    REJECTED = "Rejected"
    CUSTOM = "Custom"


class ProfileStatus(str, Enum):
    """Visibility of a public profile. Hibernated profiles are hidden."""

    ACTIVE = "active"
    HIBERNATED = "hibernated"


class NotificationKind(str, Enum):
    """Security-relevant account events that trigger an email."""

    PASSWORD_CHANGE = "password_change"
    HIBERNATE = "hibernate"
    DELETE_ACCOUNT = "delete_account"
