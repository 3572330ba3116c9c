"""
Tests for the profile and account tool handlers.

Stores run on tmp_path; the email notifier is a mock so that no HTTP
request is ever made.
"""

import random
from datetime import date
from unittest.mock import MagicMock

import pytest

from jobtracker.db.connection import open_database
from jobtracker.db.applications_store import ApplicationStore
from jobtracker.db.profiles_store import ProfileStore
from jobtracker.models.profile import Profile
from jobtracker.models.session import Identity, Session, demo_session
from jobtracker.models.status import NotificationKind, ProfileStatus
from jobtracker.tools.account import change_password, delete_account, set_profile_visibility
from jobtracker.tools.context import ToolContext
from jobtracker.tools.create_application import create_application
from jobtracker.tools.profiles import check_username, get_public_profile, update_profile
from jobtracker.utils.blob_store import LocalBlobStore
from jobtracker.utils.notifier import EmailNotifier
from jobtracker.utils.session_manager import (
    UNVERIFIED_EMAIL_MESSAGE,
    ConfigIdentityProvider,
    SessionManager,
)


@pytest.fixture
def notifier():
    mock = MagicMock(spec=EmailNotifier)
    mock.send.return_value = True
    return mock


@pytest.fixture
def ctx(tmp_path, notifier):
    db_path = tmp_path / "jobtracker.db"
    sessions = SessionManager(ConfigIdentityProvider("user-1", "jane@example.com", True))
    return ToolContext(
        session=sessions.require_session(),
        applications=ApplicationStore(db_path),
        profiles=ProfileStore(db_path),
        blobs=LocalBlobStore(tmp_path / "storage", "http://localhost:8000"),
        notifier=notifier,
        sessions=sessions,
        public_base_url="https://jobtracker.app",
        today=lambda: date(2024, 6, 10),
    )


def add_profile(ctx, user_id, username, status=ProfileStatus.ACTIVE):
    return ctx.profiles.upsert(
        Profile(id=user_id, username=username, full_name="Jane Doe", status=status)
    )


class TestGetPublicProfile:
    """Tests for get_public_profile."""

    def test_found(self, ctx):
        add_profile(ctx, "user-1", "janedoe")

        result = get_public_profile({"username": "JaneDoe"}, ctx)

        assert result["found"] is True
        assert result["url"] == "https://jobtracker.app/p/janedoe"
        assert result["profile"]["full_name"] == "Jane Doe"
        assert "id" not in result["profile"]
        assert "status" not in result["profile"]

    def test_unknown_username(self, ctx):
        assert get_public_profile({"username": "nobody"}, ctx) == {
            "found": False,
            "profile": None,
            "url": None,
        }

    def test_hibernated_profile_is_hidden(self, ctx):
        add_profile(ctx, "user-1", "janedoe", status=ProfileStatus.HIBERNATED)
        assert get_public_profile({"username": "janedoe"}, ctx)["found"] is False

    def test_readable_signed_out(self, ctx):
        add_profile(ctx, "user-1", "janedoe")
        ctx.session = None
        ctx.sessions = None
        assert get_public_profile({"username": "janedoe"}, ctx)["found"] is True

    def test_legacy_skills_do_not_break_lookup(self, ctx):
        add_profile(ctx, "user-1", "janedoe")
        with open_database(ctx.profiles.db_path) as conn:
            conn.execute("UPDATE profiles SET skills = ? WHERE id = ?", ('["Go", 1]', "user-1"))

        result = get_public_profile({"username": "janedoe"}, ctx)

        assert result["found"] is True
        assert result["profile"]["skills"] == ["Go"]

    def test_blank_username(self, ctx):
        assert get_public_profile({"username": "  "}, ctx)["error"]["code"] == "VALIDATION_ERROR"


class TestCheckUsername:
    """Tests for check_username."""

    def test_too_short(self, ctx):
        result = check_username({"username": "J!"}, ctx)
        assert result == {"username": "j", "available": None, "suggestions": []}

    def test_available(self, ctx):
        result = check_username({"username": "New.Name"}, ctx)
        assert result["username"] == "newname"
        assert result["available"] is True

    def test_own_username_is_available(self, ctx):
        add_profile(ctx, "user-1", "janedoe")
        assert check_username({"username": "janedoe"}, ctx)["available"] is True

    def test_taken_with_suggestions(self, ctx):
        add_profile(ctx, "user-2", "jane")
        add_profile(ctx, "user-3", "janepro")

        result = check_username({"username": "jane"}, ctx, rng=random.Random(7))

        assert result["available"] is False
        assert "janepro" not in result["suggestions"]
        assert result["suggestions"][:2] == ["janedev", "iamjane"]


class TestUpdateProfile:
    """Tests for update_profile."""

    def test_creates_profile(self, ctx):
        result = update_profile(
            {"username": "Jane Doe", "headline": "Engineer", "skills": ["python", "sql"]}, ctx
        )

        assert result["action"] == "updated"
        assert result["url"] == "https://jobtracker.app/p/janedoe"
        assert result["profile"]["username"] == "janedoe"
        assert result["profile"]["skills"] == ["python", "sql"]
        assert ctx.profiles.get_by_id("user-1").headline == "Engineer"

    def test_partial_update_keeps_other_fields(self, ctx):
        add_profile(ctx, "user-1", "janedoe")

        result = update_profile({"about": "Hello"}, ctx)

        assert result["profile"]["username"] == "janedoe"
        assert result["profile"]["full_name"] == "Jane Doe"
        assert result["profile"]["about"] == "Hello"

    def test_taken_username_lists_alternatives(self, ctx):
        add_profile(ctx, "user-2", "jane")

        result = update_profile({"username": "jane"}, ctx, rng=random.Random(3))

        error = result["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"].startswith("Username 'jane' is already taken. Try: janepro")
        assert ctx.profiles.get_by_id("user-1") is None

    def test_short_username(self, ctx):
        assert update_profile({"username": "ab"}, ctx)["error"]["code"] == "VALIDATION_ERROR"

    def test_avatar_upload(self, ctx, tmp_path):
        avatar = tmp_path / "me.PNG"
        avatar.write_bytes(b"\x89PNG")

        result = update_profile({"avatar_path": str(avatar)}, ctx)

        url = result["profile"]["avatar_url"]
        assert url.startswith("http://localhost:8000/storage/profile-media/user-1/avatar-")
        assert url.endswith(".png")

    def test_missing_cover_file(self, ctx, tmp_path):
        result = update_profile({"cover_path": str(tmp_path / "nope.jpg")}, ctx)
        assert result["error"]["code"] == "VALIDATION_ERROR"
        assert "cover" in result["error"]["message"]

    def test_demo_session_rejected(self, ctx):
        ctx.session = demo_session()
        result = update_profile({"about": "x"}, ctx)
        assert result["error"]["code"] == "UNAUTHORIZED"


class TestSetProfileVisibility:
    """Tests for set_profile_visibility."""

    def test_hibernate_emails_and_signs_out(self, ctx, notifier):
        add_profile(ctx, "user-1", "janedoe")

        result = set_profile_visibility({"hibernate": True}, ctx)

        assert result == {"status": "hibernated", "email_sent": True, "signed_out": True}
        notifier.send.assert_called_once_with("jane@example.com", NotificationKind.HIBERNATE)
        assert ctx.profiles.get_by_id("user-1").status == ProfileStatus.HIBERNATED
        assert ctx.session is None
        assert ctx.sessions.get_current_session() is None

    def test_email_failure_does_not_block(self, ctx, notifier):
        notifier.send.return_value = False

        result = set_profile_visibility({"hibernate": True}, ctx)

        assert result["email_sent"] is False
        assert result["status"] == "hibernated"
        assert ctx.profiles.get_by_id("user-1").status == ProfileStatus.HIBERNATED

    def test_reactivate(self, ctx, notifier):
        add_profile(ctx, "user-1", "janedoe", status=ProfileStatus.HIBERNATED)

        result = set_profile_visibility({"hibernate": False}, ctx)

        assert result == {"status": "active", "email_sent": False, "signed_out": False}
        notifier.send.assert_not_called()
        assert ctx.session is not None

    def test_strict_bool(self, ctx):
        result = set_profile_visibility({"hibernate": "yes"}, ctx)
        assert result["error"]["code"] == "VALIDATION_ERROR"


class TestChangePassword:
    """Tests for change_password."""

    def test_updates_password_and_sends_alert(self, ctx, notifier):
        provider = ctx.sessions._provider

        result = change_password({"new_password": "s3cret!"}, ctx)

        assert result == {"updated": True, "email_sent": True}
        assert provider.check_password("s3cret!") is True
        notifier.send.assert_called_once_with("jane@example.com", NotificationKind.PASSWORD_CHANGE)

    def test_short_password_rejected(self, ctx, notifier):
        result = change_password({"new_password": "12345"}, ctx)

        assert result["error"]["code"] == "VALIDATION_ERROR"
        assert "6 characters" in result["error"]["message"]
        assert "12345" not in result["error"]["message"]
        notifier.send.assert_not_called()

    def test_email_failure_does_not_block(self, ctx, notifier):
        notifier.send.return_value = False

        result = change_password({"new_password": "longenough"}, ctx)

        assert result == {"updated": True, "email_sent": False}

    def test_provider_failure_sends_no_email(self, ctx, notifier):
        ctx.session = Session(identity=Identity(id="someone-else", email_verified=True))

        result = change_password({"new_password": "longenough"}, ctx)

        assert result["error"]["code"] == "UNAUTHORIZED"
        notifier.send.assert_not_called()

    def test_demo_session_rejected(self, ctx, notifier):
        ctx.session = demo_session()

        result = change_password({"new_password": "longenough"}, ctx)

        assert result["error"]["code"] == "UNAUTHORIZED"
        notifier.send.assert_not_called()

    def test_without_identity_provider(self, ctx):
        ctx.sessions = None
        assert change_password({"new_password": "longenough"}, ctx)["error"]["code"] == "UNAUTHORIZED"


class TestDeleteAccount:
    """Tests for delete_account."""

    def test_purges_everything(self, ctx, notifier, tmp_path):
        resume = tmp_path / "cv.pdf"
        resume.write_bytes(b"cv")
        create_application(
            {"company": "Acme", "position": "SRE", "resume_path": str(resume)}, ctx
        )
        create_application({"company": "Globex", "position": "SRE"}, ctx)
        add_profile(ctx, "user-1", "janedoe")
        add_profile(ctx, "user-2", "someone")

        result = delete_account({"confirm": "DELETE"}, ctx)

        assert result == {
            "deleted_applications": 2,
            "removed_files": 1,
            "profile_deleted": True,
            "email_sent": True,
            "signed_out": True,
        }
        notifier.send.assert_called_once_with("jane@example.com", NotificationKind.DELETE_ACCOUNT)
        assert ctx.applications.list_records("user-1") == []
        assert ctx.profiles.get_by_id("user-1") is None
        assert ctx.profiles.get_by_id("user-2") is not None
        assert ctx.session is None

    def test_requires_confirmation(self, ctx, notifier):
        result = delete_account({"confirm": "delete"}, ctx)

        assert result["error"]["code"] == "VALIDATION_ERROR"
        notifier.send.assert_not_called()
        assert ctx.session is not None

    def test_demo_session_rejected(self, ctx, notifier):
        ctx.session = demo_session()

        result = delete_account({"confirm": "DELETE"}, ctx)

        assert result["error"]["code"] == "UNAUTHORIZED"
        notifier.send.assert_not_called()


class TestUnverifiedEmail:
    def test_unverified_user_is_rejected_and_signed_out(self, ctx):
        provider = ConfigIdentityProvider("user-9", "new@example.com", email_verified=False)
        ctx.session = None
        ctx.sessions = SessionManager(provider)

        result = create_application({"company": "Acme", "position": "SRE"}, ctx)

        assert result["error"]["code"] == "UNAUTHORIZED"
        assert result["error"]["message"] == UNVERIFIED_EMAIL_MESSAGE
        assert provider.get_session() is None

    def test_oauth_user_passes(self, ctx):
        ctx.session = None
        ctx.sessions = SessionManager(
            ConfigIdentityProvider("user-9", "new@example.com", False, provider="github")
        )

        result = create_application({"company": "Acme", "position": "SRE"}, ctx)

        assert result["application"]["user_id"] == "user-9"


def test_session_passed_explicitly(ctx):
    """A handler sees exactly the session it is given."""
    ctx.session = Session(identity=Identity(id="other", email_verified=True))
    ctx.sessions = None

    result = create_application({"company": "Acme", "position": "SRE"}, ctx)

    assert result["application"]["user_id"] == "other"
