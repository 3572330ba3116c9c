"""
Integration tests for the MCP server entry point.

Checks tool registration and metadata, and drives the tool wrappers
end-to-end against a temporary database with the module-level config and
session manager swapped out.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from jobtracker import server
from jobtracker.server import (
    apply_stage_transition_tool,
    build_context,
    change_password_tool,
    create_application_tool,
    delete_account_tool,
    get_dashboard_summary_tool,
    get_public_profile_tool,
    list_applications_tool,
    mcp,
    update_application_status_tool,
    update_profile_tool,
)
from jobtracker.utils.session_manager import (
    UNVERIFIED_EMAIL_MESSAGE,
    ConfigIdentityProvider,
    SessionManager,
)

TOOL_NAMES = (
    "create_application",
    "list_applications",
    "apply_stage_transition",
    "update_application",
    "update_application_status",
    "delete_application",
    "get_dashboard_summary",
    "get_public_profile",
    "check_username",
    "update_profile",
    "set_profile_visibility",
    "change_password",
    "delete_account",
)


@pytest.fixture
def signed_in(tmp_path, monkeypatch):
    """Point the server at tmp_path and sign in a verified user."""
    monkeypatch.setattr(server.config, "db_path", tmp_path / "jobtracker.db")
    monkeypatch.setattr(server.config, "blob_dir", tmp_path / "storage")
    monkeypatch.setattr(server.config, "resend_api_key", None)
    monkeypatch.setattr(server.config, "demo_mode", False)
    monkeypatch.setattr(
        server,
        "_sessions",
        SessionManager(ConfigIdentityProvider("user-1", "jane@example.com", True)),
    )
    return tmp_path


@pytest.fixture
def demo(tmp_path, monkeypatch):
    """Signed out with demo mode on."""
    monkeypatch.setattr(server.config, "db_path", tmp_path / "jobtracker.db")
    monkeypatch.setattr(server.config, "blob_dir", tmp_path / "storage")
    monkeypatch.setattr(server.config, "demo_mode", True)
    monkeypatch.setattr(server, "_sessions", SessionManager(ConfigIdentityProvider(None)))
    monkeypatch.setattr(server, "_demo_store", None)
    return tmp_path


class TestServerRegistration:
    """The server exposes every tool with metadata."""

    def test_server_has_correct_name(self):
        assert mcp.name == server.config.server_name

    def test_server_name_can_be_overridden_by_env(self):
        """JOBTRACKER_SERVER_NAME is applied in a fresh process."""
        repo_root = Path(__file__).resolve().parents[1]
        env = os.environ.copy()
        env["JOBTRACKER_SERVER_NAME"] = "custom-server-name"
        env["PYTHONPATH"] = str(repo_root)

        proc = subprocess.run(
            [sys.executable, "-c", "from jobtracker import server; print(server.mcp.name)"],
            cwd=repo_root,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )

        assert proc.stdout.strip() == "custom-server-name"

    def test_server_has_instructions(self):
        assert mcp.instructions is not None
        assert "apply_stage_transition" in mcp.instructions
        assert "delete_account" in mcp.instructions

    @pytest.mark.parametrize("name", TOOL_NAMES)
    def test_tool_is_registered(self, name):
        tool = mcp._tool_manager._tools[name]
        assert tool.name == name
        assert tool.description

    def test_transition_description_lists_round_types(self):
        description = mcp._tool_manager._tools["apply_stage_transition"].description
        assert "Phone Screen" in description
        assert "custom_name" in description


class TestBuildContext:
    def test_signed_in_uses_sqlite_store(self, signed_in):
        ctx = build_context()

        assert ctx.session.user_id == "user-1"
        assert ctx.is_demo is False
        assert ctx.applications.db_path == signed_in / "jobtracker.db"

    def test_demo_mode_without_session(self, demo):
        ctx = build_context()

        assert ctx.is_demo is True
        assert len(ctx.applications.list_records(ctx.session.user_id)) == 4

    def test_demo_store_is_shared_between_calls(self, demo):
        assert build_context().applications is build_context().applications

    def test_signed_out_without_demo_mode(self, signed_in, monkeypatch):
        monkeypatch.setattr(server, "_sessions", SessionManager(ConfigIdentityProvider(None)))
        assert build_context().session is None


class TestToolWrappers:
    """Tool wrappers end-to-end."""

    def test_application_lifecycle(self, signed_in):
        created = create_application_tool(
            company="Acme", position="SRE", date_applied="2024-05-01", salary="$150k"
        )
        app_id = created["application"]["id"]

        moved = apply_stage_transition_tool(
            application_id=app_id, round_type="Phone Screen", date="2024-05-10"
        )
        listed = list_applications_tool(status="Interview")
        overridden = update_application_status_tool(application_id=app_id, status="Offer")

        assert created["warnings"] == []
        assert moved["application"]["status"] == "Interview"
        assert moved["application"]["interview_date"] == "2024-05-10"
        assert listed["count"] == 1
        assert overridden["application"]["status"] == "Offer"
        assert overridden["application"]["current_round"] == "Phone Screen"

    def test_omitted_optional_arguments_are_not_sent(self, signed_in):
        created = create_application_tool(company="Acme", position="SRE")
        assert created["application"]["salary"] is None

        summary = get_dashboard_summary_tool()
        assert summary["stats"]["total"] == 1

    def test_errors_are_returned_not_raised(self, signed_in):
        result = apply_stage_transition_tool(application_id="missing", round_type="OA")
        assert result["error"]["code"] == "NOT_FOUND"

    def test_signed_out_is_unauthorized(self, signed_in, monkeypatch):
        monkeypatch.setattr(server, "_sessions", SessionManager(ConfigIdentityProvider(None)))
        result = list_applications_tool()
        assert result["error"]["code"] == "UNAUTHORIZED"

    def test_unverified_email_reason_reaches_caller(self, signed_in, monkeypatch):
        monkeypatch.setattr(
            server,
            "_sessions",
            SessionManager(ConfigIdentityProvider("user-1", "jane@example.com", False)),
        )

        result = list_applications_tool()

        assert result["error"]["code"] == "UNAUTHORIZED"
        assert result["error"]["message"] == UNVERIFIED_EMAIL_MESSAGE

    def test_demo_mode_does_not_write_database(self, demo):
        result = apply_stage_transition_tool(application_id="demo-1", round_type="Offer")

        assert result["demo"] is True
        assert result["application"]["status"] == "Offer"
        assert list_applications_tool(status="Offer")["count"] == 2
        assert not (demo / "jobtracker.db").exists()

    def test_profile_round_trip(self, signed_in):
        updated = update_profile_tool(username="Jane", skills=["python"])
        public = get_public_profile_tool(username="jane")

        assert updated["profile"]["username"] == "jane"
        assert public["found"] is True
        assert public["profile"]["skills"] == ["python"]

    def test_delete_account_signs_out(self, signed_in):
        create_application_tool(company="Acme", position="SRE")

        result = delete_account_tool(confirm="DELETE")

        assert result["deleted_applications"] == 1
        assert result["email_sent"] is False
        assert list_applications_tool()["error"]["code"] == "UNAUTHORIZED"

    def test_change_password(self, signed_in):
        result = change_password_tool(new_password="hunter22")
        assert result == {"updated": True, "email_sent": False}

    def test_change_password_too_short(self, signed_in):
        result = change_password_tool(new_password="abc")
        assert result["error"]["code"] == "VALIDATION_ERROR"
