"""
Tests for the SQLite application store.

Each test uses a fresh database under tmp_path; the schema is created on
first use.
"""

import json

import pytest

from jobtracker.db.applications_store import (
    ApplicationStore,
    application_from_row,
    application_to_row,
)
from jobtracker.db.connection import open_database, resolve_db_path
from jobtracker.models.errors import ErrorCode, ToolError
from jobtracker.models.status import ApplicationStatus, RoundType
from jobtracker.utils.stage_engine import apply_transition, new_application


@pytest.fixture
def store(tmp_path):
    return ApplicationStore(tmp_path / "jobtracker.db")


def build(user_id="user-1", company="Acme", created="2024-05-01T09:00:00.000Z"):
    return new_application(user_id, company, "Engineer", "2024-05-01", timestamp=created)


class TestRoundTrip:
    """Create then read back through the store."""

    def test_created_record_reads_back_applied_with_one_event(self, store):
        created = store.insert_record(build())

        stored = store.get_record("user-1", created.id)

        assert stored is not None
        assert stored.status == ApplicationStatus.APPLIED
        assert len(stored.timeline) == 1
        assert stored.timeline[0].type == RoundType.APPLIED
        assert stored == created

    def test_transition_persists_timeline_and_round(self, store):
        app = store.insert_record(build())

        moved = apply_transition(app, "Technical", date="2024-06-01")
        store.save(moved)
        stored = store.get_record("user-1", app.id)

        assert stored.status == ApplicationStatus.INTERVIEW
        assert stored.current_round == RoundType.TECHNICAL
        assert [e.completed for e in stored.timeline] == [False, True]
        assert stored.notes == "[Technical] "
        assert stored.updated_at is not None

    def test_current_round_column_mirrors_newest_event(self, store):
        app = store.insert_record(build())
        store.save(apply_transition(app, "OA"))

        with open_database(store.db_path) as conn:
            row = conn.execute("SELECT current_round FROM applications").fetchone()

        assert row["current_round"] == "OA"


class TestListRecords:
    """Tests for list_records scoping and ordering."""

    def test_newest_first_and_scoped_to_user(self, store):
        store.insert_record(build(company="First", created="2024-05-01T09:00:00.000Z"))
        store.insert_record(build(company="Second", created="2024-05-02T09:00:00.000Z"))
        store.insert_record(build(user_id="someone-else", company="Hidden"))

        companies = [app.company for app in store.list_records("user-1")]

        assert companies == ["Second", "First"]

    def test_empty(self, store):
        assert store.list_records("nobody") == []


class TestUpdateRecord:
    """Tests for update_record."""

    def test_patch_selected_fields(self, store):
        app = store.insert_record(build())

        store.update_record("user-1", app.id, {"status": ApplicationStatus.OFFER, "salary": "$1"})
        stored = store.get_record("user-1", app.id)

        assert stored.status == ApplicationStatus.OFFER
        assert stored.salary == "$1"
        assert stored.company == "Acme"

    def test_unknown_field_rejected(self, store):
        app = store.insert_record(build())
        with pytest.raises(ToolError) as exc_info:
            store.update_record("user-1", app.id, {"user_id": "evil"})
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_other_users_record_is_not_found(self, store):
        app = store.insert_record(build())
        with pytest.raises(ToolError) as exc_info:
            store.update_record("intruder", app.id, {"salary": "$0"})
        assert exc_info.value.code == ErrorCode.NOT_FOUND
        assert store.get_record("user-1", app.id).salary is None

    def test_last_write_wins(self, store):
        app = store.insert_record(build())
        first = apply_transition(app, "OA")
        second = apply_transition(app, "HR")

        store.save(first)
        store.save(second)

        assert store.get_record("user-1", app.id).current_round == RoundType.HR


class TestDelete:
    """Tests for delete_record and delete_all_for_user."""

    def test_delete_record(self, store):
        app = store.insert_record(build())
        store.delete_record("user-1", app.id)
        assert store.get_record("user-1", app.id) is None

    def test_delete_missing(self, store):
        with pytest.raises(ToolError) as exc_info:
            store.delete_record("user-1", "missing")
        assert exc_info.value.code == ErrorCode.NOT_FOUND

    def test_delete_all_for_user(self, store):
        store.insert_record(build())
        store.insert_record(build())
        store.insert_record(build(user_id="other"))

        assert store.delete_all_for_user("user-1") == 2
        assert len(store.list_records("other")) == 1


class TestRowMapping:
    """Tests for row conversion helpers."""

    def test_to_row_serializes_timeline_and_enums(self):
        row = application_to_row(build())

        assert row["status"] == "Applied"
        assert row["current_round"] == "Applied"
        assert json.loads(row["timeline_json"])[0]["type"] == "Applied"

    def test_unreadable_timeline_becomes_empty(self):
        row = application_to_row(build())
        row["timeline_json"] = "{not json"

        assert application_from_row(row).timeline == []


class TestConnection:
    """Tests for database path resolution and error mapping."""

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("JOBTRACKER_DB", "/elsewhere/x.db")
        assert resolve_db_path(tmp_path / "a.db") == tmp_path / "a.db"

    def test_env_root(self, monkeypatch):
        monkeypatch.delenv("JOBTRACKER_DB", raising=False)
        monkeypatch.setenv("JOBTRACKER_ROOT", "/opt/jobtracker")
        assert str(resolve_db_path()) == "/opt/jobtracker/data/jobtracker.db"

    def test_sqlite_errors_become_db_error(self, tmp_path):
        with pytest.raises(ToolError) as exc_info:
            with open_database(tmp_path / "x.db") as conn:
                conn.execute("SELECT * FROM no_such_table")
        assert exc_info.value.code == ErrorCode.DB_ERROR
        assert exc_info.value.retryable is True

    def test_integrity_errors_are_not_retryable(self, tmp_path):
        store = ApplicationStore(tmp_path / "x.db")
        app = store.insert_record(build())
        with pytest.raises(ToolError) as exc_info:
            store.insert_record(app)
        assert exc_info.value.code == ErrorCode.DB_ERROR
        assert exc_info.value.retryable is False

    def test_failed_block_is_rolled_back(self, tmp_path):
        store = ApplicationStore(tmp_path / "x.db")
        app = store.insert_record(build())

        with pytest.raises(RuntimeError):
            with open_database(store.db_path) as conn:
                conn.execute("DELETE FROM applications")
                raise RuntimeError("boom")

        assert store.get_record("user-1", app.id) is not None
