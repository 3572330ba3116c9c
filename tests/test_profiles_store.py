"""Tests for the SQLite profile store and the Profile record."""

import pytest

from jobtracker.db.connection import open_database
from jobtracker.db.profiles_store import ProfileStore, profile_from_row, profile_to_row
from jobtracker.models.errors import ErrorCode, ToolError
from jobtracker.models.profile import Profile, parse_list_field
from jobtracker.models.status import ProfileStatus


@pytest.fixture
def store(tmp_path):
    return ProfileStore(tmp_path / "jobtracker.db")


def jane(**overrides):
    data = {
        "id": "user-1",
        "username": "janedoe",
        "full_name": "Jane Doe",
        "headline": "Backend engineer",
        "skills": ["Python", "SQL"],
        "experience": [{"company": "Acme", "title": "SWE"}],
    }
    data.update(overrides)
    return Profile.model_validate(data)


class TestParseListField:
    """Lenient decoding of stored list sections."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, []),
            ("", []),
            ('["a", "b"]', ["a", "b"]),
            ('{"a": 1}', []),
            ("not json", []),
            (["x"], ["x"]),
            (42, []),
        ],
    )
    def test_values(self, value, expected):
        assert parse_list_field(value) == expected

    def test_profile_uses_lenient_parsing(self):
        profile = Profile.model_validate({"id": "u", "skills": '["Go"]', "interests": "oops"})
        assert profile.skills == ["Go"]
        assert profile.interests == []

    def test_text_sections_drop_non_string_items(self):
        profile = Profile.model_validate(
            {"id": "u", "skills": '["Go", 3, {"name": "Rust"}]', "interests": ["chess", None]}
        )
        assert profile.skills == ["Go"]
        assert profile.interests == ["chess"]


class TestProfileStore:
    """Tests for ProfileStore."""

    def test_upsert_and_read_back(self, store):
        stored = store.upsert(jane())

        assert stored.username == "janedoe"
        assert stored.headline == "Backend engineer"
        assert stored.experience == [{"company": "Acme", "title": "SWE"}]
        assert stored.updated_at is not None
        assert store.get_by_id("user-1") == stored
        assert store.get_by_username("janedoe") == stored

    def test_headline_stored_as_header_text(self, store):
        store.upsert(jane())
        with open_database(store.db_path) as conn:
            row = conn.execute("SELECT header_text FROM profiles").fetchone()
        assert row["header_text"] == "Backend engineer"

    def test_upsert_replaces(self, store):
        store.upsert(jane())
        store.upsert(jane(full_name="Jane Q. Doe", skills=[]))

        stored = store.get_by_id("user-1")
        assert stored.full_name == "Jane Q. Doe"
        assert stored.skills == []

    def test_username_taken_excludes_owner(self, store):
        store.upsert(jane())

        assert store.username_taken("janedoe") is True
        assert store.username_taken("janedoe", exclude_id="user-1") is False
        assert store.username_taken("someoneelse") is False

    def test_set_status(self, store):
        store.upsert(jane())

        store.set_status("user-1", ProfileStatus.HIBERNATED)

        stored = store.get_by_id("user-1")
        assert stored.status == ProfileStatus.HIBERNATED
        assert stored.is_public is False

    def test_set_status_missing_profile(self, store):
        with pytest.raises(ToolError) as exc_info:
            store.set_status("ghost", ProfileStatus.ACTIVE)
        assert exc_info.value.code == ErrorCode.NOT_FOUND

    def test_delete(self, store):
        store.upsert(jane())
        assert store.delete("user-1") is True
        assert store.get_by_id("user-1") is None
        assert store.delete("user-1") is False

    def test_legacy_skills_row_still_loads(self, store):
        store.upsert(jane())
        with open_database(store.db_path) as conn:
            conn.execute(
                "UPDATE profiles SET skills = ? WHERE id = ?", ('["SQL", 7, ["nested"]]', "user-1")
            )

        assert store.get_by_username("janedoe").skills == ["SQL"]

    def test_missing_lookups(self, store):
        assert store.get_by_id("nobody") is None
        assert store.get_by_username("nobody") is None


class TestRowMapping:
    def test_round_trip_through_row(self):
        profile = jane()
        assert profile_from_row(profile_to_row(profile)) == profile

    def test_profile_without_username_is_not_public(self):
        assert jane(username=None).is_public is False
        assert jane().is_public is True
