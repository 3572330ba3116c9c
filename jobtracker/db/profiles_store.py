"""
Profile store: portfolio profiles keyed by user id, addressable by username.
"""

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jobtracker.db.connection import open_database, resolve_db_path
from jobtracker.models.errors import create_not_found_error
from jobtracker.models.profile import LIST_FIELDS, Profile
from jobtracker.models.status import ProfileStatus
from jobtracker.utils.validation import get_current_utc_timestamp


def profile_to_row(profile: Profile) -> Dict[str, Any]:
    """Map a Profile to column values. ``headline`` is stored as ``header_text``."""
    row = profile.model_dump(mode="json", exclude={"headline"})
    row["header_text"] = profile.headline
    for field in LIST_FIELDS:
        row[field] = json.dumps(row[field])
    return row


def profile_from_row(row: Union[sqlite3.Row, Dict[str, Any]]) -> Profile:
    data = dict(row)
    data["headline"] = data.pop("header_text", None) or ""
    return Profile.model_validate(data)


class ProfileStore:
    """SQLite-backed profile store."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        self.db_path = resolve_db_path(db_path)

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        with open_database(self.db_path) as conn:
            row = conn.execute("SELECT * FROM profiles WHERE id = ?", (user_id,)).fetchone()
        return profile_from_row(row) if row is not None else None

    def get_by_username(self, username: str) -> Optional[Profile]:
        with open_database(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM profiles WHERE username = ?", (username,)
            ).fetchone()
        return profile_from_row(row) if row is not None else None

    def username_taken(self, username: str, exclude_id: Optional[str] = None) -> bool:
        """True if another user (not ``exclude_id``) already holds ``username``."""
        with open_database(self.db_path) as conn:
            row = conn.execute(
                "SELECT id FROM profiles WHERE username = ?", (username,)
            ).fetchone()
        return row is not None and row["id"] != exclude_id

    def upsert(self, profile: Profile) -> Profile:
        """Insert or fully replace a profile; returns it as stored."""
        row = profile_to_row(profile)
        row["updated_at"] = get_current_utc_timestamp()
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        updates = ", ".join(f"{column} = excluded.{column}" for column in row if column != "id")
        with open_database(self.db_path) as conn:
            conn.execute(
                f"""
                INSERT INTO profiles ({columns}) VALUES ({placeholders})
                ON CONFLICT(id) DO UPDATE SET {updates}
                """,
                tuple(row.values()),
            )
            stored = conn.execute("SELECT * FROM profiles WHERE id = ?", (profile.id,)).fetchone()
        return profile_from_row(stored)

    def set_status(self, user_id: str, status: ProfileStatus) -> None:
        """
        Raises:
            ToolError: NOT_FOUND if the user has no profile
        """
        with open_database(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE profiles SET status = ?, updated_at = ? WHERE id = ?",
                (ProfileStatus(status).value, get_current_utc_timestamp(), user_id),
            )
            if cursor.rowcount == 0:
                raise create_not_found_error("Profile", user_id)

    def delete(self, user_id: str) -> bool:
        with open_database(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM profiles WHERE id = ?", (user_id,))
            return cursor.rowcount > 0
