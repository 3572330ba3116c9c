"""
Record store for job applications.

SQLite implementation of the record-store contract: every statement is
scoped by ``user_id`` so a user can only read and write their own rows.
"""

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from jobtracker.db.connection import open_database, resolve_db_path
from jobtracker.models.application import Application, TimelineEvent
from jobtracker.models.errors import create_not_found_error, create_validation_error
from jobtracker.utils.validation import get_current_utc_timestamp

# Application fields stored in their own column under the same name
PLAIN_COLUMNS = (
    "company",
    "position",
    "status",
    "date_applied",
    "salary",
    "location",
    "notes",
    "interview_date",
    "resume_url",
    "resume_name",
    "created_at",
    "updated_at",
)

# Fields accepted by update_record
PATCHABLE_FIELDS = set(PLAIN_COLUMNS) - {"created_at"} | {"timeline"}


class RecordStore(Protocol):
    """Capability contract shared by the SQLite store and the demo mirror."""

    def list_records(self, user_id: str) -> List[Application]:
        ...

    def get_record(self, user_id: str, application_id: str) -> Optional[Application]:
        ...

    def insert_record(self, application: Application) -> Application:
        ...

    def update_record(self, user_id: str, application_id: str, patch: Dict[str, Any]) -> None:
        ...

    def save(self, application: Application) -> None:
        ...

    def delete_record(self, user_id: str, application_id: str) -> None:
        ...

    def delete_all_for_user(self, user_id: str) -> int:
        ...


def _column_value(value: Any) -> Any:
    if hasattr(value, "value"):
        return value.value
    return value


def _timeline_json(timeline: List[Any]) -> str:
    events = [
        event.model_dump(mode="json") if isinstance(event, TimelineEvent) else event
        for event in timeline
    ]
    return json.dumps(events)


def _current_round(timeline: List[Any]) -> Optional[str]:
    if not timeline:
        return None
    first = timeline[0]
    if isinstance(first, TimelineEvent):
        return first.type.value
    return first.get("type")


def application_to_row(application: Application) -> Dict[str, Any]:
    """Map an Application to column values."""
    row = {column: _column_value(getattr(application, column)) for column in PLAIN_COLUMNS}
    row["id"] = application.id
    row["user_id"] = application.user_id
    row["timeline_json"] = _timeline_json(application.timeline)
    row["current_round"] = _current_round(application.timeline)
    return row


def application_from_row(row: Union[sqlite3.Row, Dict[str, Any]]) -> Application:
    """
    Map a database row to an Application.

    A missing or unreadable timeline column yields an empty timeline.
    """
    data = dict(row)
    raw_timeline = data.pop("timeline_json", None)
    try:
        timeline = json.loads(raw_timeline) if raw_timeline else []
    except ValueError:
        timeline = []
    data["timeline"] = timeline if isinstance(timeline, list) else []
    data.pop("current_round", None)
    return Application.model_validate(data)


class ApplicationStore:
    """
    SQLite-backed application store.

    Usage:
        store = ApplicationStore("data/jobtracker.db")
        created = store.insert_record(app)
        store.update_record(app.user_id, app.id, {"status": "Offer"})
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        self.db_path = resolve_db_path(db_path)

    def list_records(self, user_id: str) -> List[Application]:
        """All applications of ``user_id``, newest first."""
        with open_database(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM applications
                WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC
                """,
                (user_id,),
            ).fetchall()
        return [application_from_row(row) for row in rows]

    def get_record(self, user_id: str, application_id: str) -> Optional[Application]:
        with open_database(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM applications WHERE user_id = ? AND id = ?",
                (user_id, application_id),
            ).fetchone()
        return application_from_row(row) if row is not None else None

    def insert_record(self, application: Application) -> Application:
        """Insert a new application and return it as stored."""
        row = application_to_row(application)
        if not row["created_at"]:
            row["created_at"] = get_current_utc_timestamp()
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        with open_database(self.db_path) as conn:
            conn.execute(
                f"INSERT INTO applications ({columns}) VALUES ({placeholders})",
                tuple(row.values()),
            )
            stored = conn.execute(
                "SELECT * FROM applications WHERE user_id = ? AND id = ?",
                (application.user_id, application.id),
            ).fetchone()
        return application_from_row(stored)

    def update_record(self, user_id: str, application_id: str, patch: Dict[str, Any]) -> None:
        """
        Update selected fields of one application.

        ``updated_at`` is refreshed unless the patch sets it. A ``timeline``
        entry also refreshes the ``current_round`` column.

        Raises:
            ToolError: VALIDATION_ERROR for unknown fields,
                NOT_FOUND if the user owns no such application
        """
        unknown = sorted(set(patch) - PATCHABLE_FIELDS)
        if unknown:
            raise create_validation_error(f"Cannot update fields: {', '.join(unknown)}")

        values: Dict[str, Any] = {}
        for field, value in patch.items():
            if field == "timeline":
                values["timeline_json"] = _timeline_json(value)
                values["current_round"] = _current_round(value)
            else:
                values[field] = _column_value(value)
        values.setdefault("updated_at", get_current_utc_timestamp())

        assignments = ", ".join(f"{column} = ?" for column in values)
        with open_database(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE applications SET {assignments} WHERE user_id = ? AND id = ?",
                (*values.values(), user_id, application_id),
            )
            if cursor.rowcount == 0:
                raise create_not_found_error("Application", application_id)

    def save(self, application: Application) -> None:
        """Write every mutable field of ``application`` back to its row."""
        patch = {field: getattr(application, field) for field in PATCHABLE_FIELDS}
        patch["updated_at"] = get_current_utc_timestamp()
        self.update_record(application.user_id, application.id, patch)

    def delete_record(self, user_id: str, application_id: str) -> None:
        """
        Delete one application together with its embedded timeline.

        Raises:
            ToolError: NOT_FOUND if the user owns no such application
        """
        with open_database(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM applications WHERE user_id = ? AND id = ?",
                (user_id, application_id),
            )
            if cursor.rowcount == 0:
                raise create_not_found_error("Application", application_id)

    def delete_all_for_user(self, user_id: str) -> int:
        with open_database(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM applications WHERE user_id = ?", (user_id,))
            return cursor.rowcount
