"""
In-memory application store for demo mode.

Mirrors the ``ApplicationStore`` contract without persisting anything.
The initial records come from the packaged ``data/demo_applications.yaml``.
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from jobtracker.db.applications_store import PATCHABLE_FIELDS
from jobtracker.models.application import Application, TimelineEvent
from jobtracker.models.errors import create_not_found_error, create_validation_error
from jobtracker.models.session import DEMO_USER_ID
from jobtracker.utils.validation import get_current_utc_timestamp

DEMO_DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "demo_applications.yaml"


def load_demo_applications(
    path: Union[str, Path] = DEMO_DATA_PATH, user_id: str = DEMO_USER_ID
) -> List[Application]:
    """Read the demo dataset; every record is owned by ``user_id``."""
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or []
    return [Application.model_validate({**item, "user_id": user_id}) for item in raw]


class DemoApplicationStore:
    """
    Application store held in process memory.

    Records are kept newest first, matching ``ApplicationStore.list_records``.
    """

    def __init__(self, records: Optional[List[Application]] = None):
        self._records: List[Application] = (
            list(records) if records is not None else load_demo_applications()
        )

    def _index(self, user_id: str, application_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.user_id == user_id and record.id == application_id:
                return index
        raise create_not_found_error("Application", application_id)

    def list_records(self, user_id: str) -> List[Application]:
        return [
            record.model_copy(deep=True) for record in self._records if record.user_id == user_id
        ]

    def get_record(self, user_id: str, application_id: str) -> Optional[Application]:
        for record in self._records:
            if record.user_id == user_id and record.id == application_id:
                return record.model_copy(deep=True)
        return None

    def insert_record(self, application: Application) -> Application:
        stored = application
        if not application.created_at:
            stored = application.model_copy(update={"created_at": get_current_utc_timestamp()})
        self._records.insert(0, stored)
        return stored.model_copy(deep=True)

    def update_record(self, user_id: str, application_id: str, patch: Dict[str, Any]) -> None:
        unknown = sorted(set(patch) - PATCHABLE_FIELDS)
        if unknown:
            raise create_validation_error(f"Cannot update fields: {', '.join(unknown)}")

        index = self._index(user_id, application_id)
        data = self._records[index].model_dump()
        for field, value in patch.items():
            if field == "timeline":
                value = [
                    event.model_dump() if isinstance(event, TimelineEvent) else copy.deepcopy(event)
                    for event in value
                ]
            data[field] = value
        if "updated_at" not in patch:
            data["updated_at"] = get_current_utc_timestamp()
        self._records[index] = Application.model_validate(data)

    def save(self, application: Application) -> None:
        patch = {field: getattr(application, field) for field in PATCHABLE_FIELDS}
        self.update_record(application.user_id, application.id, patch)

    def delete_record(self, user_id: str, application_id: str) -> None:
        del self._records[self._index(user_id, application_id)]

    def delete_all_for_user(self, user_id: str) -> int:
        before = len(self._records)
        self._records = [record for record in self._records if record.user_id != user_id]
        return before - len(self._records)
