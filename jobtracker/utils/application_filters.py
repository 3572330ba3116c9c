"""
Filtering, sorting and grouping of application lists.

These operate on in-memory lists of ``Application`` records and always
return new lists. Sorting is stable, so ties keep their input order.
"""

import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from jobtracker.models.application import Application
from jobtracker.models.status import ApplicationStatus
from jobtracker.utils.validation import ALL_STATUSES, parse_iso_datetime

# Columns of the board view, in display order
BOARD_STATUSES = (
    ApplicationStatus.APPLIED,
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.OFFER,
    ApplicationStatus.REJECTED,
)

_SALARY_PATTERN = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*([kKmM]?)")
_MULTIPLIERS = {"k": 1_000, "m": 1_000_000}
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_salary(text: Optional[str]) -> float:
    """
    Leniently parse a free-text salary into a number.

    The first number wins; commas are ignored and a ``k``/``m`` suffix scales
    it. Text without any number parses as 0.

    Examples:
        >>> parse_salary("$80k")
        80000.0
        >>> parse_salary("100,000 - 120,000 CAD")
        100000.0
        >>> parse_salary("competitive")
        0.0
    """
    if not text:
        return 0.0
    match = _SALARY_PATTERN.search(text)
    if match is None:
        return 0.0
    amount = float(match.group(1).replace(",", ""))
    return amount * _MULTIPLIERS.get(match.group(2).lower(), 1)


def filter_applications(
    applications: Iterable[Application],
    query: str = "",
    status: str = ALL_STATUSES,
) -> List[Application]:
    """
    Keep applications matching a text query and a status.

    The query is a case-insensitive substring match against company and
    position. ``status="All"`` disables the status filter.
    """
    needle = (query or "").strip().lower()
    results = []
    for app in applications:
        if needle and needle not in app.company.lower() and needle not in app.position.lower():
            continue
        if status != ALL_STATUSES and app.status != status:
            continue
        results.append(app)
    return results


def sort_applications(applications: Iterable[Application], sort_key: str) -> List[Application]:
    """
    Sort applications descending by ``date_applied``, ``interview_date`` or ``salary``.

    Dates are compared as instants, so values with different UTC offsets
    order correctly. Applications without an interview date go last when
    sorting by it.
    """
    items = list(applications)
    if sort_key == "salary":
        return sorted(items, key=lambda app: parse_salary(app.salary), reverse=True)
    if sort_key == "interview_date":
        dated = [(parse_iso_datetime(app.interview_date), app) for app in items]
        undated = [app for when, app in dated if when is None]
        dated = [(when, app) for when, app in dated if when is not None]
        dated.sort(key=lambda pair: pair[0], reverse=True)
        return [app for _, app in dated] + undated
    return sorted(
        items, key=lambda app: parse_iso_datetime(app.date_applied) or _EPOCH, reverse=True
    )


def group_by_status(
    applications: Iterable[Application],
    statuses: Sequence[ApplicationStatus] = BOARD_STATUSES,
) -> Dict[str, List[Application]]:
    """Group applications into board columns, one per status."""
    columns: Dict[str, List[Application]] = {status.value: [] for status in statuses}
    for app in applications:
        if app.status.value in columns:
            columns[app.status.value].append(app)
    return columns
