"""Summary numbers and the "this week" agenda for the dashboard."""

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from jobtracker.models.application import Application
from jobtracker.models.status import ApplicationStatus

UPCOMING_WINDOW_DAYS = 7


def _as_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def compute_stats(applications: Iterable[Application]) -> Dict[str, Any]:
    """
    Count applications per headline bucket.

    ``response_rate`` is the rounded percentage of applications that reached
    Interview or Offer; 0 for an empty list.
    """
    items = list(applications)
    total = len(items)
    interviews = sum(1 for app in items if app.status == ApplicationStatus.INTERVIEW)
    offers = sum(1 for app in items if app.status == ApplicationStatus.OFFER)
    response_rate = round((interviews + offers) / total * 100) if total else 0
    return {
        "total": total,
        "interviews": interviews,
        "offers": offers,
        "response_rate": response_rate,
    }


def upcoming_events(
    applications: Iterable[Application],
    today: date,
    days: int = UPCOMING_WINDOW_DAYS,
) -> List[Application]:
    """Applications whose next round falls within ``[today, today + days]``, soonest first."""
    horizon = today + timedelta(days=days)
    upcoming = []
    for app in applications:
        when = _as_date(app.interview_date)
        if when is not None and today <= when <= horizon:
            upcoming.append((when, app))
    upcoming.sort(key=lambda pair: pair[0])
    return [app for _, app in upcoming]
