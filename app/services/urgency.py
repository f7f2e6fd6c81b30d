# app/services/urgency.py
"""
Classificazione dell'urgenza di un assignment, per la visualizzazione.

Precedenza: completed, overdue, oggi, domani, upcoming. "Oggi" e "domani"
sono giorni di calendario nella timezone di `now`, non finestre di 24h
(la finestra mobile è quella del reminder, vedi reminders.py).
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from app.core.clock import local_date


class Urgency(str, Enum):
    COMPLETED = "completed"
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_TOMORROW = "due_tomorrow"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class UrgencyInfo:
    category: Urgency
    label: str
    style: str


_LABELS = {
    Urgency.COMPLETED: "Completed",
    Urgency.OVERDUE: "Overdue",
    Urgency.DUE_TODAY: "Due today",
    Urgency.DUE_TOMORROW: "Due tomorrow",
}

_STYLES = {
    Urgency.COMPLETED: "success",
    Urgency.OVERDUE: "destructive",
    Urgency.DUE_TODAY: "warning",
    Urgency.DUE_TOMORROW: "primary",
    Urgency.UPCOMING: "muted",
}

MINUTES_IN_DAY = 1440
MINUTES_IN_MONTH = 43200


def categorize(due_at: datetime, completed: bool, now: datetime) -> Urgency:
    if completed:
        return Urgency.COMPLETED
    # limite chiuso: scaduto appena due_at <= now
    if due_at <= now:
        return Urgency.OVERDUE
    due_day = local_date(due_at, now)
    today = now.date()
    if due_day == today:
        return Urgency.DUE_TODAY
    if due_day == today + timedelta(days=1):
        return Urgency.DUE_TOMORROW
    return Urgency.UPCOMING


def classify(due_at: datetime, completed: bool, now: datetime) -> UrgencyInfo:
    category = categorize(due_at, completed, now)
    if category is Urgency.UPCOMING:
        label = distance_in_words(due_at, now)
    else:
        label = _LABELS[category]
    return UrgencyInfo(category=category, label=label, style=_STYLES[category])


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def _distance(minutes: int) -> str:
    if minutes < 1:
        return "less than a minute"
    if minutes < 45:
        return _plural(minutes, "minute")
    if minutes < 90:
        return "about 1 hour"
    if minutes < MINUTES_IN_DAY:
        return "about " + _plural(round(minutes / 60), "hour")
    if minutes < 2520:
        return "1 day"
    if minutes < MINUTES_IN_MONTH:
        return _plural(round(minutes / MINUTES_IN_DAY), "day")
    if minutes < 2 * MINUTES_IN_MONTH:
        return "about " + _plural(round(minutes / MINUTES_IN_MONTH), "month")

    months = minutes // MINUTES_IN_MONTH
    if months < 12:
        return _plural(round(minutes / MINUTES_IN_MONTH), "month")

    years, remainder = divmod(months, 12)
    if remainder < 3:
        return "about " + _plural(years, "year")
    if remainder < 9:
        return "over " + _plural(years, "year")
    return "almost " + _plural(years + 1, "year")


def distance_in_words(target: datetime, now: datetime) -> str:
    """Distanza relativa con suffisso: "in 3 days" / "3 days ago"."""
    seconds = (target - now).total_seconds()
    words = _distance(round(abs(seconds) / 60))
    return f"in {words}" if seconds > 0 else f"{words} ago"
