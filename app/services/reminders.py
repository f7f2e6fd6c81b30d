# app/services/reminders.py
"""
Reminder per le scadenze imminenti.

La selezione usa una finestra mobile (now, now + 24h], indipendente dai
giorni di calendario usati da urgency.py: un compito tra 2 ore che cade
domani è "imminente", uno tra 30 ore non lo è anche se è "Due tomorrow".

Nessuna deduplica tra un'esecuzione e l'altra: ogni scansione con
risultati non vuoti emette di nuovo.
"""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from app.core.clock import Clock
from app.database.assignment_repo import AssignmentRepo
from app.schemas.assignment import Assignment
from app.schemas.notification import Capability, NotificationMessage, ReminderCheckResult, ReminderEvent
from app.services.assignment_service import AssignmentService
from app.services.list_cache import AssignmentListCache
from app.services.publisher_service import NotificationSink

logger = logging.getLogger("tasktrack.reminders")

DEFAULT_WINDOW = timedelta(hours=24)
REMINDER_TITLE = "Upcoming Deadlines! 📚"


def find_due_soon(
    assignments: Iterable[Assignment],
    now: datetime,
    window: timedelta = DEFAULT_WINDOW,
) -> List[Assignment]:
    limit = now + window
    return [a for a in assignments if not a.completed and now < a.due_at <= limit]


def build_reminder(due_soon: List[Assignment]) -> Optional[ReminderEvent]:
    if not due_soon:
        return None
    count = len(due_soon)
    names = ", ".join(a.name for a in due_soon)
    plural = "" if count == 1 else "s"
    return ReminderEvent(
        title=REMINDER_TITLE,
        body=f"You have {count} assignment{plural} due soon: {names}",
        count=count,
        assignment_ids=[a.id for a in due_soon],
    )


async def emit_reminder(
    assignments: Iterable[Assignment],
    now: datetime,
    sink: NotificationSink,
    window: timedelta = DEFAULT_WINDOW,
) -> Tuple[Optional[ReminderEvent], Optional[NotificationMessage]]:
    """Seleziona e, se c'è qualcosa, emette UNA notifica aggregata. Niente controllo permessi qui."""
    event = build_reminder(find_due_soon(assignments, now, window))
    if event is None:
        return None, None
    handle = await sink.notify(event.title, event.body)
    return event, handle


async def check_upcoming_deadlines(
    assignments: Iterable[Assignment],
    now: datetime,
    sink: NotificationSink,
    window: timedelta = DEFAULT_WINDOW,
) -> Optional[NotificationMessage]:
    _, handle = await emit_reminder(assignments, now, sink, window)
    return handle


class ReminderDispatcher:
    """Lato chiamante: controlla il permesso e rilancia la scansione a ogni cambio della lista."""

    def __init__(
        self,
        repo: AssignmentRepo,
        cache: AssignmentListCache,
        sink: NotificationSink,
        clock: Clock,
        window: timedelta = DEFAULT_WINDOW,
    ):
        self.repo = repo
        self.cache = cache
        self.sink = sink
        self.clock = clock
        self.window = window

    async def run(self, owner: str) -> ReminderCheckResult:
        permission = self.sink.probe()
        if permission is not Capability.GRANTED:
            return ReminderCheckResult(permission=permission, notified=False)

        assignments = await AssignmentService.list_assignments(owner, self.repo, self.cache)
        if not assignments:
            return ReminderCheckResult(permission=permission, notified=False)

        event, handle = await emit_reminder(assignments, self.clock.now(), self.sink, self.window)
        if event is None:
            return ReminderCheckResult(permission=permission, notified=False)

        logger.info("Reminder per %s: %d assignment in scadenza", owner, event.count)
        return ReminderCheckResult(permission=permission, notified=handle is not None, event=event)

    async def on_collection_changed(self, owner: str) -> None:
        await self.run(owner)
