from fastapi import Request
from app.core.clock import Clock
from app.database.assignment_repo import AssignmentRepo
from app.services.list_cache import AssignmentListCache
from app.services.publisher_service import NotificationSink
from app.services.reminders import ReminderDispatcher

def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} non inizializzato")
    return value

def get_repository(request: Request) -> AssignmentRepo:
    return _state(request, "assignment_repo")

def get_cache(request: Request) -> AssignmentListCache:
    return _state(request, "assignment_cache")

def get_notifier(request: Request) -> NotificationSink:
    return _state(request, "notifier")

def get_clock(request: Request) -> Clock:
    return _state(request, "clock")

def get_dispatcher(request: Request) -> ReminderDispatcher:
    return _state(request, "reminder_dispatcher")
