from datetime import datetime
from typing import Iterable, List

from app.schemas.assignment import Assignment, AssignmentBoard, AssignmentView
from app.services.urgency import classify


def format_due(due_at: datetime, now: datetime) -> str:
    """Es. "Wednesday, January 10, 2024 • 6:00 PM", nella timezone di `now`."""
    local = due_at.astimezone(now.tzinfo)
    hour = local.hour % 12 or 12
    return f"{local:%A, %B} {local.day}, {local.year} • {hour}:{local:%M %p}"


def annotate(assignment: Assignment, now: datetime) -> AssignmentView:
    info = classify(assignment.due_at, assignment.completed, now)
    return AssignmentView(
        **assignment.model_dump(),
        urgency=info.category.value,
        label=info.label,
        style=info.style,
        due_display=format_due(assignment.due_at, now),
    )


def annotate_all(assignments: Iterable[Assignment], now: datetime) -> List[AssignmentView]:
    return [annotate(a, now) for a in assignments]


def build_board(assignments: Iterable[Assignment], now: datetime) -> AssignmentBoard:
    """Divide in pending/completed mantenendo l'ordine per due_at."""
    views = annotate_all(assignments, now)
    pending = [v for v in views if not v.completed]
    completed = [v for v in views if v.completed]
    return AssignmentBoard(
        pending=pending,
        completed=completed,
        pending_count=len(pending),
        completed_count=len(completed),
    )
