from datetime import datetime, timezone
from typing import Optional

import pytest

from app.core.clock import FixedClock
from app.core.errors import StoreUnavailableError
from app.schemas.assignment import Assignment
from app.services.list_cache import AssignmentListCache
from app.schemas.notification import Capability
from app.services.publisher_service import NotificationSink

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


# ------------------------- Fake repository -------------------------
class FakeAssignmentRepo:
    def __init__(self):
        self.items: dict[str, Assignment] = {}
        self.calls: list[str] = []
        self.unavailable = False

    def _check(self, name: str):
        self.calls.append(name)
        if self.unavailable:
            raise StoreUnavailableError("connection refused")

    async def list_for_owner(self, owner: str):
        self._check("list")
        items = [a for a in self.items.values() if a.owner == owner]
        return sorted(items, key=lambda a: a.due_at)

    async def create(self, assignment: Assignment):
        self._check("create")
        # NON genera ID: si aspetta id già valorizzato dal service
        if not assignment.id:
            raise ValueError("id must be set by the service")
        self.items[assignment.id] = assignment.model_copy()
        return assignment.model_copy()

    async def set_completed(self, owner: str, assignment_id: str, completed: bool):
        self._check("set_completed")
        a = self.items.get(assignment_id)
        if a is None or a.owner != owner:
            return None
        a.completed = completed
        return a.model_copy()

    async def delete(self, owner: str, assignment_id: str):
        self._check("delete")
        a = self.items.get(assignment_id)
        if a is None or a.owner != owner:
            return False
        del self.items[assignment_id]
        return True

    async def ensure_indexes(self):
        return None


class RecordingSink(NotificationSink):
    def __init__(self, enabled: bool = True):
        super().__init__(enabled=enabled)
        self.sent: list[tuple[str, str]] = []

    async def notify(self, title: str, body: str):
        if self.probe() is not Capability.GRANTED:
            return None
        self.sent.append((title, body))
        return self._message(title, body)


# ------------------------------- Fixtures -------------------------------------
@pytest.fixture
def repo():
    return FakeAssignmentRepo()

@pytest.fixture
def cache():
    return AssignmentListCache()

@pytest.fixture
def clock():
    return FixedClock(NOW)

@pytest.fixture
def sink():
    return RecordingSink()


def make_assignment(
    name: str = "Essay",
    due_at: datetime = NOW,
    completed: bool = False,
    owner: str = "u1",
    assignment_id: Optional[str] = None,
) -> Assignment:
    return Assignment(
        id=assignment_id or f"id-{name}",
        owner=owner,
        name=name,
        class_name="History",
        due_at=due_at,
        completed=completed,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def assignment_factory():
    return make_assignment
