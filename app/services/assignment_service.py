import logging
import uuid
from datetime import datetime, timezone, tzinfo
from typing import List, Optional

from app.core.clock import ensure_aware
from app.core.errors import NotFoundError, ValidationError
from app.database.assignment_repo import AssignmentRepo
from app.schemas.assignment import Assignment, AssignmentCreate
from app.services.list_cache import AssignmentListCache

logger = logging.getLogger("tasktrack.assignments")


def create_assignment_id() -> str:
    return uuid.uuid4().hex


def _validate(data: AssignmentCreate) -> AssignmentCreate:
    name = (data.name or "").strip()
    class_name = (data.class_name or "").strip()
    if not name:
        raise ValidationError("Assignment name is required")
    if not class_name:
        raise ValidationError("Class is required")
    if data.due_at is None:
        raise ValidationError("Due date is required")
    return AssignmentCreate(name=name, class_name=class_name, due_at=data.due_at)


class AssignmentService:

    @staticmethod
    async def list_assignments(
        owner: str,
        repo: AssignmentRepo,
        cache: AssignmentListCache,
    ) -> List[Assignment]:
        cached = cache.get(owner)
        if cached is not None:
            return cached

        gen = cache.generation(owner)
        items = await repo.list_for_owner(owner)
        # lo store ordina già, ma l'ordine è parte del contratto
        items = sorted(items, key=lambda a: a.due_at)
        cache.put(owner, gen, items)
        return list(items)

    @staticmethod
    async def create_assignment(
        owner: str,
        data: AssignmentCreate,
        repo: AssignmentRepo,
        cache: AssignmentListCache,
        tz: Optional[tzinfo] = None,
    ) -> Assignment:
        clean = _validate(data)

        now = datetime.now(timezone.utc)
        assignment = Assignment(
            id=create_assignment_id(),
            owner=str(owner),
            name=clean.name,
            class_name=clean.class_name,
            due_at=ensure_aware(clean.due_at, tz),
            completed=False,
            created_at=now,
            updated_at=now,
        )

        saved = await repo.create(assignment)
        logger.info("Assignment %s creato per %s", saved.id, owner)
        await cache.invalidate(owner)
        return saved

    @staticmethod
    async def set_completed(
        owner: str,
        assignment_id: str,
        completed: bool,
        repo: AssignmentRepo,
        cache: AssignmentListCache,
    ) -> Assignment:
        updated = await repo.set_completed(owner, assignment_id, completed)
        if updated is None:
            raise NotFoundError(assignment_id)
        logger.info("Assignment %s completed=%s", assignment_id, completed)
        await cache.invalidate(owner)
        return updated

    @staticmethod
    async def delete_assignment(
        owner: str,
        assignment_id: str,
        repo: AssignmentRepo,
        cache: AssignmentListCache,
    ) -> None:
        deleted = await repo.delete(owner, assignment_id)
        if not deleted:
            raise NotFoundError(assignment_id)
        logger.info("Assignment %s cancellato", assignment_id)
        await cache.invalidate(owner)
