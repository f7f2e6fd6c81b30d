# app/database/mongo_assignment.py
import functools
import logging
from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from app.core.errors import StoreUnavailableError
from app.database.assignment_repo import AssignmentRepo
from app.schemas.assignment import Assignment

logger = logging.getLogger("tasktrack.store")


def _store_call(fn):
    # ogni errore di trasporto/auth diventa StoreUnavailableError
    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except PyMongoError as e:
            logger.error("Store call %s failed: %s", fn.__name__, e)
            raise StoreUnavailableError(str(e)) from e
    return wrapper


class MongoAssignmentRepository(AssignmentRepo):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["assignments"]

    def _from_doc(self, d: dict) -> Assignment:
        base = {k: v for k, v in d.items() if k not in {"_id"}}
        # pymongo senza tz_aware restituisce datetime naive in UTC
        for key in ("due_at", "created_at", "updated_at"):
            value = base.get(key)
            if isinstance(value, datetime) and value.tzinfo is None:
                base[key] = value.replace(tzinfo=timezone.utc)
        return Assignment(**base)

    def _to_doc_from_model(self, a: Assignment) -> dict:
        doc = a.model_dump()
        now = datetime.now(timezone.utc)
        doc["created_at"] = now
        doc["updated_at"] = now
        doc.setdefault("completed", False)
        return doc

    @_store_call
    async def list_for_owner(self, owner: str) -> List[Assignment]:
        cursor = self.col.find({"owner": str(owner)}).sort("due_at", ASCENDING)
        docs: List[dict] = [d async for d in cursor]
        return [self._from_doc(d) for d in docs]

    @_store_call
    async def create(self, assignment: Assignment) -> Assignment:
        doc = self._to_doc_from_model(assignment)
        await self.col.insert_one(doc)
        return self._from_doc(doc)

    @_store_call
    async def set_completed(self, owner: str, assignment_id: str, completed: bool) -> Optional[Assignment]:
        key = {"id": str(assignment_id), "owner": str(owner)}
        # updated_at cambia solo se cambia davvero il flag
        d = await self.col.find_one_and_update(
            {**key, "completed": {"$ne": completed}},
            {"$set": {"completed": completed, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        if d is None:
            d = await self.col.find_one(key)
        return self._from_doc(d) if d else None

    @_store_call
    async def delete(self, owner: str, assignment_id: str) -> bool:
        res = await self.col.delete_one({"id": str(assignment_id), "owner": str(owner)})
        return res.deleted_count > 0

    @_store_call
    async def ensure_indexes(self) -> None:
        await self.col.create_index("id", unique=True)
        await self.col.create_index([("owner", ASCENDING), ("due_at", ASCENDING)])
