from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional
from app.schemas.assignment import Assignment

class AssignmentRepo(ABC):
    @abstractmethod
    async def list_for_owner(self, owner: str) -> List[Assignment]:
        """Ritorna gli assignment dell'utente, ordinati per due_at crescente."""
        raise NotImplementedError

    @abstractmethod
    async def create(self, assignment: Assignment) -> Assignment:
        """Inserisce un assignment (id già generato nel service) e lo ritorna come salvato."""
        raise NotImplementedError

    @abstractmethod
    async def set_completed(self, owner: str, assignment_id: str, completed: bool) -> Optional[Assignment]:
        """Aggiorna il flag completed. Ritorna None se l'assignment non esiste per quell'utente."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, owner: str, assignment_id: str) -> bool:
        """Cancella un assignment. Ritorna True se qualcosa è stato cancellato."""
        raise NotImplementedError

    async def ensure_indexes(self) -> None:
        return None
