from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class AssignmentCreate(BaseModel):
    name: str
    class_name: str
    due_at: Optional[datetime] = None

    @field_validator("name", "class_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        # solo trim: il controllo "non vuoto" lo fa il service, prima dello store
        return v.strip()


class AssignmentUpdate(BaseModel):
    completed: bool


class Assignment(BaseModel):
    id: str
    owner: str
    name: str
    class_name: str
    due_at: datetime
    completed: bool = False
    created_at: datetime
    updated_at: datetime


class AssignmentView(Assignment):
    """Assignment annotato per la visualizzazione."""
    urgency: str
    label: str
    style: str
    due_display: str


class AssignmentBoard(BaseModel):
    pending: List[AssignmentView] = Field(default_factory=list)
    completed: List[AssignmentView] = Field(default_factory=list)
    pending_count: int = 0
    completed_count: int = 0


class AssignmentResult(BaseModel):
    """Esito di una mutazione: messaggio per l'utente più il record (se esiste ancora)."""
    title: str
    description: str
    assignment: Optional[Assignment] = None
