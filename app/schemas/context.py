from pydantic import BaseModel


class UserContext(BaseModel):
    user_id: str
    email: str | None = None
