"""Todo record."""
from pydantic import BaseModel, Field

from zxsgit.utils.hashing import generate_id
from zxsgit.utils.validation import now_ms


class Todo(BaseModel):
    """Todo item owned by the user who created it."""
    id: str = Field(default_factory=generate_id)
    text: str
    done: bool = False
    createdAt: int = Field(default_factory=now_ms)
    userEmail: str = ""
    userName: str = ""

    class Config:
        extra = "allow"
