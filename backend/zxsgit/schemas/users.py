"""Schemas for user administration."""
from typing import List, Literal, Optional

from pydantic import BaseModel, SecretStr

from zxsgit.models.user import User


class AdminUserUpdate(BaseModel):
    """Request schema for PUT /api/users/{id}; omitted fields stay unchanged."""
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Literal["admin", "member"]] = None
    password: Optional[SecretStr] = None

    def wire(self) -> dict:
        body = self.model_dump(exclude_none=True, exclude={"password"})
        if self.password:
            body["password"] = self.password.get_secret_value()
        return body


class SelfUpdate(BaseModel):
    """Profile edit by the signed-in user."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[SecretStr] = None


class UserSyncRequest(BaseModel):
    """Request schema for POST /api/users/sync."""
    users: List[User] = []
