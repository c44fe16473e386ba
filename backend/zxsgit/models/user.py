"""User record shared by the local cache and the REST service."""
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from zxsgit.constants import ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD, UserRole
from zxsgit.utils.hashing import generate_id, hash_password
from zxsgit.utils.validation import now_ms


class User(BaseModel):
    """Registered user."""
    id: str = Field(default_factory=generate_id)
    name: str = ""
    email: str
    passwordHash: Optional[str] = None
    role: Literal["admin", "member"] = UserRole.MEMBER
    createdAt: int = Field(default_factory=now_ms)

    class Config:
        extra = "allow"

    @model_validator(mode="before")
    @classmethod
    def collapse_password(cls, data: Any) -> Any:
        """Older local caches kept the plaintext password; keep only its digest."""
        if isinstance(data, dict) and "password" in data:
            data = dict(data)
            password = data.pop("password")
            if password and not data.get("passwordHash"):
                data["passwordHash"] = hash_password(password)
        return data

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_protected_admin(self) -> bool:
        """The seeded administrator cannot be deleted, demoted or re-addressed."""
        return self.email == ADMIN_EMAIL

    def public(self) -> Dict[str, Any]:
        """Wire view without the credential."""
        return self.model_dump(exclude={"passwordHash"})


def seed_admin() -> User:
    """Build the default administrator record."""
    return User(
        name=ADMIN_NAME,
        email=ADMIN_EMAIL,
        passwordHash=hash_password(ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
