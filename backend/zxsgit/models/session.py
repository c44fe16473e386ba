"""Authenticated session record."""
from pydantic import BaseModel, Field

from zxsgit.constants import UserRole
from zxsgit.models.user import User
from zxsgit.utils.hashing import generate_token
from zxsgit.utils.validation import now_ms


class Session(BaseModel):
    """Signed-in identity; replaced on every login, register and self-update."""
    name: str
    email: str
    role: str = UserRole.MEMBER
    token: str = Field(default_factory=generate_token)
    signedInAt: int = Field(default_factory=now_ms)

    @classmethod
    def for_user(cls, user: User) -> "Session":
        """Open a fresh session for a user record."""
        return cls(name=user.name, email=user.email, role=user.role)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_edit(self, owner_email: str) -> bool:
        """Admins edit anything; others only what they own."""
        return self.is_admin or (owner_email or "").lower() == self.email.lower()
