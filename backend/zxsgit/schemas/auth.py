"""Schemas for registration and sign-in."""
from typing import Optional

from pydantic import BaseModel, Field, SecretStr


class RegisterRequest(BaseModel):
    """Request schema for /api/register (confirm is checked client-side only)."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[SecretStr] = None
    confirm: Optional[SecretStr] = Field(None, exclude=True)

    def wire(self) -> dict:
        """Body sent to the REST service."""
        return {
            "name": self.name,
            "email": self.email,
            "password": self.password.get_secret_value() if self.password else None,
        }


class LoginRequest(BaseModel):
    """Request schema for /api/login."""
    email: Optional[str] = None
    password: Optional[SecretStr] = None

    def wire(self) -> dict:
        """Body sent to the REST service."""
        return {
            "email": self.email,
            "password": self.password.get_secret_value() if self.password else None,
        }
