"""Registration and sign-in API endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from zxsgit.constants import UserRole
from zxsgit.database import JsonDocumentStore, get_store
from zxsgit.models import Session, User
from zxsgit.utils.exceptions import (
    authentication_error,
    conflict_error,
    handle_storage_error,
    not_found_error,
    validation_error,
)
from zxsgit.utils.hashing import hash_password, verify_password
from zxsgit.utils.logger import logger

router = APIRouter(prefix="/api", tags=["auth"])


class RegisterBody(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginBody(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/register")
async def register(
    body: RegisterBody,
    store: JsonDocumentStore = Depends(get_store),
) -> dict:
    """
    Create a member account.

    Args:
        body: Name, email and password
        store: Document store

    Returns:
        Envelope with the new session and the public user record
    """
    if not (body.name or "").strip() or not (body.email or "").strip() or not (body.password or "").strip():
        raise validation_error("All fields are required")

    try:
        with store.users() as users:
            email = body.email.strip().lower()
            if any(u.email == email for u in users):
                raise conflict_error("Email already registered")
            user = User(
                name=body.name.strip(),
                email=email,
                passwordHash=hash_password(body.password),
                role=UserRole.MEMBER,
            )
            users.append(user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Register error for {body.email}: {e}", exc_info=True)
        raise handle_storage_error(e, "register")

    logger.info(f"Registered {user.email}")
    return {
        "ok": True,
        "message": "Account created",
        "session": Session.for_user(user).model_dump(),
        "user": user.public(),
    }


@router.post("/login")
async def login(
    body: LoginBody,
    store: JsonDocumentStore = Depends(get_store),
) -> dict:
    """Check credentials and issue a session."""
    if not (body.email or "").strip() or not (body.password or "").strip():
        raise validation_error("Email and password required")

    email = body.email.strip().lower()
    user = next((u for u in store.load_users() if u.email == email), None)
    if user is None:
        raise not_found_error("User")
    if not verify_password(body.password, user.passwordHash or ""):
        raise authentication_error("Invalid credentials")

    return {"ok": True, "message": "Signed in", "session": Session.for_user(user).model_dump()}
