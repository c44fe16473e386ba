"""User administration API endpoints."""
from fastapi import APIRouter, Depends

from zxsgit.database import JsonDocumentStore, get_store
from zxsgit.schemas import AdminUserUpdate, UserSyncRequest
from zxsgit.services.merger import upsert_users
from zxsgit.utils.exceptions import conflict_error, not_found_error, validation_error
from zxsgit.utils.hashing import hash_password
from zxsgit.utils.logger import logger
from zxsgit.utils.validation import is_valid_email, normalize_email

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(store: JsonDocumentStore = Depends(get_store)) -> dict:
    """List users without their credentials."""
    return {"ok": True, "users": [u.public() for u in store.load_users()]}


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: AdminUserUpdate,
    store: JsonDocumentStore = Depends(get_store),
) -> dict:
    """
    Update a user's name, email, role or password.

    Args:
        user_id: Target user id
        body: Fields to change; omitted fields keep their value
        store: Document store

    Returns:
        Envelope with the updated public user record
    """
    with store.users() as users:
        index = next((i for i, u in enumerate(users) if u.id == user_id), None)
        if index is None:
            raise not_found_error("User")
        target = users[index]

        email = target.email
        if body.email and body.email.strip():
            if not is_valid_email(body.email):
                raise validation_error("Invalid email")
            email = normalize_email(body.email)
            if any(u.email == email and u.id != user_id for u in users):
                raise conflict_error("Email already in use")
        role = body.role or target.role
        if target.is_protected_admin and (email != target.email or role != target.role):
            raise conflict_error("Cannot change the admin account's email or role")

        update = {"name": (body.name or "").strip() or target.name, "email": email, "role": role}
        if body.password and body.password.get_secret_value():
            update["passwordHash"] = hash_password(body.password.get_secret_value())
        users[index] = target.model_copy(update=update)
        updated = users[index]

    logger.info(f"Updated user {user_id}")
    return {"ok": True, "message": "User updated", "user": updated.public()}


@router.delete("/{user_id}")
async def delete_user(user_id: str, store: JsonDocumentStore = Depends(get_store)) -> dict:
    """Delete a user; the seeded admin cannot be deleted."""
    with store.users() as users:
        target = next((u for u in users if u.id == user_id), None)
        if target is None:
            raise not_found_error("User")
        if target.is_protected_admin:
            raise conflict_error("Cannot delete admin account")
        users.remove(target)

    logger.info(f"Deleted user {user_id}")
    return {"ok": True, "message": "User deleted"}


@router.post("/sync")
async def sync_users(body: UserSyncRequest, store: JsonDocumentStore = Depends(get_store)) -> dict:
    """Upsert users exported from a client cache."""
    with store.users() as users:
        merged = upsert_users(users, body.users)
        users[:] = merged

    logger.info(f"Synced {len(body.users)} user(s); {len(merged)} stored")
    return {
        "ok": True,
        "message": f"Synced {len(body.users)} user(s)",
        "users": [u.public() for u in merged],
    }
