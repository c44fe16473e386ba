"""
Reconciliation of remote and local record sets.

The remote store is authoritative: its records are inserted first and a
local record is kept only when neither its id nor its natural key (email for
users) is already present. Output is ordered by createdAt, ties keeping
insertion order.
"""
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from zxsgit.constants import ADMIN_EMAIL, UserRole
from zxsgit.models.user import User, seed_admin

T = TypeVar("T")


def _lower(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if isinstance(value, str) and value.strip() else None


def merge_records(
    primary: Sequence[T],
    secondary: Sequence[T],
    natural_key: Optional[Callable[[T], Optional[str]]] = None,
) -> List[T]:
    """
    Merge two record lists into one de-duplicated, ordered view.

    Args:
        primary: Authoritative records (remote), inserted first
        secondary: Cached records (local), inserted only when unseen
        natural_key: Secondary identity, compared case-insensitively

    Returns:
        Records sorted by createdAt ascending
    """
    by_id: Dict[str, T] = {}
    seen_keys: Dict[str, str] = {}
    anonymous = 0

    for record in list(primary) + list(secondary):
        record_id = getattr(record, "id", None)
        key = _lower(natural_key(record)) if natural_key else None

        if record_id and record_id in by_id:
            continue
        if key and key in seen_keys:
            continue

        if record_id:
            slot = record_id
        elif key:
            slot = f"~{key}"
        else:
            anonymous += 1
            slot = f"~anonymous-{anonymous}"

        by_id[slot] = record
        if key:
            seen_keys[key] = slot

    return sorted(by_id.values(), key=lambda r: getattr(r, "createdAt", 0) or 0)


def merge_users(remote: Sequence[User], local: Sequence[User]) -> List[User]:
    """Merge users by id and email; one record per email leaves one administrator."""
    merged = merge_records(remote, local, natural_key=lambda u: u.email)
    return [
        u.model_copy(update={"role": UserRole.ADMIN}) if u.is_protected_admin and not u.is_admin else u
        for u in merged
    ]


def dedupe_users(users: Sequence[User]) -> List[User]:
    """Collapse duplicate ids and emails in a single list."""
    return merge_users(users, [])


def upsert_users(existing: Sequence[User], incoming: Sequence[User]) -> List[User]:
    """
    Bulk upsert of cached users into the stored user list.

    An incoming record matching a stored one by email (or by id) overlays the
    fields it carries onto the stored record, which keeps its id. Unmatched
    records are appended. The administrator stays an administrator at its
    address, and is seeded when missing.

    Args:
        existing: Stored users
        incoming: Users exported from a client cache

    Returns:
        The merged user list in stored order
    """
    merged: Dict[str, User] = {}
    email_index: Dict[str, str] = {}

    for user in existing:
        if user.email in email_index or user.id in merged:
            continue
        merged[user.id] = user
        email_index[user.email] = user.id

    for user in incoming:
        target_id = email_index.get(user.email)
        if target_id is None and user.id in merged:
            target_id = user.id

        if target_id is None:
            merged[user.id] = user
            email_index[user.email] = user.id
            continue

        current = merged[target_id]
        update = user.model_dump(exclude_unset=True, exclude={"id"})
        if not update.get("passwordHash"):
            update.pop("passwordHash", None)
        new_email = update.get("email", current.email)
        if new_email != current.email and (new_email in email_index or current.is_protected_admin):
            update.pop("email")
        if current.is_protected_admin:
            update["role"] = UserRole.ADMIN

        updated = current.model_copy(update=update)
        if updated.email != current.email:
            del email_index[current.email]
            email_index[updated.email] = target_id
        merged[target_id] = updated

    if ADMIN_EMAIL not in email_index:
        admin = seed_admin()
        merged[admin.id] = admin

    return list(merged.values())
